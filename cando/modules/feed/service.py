import logging
from supabase import Client
from cando.modules.feed.schemas import (
    PostCreate, PostResponse, FeedPage, MediaUploadResponse,
    CommentCreate, BookmarkResponse, ShareResponse
)
from cando.modules.analytics.service import get_subscription_tier
from cando.config.settings import settings
from cando.core.errors import http_error_from_supabase, UNIQUE_VIOLATION
from cando.core.storage import StorageService, POST_MEDIA_BUCKET, epoch_ms, file_extension
from cando.core.validation import sanitize_input
from postgrest.exceptions import APIError
from typing import List, Optional
from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)

ALLOWED_MEDIA_PREFIXES = ("image/", "video/")

BOOKMARKED_POST_COLUMNS = """
    id, content, created_at, media_urls, media_types, user_id, company_id, category,
    profiles!posts_user_id_fkey(id, name, avatar_url),
    post_likes(user_id),
    post_comments(id),
    post_bookmarks!inner(user_id)
"""


def with_user_object(comment: dict) -> dict:
    """Nest the flat author columns returned by get_post_comments_threaded"""
    return {
        **comment,
        "user_object": {
            "id": comment.get("user_id"),
            "name": comment.get("user_name"),
            "avatar_url": comment.get("user_avatar_url")
        }
    }


class FeedService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_feed(self, user_id: str, page: int = 0, page_size: Optional[int] = None) -> FeedPage:
        """One page of the ranked feed; page is zero-based"""
        page_size = page_size or settings.feed_page_size
        try:
            result = self.supabase.rpc("get_feed_posts", {
                "p_user_id": user_id,
                "p_limit": page_size,
                "p_offset": page * page_size
            }).execute()
            posts = result.data or []
            return FeedPage(posts=posts, page=page, has_more=len(posts) == page_size)
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load feed")

    def create_post(self, post_data: PostCreate, user_id: str) -> PostResponse:
        """Create a post as the user or, when acting_as_company_id is set, as that company"""
        try:
            insert_data = {
                "content": post_data.content,
                "user_id": user_id,
                "author_subscription_tier": get_subscription_tier(self.supabase, user_id),
                "media_urls": post_data.media_urls,
                "media_types": post_data.media_types,
                "category": post_data.category
            }
            if post_data.acting_as_company_id:
                insert_data["company_id"] = post_data.acting_as_company_id

            result = self.supabase.table("posts").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create post")
            return PostResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to create post")

    async def upload_media(self, user_id: str, file: UploadFile, storage: StorageService) -> MediaUploadResponse:
        if not file.content_type or not file.content_type.startswith(ALLOWED_MEDIA_PREFIXES):
            raise HTTPException(status_code=400, detail="Only images and videos can be attached to posts")
        path = f"public/{user_id}_{epoch_ms()}.{file_extension(file.filename)}"
        await storage.upload_file(POST_MEDIA_BUCKET, path, file)
        return MediaUploadResponse(
            url=storage.get_public_url(POST_MEDIA_BUCKET, path),
            media_type=file.content_type
        )

    def delete_post(self, post_id: str, user_id: str) -> bool:
        try:
            result = self.supabase.table("posts")\
                .select("id, user_id")\
                .eq("id", post_id)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Post not found")
            if result.data[0]["user_id"] != user_id:
                raise HTTPException(status_code=403, detail="You can only delete your own posts")
            self.supabase.table("posts").delete().eq("id", post_id).execute()
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to delete post")

    def like_post(self, post_id: str, user_id: str) -> dict:
        try:
            result = self.supabase.table("post_likes")\
                .insert({"post_id": post_id, "user_id": user_id})\
                .execute()
            return result.data[0] if result.data else {"post_id": post_id, "user_id": user_id}
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise HTTPException(status_code=409, detail="You already liked this post")
            raise http_error_from_supabase(e, "Failed to like post")
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to like post")

    def unlike_post(self, post_id: str, user_id: str) -> bool:
        try:
            self.supabase.table("post_likes")\
                .delete()\
                .match({"post_id": post_id, "user_id": user_id})\
                .execute()
            return True
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to unlike post")

    def get_comments(self, post_id: str) -> List[dict]:
        """Threaded comments in display order"""
        try:
            result = self.supabase.rpc("get_post_comments_threaded", {"p_post_id": post_id}).execute()
            return [with_user_object(comment) for comment in result.data or []]
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load comments")

    def add_comment(self, post_id: str, user_id: str, comment_data: CommentCreate) -> dict:
        content = sanitize_input(comment_data.content).strip()
        if not content:
            raise HTTPException(status_code=422, detail="Comment cannot be empty")
        try:
            insert_data = {"post_id": post_id, "user_id": user_id, "content": content}
            if comment_data.parent_comment_id:
                insert_data["parent_comment_id"] = comment_data.parent_comment_id
            result = self.supabase.table("post_comments").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add comment, no data returned.")
            comment = result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to add comment")

        try:
            profile = self.supabase.table("profiles")\
                .select("id, name, avatar_url")\
                .eq("id", comment["user_id"])\
                .limit(1)\
                .execute()
            user_object = profile.data[0] if profile.data else None
        except Exception as e:
            logger.warning(f"Comment {comment.get('id')} added, but failed to fetch author profile: {e}")
            user_object = None
        return {**comment, "user_object": user_object}

    def toggle_bookmark(self, post_id: str) -> BookmarkResponse:
        try:
            result = self.supabase.rpc("toggle_post_bookmark", {"p_post_id": post_id}).execute()
            data = result.data
            if isinstance(data, list):
                data = data[0] if data else {}
            data = data or {}
            return BookmarkResponse(
                post_id=post_id,
                is_bookmarked=bool(data.get("is_bookmarked")),
                bookmark_count=data.get("bookmark_count")
            )
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to update bookmark")

    def list_bookmarks(self, user_id: str, page: int = 1, page_size: Optional[int] = None) -> List[dict]:
        """Posts the user bookmarked, newest first; page is one-based"""
        page_size = page_size or settings.bookmarks_page_size
        offset = (page - 1) * page_size
        try:
            result = self.supabase.table("posts")\
                .select(BOOKMARKED_POST_COLUMNS)\
                .eq("post_bookmarks.user_id", user_id)\
                .order("created_at", desc=True)\
                .range(offset, offset + page_size - 1)\
                .execute()
            posts = []
            for post in result.data or []:
                profiles = post.get("profiles")
                if isinstance(profiles, list):
                    profiles = profiles[0] if profiles else None
                likes = post.pop("post_likes", None) or []
                posts.append({
                    **post,
                    "profiles": profiles,
                    "like_count": len(likes),
                    "is_liked": any(like.get("user_id") == user_id for like in likes),
                    "comment_count": len(post.pop("post_comments", None) or []),
                    "is_bookmarked": True
                })
            return posts
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load bookmarks")

    def _flag(self, table: str, column: str, target_id: str, user_id: str, reason: Optional[str]) -> dict:
        try:
            result = self.supabase.table(table).insert({
                column: target_id,
                "user_id": user_id,
                "reason": sanitize_input(reason).strip() or None
            }).execute()
            return result.data[0] if result.data else {column: target_id}
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise HTTPException(status_code=409, detail="You have already flagged this content.")
            raise http_error_from_supabase(e, "Failed to flag content")
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to flag content")

    def flag_post(self, post_id: str, user_id: str, reason: Optional[str]) -> dict:
        return self._flag("post_flags", "post_id", post_id, user_id, reason)

    def flag_comment(self, comment_id: str, user_id: str, reason: Optional[str]) -> dict:
        return self._flag("comment_flags", "comment_id", comment_id, user_id, reason)

    def share_link(self, post_id: str) -> ShareResponse:
        return ShareResponse(post_id=post_id, url=f"{settings.frontend_url}/feed?post={post_id}")

    def people_suggestions(self, user_id: str, limit: int = 3) -> List[dict]:
        try:
            result = self.supabase.rpc("get_pymk_suggestions", {
                "p_requesting_user_id": user_id,
                "p_limit": limit
            }).execute()
            return result.data or []
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load suggestions")

    def company_suggestions(self, user_id: str, limit: int = 3) -> List[dict]:
        """Suggested companies, each marked with whether the user already follows it"""
        try:
            result = self.supabase.rpc("get_cymk_suggestions", {
                "p_requesting_user_id": user_id,
                "p_limit": limit
            }).execute()
            suggestions = result.data or []
        except Exception as e:
            raise http_error_from_supabase(e, "Failed to load suggestions")

        annotated = []
        for suggestion in suggestions:
            company_id = suggestion.get("company_id") or suggestion.get("id")
            try:
                status = self.supabase.rpc("get_company_follow_status", {"p_company_id": company_id}).execute()
                is_followed = bool(status.data)
            except Exception as e:
                logger.warning(f"Follow status lookup failed for {company_id}: {e}")
                is_followed = False
            annotated.append({**suggestion, "is_followed": is_followed})
        return annotated
