from fastapi import APIRouter, BackgroundTasks, Depends, File, Query, UploadFile
from cando.database.supabase_client import get_user_supabase
from cando.modules.feed.schemas import (
    PostCreate, PostResponse, FeedPage, MediaUploadResponse,
    CommentCreate, FlagCreate, BookmarkResponse, ShareResponse
)
from cando.modules.feed.service import FeedService
from cando.modules.analytics.service import track_event
from cando.core.dependencies import get_current_user_id, check_company_admin, get_storage_service
from cando.core.storage import StorageService
from supabase import Client
from typing import Dict, List

router = APIRouter(tags=["feed"])


def get_feed_service(supabase: Client = Depends(get_user_supabase)) -> FeedService:
    return FeedService(supabase)


@router.get("/feed", response_model=FeedPage)
async def get_feed(
    page: int = Query(default=0, ge=0),
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service)
):
    """Ranked feed, zero-based pages"""
    return service.get_feed(current_user["id"], page)


@router.get("/feed/suggestions/people", response_model=List[dict])
async def people_you_may_know(
    limit: int = Query(default=3, ge=1, le=20),
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service)
):
    return service.people_suggestions(current_user["id"], limit)


@router.get("/feed/suggestions/companies", response_model=List[dict])
async def companies_you_may_know(
    limit: int = Query(default=3, ge=1, le=20),
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service)
):
    return service.company_suggestions(current_user["id"], limit)


@router.post("/posts", response_model=PostResponse, status_code=201)
async def create_post(
    post_data: PostCreate,
    background_tasks: BackgroundTasks,
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Publish a post (optionally as a company the caller administers)"""
    if post_data.acting_as_company_id:
        check_company_admin(post_data.acting_as_company_id, current_user, supabase)
    post = service.create_post(post_data, current_user["id"])
    background_tasks.add_task(track_event, supabase, current_user["id"], "post_create", {
        "post_id": post.id,
        "has_media": bool(post_data.media_urls),
        "category": post_data.category
    })
    return post


@router.post("/posts/media", response_model=MediaUploadResponse, status_code=201)
async def upload_post_media(
    file: UploadFile = File(...),
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service),
    storage: StorageService = Depends(get_storage_service)
):
    """Upload an image or video to attach to a post"""
    return await service.upload_media(current_user["id"], file, storage)


@router.delete("/posts/{post_id}", status_code=204)
async def delete_post(
    post_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service)
):
    """Delete one of the caller's posts"""
    service.delete_post(post_id, current_user["id"])
    return None


@router.post("/posts/{post_id}/like", status_code=201)
async def like_post(
    post_id: str,
    background_tasks: BackgroundTasks,
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service),
    supabase: Client = Depends(get_user_supabase)
):
    like = service.like_post(post_id, current_user["id"])
    background_tasks.add_task(track_event, supabase, current_user["id"], "post_like", {"post_id": post_id})
    return like


@router.delete("/posts/{post_id}/like", status_code=204)
async def unlike_post(
    post_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service)
):
    service.unlike_post(post_id, current_user["id"])
    return None


@router.get("/posts/{post_id}/comments", response_model=List[dict])
async def list_comments(
    post_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service)
):
    """Threaded comments of a post"""
    return service.get_comments(post_id)


@router.post("/posts/{post_id}/comments", status_code=201)
async def add_comment(
    post_id: str,
    comment_data: CommentCreate,
    background_tasks: BackgroundTasks,
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Comment on a post or reply to a comment"""
    comment = service.add_comment(post_id, current_user["id"], comment_data)
    background_tasks.add_task(track_event, supabase, current_user["id"], "post_comment", {
        "post_id": post_id,
        "is_reply": bool(comment_data.parent_comment_id)
    })
    return comment


@router.post("/posts/{post_id}/bookmark", response_model=BookmarkResponse)
async def toggle_bookmark(
    post_id: str,
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service)
):
    """Bookmark or un-bookmark a post"""
    return service.toggle_bookmark(post_id)


@router.get("/bookmarks", response_model=List[dict])
async def list_bookmarks(
    page: int = Query(default=1, ge=1),
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service)
):
    """The caller's bookmarked posts"""
    return service.list_bookmarks(current_user["id"], page)


@router.post("/posts/{post_id}/flag", status_code=201)
async def flag_post(
    post_id: str,
    flag_data: FlagCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service)
):
    """Report a post to the moderators"""
    return service.flag_post(post_id, current_user["id"], flag_data.reason)


@router.post("/comments/{comment_id}/flag", status_code=201)
async def flag_comment(
    comment_id: str,
    flag_data: FlagCreate,
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service)
):
    """Report a comment to the moderators"""
    return service.flag_comment(comment_id, current_user["id"], flag_data.reason)


@router.post("/posts/{post_id}/share", response_model=ShareResponse)
async def share_post(
    post_id: str,
    background_tasks: BackgroundTasks,
    current_user: Dict = Depends(get_current_user_id),
    service: FeedService = Depends(get_feed_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Link to a post for sharing"""
    background_tasks.add_task(track_event, supabase, current_user["id"], "post_share", {"post_id": post_id})
    return service.share_link(post_id)
