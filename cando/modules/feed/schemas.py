from pydantic import BaseModel, Field, model_validator
from typing import Any, Dict, List, Optional
from datetime import datetime

from cando.core.validation import sanitize_input

MAX_MEDIA_PER_POST = 4


class PostCreate(BaseModel):
    content: str = Field(default="", max_length=5000)
    category: str = Field(default="general", max_length=50)
    media_urls: List[str] = Field(default_factory=list, max_length=MAX_MEDIA_PER_POST)
    media_types: List[str] = Field(default_factory=list, max_length=MAX_MEDIA_PER_POST)
    acting_as_company_id: Optional[str] = None

    @model_validator(mode="after")
    def check_content_or_media(self):
        self.content = sanitize_input(self.content).strip()
        if not self.content and not self.media_urls:
            raise ValueError("A post needs text or media")
        if len(self.media_types) != len(self.media_urls):
            raise ValueError("media_types must match media_urls")
        return self


class PostResponse(BaseModel):
    id: str
    user_id: str
    company_id: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    media_urls: Optional[List[str]] = None
    media_types: Optional[List[str]] = None
    author_subscription_tier: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FeedPage(BaseModel):
    posts: List[Dict[str, Any]]
    page: int
    has_more: bool


class MediaUploadResponse(BaseModel):
    url: str
    media_type: str


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=2000)
    parent_comment_id: Optional[str] = None


class FlagCreate(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=1000)


class BookmarkResponse(BaseModel):
    post_id: str
    is_bookmarked: bool
    bookmark_count: Optional[int] = None


class ShareResponse(BaseModel):
    post_id: str
    url: str
