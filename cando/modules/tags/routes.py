from fastapi import APIRouter
from cando.modules.tags.service import filter_tags, DEFAULT_MAX_TAGS
from typing import Literal, Optional

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("/{category}")
async def list_tags(
    category: Literal["industry", "capability", "region"],
    q: Optional[str] = None
):
    """Tag vocabulary for a category, optionally filtered by a search string"""
    return {
        "category": category,
        "tags": filter_tags(category, q),
        "max_tags": DEFAULT_MAX_TAGS
    }
