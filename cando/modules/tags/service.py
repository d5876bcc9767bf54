"""
Tag selection rules shared by company create/update and the tag picker endpoint.

All helpers return new lists; the caller's selection is never mutated.
"""

from typing import Iterable, List, Optional

from cando.modules.tags.catalog import TAG_CATALOG

DEFAULT_MAX_TAGS = 5


def get_tags(category: str) -> List[str]:
    if category not in TAG_CATALOG:
        raise ValueError(f"Unknown tag category: {category}")
    return list(TAG_CATALOG[category])


def filter_tags(category: str, query: Optional[str] = None) -> List[str]:
    """Case-insensitive substring match over a category's vocabulary"""
    tags = get_tags(category)
    if not query:
        return tags
    needle = query.lower()
    return [tag for tag in tags if needle in tag.lower()]


def add_tag(selected: List[str], tag: str, max_tags: int = DEFAULT_MAX_TAGS) -> List[str]:
    """Select tag unless it is already selected or the selection is full"""
    if tag in selected or len(selected) >= max_tags:
        return list(selected)
    return [*selected, tag]


def remove_tag(selected: List[str], tag: str) -> List[str]:
    return [t for t in selected if t != tag]


def validate_tags(category: str, tags: Optional[Iterable[str]], max_tags: int = DEFAULT_MAX_TAGS) -> List[str]:
    """Dedupe (keeping order) and check against the vocabulary; raises ValueError"""
    if not tags:
        return []
    vocabulary = set(get_tags(category))
    cleaned: List[str] = []
    for tag in tags:
        if tag not in vocabulary:
            raise ValueError(f"Unknown {category} tag: {tag}")
        if tag not in cleaned:
            cleaned.append(tag)
    if len(cleaned) > max_tags:
        raise ValueError(f"At most {max_tags} {category} tags may be selected")
    return cleaned
