import re
from datetime import datetime, timezone
from typing import Optional, Union

from pydantic import ValidationError

UUID_V4_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE
)


# Characters with meaning inside a PostgREST or=(...) filter, plus LIKE wildcards
FILTER_RESERVED_PATTERN = re.compile(r'[,.:()"\\%*_]')


def sanitize_input(text: Optional[str]) -> str:
    """Strip angle brackets so stored text can never open an HTML tag."""
    if not text:
        return ""
    return re.sub(r"[<>]", "", text)


def search_term(text: Optional[str]) -> str:
    """Free text reduced to words that are safe to embed in an ilike or_() filter"""
    if not text:
        return ""
    return " ".join(FILTER_RESERVED_PATTERN.sub(" ", text).split())


def is_valid_uuid(value: Optional[str]) -> bool:
    return bool(value) and bool(UUID_V4_PATTERN.match(value))


def format_validation_error(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        path = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{path}: {err.get('msg', '')}")
    return ", ".join(parts)


def parse_timestamp(value: Optional[Union[str, datetime]]) -> Optional[datetime]:
    """Parse a PostgREST timestamp; naive values are taken as UTC"""
    if not value:
        return None
    parsed = value if isinstance(value, datetime) else datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
