import logging
import re
from datetime import datetime, timezone
from typing import List, Optional, Union

logger = logging.getLogger(__name__)

_SLUG_STRIP = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_DASHES = re.compile(r"-+")
_POST_URL = re.compile(r"/posts?/(.+)")

DateLike = Union[str, datetime, None]


def generate_slug(title: str) -> str:
    """Convert a title into a URL-friendly slug."""
    slug = _SLUG_STRIP.sub("", title.lower())
    slug = _WHITESPACE.sub("-", slug)
    return _DASHES.sub("-", slug).strip()


def process_tags(tags: str) -> List[str]:
    """Split a comma-separated tag string into clean tags."""
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


def is_post_author(post_user_id: str, current_user_id: Optional[str] = None) -> bool:
    return bool(current_user_id) and post_user_id == current_user_id


def parse_datetime(value: DateLike) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def format_date(value: DateLike, compact: bool = False) -> str:
    """Format a date like "January 5, 2025" ("Jan 5, 2025" when compact)."""
    if value is None or value == "":
        logger.warning("format_date: empty date provided")
        return "Unknown date"
    date = parse_datetime(value)
    if date is None:
        logger.warning("format_date: invalid date %r", value)
        return "Invalid date"
    month = date.strftime("%b" if compact else "%B")
    return f"{month} {date.day}, {date.year}"


def format_date_relative(value: DateLike, now: Optional[datetime] = None) -> str:
    if value is None or value == "":
        return "Unknown time"
    date = parse_datetime(value)
    if date is None:
        return "Invalid date"

    seconds = int(((now or datetime.now(timezone.utc)) - date).total_seconds())
    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{seconds // 60} minutes ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    if seconds < 2592000:
        return f"{seconds // 86400} days ago"
    if seconds < 31536000:
        return f"{seconds // 2592000} months ago"
    return f"{seconds // 31536000} years ago"


# URL helpers shared by the router contract and form controllers

def create_post_url(slug: str) -> str:
    return f"/posts/{slug}"


def create_post_url_alt(slug: str) -> str:
    return f"/post/{slug}"


def extract_slug_from_url(url: str) -> Optional[str]:
    match = _POST_URL.search(url)
    return match.group(1) if match else None


def is_post_url(url: str) -> bool:
    return _POST_URL.search(url) is not None


def normalize_post_url(url: str) -> str:
    if url.startswith("/post/"):
        return url.replace("/post/", "/posts/", 1)
    return url
