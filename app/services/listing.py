"""Client-side filtering and sorting of an already fetched post list.

Everything here is pure: the input sequence is never modified and the same
arguments always give the same result, so filtering an already filtered
list changes nothing.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from app.core.constants import FEATURED_POST_COUNT, RECENT_POST_COUNT
from app.models.post import Post

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class SortKey(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    TITLE_ASC = "title-asc"
    TITLE_DESC = "title-desc"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortKey":
        if value == "title":
            return cls.TITLE_ASC
        try:
            return cls(value)
        except ValueError:
            return cls.NEWEST


class FilterState(BaseModel):
    search_term: str = ""
    category: str = ""
    sort_key: SortKey = SortKey.NEWEST

    @classmethod
    def from_query_params(cls, params: Mapping[str, str]) -> "FilterState":
        return cls(
            search_term=(params.get("search") or "").strip(),
            category=params.get("category") or "",
            sort_key=SortKey.parse(params.get("sort")),
        )

    def to_query_params(self) -> Dict[str, str]:
        params = {}
        if self.search_term:
            params["search"] = self.search_term
        if self.category:
            params["category"] = self.category
        if self.sort_key != SortKey.NEWEST:
            params["sort"] = self.sort_key.value
        return params

    @property
    def is_filtered(self) -> bool:
        return bool(self.search_term or self.category)

    def apply(self, posts: Sequence[Post]) -> List[Post]:
        return filter_and_sort(posts, self.search_term, self.category, self.sort_key)


def matches_search(post: Post, search_term: str) -> bool:
    if not search_term:
        return True
    needle = search_term.lower()
    return (
        needle in post.title.lower()
        or needle in post.excerpt.lower()
        or any(needle in tag.lower() for tag in post.tags)
    )


def matches_category(post: Post, category: str) -> bool:
    return not category or post.category == category


def _created(post: Post) -> datetime:
    created = post.created_at
    if created is None:
        return _EPOCH
    return created if created.tzinfo else created.replace(tzinfo=timezone.utc)


def filter_and_sort(posts: Sequence[Post], search_term: str = "", category: str = "",
                    sort_key=SortKey.NEWEST) -> List[Post]:
    key = SortKey.parse(sort_key.value if isinstance(sort_key, SortKey) else sort_key)
    selected = [p for p in posts if matches_category(p, category) and matches_search(p, search_term)]

    # sorted() is stable, and reverse=True keeps equal keys in input order too
    if key == SortKey.NEWEST:
        return sorted(selected, key=_created, reverse=True)
    if key == SortKey.OLDEST:
        return sorted(selected, key=_created)
    if key == SortKey.TITLE_ASC:
        return sorted(selected, key=lambda p: p.title)
    return sorted(selected, key=lambda p: p.title, reverse=True)


def home_sections(posts: Sequence[Post]) -> Tuple[List[Post], List[Post]]:
    """Split published posts into the home page's featured and recent rows."""
    featured = list(posts[:FEATURED_POST_COUNT])
    recent = list(posts[FEATURED_POST_COUNT:FEATURED_POST_COUNT + RECENT_POST_COUNT])
    return featured, recent
