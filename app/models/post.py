from enum import Enum
from typing import Any, Dict, List, Optional
from datetime import datetime
from sqlmodel import Field, SQLModel


class PostStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


# Older documents were written with "active"/"inactive"
_LEGACY_STATUS = {"active": PostStatus.PUBLISHED, "inactive": PostStatus.DRAFT}


class Post(SQLModel):
    """A blog post as stored in the Appwrite posts collection.

    The document id is the slug, so ``id`` and ``slug`` are normally equal.
    """

    id: str
    title: str
    slug: str
    content: str = ""  # HTML from the rich-text editor
    excerpt: str = ""
    category: str = ""
    tags: List[str] = Field(default_factory=list)
    status: PostStatus = PostStatus.DRAFT

    # Appwrite storage file id, not a URL
    featured_image: Optional[str] = None
    user_id: str = ""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Post":
        status = document.get("status") or PostStatus.DRAFT.value
        return cls(
            id=document["$id"],
            title=document.get("title") or "",
            slug=document.get("slug") or document["$id"],
            content=document.get("content") or "",
            excerpt=document.get("excerpt") or "",
            category=document.get("category") or "",
            tags=document.get("tags") or [],
            status=_LEGACY_STATUS.get(status, status),
            featured_image=document.get("featuredImage") or None,
            user_id=document.get("userID") or "",
            created_at=document.get("$createdAt"),
            updated_at=document.get("$updatedAt"),
        )


# Remote attribute names for the write models
_DOCUMENT_FIELDS = {
    "featured_image": "featuredImage",
    "user_id": "userID",
}


def _to_document(data: Dict[str, Any]) -> Dict[str, Any]:
    document = {}
    for key, value in data.items():
        if isinstance(value, Enum):
            value = value.value
        document[_DOCUMENT_FIELDS.get(key, key)] = value
    return document


class PostCreate(SQLModel):
    title: str
    slug: str
    content: str
    excerpt: str
    category: str = ""
    tags: List[str] = Field(default_factory=list)
    status: PostStatus = PostStatus.DRAFT
    featured_image: Optional[str] = None
    user_id: str

    def to_document(self) -> Dict[str, Any]:
        # The slug becomes the document id and is also kept as an attribute
        return _to_document(self.model_dump())


class PostUpdate(SQLModel):
    """Partial update. Only fields that were explicitly set are sent.

    There is no ``slug`` or ``user_id`` field: a post keeps its slug and author.
    """

    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[PostStatus] = None
    featured_image: Optional[str] = None

    def to_document(self) -> Dict[str, Any]:
        return _to_document(self.model_dump(exclude_unset=True))


class PostList(SQLModel):
    total: int = 0
    documents: List[Post] = Field(default_factory=list)
