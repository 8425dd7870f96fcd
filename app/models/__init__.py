from app.models.user import User, SessionState
from app.models.post import Post, PostCreate, PostUpdate, PostList, PostStatus

__all__ = [
    "User",
    "SessionState",
    "Post",
    "PostCreate",
    "PostUpdate",
    "PostList",
    "PostStatus",
]
