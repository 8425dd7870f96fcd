from typing import Any, Dict, Optional
from sqlmodel import SQLModel
from datetime import datetime


class User(SQLModel):
    id: str
    name: str = ""
    email: str

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_account(cls, account: Dict[str, Any]) -> "User":
        return cls(
            id=account["$id"],
            name=account.get("name") or "",
            email=account.get("email") or "",
            created_at=account.get("$createdAt"),
            updated_at=account.get("$updatedAt"),
        )


class SessionState(SQLModel):
    is_authenticated: bool = False
    user: Optional[User] = None

    @classmethod
    def anonymous(cls) -> "SessionState":
        return cls()

    @classmethod
    def for_user(cls, user: Optional[User]) -> "SessionState":
        if user is None:
            return cls()
        return cls(is_authenticated=True, user=user)
