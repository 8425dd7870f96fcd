import re
from enum import Enum
from typing import Dict, List, Optional, Pattern, Tuple

from pydantic import BaseModel, Field

from app.models.user import SessionState


class Access(str, Enum):
    PUBLIC = "public"
    AUTH = "auth"      # logged-in users only
    GUEST = "guest"    # login/signup: bounce users who already have a session


class RouteMatch(BaseModel):
    name: str
    path: str
    params: Dict[str, str] = Field(default_factory=dict)
    redirect: Optional[str] = None
    status_code: int = 200


def _compile(pattern: str) -> Pattern:
    return re.compile("^" + re.sub(r":(\w+)", r"(?P<\1>[^/]+)", pattern) + "/?$")


# (name, pattern, access); first match wins
ROUTES: List[Tuple[str, str, Access]] = [
    ("home", "/", Access.PUBLIC),
    ("posts", "/posts", Access.PUBLIC),
    ("drafts", "/drafts", Access.AUTH),
    ("post", "/posts/:slug", Access.PUBLIC),
    ("post", "/post/:slug", Access.PUBLIC),
    ("about", "/about", Access.PUBLIC),
    ("contact", "/contact", Access.PUBLIC),
    ("add-post", "/add-post", Access.AUTH),
    ("edit-post", "/edit-post/:slug", Access.AUTH),
    ("login", "/login", Access.GUEST),
    ("signup", "/signup", Access.GUEST),
]

_COMPILED = [(name, _compile(pattern), access) for name, pattern, access in ROUTES]


def resolve_route(path: str, state: SessionState) -> RouteMatch:
    """Match a client path and apply the login guards."""
    path = path.split("?", 1)[0] or "/"
    for name, regex, access in _COMPILED:
        match = regex.match(path)
        if not match:
            continue
        if access == Access.AUTH and not state.is_authenticated:
            return RouteMatch(name=name, path=path, params=match.groupdict(), redirect="/login", status_code=302)
        if access == Access.GUEST and state.is_authenticated:
            return RouteMatch(name=name, path=path, params=match.groupdict(), redirect="/", status_code=302)
        return RouteMatch(name=name, path=path, params=match.groupdict())
    return RouteMatch(name="not-found", path=path, status_code=404)
