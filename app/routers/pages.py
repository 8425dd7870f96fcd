from typing import List, Optional, Dict, Any
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.core.config import settings
from app.core.constants import CATEGORY_OPTIONS, SORT_OPTIONS, STATUS_OPTIONS
from app.core.routes import RouteMatch, resolve_route
from app.models.user import User
from app.routers.deps import get_content_service, get_current_user_optional, get_session_context, raise_for_form
from app.routers.posts import PostView, to_view
from app.services.content import ContentService
from app.services.forms import ContactFormController
from app.services.listing import home_sections
from app.services.session import SessionContext

router = APIRouter()


class HomepageData(BaseModel):
    featured_posts: List[PostView]
    recent_posts: List[PostView]


class ContactIn(BaseModel):
    name: str = ""
    email: str = ""
    subject: str = ""
    message: str = ""


class EditorConfig(BaseModel):
    configured: bool
    api_key: Optional[str] = None
    setup_message: Optional[str] = None


@router.get("/home", response_model=HomepageData)
def get_homepage_data(
    content: ContentService = Depends(get_content_service),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    """Featured posts (first 3) and recent posts (next 6), newest first."""
    featured, recent = home_sections(content.get_posts().documents)
    return HomepageData(
        featured_posts=[to_view(post, content, current_user) for post in featured],
        recent_posts=[to_view(post, content, current_user) for post in recent],
    )


@router.get("/about")
def get_about():
    return {
        "title": "About Quill",
        "description": "A place to share stories, tutorials and ideas. Anyone can read; "
                       "sign up to write posts, keep drafts and publish when ready.",
        "categories": CATEGORY_OPTIONS,
    }


@router.get("/options")
def get_options() -> Dict[str, Any]:
    return {
        "categories": CATEGORY_OPTIONS,
        "statuses": STATUS_OPTIONS,
        "sort": SORT_OPTIONS,
    }


@router.post("/contact")
def submit_contact(data: ContactIn):
    result = raise_for_form(ContactFormController().submit(data.model_dump()))
    return result.data


@router.get("/editor", response_model=EditorConfig)
def get_editor_config():
    """Rich-text editor settings; a setup prompt replaces the key when it is missing."""
    if settings.editor_configured:
        return EditorConfig(configured=True, api_key=settings.TINYMCE_API_KEY)
    return EditorConfig(
        configured=False,
        setup_message="The rich-text editor needs an API key. Add TINYMCE_API_KEY to your .env file "
                      "and restart the server. Get a free key at https://www.tiny.cloud/get-tiny/",
    )


@router.get("/setup")
def get_setup_status():
    missing = settings.missing_settings()
    return {
        "backend_configured": not missing,
        "missing": missing,
        "editor_configured": settings.editor_configured,
    }


@router.get("/resolve", response_model=RouteMatch)
def resolve(path: str = "/", ctx: SessionContext = Depends(get_session_context)):
    """Which page a client path shows, after the login guards."""
    return resolve_route(path, ctx.resolve())
