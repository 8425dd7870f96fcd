from typing import Dict, List, Optional

from appwrite.query import Query
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from app.core.constants import DEFAULT_AUTHOR_NAME
from app.core.utils import is_post_author
from app.models.post import Post, PostStatus
from app.models.user import User
from app.routers.deps import (
    get_content_service,
    get_current_user,
    get_current_user_optional,
    raise_for_form,
)
from app.services.content import ContentService
from app.services.forms import PendingUpload, PostFormController
from app.services.listing import FilterState, SortKey

router = APIRouter()


class PostView(Post):
    featured_image_url: str = ""
    author_name: str = DEFAULT_AUTHOR_NAME
    is_author: bool = False


class PostListOut(BaseModel):
    posts: List[PostView]
    total: int
    filters: Dict[str, str]
    is_filtered: bool


class PostSavedOut(BaseModel):
    post: PostView
    redirect: str


class PostDeletedOut(BaseModel):
    success: bool
    image_deleted: bool
    redirect: str = "/posts"


def to_view(post: Post, content: ContentService, user: Optional[User] = None) -> PostView:
    return PostView(
        **post.model_dump(),
        featured_image_url=content.get_file_preview(post.featured_image),
        is_author=is_post_author(post.user_id, user.id if user else None),
    )


def _remote_order(sort_key: SortKey) -> str:
    return {
        SortKey.NEWEST: Query.order_desc("$createdAt"),
        SortKey.OLDEST: Query.order_asc("$createdAt"),
        SortKey.TITLE_ASC: Query.order_asc("title"),
        SortKey.TITLE_DESC: Query.order_desc("title"),
    }[sort_key]


def _load_own_post(slug: str, content: ContentService, user: User) -> Post:
    post = content.get_post(slug)
    if not is_post_author(post.user_id, user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the author can change this post")
    return post


async def _pending_upload(image: Optional[UploadFile]) -> Optional[PendingUpload]:
    if image is None or not image.filename:
        return None
    return PendingUpload(file_name=image.filename, content=await image.read(), content_type=image.content_type)


@router.get("/", response_model=PostListOut)
def list_posts(
    search: str = "",
    category: str = "",
    sort: str = "newest",
    content: ContentService = Depends(get_content_service),
    user: Optional[User] = Depends(get_current_user_optional),
):
    """Published posts, filtered by category and search term."""
    filters = FilterState.from_query_params({"search": search, "category": category, "sort": sort})

    queries = [Query.equal("status", PostStatus.PUBLISHED.value)]
    if filters.category:
        queries.append(Query.equal("category", filters.category))
    queries.append(_remote_order(filters.sort_key))

    result = content.get_posts(queries)
    posts = filters.apply(result.documents)
    return PostListOut(
        posts=[to_view(post, content, user) for post in posts],
        total=len(posts),
        filters=filters.to_query_params(),
        is_filtered=filters.is_filtered,
    )


@router.get("/drafts", response_model=List[PostView])
def list_drafts(
    content: ContentService = Depends(get_content_service),
    user: User = Depends(get_current_user),
):
    return [to_view(post, content, user) for post in content.get_drafts(user.id).documents]


@router.get("/{slug}", response_model=PostView)
def get_post(
    slug: str,
    content: ContentService = Depends(get_content_service),
    user: Optional[User] = Depends(get_current_user_optional),
):
    post = content.get_post(slug)
    if post.status == PostStatus.DRAFT and not is_post_author(post.user_id, user.id if user else None):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="The requested content was not found.")
    return to_view(post, content, user)


@router.post("/", response_model=PostSavedOut, status_code=status.HTTP_201_CREATED)
async def create_post(
    title: str = Form(""),
    slug: Optional[str] = Form(None),
    content_html: str = Form("", alias="content"),
    excerpt: str = Form(""),
    category: str = Form(""),
    tags: str = Form(""),
    post_status: str = Form(PostStatus.DRAFT.value, alias="status"),
    image: Optional[UploadFile] = File(None),
    content: ContentService = Depends(get_content_service),
    user: User = Depends(get_current_user),
):
    """Create a post. The slug follows the title unless one is given."""
    controller = PostFormController(content, user)
    controller.set_title(title)
    values = {"content": content_html, "excerpt": excerpt, "category": category,
              "tags": tags, "status": post_status}
    if slug:
        values["slug"] = slug

    upload = await _pending_upload(image)
    result = raise_for_form(await run_in_threadpool(controller.submit, values, upload))
    return PostSavedOut(post=to_view(result.data, content, user), redirect=result.redirect)


@router.patch("/{slug}", response_model=PostSavedOut)
async def update_post(
    slug: str,
    title: Optional[str] = Form(None),
    content_html: Optional[str] = Form(None, alias="content"),
    excerpt: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    tags: Optional[str] = Form(None),
    post_status: Optional[str] = Form(None, alias="status"),
    image: Optional[UploadFile] = File(None),
    content: ContentService = Depends(get_content_service),
    user: User = Depends(get_current_user),
):
    """Edit a post. Omitted fields keep their stored values; the slug never changes."""
    post = await run_in_threadpool(_load_own_post, slug, content, user)
    controller = PostFormController(content, user, post=post)
    values = {
        key: value for key, value in {
            "title": title, "content": content_html, "excerpt": excerpt,
            "category": category, "tags": tags, "status": post_status,
        }.items() if value is not None
    }

    upload = await _pending_upload(image)
    result = raise_for_form(await run_in_threadpool(controller.submit, values, upload))
    return PostSavedOut(post=to_view(result.data, content, user), redirect=result.redirect)


@router.delete("/{slug}", response_model=PostDeletedOut)
def delete_post(
    slug: str,
    content: ContentService = Depends(get_content_service),
    user: User = Depends(get_current_user),
):
    post = _load_own_post(slug, content, user)
    image_deleted = content.delete_post_with_image(post)
    return PostDeletedOut(success=True, image_deleted=image_deleted)
