import json
import logging
from typing import List, Optional

from appwrite.query import Query

from app.backend.cancellation import CancelToken
from app.backend.client import AppwriteClient
from app.core.config import Settings, settings as default_settings
from app.core.errors import BackendError, ErrorKind, InvalidUploadError
from app.core.logs import log_error
from app.models.post import Post, PostCreate, PostList, PostStatus, PostUpdate

logger = logging.getLogger(__name__)

# Guests without read permission on the collection get an empty listing
GUEST_SAFE_KINDS = (ErrorKind.UNAUTHORIZED, ErrorKind.MISSING_SCOPE)


class ContentService:
    def __init__(self, client: AppwriteClient, config: Optional[Settings] = None,
                 cancel: Optional[CancelToken] = None):
        self.client = client
        self.config = config or default_settings
        self.cancel = cancel

    # ---------- posts ----------

    def create_post(self, data: PostCreate) -> Post:
        """Create a post whose document id is its slug.

        Appwrite rejects an existing id with ``ErrorKind.DUPLICATE_ID``; the
        existing document is never overwritten.
        """
        try:
            document = self.client.create_document(data.slug, data.to_document(), cancel=self.cancel)
        except BackendError as e:
            log_error(e, "ContentService.create_post", logger)
            raise
        return Post.from_document(document)

    def update_post(self, slug: str, data: PostUpdate) -> Post:
        """Send only the fields set on ``data``; everything else stays as stored."""
        try:
            document = self.client.update_document(slug, data.to_document(), cancel=self.cancel)
        except BackendError as e:
            log_error(e, "ContentService.update_post", logger)
            raise
        return Post.from_document(document)

    def delete_post(self, slug: str) -> bool:
        try:
            self.client.delete_document(slug, cancel=self.cancel)
        except BackendError as e:
            log_error(e, "ContentService.delete_post", logger)
            raise
        return True

    def get_post(self, slug: str) -> Post:
        try:
            return Post.from_document(self.client.get_document(slug, cancel=self.cancel))
        except BackendError as e:
            log_error(e, "ContentService.get_post", logger)
            raise

    def get_posts(self, queries: Optional[List[str]] = None) -> PostList:
        """List posts, newest first and capped at ``POSTS_PAGE_SIZE`` unless the
        queries say otherwise. Defaults to published posts only."""
        queries = list(queries) if queries is not None else [Query.equal("status", PostStatus.PUBLISHED.value)]
        methods = {_query_method(query) for query in queries}
        if not methods & {"orderAsc", "orderDesc"}:
            queries.append(Query.order_desc("$createdAt"))
        if "limit" not in methods:
            queries.append(Query.limit(self.config.POSTS_PAGE_SIZE))

        try:
            result = self.client.list_documents(queries, cancel=self.cancel)
        except BackendError as e:
            if e.kind in GUEST_SAFE_KINDS:
                logger.info("Post listing not permitted for this caller, returning no posts")
                return PostList()
            log_error(e, "ContentService.get_posts", logger)
            raise
        return PostList(
            total=result["total"],
            documents=[Post.from_document(document) for document in result["documents"]],
        )

    def get_drafts(self, user_id: str) -> PostList:
        return self.get_posts([
            Query.equal("status", PostStatus.DRAFT.value),
            Query.equal("userID", user_id),
            Query.order_desc("$updatedAt"),
        ])

    def delete_post_with_image(self, post: Post) -> bool:
        """Delete a post and, best effort, its featured image.

        Returns whether the image was removed. A failed image deletion is
        logged and leaves the file orphaned; the post is deleted regardless.
        """
        image_deleted = False
        if post.featured_image:
            try:
                self.delete_file(post.featured_image)
                image_deleted = True
            except BackendError as e:
                logger.warning("Orphaned featured image %s of post %s: %s", post.featured_image, post.slug, e)
        self.delete_post(post.slug)
        return image_deleted

    # ---------- files ----------

    def upload_file(self, file_name: str, content: bytes, content_type: Optional[str]) -> str:
        """Store an image and return its Appwrite file id."""
        if not content_type or not content_type.startswith("image/"):
            raise InvalidUploadError("File must be an image")
        if not content:
            raise InvalidUploadError("File is empty")
        try:
            response = self.client.create_file(file_name, content, content_type, cancel=self.cancel)
        except BackendError as e:
            log_error(e, "ContentService.upload_file", logger)
            raise
        return response["$id"]

    def delete_file(self, file_id: str) -> bool:
        try:
            self.client.delete_file(file_id, cancel=self.cancel)
        except BackendError as e:
            log_error(e, "ContentService.delete_file", logger)
            raise
        return True

    def get_file_preview(self, file_id: Optional[str]) -> str:
        if not file_id:
            return ""
        if not is_file_id(file_id):
            return file_id
        return self.client.file_view_url(file_id)


def is_file_id(value: Optional[str]) -> bool:
    """True for a storage id, False for values that are already URLs."""
    return bool(value) and not value.startswith("http") and not value.startswith("data:")


def _query_method(query: str) -> str:
    try:
        return json.loads(query).get("method", "")
    except (ValueError, AttributeError):
        return ""
