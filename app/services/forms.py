import logging
from enum import Enum
from typing import Any, Dict, Optional, Set, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

from app.core.constants import FIELD_CONSTRAINTS, REQUIRED_MESSAGES, VALIDATION_PATTERNS
from app.core.errors import BackendError, InvalidUploadError, user_message
from app.core.logs import log_error
from app.core.utils import create_post_url_alt, generate_slug, process_tags
from app.models.post import Post, PostCreate, PostStatus, PostUpdate
from app.models.user import User
from app.services.content import ContentService
from app.services.email import send_contact_message
from app.services.session import SessionContext

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=BaseModel)


def _min(field: str) -> int:
    return FIELD_CONSTRAINTS[field]["min_length"][0]


def _max(field: str) -> int:
    return FIELD_CONSTRAINTS[field]["max_length"][0]


def _pattern(field: str) -> str:
    return VALIDATION_PATTERNS[field]["pattern"]


# ---------- form schemas ----------

class PostForm(BaseModel):
    title: str = Field(min_length=_min("title"), max_length=_max("title"))
    slug: str = Field(min_length=_min("slug"), pattern=_pattern("slug"))
    content: str = Field(min_length=1)
    excerpt: str = Field(min_length=_min("excerpt"), max_length=_max("excerpt"))
    category: str = Field(min_length=1)
    tags: Optional[str] = Field(default=None, pattern=_pattern("tags"))
    status: PostStatus = PostStatus.DRAFT

    @field_validator("tags", mode="before")
    @classmethod
    def blank_tags(cls, value):
        return value or None


class PostEditForm(BaseModel):
    """Fields an edit may change; anything left out keeps its stored value."""

    title: Optional[str] = Field(default=None, min_length=_min("title"), max_length=_max("title"))
    content: Optional[str] = Field(default=None, min_length=1)
    excerpt: Optional[str] = Field(default=None, min_length=_min("excerpt"), max_length=_max("excerpt"))
    category: Optional[str] = Field(default=None, min_length=1)
    tags: Optional[str] = Field(default=None, pattern=_pattern("tags"))
    status: Optional[PostStatus] = None

    @field_validator("tags", mode="before")
    @classmethod
    def blank_tags(cls, value):
        return value or None


class LoginForm(BaseModel):
    email: str = Field(min_length=1, pattern=_pattern("email"))
    password: str = Field(min_length=1)


class RegisterForm(BaseModel):
    name: str = Field(min_length=_min("name"), max_length=_max("name"))
    email: str = Field(min_length=1, pattern=_pattern("email"))
    password: str = Field(min_length=_min("password"))
    confirm_password: str = Field(min_length=1)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise PydanticCustomError("password_mismatch", "Passwords do not match")
        return self


class ContactForm(BaseModel):
    name: str = Field(min_length=_min("name"), max_length=_max("name"))
    email: str = Field(min_length=1, pattern=_pattern("email"))
    subject: str = Field(min_length=_min("subject"), max_length=_max("subject"))
    message: str = Field(min_length=_min("message"), max_length=_max("message"))


def _field_message(field: str, error: Dict[str, Any]) -> str:
    kind = error["type"]
    constraints = FIELD_CONSTRAINTS.get(field, {})
    if kind == "missing" or (kind == "string_too_short" and not error.get("input")):
        return REQUIRED_MESSAGES.get(field, "This field is required")
    if kind == "string_too_short" and "min_length" in constraints:
        return constraints["min_length"][1]
    if kind == "string_too_long" and "max_length" in constraints:
        return constraints["max_length"][1]
    if kind == "string_pattern_mismatch" and field in VALIDATION_PATTERNS:
        return VALIDATION_PATTERNS[field]["message"]
    if kind == "enum":
        return "Please select a valid option"
    return error["msg"]


def form_errors(exc: ValidationError) -> Dict[str, str]:
    """Map pydantic errors to ``{field: message}``, first message per field."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        # Model-level validators report an empty location
        field = str(error["loc"][0]) if error["loc"] else "confirm_password"
        errors.setdefault(field, _field_message(field, error))
    return errors


def validate_form(schema: Type[F], values: Dict[str, Any]):
    """Return ``(form, {})`` when valid, ``(None, errors)`` otherwise."""
    try:
        return schema.model_validate(values), {}
    except ValidationError as exc:
        return None, form_errors(exc)


# ---------- controllers ----------

class FormStatus(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


class FormResult(BaseModel):
    status: FormStatus
    redirect: Optional[str] = None
    error: str = ""
    field_errors: Dict[str, str] = Field(default_factory=dict)
    data: Any = None


class FormBusyError(RuntimeError):
    pass


class FormController:
    """idle -> submitting -> success | error; ``retry()`` goes back to idle.

    Validation runs before ``submitting``: an invalid form stays idle and no
    remote call is made.
    """

    schema: Type[BaseModel] = BaseModel

    def __init__(self):
        self.status = FormStatus.IDLE
        self.error = ""
        self.field_errors: Dict[str, str] = {}

    def retry(self) -> None:
        if self.status == FormStatus.SUBMITTING:
            raise FormBusyError("Form is still submitting")
        self.status = FormStatus.IDLE
        self.error = ""

    def dismiss_error(self) -> None:
        self.error = ""

    def validate(self, values: Dict[str, Any]):
        form, self.field_errors = validate_form(self.schema, values)
        return form

    def _begin(self) -> None:
        if self.status == FormStatus.SUBMITTING:
            raise FormBusyError("Form is already submitting")
        self.status = FormStatus.SUBMITTING
        self.error = ""

    def _succeed(self, redirect: Optional[str] = None, data: Any = None) -> FormResult:
        self.status = FormStatus.SUCCESS
        return FormResult(status=self.status, redirect=redirect, data=data)

    def _fail(self, message: str) -> FormResult:
        self.status = FormStatus.ERROR
        self.error = message
        return FormResult(status=self.status, error=message)

    def _invalid(self) -> FormResult:
        return FormResult(status=self.status, field_errors=self.field_errors)


class PendingUpload(BaseModel):
    file_name: str
    content: bytes
    content_type: Optional[str] = None


class PostFormController(FormController):
    """Create or edit a post.

    Creating validates and sends the whole form. Editing validates and sends
    only the fields that were changed; the stored document keeps the rest.
    """

    schema = PostForm

    def __init__(self, content: ContentService, user: Optional[User], post: Optional[Post] = None):
        super().__init__()
        self.content = content
        self.user = user
        self.post = post
        self.changed: Set[str] = set()
        self.values: Dict[str, Any] = {
            "title": post.title if post else "",
            "slug": post.slug if post else "",
            "content": post.content if post else "",
            "excerpt": post.excerpt if post else "",
            "category": post.category if post else "",
            "tags": ", ".join(post.tags) if post else "",
            "status": post.status.value if post else PostStatus.DRAFT.value,
        }

    @property
    def is_edit(self) -> bool:
        return self.post is not None

    @property
    def changes(self) -> Dict[str, Any]:
        return {key: self.values[key] for key in self.changed if key in PostEditForm.model_fields}

    def set_title(self, title: str) -> None:
        self.values["title"] = title
        self.changed.add("title")
        # The slug is the document id; it only follows the title before creation
        if title and not self.is_edit:
            self.values["slug"] = generate_slug(title)

    def update(self, **values: Any) -> None:
        if "title" in values:
            self.set_title(values.pop("title"))
        if self.is_edit:
            values.pop("slug", None)
        self.values.update(values)
        self.changed.update(values)

    def submit(self, values: Optional[Dict[str, Any]] = None, upload: Optional[PendingUpload] = None) -> FormResult:
        if values:
            self.update(**values)
        if self.user is None:
            return self._fail("You must be logged in to create a post")

        if self.is_edit:
            form, self.field_errors = validate_form(PostEditForm, self.changes)
        else:
            form = self.validate(self.values)
        if form is None:
            return self._invalid()

        self._begin()
        featured_image = None
        if upload is not None:
            try:
                featured_image = self.content.upload_file(upload.file_name, upload.content, upload.content_type)
            except (BackendError, InvalidUploadError) as e:
                log_error(e, "PostForm.upload_file", logger)
                return self._fail("Failed to upload featured image")

        try:
            if self.post is not None:
                saved = self._save_changes(form, featured_image)
                slug = self.post.slug
            else:
                saved = self._create(form, featured_image)
                slug = form.slug
        except BackendError as e:
            log_error(e, "PostForm.submit", logger)
            return self._fail(user_message(e))
        return self._succeed(redirect=create_post_url_alt(slug), data=saved)

    def _create(self, form: PostForm, featured_image: Optional[str]) -> Post:
        fields = {
            "title": form.title,
            "content": form.content,
            "excerpt": form.excerpt,
            "category": form.category,
            "tags": process_tags(form.tags or ""),
            "status": form.status,
            "user_id": self.user.id,
        }
        if featured_image:
            fields["featured_image"] = featured_image
        return self.content.create_post(PostCreate(slug=form.slug, **fields))

    def _save_changes(self, form: PostEditForm, featured_image: Optional[str]) -> Post:
        fields = form.model_dump(exclude_unset=True)
        if "tags" in fields:
            fields["tags"] = process_tags(fields["tags"] or "")
        if featured_image:
            fields["featured_image"] = featured_image
        if not fields:
            return self.post
        return self.content.update_post(self.post.slug, PostUpdate(**fields))


class LoginFormController(FormController):
    schema = LoginForm

    def __init__(self, session: SessionContext):
        super().__init__()
        self.session = session

    def submit(self, values: Dict[str, Any]) -> FormResult:
        form = self.validate(values)
        if form is None:
            return self._invalid()

        self._begin()
        try:
            state = self.session.login(form.email, form.password)
        except BackendError as e:
            return self._fail(user_message(e))
        if not state.is_authenticated:
            return self._fail("Login failed. Please try again.")
        return self._succeed(redirect="/", data=state)


class RegisterFormController(FormController):
    schema = RegisterForm

    def __init__(self, session: SessionContext):
        super().__init__()
        self.session = session

    def submit(self, values: Dict[str, Any]) -> FormResult:
        form = self.validate(values)
        if form is None:
            return self._invalid()

        self._begin()
        try:
            state = self.session.register(form.email, form.password, form.name)
        except BackendError as e:
            return self._fail(user_message(e))
        if not state.is_authenticated:
            return self._fail("Registration failed. Please try again.")
        return self._succeed(redirect="/", data=state)


class ContactFormController(FormController):
    schema = ContactForm

    def submit(self, values: Dict[str, Any]) -> FormResult:
        form = self.validate(values)
        if form is None:
            return self._invalid()

        self._begin()
        if not send_contact_message(form.name, form.email, form.subject, form.message):
            return self._fail("Failed to send message. Please try again.")
        return self._succeed(data={"message": "Thank you for your message. We'll get back to you soon."})
