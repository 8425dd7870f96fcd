import pytest

from app.models.post import Post, PostStatus
from app.models.user import User
from app.services.forms import (
    ContactFormController,
    FormBusyError,
    FormStatus,
    LoginFormController,
    PendingUpload,
    PostFormController,
    RegisterFormController,
    validate_form,
    PostForm,
)

AUTHOR = User(id="user-1", name="Author", email="author@example.com")
EXCERPT = "This excerpt is comfortably longer than the fifty character minimum."


def post_values(**overrides):
    values = dict(content="<p>Body</p>", excerpt=EXCERPT, category="coding", tags="python, web", status="published")
    values.update(overrides)
    return values


def existing_post():
    return Post(id="first-post", slug="first-post", title="First Post", content="<p>x</p>", excerpt=EXCERPT,
                category="coding", tags=["a", "b"], status=PostStatus.DRAFT, featured_image="file-9",
                user_id="user-1")


def test_slug_follows_title_when_creating(content):
    form = PostFormController(content, AUTHOR)
    form.set_title("Hello, World Again!")
    assert form.values["slug"] == "hello-world-again"


def test_slug_is_fixed_when_editing(content):
    form = PostFormController(content, AUTHOR, post=existing_post())
    form.set_title("A Whole New Title")
    form.update(slug="hijacked")
    assert form.values["slug"] == "first-post"
    assert form.values["tags"] == "a, b"


def test_create_submits_and_navigates(content, backend):
    form = PostFormController(content, AUTHOR)
    form.set_title("My First Post")
    result = form.submit(post_values())

    assert result.status == FormStatus.SUCCESS
    assert result.redirect == "/post/my-first-post"
    stored = backend.documents["my-first-post"]
    assert stored["tags"] == ["python", "web"]
    assert stored["userID"] == "user-1"
    assert stored.get("featuredImage") is None


def test_invalid_form_makes_no_remote_call(content, backend):
    form = PostFormController(content, AUTHOR)
    form.set_title("Hey")
    result = form.submit(post_values(excerpt="too short", tags="bad#tag"))

    assert result.status == FormStatus.IDLE
    assert result.field_errors["title"] == "Title must be at least 5 characters"
    assert result.field_errors["excerpt"] == "Excerpt must be at least 50 characters"
    assert "tags" in result.field_errors
    assert backend.calls == []


def test_required_messages():
    _, errors = validate_form(PostForm, {"title": "", "slug": "", "content": "", "excerpt": "", "category": ""})
    assert errors["title"] == "Title is required"
    assert errors["content"] == "Content is required"
    assert errors["category"] == "Category is required"


def test_slug_pattern_message():
    _, errors = validate_form(PostForm, {"title": "Valid title", "slug": "Not_Valid", "content": "x",
                                         "excerpt": EXCERPT, "category": "coding"})
    assert errors == {"slug": "Slug can only contain lowercase letters, numbers, and hyphens"}


def test_upload_is_resolved_before_create(content, backend):
    form = PostFormController(content, AUTHOR)
    form.set_title("Post With Image")
    result = form.submit(post_values(), upload=PendingUpload(file_name="c.png", content=b"png", content_type="image/png"))

    assert result.status == FormStatus.SUCCESS
    assert backend.calls[:2] == ["create_file", "create_document"]
    file_id = backend.documents["post-with-image"]["featuredImage"]
    assert file_id in backend.files


def test_failed_upload_stops_submission(content, backend):
    form = PostFormController(content, AUTHOR)
    form.set_title("Post With Image")
    result = form.submit(post_values(), upload=PendingUpload(file_name="c.txt", content=b"txt", content_type="text/plain"))

    assert result.status == FormStatus.ERROR
    assert result.error == "Failed to upload featured image"
    assert "create_document" not in backend.calls


def test_edit_updates_without_slug(content, backend):
    backend.add_post("first-post", title="First Post", featuredImage="file-9", userID="user-1")
    form = PostFormController(content, AUTHOR, post=existing_post())
    result = form.submit({"title": "First Post, Revised", "status": "published"})

    assert result.status == FormStatus.SUCCESS
    assert result.redirect == "/post/first-post"
    assert backend.documents["first-post"]["title"] == "First Post, Revised"
    assert backend.documents["first-post"]["slug"] == "first-post"
    assert backend.documents["first-post"]["featuredImage"] == "file-9"


def test_duplicate_slug_surfaces_error(content, backend):
    backend.add_post("taken-title")
    form = PostFormController(content, AUTHOR)
    form.set_title("Taken Title")
    result = form.submit(post_values())

    assert result.status == FormStatus.ERROR
    assert "already exists" in result.error
    assert backend.documents["taken-title"]["title"] == "Taken Title"


def test_anonymous_user_cannot_submit(content):
    form = PostFormController(content, None)
    result = form.submit(post_values(title="Anonymous Post"))
    assert result.status == FormStatus.ERROR
    assert result.error == "You must be logged in to create a post"


def test_retry_returns_to_idle(content, backend):
    backend.fail("create_document", message="Server error")
    form = PostFormController(content, AUTHOR)
    form.set_title("Flaky Post")
    assert form.submit(post_values()).status == FormStatus.ERROR
    assert form.error == "Server error"

    form.retry()
    assert form.status == FormStatus.IDLE and form.error == ""

    del backend.failures["create_document"]
    assert form.submit().status == FormStatus.SUCCESS


def test_cannot_submit_twice_at_once(content):
    form = PostFormController(content, AUTHOR)
    form.status = FormStatus.SUBMITTING
    with pytest.raises(FormBusyError):
        form.retry()


def test_login_form(ctx, backend):
    backend.add_account("me@example.com", "password1")
    result = LoginFormController(ctx).submit({"email": "me@example.com", "password": "password1"})
    assert result.status == FormStatus.SUCCESS
    assert result.redirect == "/"
    assert result.data.user.email == "me@example.com"


def test_login_form_bad_password(ctx, backend):
    backend.add_account("me@example.com", "password1")
    result = LoginFormController(ctx).submit({"email": "me@example.com", "password": "nope-nope"})
    assert result.status == FormStatus.ERROR
    assert result.error == "Invalid email or password. Please try again."


def test_login_form_validates_email(ctx, backend):
    result = LoginFormController(ctx).submit({"email": "not-an-email", "password": "x"})
    assert result.field_errors == {"email": "Please enter a valid email address"}
    assert backend.calls == []


def test_register_form_checks_confirmation(ctx, backend):
    result = RegisterFormController(ctx).submit({
        "name": "New Person", "email": "new@example.com", "password": "password1", "confirm_password": "password2",
    })
    assert result.field_errors == {"confirm_password": "Passwords do not match"}
    assert backend.calls == []


def test_register_form(ctx, backend):
    result = RegisterFormController(ctx).submit({
        "name": "New Person", "email": "new@example.com", "password": "password1", "confirm_password": "password1",
    })
    assert result.status == FormStatus.SUCCESS
    assert result.data.is_authenticated


def test_contact_form():
    form = ContactFormController()
    invalid = form.submit({"name": "A", "email": "a@b.co", "subject": "Hi", "message": "short"})
    assert invalid.field_errors == {
        "name": "Name must be at least 2 characters",
        "subject": "Subject must be at least 5 characters",
        "message": "Message must be at least 10 characters",
    }

    ok = form.submit({"name": "Ada", "email": "ada@example.com", "subject": "Hello there",
                      "message": "Just wanted to say hi."})
    assert ok.status == FormStatus.SUCCESS


def test_edit_sends_only_changed_fields(content, backend):
    backend.add_post("first-post", title="First Post", userID="user-1")
    form = PostFormController(content, AUTHOR, post=existing_post())
    result = form.submit({"title": "First Post, Revised"})

    assert result.status == FormStatus.SUCCESS
    assert backend.last_update == {"title": "First Post, Revised"}


def test_edit_ignores_untouched_legacy_fields(content, backend):
    backend.add_post("old-post", title="Old Post", excerpt="", category="", userID="user-1")
    legacy = Post(id="old-post", slug="old-post", title="Old Post", user_id="user-1")
    form = PostFormController(content, AUTHOR, post=legacy)
    result = form.submit({"title": "Old Post, Renamed"})

    assert result.status == FormStatus.SUCCESS
    assert result.field_errors == {}
    assert backend.last_update == {"title": "Old Post, Renamed"}


def test_edit_validates_changed_fields(content, backend):
    form = PostFormController(content, AUTHOR, post=existing_post())
    result = form.submit({"excerpt": "too short"})

    assert result.status == FormStatus.IDLE
    assert result.field_errors == {"excerpt": "Excerpt must be at least 50 characters"}
    assert backend.calls == []


def test_edit_can_clear_tags(content, backend):
    backend.add_post("first-post", tags=["a", "b"], userID="user-1")
    form = PostFormController(content, AUTHOR, post=existing_post())
    assert form.submit({"tags": ""}).status == FormStatus.SUCCESS
    assert backend.last_update == {"tags": []}


def test_edit_with_new_image_sends_only_the_image(content, backend):
    backend.add_post("first-post", userID="user-1")
    form = PostFormController(content, AUTHOR, post=existing_post())
    result = form.submit(upload=PendingUpload(file_name="n.png", content=b"png", content_type="image/png"))

    assert result.status == FormStatus.SUCCESS
    assert list(backend.last_update) == ["featuredImage"]
    assert backend.last_update["featuredImage"] in backend.files
