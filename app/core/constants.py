CATEGORY_OPTIONS = [
    {"value": "technology", "label": "Technology"},
    {"value": "lifestyle", "label": "Lifestyle"},
    {"value": "travel", "label": "Travel"},
    {"value": "coding", "label": "Coding"},
    {"value": "business", "label": "Business"},
    {"value": "health", "label": "Health & Wellness"},
    {"value": "food", "label": "Food & Cooking"},
    {"value": "entertainment", "label": "Entertainment"},
]

STATUS_OPTIONS = [
    {"value": "draft", "label": "Draft"},
    {"value": "published", "label": "Published"},
]

SORT_OPTIONS = [
    {"value": "newest", "label": "Newest First"},
    {"value": "oldest", "label": "Oldest First"},
    {"value": "title-asc", "label": "Title A-Z"},
    {"value": "title-desc", "label": "Title Z-A"},
]

# Patterns are anchored with fullmatch semantics by the form models
VALIDATION_PATTERNS = {
    "slug": {
        "pattern": r"^[a-z0-9-]+$",
        "message": "Slug can only contain lowercase letters, numbers, and hyphens",
    },
    "tags": {
        "pattern": r"^[a-zA-Z0-9\s,.-]+$",
        "message": "Tags can only contain letters, numbers, spaces, commas, periods, and hyphens",
    },
    "email": {
        "pattern": r"^[^\s@]+@[^\s@]+\.[^\s@]+$",
        "message": "Please enter a valid email address",
    },
}

FIELD_CONSTRAINTS = {
    "title": {
        "min_length": (5, "Title must be at least 5 characters"),
        "max_length": (100, "Title must not exceed 100 characters"),
    },
    "slug": {
        "min_length": (3, "Slug must be at least 3 characters"),
    },
    "excerpt": {
        "min_length": (50, "Excerpt must be at least 50 characters"),
        "max_length": (300, "Excerpt must not exceed 300 characters"),
    },
    "password": {
        "min_length": (8, "Password must be at least 8 characters"),
    },
    "name": {
        "min_length": (2, "Name must be at least 2 characters"),
        "max_length": (50, "Name must not exceed 50 characters"),
    },
    "subject": {
        "min_length": (5, "Subject must be at least 5 characters"),
        "max_length": (100, "Subject must not exceed 100 characters"),
    },
    "message": {
        "min_length": (10, "Message must be at least 10 characters"),
        "max_length": (1000, "Message must not exceed 1000 characters"),
    },
}

REQUIRED_MESSAGES = {
    "title": "Title is required",
    "slug": "Slug is required",
    "content": "Content is required",
    "excerpt": "Excerpt is required",
    "category": "Category is required",
    "status": "Status is required",
    "email": "Email is required",
    "password": "Password is required",
    "confirm_password": "Please confirm your password",
    "name": "Name is required",
    "subject": "Subject is required",
    "message": "Message is required",
}

# Home page layout
FEATURED_POST_COUNT = 3
RECENT_POST_COUNT = 6

# Post author display name when the account record is not fetched
DEFAULT_AUTHOR_NAME = "Blog Author"
