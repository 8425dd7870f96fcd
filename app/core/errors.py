from enum import Enum
from typing import Optional

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


class ErrorKind(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    ALREADY_EXISTS = "already_exists"
    DUPLICATE_ID = "duplicate_id"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    MISSING_SCOPE = "missing_scope"
    SESSION_ACTIVE = "session_active"
    NO_SESSION = "no_session"
    NETWORK = "network"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class BackendError(Exception):
    """Error raised by the Appwrite client, classified once at the boundary."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN,
                 code: Optional[int] = None, type: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.code = code
        self.type = type

    def __repr__(self) -> str:
        return f"BackendError({self.message!r}, kind={self.kind.value}, code={self.code})"


# Appwrite error "type" values
_TYPE_KINDS = {
    "user_invalid_credentials": ErrorKind.INVALID_CREDENTIALS,
    "user_already_exists": ErrorKind.ALREADY_EXISTS,
    "user_email_already_exists": ErrorKind.ALREADY_EXISTS,
    "document_already_exists": ErrorKind.DUPLICATE_ID,
    "document_not_found": ErrorKind.NOT_FOUND,
    "storage_file_not_found": ErrorKind.NOT_FOUND,
    "user_not_found": ErrorKind.NOT_FOUND,
    "user_unauthorized": ErrorKind.UNAUTHORIZED,
    "general_unauthorized_scope": ErrorKind.MISSING_SCOPE,
    "user_session_already_exists": ErrorKind.SESSION_ACTIVE,
    "user_session_not_found": ErrorKind.NO_SESSION,
}

# Message fragments, checked in order when the type is unknown
_MESSAGE_KINDS = (
    ("invalid credentials", ErrorKind.INVALID_CREDENTIALS),
    ("missing scope", ErrorKind.MISSING_SCOPE),
    ("session is active", ErrorKind.SESSION_ACTIVE),
    ("session is prohibited", ErrorKind.SESSION_ACTIVE),
    ("requested id already exists", ErrorKind.DUPLICATE_ID),
    ("already exists", ErrorKind.ALREADY_EXISTS),
    ("not found", ErrorKind.NOT_FOUND),
    ("unauthorized", ErrorKind.UNAUTHORIZED),
)

_STATUS_KINDS = {
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.UNAUTHORIZED,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.ALREADY_EXISTS,
}


def classify(type: Optional[str] = None, message: Optional[str] = None, code: Optional[int] = None) -> ErrorKind:
    if type and type in _TYPE_KINDS:
        return _TYPE_KINDS[type]
    lowered = (message or "").lower()
    for fragment, kind in _MESSAGE_KINDS:
        if fragment in lowered:
            return kind
    return _STATUS_KINDS.get(code, ErrorKind.UNKNOWN)


_USER_MESSAGES = {
    ErrorKind.INVALID_CREDENTIALS: "Invalid email or password. Please try again.",
    ErrorKind.ALREADY_EXISTS: "An account with this email already exists.",
    ErrorKind.NOT_FOUND: "The requested content was not found.",
    ErrorKind.UNAUTHORIZED: "You don't have permission to perform this action.",
}


def user_message(error: BaseException) -> str:
    """Translate an error into the sentence shown in the page banner."""
    kind = getattr(error, "kind", None)
    if kind in _USER_MESSAGES:
        return _USER_MESSAGES[kind]
    message = getattr(error, "message", None) or str(error)
    return message or GENERIC_ERROR_MESSAGE


# HTTP status used when a BackendError escapes a route
STATUS_FOR_KIND = {
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.MISSING_SCOPE: 401,
    ErrorKind.NO_SESSION: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.DUPLICATE_ID: 409,
    ErrorKind.SESSION_ACTIVE: 409,
    ErrorKind.NETWORK: 502,
    ErrorKind.CANCELLED: 499,
    ErrorKind.UNKNOWN: 502,
}


class InvalidUploadError(ValueError):
    """Raised before any upload when the file is not an acceptable image."""
