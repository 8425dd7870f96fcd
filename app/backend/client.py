import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar
from urllib.parse import quote

from appwrite.client import Client
from appwrite.exception import AppwriteException
from appwrite.id import ID
from appwrite.input_file import InputFile
from appwrite.services.account import Account
from appwrite.services.databases import Databases
from appwrite.services.storage import Storage

from app.backend.cancellation import CancelToken
from app.core.config import Settings, settings as default_settings
from app.core.errors import BackendError, ErrorKind, classify

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AppwriteClient:
    """Appwrite SDK services bound to one caller's session.

    One instance per caller: the session secret it carries is the caller's
    Appwrite session, never shared between requests. Sessions are created
    through a second SDK client holding the project API key, which is the
    only way Appwrite hands the session secret back to a server.
    """

    def __init__(self, config: Optional[Settings] = None, session_secret: Optional[str] = None):
        self.config = config or default_settings
        self.endpoint = self.config.APPWRITE_URL.rstrip("/")
        self.admin_account = Account(self._sdk_client(key=self.config.APPWRITE_API_KEY))
        self._session_secret: Optional[str] = None
        self.session_secret = session_secret

    def _sdk_client(self, key: Optional[str] = None, secret: Optional[str] = None) -> Client:
        client = Client()
        client.set_endpoint(self.endpoint)
        client.set_project(self.config.APPWRITE_PROJECT_ID)
        if key:
            client.set_key(key)
        if secret:
            client.set_session(secret)
        return client

    @property
    def session_secret(self) -> Optional[str]:
        return self._session_secret

    @session_secret.setter
    def session_secret(self, secret: Optional[str]) -> None:
        self._session_secret = secret or None
        client = self._sdk_client(secret=self._session_secret)
        self.account = Account(client)
        self.databases = Databases(client)
        self.storage = Storage(client)

    # ---------- transport ----------

    def _call(self, action: Callable[..., T], *args: Any, cancel: Optional[CancelToken] = None) -> T:
        if cancel is not None:
            cancel.raise_if_cancelled()

        try:
            result = action(*args)
        except AppwriteException as e:
            raise self._error_from(e) from e

        # The caller has gone away; drop the result
        if cancel is not None:
            cancel.raise_if_cancelled()
        return result

    @staticmethod
    def _error_from(exc: AppwriteException) -> BackendError:
        message = str(exc.message or "") or "Unknown Appwrite error"
        error_type = getattr(exc, "type", None)
        code = exc.code
        # No HTTP status means the request never got an answer
        if code is None:
            return BackendError(message, kind=ErrorKind.NETWORK, type=error_type)
        return BackendError(message, kind=classify(error_type, message, code), code=code, type=error_type)

    # ---------- account ----------

    def create_account(self, email: str, password: str, name: str,
                       cancel: Optional[CancelToken] = None) -> Dict[str, Any]:
        return self._call(self.admin_account.create, ID.unique(), email, password, name, cancel=cancel)

    def create_email_session(self, email: str, password: str,
                             cancel: Optional[CancelToken] = None) -> Dict[str, Any]:
        session = self._call(self.admin_account.create_email_password_session, email, password, cancel=cancel)
        secret = session.get("secret")
        if secret:
            self.session_secret = secret
        else:
            logger.warning("Appwrite returned no session secret for %s; is APPWRITE_API_KEY set?", email)
        return session

    def get_account(self, cancel: Optional[CancelToken] = None) -> Dict[str, Any]:
        return self._call(self.account.get, cancel=cancel)

    def delete_session(self, session_id: str = "current", cancel: Optional[CancelToken] = None) -> None:
        self._call(self.account.delete_session, session_id, cancel=cancel)
        if session_id == "current":
            self.session_secret = None

    # ---------- documents ----------

    def create_document(self, document_id: str, data: Dict[str, Any],
                        cancel: Optional[CancelToken] = None) -> Dict[str, Any]:
        return self._call(self.databases.create_document, self.config.APPWRITE_DATABASE_ID,
                          self.config.APPWRITE_COLLECTION_ID, document_id, data, cancel=cancel)

    def get_document(self, document_id: str, cancel: Optional[CancelToken] = None) -> Dict[str, Any]:
        return self._call(self.databases.get_document, self.config.APPWRITE_DATABASE_ID,
                          self.config.APPWRITE_COLLECTION_ID, document_id, cancel=cancel)

    def update_document(self, document_id: str, data: Dict[str, Any],
                        cancel: Optional[CancelToken] = None) -> Dict[str, Any]:
        return self._call(self.databases.update_document, self.config.APPWRITE_DATABASE_ID,
                          self.config.APPWRITE_COLLECTION_ID, document_id, data, cancel=cancel)

    def delete_document(self, document_id: str, cancel: Optional[CancelToken] = None) -> None:
        self._call(self.databases.delete_document, self.config.APPWRITE_DATABASE_ID,
                   self.config.APPWRITE_COLLECTION_ID, document_id, cancel=cancel)

    def list_documents(self, queries: Optional[List[str]] = None,
                       cancel: Optional[CancelToken] = None) -> Dict[str, Any]:
        payload = self._call(self.databases.list_documents, self.config.APPWRITE_DATABASE_ID,
                             self.config.APPWRITE_COLLECTION_ID, list(queries or []), cancel=cancel)
        return {"total": payload.get("total", 0), "documents": payload.get("documents", [])}

    # ---------- storage ----------

    def create_file(self, file_name: str, content: bytes, content_type: str,
                    cancel: Optional[CancelToken] = None) -> Dict[str, Any]:
        # The SDK splits large files into chunked uploads
        upload = InputFile.from_bytes(content, file_name, content_type)
        return self._call(self.storage.create_file, self.config.APPWRITE_BUCKET_ID,
                          ID.unique(), upload, cancel=cancel)

    def delete_file(self, file_id: str, cancel: Optional[CancelToken] = None) -> None:
        self._call(self.storage.delete_file, self.config.APPWRITE_BUCKET_ID, file_id, cancel=cancel)

    def file_view_url(self, file_id: str) -> str:
        # Built locally; the server SDK's get_file_view downloads the bytes instead
        return (f"{self.endpoint}/storage/buckets/{self.config.APPWRITE_BUCKET_ID}"
                f"/files/{quote(file_id, safe='')}/view?project={self.config.APPWRITE_PROJECT_ID}")
