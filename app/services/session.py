import logging
from typing import Callable, List, Optional

from app.backend.cancellation import CancelToken
from app.backend.client import AppwriteClient
from app.core.errors import BackendError, ErrorKind
from app.core.logs import log_error
from app.models.user import SessionState, User

logger = logging.getLogger(__name__)

# Conditions that just mean "nobody is logged in"
ANONYMOUS_KINDS = (ErrorKind.MISSING_SCOPE, ErrorKind.UNAUTHORIZED, ErrorKind.NO_SESSION)

_UNRESOLVED = object()

SessionListener = Callable[[SessionState], None]


class SessionManager:
    """Reconciles the caller's login state with the Appwrite account API."""

    def __init__(self, client: AppwriteClient, cancel: Optional[CancelToken] = None):
        self.client = client
        self.cancel = cancel

    def get_current_session(self) -> Optional[User]:
        try:
            account = self.client.get_account(cancel=self.cancel)
        except BackendError as e:
            if e.kind not in ANONYMOUS_KINDS:
                log_error(e, "SessionManager.get_current_session", logger)
            return None
        return User.from_account(account) if account else None

    def register(self, email: str, password: str, name: str, current=_UNRESOLVED) -> Optional[User]:
        if current is _UNRESOLVED:
            current = self.get_current_session()
        if current is not None:
            # Registering ends whatever session this client already holds
            self.logout()

        try:
            account = self.client.create_account(email, password, name, cancel=self.cancel)
        except BackendError as e:
            if e.kind == ErrorKind.ALREADY_EXISTS:
                logger.info("Account %s already exists, logging in instead", email)
                return self.login(email, password, current=None)
            log_error(e, "SessionManager.register", logger)
            raise

        self._create_session(email, password)
        return User.from_account(account)

    def login(self, email: str, password: str, current=_UNRESOLVED) -> Optional[User]:
        if current is _UNRESOLVED:
            current = self.get_current_session()
        if current is not None:
            return current

        try:
            self._create_session(email, password)
        except BackendError as e:
            if e.kind == ErrorKind.SESSION_ACTIVE:
                logger.info("Session already active for %s, fetching current user", email)
                return self.get_current_session()
            log_error(e, "SessionManager.login", logger)
            raise
        return self.get_current_session()

    def _create_session(self, email: str, password: str) -> None:
        self.client.create_email_session(email, password, cancel=self.cancel)

    def logout(self) -> bool:
        try:
            self.client.delete_session("current", cancel=self.cancel)
        except BackendError as e:
            if e.kind in ANONYMOUS_KINDS:
                self.client.session_secret = None
                return True
            log_error(e, "SessionManager.logout", logger)
            return False
        return True


class SessionContext:
    """The caller's session belief for one request.

    ``resolve()`` asks Appwrite once and reuses the answer until a login,
    registration or logout replaces it. Listeners are told about every change.
    """

    def __init__(self, manager: SessionManager):
        self.manager = manager
        self._state: Optional[SessionState] = None
        self._listeners: List[SessionListener] = []

    @property
    def session_secret(self) -> Optional[str]:
        return self.manager.client.session_secret

    def resolve(self) -> SessionState:
        if self._state is None:
            self._state = SessionState.for_user(self.manager.get_current_session())
        return self._state

    @property
    def state(self) -> SessionState:
        return self.resolve()

    @property
    def user(self) -> Optional[User]:
        return self.resolve().user

    def invalidate(self) -> None:
        self._state = None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, state: SessionState) -> SessionState:
        changed = state != self._state
        self._state = state
        if changed:
            for listener in list(self._listeners):
                listener(state)
        return state

    def login(self, email: str, password: str) -> SessionState:
        user = self.manager.login(email, password, current=self.resolve().user)
        return self._publish(SessionState.for_user(user))

    def register(self, email: str, password: str, name: str) -> SessionState:
        user = self.manager.register(email, password, name, current=self.resolve().user)
        return self._publish(SessionState.for_user(user))

    def logout(self) -> bool:
        ok = self.manager.logout()
        if ok:
            self._publish(SessionState.anonymous())
        return ok
