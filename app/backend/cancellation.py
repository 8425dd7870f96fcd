import threading

from app.core.errors import BackendError, ErrorKind


class CancelToken:
    """Per-request cancellation flag.

    A route cancels its token when the caller goes away; the client checks it
    before sending and again before handing back a result.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise BackendError("Request was cancelled", kind=ErrorKind.CANCELLED)
