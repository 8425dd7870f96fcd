from app.backend.cancellation import CancelToken
from app.backend.client import AppwriteClient

__all__ = ["AppwriteClient", "CancelToken"]
