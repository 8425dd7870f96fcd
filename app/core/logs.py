import logging
from typing import Optional

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    global _configured
    if _configured:
        return
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=LOG_FORMAT)
    _configured = True


def log_error(error: BaseException, context: Optional[str] = None, logger: Optional[logging.Logger] = None) -> None:
    """Log an error with a ``[context]`` prefix. Silent in production."""
    if settings.is_production:
        return
    prefix = f"[{context}]" if context else "[Error]"
    (logger or logging.getLogger("app")).error("%s %s", prefix, error)
