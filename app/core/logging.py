"""
Logging setup.

Every record carries the service name and the session id of the turn
being handled ("-" outside a session). Routes and orchestrators call
bind_session() once the session id is known.
"""

import logging
import sys
from contextvars import ContextVar

from app.core.config import settings


LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] [%(service)s session=%(session_id)s] %(message)s"

_current_session: ContextVar[str] = ContextVar("current_session", default="-")


def bind_session(session_id: str) -> None:
    """Tag log records emitted by the current request with session_id."""
    _current_session.set(session_id)


class SessionContextFilter(logging.Filter):
    """Adds `service` and `session_id` attributes to each record."""

    def __init__(self, service_name: str):
        super().__init__()
        self.service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service_name
        record.session_id = _current_session.get()
        return True


def configure_logging() -> None:
    """
    Configure console logging for the application.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level.upper())

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(SessionContextFilter(settings.service_name))
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    root_logger.addHandler(handler)

    # Per-request access lines and SDK wire chatter
    for noisy in ("uvicorn.access", "httpx", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
