"""Package logger. One session id per process, stamped on every record."""
from __future__ import annotations

import logging
import sys
import uuid

from filedrop.config import settings

_SESSION_ID = uuid.uuid4().hex[:8]


def get_session_id() -> str:
    """Return the id of the current process session."""
    return _SESSION_ID


class _SessionFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _SESSION_ID
        return True


def setup_logging(level: str | None = None) -> logging.Logger:
    log = logging.getLogger("filedrop")
    log.setLevel((level or settings.LOG_LEVEL).upper())
    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.addFilter(_SessionFilter())
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] [%(session_id)s] %(name)s: %(message)s"
            )
        )
        log.addHandler(handler)
    return log


logger = setup_logging()
