"""Logging setup for AgriConnect backend.

All loggers live under the ``agriconnect`` namespace so a single call to
:func:`configure_logging` controls the whole service.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the ``agriconnect`` root logger once."""
    global _configured
    root = logging.getLogger("agriconnect")
    root.setLevel(level.upper())
    if _configured:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger, namespacing bare names under ``agriconnect``."""
    if not name.startswith("agriconnect"):
        name = f"agriconnect.{name}"
    return logging.getLogger(name)


_auth_logger = get_logger("agriconnect.auth.events")
_job_logger = get_logger("agriconnect.jobs.events")


def log_auth_event(event: str, user_id: str | None, success: bool, detail: str | None = None) -> None:
    """Log a sign-up/sign-in/sign-out outcome."""
    outcome = "ok" if success else "failed"
    message = f"AUTH {event} | user={user_id} | {outcome}"
    if detail:
        message += f" | {detail}"
    if success:
        _auth_logger.info(message)
    else:
        _auth_logger.warning(message)


def log_job_event(action: str, record_id: str, actor_id: str | None, **fields) -> None:
    """Log a job or application state change."""
    extra = " | ".join(f"{k}={v}" for k, v in fields.items())
    message = f"JOB {action} | id={record_id} | actor={actor_id}"
    if extra:
        message += f" | {extra}"
    _job_logger.info(message)
