"""Service for cleanup operations."""
import logging
import threading
import time

from sqlalchemy.exc import SQLAlchemyError

from learncheck.config import SESSION_CLEANUP_INTERVAL_SECONDS, SESSION_RETENTION_DAYS
from learncheck.services.session_store import SessionStore
from learncheck.utils.time_utils import days_ago

logger = logging.getLogger(__name__)


def cleanup_stale_sessions(
    store: SessionStore | None = None,
    retention_days: int = SESSION_RETENTION_DAYS,
) -> int:
    """Remove quiz sessions not touched within the retention period."""
    if retention_days <= 0:
        return 0

    store = store or SessionStore()
    try:
        deleted = store.delete_older_than(days_ago(retention_days))
    except SQLAlchemyError as e:
        logger.error(f"Failed to cleanup stale sessions: {e}")
        return 0
    if deleted > 0:
        logger.info(f"Cleaned up {deleted} stale quiz sessions")
    return deleted


def schedule_sessions_cleanup() -> None:
    """Schedule periodic cleanup of stale sessions."""

    def _worker() -> None:
        # Initial delay before first cleanup
        time.sleep(60)
        while True:
            cleanup_stale_sessions()
            time.sleep(SESSION_CLEANUP_INTERVAL_SECONDS)

    thread = threading.Thread(
        target=_worker,
        name="sessions_cleanup",
        daemon=True,
    )
    thread.start()
