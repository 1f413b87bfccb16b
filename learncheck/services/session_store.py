"""Service layer for persisted quiz sessions using the SQL database."""
import logging
from dataclasses import dataclass
from datetime import datetime

from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from learncheck.config import SESSION_SCHEMA_VERSION
from learncheck.database import SessionLocal
from learncheck.models.db.quiz_session import QuizSessionRecord
from learncheck.models.quiz import QuizSession
from learncheck.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionKey:
    """Identity of a stored session."""

    user_id: str
    tutorial_id: str

    def __str__(self) -> str:
        return f"user={self.user_id!r} tutorial={self.tutorial_id!r}"


class SessionStore:
    """
    Key/value store of quiz sessions.
    Every write replaces the whole blob in a single transaction.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    def read(self, key: SessionKey) -> QuizSession | None:
        """
        Load the session stored under `key`.
        Blobs with another schema version or failing validation are
        treated as absent.
        """
        with self._session_factory() as db:
            record = db.get(QuizSessionRecord, (key.user_id, key.tutorial_id))
            if record is None:
                return None
            schema_version = record.schema_version
            payload = record.payload

        if schema_version != SESSION_SCHEMA_VERSION or payload is None:
            logger.warning(
                "Ignoring stored session for %s: schema version %s", key, schema_version
            )
            return None
        try:
            session = QuizSession.model_validate(payload)
        except ValidationError as e:
            logger.warning("Ignoring invalid stored session for %s: %s", key, e)
            return None
        if session.userId != key.user_id or session.tutorialId != key.tutorial_id:
            logger.warning("Ignoring stored session for %s: identity mismatch", key)
            return None
        return session

    def write(self, key: SessionKey, session: QuizSession) -> None:
        """Store `session` under `key`, replacing any previous blob."""
        with self._session_factory() as db:
            record = db.get(QuizSessionRecord, (key.user_id, key.tutorial_id))
            if record is None:
                record = QuizSessionRecord(user_id=key.user_id, tutorial_id=key.tutorial_id)
                db.add(record)
            record.schema_version = session.version
            record.is_completed = session.isCompleted
            record.payload = session.model_dump(mode="json")
            record.updated_at = utc_now()
            db.commit()

    def clear(self, key: SessionKey) -> bool:
        """Delete the session stored under `key`."""
        with self._session_factory() as db:
            record = db.get(QuizSessionRecord, (key.user_id, key.tutorial_id))
            if record is None:
                return False
            db.delete(record)
            db.commit()
            return True

    def list_keys(self) -> list[SessionKey]:
        """List keys of all stored sessions."""
        with self._session_factory() as db:
            rows = db.execute(
                select(QuizSessionRecord.user_id, QuizSessionRecord.tutorial_id).order_by(
                    QuizSessionRecord.user_id, QuizSessionRecord.tutorial_id
                )
            ).all()
        return [SessionKey(user_id=row[0], tutorial_id=row[1]) for row in rows]

    def delete_older_than(self, cutoff: datetime) -> int:
        """Remove sessions not updated since `cutoff`."""
        with self._session_factory() as db:
            result = db.execute(
                delete(QuizSessionRecord).where(QuizSessionRecord.updated_at < cutoff)
            )
            db.commit()
            return result.rowcount or 0
