"""
Session Store — Durable record store for bill sessions, keyed by session id.
Soft-deleted sessions are hidden unless explicitly requested.
"""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from order_splitter.exceptions import DuplicateName, PersistenceError
from order_splitter.models.session import BillSession, Friend

logger = logging.getLogger(__name__)


class SessionStore:
    """Thin repository over the SQLAlchemy unit of work."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_key(self, session_id: str, include_inactive: bool = False) -> Optional[BillSession]:
        """Fetch a session with its friends and their products.

        Args:
            session_id: Session identifier.
            include_inactive: Also return soft-deleted sessions.
        """
        query = (
            self.db.query(BillSession)
            .options(selectinload(BillSession.friends).selectinload(Friend.products))
            .filter(BillSession.session_id == session_id)
            .populate_existing()
        )
        if not include_inactive:
            query = query.filter(BillSession.is_active.is_(True))
        try:
            return query.first()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Session lookup failed for %s", session_id)
            raise PersistenceError("Session store unavailable") from exc

    def reserve_seat(self, session_id: str) -> bool:
        """Take one friend seat in a single conditional UPDATE.

        The UPDATE holds the write lock (row lock on PostgreSQL, database
        lock on SQLite) until the caller commits or rolls back, so
        concurrent joins on the same session run one after the other.

        Returns:
            False when the session is full, unknown or soft-deleted.
        """
        statement = (
            update(BillSession)
            .where(
                BillSession.session_id == session_id,
                BillSession.is_active.is_(True),
                BillSession.friends_count < BillSession.number_of_friends,
            )
            .values(friends_count=BillSession.friends_count + 1)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(statement)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Seat reservation failed for %s", session_id)
            raise PersistenceError("Session store unavailable") from exc
        return result.rowcount == 1

    def insert(self, session: BillSession) -> BillSession:
        self.db.add(session)
        return self.save(session)

    def save(self, session: BillSession) -> BillSession:
        """Upsert the session and its children, refreshing ``updated_at``."""
        session.updated_at = datetime.utcnow()
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if "uq_friend_session_name" in str(exc.orig) or "friends.session_id, friends.name_key" in str(exc.orig):
                raise DuplicateName() from exc
            logger.exception("Integrity error saving session %s", session.session_id)
            raise PersistenceError("Failed to save session") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Failed to save session %s", session.session_id)
            raise PersistenceError("Failed to save session") from exc
        self.db.refresh(session)
        return session
