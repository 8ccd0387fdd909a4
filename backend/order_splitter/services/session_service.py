"""
Session Service — Bill session lifecycle and friend admission.
Handles: creation, lookup, friend join, summary, payment status, soft delete.
"""
import logging
from datetime import datetime
from typing import Tuple

from sqlalchemy.orm import Session

from order_splitter.exceptions import CapacityExceeded, DuplicateName, FriendNotFound, SessionNotFound
from order_splitter.models.session import BillSession, Friend, Product
from order_splitter.schemas.schemas import FriendJoinRequest, SessionCreateRequest
from order_splitter.services.fee_calculator import FeeCalculator
from order_splitter.services.session_aggregator import SessionAggregator, SessionSummary
from order_splitter.services.session_store import SessionStore
from order_splitter.utils.validators import name_key

logger = logging.getLogger(__name__)


class SessionService:
    """Business rules around a shared bill. Routes stay thin on top of this."""

    @staticmethod
    def create(db: Session, payload: SessionCreateRequest, bill_image: str = "") -> BillSession:
        session = BillSession(
            total_order_amount=payload.total_order_amount,
            tax_percentage=payload.tax_percentage,
            service_percentage=payload.service_percentage,
            delivery_fee=payload.delivery_fee,
            number_of_friends=payload.number_of_friends,
            insta_pay_url=payload.insta_pay_url,
            bill_image=bill_image,
            is_active=True,
        )
        SessionStore(db).insert(session)
        logger.info(
            "Session %s created (total=%s, friends=%s, image=%s)",
            session.session_id, session.total_order_amount, session.number_of_friends, bool(bill_image),
        )
        return session

    @staticmethod
    def get(db: Session, session_id: str) -> BillSession:
        session = SessionStore(db).find_by_key(session_id)
        if session is None:
            raise SessionNotFound()
        return session

    @staticmethod
    def add_friend(db: Session, session_id: str, payload: FriendJoinRequest) -> Friend:
        """Admit a friend into a session and freeze their share.

        A seat is taken with one conditional UPDATE before anything else,
        which also holds the write lock through the name check and insert.
        Any rejection rolls the seat back. The (session, name) unique key
        backs the name check.

        Raises:
            SessionNotFound: Unknown or soft-deleted session.
            CapacityExceeded: Expected friend count already reached.
            DuplicateName: Name already taken, ignoring case.
        """
        store = SessionStore(db)
        if not store.reserve_seat(session_id):
            db.rollback()
            session = store.find_by_key(session_id)
            if session is None:
                raise SessionNotFound()
            logger.warning("Session %s is full (%s friends)", session_id, session.number_of_friends)
            raise CapacityExceeded()

        session = store.find_by_key(session_id)
        if session is None:
            db.rollback()
            raise SessionNotFound()

        key = name_key(payload.name)
        if any(f.name_key == key for f in session.friends):
            logger.warning("Duplicate friend name %r in session %s", payload.name, session_id)
            db.rollback()
            raise DuplicateName()

        breakdown = FeeCalculator.calculate(
            payload.products,
            tax_percentage=session.tax_percentage,
            service_percentage=session.service_percentage,
            delivery_fee=session.delivery_fee,
            number_of_friends=session.number_of_friends,
        )

        friend = Friend(
            position=len(session.friends),
            name=payload.name,
            name_key=key,
            payment_method=payload.payment_method,
            subtotal=breakdown.subtotal,
            tax_amount=breakdown.tax_amount,
            service_amount=breakdown.service_amount,
            delivery_share=breakdown.delivery_share,
            total_amount=breakdown.total_amount,
            has_paid=False,
            joined_at=datetime.utcnow(),
            products=[
                Product(
                    position=i,
                    product_name=p.product_name,
                    unit_price=p.unit_price,
                    quantity=p.quantity,
                )
                for i, p in enumerate(payload.products)
            ],
        )
        session.friends.append(friend)
        store.save(session)

        logger.info("Friend %r joined session %s (total=%s)", friend.name, session_id, breakdown.total_amount)
        return friend

    @staticmethod
    def summary(db: Session, session_id: str) -> Tuple[BillSession, SessionSummary]:
        session = SessionService.get(db, session_id)
        summary = SessionAggregator.summarize(
            session.friends,
            total_order_amount=session.total_order_amount,
            expected_friends_count=session.number_of_friends,
        )
        return session, summary

    @staticmethod
    def update_payment_status(db: Session, session_id: str, friend_id: str, has_paid: bool) -> Friend:
        """Set a friend's paid flag. Summaries pick it up on their next read."""
        store = SessionStore(db)
        session = store.find_by_key(session_id)
        if session is None:
            raise SessionNotFound()

        friend = session.find_friend(friend_id)
        if friend is None:
            raise FriendNotFound()

        friend.has_paid = has_paid
        store.save(session)
        logger.info("Friend %s in session %s marked has_paid=%s", friend_id, session_id, has_paid)
        return friend

    @staticmethod
    def delete(db: Session, session_id: str) -> None:
        """Soft delete: the record stays, lookups stop returning it."""
        store = SessionStore(db)
        session = store.find_by_key(session_id, include_inactive=True)
        if session is None:
            raise SessionNotFound()

        session.is_active = False
        store.save(session)
        logger.info("Session %s deleted", session_id)
