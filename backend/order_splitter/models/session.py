"""
Session Model — One shared-bill splitting event and the friends who joined it.
Maps to the 'sessions', 'friends' and 'products' tables.

Ownership is exclusive: a BillSession owns its Friends, a Friend owns its
Products. Children are ordered by join/entry position.
"""
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Column, String, DateTime, Integer, Boolean, ForeignKey, UniqueConstraint,
)
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import relationship

from order_splitter.database import Base


class DecimalText(TypeDecorator):
    """Money stored as the exact text of a Decimal, so frozen shares read back unchanged."""

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


MONEY = DecimalText()


def _new_id() -> str:
    return str(uuid.uuid4())


class BillSession(Base):
    __tablename__ = "sessions"

    session_id = Column(String(36), primary_key=True, default=_new_id, index=True)

    total_order_amount = Column(MONEY, nullable=False)
    tax_percentage = Column(MONEY, nullable=False, default=0)
    service_percentage = Column(MONEY, nullable=False, default=0)
    delivery_fee = Column(MONEY, nullable=False, default=0)
    number_of_friends = Column(Integer, nullable=False, default=1)  # expected, not joined
    friends_count = Column(Integer, nullable=False, default=0)  # seats taken, bumped atomically on join

    insta_pay_url = Column(String(2048), nullable=False, default="")
    bill_image = Column(String(2048), nullable=False, default="")

    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    friends = relationship(
        "Friend",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="Friend.position",
    )

    def find_friend(self, friend_id: str):
        for friend in self.friends:
            if friend.id == friend_id:
                return friend
        return None


class Friend(Base):
    __tablename__ = "friends"

    id = Column(String(36), primary_key=True, default=_new_id)
    session_id = Column(String(36), ForeignKey("sessions.session_id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    name = Column(String(100), nullable=False)
    name_key = Column(String(100), nullable=False)  # lower-cased name

    payment_method = Column(Boolean, nullable=False, default=False)  # True = InstaPay, False = cash

    # Frozen at join time
    subtotal = Column(MONEY, nullable=False, default=0)
    tax_amount = Column(MONEY, nullable=False, default=0)
    service_amount = Column(MONEY, nullable=False, default=0)
    delivery_share = Column(MONEY, nullable=False, default=0)
    total_amount = Column(MONEY, nullable=False, default=0)

    has_paid = Column(Boolean, nullable=False, default=False)
    joined_at = Column(DateTime, default=datetime.utcnow)

    session = relationship("BillSession", back_populates="friends")
    products = relationship(
        "Product",
        back_populates="friend",
        cascade="all, delete-orphan",
        order_by="Product.position",
    )

    __table_args__ = (
        UniqueConstraint("session_id", "name_key", name="uq_friend_session_name"),
    )


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    friend_id = Column(String(36), ForeignKey("friends.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    product_name = Column(String(200), nullable=False)
    unit_price = Column(MONEY, nullable=False)
    quantity = Column(Integer, nullable=False)

    friend = relationship("Friend", back_populates="products")
