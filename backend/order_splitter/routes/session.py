"""
Session Routes — Lifecycle of a shared-bill session.
Handles: creation (with optional bill photo), lookup, friend join, summary,
payment status, soft delete.
"""
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from order_splitter.config import Settings
from order_splitter.database import get_db
from order_splitter.models.session import BillSession, Friend
from order_splitter.schemas.schemas import (
    ErrorResponse, FriendAddedResponse, FriendJoinRequest, FriendOut, FriendSummaryOut,
    MessageResponse, PaymentStatusOut, PaymentUpdateRequest, PaymentUpdatedResponse,
    ProductOut, SessionCreateRequest, SessionCreatedResponse, SessionDetailOut,
    SessionDetailResponse, SessionOut, SummaryOut, SummaryResponse,
)
from order_splitter.services.image_host import ImageHostService
from order_splitter.services.session_service import SessionService

router = APIRouter(
    prefix="/api/sessions",
    tags=["Sessions"],
    responses={
        400: {"model": ErrorResponse, "description": "Validation error"},
        404: {"model": ErrorResponse, "description": "Session not found"},
        500: {"model": ErrorResponse, "description": "Server error"},
    },
)


def get_image_host(request: Request) -> ImageHostService:
    """FastAPI dependency: the image host built at startup from settings."""
    return request.app.state.image_host


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def payment_label(payment_method: bool) -> str:
    return "InstaPay" if payment_method else "Cash"


# ──────────────── Presenters ────────────────

def _session_out(session: BillSession, model=SessionOut, **extra):
    return model(
        session_id=session.session_id,
        total_order_amount=session.total_order_amount,
        tax_percentage=session.tax_percentage,
        service_percentage=session.service_percentage,
        delivery_fee=session.delivery_fee,
        number_of_friends=session.number_of_friends,
        insta_pay_url=session.insta_pay_url or "",
        bill_image=session.bill_image or "",
        created_at=session.created_at,
        **extra,
    )


def _friend_out(friend: Friend, model=FriendOut, payment_method=None):
    return model(
        id=friend.id,
        name=friend.name,
        products=[
            ProductOut(product_name=p.product_name, unit_price=p.unit_price, quantity=p.quantity)
            for p in friend.products
        ],
        payment_method=friend.payment_method if payment_method is None else payment_method,
        subtotal=friend.subtotal,
        tax_amount=friend.tax_amount,
        service_amount=friend.service_amount,
        delivery_share=friend.delivery_share,
        total_amount=friend.total_amount,
        has_paid=friend.has_paid,
        joined_at=friend.joined_at,
    )


# ──────────────── Endpoints ────────────────

@router.post("", response_model=SessionCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_session(
    total_order_amount: Optional[str] = Form(None, alias="totalOrderAmount"),
    tax_percentage: Optional[str] = Form(None, alias="taxPercentage"),
    service_percentage: Optional[str] = Form(None, alias="servicePercentage"),
    delivery_fee: Optional[str] = Form(None, alias="deliveryFee"),
    number_of_friends: Optional[str] = Form(None, alias="numberOfFriends"),
    insta_pay_url: Optional[str] = Form(None, alias="instaPayURL"),
    bill_image: Optional[UploadFile] = File(None, alias="billImage"),
    db: Session = Depends(get_db),
    image_host: ImageHostService = Depends(get_image_host),
    settings: Settings = Depends(get_app_settings),
):
    """Create a new order splitting session, optionally with a bill photo."""
    raw = {
        "totalOrderAmount": total_order_amount,
        "taxPercentage": tax_percentage,
        "servicePercentage": service_percentage,
        "deliveryFee": delivery_fee,
        "numberOfFriends": number_of_friends,
        "instaPayURL": insta_pay_url,
    }
    # Blank form fields fall back to their defaults
    try:
        payload = SessionCreateRequest(**{k: v for k, v in raw.items() if v is not None and v.strip() != ""})
    except PydanticValidationError as exc:
        raise RequestValidationError(exc.errors())

    image_url = image_host.upload_file(bill_image)
    session = SessionService.create(db, payload, bill_image=image_url)

    return SessionCreatedResponse(
        session=_session_out(session, session_link=f"{settings.FRONTEND_URL.rstrip('/')}/session/{session.session_id}"),
    )


@router.get("/{session_id}", response_model=SessionDetailResponse)
def get_session(session_id: str, db: Session = Depends(get_db)):
    """Get session details with every friend who joined."""
    session = SessionService.get(db, session_id)
    return SessionDetailResponse(
        session=_session_out(
            session,
            model=SessionDetailOut,
            friends=[_friend_out(f) for f in session.friends],
        )
    )


@router.post(
    "/{session_id}/friends",
    response_model=FriendAddedResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Friends"],
)
def add_friend(session_id: str, payload: FriendJoinRequest, db: Session = Depends(get_db)):
    """Join a session with an item list; the friend's share is computed now."""
    friend = SessionService.add_friend(db, session_id, payload)
    return FriendAddedResponse(friend=_friend_out(friend))


@router.get("/{session_id}/summary", response_model=SummaryResponse)
def get_session_summary(session_id: str, db: Session = Depends(get_db)):
    """Payment totals by method and paid/unpaid state, plus the bill image."""
    session, summary = SessionService.summary(db, session_id)
    return SummaryResponse(
        summary=SummaryOut(
            session_id=session.session_id,
            total_order_amount=summary.total_order_amount,
            total_paid_insta_pay=summary.total_paid_insta_pay,
            total_paid_cash=summary.total_paid_cash,
            total_unpaid=summary.total_unpaid,
            friends_count=summary.friends_count,
            expected_friends_count=summary.expected_friends_count,
            bill_image=session.bill_image or "",
            friends=[
                _friend_out(f, model=FriendSummaryOut, payment_method=payment_label(f.payment_method))
                for f in session.friends
            ],
        )
    )


@router.patch(
    "/{session_id}/friends/{friend_id}/payment",
    response_model=PaymentUpdatedResponse,
    tags=["Friends"],
)
def update_payment_status(
    session_id: str,
    friend_id: str,
    payload: PaymentUpdateRequest,
    db: Session = Depends(get_db),
):
    """Update a friend's payment status."""
    friend = SessionService.update_payment_status(db, session_id, friend_id, payload.has_paid)
    return PaymentUpdatedResponse(
        friend=PaymentStatusOut(
            id=friend.id,
            name=friend.name,
            total_amount=friend.total_amount,
            payment_method=payment_label(friend.payment_method),
            has_paid=friend.has_paid,
        )
    )


@router.delete("/{session_id}", response_model=MessageResponse)
def delete_session(session_id: str, db: Session = Depends(get_db)):
    """Delete a session (soft delete)."""
    SessionService.delete(db, session_id)
    return MessageResponse(message="Session deleted successfully")
