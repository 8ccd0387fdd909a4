"""
Pydantic Schemas — Request & Response models for API validation.

Wire names are camelCase (``totalOrderAmount``, ``hasPaid``); Python code
uses the snake_case field names.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from order_splitter.utils.validators import validate_url, clean_text


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ──────────────── Commands ────────────────

class SessionCreateRequest(CamelModel):
    total_order_amount: Decimal = Field(..., ge=0, allow_inf_nan=False, description="Total order amount")
    tax_percentage: Decimal = Field(Decimal("0"), ge=0, le=100, allow_inf_nan=False)
    service_percentage: Decimal = Field(Decimal("0"), ge=0, le=100, allow_inf_nan=False)
    delivery_fee: Decimal = Field(Decimal("0"), ge=0, allow_inf_nan=False)
    number_of_friends: int = Field(1, ge=1, description="Expected number of friends")
    insta_pay_url: str = Field("", alias="instaPayURL", description="InstaPay payment link")

    @field_validator("insta_pay_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        if value and not validate_url(value):
            raise ValueError("InstaPay URL must be a valid URL")
        return value


class ProductIn(CamelModel):
    product_name: str = Field(..., min_length=1, max_length=200)
    unit_price: Decimal = Field(..., ge=0, allow_inf_nan=False)
    quantity: int = Field(..., ge=1)

    @field_validator("product_name", mode="before")
    @classmethod
    def _strip(cls, value):
        return clean_text(value)


class FriendJoinRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    products: List[ProductIn] = Field(..., min_length=1, description="At least one product is required")
    payment_method: bool = Field(..., description="true for InstaPay, false for cash")

    @field_validator("name", mode="before")
    @classmethod
    def _strip(cls, value):
        return clean_text(value)


class PaymentUpdateRequest(CamelModel):
    has_paid: bool


# ──────────────── Responses ────────────────

class ProductOut(CamelModel):
    product_name: str
    unit_price: float
    quantity: int


class FriendOut(CamelModel):
    id: str
    name: str
    products: List[ProductOut]
    payment_method: bool
    subtotal: float
    tax_amount: float
    service_amount: float
    delivery_share: float
    total_amount: float
    has_paid: bool
    joined_at: Optional[datetime] = None


class FriendSummaryOut(FriendOut):
    payment_method: str  # "InstaPay" | "Cash"


class SessionOut(CamelModel):
    session_id: str
    session_link: Optional[str] = None
    total_order_amount: float
    tax_percentage: float
    service_percentage: float
    delivery_fee: float
    number_of_friends: int
    insta_pay_url: str = Field("", alias="instaPayURL")
    bill_image: str = ""
    created_at: Optional[datetime] = None


class SessionDetailOut(SessionOut):
    friends: List[FriendOut] = []


class SessionCreatedResponse(BaseModel):
    message: str = "Session created successfully"
    session: SessionOut


class SessionDetailResponse(BaseModel):
    session: SessionDetailOut


class FriendAddedResponse(BaseModel):
    message: str = "Friend added successfully"
    friend: FriendOut


class SummaryOut(CamelModel):
    session_id: str
    total_order_amount: float
    total_paid_insta_pay: float
    total_paid_cash: float
    total_unpaid: float
    friends_count: int
    expected_friends_count: int
    bill_image: str = ""
    friends: List[FriendSummaryOut] = []


class SummaryResponse(BaseModel):
    summary: SummaryOut


class PaymentStatusOut(CamelModel):
    id: str
    name: str
    total_amount: float
    payment_method: str
    has_paid: bool


class PaymentUpdatedResponse(BaseModel):
    message: str = "Payment status updated successfully"
    friend: PaymentStatusOut


# ──────────────── Generic ────────────────

class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[List[dict]] = None
