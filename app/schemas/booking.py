from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional

from app.models.enums import BookingStatus, PaymentStatus


class BookingBase(BaseModel):
    hall_id: int
    start_date: date
    end_date: Optional[date] = None
    guests: Optional[int] = Field(default=None, ge=1)


class BookingCreate(BookingBase):
    venue_id: Optional[int] = None
    # Quoted total (hall price plus any fees); defaults to the hall price
    total_amount: Optional[int] = Field(default=None, ge=0)


class BookingStatusUpdate(BaseModel):
    status: str
    cancellation_reason: Optional[str] = None


class BookingOut(BookingBase):
    id: int
    venue_id: int
    planner_user_id: int
    status: BookingStatus

    total_amount: int
    deposit_amount: int
    balance_amount: int
    deposit_paid: bool
    balance_paid: bool
    payment_status: PaymentStatus

    cancellation_reason: Optional[str] = None
    accepted_at: Optional[datetime] = None
    expiry_notification_sent: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ExpiryRunOut(BaseModel):
    warned: int
    expired: int
