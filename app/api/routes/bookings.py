from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_user, get_db
from app.core.errors import BookingError, raise_http
from app.models.user import User
from app.schemas.booking import BookingCreate, BookingOut, BookingStatusUpdate
from app.services import booking_lifecycle

router = APIRouter(prefix="/bookings", tags=["Bookings"])


# ---------------------------------------------------------------------
# CREATE BOOKING
# ---------------------------------------------------------------------
@router.post("/", response_model=BookingOut, status_code=201)
def create_booking(
    data: BookingCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return booking_lifecycle.create_booking(
            db,
            user,
            hall_id=data.hall_id,
            start_date=data.start_date,
            end_date=data.end_date,
            venue_id=data.venue_id,
            guests=data.guests,
            total_amount=data.total_amount,
        )
    except BookingError as e:
        raise_http(e)


# ---------------------------------------------------------------------
# PLANNER: MY BOOKINGS
# ---------------------------------------------------------------------
@router.get("/my", response_model=list[BookingOut])
def my_bookings(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return booking_lifecycle.list_planner_bookings(db, user)


# ---------------------------------------------------------------------
# OWNER: BOOKINGS FOR MY VENUES
# ---------------------------------------------------------------------
@router.get("/owner", response_model=list[BookingOut])
def owner_bookings(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return booking_lifecycle.list_owner_bookings(db, user)
    except BookingError as e:
        raise_http(e)


# ---------------------------------------------------------------------
# BOOKING DETAIL
# ---------------------------------------------------------------------
@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return booking_lifecycle.get_booking_for_actor(db, user, booking_id)
    except BookingError as e:
        raise_http(e)


# ---------------------------------------------------------------------
# STATUS TRANSITION
# ---------------------------------------------------------------------
@router.patch("/{booking_id}/status", response_model=BookingOut)
def update_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return booking_lifecycle.transition_booking_status(
            db,
            user,
            booking_id,
            data.status,
            cancellation_reason=data.cancellation_reason,
        )
    except BookingError as e:
        raise_http(e)


# ---------------------------------------------------------------------
# RECORD PAYMENT
# ---------------------------------------------------------------------
@router.post("/{booking_id}/pay", response_model=BookingOut)
def pay_booking(booking_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return booking_lifecycle.record_payment(db, user, booking_id)
    except BookingError as e:
        raise_http(e)
