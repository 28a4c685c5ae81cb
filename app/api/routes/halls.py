import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_current_user, get_db
from app.core.errors import BookingError, raise_http
from app.models.user import User
from app.schemas.hall import (
    BlockedDateCreate,
    BlockedDateOut,
    DateAvailabilityOut,
    HallAvailabilityOut,
)
from app.services import availability

router = APIRouter(prefix="/halls", tags=["Halls"])


# =====================================================================
# HALL AVAILABILITY (public)
# =====================================================================
@router.get("/{hall_id}/availability", response_model=HallAvailabilityOut)
def hall_availability(hall_id: int, db: Session = Depends(get_db)):
    try:
        return availability.get_hall_availability(db, hall_id)
    except BookingError as e:
        raise_http(e)


@router.get("/{hall_id}/availability/{day}", response_model=DateAvailabilityOut)
def hall_date_availability(hall_id: int, day: datetime.date, db: Session = Depends(get_db)):
    try:
        availability.get_hall(db, hall_id)
    except BookingError as e:
        raise_http(e)

    return {
        "hall_id": hall_id,
        "date": day,
        "bookable": availability.is_date_bookable(db, hall_id, day),
    }


# =====================================================================
# BLOCK A DATE (owner / admin)
# =====================================================================
@router.post("/{hall_id}/block-date", response_model=BlockedDateOut, status_code=201)
def block_hall_date(
    hall_id: int,
    data: BlockedDateCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return availability.block_date(db, user, hall_id, data.date, data.reason)
    except BookingError as e:
        raise_http(e)


# =====================================================================
# UNBLOCK A DATE (owner / admin)
# =====================================================================
@router.delete("/blocked-dates/{blocked_date_id}")
def unblock_hall_date(
    blocked_date_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        availability.unblock_date(db, user, blocked_date_id)
    except BookingError as e:
        raise_http(e)

    return {"message": "Date unblocked"}
