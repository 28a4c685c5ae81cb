from datetime import date

from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, UnauthorizedError, ValidationError
from app.core.logging_config import get_logger
from app.models.booking import Booking
from app.models.enums import ACTIVE_STATUSES, UserRole
from app.models.hall import Hall
from app.models.hall_blocked_date import HallBlockedDate
from app.models.user import User
from app.models.venue import Venue
from app.utils.dates import utcnow

logger = get_logger("booking")


# ---------------------------------------------------------------------
# LOOKUPS
# ---------------------------------------------------------------------
def get_hall(db: Session, hall_id: int) -> Hall:
    hall = db.query(Hall).filter(Hall.id == hall_id).first()
    if not hall:
        raise NotFoundError("Hall not found")
    return hall


def ensure_hall_manager(db: Session, user: User, hall: Hall):
    """Only an admin or the venue_holder who owns the hall's venue may manage it."""
    if user.role == UserRole.ADMIN:
        return
    if user.role == UserRole.VENUE_HOLDER:
        venue = db.query(Venue).filter(Venue.id == hall.venue_id).first()
        if venue and venue.owner_user_id == user.id:
            return
        raise UnauthorizedError("Not your venue")
    raise UnauthorizedError("Not authorized")


# ---------------------------------------------------------------------
# BOOKED / BLOCKED DATES
# ---------------------------------------------------------------------
def get_hall_booked_dates(db: Session, hall_id: int) -> list[str]:
    """Every ISO date held by a not-yet-finished, not-cancelled booking on the hall."""
    bookings = db.query(Booking).filter(
        Booking.hall_id == hall_id,
        Booking.status.in_(ACTIVE_STATUSES),
    ).all()

    booked = set()
    for booking in bookings:
        booked.update(booking.covered_dates())

    return sorted(d.isoformat() for d in booked)


def get_hall_blocked_dates(db: Session, hall_id: int) -> list[HallBlockedDate]:
    return (
        db.query(HallBlockedDate)
        .filter(HallBlockedDate.hall_id == hall_id)
        .order_by(HallBlockedDate.date)
        .all()
    )


def get_hall_availability(db: Session, hall_id: int) -> dict:
    get_hall(db, hall_id)

    blocked = get_hall_blocked_dates(db, hall_id)

    return {
        "hall_id": hall_id,
        "booked_dates": get_hall_booked_dates(db, hall_id),
        "blocked_dates": [
            {"id": b.id, "date": b.date.isoformat(), "reason": b.reason}
            for b in blocked
        ],
    }


def is_date_blocked(db: Session, hall_id: int, day: date) -> bool:
    blocked = db.query(HallBlockedDate.id).filter(
        HallBlockedDate.hall_id == hall_id,
        HallBlockedDate.date == day,
    ).first()

    return blocked is not None


def is_date_bookable(db: Session, hall_id: int, day: date, today: date | None = None) -> bool:
    """Free for a new request: not in the past, not booked, not blocked."""
    today = today or utcnow().date()
    if day < today:
        return False
    if day.isoformat() in get_hall_booked_dates(db, hall_id):
        return False
    return not is_date_blocked(db, hall_id, day)


# ---------------------------------------------------------------------
# BLOCK / UNBLOCK
# ---------------------------------------------------------------------
def block_date(db: Session, user: User, hall_id: int, day: date, reason: str | None = None) -> HallBlockedDate:
    hall = get_hall(db, hall_id)
    ensure_hall_manager(db, user, hall)

    existing = db.query(HallBlockedDate).filter(
        HallBlockedDate.hall_id == hall_id,
        HallBlockedDate.date == day,
    ).first()
    if existing:
        raise ValidationError("Date is already blocked")

    blocked = HallBlockedDate(hall_id=hall_id, date=day, reason=reason or None)
    db.add(blocked)
    db.commit()
    db.refresh(blocked)

    logger.info(f"Date Blocked | Hall={hall_id} | Date={day.isoformat()} | By={user.id}")

    return blocked


def unblock_date(db: Session, user: User, blocked_date_id: int):
    blocked = db.query(HallBlockedDate).filter(HallBlockedDate.id == blocked_date_id).first()
    if not blocked:
        raise NotFoundError("Blocked date not found")

    hall = get_hall(db, blocked.hall_id)
    ensure_hall_manager(db, user, hall)

    day = blocked.date
    db.delete(blocked)
    db.commit()

    logger.info(f"Date Unblocked | Hall={hall.id} | Date={day.isoformat()} | By={user.id}")
