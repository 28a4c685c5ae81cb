"""
Booking lifecycle: creation, status transitions and payment recording.

Every transition is validated in the same order: the booking must exist, the
target must be a known status, the actor must be allowed to request it, and
then the planner guards and the legal-transition rules apply. The status write
is committed before any message or notification goes out; side effects are
best effort and never undo the transition.
"""
from datetime import date, datetime

from sqlalchemy.orm import Session

from app.core.errors import (
    ConcurrentUpdateError,
    InvalidTransitionError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from app.core.logging_config import get_logger
from app.models.booking import Booking
from app.models.enums import BookingStatus, NotificationType, PaymentStatus, PAID_STATUSES, UserRole
from app.models.hall import Hall
from app.models.user import User
from app.models.venue import Venue
from app.services import notifications
from app.services.availability import is_date_blocked
from app.services.booking_store import get_booking, update_booking_status_with_data
from app.services.conflicts import decline_conflicting, has_conflict
from app.utils.dates import format_event_date, iter_days, to_naive_utc, utcnow
from app.utils.pricing import calculate_deposit_split

logger = get_logger("booking")
payment_logger = get_logger("payment")

OWNER_TARGETS = frozenset({
    BookingStatus.ACCEPTED,
    BookingStatus.CANCELLED,
    BookingStatus.CONFIRMED,
    BookingStatus.COMPLETED,
})

PLANNER_TARGETS = frozenset({
    BookingStatus.CANCELLED,
    BookingStatus.CANCELLATION_REQUESTED,
})

# Owner-side transitions: target -> statuses it may be entered from
OWNER_SOURCES = {
    BookingStatus.ACCEPTED: {BookingStatus.REQUESTED},
    BookingStatus.CONFIRMED: {
        BookingStatus.ACCEPTED,
        BookingStatus.PAID,
        BookingStatus.CANCELLATION_REQUESTED,
    },
    BookingStatus.COMPLETED: {BookingStatus.PAID, BookingStatus.CONFIRMED},
    BookingStatus.CANCELLED: {
        BookingStatus.REQUESTED,
        BookingStatus.ACCEPTED,
        BookingStatus.PAID,
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLATION_REQUESTED,
    },
}

TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})


# ---------------------------------------------------------------------
# LOOKUPS
# ---------------------------------------------------------------------
def _load_booking(db: Session, booking_id: int) -> Booking:
    booking = get_booking(db, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def _venue_owner_id(db: Session, booking: Booking) -> int | None:
    venue = db.query(Venue).filter(Venue.id == booking.venue_id).first()
    return venue.owner_user_id if venue else None


def parse_status(value) -> BookingStatus:
    try:
        return BookingStatus(value)
    except ValueError:
        raise InvalidTransitionError("Invalid status")


# ---------------------------------------------------------------------
# AUTHORIZATION (one handler per role)
# ---------------------------------------------------------------------
def _authorize_admin(db: Session, actor: User, booking: Booking, target: BookingStatus):
    # Admins act on the owner's behalf and share the owner's table
    if target not in OWNER_TARGETS:
        raise UnauthorizedError("Invalid status transition for venue owner")


def _authorize_venue_holder(db: Session, actor: User, booking: Booking, target: BookingStatus):
    if _venue_owner_id(db, booking) != actor.id:
        raise UnauthorizedError("Not authorized")
    if target not in OWNER_TARGETS:
        raise UnauthorizedError("Invalid status transition for venue owner")


def _authorize_planner(db: Session, actor: User, booking: Booking, target: BookingStatus):
    if booking.planner_user_id != actor.id:
        raise UnauthorizedError("Not authorized")
    if target not in PLANNER_TARGETS:
        raise UnauthorizedError("Invalid status transition for planner")


ROLE_AUTHORIZERS = {
    UserRole.ADMIN: _authorize_admin,
    UserRole.VENUE_HOLDER: _authorize_venue_holder,
    UserRole.PLANNER: _authorize_planner,
}


def authorize_transition(db: Session, actor: User, booking: Booking, target: BookingStatus):
    authorizer = ROLE_AUTHORIZERS.get(actor.role)
    if authorizer is None:
        raise UnauthorizedError("Not authorized")
    authorizer(db, actor, booking, target)


# ---------------------------------------------------------------------
# GUARDS
# ---------------------------------------------------------------------
def check_transition_rules(actor: User, booking: Booking, target: BookingStatus):
    current = booking.status

    if actor.role == UserRole.PLANNER:
        # No money captured yet is the only case a planner may cancel outright
        if target == BookingStatus.CANCELLED and (current in PAID_STATUSES or booking.deposit_paid):
            raise InvalidTransitionError(
                "Cannot cancel directly after payment. Please request cancellation instead."
            )
        if target == BookingStatus.CANCELLATION_REQUESTED and current not in (
            BookingStatus.ACCEPTED,
            BookingStatus.PAID,
            BookingStatus.CONFIRMED,
        ):
            raise InvalidTransitionError(
                "Cancellation request is only needed after the booking has been accepted or paid."
            )

    if current in TERMINAL_STATUSES:
        raise InvalidTransitionError(f"Booking is already {current.value}")

    allowed_sources = OWNER_SOURCES.get(target)
    if allowed_sources is not None and actor.role != UserRole.PLANNER and current not in allowed_sources:
        raise InvalidTransitionError(
            f"Cannot change booking from {current.value} to {target.value}"
        )


# =====================================================================
# CREATE BOOKING
# =====================================================================
def create_booking(
    db: Session,
    planner: User,
    hall_id: int,
    start_date: date,
    end_date: date | None = None,
    venue_id: int | None = None,
    guests: int | None = None,
    total_amount: int | None = None,
    today: date | None = None,
) -> Booking:
    if planner.role != UserRole.PLANNER:
        raise UnauthorizedError("Only planners can book halls")

    hall = db.query(Hall).filter(Hall.id == hall_id).first()
    if not hall:
        raise NotFoundError("Hall not found")
    if venue_id is not None and venue_id != hall.venue_id:
        raise NotFoundError("Hall not found for this venue")

    today = today or utcnow().date()

    # ---- DATE VALIDATIONS ----
    if start_date < today:
        raise ValidationError("Cannot book past dates")
    if end_date is not None and end_date < start_date:
        raise ValidationError("End date cannot be before start date")
    if end_date == start_date:
        end_date = None

    # ---- AVAILABILITY ----
    for day in iter_days(start_date, end_date):
        if is_date_blocked(db, hall.id, day):
            raise ValidationError(f"Hall is not available on {day.isoformat()}")

    if has_conflict(db, hall.id, start_date, end_date):
        raise ValidationError("Hall already booked for these dates")

    # ---- PRICE ----
    if total_amount is None:
        total_amount = hall.price
    try:
        deposit_amount, balance_amount = calculate_deposit_split(total_amount, hall.deposit_percentage)
    except ValueError as e:
        raise ValidationError(str(e))

    booking = Booking(
        venue_id=hall.venue_id,
        hall_id=hall.id,
        planner_user_id=planner.id,
        status=BookingStatus.REQUESTED,
        start_date=start_date,
        end_date=end_date,
        guests=guests,
        total_amount=total_amount,
        deposit_amount=deposit_amount,
        balance_amount=balance_amount,
        deposit_paid=False,
        balance_paid=False,
        payment_status=PaymentStatus.PENDING,
        expiry_notification_sent=False,
    )

    db.add(booking)
    db.commit()
    db.refresh(booking)

    logger.info(
        f"Booking Created | Booking={booking.id} | Planner={planner.id} | Hall={hall.id} | "
        f"Date={start_date.isoformat()} | Total={total_amount}"
    )

    _dispatch(_on_requested, db, booking, planner, None)

    return booking


# =====================================================================
# STATUS TRANSITION
# =====================================================================
def transition_booking_status(
    db: Session,
    actor: User,
    booking_id: int,
    status,
    cancellation_reason: str | None = None,
    now: datetime | None = None,
) -> Booking:
    booking = _load_booking(db, booking_id)
    target = parse_status(status)
    authorize_transition(db, actor, booking, target)
    check_transition_rules(actor, booking, target)

    if target == BookingStatus.ACCEPTED and has_conflict(
        db, booking.hall_id, booking.start_date, booking.end_date, exclude_booking_id=booking.id
    ):
        raise InvalidTransitionError("Hall already booked for these dates")

    previous = booking.status
    data = {}
    if cancellation_reason:
        data["cancellation_reason"] = cancellation_reason
    if target == BookingStatus.ACCEPTED:
        data["accepted_at"] = to_naive_utc(now) if now else utcnow()

    updated = update_booking_status_with_data(db, booking, target, expected_status=previous, **data)
    if updated is None:
        raise ConcurrentUpdateError("Booking status changed concurrently, please retry")

    logger.info(
        f"Booking Status | Booking={updated.id} | {previous.value} -> {target.value} | "
        f"By={actor.id} ({actor.role.value})"
    )

    # Competing requests are declined before any notice goes out
    if target == BookingStatus.ACCEPTED:
        _dispatch(_resolve_conflicts, db, updated, actor, None)

    handler = SIDE_EFFECTS.get(target)
    if handler:
        _dispatch(handler, db, updated, actor, cancellation_reason)

    return updated


# =====================================================================
# RECORD PAYMENT
# =====================================================================
def record_payment(db: Session, actor: User, booking_id: int) -> Booking:
    """Record the planner's deposit as received; the booking moves to `paid`."""
    booking = _load_booking(db, booking_id)

    if actor.role == UserRole.PLANNER:
        if booking.planner_user_id != actor.id:
            raise UnauthorizedError("Not authorized")
    elif actor.role != UserRole.ADMIN:
        raise UnauthorizedError("Only the planner can pay for this booking")

    if booking.status != BookingStatus.ACCEPTED:
        raise InvalidTransitionError("Only accepted bookings can be paid")

    updated = update_booking_status_with_data(
        db,
        booking,
        BookingStatus.PAID,
        expected_status=BookingStatus.ACCEPTED,
        deposit_paid=True,
        balance_paid=booking.balance_amount == 0,
        payment_status=PaymentStatus.COMPLETED,
    )
    if updated is None:
        raise ConcurrentUpdateError("Booking status changed concurrently, please retry")

    payment_logger.info(
        f"Payment Recorded | Booking={updated.id} | Deposit={updated.deposit_amount} | "
        f"Balance={updated.balance_amount} | By={actor.id}"
    )

    _dispatch(_on_paid, db, updated, actor, None)

    return updated


# =====================================================================
# READS
# =====================================================================
def get_booking_for_actor(db: Session, actor: User, booking_id: int) -> Booking:
    booking = _load_booking(db, booking_id)

    if actor.role == UserRole.PLANNER and booking.planner_user_id != actor.id:
        raise UnauthorizedError("Not authorized")
    if actor.role == UserRole.VENUE_HOLDER and _venue_owner_id(db, booking) != actor.id:
        raise UnauthorizedError("Not authorized")

    return booking


def list_planner_bookings(db: Session, planner: User) -> list[Booking]:
    return (
        db.query(Booking)
        .filter(Booking.planner_user_id == planner.id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )


def list_owner_bookings(db: Session, owner: User) -> list[Booking]:
    if owner.role not in (UserRole.VENUE_HOLDER, UserRole.ADMIN):
        raise UnauthorizedError("Venue owners only")

    query = db.query(Booking)
    if owner.role == UserRole.VENUE_HOLDER:
        query = query.join(Venue, Venue.id == Booking.venue_id).filter(Venue.owner_user_id == owner.id)

    return query.order_by(Booking.created_at.desc(), Booking.id.desc()).all()


# =====================================================================
# SIDE EFFECTS
# =====================================================================
def _dispatch(handler, db: Session, booking: Booking, actor: User, reason: str | None):
    try:
        handler(db, booking, actor, reason)
    except Exception:
        db.rollback()
        logger.exception(f"Side effects failed | Booking={booking.id} | Handler={handler.__name__}")


def _names(db: Session, booking: Booking):
    hall_name = booking.hall.name if booking.hall else "the hall"
    venue_title = booking.venue.title if booking.venue else "our venue"
    return hall_name, venue_title, format_event_date(booking.start_date)


def _on_requested(db, booking, actor, reason):
    owner_id = _venue_owner_id(db, booking)
    hall_name, venue_title, event_date = _names(db, booking)
    guest_info = f" for {booking.guests} guests" if booking.guests else ""

    notifications.create_message(
        db,
        booking_id=booking.id,
        from_user_id=actor.id,
        to_user_id=owner_id,
        body=(
            f"New booking request! {actor.name} has requested to book {hall_name} at {venue_title} "
            f"on {event_date}{guest_info}. Please review and approve or decline this booking."
        ),
    )
    notifications.create_notification(
        db,
        user_id=owner_id,
        type=NotificationType.BOOKING_REQUEST,
        title="New Booking Request",
        body=f"{actor.name} wants to book {hall_name} at {venue_title} on {event_date}",
        link_url="/owner/bookings",
    )


def _resolve_conflicts(db, booking, actor, reason):
    decline_conflicting(db, booking, actor.id)


def _on_accepted(db, booking, actor, reason):
    hall_name, venue_title, event_date = _names(db, booking)

    notifications.create_message(
        db,
        booking_id=booking.id,
        from_user_id=actor.id,
        to_user_id=booking.planner_user_id,
        body=(
            f"Great news! Your booking for {hall_name} at {venue_title} on {event_date} has been approved. "
            "Please complete your payment within 24 hours to secure your reservation. "
            "If payment is not received by then, the booking will automatically expire."
        ),
    )
    notifications.create_notification(
        db,
        user_id=booking.planner_user_id,
        type=NotificationType.BOOKING_ACCEPTED,
        title="Booking Approved!",
        body=(
            f"Your booking for {hall_name} at {venue_title} on {event_date} has been approved. "
            "Pay within 24 hours to confirm."
        ),
        link_url="/bookings",
    )


def _on_paid(db, booking, actor, reason):
    owner_id = _venue_owner_id(db, booking)
    hall_name, venue_title, event_date = _names(db, booking)
    payer = actor.name if actor.id == booking.planner_user_id else "The planner"

    notifications.create_message(
        db,
        booking_id=booking.id,
        from_user_id=actor.id,
        to_user_id=owner_id,
        body=(
            f"Payment received! {payer} has completed payment for {hall_name} at {venue_title} "
            f"on {event_date}. Please confirm the booking to finalise."
        ),
    )
    notifications.create_notification(
        db,
        user_id=owner_id,
        type=NotificationType.BOOKING_REQUEST,
        title="Payment Received",
        body=f"Payment completed for {hall_name} on {event_date}. Please confirm the booking.",
        link_url="/owner/bookings",
    )
    notifications.create_notification(
        db,
        user_id=booking.planner_user_id,
        type=NotificationType.BOOKING_ACCEPTED,
        title="Payment Successful",
        body=(
            f"Your payment for {hall_name} at {venue_title} on {event_date} was successful. "
            "Awaiting venue confirmation."
        ),
        link_url="/bookings",
    )


def _on_confirmed(db, booking, actor, reason):
    hall_name, venue_title, event_date = _names(db, booking)

    notifications.create_message(
        db,
        booking_id=booking.id,
        from_user_id=actor.id,
        to_user_id=booking.planner_user_id,
        body=(
            f"Your booking for {hall_name} at {venue_title} on {event_date} is now confirmed! "
            "Everything is set for your event. We look forward to hosting you."
        ),
    )
    notifications.create_notification(
        db,
        user_id=booking.planner_user_id,
        type=NotificationType.BOOKING_ACCEPTED,
        title="Booking Confirmed!",
        body=f"Your booking for {hall_name} at {venue_title} on {event_date} is now confirmed!",
        link_url="/bookings",
    )


def _on_cancelled(db, booking, actor, reason):
    hall_name, venue_title, event_date = _names(db, booking)
    by_planner = actor.role == UserRole.PLANNER
    target_user_id = _venue_owner_id(db, booking) if by_planner else booking.planner_user_id
    reason_text = f" Reason: {reason}" if reason else ""

    notifications.create_notification(
        db,
        user_id=target_user_id,
        type=NotificationType.BOOKING_CANCELLED,
        title="Booking Cancelled",
        body=f"Booking for {hall_name} at {venue_title} on {event_date} has been cancelled.{reason_text}",
        link_url="/owner/bookings" if by_planner else "/bookings",
    )


def _on_cancellation_requested(db, booking, actor, reason):
    owner_id = _venue_owner_id(db, booking)
    hall_name, venue_title, event_date = _names(db, booking)
    reason_text = f" Reason: {reason}" if reason else ""

    notifications.create_message(
        db,
        booking_id=booking.id,
        from_user_id=actor.id,
        to_user_id=owner_id,
        body=(
            f"{actor.name} has requested to cancel their booking for {hall_name} at {venue_title} "
            f"on {event_date}.{reason_text} Please review and approve or decline the cancellation."
        ),
    )
    notifications.create_notification(
        db,
        user_id=owner_id,
        type=NotificationType.BOOKING_CANCELLED,
        title="Cancellation Requested",
        body=f"{actor.name} has requested to cancel their booking for {hall_name} on {event_date}.",
        link_url="/owner/bookings",
    )


def _on_completed(db, booking, actor, reason):
    hall_name, venue_title, _ = _names(db, booking)

    notifications.create_notification(
        db,
        user_id=booking.planner_user_id,
        type=NotificationType.BOOKING_COMPLETED,
        title="Event Completed",
        body=(
            f"Your event at {hall_name} ({venue_title}) has been marked as completed. "
            "You can now leave a review!"
        ),
        link_url=f"/venue/{booking.venue_id}",
    )


SIDE_EFFECTS = {
    BookingStatus.ACCEPTED: _on_accepted,
    BookingStatus.PAID: _on_paid,
    BookingStatus.CONFIRMED: _on_confirmed,
    BookingStatus.CANCELLED: _on_cancelled,
    BookingStatus.CANCELLATION_REQUESTED: _on_cancellation_requested,
    BookingStatus.COMPLETED: _on_completed,
}
