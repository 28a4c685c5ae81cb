from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    VENUE_HOLDER = "venue_holder"
    PLANNER = "planner"


class BookingStatus(str, Enum):
    REQUESTED = "requested"
    ACCEPTED = "accepted"
    PAID = "paid"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    CANCELLATION_REQUESTED = "cancellation_requested"


# Bookings in these states hold their dates
ACTIVE_STATUSES = (
    BookingStatus.REQUESTED,
    BookingStatus.ACCEPTED,
    BookingStatus.PAID,
    BookingStatus.CONFIRMED,
)

# Money has been captured, so the planner must ask before cancelling
PAID_STATUSES = (
    BookingStatus.PAID,
    BookingStatus.CONFIRMED,
    BookingStatus.COMPLETED,
)


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class NotificationType(str, Enum):
    BOOKING_REQUEST = "booking_request"
    BOOKING_ACCEPTED = "booking_accepted"
    BOOKING_CANCELLED = "booking_cancelled"
    BOOKING_COMPLETED = "booking_completed"
    BOOKING_EXPIRY = "booking_expiry"
    SYSTEM = "system"
