from datetime import timedelta

from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.core.config import PAYMENT_WINDOW_HOURS
from app.models.enums import BookingStatus, PaymentStatus
from app.utils.dates import iter_days, utcnow


def _enum_values(enum_cls):
    return [m.value for m in enum_cls]


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False)
    hall_id = Column(Integer, ForeignKey("halls.id"), nullable=False, index=True)
    planner_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    status = Column(
        Enum(BookingStatus, name="booking_status", values_callable=_enum_values),
        nullable=False,
        default=BookingStatus.REQUESTED,
        index=True,
    )

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)  # NULL = single-day booking
    guests = Column(Integer, nullable=True)

    # MONEY (deposit + balance = total)
    total_amount = Column(Integer, nullable=False)
    deposit_amount = Column(Integer, nullable=False)
    balance_amount = Column(Integer, nullable=False)

    # PAYMENT FIELDS
    deposit_paid = Column(Boolean, nullable=False, default=False)
    balance_paid = Column(Boolean, nullable=False, default=False)
    payment_status = Column(
        Enum(PaymentStatus, name="payment_status", values_callable=_enum_values),
        nullable=False,
        default=PaymentStatus.PENDING,
    )

    cancellation_reason = Column(String, nullable=True)

    # EXPIRY STATE (the scheduler keeps nothing in memory)
    accepted_at = Column(DateTime, nullable=True)
    expiry_notification_sent = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=utcnow)

    venue = relationship("Venue")
    hall = relationship("Hall", back_populates="bookings")
    planner = relationship("User")

    @property
    def effective_end_date(self):
        return self.end_date or self.start_date

    def covered_dates(self):
        return list(iter_days(self.start_date, self.end_date))

    @property
    def expiry_deadline(self):
        if self.accepted_at is None:
            return None
        return self.accepted_at + timedelta(hours=PAYMENT_WINDOW_HOURS)
