from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.utils.dates import utcnow


class Hall(Base):
    __tablename__ = "halls"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False)

    name = Column(String, nullable=False)
    capacity = Column(Integer, nullable=False)

    # Pricing fields
    price = Column(Integer, nullable=False)  # per day
    deposit_percentage = Column(Integer, nullable=False, default=100)  # 100 = full upfront
    balance_due_days = Column(Integer, nullable=False, default=7)

    created_at = Column(DateTime, default=utcnow)

    # RELATIONSHIPS -------------------------------------
    venue = relationship("Venue", back_populates="halls")
    bookings = relationship("Booking", back_populates="hall")
    blocked_dates = relationship("HallBlockedDate", back_populates="hall")
