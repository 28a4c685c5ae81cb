from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.utils.dates import utcnow


class HallBlockedDate(Base):
    __tablename__ = "hall_blocked_dates"

    id = Column(Integer, primary_key=True, index=True)
    hall_id = Column(Integer, ForeignKey("halls.id", ondelete="CASCADE"), nullable=False, index=True)

    date = Column(Date, nullable=False)
    reason = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow)

    hall = relationship("Hall", back_populates="blocked_dates")

    __table_args__ = (UniqueConstraint("hall_id", "date", name="uq_hall_blocked_date"),)
