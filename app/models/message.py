from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from app.db.session import Base
from app.utils.dates import utcnow


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=True, index=True)
    from_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    to_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    body = Column(String, nullable=False)

    created_at = Column(DateTime, default=utcnow)
