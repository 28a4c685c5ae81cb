from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.utils.dates import utcnow


class Venue(Base):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)

    # Every authorization check in the booking core goes through this owner
    owner_user_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    title = Column(String, nullable=False)
    city = Column(String, nullable=False)

    created_at = Column(DateTime, default=utcnow)

    owner = relationship("User")
    halls = relationship("Hall", back_populates="venue")
