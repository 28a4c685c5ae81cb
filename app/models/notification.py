from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum
from app.db.session import Base
from app.models.enums import NotificationType
from app.utils.dates import utcnow


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    type = Column(
        Enum(NotificationType, name="notification_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    title = Column(String, nullable=False)
    body = Column(String, nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    link_url = Column(String, nullable=True)

    created_at = Column(DateTime, default=utcnow)
