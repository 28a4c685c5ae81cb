"""
In-app messages and notifications created as side effects of booking transitions.

Every helper here is best effort: the booking status has already been committed
by the time these run, so a failure is logged and swallowed rather than raised.
"""
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logging_config import get_logger
from app.models.enums import NotificationType
from app.models.message import Message
from app.models.notification import Notification

logger = get_logger("booking")


def create_notification(
    db: Session,
    user_id: int,
    type: NotificationType,
    title: str,
    body: str,
    link_url: str | None = None,
) -> Notification | None:
    if not user_id:
        return None

    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        body=body,
        link_url=link_url,
    )
    try:
        db.add(notification)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Notification failed | User={user_id} | Title={title}")
        return None

    return notification


def create_message(
    db: Session,
    booking_id: int | None,
    from_user_id: int | None,
    to_user_id: int | None,
    body: str,
) -> Message | None:
    if not from_user_id or not to_user_id:
        return None

    message = Message(
        booking_id=booking_id,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        body=body,
    )
    try:
        db.add(message)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(f"Message failed | Booking={booking_id} | To={to_user_id}")
        return None

    return message

