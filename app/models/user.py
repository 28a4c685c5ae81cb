from sqlalchemy import Column, Integer, String, DateTime, Enum
from app.db.session import Base
from app.models.enums import UserRole
from app.utils.dates import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, nullable=True)

    role = Column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.PLANNER,
    )

    created_at = Column(DateTime, default=utcnow)
