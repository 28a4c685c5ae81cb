# Import every model so Base.metadata and relationship() lookups see all tables
from app.db.session import Base  # noqa: F401
from app.models.user import User  # noqa: F401
from app.models.venue import Venue  # noqa: F401
from app.models.hall import Hall  # noqa: F401
from app.models.hall_blocked_date import HallBlockedDate  # noqa: F401
from app.models.booking import Booking  # noqa: F401
from app.models.message import Message  # noqa: F401
from app.models.notification import Notification  # noqa: F401
