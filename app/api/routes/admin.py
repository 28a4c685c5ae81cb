from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, require_admin
from app.core.logging_config import get_logger
from app.models.user import User
from app.schemas.booking import ExpiryRunOut
from app.services.booking_expiry import run_booking_expiry_check

router = APIRouter(prefix="/admin", tags=["Admin"])
logger = get_logger("expiry")


# =====================================================================
# RUN BOOKING EXPIRY CHECK NOW
# =====================================================================
@router.post("/booking-expiry/run", response_model=ExpiryRunOut)
def run_expiry_check(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    logger.info(f"Manual booking expiry check | Admin={admin.id}")
    return run_booking_expiry_check(db)
