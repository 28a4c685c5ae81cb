from pydantic import BaseModel
import datetime
from typing import List, Optional


class BlockedDateCreate(BaseModel):
    date: datetime.date
    reason: Optional[str] = None


class BlockedDateOut(BaseModel):
    id: int
    hall_id: int
    date: datetime.date
    reason: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class BlockedDateEntry(BaseModel):
    id: int
    date: str
    reason: Optional[str] = None


class HallAvailabilityOut(BaseModel):
    hall_id: int
    booked_dates: List[str]
    blocked_dates: List[BlockedDateEntry]


class DateAvailabilityOut(BaseModel):
    hall_id: int
    date: datetime.date
    bookable: bool
