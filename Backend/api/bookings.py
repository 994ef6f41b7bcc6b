"""FastAPI routes for booking conflict checks."""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from booking.conflicts import check_conflict, format_conflict_message
from booking.models import ExistingBooking

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


class BookingIn(BaseModel):
    # accepts the booking store's camelCase records as well as snake_case
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    team_id: Optional[str] = Field(None, alias="teamId")
    event_name: str = Field("", alias="eventName")
    description: str = ""
    is_whole_day: bool = Field(False, alias="isWholeDay")
    start_date_time: Optional[datetime] = Field(None, alias="startDateTime")
    end_date_time: Optional[datetime] = Field(None, alias="endDateTime")
    date: Optional[str] = None
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")

    def to_booking(self) -> ExistingBooking:
        return ExistingBooking.from_record(self.model_dump(by_alias=True))


class ConflictCheckRequest(BaseModel):
    candidate: BookingIn
    existing: list[BookingIn] = []


@router.post("/conflicts")
async def bookings_conflicts(req: ConflictCheckRequest):
    candidate = req.candidate.to_booking()
    result = check_conflict(candidate, [b.to_booking() for b in req.existing])
    if result.has_conflict:
        logger.info(
            "Booking for team %s conflicts with %d existing booking(s)",
            candidate.team_id,
            len(result.conflicting_bookings),
        )
    return {
        "hasConflict": result.has_conflict,
        "conflictingBookings": [b.to_record() for b in result.conflicting_bookings],
        "message": format_conflict_message(result.conflicting_bookings),
    }
