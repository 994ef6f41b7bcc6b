"""Per-team booking conflict detection.

Shared by the voice intake and the manual booking form. Works on a
caller-supplied snapshot of existing bookings; freshness against concurrent
writes is the caller's concern.
"""

import logging
from typing import Iterable, Mapping

from .date_utils import format_time_range
from .models import BookingCandidate, ConflictResult, ExistingBooking, resolve_time_range, time_ref_of

logger = logging.getLogger(__name__)


def check_conflict(candidate: BookingCandidate | Mapping, existing: Iterable[ExistingBooking | Mapping]) -> ConflictResult:
  conflicting: list[ExistingBooking] = []
  if isinstance(candidate, Mapping):
    candidate = BookingCandidate.from_record(candidate)

  candidate_range = resolve_time_range(time_ref_of(candidate))
  if candidate_range is None:
    logger.info("Candidate %s has no resolvable time range; skipping conflict check", candidate.id)
    return ConflictResult(has_conflict=False, conflicting_bookings=conflicting)
  new_start, new_end = candidate_range

  for booking in existing or []:
    if isinstance(booking, Mapping):
      booking = ExistingBooking.from_record(booking)
    if booking.team_id != candidate.team_id:
      continue
    if candidate.id is not None and booking.id == candidate.id:
      continue

    booking_range = resolve_time_range(time_ref_of(booking))
    if booking_range is None:
      logger.warning("Booking %s has no resolvable time range; ignored", booking.id)
      continue
    start, end = booking_range

    # half-open: one ending exactly when the other starts is fine
    if new_start < end and new_end > start:
      conflicting.append(booking)

  return ConflictResult(has_conflict=bool(conflicting), conflicting_bookings=conflicting)


def describe_booking_time(booking: ExistingBooking) -> str:
  if booking.is_whole_day:
    return "Whole Day"
  booking_range = resolve_time_range(time_ref_of(booking))
  if booking_range is None:
    return "Unknown time"
  return format_time_range(*booking_range)


def format_conflict_message(conflicting_bookings: list[ExistingBooking]) -> str:
  if not conflicting_bookings:
    return ""
  conflicts = [f"\"{b.event_name}\" ({describe_booking_time(b)})" for b in conflicting_bookings]
  return f"This booking conflicts with: {', '.join(conflicts)}"
