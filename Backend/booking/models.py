import logging
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Any, Mapping, Union

logger = logging.getLogger(__name__)

WHOLE_DAY_END = time(23, 59, 59)


@dataclass(frozen=True)
class UnifiedTimeRef:
  # newer records: a single start/end instant pair
  start: datetime
  end: datetime


@dataclass(frozen=True)
class LegacyTimeRef:
  # older records: "YYYY-MM-DD" plus "HH:MM" strings
  date: str
  start_time: str | None
  end_time: str | None
  is_whole_day: bool = False


TimeRef = Union[UnifiedTimeRef, LegacyTimeRef]


def _to_instant(value: Any) -> datetime | None:
  if value is None or value == "":
    return None
  if isinstance(value, datetime):
    return value
  if isinstance(value, str):
    try:
      return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
      logger.warning("Unparseable instant %r", value)
      return None
  return None


def _local_naive(dt: datetime) -> datetime:
  # stored instants may carry a zone; legacy strings are local wall-clock time
  if dt.tzinfo is not None:
    return dt.astimezone().replace(tzinfo=None)
  return dt


def _wall_clock(day: Any, clock: Any) -> datetime | None:
  for fmt in ("%Y-%m-%d %H:%M", "%Y-%m-%d %H:%M:%S"):
    try:
      return datetime.strptime(f"{str(day).strip()} {str(clock).strip()}", fmt)
    except ValueError:
      continue
  return None


@dataclass
class BookingCandidate:
  id: str | None = None
  team_id: str | None = None
  start: datetime | None = None
  end: datetime | None = None
  date: str | None = None
  start_time: str | None = None
  end_time: str | None = None
  is_whole_day: bool = False

  def __post_init__(self):
    self.start = _to_instant(self.start)
    self.end = _to_instant(self.end)

  @property
  def time_ref(self) -> TimeRef | None:
    return time_ref_of(self)

  @classmethod
  def _fields_from_record(cls, record: Mapping[str, Any]) -> dict:
    return {
      "id": record.get("id"),
      "team_id": record.get("teamId", record.get("team_id")),
      "start": record.get("startDateTime", record.get("start")),
      "end": record.get("endDateTime", record.get("end")),
      "date": record.get("date"),
      "start_time": record.get("startTime", record.get("start_time")),
      "end_time": record.get("endTime", record.get("end_time")),
      "is_whole_day": bool(record.get("isWholeDay", record.get("is_whole_day", False))),
    }

  @classmethod
  def from_record(cls, record: Mapping[str, Any]) -> "BookingCandidate":
    return cls(**cls._fields_from_record(record))


@dataclass
class ExistingBooking(BookingCandidate):
  event_name: str = ""
  description: str = ""

  @classmethod
  def from_record(cls, record: Mapping[str, Any]) -> "ExistingBooking":
    fields = cls._fields_from_record(record)
    fields["event_name"] = record.get("eventName", record.get("event_name")) or ""
    fields["description"] = record.get("description") or ""
    return cls(**fields)

  def to_record(self) -> dict:
    return {
      "id": self.id,
      "teamId": self.team_id,
      "eventName": self.event_name,
      "description": self.description,
      "isWholeDay": self.is_whole_day,
      "startDateTime": self.start.isoformat() if self.start else None,
      "endDateTime": self.end.isoformat() if self.end else None,
      "date": self.date,
      "startTime": self.start_time,
      "endTime": self.end_time,
    }


@dataclass(frozen=True)
class ConflictResult:
  has_conflict: bool
  conflicting_bookings: list[ExistingBooking] = field(default_factory=list)


def time_ref_of(booking: BookingCandidate) -> TimeRef | None:
  """Pick the authoritative time representation of a booking.

  The unified pair wins whenever both instants are present.
  """
  if booking.start is not None and booking.end is not None:
    return UnifiedTimeRef(start=booking.start, end=booking.end)
  if booking.date:
    return LegacyTimeRef(
      date=booking.date,
      start_time=booking.start_time,
      end_time=booking.end_time,
      is_whole_day=booking.is_whole_day,
    )
  return None


def resolve_time_range(ref: TimeRef | None) -> tuple[datetime, datetime] | None:
  """Comparable (start, end) local instants for either representation."""
  if ref is None:
    return None
  if isinstance(ref, UnifiedTimeRef):
    return _local_naive(ref.start), _local_naive(ref.end)

  if ref.is_whole_day and not (ref.start_time and ref.end_time):
    start = _wall_clock(ref.date, "00:00")
    return (start, datetime.combine(start.date(), WHOLE_DAY_END)) if start else None
  if not (ref.start_time and ref.end_time):
    return None
  start = _wall_clock(ref.date, ref.start_time)
  end = _wall_clock(ref.date, ref.end_time)
  if start is None or end is None:
    return None
  return start, end
