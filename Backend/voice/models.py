from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Mapping

from booking.date_utils import format_date_to_iso

@dataclass(frozen=True)
class Dictionary:
  # static per-language tables, selected by language code
  id: str
  display_name: str
  numeral_map: Mapping[str, str] = field(default_factory=dict)
  replacements: Mapping[str, str] = field(default_factory=dict)
  prompts: Mapping[str, str] = field(default_factory=dict)

  def __post_init__(self):
    object.__setattr__(self, "numeral_map", MappingProxyType(dict(self.numeral_map)))
    object.__setattr__(self, "replacements", MappingProxyType(dict(self.replacements)))
    object.__setattr__(self, "prompts", MappingProxyType(dict(self.prompts)))

@dataclass(frozen=True)
class Team:
  id: str
  name: str

  @classmethod
  def from_record(cls, record: Mapping) -> "Team":
    return cls(id=str(record.get("id", "")), name=str(record.get("name") or ""))

@dataclass(frozen=True)
class PhraseSpan:
  # first date/time span found in a text
  text: str
  index: int
  start: datetime
  start_is_hour_certain: bool
  end: datetime | None = None

@dataclass(frozen=True)
class TemporalResult:
  start: datetime | None = None
  end: datetime | None = None
  is_all_day: bool = False

@dataclass(frozen=True)
class ParsedCommand:
  # structured booking candidate parsed from one utterance
  event_name: str
  start: datetime | None
  end: datetime | None
  team_id: str | None
  is_all_day: bool
  original_transcript: str
  normalized_transcript: str

  def with_team(self, team_id: str) -> "ParsedCommand":
    return replace(self, team_id=team_id)

  def to_draft(self) -> dict:
    """Booking-form draft fields, in the form's own field names."""
    return {
      "teamId": self.team_id or "",
      "eventName": self.event_name,
      "date": format_date_to_iso(self.start.date()) if self.start else "",
      "startTime": self.start.strftime("%H:%M") if self.start else "",
      "endTime": self.end.strftime("%H:%M") if self.end else "",
      "isWholeDay": self.is_all_day,
      "startDateTime": self.start.isoformat() if self.start else None,
      "endDateTime": self.end.isoformat() if self.end else None,
    }
