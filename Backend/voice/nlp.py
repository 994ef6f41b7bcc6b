import logging
import re
from datetime import datetime
from typing import Sequence

from dictionaries import get_dictionary

from .entities import match_team
from .models import ParsedCommand, Team
from .normalizer import normalize
from .temporal import extract_temporal

logger = logging.getLogger(__name__)

FILLER_PATTERN = re.compile(r"^(?:schedule|book|create)\s+(?:(?:a|an)\s+)?", re.IGNORECASE)


def strip_first(text: str, phrase: str) -> str:
  if not phrase:
    return text
  return re.sub(re.escape(phrase), "", text, count=1, flags=re.IGNORECASE)


def derive_event_name(transcript: str, team_name: str | None = None) -> str:
  # Best effort: date/time words stay in the title because offsets in the
  # normalized text do not map back onto the raw transcript.
  t = transcript
  if team_name:
    t = strip_first(t, team_name)
  t = FILLER_PATTERN.sub("", t.strip())
  return re.sub(r"\s+", " ", t).strip()


def parse_voice_command(
  transcript: str,
  language_code: str,
  teams: Sequence[Team],
  now: datetime,
) -> ParsedCommand | None:
  if not transcript or not transcript.strip():
    return None

  dictionary = get_dictionary(language_code)
  normalized_text = normalize(transcript, dictionary)
  logger.debug("Original: %r", transcript)
  logger.debug("Normalized: %r", normalized_text)

  temporal = extract_temporal(normalized_text, now)
  team = match_team([normalized_text, transcript.lower()], teams)

  return ParsedCommand(
    event_name=derive_event_name(transcript, team.name if team else None),
    start=temporal.start,
    end=temporal.end,
    team_id=team.id if team else None,
    is_all_day=temporal.is_all_day,
    original_transcript=transcript,
    normalized_transcript=normalized_text,
  )


if __name__ == "__main__":
  now = datetime(2026, 1, 14, 10, 0, 0)
  roster = [Team("t1", "Marketing"), Team("t2", "Design")]
  cases = [
    ("en-US", "book marketing team meeting tomorrow at 3pm for 2 hours"),
    ("en-US", "schedule a design review next friday"),
    ("en-US", "offsite tomorrow for 3 days"),
    ("gu-IN", "કાલે બપોરે ૩ વાગ્યે ૨ કલાક માટે marketing મીટિંગ"),
  ]
  for lang, text in cases:
    cmd = parse_voice_command(text, lang, roster, now)
    print("Transcript:", text)
    print("  normalized:", cmd.normalized_transcript)
    print("  event:", cmd.event_name)
    print("  start:", cmd.start)
    print("  end:", cmd.end)
    print("  team:", cmd.team_id, "all day:", cmd.is_all_day)
    print("-" * 40)
