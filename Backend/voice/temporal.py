import logging
import re
from datetime import datetime, time, timedelta
from typing import Callable

from .models import PhraseSpan, TemporalResult
from .phrase_parser import parse_first_span

logger = logging.getLogger(__name__)

PhraseParser = Callable[..., PhraseSpan | None]

# utterances without a clock time start at business hours, not midnight
DEFAULT_START_TIME = time(9, 0)
DEFAULT_DURATION = timedelta(hours=1)
ALL_DAY_END_TIME = time(23, 59, 59)

_DURATION = re.compile(r"\bfor\s+(\d+)\s+(day|hour|minute)s?\b", re.IGNORECASE)


def _apply_duration(start: datetime, amount: int, unit: str) -> tuple[datetime, datetime, bool]:
  if unit == "day":
    # inclusive of the start day: "for 1 day" is the start day only
    first_day = start.date()
    last_day = first_day + timedelta(days=amount - 1)
    return datetime.combine(first_day, time(0, 0)), datetime.combine(last_day, ALL_DAY_END_TIME), True
  if unit == "hour":
    return start, start + timedelta(hours=amount), False
  return start, start + timedelta(minutes=amount), False


def extract_temporal(
  normalized_text: str,
  now: datetime,
  parser: PhraseParser = parse_first_span,
) -> TemporalResult:
  """Start, end and all-day flag for a normalized transcript.

  End resolution order: an explicit ``for N <unit>`` phrase, then the end
  the phrase parser found itself, then a one hour default.
  """
  if not normalized_text:
    return TemporalResult()

  try:
    span = parser(normalized_text, now, forward_date=True)
  except (OverflowError, ValueError):
    logger.debug("Date arithmetic out of range for %r", normalized_text)
    return TemporalResult()
  if span is None:
    return TemporalResult()

  start = span.start
  if not span.start_is_hour_certain:
    start = datetime.combine(start.date(), DEFAULT_START_TIME)

  m = _DURATION.search(normalized_text)
  if m:
    try:
      amount = int(m.group(1))
      if amount > 0:
        start, end, is_all_day = _apply_duration(start, amount, m.group(2).lower())
        return TemporalResult(start=start, end=end, is_all_day=is_all_day)
    except (OverflowError, ValueError):
      logger.debug("Ignoring out-of-range duration %r", m.group(0))

  if span.end is not None and span.end > start:
    return TemporalResult(start=start, end=span.end, is_all_day=False)
  if span.end is not None:
    logger.debug("Discarding parsed end %s, not after start %s", span.end, start)

  try:
    end = start + DEFAULT_DURATION
  except OverflowError:
    end = datetime.combine(start.date(), ALL_DAY_END_TIME)
  return TemporalResult(start=start, end=end, is_all_day=False)
