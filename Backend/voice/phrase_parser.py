"""Locate the first date/time phrase in canonical (English-like) text.

Relative words and weekdays are resolved against the reference instant;
calendar dates ("march 5", "2026-01-15", "1/15") are handed to dateparser
with a future preference so ambiguous dates never land in the past.
"""

import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Callable

import dateparser

from .models import PhraseSpan

logger = logging.getLogger(__name__)

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
_MONTHS = (
  r"jan|january|feb|february|mar|march|apr|april|may|jun|june|jul|july|aug|august|"
  r"sep|sept|september|oct|october|nov|november|dec|december"
)

_FLAGS = re.IGNORECASE

# a clock token: "3", "3pm", "3:30 p.m."
_T = r"\d{1,2}(?::\d{2})?(?!\d)\s*(?:[ap]\.?m\.?(?![a-z]))?"
# a clock token that cannot be a bare count
_T_STRICT = r"(?:\d{1,2}(?::\d{2})?(?!\d)\s*[ap]\.?m\.?(?![a-z])|\d{1,2}:\d{2}(?!\d))"
_NOT_A_DURATION = r"(?!\s*(?:days?|hours?|hrs?|minutes?|mins?)\b)"


def _shift(days: int) -> Callable[[re.Match, date], date]:
  return lambda m, ref: ref + timedelta(days=days)


def _resolve_offset(m: re.Match, ref: date) -> date:
  amount = int(m.group("n"))
  unit = m.group("unit").lower()
  return ref + timedelta(weeks=amount) if unit.startswith("week") else ref + timedelta(days=amount)


def _resolve_weekday(m: re.Match, ref: date) -> date:
  qualifier = (m.group("q") or "").lower()
  target = WEEKDAYS.index(m.group("day").lower())
  days_ahead = (target - ref.weekday()) % 7
  if qualifier == "next" and days_ahead == 0:
    days_ahead = 7
  return ref + timedelta(days=days_ahead)


def _resolve_calendar_date(m: re.Match, ref: date) -> date | None:
  settings = {
    "PREFER_DATES_FROM": "future",
    "RELATIVE_BASE": datetime.combine(ref, time(0, 0)),
    "PREFER_DAY_OF_MONTH": "current",
  }
  try:
    dt = dateparser.parse(m.group(0), languages=["en"], settings=settings)
  except (ValueError, OverflowError):
    logger.debug("dateparser rejected %r", m.group(0))
    return None
  return dt.date() if dt else None


_DATE_PATTERNS: list[tuple[re.Pattern, Callable[[re.Match, date], date | None]]] = [
  (re.compile(r"\b(?:the\s+)?day\s+after\s+tomorrow\b", _FLAGS), _shift(2)),
  (re.compile(r"\b(?:today|tonight)\b", _FLAGS), _shift(0)),
  (re.compile(r"\btomorrow\b", _FLAGS), _shift(1)),
  (re.compile(r"\bin\s+(?P<n>\d{1,3})\s+(?P<unit>day|week)s?\b", _FLAGS), _resolve_offset),
  (re.compile(r"\b(?P<n>\d{1,3})\s+(?P<unit>day|week)s?\s+(?:after|later|from\s+now)\b", _FLAGS), _resolve_offset),
  (re.compile(r"\bnext\s+week\b", _FLAGS), _shift(7)),
  (re.compile(r"\b(?:(?P<q>next|this|on)\s+)?(?P<day>" + "|".join(WEEKDAYS) + r")\b", _FLAGS), _resolve_weekday),
  (re.compile(r"\b\d{4}-\d{1,2}-\d{1,2}\b"), _resolve_calendar_date),
  (re.compile(r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b"), _resolve_calendar_date),
  (re.compile(r"\b(?:" + _MONTHS + r")\s+\d{1,2}(?:st|nd|rd|th)?(?:,?\s+\d{4})?\b", _FLAGS), _resolve_calendar_date),
  (re.compile(r"\b\d{1,2}(?:st|nd|rd|th)?\s+(?:of\s+)?(?:" + _MONTHS + r")(?:,?\s+\d{4})?\b", _FLAGS), _resolve_calendar_date),
]

_DATE_RANGE_JOINER = re.compile(r"\s*(?:(?:to|until|till|through|thru)\b|-)\s*", _FLAGS)

_TIME_RANGE_PATTERNS = [
  re.compile(r"(?:\bfrom\s+)?(?P<t1>" + _T + r")\s*(?:to|until|till|-|–)\s*(?P<t2>" + _T_STRICT + r")", _FLAGS),
  re.compile(r"\bbetween\s+(?P<t1>" + _T + r")\s*and\s*(?P<t2>" + _T_STRICT + r")", _FLAGS),
]

_TIME_POINT_PATTERNS = [
  re.compile(r"\bat\s*(?P<t>" + _T + r"(?:\s*o'?clock)?)" + _NOT_A_DURATION, _FLAGS),
  # day part before the number, then the postposition ("pm 3 at")
  re.compile(r"\b(?P<ap>[ap]m)\s+(?P<t>\d{1,2}(?::\d{2})?)(?!\d)\s+at\b(?!\s*\d)", _FLAGS),
  re.compile(r"\b(?P<t>\d{1,2}(?::\d{2})?)(?!\d)\s+at\b(?!\s*(?:\d|noon|midnight))", _FLAGS),
  re.compile(r"\b(?P<t>noon|midday|midnight)\b", _FLAGS),
  re.compile(r"\b(?P<t>\d{1,2}(?::\d{2})?\s*[ap]\.?m\.?)(?![a-z])", _FLAGS),
  re.compile(r"\b(?P<t>\d{1,2}:\d{2})(?!\d)", _FLAGS),
  re.compile(r"\b(?P<t>\d{1,2})\s*o'?clock\b", _FLAGS),
]


def parse_time_token(token: str, default_ampm: str | None = None) -> tuple[time, str | None] | None:
  token = token.strip().lower().replace(".", "")
  token = re.sub(r"o'?clock", "", token).strip()
  if token in ("noon", "midday"):
    return time(12, 0), "pm"
  if token == "midnight":
    return time(0, 0), "am"
  m = re.match(r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)?$", token)
  if not m:
    return None
  h = int(m.group(1))
  minute = int(m.group(2)) if m.group(2) else 0
  ap = m.group(3) or default_ampm
  if ap == "pm" and 1 <= h <= 11:
    h += 12
  if ap == "am" and h == 12:
    h = 0
  if h > 23 or minute > 59:
    return None
  return time(h, minute), ap


def _date_matches(text: str):
  for pattern, resolver in _DATE_PATTERNS:
    for m in pattern.finditer(text):
      yield m, resolver


def _find_date(text: str, ref: date) -> tuple[re.Match, date] | None:
  hits = sorted(_date_matches(text), key=lambda hit: (hit[0].start(), -len(hit[0].group(0))))
  for m, resolver in hits:
    resolved = resolver(m, ref)
    if resolved is not None:
      return m, resolved
  return None


def _find_range_end(text: str, after: int, start_date: date) -> tuple[int, date] | None:
  # "monday to wednesday", "march 5 - march 7"
  joiner = _DATE_RANGE_JOINER.match(text, after)
  if not joiner:
    return None
  for pattern, resolver in _DATE_PATTERNS:
    m = pattern.match(text, joiner.end())
    if m:
      resolved = resolver(m, start_date)
      if resolved is not None and resolved >= start_date:
        return m.end(), resolved
  return None


def _find_time_range(text: str) -> tuple[re.Match, time, time] | None:
  for pattern in _TIME_RANGE_PATTERNS:
    for m in pattern.finditer(text):
      t2 = parse_time_token(m.group("t2"))
      if not t2:
        continue
      end, end_ap = t2
      t1 = parse_time_token(m.group("t1"), default_ampm=end_ap)
      if not t1:
        continue
      start, _ = t1
      return m, start, end
  return None


def _find_time_point(text: str) -> tuple[re.Match, time] | None:
  hits = [m for pattern in _TIME_POINT_PATTERNS for m in pattern.finditer(text)]
  for m in sorted(hits, key=lambda m: m.start()):
    ap = m.groupdict().get("ap")
    parsed = parse_time_token(m.group("t"), default_ampm=ap.lower() if ap else None)
    if parsed:
      return m, parsed[0]
  return None


def parse_first_span(text: str, reference: datetime, forward_date: bool = True) -> PhraseSpan | None:
  """Return the first date/time span in ``text`` relative to ``reference``.

  ``start_is_hour_certain`` is set only when a clock time was spoken; a span
  made of a date alone starts at midnight and leaves the hour to the caller.
  """
  if not text:
    return None
  ref_date = reference.date()

  date_hit = _find_date(text, ref_date)
  range_hit = _find_time_range(text)
  point_hit = None if range_hit else _find_time_point(text)
  if not date_hit and not range_hit and not point_hit:
    return None

  start_date = date_hit[1] if date_hit else ref_date
  bounds = []
  end_date = None
  if date_hit:
    bounds.append((date_hit[0].start(), date_hit[0].end()))
    range_end = _find_range_end(text, date_hit[0].end(), start_date)
    if range_end:
      bounds.append((date_hit[0].start(), range_end[0]))
      end_date = range_end[1]

  start_time = time(0, 0)
  end_time = None
  if range_hit:
    m, start_time, end_time = range_hit
    bounds.append((m.start(), m.end()))
  elif point_hit:
    m, start_time = point_hit
    bounds.append((m.start(), m.end()))
  hour_certain = bool(range_hit or point_hit)

  start = datetime.combine(start_date, start_time)
  if forward_date and not date_hit and start <= reference.replace(tzinfo=None):
    start += timedelta(days=1)
    start_date = start.date()

  end = None
  if end_time is not None:
    end = datetime.combine(end_date or start_date, end_time)
    if end <= start:
      end += timedelta(days=1)
  elif end_date is not None:
    end = datetime.combine(end_date, start_time if hour_certain else time(23, 59, 59))

  index = min(b[0] for b in bounds)
  stop = max(b[1] for b in bounds)
  return PhraseSpan(
    text=text[index:stop],
    index=index,
    start=start,
    start_is_hour_certain=hour_certain,
    end=end,
  )
