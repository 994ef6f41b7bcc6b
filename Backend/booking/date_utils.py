from datetime import date, datetime, time


def format_date_to_iso(d: date) -> str:
  return d.strftime("%Y-%m-%d")


def format_time_12h(value: str | time | datetime | None) -> str:
  # "15:30" -> "3:30 PM"
  if value is None or value == "":
    return ""
  if isinstance(value, str):
    hours, minutes = value.split(":")[:2]
    hour, minute = int(hours), int(minutes)
  else:
    hour, minute = value.hour, value.minute
  ampm = "PM" if hour >= 12 else "AM"
  return f"{hour % 12 or 12}:{minute:02d} {ampm}"


def format_date_for_display(value: str | date) -> str:
  # "2026-01-15" -> "Jan 15, 2026"
  d = datetime.strptime(value, "%Y-%m-%d").date() if isinstance(value, str) else value
  return f"{d.strftime('%b')} {d.day}, {d.year}"


def get_day_of_week(value: str | date) -> str:
  d = datetime.strptime(value, "%Y-%m-%d").date() if isinstance(value, str) else value
  return d.strftime("%A")


def is_past_date(value: str | date, today: date) -> bool:
  d = datetime.strptime(value, "%Y-%m-%d").date() if isinstance(value, str) else value
  return d < today


def format_time_range(start: datetime, end: datetime) -> str:
  if start.date() == end.date():
    return f"{format_time_12h(start)} - {format_time_12h(end)}"
  return (
    f"{format_date_for_display(start.date())} {format_time_12h(start)} - "
    f"{format_date_for_display(end.date())} {format_time_12h(end)}"
  )
