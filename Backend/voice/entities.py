from typing import Iterable, Sequence

from .models import Team


def match_team(variants: Iterable[str], teams: Sequence[Team]) -> Team | None:
  """First team (roster order) whose name appears in any transcript variant.

  Plain case-insensitive substring containment; no scoring, so partial or
  misspelled team names stay unresolved.
  """
  pool = [v.lower() for v in variants if v]
  for team in teams or []:
    name = (team.name or "").strip().lower()
    if not name:
      continue
    if any(name in text for text in pool):
      return team
  return None


def resolve_team(variants: Iterable[str], teams: Sequence[Team]) -> str | None:
  team = match_team(variants, teams)
  return team.id if team else None
