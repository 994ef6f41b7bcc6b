"""Rewrite a raw transcript into lower-case, English-like canonical text.

The canonical form is what the phrase parser and the duration patterns
understand, so every language only has to ship a Dictionary table.
"""

import re

from .models import Dictionary

# "2 days for" -> "for 2 days"; languages that put the preposition after the quantity
_TRAILING_FOR = re.compile(r"(\d+)\s+(days|hours|minutes)\s+for\b")


def _replace_numerals(text: str, numeral_map) -> str:
  for glyph, digit in numeral_map.items():
    text = text.replace(glyph, digit)
  return text


def _replace_phrases(text: str, replacements) -> str:
  # longest key first so "next week" is not eaten by "next"
  for phrase, canonical in sorted(replacements.items(), key=lambda kv: len(kv[0]), reverse=True):
    if phrase:
      text = text.replace(phrase, canonical)
  return text


def normalize(text: str | None, dictionary: Dictionary) -> str:
  if not text:
    return ""
  normalized = text.lower()
  normalized = _replace_numerals(normalized, dictionary.numeral_map)
  normalized = _replace_phrases(normalized, dictionary.replacements)
  normalized = _TRAILING_FOR.sub(r"for \1 \2", normalized)
  return normalized
