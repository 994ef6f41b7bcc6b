"""Per-language dictionaries for the voice intake pipeline.

A language is added by writing a module with a ``DICTIONARY`` table and
registering it in ``DICTIONARIES``; nothing else needs to change.
"""

from voice.models import Dictionary

from . import en_us, gu_in

DEFAULT_LANGUAGE = "en-US"

DICTIONARIES: dict[str, Dictionary] = {
  en_us.DICTIONARY.id: en_us.DICTIONARY,
  gu_in.DICTIONARY.id: gu_in.DICTIONARY,
}


def get_dictionary(language_code: str | None) -> Dictionary:
  return DICTIONARIES.get(language_code or "", DICTIONARIES[DEFAULT_LANGUAGE])


def get_prompt(language_code: str | None, key: str) -> str:
  return get_dictionary(language_code).prompts.get(key, key)


def list_languages() -> list[tuple[str, str]]:
  return [(d.id, d.display_name) for d in DICTIONARIES.values()]
