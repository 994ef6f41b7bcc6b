"""Turn-based voice dialogue that turns one utterance into a booking draft.

IDLE -> LISTENING -> PROCESSING -> SUCCESS, with an ASKING_TEAM detour when
the utterance names no team and the roster is not empty. One capture is in
flight at a time; waits after spoken prompts are fixed delays.
"""

import asyncio
import contextlib
import inspect
import logging
import os
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Sequence

from dictionaries import DEFAULT_LANGUAGE, get_dictionary

from .entities import resolve_team
from .models import ParsedCommand, Team
from .nlp import parse_voice_command
from .normalizer import normalize
from .speech import RecognitionError, SpeechCapture, SpeechSynthesizer, UnsupportedCapability

logger = logging.getLogger(__name__)


DEFAULT_MAX_TEAM_RETRIES = 3


def _retries_from_env(raw: str | None) -> int | None:
  if raw is None:
    return DEFAULT_MAX_TEAM_RETRIES
  if raw.strip().lower() in ("", "none", "unlimited"):
    return None
  try:
    return max(0, int(raw))
  except ValueError:
    logger.warning("Invalid VOICE_MAX_TEAM_RETRIES %r; using %s", raw, DEFAULT_MAX_TEAM_RETRIES)
    return DEFAULT_MAX_TEAM_RETRIES


def _float_env(name: str, default: float) -> float:
  raw = os.getenv(name)
  if raw is None:
    return default
  try:
    return float(raw)
  except ValueError:
    return default


RELISTEN_DELAY_SECONDS = _float_env("VOICE_RELISTEN_DELAY_SECONDS", 2.0)
CLOSE_DELAY_SECONDS = _float_env("VOICE_CLOSE_DELAY_SECONDS", 1.5)
MAX_TEAM_RETRIES = _retries_from_env(os.getenv("VOICE_MAX_TEAM_RETRIES"))


class InteractionState(str, Enum):
  IDLE = "IDLE"
  LISTENING = "LISTENING"
  PROCESSING = "PROCESSING"
  ASKING_TEAM = "ASKING_TEAM"
  SUCCESS = "SUCCESS"
  ERROR = "ERROR"


class CaptureMode(str, Enum):
  COMMAND = "COMMAND"
  ANSWER_TEAM = "ANSWER_TEAM"


class InvalidTransition(RuntimeError):
  pass


Callback = Callable[..., Awaitable[None] | None]


async def _emit(callback: Callback | None, *args) -> None:
  if callback is None:
    return
  result = callback(*args)
  if inspect.isawaitable(result):
    await result


class VoiceSession:
  def __init__(
    self,
    capture: SpeechCapture,
    speaker: SpeechSynthesizer,
    teams: Sequence[Team],
    language_code: str = DEFAULT_LANGUAGE,
    *,
    on_parsed: Callback | None = None,
    on_state_change: Callback | None = None,
    on_close: Callback | None = None,
    clock: Callable[[], datetime] = datetime.now,
    relisten_delay: float = RELISTEN_DELAY_SECONDS,
    close_delay: float = CLOSE_DELAY_SECONDS,
    max_team_retries: int | None = MAX_TEAM_RETRIES,
  ):
    self.capture = capture
    self.speaker = speaker
    self.teams = list(teams or [])
    self.language_code = get_dictionary(language_code).id
    self.on_parsed = on_parsed
    self.on_state_change = on_state_change
    self.on_close = on_close
    self.clock = clock
    self.relisten_delay = relisten_delay
    self.close_delay = close_delay
    self.max_team_retries = max_team_retries

    self.state = InteractionState.IDLE
    self.mode = CaptureMode.COMMAND
    self.fragment: ParsedCommand | None = None
    self.transcript = ""
    self.message = ""
    self.error: str | None = None
    self.retries = 0
    self.history: list[InteractionState] = [InteractionState.IDLE]
    self._task: asyncio.Task | None = None

  @property
  def prompts(self):
    return get_dictionary(self.language_code).prompts

  async def _set_state(self, state: InteractionState, message: str | None = None) -> None:
    self.state = state
    if message is not None:
      self.message = message
    self.history.append(state)
    logger.info("Voice session -> %s (%s)", state.value, self.mode.value)
    await _emit(self.on_state_change, self)

  def _speak(self, key: str) -> str:
    text = self.prompts.get(key, key)
    try:
      self.speaker.speak(text, self.language_code)
    except Exception:
      logger.exception("Speaking prompt %r failed", key)
    return text

  def open(self) -> asyncio.Task:
    if self.state is not InteractionState.IDLE or (self._task is not None and not self._task.done()):
      raise InvalidTransition(f"Cannot open a session in state {self.state.value}")
    self._task = asyncio.get_running_loop().create_task(self.run())
    return self._task

  async def run(self) -> ParsedCommand | None:
    if self.state is not InteractionState.IDLE:
      raise InvalidTransition(f"Cannot start listening from {self.state.value}")
    self.mode = CaptureMode.COMMAND
    self.retries = 0
    self.error = None

    while True:
      await self._set_state(InteractionState.LISTENING, self.prompts["listening"])
      try:
        transcript = await self.capture.capture(self.language_code)
      except UnsupportedCapability as e:
        await self._fail(f"Speech API not supported: {e}")
        return None
      except RecognitionError as e:
        await self._fail(f"Error: {e}")
        return None
      except Exception as e:
        logger.exception("Speech capture failed")
        await self._fail(f"Error: {e}")
        return None

      self.transcript = transcript or ""
      await self._set_state(InteractionState.PROCESSING, self.prompts["processing"])

      if self.mode is CaptureMode.COMMAND:
        command = parse_voice_command(self.transcript, self.language_code, self.teams, self.clock())
        if command is None:
          if not await self._retry():
            return None
          continue
        self.fragment = command
        if command.team_id or not self.teams:
          return await self._finalize(command)
        await self._set_state(InteractionState.ASKING_TEAM, self._speak("ask_team"))
        self.mode = CaptureMode.ANSWER_TEAM
        await asyncio.sleep(self.relisten_delay)
        continue

      dictionary = get_dictionary(self.language_code)
      team_id = resolve_team([self.transcript, normalize(self.transcript, dictionary)], self.teams)
      if team_id:
        return await self._finalize(self.fragment.with_team(team_id))
      if not await self._retry():
        return None

  async def _retry(self) -> bool:
    self.retries += 1
    if self.max_team_retries is not None and self.retries > self.max_team_retries:
      await self._fail(self._speak("missing_info"))
      return False
    text = self._speak("retry")
    if self.mode is CaptureMode.ANSWER_TEAM:
      await self._set_state(InteractionState.ASKING_TEAM, text)
    else:
      self.message = text
    await asyncio.sleep(self.relisten_delay)
    return True

  async def _finalize(self, command: ParsedCommand) -> ParsedCommand:
    self.fragment = command
    await self._set_state(InteractionState.SUCCESS, self._speak("success"))
    await _emit(self.on_parsed, command)
    await asyncio.sleep(self.close_delay)
    if self.state is InteractionState.SUCCESS:
      await self._closed()
    return command

  async def _fail(self, message: str) -> None:
    self.error = message
    logger.warning("Voice session failed: %s", message)
    await self._set_state(InteractionState.ERROR, message)

  async def _closed(self) -> None:
    self.fragment = None
    self.mode = CaptureMode.COMMAND
    self.retries = 0
    await self._set_state(InteractionState.IDLE)
    await _emit(self.on_close, self)

  async def close(self) -> None:
    """Stop any capture in flight and return to IDLE."""
    self.capture.cancel()
    task = self._task
    self._task = None
    if task is not None and not task.done() and task is not asyncio.current_task():
      task.cancel()
      with contextlib.suppress(asyncio.CancelledError):
        await task
    if self.state is not InteractionState.IDLE:
      await self._closed()
