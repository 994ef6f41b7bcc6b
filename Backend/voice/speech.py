"""Speech capabilities consumed by the voice session.

The session only sees the two protocols below; the concrete adapters wire
them to faster-whisper (capture) and edge-tts (synthesis) so tests can swap
in fakes.
"""

import asyncio
import io
import logging
import os
from typing import Awaitable, Callable, Protocol

import edge_tts
from edge_tts.exceptions import NoAudioReceived, UnexpectedResponse, WebSocketError

logger = logging.getLogger(__name__)


class SpeechError(Exception):
  pass


class UnsupportedCapability(SpeechError):
  # speech APIs absent; retrying will not help
  pass


class RecognitionError(SpeechError):
  # a single capture failed
  pass


class SpeechCapture(Protocol):
  async def capture(self, language_code: str) -> str: ...

  def cancel(self) -> None: ...


class SpeechSynthesizer(Protocol):
  def speak(self, text: str, language_code: str) -> None: ...


# STT
WHISPER_MODEL_SIZE = os.getenv("WHISPER_MODEL_SIZE", "small")
WHISPER_DEVICE = os.getenv("WHISPER_DEVICE", "cpu")
WHISPER_COMPUTE_TYPE = os.getenv("WHISPER_COMPUTE_TYPE", "int8")

_model = None


def get_whisper_model():
  global _model
  if _model is None:
    from faster_whisper import WhisperModel
    try:
      _model = WhisperModel(WHISPER_MODEL_SIZE, device=WHISPER_DEVICE, compute_type=WHISPER_COMPUTE_TYPE)
    except (RuntimeError, OSError, ValueError) as e:
      raise UnsupportedCapability(f"Whisper model '{WHISPER_MODEL_SIZE}' could not be loaded: {e}") from e
  return _model


def _whisper_lang(language_code: str) -> str:
  # "gu-IN" -> "gu"
  return (language_code or "en").split("-")[0].lower()


def transcribe_audio_bytes(audio: bytes, language_code: str) -> str:
  model = get_whisper_model()
  segments, _ = model.transcribe(io.BytesIO(audio), language=_whisper_lang(language_code))
  return "".join(seg.text for seg in segments).strip()


_UNSUPPORTED_ERRORS = {"unsupported", "not-supported", "service-not-allowed"}


class QueuedCapture:
  """Capture fed by a transport, one finished utterance per item.

  Items are transcript text (recognized client side), raw audio bytes
  (transcribed here with Whisper) or a client-reported recognition error.
  """

  def __init__(self, transcriber: Callable[[bytes, str], str] = transcribe_audio_bytes):
    self._queue: asyncio.Queue = asyncio.Queue()
    self._waiter: asyncio.Future | None = None
    self._transcriber = transcriber

  def push_transcript(self, text: str) -> None:
    self._queue.put_nowait(text or "")

  def push_audio(self, audio: bytes) -> None:
    self._queue.put_nowait(bytes(audio))

  def push_error(self, error: str) -> None:
    if (error or "").lower() in _UNSUPPORTED_ERRORS:
      self._queue.put_nowait(UnsupportedCapability(error))
    else:
      self._queue.put_nowait(RecognitionError(error or "recognition-error"))

  async def capture(self, language_code: str) -> str:
    if self._waiter is not None and not self._waiter.done():
      raise RuntimeError("A capture is already in progress")
    self._waiter = asyncio.ensure_future(self._queue.get())
    try:
      item = await self._waiter
    finally:
      self._waiter = None

    if isinstance(item, SpeechError):
      raise item
    if isinstance(item, bytes):
      try:
        return await asyncio.to_thread(self._transcriber, item, language_code)
      except SpeechError:
        raise
      except Exception as e:
        logger.exception("Transcription failed")
        raise RecognitionError(str(e)[:200]) from e
    return item

  def cancel(self) -> None:
    if self._waiter is not None and not self._waiter.done():
      self._waiter.cancel()
    while not self._queue.empty():
      self._queue.get_nowait()


# TTS
VOICE_BY_LANG = {
  "en-US": "en-US-JennyNeural",
  "gu-IN": "gu-IN-DhwaniNeural",
}
VOICE_FALLBACKS = {
  "en-US": ["en-US-JennyNeural", "en-US-GuyNeural", "en-GB-SoniaNeural"],
  "gu-IN": ["gu-IN-DhwaniNeural", "gu-IN-NiranjanNeural"],
}
DEFAULT_VOICE = VOICE_BY_LANG["en-US"]

PROXY = os.getenv("HTTPS_PROXY") or os.getenv("HTTP_PROXY")
CONNECT_TIMEOUT = int(os.getenv("EDGE_TTS_CONNECT_TIMEOUT", "10"))
RECEIVE_TIMEOUT = int(os.getenv("EDGE_TTS_RECEIVE_TIMEOUT", "60"))


async def synthesize_speech(text: str, language_code: str = "en-US") -> bytes:
  primary_voice = VOICE_BY_LANG.get(language_code, DEFAULT_VOICE)
  voices = [primary_voice] + [v for v in VOICE_FALLBACKS.get(language_code, []) if v != primary_voice]
  last_error = None

  for voice in voices:
    try:
      communicate = edge_tts.Communicate(
        text,
        voice,
        proxy=PROXY,
        connect_timeout=CONNECT_TIMEOUT,
        receive_timeout=RECEIVE_TIMEOUT,
      )
      audio_bytes = b""
      async for chunk in communicate.stream():
        if chunk["type"] == "audio":
          audio_bytes += chunk["data"]
      if audio_bytes:
        return audio_bytes
      last_error = NoAudioReceived("No audio was received.")
    except (NoAudioReceived, WebSocketError, UnexpectedResponse) as e:
      last_error = e
    except Exception as e:
      logger.warning("Voice %s failed: %s", voice, e)
      last_error = e

  if last_error:
    raise last_error
  raise NoAudioReceived("No audio was received.")


AudioSink = Callable[[str, bytes], Awaitable[None]]


class EdgeSpeaker:
  """Fire-and-forget synthesis; finished audio goes to ``sink``."""

  def __init__(self, sink: AudioSink | None = None):
    self._sink = sink
    self._tasks: set[asyncio.Task] = set()

  def speak(self, text: str, language_code: str) -> None:
    if not text:
      return
    task = asyncio.get_running_loop().create_task(self._speak(text, language_code))
    self._tasks.add(task)
    task.add_done_callback(self._tasks.discard)

  async def _speak(self, text: str, language_code: str) -> None:
    try:
      audio = await synthesize_speech(text, language_code)
    except Exception:
      logger.exception("Speech synthesis failed for %r", text[:80])
      return
    if self._sink is not None:
      await self._sink(text, audio)

  async def aclose(self) -> None:
    for task in list(self._tasks):
      task.cancel()
    await asyncio.gather(*self._tasks, return_exceptions=True)
