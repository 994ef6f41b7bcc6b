import base64
import logging
import os
from pathlib import Path

from dotenv import load_dotenv
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from api.bookings import router as bookings_router
from api.voice import router as voice_router
from dictionaries import DEFAULT_LANGUAGE, get_dictionary
from voice.speech import synthesize_speech

logging.basicConfig(
  level=os.getenv("LOG_LEVEL", "INFO").upper(),
  format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Team Booking Voice Intake")
app.include_router(voice_router)
app.include_router(bookings_router)

CORS_ORIGINS = [
  origin.strip()
  for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
  if origin.strip()
]

app.add_middleware(
  CORSMiddleware,
  allow_origins=CORS_ORIGINS,
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)

HTTP_MESSAGES = {
  "en-US": {
    "tts_text_required": "text is required",
    "tts_failed": "Text-to-speech failed. Please try again later.",
  },
  "gu-IN": {
    "tts_text_required": "લખાણ જરૂરી છે",
    "tts_failed": "અવાજ બનાવવામાં નિષ્ફળતા મળી. કૃપા કરીને પછીથી પ્રયાસ કરો.",
  },
}


def _msg(lang: str, key: str, table: dict) -> str:
  return table.get(lang, table[DEFAULT_LANGUAGE]).get(key, key)


class TTSRequest(BaseModel):
  text: str
  lang: str | None = DEFAULT_LANGUAGE


@app.get("/health")
async def health():
  return {"status": "ok"}


@app.post("/tts")
async def tts(request: TTSRequest):
  lang = get_dictionary(request.lang).id
  text = (request.text or "").strip()
  if not text:
    raise HTTPException(status_code=400, detail=_msg(lang, "tts_text_required", HTTP_MESSAGES))
  try:
    audio_bytes = await synthesize_speech(text, lang)
  except Exception as e:
    logger.exception("Text-to-speech failed: %s", e)
    raise HTTPException(status_code=500, detail=_msg(lang, "tts_failed", HTTP_MESSAGES))
  audio_b64 = base64.b64encode(audio_bytes).decode("utf-8")
  return {"audio_base64": audio_b64}


if __name__ == "__main__":
  def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
      return default
    try:
      return int(raw)
    except ValueError:
      return default


  host = os.getenv("BACKEND_HOST", "127.0.0.1")
  port = _int_env("BACKEND_PORT", 8888)
  reload_enabled = os.getenv("BACKEND_RELOAD", "true").lower() in ("1", "true", "yes", "on")

  logger.info("Starting backend on %s:%s (reload=%s)", host, port, reload_enabled)
  uvicorn.run("main:app", host=host, port=port, reload=reload_enabled)
