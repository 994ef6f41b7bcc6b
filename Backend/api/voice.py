"""FastAPI routes for voice booking intake."""

import base64
import binascii
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from booking.date_utils import format_date_for_display, format_time_range, get_day_of_week, is_past_date
from dictionaries import DEFAULT_LANGUAGE, get_dictionary, get_prompt, list_languages
from voice.models import ParsedCommand, Team
from voice.nlp import parse_voice_command
from voice.session import InvalidTransition, VoiceSession
from voice.speech import EdgeSpeaker, QueuedCapture

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/voice", tags=["voice"])


# --- Request / Response Models ---

class TeamIn(BaseModel):
    id: str
    name: str

    def to_team(self) -> Team:
        return Team(id=self.id, name=self.name)


class ParseRequest(BaseModel):
    text: str
    lang: Optional[str] = DEFAULT_LANGUAGE
    teams: list[TeamIn] = []
    now: Optional[datetime] = None


def _local_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now()
    if now.tzinfo is not None:
        return now.astimezone().replace(tzinfo=None)
    return now


def command_payload(command: ParsedCommand, now: datetime) -> dict:
    start, end = command.start, command.end
    return {
        "eventName": command.event_name,
        "startDateTime": start.isoformat() if start else None,
        "endDateTime": end.isoformat() if end else None,
        "teamId": command.team_id,
        "isAllDay": command.is_all_day,
        "originalTranscript": command.original_transcript,
        "normalizedTranscript": command.normalized_transcript,
        "draft": command.to_draft(),
        "displayDate": format_date_for_display(start.date()) if start else "",
        "dayOfWeek": get_day_of_week(start.date()) if start else "",
        "displayTime": format_time_range(start, end) if start and end else "",
        "isPastDate": is_past_date(start.date(), now.date()) if start else False,
    }


# --- GET /voice/languages ---

@router.get("/languages")
async def voice_languages():
    return [
        {"id": lang_id, "name": name, "prompts": dict(get_dictionary(lang_id).prompts)}
        for lang_id, name in list_languages()
    ]


# --- POST /voice/parse ---

@router.post("/parse")
async def voice_parse(req: ParseRequest):
    text = (req.text or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail=get_prompt(req.lang, "missing_info"))

    teams = [t.to_team() for t in req.teams]
    now = _local_now(req.now)
    command = parse_voice_command(text, req.lang or DEFAULT_LANGUAGE, teams, now)
    return command_payload(command, now)


# --- WS /voice/ws ---

@router.websocket("/ws")
async def voice_ws(websocket: WebSocket):
    await websocket.accept()
    capture = QueuedCapture()
    include_audio = True

    async def send_tts(text: str, audio: bytes) -> None:
        if not include_audio:
            return
        await websocket.send_json(
            {
                "type": "tts_chunk",
                "text": text,
                "audio_base64": base64.b64encode(audio).decode("utf-8"),
            }
        )

    async def send_state(session: VoiceSession) -> None:
        await websocket.send_json(
            {
                "type": "state",
                "state": session.state.value,
                "mode": session.mode.value,
                "message": session.message,
                "transcript": session.transcript,
                "error": session.error,
            }
        )

    async def send_parsed(command: ParsedCommand) -> None:
        await websocket.send_json({"type": "parsed", "command": command_payload(command, datetime.now())})

    async def send_closed(session: VoiceSession) -> None:
        await websocket.send_json({"type": "closed"})

    speaker = EdgeSpeaker(sink=send_tts)
    session: Optional[VoiceSession] = None

    try:
        while True:
            packet = await websocket.receive_json()
            packet = packet or {}
            packet_type = packet.get("type")

            if packet_type == "start":
                if session is not None:
                    await session.close()
                include_audio = bool(packet.get("include_audio", True))
                teams = [Team.from_record(t) for t in packet.get("teams") or [] if isinstance(t, dict)]
                session = VoiceSession(
                    capture,
                    speaker,
                    teams,
                    packet.get("lang") or DEFAULT_LANGUAGE,
                    on_parsed=send_parsed,
                    on_state_change=send_state,
                    on_close=send_closed,
                )
                try:
                    session.open()
                except InvalidTransition as e:
                    await websocket.send_json({"type": "error", "message": str(e)})
                continue

            if packet_type == "transcript":
                capture.push_transcript(packet.get("text") or "")
                continue

            if packet_type == "audio":
                audio_b64 = packet.get("audio_base64") or ""
                try:
                    audio = base64.b64decode(audio_b64, validate=True)
                except (binascii.Error, ValueError):
                    await websocket.send_json({"type": "error", "message": "Invalid audio_base64"})
                    continue
                if audio:
                    capture.push_audio(audio)
                continue

            if packet_type == "error":
                capture.push_error(packet.get("error") or "")
                continue

            if packet_type == "close":
                if session is not None:
                    await session.close()
                continue

            if packet_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            await websocket.send_json(
                {
                    "type": "error",
                    "message": "Unsupported message type",
                }
            )

    except WebSocketDisconnect:
        logger.info("Voice websocket disconnected")
    finally:
        if session is not None:
            # the socket may already be gone; stop talking to it
            session.on_state_change = session.on_parsed = session.on_close = None
            await session.close()
        await speaker.aclose()
