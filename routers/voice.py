from fastapi import APIRouter, Request
from fastapi.responses import Response
from xml.sax.saxutils import escape, quoteattr
import re
from constants import GREETING, SPEECH_WS_URL
from logging_config import get_logger

logger = get_logger(__name__)

voice_router = APIRouter(tags=["voice"])

ROOM_CODE_PATTERN = re.compile(r"^\d{4,6}$")

GATHER_PROMPT = "Enter your room code from the drawing screen, then press pound."
INVALID_CODE_PROMPT = "Sorry, room codes are four to six digits."


def _twiml(body: str) -> Response:
    return Response(
        content=f'<?xml version="1.0" encoding="UTF-8"?>\n<Response>\n{body}\n</Response>',
        media_type="text/xml",
    )


def gather_twiml(prefix: str = "") -> str:
    say = f"  <Say>{escape(prefix)}</Say>\n" if prefix else ""
    return (
        f"{say}"
        '  <Gather input="dtmf" finishOnKey="#" timeout="10" method="GET" action="/twiml">\n'
        f"    <Say>{escape(GATHER_PROMPT)}</Say>\n"
        "  </Gather>\n"
        '  <Redirect method="GET">/twiml</Redirect>'
    )


def relay_twiml(room_id: str) -> str:
    return (
        "  <Connect>\n"
        f"    <ConversationRelay url={quoteattr(SPEECH_WS_URL)} welcomeGreeting={quoteattr(GREETING)}>\n"
        f"      <Parameter name=\"roomId\" value={quoteattr(room_id)} />\n"
        "    </ConversationRelay>\n"
        "  </Connect>"
    )


@voice_router.get("/")
async def health():
    return {"status": "ok", "message": "Pictionary Hotline server is running"}


@voice_router.api_route("/twiml", methods=["GET", "POST"])
async def twiml(request: Request):
    """Called when the number is dialed, and again with the room code the caller keyed in."""
    digits = (request.query_params.get("Digits") or "").strip()
    logger.info(f"HTTP /twiml hit, digits={digits!r}")

    if not digits:
        return _twiml(gather_twiml())
    if not ROOM_CODE_PATTERN.match(digits):
        logger.info(f"Rejected room code {digits!r}")
        return _twiml(gather_twiml(INVALID_CODE_PROMPT))

    logger.info(f"Connecting caller to room {digits}")
    return _twiml(relay_twiml(digits))
