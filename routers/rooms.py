from fastapi import APIRouter, HTTPException, Request
from schemas.rooms import CreateRoomResponse, RoomDetailsResponse
import random
import string
from backend import Mode, room_registry
from constants import ROOM_CODE_LENGTH
from logging_config import get_logger

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])

def generate_room_code(length: int = ROOM_CODE_LENGTH) -> str:
    return ''.join(random.choices(string.digits, k=length))

def _ws_base(request: Request) -> str:
    base_url = str(request.base_url).rstrip('/')
    # Replace http/https with ws/wss
    return base_url.replace("http://", "ws://").replace("https://", "wss://")

@rooms_router.post("/", response_model=CreateRoomResponse, status_code=201)
async def create_room(request: Request):
    client_host = request.client.host if request.client else 'unknown'
    logger.info(f"Room creation request from {client_host}")

    # Codes are short, so retry until an unused one comes up
    for _ in range(100):
        room_id = generate_room_code()
        if room_id not in room_registry:
            break
    else:
        logger.error(f"Could not find a free {ROOM_CODE_LENGTH}-digit room code ({len(room_registry)} rooms in use)")
        raise HTTPException(status_code=503, detail="No free room codes")

    room_registry.get_or_create(room_id)
    ws_base = _ws_base(request)
    logger.info(f"Room {room_id} created for {client_host}")

    return CreateRoomResponse(
        room_id=room_id,
        web_ws_url=f"{ws_base}/web-ws",
        speech_ws_url=f"{ws_base}/ws?roomId={room_id}",
    )


@rooms_router.get("/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(room_id: str):
    """
    Get the public state of a room. Never reveals the secret word.

    Returns:
    - room_id: Room code
    - mode: "menu" or "active-round"
    - theme: Theme of the current round, if any
    - round_in_progress: Whether a word is being drawn right now
    - drawing_segments: Number of strokes drawn this round
    - caller_connected / drawer_connected / guesser_connected: Which slots are occupied
    """
    room = room_registry.get(room_id)
    if room is None:
        logger.warning(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    return RoomDetailsResponse(
        room_id=room.id,
        mode=room.mode.value,
        theme=room.theme,
        round_in_progress=room.mode == Mode.ACTIVE_ROUND,
        drawing_segments=len(room.drawing_log),
        caller_connected=room.speech is not None,
        drawer_connected=room.drawer is not None,
        guesser_connected=room.guesser is not None,
    )
