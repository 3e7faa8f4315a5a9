from pydantic import BaseModel
from typing import Optional


class CreateRoomResponse(BaseModel):
    room_id: str
    web_ws_url: str
    speech_ws_url: str

class RoomDetailsResponse(BaseModel):
    room_id: str
    mode: str
    theme: Optional[str]
    round_in_progress: bool
    drawing_segments: int
    caller_connected: bool
    drawer_connected: bool
    guesser_connected: bool
