import uuid
from enum import Enum
from typing import Optional

from fastapi import WebSocket
from pydantic import BaseModel

from logging_config import get_logger

logger = get_logger(__name__)


class Role(str, Enum):
    SPEECH = "speech"
    DRAWER = "drawer"
    GUESSER = "guesser"

    @classmethod
    def from_browser(cls, role: Optional[str]) -> "Role":
        # Browsers call the guesser view "caller"; anything unrecognized draws
        return cls.GUESSER if role == "caller" else cls.DRAWER


class Channel:
    """One participant connection. Sends are fire-and-forget and never raise."""

    def __init__(self, websocket: WebSocket, role: Optional[Role] = None):
        self.websocket = websocket
        self.role = role
        self.connection_id = str(uuid.uuid4())
        self.room_id: Optional[str] = None
        self.closed = False

    async def send(self, message: BaseModel) -> None:
        if self.closed:
            logger.debug(f"Skipping send of {message.type} to closed connection {self.connection_id}")
            return
        try:
            await self.websocket.send_text(message.model_dump_json(exclude_none=True))
        except Exception as e:
            logger.warning(f"Error sending {message.type} to connection {self.connection_id} in room {self.room_id}: {e}")

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self.websocket.close()
        except Exception as e:
            logger.debug(f"Error closing WebSocket {self.connection_id}: {e}")

    def __repr__(self) -> str:
        role = self.role.value if self.role else "unjoined"
        return f"Channel({role}, {self.connection_id[:8]}, room={self.room_id})"
