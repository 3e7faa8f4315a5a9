import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from channels import Channel, Role
from logging_config import get_logger

logger = get_logger(__name__)


class Mode(str, Enum):
    MENU = "menu"
    ACTIVE_ROUND = "active-round"


@dataclass
class Room:
    id: str
    mode: Mode = Mode.MENU
    target_word: Optional[str] = None
    theme: Optional[str] = None
    drawing_log: List[dict] = field(default_factory=list)
    speech: Optional[Channel] = None
    drawer: Optional[Channel] = None
    guesser: Optional[Channel] = None
    # Outstanding word lookup; a finished lookup only applies if it is still this task
    pending_word: Optional[asyncio.Task] = None

    def slot(self, role: Role) -> Optional[Channel]:
        return getattr(self, role.value)

    def holds(self, channel: Channel) -> bool:
        return channel.role is not None and self.slot(channel.role) is channel

    def claim(self, channel: Channel) -> Optional[Channel]:
        """Put channel in its role's slot and return whoever held it before (not closed)."""
        previous = self.slot(channel.role)
        setattr(self, channel.role.value, channel)
        channel.room_id = self.id
        return previous if previous is not channel else None

    def release(self, channel: Channel) -> bool:
        if not self.holds(channel):
            return False
        setattr(self, channel.role.value, None)
        return True

    def browsers(self) -> List[Channel]:
        return [c for c in (self.drawer, self.guesser) if c is not None]

    def start_round(self, word: str, theme: Optional[str]) -> None:
        self.mode = Mode.ACTIVE_ROUND
        self.target_word = word
        self.theme = theme
        self.drawing_log.clear()

    def reset(self) -> None:
        """Back to the menu: no word, no theme, empty canvas, no pending lookup."""
        self.mode = Mode.MENU
        self.target_word = None
        self.theme = None
        self.drawing_log.clear()
        self.pending_word = None


class RoomRegistry:
    """Process-wide room store. Rooms are created on first lookup and never evicted."""

    def __init__(self):
        self.rooms: Dict[str, Room] = {}

    def get_or_create(self, room_id: str) -> Room:
        room = self.rooms.get(room_id)
        if room is None:
            room = Room(id=room_id)
            self.rooms[room_id] = room
            logger.info(f"Created room {room_id} (rooms in registry: {len(self.rooms)})")
        return room

    def get(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self.rooms

    def __len__(self) -> int:
        return len(self.rooms)


room_registry = RoomRegistry()
