"""
Room coordinator: the game state machine and participant fan-out.

Every room has up to three channel slots (caller speech, drawer, guesser).
Inbound messages are parsed into closed message types, routed to the room the
sending channel occupies, and answered by sending to the right subset of
slots. All state lives on the event loop thread; the only await that yields
mid-transition is the word lookup, which runs as its own task and is
discarded on completion if the room has moved on.
"""

import asyncio
import re
from typing import Optional

from pydantic import BaseModel, ValidationError

from backend import Mode, Room, RoomRegistry
from channels import Channel, Role
from constants import CORRECT_TEXT, FAREWELL_TEXT, QUIT_WORDS, ROUND_START_TEXT, TRY_AGAIN_TEXT
from logging_config import get_logger
from schemas.messages import (
    ClearCanvas,
    DrawerChat,
    DrawSegment,
    Guess,
    InitDrawing,
    JoinWeb,
    Menu,
    PictionaryStart,
    PromptMessage,
    RoundResult,
    SetupMessage,
    SpeechText,
    Status,
    browser_inbound_adapter,
    speech_inbound_adapter,
)
from word_source import pick_word

logger = get_logger(__name__)

_PUNCTUATION = re.compile(r"[^\w\s]")


def normalize(text: str) -> str:
    return " ".join(_PUNCTUATION.sub(" ", text or "").lower().split())


def is_correct_guess(target_word: str, utterance: str) -> bool:
    """True when the target's first word appears anywhere in the utterance.

    Only the first token of the target counts, so "rubber duck" is guessed by
    "a rubber band" but not by "a duck". Containment is substring based.
    """
    tokens = normalize(target_word).split()
    if not tokens:
        return False
    return tokens[0] in normalize(utterance)


def wants_to_quit(utterance: str) -> bool:
    # Whole words only, so guesses like "quite" or "exits" keep playing
    words = normalize(utterance).split()
    return any(word in words for word in QUIT_WORDS)


def _parse(adapter, raw: str, channel: Channel) -> Optional[BaseModel]:
    try:
        return adapter.validate_json(raw)
    except ValidationError as e:
        errors = e.errors()
        if errors and errors[0]["type"] == "union_tag_invalid":
            logger.debug(f"Ignoring unsupported message type from {channel}: {errors[0].get('ctx', {}).get('tag')!r}")
        else:
            logger.warning(f"Dropping malformed message from {channel}: {e.error_count()} error(s), first: {errors[0]['msg'] if errors else e}")
        return None


class RoomCoordinator:
    def __init__(self, registry: RoomRegistry, word_source):
        self.registry = registry
        self.word_source = word_source
        # Strong references to in-flight word lookups; the room only remembers the latest one
        self._lookups = set()

    def room_of(self, channel: Channel) -> Optional[Room]:
        """The room whose slot this channel currently holds, if any."""
        if channel.room_id is None:
            return None
        room = self.registry.get(channel.room_id)
        if room is None or not room.holds(channel):
            return None
        return room

    # ---- Fan-out ----

    async def tell_speech(self, room: Room, text: str) -> None:
        if room.speech is None:
            return
        await room.speech.send(SpeechText(token=text))

    async def tell_browsers(self, room: Room, message: BaseModel) -> None:
        for channel in room.browsers():
            await channel.send(message)

    async def announce_round(self, room: Room, channel: Channel) -> None:
        if channel.role == Role.DRAWER:
            await channel.send(PictionaryStart(word=room.target_word))
        else:
            await channel.send(PictionaryStart())

    async def relay_stroke(self, room: Room, channel: Channel, segment: DrawSegment) -> None:
        if room.drawer is not channel:
            logger.debug(f"Ignoring stroke from {channel}, not the drawer of room {room.id}")
            return
        if room.mode != Mode.ACTIVE_ROUND:
            logger.debug(f"Ignoring stroke in room {room.id}, no round in progress")
            return
        room.drawing_log.append(segment.as_record())
        if room.guesser is not None:
            await room.guesser.send(segment)

    async def relay_hint(self, room: Room, channel: Channel, text: str) -> None:
        if room.drawer is not channel:
            logger.debug(f"Ignoring hint from {channel}, not the drawer of room {room.id}")
            return
        logger.info(f"Drawer hint in room {room.id}: {text!r}")
        await self.tell_speech(room, text)
        await self.tell_browsers(room, DrawerChat(text=text))

    async def clear_canvas(self, room: Room, channel: Channel) -> None:
        if room.drawer is not channel:
            logger.debug(f"Ignoring clear request from {channel}, not the drawer of room {room.id}")
            return
        room.drawing_log.clear()
        await self.tell_browsers(room, ClearCanvas())

    async def replay_on_join(self, room: Room, channel: Channel) -> None:
        if room.drawing_log:
            await channel.send(InitDrawing(segments=list(room.drawing_log)))
        if room.mode == Mode.ACTIVE_ROUND:
            await self.announce_round(room, channel)
        else:
            await channel.send(Menu())

    # ---- Channel lifecycle ----

    async def attach_speech(self, channel: Channel, room_id: str) -> Room:
        current = self.room_of(channel)
        if current is not None:
            if current.id == room_id:
                return current
            await self.speech_closed(channel)

        room = self.registry.get_or_create(room_id)
        previous = room.claim(channel)
        if previous is not None:
            logger.info(f"Speech channel {previous} displaced by {channel} in room {room.id}")
        logger.info(f"Caller connected to room {room.id} ({channel})")
        await self.tell_browsers(room, Status(message=f"Caller connected to room {room.id}"))
        return room

    async def speech_closed(self, channel: Channel) -> None:
        """Reset the room if this channel is still its caller. Safe to call twice."""
        room = self.room_of(channel)
        if room is None:
            return
        room.release(channel)
        room.reset()
        logger.info(f"Caller left room {room.id}, back to menu")
        await self.tell_browsers(room, Status(message="Caller disconnected"))
        await self.tell_browsers(room, Menu())

    async def join_browser(self, channel: Channel, room_id: str, role: Optional[str]) -> Room:
        current = self.room_of(channel)
        if current is not None:
            current.release(channel)
            logger.info(f"{channel} left room {current.id} to rejoin")

        channel.role = Role.from_browser(role)
        room = self.registry.get_or_create(room_id)
        previous = room.claim(channel)
        if previous is not None:
            # The displaced socket stays open; it just no longer speaks for the room
            logger.info(f"{channel.role.value.capitalize()} {previous} displaced by {channel} in room {room.id}")
        logger.info(f"{channel} joined room {room.id}")
        await self.replay_on_join(room, channel)
        return room

    async def browser_closed(self, channel: Channel) -> None:
        room = self.room_of(channel)
        if room is None:
            return
        room.release(channel)
        logger.info(f"{channel} left room {room.id}")

    # ---- State machine ----

    async def handle_utterance(self, channel: Channel, text: str) -> Optional[asyncio.Task]:
        """Apply one recognized caller utterance. Returns the word lookup task when a round is requested."""
        room = self.room_of(channel)
        if room is None:
            logger.debug(f"Dropping utterance from {channel}, not attached to a room")
            return None
        logger.info(f"Caller in room {room.id} said: {text!r} (mode={room.mode.value})")

        if wants_to_quit(text):
            await self.tell_speech(room, FAREWELL_TEXT)
            await self.speech_closed(channel)
            await channel.close()
            return None

        if room.mode == Mode.MENU:
            task = asyncio.create_task(self._start_round(room, text))
            self._lookups.add(task)
            task.add_done_callback(self._lookups.discard)
            room.pending_word = task
            return task

        if is_correct_guess(room.target_word, text):
            word = room.target_word
            room.reset()
            logger.info(f"Round in room {room.id} solved")
            await self.tell_speech(room, CORRECT_TEXT.format(word=word))
            await self.tell_browsers(room, RoundResult(outcome="correct", word=word))
            return None

        await self.tell_speech(room, TRY_AGAIN_TEXT)
        await self.tell_browsers(room, Guess(guess=text, correct=False))
        return None

    async def _start_round(self, room: Room, theme: str) -> None:
        word = await pick_word(self.word_source, theme)
        if room.pending_word is not asyncio.current_task():
            logger.info(f"Discarding stale word lookup for room {room.id}")
            return
        room.pending_word = None
        room.start_round(word, theme)
        logger.info(f"Round started in room {room.id} with theme {theme!r}")

        await self.tell_speech(room, ROUND_START_TEXT.format(theme=theme))
        for channel in room.browsers():
            await self.announce_round(room, channel)

    # ---- Inbound dispatch ----

    async def handle_speech_message(self, channel: Channel, raw: str) -> Optional[asyncio.Task]:
        message = _parse(speech_inbound_adapter, raw, channel)
        if isinstance(message, SetupMessage):
            room_id = message.customParameters.get("roomId")
            logger.info(f"Call setup from {message.from_} to {message.to}, room {room_id!r}")
            if room_id:
                await self.attach_speech(channel, str(room_id))
            elif channel.room_id is None:
                logger.warning(f"Call setup for {channel} carried no roomId")
        elif isinstance(message, PromptMessage):
            return await self.handle_utterance(channel, message.voicePrompt)
        return None

    async def handle_browser_message(self, channel: Channel, raw: str) -> None:
        message = _parse(browser_inbound_adapter, raw, channel)
        if message is None:
            return
        if isinstance(message, JoinWeb):
            await self.join_browser(channel, message.roomId, message.role)
            return

        room = self.room_of(channel)
        if room is None:
            logger.debug(f"Dropping {message.type} from {channel}, not in a room slot")
            return
        if isinstance(message, DrawSegment):
            await self.relay_stroke(room, channel, message)
        elif isinstance(message, DrawerChat):
            await self.relay_hint(room, channel, message.text)
        elif isinstance(message, ClearCanvas):
            await self.clear_canvas(room, channel)
        else:
            logger.debug(f"No handler for {message.type} from {channel}")
