from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from routers.rooms import rooms_router
from routers.voice import voice_router
from backend import room_registry
from channels import Channel, Role
from coordinator import RoomCoordinator
from constants import LOG_LEVEL, LOG_FILE
from word_source import WordSource
from typing import Optional
from logging_config import get_logger, setup_logging

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)

app = FastAPI(title="Pictionary Hotline")

# Configure CORS to allow all origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins
    allow_credentials=True,
    allow_methods=["*"],  # Allow all HTTP methods
    allow_headers=["*"],  # Allow all headers
)

app.include_router(rooms_router)
app.include_router(voice_router)

# One coordinator per process; rooms live in the in-memory registry for the process lifetime
coordinator = RoomCoordinator(room_registry, WordSource())

logger.info("FastAPI application initialized")


@app.websocket("/ws")
async def speech_endpoint(websocket: WebSocket, roomId: Optional[str] = None):
    """Speech relay channel: the caller's recognized speech in, text to read aloud out.

    The room comes from the relay's setup message (customParameters.roomId),
    or from the roomId query parameter when the relay URL carries it.
    """
    await websocket.accept()
    channel = Channel(websocket, Role.SPEECH)
    logger.info(f"Speech WebSocket connection opened: {channel.connection_id}")

    try:
        if roomId:
            await coordinator.attach_speech(channel, roomId)

        while not channel.closed:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                channel.closed = True
                logger.info(f"Speech WebSocket {channel.connection_id} closed by the relay")
                break
            data = message.get("text")
            if data is None:
                logger.warning(f"Dropping non-text frame from {channel}")
                continue
            logger.debug(f"Received speech message from {channel}")
            await coordinator.handle_speech_message(channel, data)
    except Exception as e:
        logger.error(f"Speech WebSocket error for {channel}: {e}", exc_info=True)
    finally:
        await coordinator.speech_closed(channel)
        await channel.close()
        logger.info(f"Speech WebSocket closed: {channel.connection_id}")


@app.websocket("/web-ws")
async def browser_endpoint(websocket: WebSocket):
    """Browser channel for the drawer and guesser pages. The first joinWeb picks room and role."""
    await websocket.accept()
    channel = Channel(websocket)
    logger.info(f"Browser WebSocket connection opened: {channel.connection_id}")

    try:
        while not channel.closed:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                channel.closed = True
                logger.info(f"Browser WebSocket disconnected: {channel}")
                break
            data = message.get("text")
            if data is None:
                logger.warning(f"Dropping non-text frame from {channel}")
                continue
            logger.debug(f"Received browser message from {channel}")
            await coordinator.handle_browser_message(channel, data)
    except Exception as e:
        logger.error(f"Browser WebSocket error for {channel}: {e}", exc_info=True)
    finally:
        await coordinator.browser_closed(channel)
        await channel.close()
        logger.info(f"Browser WebSocket closed: {channel.connection_id}")
