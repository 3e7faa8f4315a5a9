import asyncio
import json
import os
import sys
import pytest

# Ensure the repository root (containing the flat modules) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from backend import room_registry


class FakeWebSocket:
    """Records what the server sends; optionally fails every send like a dropped peer."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.closed = False
        self.fail = fail

    async def send_text(self, data):
        if self.fail:
            raise RuntimeError("connection reset by peer")
        self.sent.append(json.loads(data))

    async def close(self):
        self.closed = True

    def types(self):
        return [m["type"] for m in self.sent]

    def clear(self):
        self.sent.clear()


class StubWordSource:
    """Returns a fixed word. With a gate, every lookup waits until the gate is set."""

    def __init__(self, word: str = "pepperoni", gate: asyncio.Event = None):
        self.word = word
        self.gate = gate
        self.themes = []

    async def generate_word(self, theme):
        self.themes.append(theme)
        if self.gate is not None:
            await self.gate.wait()
        return self.word


@pytest.fixture(autouse=True)
def clean_registry():
    room_registry.rooms.clear()
    yield
    room_registry.rooms.clear()
