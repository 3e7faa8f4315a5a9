from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from typing import Annotated, Any, Literal, Optional, Union


# ---- Speech relay channel, inbound ----

class SetupMessage(BaseModel):
    type: Literal["setup"]
    callSid: Optional[str] = None
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    customParameters: dict[str, Any] = Field(default_factory=dict)


class PromptMessage(BaseModel):
    type: Literal["prompt"]
    voicePrompt: str


SpeechInbound = Annotated[Union[SetupMessage, PromptMessage], Field(discriminator="type")]


# ---- Speech relay channel, outbound ----

class SpeechText(BaseModel):
    type: Literal["text"] = "text"
    token: str
    last: bool = True


# ---- Browser channel, inbound ----

class JoinWeb(BaseModel):
    # Room codes are digits, so clients may send them as JSON numbers
    model_config = ConfigDict(coerce_numbers_to_str=True)

    type: Literal["joinWeb"]
    roomId: str = Field(min_length=1)
    role: Optional[str] = None


class DrawSegment(BaseModel):
    # Extra fields (colour, width, ...) are carried through to the guesser untouched
    model_config = ConfigDict(extra="allow")

    type: Literal["drawSegment"] = "drawSegment"
    x1: float
    y1: float
    x2: float
    y2: float

    def as_record(self) -> dict:
        return self.model_dump(exclude={"type"})


class DrawerChat(BaseModel):
    type: Literal["drawerChat"] = "drawerChat"
    text: str


class ClearCanvas(BaseModel):
    type: Literal["clearCanvas"] = "clearCanvas"


BrowserInbound = Annotated[
    Union[JoinWeb, DrawSegment, DrawerChat, ClearCanvas],
    Field(discriminator="type"),
]


# ---- Browser channel, outbound ----

class Status(BaseModel):
    type: Literal["status"] = "status"
    message: str


class Menu(BaseModel):
    type: Literal["menu"] = "menu"


class InitDrawing(BaseModel):
    type: Literal["initDrawing"] = "initDrawing"
    segments: list[dict]


class PictionaryStart(BaseModel):
    """Round start. `word` stays None (and is omitted on the wire) for the guesser."""
    type: Literal["pictionaryStart"] = "pictionaryStart"
    word: Optional[str] = None


class RoundResult(BaseModel):
    type: Literal["roundResult"] = "roundResult"
    outcome: Literal["correct"]
    word: str


class Guess(BaseModel):
    type: Literal["guess"] = "guess"
    guess: str
    correct: bool


speech_inbound_adapter = TypeAdapter(SpeechInbound)
browser_inbound_adapter = TypeAdapter(BrowserInbound)
