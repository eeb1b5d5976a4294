"""Conversation event types produced by an extraction pass."""

from dataclasses import dataclass, field
from typing import Union


@dataclass
class DateMarker:
    label: str
    type: str = field(default="date", init=False)


@dataclass
class SystemNotice:
    text: str
    type: str = field(default="system", init=False)


@dataclass
class Message:
    speaker: str
    is_self: bool
    time: str
    body: str
    type: str = field(default="message", init=False)


ConversationEvent = Union[DateMarker, SystemNotice, Message]


@dataclass
class ExtractionState:
    """Continuation context carried from one message to the next within a pass."""
    conversation_title: str
    last_speaker: str = ""
    last_is_self: bool = False


def event_to_dict(event: ConversationEvent) -> dict:
    if isinstance(event, DateMarker):
        return {"type": "date", "content": event.label}
    if isinstance(event, SystemNotice):
        return {"type": "system", "content": event.text}
    return {
        "type": "message",
        "speaker": event.speaker,
        "isSelf": event.is_self,
        "time": event.time,
        "message": event.body,
    }


def event_from_dict(data: dict) -> ConversationEvent:
    kind = data.get("type")
    if kind == "date":
        return DateMarker(data.get("content", ""))
    if kind == "system":
        return SystemNotice(data.get("content", ""))
    if kind == "message":
        return Message(
            speaker=data.get("speaker", ""),
            is_self=bool(data.get("isSelf", False)),
            time=data.get("time", ""),
            body=data.get("message", ""),
        )
    raise ValueError(f"Unknown event type: {kind!r}")
