"""Plain-text transcript rendering.

Layout::

    LINE WORKS Talk History
    Exported: 2024-01-02 10:00:00
    ==================================================

    ---------------- 2024-01-01 ----------------

    Me (09:00):
    「hi」

    [System] Alex joined the room.
"""

import datetime as dt
from typing import Optional

from .config import FormatOptions
from .events import ConversationEvent, DateMarker, Message, SystemNotice

SEPARATOR = "=" * 50
DATE_RULE = "-" * 16


def format_header(options: FormatOptions, now: Optional[dt.datetime] = None) -> str:
    now = now or dt.datetime.now()
    return (f"{options.title}\n"
            f"{options.exported_label}: {now.strftime('%Y-%m-%d %H:%M:%S')}\n"
            f"{SEPARATOR}\n\n")


def format_message(message: Message) -> str:
    time_str = f" ({message.time})" if message.time else ""
    return f"{message.speaker}{time_str}:\n「{message.body}」"


def format_event(event: ConversationEvent, options: FormatOptions) -> str:
    if isinstance(event, DateMarker):
        return f"{DATE_RULE} {event.label} {DATE_RULE}"
    if isinstance(event, SystemNotice):
        return f"{options.system_prefix} {event.text}"
    if isinstance(event, Message):
        return format_message(event)
    raise TypeError(f"Not a conversation event: {event!r}")


def format_transcript(events, options: FormatOptions = None,
                      now: Optional[dt.datetime] = None) -> str:
    options = options or FormatOptions()
    body = "\n\n".join(format_event(e, options) for e in events)
    return format_header(options, now) + body


def day_range(events, start_index: int) -> list[ConversationEvent]:
    """The run from the date marker at ``start_index`` up to the next date marker."""
    if not 0 <= start_index < len(events):
        raise IndexError(f"Event index out of range: {start_index}")
    if not isinstance(events[start_index], DateMarker):
        raise ValueError(f"Event {start_index} is not a date marker")
    run = [events[start_index]]
    for event in events[start_index + 1:]:
        if isinstance(event, DateMarker):
            break
        run.append(event)
    return run


def format_range(events, start_index: int, options: FormatOptions = None,
                 now: Optional[dt.datetime] = None) -> str:
    return format_transcript(day_range(events, start_index), options, now)
