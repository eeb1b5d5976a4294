"""Post-extraction edits: speaker renames and reordering."""

from .events import Message


def rename_speaker(events, old: str, new: str) -> int:
    """Rename every message whose speaker is exactly ``old``. Returns the number changed."""
    changed = 0
    for event in events:
        if isinstance(event, Message) and event.speaker == old:
            event.speaker = new
            changed += 1
    return changed


def move_event(events: list, src: int, dst: int):
    """Move the event at ``src`` so that it ends up at index ``dst``."""
    size = len(events)
    if not (0 <= src < size and 0 <= dst < size):
        raise IndexError(f"Cannot move event {src} to {dst} in a list of {size}")
    events.insert(dst, events.pop(src))
