"""One extraction pass: snapshot in, ordered conversation events out."""

from dataclasses import dataclass, field, replace
from typing import Optional

from bs4 import BeautifulSoup

from .body import extract_body
from .classifier import ItemKind, classify_items
from .config import ExtractOptions, FormatOptions
from .events import (ConversationEvent, DateMarker, ExtractionState, Message,
                     SystemNotice, event_to_dict)
from .formatter import format_transcript
from .locator import find_conversation_title, find_container
from .log import log_debug, log_warn
from .node import Node
from .profile import Profile, detect_profile, load_profiles
from .resolver import resolve_speaker

EXTRACT_ACTION = "extractTalk"


def parse_html(content: str) -> Node:
    return Node(BeautifulSoup(content, "html.parser"))


def _viewport_options(root: Node, options: ExtractOptions) -> ExtractOptions:
    # The capturing page may record its own viewport width.
    for el in [root] + root.select("html, body")[:2]:
        width = el.attribute("data-viewport-width")
        if width:
            try:
                return replace(options, viewport_width=float(width))
            except ValueError:
                log_debug(f"Ignoring invalid data-viewport-width {width!r}")
    return options


def _date_event(node: Node, profile: Profile) -> Optional[DateMarker]:
    label_el = node.select_one(profile.date_label_selector)
    label = label_el.text() if label_el is not None else node.text()
    return DateMarker(label) if label else None


def _system_event(node: Node) -> Optional[SystemNotice]:
    text = node.text()
    return SystemNotice(text) if text else None


def extract(root: Node, profile: Profile = None,
            options: ExtractOptions = None) -> list[ConversationEvent]:
    """Extract the talk in ``root`` as an ordered list of events.

    Returns an empty list when no talk container is present.
    """
    if isinstance(root, BeautifulSoup):
        root = Node(root)
    if profile is None:
        profile = detect_profile(root.tag, load_profiles())
    options = _viewport_options(root, options or ExtractOptions())

    container = find_container(root, profile, options)
    if container is None:
        return []

    state = ExtractionState(
        conversation_title=find_conversation_title(root, profile, options.counterpart_label))
    log_debug(f"Conversation title: {state.conversation_title}")

    events: list[ConversationEvent] = []
    for kind, node in classify_items(container, profile):
        if kind is ItemKind.DATE_MARKER:
            event = _date_event(node, profile)
        elif kind is ItemKind.SYSTEM_NOTICE:
            event = _system_event(node)
        else:
            resolution, state = resolve_speaker(node, state, profile, options)
            body = extract_body(node, resolution.speaker, resolution.time, profile, options)
            event = Message(resolution.speaker, resolution.is_self, resolution.time, body) if body else None
        if event is None:
            log_debug(f"Dropped empty {kind.value} item {node!r}")
            continue
        events.append(event)
    return events


@dataclass
class ExtractResult:
    success: bool
    events: list = field(default_factory=list)
    formatted_text: Optional[str] = None
    error: Optional[str] = None
    title: str = ""

    @property
    def count(self) -> int:
        return len(self.events)

    def to_dict(self) -> dict:
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "events": [event_to_dict(e) for e in self.events],
            "formattedText": self.formatted_text,
            "count": self.count,
        }


def run_extraction(content: str, profiles: dict = None, options: ExtractOptions = None,
                   format_options: FormatOptions = None) -> ExtractResult:
    """Parse, extract and format, turning any fault into a failed result."""
    try:
        options = options or ExtractOptions()
        root = parse_html(content)
        profile = detect_profile(root.tag, profiles or load_profiles())
        events = extract(root, profile, options)
        if not events:
            log_warn("No messages found via standard extraction.")
        title = find_conversation_title(root, profile, options.counterpart_label)
        return ExtractResult(True, events, format_transcript(events, format_options), title=title)
    except Exception as e:
        log_warn(f"Extraction error: {e}")
        return ExtractResult(False, error=str(e) or type(e).__name__)


def handle_request(request: dict, content: str, **kwargs) -> dict:
    """Dispatch boundary: answer an ``{"action": "extractTalk"}`` request."""
    action = (request or {}).get("action")
    if action != EXTRACT_ACTION:
        return ExtractResult(False, error=f"Unknown action: {action}").to_dict()
    return run_extraction(content, **kwargs).to_dict()

