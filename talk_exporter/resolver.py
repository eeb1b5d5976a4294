"""Speaker, alignment and time resolution for a single message item.

Each signal has its own small function returning ``None`` when it has nothing
to say. :func:`resolve_speaker` combines them in a fixed order, first answer
wins per field:

1. the embedded ``data-for-copy`` JSON payload (name, self flag, time)
2. alignment: self classes or a self icon, then the horizontal position of
   the bubble as a fallback
3. the name header of the item, ignoring headers inside quoted content
4. continuation from the previous message

A self-aligned message is always attributed to the self label.
"""

import datetime as dt
import html
import json
from dataclasses import dataclass, replace
from typing import Optional

from .config import ExtractOptions
from .events import ExtractionState
from .log import log_debug
from .node import Node
from .profile import Profile


@dataclass
class Resolution:
    speaker: str
    is_self: bool
    time: str


@dataclass
class Metadata:
    name: Optional[str] = None
    is_self: Optional[bool] = None
    time: Optional[str] = None


def first_of(*candidates):
    """Evaluate zero-argument callables in order, returning the first non-None result."""
    for candidate in candidates:
        value = candidate()
        if value is not None:
            return value
    return None


def format_message_time(value, tz: Optional[dt.tzinfo] = None) -> Optional[str]:
    """Epoch milliseconds (or an ISO 8601 string) to ``HH:MM``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, str) and not value.strip().lstrip("-").isdigit():
            stamp = dt.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            if tz is not None:
                stamp = stamp.astimezone(tz)
        else:
            stamp = dt.datetime.fromtimestamp(int(value) / 1000, tz)
    except (ValueError, OverflowError, OSError):
        return None
    return stamp.strftime("%H:%M")


def read_metadata(node: Node, profile: Profile, tz: Optional[dt.tzinfo] = None) -> Metadata:
    raw = node.attribute(profile.metadata_attribute)
    if not raw:
        return Metadata()
    try:
        data = json.loads(html.unescape(raw))
    except ValueError as e:
        log_debug(f"Ignoring malformed {profile.metadata_attribute} payload: {e}")
        return Metadata()
    if not isinstance(data, dict):
        log_debug(f"Ignoring non-object {profile.metadata_attribute} payload")
        return Metadata()

    meta = Metadata()
    for key in profile.metadata_name_keys:
        name = data.get(key)
        if isinstance(name, str) and name.strip():
            meta.name = name.strip()
            break
    for key in profile.metadata_self_keys:
        flag = data.get(key)
        if isinstance(flag, bool):
            meta.is_self = flag
            break
    meta.time = format_message_time(data.get(profile.metadata_time_key), tz)
    return meta


def self_from_markers(node: Node, profile: Profile) -> Optional[bool]:
    if node.has_class(*profile.self_classes):
        return True
    for sel in profile.self_icon_selectors:
        for icon in node.select(sel):
            if not icon.is_inside(profile.quoted_regions, node):
                return True
    return None


def self_from_geometry(node: Node, profile: Profile, options: ExtractOptions) -> Optional[bool]:
    content = node.select_one(profile.content_selector) or node
    rect = content.bounding_box()
    if rect is None or rect.left is None:
        return None
    if rect.left > options.viewport_width * options.self_threshold:
        return True
    return None


def header_name(node: Node, profile: Profile) -> Optional[str]:
    excluded = profile.quoted_regions + [profile.content_selector]
    for header in node.select(profile.header_selector):
        if header.is_inside(excluded, node):
            continue
        name_el = header.select_one(profile.name_selector)
        if name_el is not None:
            name = name_el.text()
            if name:
                return name
    return None


def time_label(node: Node, profile: Profile) -> Optional[str]:
    for el in node.select(profile.time_selector):
        if el.is_inside(profile.quoted_regions, node):
            continue
        text = el.text()
        if text:
            return text
    return None


def continuation_speaker(state: ExtractionState) -> str:
    # Unlabelled after self (or with no history): the room's other party.
    # Otherwise the same sender as the previous message.
    if state.last_is_self or not state.last_speaker:
        return state.conversation_title
    return state.last_speaker


def resolve_speaker(node: Node, state: ExtractionState, profile: Profile,
                    options: ExtractOptions) -> tuple[Resolution, ExtractionState]:
    meta = read_metadata(node, profile, options.tz)

    is_self = first_of(
        lambda: meta.is_self,
        lambda: self_from_markers(node, profile),
        lambda: self_from_geometry(node, profile, options),
    ) or False

    if is_self:
        speaker = options.self_label
    else:
        speaker = first_of(
            lambda: meta.name,
            lambda: header_name(node, profile),
            lambda: continuation_speaker(state),
        )

    time = first_of(lambda: meta.time, lambda: time_label(node, profile)) or ""

    new_state = replace(state, last_speaker=speaker, last_is_self=is_self)
    return Resolution(speaker, is_self, time), new_state
