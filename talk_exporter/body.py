"""Message body extraction with quoted content stripped and attachment placeholders."""

from typing import Optional

from .config import ExtractOptions
from .node import Node
from .profile import Profile


def _first_outside_quotes(node: Node, selectors, profile: Profile) -> Optional[Node]:
    if isinstance(selectors, str):
        selectors = [selectors]
    for sel in selectors:
        for el in node.select(sel):
            if not el.is_inside(profile.quoted_regions, node):
                return el
    return None


def text_body(node: Node, profile: Profile) -> Optional[str]:
    text_el = _first_outside_quotes(node, profile.text_selector, profile)
    if text_el is None:
        return None
    # Strip quoted/forwarded parts from a copy; the snapshot stays untouched.
    clone = text_el.clone()
    clone.remove_matching(profile.quoted_regions)
    return clone.text() or None


def attachment_body(node: Node, profile: Profile, options: ExtractOptions) -> Optional[str]:
    if _first_outside_quotes(node, profile.sticker_selector, profile) is not None:
        return options.sticker_placeholder
    file_el = _first_outside_quotes(node, profile.file_name_selector, profile)
    if file_el is not None:
        return options.file_template.format(name=file_el.text())
    if _first_outside_quotes(node, profile.media_selectors, profile) is not None:
        return options.media_placeholder
    return None


def fallback_body(node: Node, speaker: str, time: str) -> Optional[str]:
    text = node.text()
    if speaker:
        text = text.replace(speaker, "", 1)
    if time:
        text = text.replace(time, "", 1)
    return text.strip() or None


def extract_body(node: Node, speaker: str, time: str, profile: Profile,
                 options: ExtractOptions) -> Optional[str]:
    """Body text for a message item, or None when the item carries nothing to export."""
    return (
        text_body(node, profile)
        or attachment_body(node, profile, options)
        or fallback_body(node, speaker, time)
    )
