"""Tag each child of the talk container as a date marker, notice or message."""

from enum import Enum

from .node import Node
from .profile import Profile


class ItemKind(Enum):
    DATE_MARKER = "date"
    SYSTEM_NOTICE = "system"
    MESSAGE = "message"
    SKIP = "skip"


def classify_item(node: Node, profile: Profile) -> ItemKind:
    if not node.is_visible():
        return ItemKind.SKIP
    if node.has_class(*profile.date_classes):
        return ItemKind.DATE_MARKER
    if node.has_class(*profile.system_classes):
        return ItemKind.SYSTEM_NOTICE
    if node.has_class(*profile.message_classes):
        return ItemKind.MESSAGE
    return ItemKind.SKIP


def classify_items(container: Node, profile: Profile) -> list[tuple[ItemKind, Node]]:
    """Classify the container's children in order, dropping skipped ones."""
    tagged = []
    for child in container.children():
        kind = classify_item(child, profile)
        if kind is not ItemKind.SKIP:
            tagged.append((kind, child))
    return tagged
