"""Locate the talk container and the conversation title inside a page snapshot."""

from typing import Optional

from .config import ExtractOptions
from .log import log_debug
from .node import Node
from .profile import Profile


def _is_side_panel(node: Node, profile: Profile, options: ExtractOptions) -> bool:
    if profile.sidebar_selectors and node.closest(", ".join(profile.sidebar_selectors)):
        return True
    rect = node.bounding_box()
    if rect is None or rect.width is None:
        return False
    if rect.width <= options.side_panel_width:
        return True
    # Entirely within the left side-panel strip.
    return rect.left is not None and rect.left + rect.width <= options.side_panel_width


def count_item_children(node: Node, profile: Profile) -> int:
    item_classes = profile.item_classes
    return sum(1 for child in node.children() if child.has_class(*item_classes))


def find_container(root: Node, profile: Profile, options: ExtractOptions) -> Optional[Node]:
    """Return the node whose children are talk items, or None.

    Known container selectors are tried first, in profile order. Failing that,
    every element outside the side panel is scored by how many item-like
    children it has and the best one wins.
    """
    for sel in profile.container_selectors:
        found = root.select_one(sel)
        if found is None:
            continue
        if sel in profile.scroll_selectors:
            found = found.first_child_element() or found
        log_debug(f"Container matched selector {sel!r}: {found!r}")
        return found

    best, best_count = None, 0
    for candidate in root.descendants():
        count = count_item_children(candidate, profile)
        if count <= best_count:
            continue
        if _is_side_panel(candidate, profile, options):
            log_debug(f"Rejected side-panel candidate {candidate!r}")
            continue
        best, best_count = candidate, count

    if best is not None:
        log_debug(f"Container found by scan ({best_count} items): {best!r}")
    else:
        log_debug("No talk container found")
    return best


def find_conversation_title(root: Node, profile: Profile, default: str) -> str:
    for sel in profile.title_selectors:
        el = root.select_one(sel)
        if el is not None:
            title = el.text()
            if title:
                return title
    return default
