"""Read-only node view over a BeautifulSoup tag.

The extraction engine only talks to the tree through :class:`Node`. CSS
queries are answered by soupsieve; geometry is whatever the capturing page
recorded, either as ``data-rect="left,top,width,height"`` or as inline
``left``/``width`` pixel styles.
"""

import copy
import re
from typing import NamedTuple, Optional

import soupsieve as sv
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from .log import log_debug

BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4", "h5",
    "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section",
    "table", "tr", "ul",
}
SKIP_TAGS = {"script", "style", "noscript", "template", "head"}
_BLOCK = "\x00"

_px_re = re.compile(r"(?:^|;)\s*(left|top|width|height)\s*:\s*(-?[\d.]+)px", re.I)


class Rect(NamedTuple):
    # Inline styles may give only some of the four values; the rest are None.
    left: Optional[float]
    top: Optional[float]
    width: Optional[float]
    height: Optional[float]


def _style(tag: Tag) -> str:
    return (tag.get("style") or "").replace(" ", "").lower()


def tag_is_visible(tag: Tag) -> bool:
    style = _style(tag)
    if "display:none" in style or "visibility:hidden" in style:
        return False
    if tag.has_attr("hidden") or tag.get("aria-hidden") == "true":
        return False
    return True


def visible_text(tag: Tag) -> str:
    """Approximate the rendered text of ``tag`` the way a browser's innerText does."""
    parts: list[str] = []

    def walk(el):
        for child in el.children:
            if isinstance(child, PreformattedString):
                continue
            if isinstance(child, NavigableString):
                text = str(child)
                if child.find_parent("pre") is None:
                    text = re.sub(r"\s+", " ", text)
                parts.append(text)
                continue
            if not isinstance(child, Tag) or child.name in SKIP_TAGS:
                continue
            if not tag_is_visible(child):
                continue
            if child.name == "br":
                parts.append("\n")
                continue
            block = child.name in BLOCK_TAGS
            if block:
                parts.append(_BLOCK)
            walk(child)
            if block:
                parts.append(_BLOCK)

    walk(tag)
    # Adjacent block boundaries produce a single line break.
    text = re.sub(r"[ \t]*\x00[ \t\x00]*", "\n", "".join(parts))
    text = re.sub(r"[ \t]*\n[ \t]*", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


class Node:
    __slots__ = ("tag",)

    def __init__(self, tag: Tag):
        self.tag = tag

    def __eq__(self, other):
        return isinstance(other, Node) and self.tag is other.tag

    def __hash__(self):
        return id(self.tag)

    def __repr__(self):
        classes = ".".join(self.classes)
        return f"<Node {self.tag.name}{'.' + classes if classes else ''}>"

    @property
    def name(self) -> str:
        return self.tag.name

    @property
    def classes(self) -> list[str]:
        value = self.tag.get("class") or []
        return value.split() if isinstance(value, str) else list(value)

    def has_class(self, *names) -> bool:
        classes = set(self.classes)
        return any(n in classes for n in names)

    def children(self) -> list["Node"]:
        return [Node(c) for c in self.tag.children if isinstance(c, Tag)]

    def attribute(self, name: str) -> Optional[str]:
        value = self.tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def text(self) -> str:
        return visible_text(self.tag)

    def select(self, selector: str) -> list["Node"]:
        return [Node(t) for t in sv.select(selector, self.tag)]

    def select_one(self, selector: str) -> Optional["Node"]:
        found = sv.select_one(selector, self.tag)
        return Node(found) if found is not None else None

    def closest(self, selector: str, within: "Node" = None) -> Optional["Node"]:
        """Nearest ancestor-or-self matching ``selector``, not climbing past ``within``."""
        current = self.tag
        while current is not None and not isinstance(current, BeautifulSoup):
            if sv.match(selector, current):
                return Node(current)
            if within is not None and current is within.tag:
                break
            current = current.parent
        return None

    def is_inside(self, selectors, within: "Node") -> bool:
        """True when this node or an ancestor below ``within`` matches any of ``selectors``."""
        if not selectors:
            return False
        joined = ", ".join(selectors)
        current = self.tag
        while current is not None and current is not within.tag and not isinstance(current, BeautifulSoup):
            if sv.match(joined, current):
                return True
            current = current.parent
        return False

    def first_child_element(self) -> Optional["Node"]:
        for child in self.tag.children:
            if isinstance(child, Tag):
                return Node(child)
        return None

    def descendants(self) -> list["Node"]:
        return [Node(t) for t in self.tag.descendants if isinstance(t, Tag)]

    def bounding_box(self) -> Optional[Rect]:
        rect = self.tag.get("data-rect")
        if rect:
            try:
                left, top, width, height = (float(v) for v in rect.split(","))
                return Rect(left, top, width, height)
            except ValueError:
                return None
        found = {}
        for key, value in _px_re.findall(_style(self.tag)):
            try:
                found[key.lower()] = float(value)
            except ValueError:
                log_debug(f"Ignoring invalid {key} in style of {self!r}")
        if "left" in found or "width" in found:
            return Rect(found.get("left"), found.get("top"), found.get("width"), found.get("height"))
        return None

    def is_visible(self) -> bool:
        return tag_is_visible(self.tag)

    def clone(self) -> "Node":
        return Node(copy.copy(self.tag))

    def remove_matching(self, selectors) -> int:
        """Decompose every descendant matching ``selectors``. Only call on a clone."""
        if not selectors:
            return 0
        found = sv.select(", ".join(selectors), self.tag)
        for el in found:
            if not el.decomposed:
                el.decompose()
        return len(found)
