"""Site profiles: the CSS selectors that describe one chat client's markup.

The built-in ``lineworks`` profile matches the LINE WORKS web client. Other
layouts can be described in YAML files; every key is optional and falls back
to the built-in value::

    name: myclient
    detect_selectors: [".talk_room"]
    container_selectors: [".talk_room .list"]
    self_classes: ["mine"]
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import yaml
from bs4 import BeautifulSoup

from .log import log_debug, log_warn


@dataclass
class Profile:
    name: str = "lineworks"
    detect_selectors: list = field(default_factory=lambda: [".chat_view", "#chat_room_scroll"])

    # Container location, in priority order. A selector listed in
    # scroll_selectors yields its first element child.
    container_selectors: list = field(default_factory=lambda: [".chat_view", "#chat_room_scroll", "#messageList", "[role=log]"])
    scroll_selectors: list = field(default_factory=lambda: ["#chat_room_scroll"])
    sidebar_selectors: list = field(default_factory=lambda: [".lnb", ".chat_list", ".room_list", "aside", "nav", "[role=navigation]"])
    title_selectors: list = field(default_factory=lambda: [".section_head .info_box .name", ".header .title", "header .tit", "#header .name"])

    # Item classification.
    date_classes: list = field(default_factory=lambda: ["inform_date"])
    system_classes: list = field(default_factory=lambda: ["inform_msg"])
    message_classes: list = field(default_factory=lambda: ["msg_wrap", "msg_rgt", "msg_lft"])
    date_label_selector: str = ".date"

    # Speaker resolution.
    metadata_attribute: str = "data-for-copy"
    metadata_name_keys: list = field(default_factory=lambda: ["senderName", "userName", "writerName"])
    metadata_self_keys: list = field(default_factory=lambda: ["isMine", "isMe", "mine"])
    metadata_time_key: str = "messageTime"
    self_classes: list = field(default_factory=lambda: ["msg_rgt", "my"])
    self_icon_selectors: list = field(default_factory=lambda: [".ico_my", ".my_profile"])
    content_selector: str = ".msg_box"
    header_selector: str = "dt"
    name_selector: str = ".name"
    time_selector: str = ".date"
    quoted_selectors: list = field(default_factory=lambda: [".reply_box", ".reply_msg", ".reply_area", ".quote_area", ".src_message", ".reply-source", ".forward-header", ".tit_note"])

    # Body extraction.
    text_selector: str = ".msg"
    strip_selectors: list = field(default_factory=lambda: [".tit_note", ".reply_area", ".quote_area", ".src_message", ".reply-source", ".forward-header", ".connect", ".desc"])
    sticker_selector: str = ".sticker_box"
    file_name_selector: str = ".file_name"
    media_selectors: list = field(default_factory=lambda: [".thmb", "img", "video"])

    @property
    def item_classes(self):
        return self.date_classes + self.system_classes + self.message_classes

    @property
    def quoted_regions(self):
        """Quoted, forwarded and link-card regions. Nothing inside them belongs to the item itself."""
        return list(dict.fromkeys(self.quoted_selectors + self.strip_selectors))

    @classmethod
    def from_mapping(cls, data: dict, base: "Profile" = None) -> "Profile":
        base = base or cls()
        known = {f.name for f in fields(cls)}
        overrides = {}
        for key, value in data.items():
            if key not in known:
                log_warn(f"Unknown profile key ignored: {key}")
                continue
            default = getattr(base, key)
            if isinstance(default, list) and isinstance(value, str):
                value = [value]
            overrides[key] = value
        return replace(base, **overrides)


DEFAULT_PROFILE = Profile()


def load_profiles(profiles_dir=None) -> dict[str, Profile]:
    """Built-in profiles plus any ``*.yaml`` profiles found in ``profiles_dir``."""
    profiles = {DEFAULT_PROFILE.name: DEFAULT_PROFILE}
    if not profiles_dir:
        return profiles
    directory = Path(profiles_dir)
    if not directory.exists():
        log_debug(f"Profiles directory not found: {directory}")
        return profiles
    for p_path in sorted(directory.glob("*.yaml")):
        try:
            data = yaml.safe_load(p_path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                continue
            data.setdefault("name", p_path.stem)
            profile = Profile.from_mapping(data)
            profiles[profile.name] = profile
        except (OSError, yaml.YAMLError, TypeError) as e:
            log_warn(f"Failed to load profile {p_path.name}: {e}")
    return profiles


def detect_profile(soup: BeautifulSoup, profiles: dict[str, Profile]) -> Profile:
    # User profiles are tried before the built-in one.
    ordered = [(k, p) for k, p in profiles.items() if k != DEFAULT_PROFILE.name]
    ordered += [(k, p) for k, p in profiles.items() if k == DEFAULT_PROFILE.name]
    for key, profile in ordered:
        for sel in profile.detect_selectors:
            if soup.select_one(sel):
                log_debug(f"Detected profile: {key}")
                return profile
    return profiles.get(DEFAULT_PROFILE.name, DEFAULT_PROFILE)
