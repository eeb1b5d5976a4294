"""Layered YAML configuration and the typed options derived from it."""

import copy
import os
import sys
import datetime as dt
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from .log import log_debug, log_warn

APP_NAME = "talk-exporter"
PROJECT_DIR = Path(__file__).resolve().parent.parent

DEFAULT_CONFIG = {
    "clip": {"enabled": True},
    "output": {
        "enabled": True,
        "dir": "outputs/talk_logs",
        "filename": "line_works_talk_{time}.txt",
    },
    "time_format": "%Y-%m-%dT%H-%M-%S",
    "year_format": "%Y",
    "month_format": "%m",
    "date_format": "%Y%m%d",
    "timezone": None,
    "profiles_dir": None,
    "labels": {
        "title": "LINE WORKS Talk History",
        "exported": "Exported",
        "self": "Me",
        "counterpart": "counterpart",
        "system": "[System]",
        "sticker": "(sticker)",
        "file": "(file: {name})",
        "media": "(image/media)",
    },
    "layout": {
        "viewport_width": 1280,
        "self_threshold": 0.3,
        "side_panel_width": 300,
    },
}


def deep_merge(target, source):
    for k, v in source.items():
        if k in target and isinstance(target[k], dict) and isinstance(v, dict):
            deep_merge(target[k], v)
        else:
            target[k] = v
    return target


def get_config_paths(base_dir: Path = None):
    """Get candidate paths for config.yaml and the folder for storage."""
    base_dir = Path(base_dir) if base_dir else PROJECT_DIR
    local_path = base_dir / "config.yaml"

    appdata = os.environ.get("APPDATA")
    if appdata:
        appdata_dir = Path(appdata) / APP_NAME
    else:
        xdg = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
        appdata_dir = Path(xdg) / APP_NAME

    return {
        "local": local_path,
        "appdata": appdata_dir / "config.yaml",
        "appdata_dir": appdata_dir,
        "default": base_dir / "config.default.yaml",
    }


def interactive_setup(config_paths):
    """Run an interactive CLI setup to create the initial config.yaml."""
    print("\n=== Talk Exporter: First Time Setup ===")
    print("No configuration file found. Let's set up the basics.\n")

    default_out = DEFAULT_CONFIG["output"]["dir"]
    user_out = input(f"Enter output directory (default: {default_out}): ").strip()
    if not user_out:
        user_out = default_out

    user_clip = input("Copy the transcript to the clipboard? (y/n) [y]: ").strip().lower()

    new_config = {
        "output": {"dir": user_out},
        "clip": {"enabled": user_clip != "n"},
    }

    target_path = config_paths["appdata"]
    target_dir = config_paths["appdata_dir"]
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        print(f"Error creating directory {target_dir}: {e}")
        target_path = config_paths["local"]

    print(f"\nSaving configuration to: {target_path}")
    try:
        with open(target_path, "w", encoding="utf-8") as f:
            yaml.dump(new_config, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
        print("Setup complete!\n")
    except OSError as e:
        print(f"Failed to save configuration: {e}")

    return new_config


def load_file(path):
    if not path or not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        log_warn(f"Failed to load {path.name}: {e}")
        return {}
    if not isinstance(data, dict):
        log_warn(f"Ignoring {path.name}: top level must be a mapping")
        return {}

    def normalize(d):
        if isinstance(d, dict):
            return {k: normalize(v) for k, v in d.items()}
        if isinstance(d, list):
            return [normalize(i) for i in d]
        if isinstance(d, str) and d.lower() in ("true", "false"):
            return d.lower() == "true"
        return d
    return normalize(data)


def load_config(base_dir: Path = None, interactive: Optional[bool] = None):
    """Load built-in defaults, then config.default.yaml, then the user's config.yaml."""
    paths = get_config_paths(base_dir)
    config = copy.deepcopy(DEFAULT_CONFIG)

    # 1. Shipped defaults
    deep_merge(config, load_file(paths["default"]))

    # 2. User overrides (Priority: Local > AppData)
    if paths["local"].exists():
        user_config_data = load_file(paths["local"])
    elif paths["appdata"].exists():
        user_config_data = load_file(paths["appdata"])
    else:
        if interactive is None:
            interactive = sys.stdin is not None and sys.stdin.isatty()
        user_config_data = interactive_setup(paths) if interactive else {}
        log_debug("No user config found, using defaults")

    deep_merge(config, user_config_data)

    # JS-like date tokens to strftime tokens
    token_map = {
        "yyyy": "%Y", "MM": "%m", "dd": "%d",
        "HH": "%H", "mm": "%M", "ss": "%S"
    }
    for key in ("time_format", "year_format", "month_format", "date_format"):
        if key in config:
            fmt = str(config[key])
            for js_tok, py_tok in token_map.items():
                fmt = fmt.replace(js_tok, py_tok)
            config[key] = fmt

    return config


def resolve_timezone(name) -> Optional[dt.tzinfo]:
    if not name:
        return None
    if str(name).upper() == "UTC":
        return dt.timezone.utc
    try:
        return ZoneInfo(str(name))
    except (ZoneInfoNotFoundError, ValueError):
        log_warn(f"Unknown timezone {name!r}, falling back to local time")
        return None


@dataclass
class ExtractOptions:
    """Labels and layout thresholds used by one extraction pass."""
    self_label: str = DEFAULT_CONFIG["labels"]["self"]
    counterpart_label: str = DEFAULT_CONFIG["labels"]["counterpart"]
    sticker_placeholder: str = DEFAULT_CONFIG["labels"]["sticker"]
    file_template: str = DEFAULT_CONFIG["labels"]["file"]
    media_placeholder: str = DEFAULT_CONFIG["labels"]["media"]
    viewport_width: float = DEFAULT_CONFIG["layout"]["viewport_width"]
    self_threshold: float = DEFAULT_CONFIG["layout"]["self_threshold"]
    side_panel_width: float = DEFAULT_CONFIG["layout"]["side_panel_width"]
    tz: Optional[dt.tzinfo] = None

    @classmethod
    def from_config(cls, config: dict) -> "ExtractOptions":
        labels = config.get("labels", {})
        layout = config.get("layout", {})
        defaults = cls()
        return cls(
            self_label=labels.get("self", defaults.self_label),
            counterpart_label=labels.get("counterpart", defaults.counterpart_label),
            sticker_placeholder=labels.get("sticker", defaults.sticker_placeholder),
            file_template=labels.get("file", defaults.file_template),
            media_placeholder=labels.get("media", defaults.media_placeholder),
            viewport_width=float(layout.get("viewport_width", defaults.viewport_width)),
            self_threshold=float(layout.get("self_threshold", defaults.self_threshold)),
            side_panel_width=float(layout.get("side_panel_width", defaults.side_panel_width)),
            tz=resolve_timezone(config.get("timezone")),
        )


@dataclass
class FormatOptions:
    title: str = DEFAULT_CONFIG["labels"]["title"]
    exported_label: str = DEFAULT_CONFIG["labels"]["exported"]
    system_prefix: str = DEFAULT_CONFIG["labels"]["system"]

    @classmethod
    def from_config(cls, config: dict) -> "FormatOptions":
        labels = config.get("labels", {})
        defaults = cls()
        return cls(
            title=labels.get("title", defaults.title),
            exported_label=labels.get("exported", defaults.exported_label),
            system_prefix=labels.get("system", defaults.system_prefix),
        )
