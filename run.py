#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Talk Exporter - Export a LINE WORKS talk from saved or copied HTML

This script reads the talk page HTML from a file or from the clipboard,
extracts the conversation, and writes it as a plain-text transcript.
The result is copied back to the clipboard if configured.
"""

import sys
import json
import re
import datetime as dt
import argparse
from pathlib import Path

import pyperclip

from talk_exporter import (
    ExtractOptions,
    FormatOptions,
    format_range,
    format_transcript,
    load_config,
    load_profiles,
    move_event,
    rename_speaker,
    run_extraction,
)
from talk_exporter.log import log_debug, log_warn, set_debug


def try_repair_mojibake(text: str) -> str:
    """Repair strings where UTF-8 bytes were misinterpreted as Latin-1 or other single-byte encodings."""
    # If the text already has high-code characters that don't look like mojibake (e.g. Japanese), skip
    if any(ord(c) > 0x1000 for c in text):
        return text

    for enc in ['latin-1', 'cp1252']:
        try:
            repaired_text = text.encode(enc).decode('utf-8')
            # Heuristic: if repaired text has CJK characters, it's probably correct
            if any(ord(c) >= 0x3000 for c in repaired_text):
                return repaired_text
        except (UnicodeEncodeError, UnicodeDecodeError):
            continue
    return text


def strip_clipboard_fragment(content: str) -> str:
    """Keep only the fragment of a Windows CF_HTML clipboard payload."""
    if "StartFragment:" in content:
        match = re.search(r'<!--StartFragment-->(.*)<!--EndFragment-->', content, re.DOTALL)
        if match:
            return match.group(1)
    return content


def read_input(path: str) -> str:
    raw_bytes = Path(path).read_bytes()
    try:
        content = raw_bytes.decode('utf-8-sig')
    except UnicodeDecodeError:
        content = raw_bytes.decode('cp932', errors='replace')
    return strip_clipboard_fragment(content)


def get_clipboard_html() -> str:
    return strip_clipboard_fragment(try_repair_mojibake(pyperclip.paste() or ""))


def sanitize_filename(name: str) -> str:
    name = re.sub(r'[\x00-\x1f\x7f-\x9f]', "", name)
    name = re.sub(r'[<>:"/\\|?*#]', "_", name)
    name = name.replace("`", "").strip()
    return name[:80]


def resolve_output_path(config: dict, title: str, now: dt.datetime = None, base_dir: Path = None) -> Path:
    now = now or dt.datetime.now()
    y_str = now.strftime(config.get("year_format", "%Y"))
    m_str = now.strftime(config.get("month_format", "%m"))
    d_str = now.strftime(config.get("date_format", "%Y%m%d"))
    time_str = now.strftime(config["time_format"])

    def fill(template: str) -> str:
        return (template.replace("{year}", y_str).replace("{month}", m_str)
                .replace("{date}", d_str).replace("{time}", time_str)
                .replace("{title}", sanitize_filename(title)))

    # Relative directories are resolved against the script's directory
    out_dir = Path(fill(config["output"]["dir"]))
    if not out_dir.is_absolute():
        out_dir = (base_dir or Path(__file__).resolve().parent) / out_dir
    return out_dir / fill(config["output"]["filename"])


def parse_rename(value: str):
    old, sep, new = value.partition("=")
    if not sep or not old:
        raise argparse.ArgumentTypeError(f"expected OLD=NEW, got {value!r}")
    return old, new


def parse_move(value: str):
    try:
        src, dst = (int(v) for v in value.split(":"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected SRC:DST, got {value!r}")
    return src, dst


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export a LINE WORKS talk from saved or copied HTML.")
    parser.add_argument("--input", help="Path to a saved talk page (HTML). Defaults to the clipboard.")
    parser.add_argument("--output", help="Write the transcript here instead of the configured output path.")
    parser.add_argument("--range", type=int, dest="range_start", metavar="INDEX",
                        help="Only export the day starting at the date marker with this event index.")
    parser.add_argument("--rename", type=parse_rename, action="append", default=[], metavar="OLD=NEW",
                        help="Rename a speaker before exporting (repeatable).")
    parser.add_argument("--move", type=parse_move, action="append", default=[], metavar="SRC:DST",
                        help="Move an event before exporting (repeatable).")
    parser.add_argument("--json", action="store_true", help="Print the extraction result as JSON.")
    parser.add_argument("--no-clip", action="store_true", help="Do not copy the transcript to the clipboard.")
    parser.add_argument("--debug", action="store_true", help="Show debug information.")
    return parser


def main(argv=None, base_dir: Path = None) -> int:
    args = build_parser().parse_args(argv)
    set_debug(args.debug)

    # Fix Windows console encoding
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding='utf-8')
        except AttributeError:
            pass

    config = load_config(base_dir)

    if args.input:
        input_path = Path(args.input)
        if not input_path.exists():
            print(f"Input file not found: {args.input}")
            return 1
        content = read_input(input_path)
    else:
        content = get_clipboard_html()

    if not content or not content.strip():
        print("Clipboard or input file is empty.")
        return 1

    log_debug(f"Read {len(content)} characters of HTML")

    result = run_extraction(
        content,
        profiles=load_profiles(config.get("profiles_dir")),
        options=ExtractOptions.from_config(config),
        format_options=FormatOptions.from_config(config),
    )
    if not result.success:
        print(f"Error: {result.error}")
        if args.json:
            print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return 1

    format_options = FormatOptions.from_config(config)
    try:
        for old, new in args.rename:
            changed = rename_speaker(result.events, old, new)
            log_debug(f"Renamed {changed} message(s) from {old!r} to {new!r}")
        for src, dst in args.move:
            move_event(result.events, src, dst)
        if args.rename or args.move:
            result.formatted_text = format_transcript(result.events, format_options)
        if args.range_start is not None:
            final_text = format_range(result.events, args.range_start, format_options)
        else:
            final_text = result.formatted_text
    except (IndexError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))

    if result.count == 0:
        log_warn("No messages were found. The page structure may have changed.")
        return 0

    filepath = None
    if args.output:
        filepath = Path(args.output)
    elif config["output"]["enabled"]:
        filepath = resolve_output_path(config, result.title, base_dir=base_dir)

    if filepath is not None:
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_text(final_text, encoding="utf-8")
            print("-" * 40)
            print(f"Success! Extracted {result.count} items.")
            print(f"Saved to: {filepath}")
        except OSError as e:
            print(f"Error saving file: {e}")
            return 1

    if config["clip"]["enabled"] and not args.no_clip:
        try:
            pyperclip.copy(final_text)
            print("Transcript has been copied to clipboard.")
        except pyperclip.PyperclipException as e:
            print(f"Error copying to clipboard: {e}")

    print("-" * 40)
    return 0


if __name__ == "__main__":
    sys.exit(main())
