"""
Talk Exporter

Turns a saved LINE WORKS talk page into an ordered list of conversation
events and a plain-text transcript.
"""

from .events import (
    DateMarker,
    SystemNotice,
    Message,
    ConversationEvent,
    ExtractionState,
    event_to_dict,
    event_from_dict,
)

from .config import (
    ExtractOptions,
    FormatOptions,
    load_config,
)

from .profile import (
    Profile,
    load_profiles,
    detect_profile,
)

from .extractor import (
    ExtractResult,
    extract,
    parse_html,
    run_extraction,
    handle_request,
)

from .formatter import (
    format_transcript,
    format_range,
    format_message,
)

from .edit import (
    rename_speaker,
    move_event,
)

__all__ = [
    # Events
    'DateMarker',
    'SystemNotice',
    'Message',
    'ConversationEvent',
    'ExtractionState',
    'event_to_dict',
    'event_from_dict',
    # Configuration
    'ExtractOptions',
    'FormatOptions',
    'load_config',
    'Profile',
    'load_profiles',
    'detect_profile',
    # Extraction
    'ExtractResult',
    'extract',
    'parse_html',
    'run_extraction',
    'handle_request',
    # Formatting
    'format_transcript',
    'format_range',
    'format_message',
    # Editing
    'rename_speaker',
    'move_event',
]
