"""
Dialog module - scripted conversation sequences.

Provides:
- Sequence/entry/option records
- Best-effort payload loading and sync export
- The session state machine (start, advance, jump, choices, history)
- Auto-play pacing
"""

from cutscene.dialog.errors import (
    DialogError,
    ParseError,
    NotFoundError,
    EmptySequenceError,
    TargetNotFoundError,
)
from cutscene.dialog.models import DialogOption, DialogEntry, DialogSequence, PlaybackState
from cutscene.dialog.loader import (
    LoadResult,
    parse_sequence,
    load_sequences,
    load_synced_sequences,
    dump_sequences,
)
from cutscene.dialog.manager import DialogManager, DialogResult
from cutscene.dialog.autoplay import AutoPlayDriver

__all__ = [
    # Errors
    "DialogError",
    "ParseError",
    "NotFoundError",
    "EmptySequenceError",
    "TargetNotFoundError",
    # Data
    "DialogOption",
    "DialogEntry",
    "DialogSequence",
    "PlaybackState",
    # Loading
    "LoadResult",
    "parse_sequence",
    "load_sequences",
    "load_synced_sequences",
    "dump_sequences",
    # Session
    "DialogManager",
    "DialogResult",
    "AutoPlayDriver",
]
