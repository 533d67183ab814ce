"""
Cutscene

Dialog/cutscene core for games: a registry of scripted conversation
sequences and a session controller that walks them.

Quick Start:
    from cutscene import DialogManager, DialogEvent

    manager = DialogManager()
    manager.events.subscribe(DialogEvent.ENTRY_SHOWN, show_entry, weak=False)
    manager.load_sequences(payloads)
    manager.start("intro")
"""

__version__ = "0.1.0"

from cutscene.core import EventBus, Event, DialogEvent, DialogConfig
from cutscene.dialog import (
    DialogManager,
    DialogResult,
    AutoPlayDriver,
    DialogSequence,
    DialogEntry,
    DialogOption,
    PlaybackState,
)

__all__ = [
    # Events
    "EventBus",
    "Event",
    "DialogEvent",
    # Config
    "DialogConfig",
    # Dialog
    "DialogManager",
    "DialogResult",
    "AutoPlayDriver",
    "DialogSequence",
    "DialogEntry",
    "DialogOption",
    "PlaybackState",
]
