"""
Auto-play driver - advances the dialog on a timer while auto-play is on.
"""

from __future__ import annotations

from typing import Optional

from cutscene.core.config import DialogConfig
from cutscene.core.events import DialogEvent, Event
from cutscene.dialog.manager import DialogManager, DialogResult


class AutoPlayDriver:
    """
    Frame-driven collaborator for the playback flags.

    Call update(dt) once per frame. While a dialog is active and auto-play
    is on, an entry without options is held for ``auto_play_delay`` seconds
    and then advanced; when the fast-forward flag is set the shorter
    ``fast_forward_delay`` is used and the flag is cleared on advance.
    Entries with options always wait for the player.
    """

    def __init__(self, manager: DialogManager, config: Optional[DialogConfig] = None):
        self.manager = manager
        self.config = config if config is not None else manager.config
        self._elapsed = 0.0

        manager.events.subscribe(DialogEvent.ENTRY_SHOWN, self._on_entry_shown)

    @property
    def elapsed(self) -> float:
        """Seconds spent on the current entry."""
        return self._elapsed

    def _on_entry_shown(self, event: Event) -> None:
        self._elapsed = 0.0

    def update(self, dt: float) -> Optional[DialogResult]:
        """
        Advance the timer.

        Returns:
            The result of advance() if one was triggered, else None
        """
        manager = self.manager
        entry = manager.current_entry
        if entry is None or not manager.is_auto_playing() or entry.has_options:
            self._elapsed = 0.0
            return None

        self._elapsed += dt
        fast = manager.is_fast_forwarding_next()
        delay = self.config.fast_forward_delay if fast else self.config.auto_play_delay
        if self._elapsed < delay:
            return None

        if fast:
            manager.set_fast_forwarding_next(False)
        self._elapsed = 0.0
        return manager.advance()
