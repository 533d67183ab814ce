"""
Dialog data records - sequences, entries, options, playback flags.
"""

from __future__ import annotations

from typing import Optional

from pydantic import ConfigDict, Field, PrivateAttr, field_validator

from cutscene.core.model import Model
from cutscene.dialog.errors import EmptySequenceError, TargetNotFoundError


class DialogOption(Model):
    """
    A choice attached to an entry.

    Attributes:
        text: Label shown to the player
        target_id: Entry to jump to when chosen (None = continue linearly)
        command: Command string forwarded verbatim to the executor
    """
    model_config = ConfigDict(frozen=True)

    text: str
    target_id: Optional[str] = None
    command: Optional[str] = None


class DialogEntry(Model):
    """
    One dialog step.

    Everything except ``selected_option_text`` is frozen. Entries stored in
    a sequence are templates; the session works on per-visit copies made by
    ``visit()``, so the choice annotation always belongs to one history
    record and is never serialized.
    """
    id: Optional[str] = Field(default=None, frozen=True)
    speaker: str = Field(default="", frozen=True)
    text: str = Field(default="", frozen=True)
    command: Optional[str] = Field(default=None, frozen=True)
    options: tuple[DialogOption, ...] = Field(default=(), frozen=True)
    selected_option_text: Optional[str] = Field(default=None, exclude=True)

    # Data packs may write explicit nulls for absent fields
    @field_validator('speaker', 'text', mode='before')
    @classmethod
    def _null_text(cls, value):
        return "" if value is None else value

    @field_validator('options', mode='before')
    @classmethod
    def _null_options(cls, value):
        return () if value is None else value

    @property
    def has_options(self) -> bool:
        return len(self.options) > 0

    @property
    def has_selection(self) -> bool:
        return self.selected_option_text is not None

    def visit(self) -> DialogEntry:
        """Create the history record for one visit of this entry."""
        return self.model_copy(update={'selected_option_text': None})


class DialogSequence(Model):
    """
    A named, ordered conversation.

    Entry ids are unique within a sequence; entries without an id can only
    be reached linearly. A sequence with no entries loads fine but cannot be
    started.
    """
    id: str = Field(frozen=True)
    entries: tuple[DialogEntry, ...] = Field(default=(), frozen=True)

    _index: dict[str, int] = PrivateAttr(default_factory=dict)

    @field_validator('id')
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("sequence id must not be blank")
        return value

    @field_validator('entries')
    @classmethod
    def _unique_entry_ids(cls, entries: tuple[DialogEntry, ...]) -> tuple[DialogEntry, ...]:
        seen: set[str] = set()
        for entry in entries:
            if entry.id is None:
                continue
            if entry.id in seen:
                raise ValueError(f"duplicate entry id '{entry.id}'")
            seen.add(entry.id)
        return entries

    def model_post_init(self, __context) -> None:
        self._index = {
            entry.id: position
            for position, entry in enumerate(self.entries)
            if entry.id is not None
        }

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def first_entry(self) -> Optional[DialogEntry]:
        return self.entries[0] if self.entries else None

    def find_entry(self, entry_id: str) -> Optional[DialogEntry]:
        """Get an entry by ID."""
        position = self._index.get(entry_id)
        return None if position is None else self.entries[position]

    def index_of(self, entry_id: str) -> Optional[int]:
        return self._index.get(entry_id)

    def next_position(self, position: int) -> Optional[int]:
        """Position of the entry after ``position``, or None at the end."""
        following = position + 1
        return following if following < len(self.entries) else None

    def require_first_entry(self) -> DialogEntry:
        if not self.entries:
            raise EmptySequenceError(self.id)
        return self.entries[0]

    def require_index(self, entry_id: str) -> int:
        position = self._index.get(entry_id)
        if position is None:
            raise TargetNotFoundError(entry_id, self.id)
        return position


class PlaybackState(Model):
    """
    Presentation flags shared between the manager and the UI.

    Attributes:
        auto_playing: Advance without waiting for player input
        fast_forwarding_next: The next advance comes from a skip action
    """
    auto_playing: bool = False
    fast_forwarding_next: bool = False
