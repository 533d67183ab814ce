"""
Dialog manager - sequence registry and the active dialog session.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from enum import Enum, auto
from typing import Callable, Optional

from cutscene.core.config import DialogConfig
from cutscene.core.events import DialogEvent, EventBus
from cutscene.dialog import loader
from cutscene.dialog.errors import (
    MSG_RECEIVED_SEQUENCE_EMPTY,
    MSG_REQUESTING_FROM_SERVER,
    DialogError,
    EmptySequenceError,
    NotFoundError,
    ParseError,
    TargetNotFoundError,
)
from cutscene.dialog.loader import LoadResult, Payload
from cutscene.dialog.models import DialogEntry, DialogSequence, PlaybackState

CommandExecutor = Callable[[str], None]


class DialogResult(Enum):
    """Outcome of a session operation."""
    OK = auto()                # Current entry changed
    ENDED = auto()             # Conversation finished naturally
    INACTIVE = auto()          # No session to act on
    NOT_FOUND = auto()         # Sequence id not in the registry
    EMPTY_SEQUENCE = auto()    # Sequence has no entries
    TARGET_NOT_FOUND = auto()  # Jump target not in the current sequence
    PARSE_FAILED = auto()      # Received payload could not be parsed


class DialogManager:
    """
    Owns the dialog registry and at most one active session.

    Handles:
    - Replacing the registry from data-pack payloads or a peer's sync
    - Starting, advancing, jumping and stopping a session
    - Recording player choices into the session history
    - Forwarding option commands to the executor
    - The auto-play / fast-forward flags read by the presentation layer

    Every change of the current entry publishes DialogEvent.ENTRY_SHOWN;
    expected failures publish DialogEvent.MESSAGE and are returned as
    DialogResult values instead of raised.

    Usage:
        manager = DialogManager(event_bus, command_executor=send_command)
        manager.load_sequences(payloads)
        manager.start("intro")
        manager.select_option(0)
    """

    def __init__(
        self,
        events: Optional[EventBus] = None,
        config: Optional[DialogConfig] = None,
        command_executor: Optional[CommandExecutor] = None,
    ):
        self.events = events if events is not None else EventBus()
        self.config = config if config is not None else DialogConfig()
        self.command_executor = command_executor

        # Shared with the presentation layer by reference
        self.playback = PlaybackState()

        # Registry
        self._sequences: dict[str, DialogSequence] = {}

        # Session
        self._current_sequence: Optional[DialogSequence] = None
        self._current_position: Optional[int] = None
        self._current_entry: Optional[DialogEntry] = None
        self._history: list[DialogEntry] = []

        self.logger = logging.getLogger(__name__)

    # --- Registry ---

    def load_sequences(self, payloads: Iterable[Payload]) -> int:
        """
        Replace the registry with sequences parsed from data-pack payloads.

        Returns:
            Number of sequences loaded
        """
        self.logger.info("Loading dialog sequences...")
        return self._replace_registry(loader.load_sequences(payloads))

    def sync_sequences(self, payloads: Mapping[str, Payload]) -> int:
        """
        Replace the registry with a peer's id -> payload mapping.

        Returns:
            Number of sequences cached
        """
        self.logger.info(f"Received {len(payloads)} dialog sequences for synchronization.")
        loaded = self._replace_registry(loader.load_synced_sequences(payloads))
        if loaded == 0 and payloads:
            self.logger.warning(
                "Dialog data was received but nothing could be parsed; "
                "check the JSON format of the sent sequences."
            )
        return loaded

    def receive_sequence(self, sequence_id: str, payload: Optional[Payload]) -> DialogResult:
        """
        Store a single sequence sent by the peer and start it.

        This is the answer to a SEQUENCE_REQUESTED signal.
        """
        self.logger.info(f"Received dialog data: {sequence_id}")
        if not payload:
            self.logger.warning(f"Received an empty dialog payload for '{sequence_id}'")
            self._notify(MSG_RECEIVED_SEQUENCE_EMPTY, sequence_id)
            return DialogResult.PARSE_FAILED

        try:
            sequence = loader.parse_sequence(payload, sequence_id)
        except ParseError as e:
            self.logger.error(f"Failed to parse dialog '{sequence_id}' received from the peer: {e}")
            self._log_payload(e)
            self._notify(e.message_key, sequence_id, str(e), error=e)
            return DialogResult.PARSE_FAILED

        if sequence.id != sequence_id:
            self.logger.warning(
                f"Dialog ID mismatch: expected '{sequence_id}', payload says '{sequence.id}'. "
                f"Using '{sequence_id}'."
            )
        self._sequences[sequence_id] = sequence
        return self.start(sequence_id)

    def clear_all(self) -> None:
        """Drop the session and every cached sequence."""
        self.stop()
        self._sequences.clear()
        self.logger.info("Dialog cache cleared.")

    def get_sequence(self, sequence_id: str) -> Optional[DialogSequence]:
        return self._sequences.get(sequence_id)

    @property
    def sequences(self) -> dict[str, DialogSequence]:
        return dict(self._sequences)

    def export_sequences(self) -> dict[str, str]:
        """Build the id -> payload mapping sent to peers."""
        return loader.dump_sequences(self._sequences)

    def _replace_registry(self, result: LoadResult) -> int:
        # Sessions borrow sequences from the registry
        self.stop()
        self._sequences = result.sequences

        for source, error in result.failures:
            self.logger.warning(f"Skipped dialog payload {source}: {error}")
            self._log_payload(error)
        for key, payload_id in result.mismatches:
            self.logger.warning(
                f"Dialog ID mismatch: expected '{key}', payload says '{payload_id}'. Using '{key}'."
            )

        self.logger.info(
            f"Loaded {result.loaded} dialog sequences ({result.failed} skipped)."
        )
        if not self._sequences:
            self.logger.warning("No dialog sequences were loaded.")

        self.events.publish(
            DialogEvent.REGISTRY_LOADED,
            loaded=result.loaded,
            failed=result.failed,
        )
        return result.loaded

    def _log_payload(self, error: ParseError) -> None:
        if self.config.log_failed_payloads and error.payload is not None:
            self.logger.debug(f"Payload ({error.subject_id}): {loader.payload_text(error.payload)}")

    # --- Session ---

    @property
    def is_active(self) -> bool:
        return self._current_entry is not None

    @property
    def current_sequence(self) -> Optional[DialogSequence]:
        return self._current_sequence

    @property
    def current_entry(self) -> Optional[DialogEntry]:
        return self._current_entry

    @property
    def history(self) -> list[DialogEntry]:
        """Visited entries, oldest first. The last one is the current entry."""
        return list(self._history)

    def start(self, sequence_id: str) -> DialogResult:
        """Start the sequence with the given id from its first entry."""
        self.stop_auto_play()

        sequence = self._sequences.get(sequence_id)
        if sequence is None:
            error = NotFoundError(sequence_id)
            if self.config.request_missing_sequences:
                self.logger.info(f"Dialog '{sequence_id}' not found locally, requesting it from the peer...")
                self.events.publish(DialogEvent.SEQUENCE_REQUESTED, sequence_id=sequence_id)
                self._notify(MSG_REQUESTING_FROM_SERVER, sequence_id, error=error)
            else:
                self.logger.warning(str(error))
                self._notify(error.message_key, sequence_id, error=error)
            return DialogResult.NOT_FOUND

        self.stop()
        try:
            sequence.require_first_entry()
        except EmptySequenceError as e:
            self.logger.error(str(e))
            self._notify(e.message_key, sequence_id, error=e)
            return DialogResult.EMPTY_SEQUENCE

        self._current_sequence = sequence
        entry = self._enter(0)
        self.logger.info(f"Starting dialog '{sequence_id}'")
        self.events.publish(DialogEvent.DIALOG_STARTED, sequence=sequence)

        # A DIALOG_STARTED listener may have stopped the session already
        if self._current_entry is not entry:
            return DialogResult.ENDED
        self._show(sequence, entry)
        return DialogResult.OK

    def advance(self) -> DialogResult:
        """Move to the entry after the current one, ending the dialog at the last entry."""
        if not self.is_active:
            return DialogResult.INACTIVE

        position = self._current_sequence.next_position(self._current_position)
        if position is None:
            self.stop()
            return DialogResult.ENDED

        self._visit(position)
        return DialogResult.OK

    def jump(self, target_id: str) -> DialogResult:
        """Move to the entry with the given id. A missing target leaves the session as is."""
        if not self.is_active:
            return DialogResult.INACTIVE

        try:
            position = self._current_sequence.require_index(target_id)
        except TargetNotFoundError as e:
            self.logger.error(str(e))
            self._notify(e.message_key, target_id, error=e)
            return DialogResult.TARGET_NOT_FOUND

        self._visit(position)
        return DialogResult.OK

    def record_choice(self, option_text: str) -> bool:
        """
        Annotate the current visit with the option the player chose.

        The current entry is the last history record, so this one write is
        what history review shows. A visit keeps its first choice.
        """
        entry = self._current_entry
        if entry is None:
            return False
        if entry.has_selection:
            self.logger.warning(
                f"Choice already recorded for entry '{entry.id}': "
                f"keeping '{entry.selected_option_text}', ignoring '{option_text}'"
            )
            return False

        entry.selected_option_text = option_text
        return True

    def select_option(self, index: int) -> DialogResult:
        """
        Apply the player's choice of an option on the current entry.

        Records the choice, forwards the option command, then jumps to the
        option target or, without one, advances linearly.

        Raises:
            IndexError: The entry has no option at ``index``
        """
        entry = self._current_entry
        if entry is None:
            return DialogResult.INACTIVE
        if not 0 <= index < len(entry.options):
            raise IndexError(f"Entry '{entry.id}' has no option {index}")

        option = entry.options[index]
        self.record_choice(option.text)
        self.execute_command(option.command)

        if option.target_id:
            return self.jump(option.target_id)
        return self.advance()

    def stop(self) -> None:
        """End the session, if any, and clear its history."""
        sequence = self._current_sequence
        self._current_sequence = None
        self._current_position = None
        self._current_entry = None
        self._history.clear()

        if sequence is not None:
            self.events.publish(DialogEvent.DIALOG_ENDED, sequence_id=sequence.id)

    def _enter(self, position: int) -> DialogEntry:
        entry = self._current_sequence.entries[position].visit()
        self._current_position = position
        self._current_entry = entry
        self._history.append(entry)
        return entry

    def _show(self, sequence: DialogSequence, entry: DialogEntry) -> None:
        self.events.publish(DialogEvent.ENTRY_SHOWN, sequence=sequence, entry=entry)
        self.execute_command(entry.command)

    def _visit(self, position: int) -> None:
        self._show(self._current_sequence, self._enter(position))

    def _notify(self, key: str, *args: str, error: Optional[DialogError] = None) -> None:
        self.events.publish(DialogEvent.MESSAGE, key=key, args=args, error=error)

    # --- Commands ---

    def execute_command(self, command: Optional[str]) -> bool:
        """
        Forward a command string verbatim to the executor.

        Returns:
            True if a command was forwarded
        """
        if not command:
            return False

        self.logger.info(f"Issuing dialog command: {command}")
        self.events.publish(DialogEvent.COMMAND_ISSUED, command=command)
        if self.command_executor is None:
            return True

        try:
            self.command_executor(command)
        except Exception:
            self.logger.exception(f"Dialog command failed: {command}")
            return False
        return True

    # --- Playback flags ---

    def is_auto_playing(self) -> bool:
        return self.playback.auto_playing

    def set_auto_playing(self, auto_playing: bool) -> None:
        self.playback.auto_playing = auto_playing

    def stop_auto_play(self) -> None:
        self.playback.auto_playing = False

    def is_fast_forwarding_next(self) -> bool:
        return self.playback.fast_forwarding_next

    def set_fast_forwarding_next(self, fast_forwarding_next: bool) -> None:
        self.playback.fast_forwarding_next = fast_forwarding_next
