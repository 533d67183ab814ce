"""
Dialog error taxonomy.

Every error is recoverable where it occurs. ParseError is raised by the
loader and converted into a skip at the batch boundary; the others are
raised by DialogSequence lookups and converted into DialogResult values by
the DialogManager, so none of them escape the core for expected conditions.
"""

from __future__ import annotations

from typing import Any, Optional

# Message identifiers handed to the presentation layer for user-visible text
MSG_SEQUENCE_NOT_FOUND = "dialog.manager.not_found"
MSG_REQUESTING_FROM_SERVER = "dialog.manager.requesting_from_server"
MSG_NO_ENTRIES = "dialog.manager.no_entries"
MSG_TARGET_NOT_FOUND = "dialog.manager.target_not_found"
MSG_RECEIVED_SEQUENCE_EMPTY = "dialog.manager.received_sequence_empty"
MSG_RECEIVED_PARSE_FAILED = "dialog.manager.received_parse_failed"


class DialogError(Exception):
    """Base class for dialog errors. Carries a message key and the offending id."""

    message_key: str = ""

    def __init__(self, message: str, subject_id: Optional[str] = None):
        super().__init__(message)
        self.subject_id = subject_id


class ParseError(DialogError):
    """A payload could not be decoded or does not describe a valid sequence."""

    message_key = MSG_RECEIVED_PARSE_FAILED

    def __init__(self, message: str, subject_id: Optional[str] = None, payload: Any = None):
        super().__init__(message, subject_id)
        self.payload = payload


class NotFoundError(DialogError):
    """A sequence id is not present in the registry."""

    message_key = MSG_SEQUENCE_NOT_FOUND

    def __init__(self, sequence_id: str):
        super().__init__(f"Dialog sequence not found: {sequence_id}", sequence_id)


class EmptySequenceError(DialogError):
    """A sequence has no entries and cannot be started."""

    message_key = MSG_NO_ENTRIES

    def __init__(self, sequence_id: str):
        super().__init__(f"No entries found in dialog sequence: {sequence_id}", sequence_id)


class TargetNotFoundError(DialogError):
    """A jump target is not an entry of the current sequence."""

    message_key = MSG_TARGET_NOT_FOUND

    def __init__(self, target_id: str, sequence_id: Optional[str] = None):
        super().__init__(f"Target dialog entry not found: {target_id}", target_id)
        self.sequence_id = sequence_id
