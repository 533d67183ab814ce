"""
Dialog loader - turns raw sequence payloads into DialogSequence records.

Payloads are JSON text (or already-decoded dicts). Each one goes through
three stages: JSON decoding, jsonschema validation against the bundled
schema, and pydantic model validation. A failure at any stage raises
ParseError.

Batch loading is best-effort: every payload is parsed on its own and
failures are collected rather than raised. The functions here have no side
effects; the caller decides how to report failures.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import jsonschema
from pydantic import ValidationError

from cutscene.dialog.errors import ParseError
from cutscene.dialog.models import DialogSequence

Payload = Union[str, bytes, Mapping[str, Any]]

SCHEMA_PATH = Path(__file__).parent / "schemas" / "dialog_sequence.schema.json"

_schema: Optional[dict[str, Any]] = None


def get_schema() -> dict[str, Any]:
    """Load (once) the JSON schema for sequence payloads."""
    global _schema
    if _schema is None:
        with open(SCHEMA_PATH, 'r', encoding='utf-8') as f:
            _schema = json.load(f)
    return _schema


@dataclass
class LoadResult:
    """
    Outcome of a batch load.

    Attributes:
        sequences: Parsed sequences keyed by registry id
        failures: (source, error) for every payload that was skipped
        mismatches: (key, payload id) for synced payloads whose id
            disagreed with the key they were sent under
    """
    sequences: dict[str, DialogSequence] = field(default_factory=dict)
    failures: list[tuple[str, ParseError]] = field(default_factory=list)
    mismatches: list[tuple[str, str]] = field(default_factory=list)

    @property
    def loaded(self) -> int:
        return len(self.sequences)

    @property
    def failed(self) -> int:
        return len(self.failures)


def parse_sequence(payload: Payload, source: Optional[str] = None) -> DialogSequence:
    """
    Parse one sequence payload.

    Args:
        payload: JSON text, UTF-8 bytes, or a decoded mapping
        source: Label for error messages (file name, sync key, ...)

    Raises:
        ParseError: The payload is malformed or lacks an id
    """
    label = source or "<payload>"

    if isinstance(payload, (str, bytes, bytearray)):
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
            raise ParseError(f"Invalid JSON in {label}: {e}", source, payload) from e
    else:
        data = payload

    if not isinstance(data, Mapping):
        raise ParseError(f"Expected a JSON object in {label}, got {type(data).__name__}", source, payload)

    try:
        jsonschema.validate(instance=data, schema=get_schema())
    except jsonschema.ValidationError as e:
        raise ParseError(f"Validation error in {label}: {e.message}", source, payload) from e
    except RecursionError as e:
        raise ParseError(f"Payload nested too deeply in {label}", source, payload) from e

    try:
        return DialogSequence.model_validate(data)
    except (ValidationError, RecursionError) as e:
        raise ParseError(f"Invalid dialog sequence in {label}: {e}", source, payload) from e


def load_sequences(payloads: Iterable[Payload]) -> LoadResult:
    """
    Parse a batch of payloads, keyed by each sequence's own id.

    A later payload with the same id replaces an earlier one.
    """
    result = LoadResult()
    for position, payload in enumerate(payloads):
        source = f"#{position}"
        try:
            sequence = parse_sequence(payload, source)
        except ParseError as e:
            result.failures.append((source, e))
            continue
        result.sequences[sequence.id] = sequence
    return result


def load_synced_sequences(payloads: Mapping[str, Payload]) -> LoadResult:
    """
    Parse a registry received from a peer.

    The mapping key is the authoritative id: a payload whose own id
    differs is still stored under its key, and the mismatch is recorded.
    """
    result = LoadResult()
    for key, payload in payloads.items():
        try:
            sequence = parse_sequence(payload, key)
        except ParseError as e:
            result.failures.append((key, e))
            continue
        if sequence.id != key:
            result.mismatches.append((key, sequence.id))
        result.sequences[key] = sequence
    return result


def dump_sequence(sequence: DialogSequence) -> str:
    """Serialize a sequence to its payload form."""
    return sequence.model_dump_json(by_alias=True, exclude_none=True)


def dump_sequences(sequences: Mapping[str, DialogSequence]) -> dict[str, str]:
    """Build the id -> payload mapping sent to peers."""
    return {seq_id: dump_sequence(sequence) for seq_id, sequence in sequences.items()}


def payload_text(payload: Payload) -> str:
    """Best-effort text form of a payload for debug logging."""
    if isinstance(payload, (bytes, bytearray)):
        return payload.decode('utf-8', errors='replace')
    if isinstance(payload, str):
        return payload
    try:
        return json.dumps(payload)
    except (TypeError, ValueError):
        return repr(payload)
    except RecursionError:
        return f"<{type(payload).__name__} nested too deeply>"
