"""
Base class for data-only records.

Dialog data is plain data: it carries no behaviour beyond derived lookups.
Pydantic gives us validation of incoming payloads, JSON serialization for
the sync path, and per-field immutability.

Usage:
    class Speaker(Model):
        name: str
        portrait: str | None = None
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Model(BaseModel):
    """
    Base for every record in the dialog core.

    Fields serialize under camelCase aliases (``target_id`` -> ``targetId``)
    so payloads match the data-pack format, while Python code keeps
    snake_case names. Unknown keys in payloads are ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra='ignore',
    )
