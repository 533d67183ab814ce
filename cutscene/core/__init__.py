"""
Core module.

Exports:
- EventBus, Event, DialogEvent: Event system
- Model: Pydantic base for data records
- DialogConfig: Runtime configuration
"""

from cutscene.core.events import EventBus, Event, DialogEvent
from cutscene.core.model import Model
from cutscene.core.config import DialogConfig

__all__ = [
    # Events
    "EventBus",
    "Event",
    "DialogEvent",
    # Data
    "Model",
    # Config
    "DialogConfig",
]
