import os
import sys
import json
import pytest

# Ensure cutscene can be imported without installing
sys.path.append(os.getcwd())


def make_payload(seq_id, entry_ids, options=None):
    """Build a sequence payload; ``options`` maps entry id -> list of option dicts."""
    options = options or {}
    return json.dumps({
        "id": seq_id,
        "entries": [
            {"id": eid, "text": f"Text of {eid}", "options": options.get(eid, [])}
            for eid in entry_ids
        ],
    })


@pytest.fixture
def payload_factory():
    return make_payload


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from cutscene.core.events import EventBus
    return EventBus()


@pytest.fixture
def intro_payload():
    """Linear start, a branching choice, two endings."""
    return make_payload(
        "intro",
        ["greet", "ask", "yes", "no"],
        options={
            "ask": [
                {"text": "Sure", "targetId": "yes", "command": "/give @p bread"},
                {"text": "No thanks", "targetId": "no"},
                {"text": "..."},
            ],
        },
    )


@pytest.fixture
def commands():
    """Commands forwarded to the executor."""
    return []


@pytest.fixture
def manager(event_bus, intro_payload, commands):
    """DialogManager holding the intro sequence and an empty one."""
    from cutscene.dialog.manager import DialogManager

    mgr = DialogManager(event_bus, command_executor=commands.append)
    mgr.load_sequences([intro_payload, make_payload("empty", [])])
    return mgr


@pytest.fixture
def recorded(event_bus):
    """Every dialog event published on the bus, in order."""
    from cutscene.core.events import DialogEvent

    events = []

    def record(event):
        events.append(event)

    for event_type in DialogEvent:
        event_bus.subscribe(event_type, record, weak=False)
    return events
