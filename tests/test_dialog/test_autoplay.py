from cutscene.core.config import DialogConfig
from cutscene.dialog.autoplay import AutoPlayDriver
from cutscene.dialog.manager import DialogManager, DialogResult


def make_manager(event_bus, payload_factory, options=None):
    config = DialogConfig(auto_play_delay=1.0, fast_forward_delay=0.1)
    manager = DialogManager(event_bus, config)
    manager.load_sequences([payload_factory("scene", ["a", "b", "c"], options)])
    return manager


def test_idle_when_auto_play_off(event_bus, payload_factory):
    manager = make_manager(event_bus, payload_factory)
    driver = AutoPlayDriver(manager)
    manager.start("scene")

    assert driver.update(5.0) is None
    assert manager.current_entry.id == "a"


def test_advances_after_delay(event_bus, payload_factory):
    manager = make_manager(event_bus, payload_factory)
    driver = AutoPlayDriver(manager)
    manager.start("scene")
    manager.set_auto_playing(True)

    assert driver.update(0.6) is None
    assert driver.update(0.6) == DialogResult.OK
    assert manager.current_entry.id == "b"
    assert driver.elapsed == 0.0


def test_auto_play_runs_to_the_end(event_bus, payload_factory):
    manager = make_manager(event_bus, payload_factory)
    driver = AutoPlayDriver(manager)
    manager.start("scene")
    manager.set_auto_playing(True)

    results = [driver.update(1.0) for _ in range(3)]

    assert results == [DialogResult.OK, DialogResult.OK, DialogResult.ENDED]
    assert not manager.is_active
    assert driver.update(1.0) is None


def test_fast_forward_uses_short_delay_once(event_bus, payload_factory):
    manager = make_manager(event_bus, payload_factory)
    driver = AutoPlayDriver(manager)
    manager.start("scene")
    manager.set_auto_playing(True)
    manager.set_fast_forwarding_next(True)

    assert driver.update(0.2) == DialogResult.OK
    assert not manager.is_fast_forwarding_next()
    assert driver.update(0.2) is None


def test_waits_on_entries_with_options(event_bus, payload_factory):
    manager = make_manager(event_bus, payload_factory, options={"a": [{"text": "Go", "targetId": "c"}]})
    driver = AutoPlayDriver(manager)
    manager.start("scene")
    manager.set_auto_playing(True)

    assert driver.update(10.0) is None
    assert manager.current_entry.id == "a"


def test_timer_resets_on_manual_advance(event_bus, payload_factory):
    manager = make_manager(event_bus, payload_factory)
    driver = AutoPlayDriver(manager)
    manager.start("scene")
    manager.set_auto_playing(True)

    driver.update(0.9)
    manager.advance()
    assert driver.elapsed == 0.0
    assert driver.update(0.5) is None
    assert manager.current_entry.id == "b"


def test_new_dialog_turns_auto_play_off(event_bus, payload_factory):
    manager = make_manager(event_bus, payload_factory)
    driver = AutoPlayDriver(manager)
    manager.set_auto_playing(True)
    manager.start("scene")

    assert driver.update(5.0) is None
