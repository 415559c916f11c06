"""Tests for the profile engine: evaluate, gate, switch and lap mode."""

import logging
from types import SimpleNamespace

import pytest

from auto_power_profile.config.config import Settings
from auto_power_profile.globals import PLATFORM_DRIVERS_DOC
from auto_power_profile.modules import performance_apps
from auto_power_profile.modules.engine import ProfileEngine
from auto_power_profile.modules.performance_apps import PerformanceAppTracker
from auto_power_profile.modules.transition import TransitionState
from auto_power_profile.types import DeviceState

from conftest import FakeConfig, FakeProfileSink


def test_start_switches_and_commits(engine, profile_sink):
    """The echoed change is handled after the switch, not inside it."""
    engine.start()

    assert profile_sink.requests == ["performance"]
    assert engine.gate.committed
    assert engine.gate.state.effective_profile == "performance"


def test_committed_profile_is_not_requested_again(engine, profile_sink):
    engine.start()

    conditions = engine.evaluate_and_maybe_switch()

    assert conditions.configured_profile == "performance"
    assert profile_sink.requests == ["performance"]


def test_external_change_is_respected_until_conditions_change(engine, profile_sink, power_source):
    engine.start()

    # user picks power-saver by hand
    profile_sink.active_profile = "power-saver"
    engine.on_external_profile_change("power-saver")
    engine.evaluate_and_maybe_switch()
    assert profile_sink.requests == ["performance"]

    # unplugging re-opens the gate
    power_source.set(DeviceState.DISCHARGING, 80.0)
    engine.on_power_state_changed()
    assert profile_sink.requests == ["performance", "balanced"]


def test_low_battery_switches_to_power_saver(engine, profile_sink, power_source):
    engine.start()

    power_source.set(DeviceState.DISCHARGING, 10.0)
    engine.on_power_state_changed()

    assert profile_sink.requests[-1] == "power-saver"


def test_performance_app_switches_profile(power_source, profile_sink, app_tracker, scheduler):
    power_source.set(DeviceState.DISCHARGING, 80.0)
    config = FakeConfig(Settings(perf_apps_battery_profile="performance"))
    engine = ProfileEngine(power_source, profile_sink, app_tracker, config, scheduler)
    engine.start()
    assert profile_sink.requests == []

    app_tracker.active = True
    engine.on_performance_apps_changed()

    assert profile_sink.requests == ["performance"]


def test_config_change_resets_gate_and_applies_new_default(engine, profile_sink, fake_config, app_tracker):
    engine.start()

    fake_config.settings = Settings(ac_profile="power-saver", performance_apps=frozenset({"steam"}))
    engine.on_config_changed()

    assert profile_sink.requests == ["performance", "power-saver"]
    assert engine.settings.ac_profile == "power-saver"
    assert app_tracker.applications == {"steam"}


def test_unavailable_profile_is_skipped(power_source, app_tracker, fake_config, scheduler, caplog):
    profile_sink = FakeProfileSink(profiles=("power-saver", "balanced"))
    engine = ProfileEngine(power_source, profile_sink, app_tracker, fake_config, scheduler)

    with caplog.at_level(logging.ERROR):
        engine.start()

    assert profile_sink.requests == []
    assert "not available" in caplog.text
    assert not engine.gate.committed


def test_switch_to_active_profile_is_not_sent(engine, profile_sink, fake_config):
    profile_sink.active_profile = "performance"

    engine.start()

    assert profile_sink.requests == []


def test_already_active_profile_is_committed(engine, profile_sink):
    profile_sink.active_profile = "performance"

    engine.start()

    assert engine.gate.committed
    assert engine.gate.state.committed_profile == "performance"


def test_manual_choice_survives_when_recommended_profile_was_already_active(engine, profile_sink):
    profile_sink.active_profile = "performance"
    engine.start()

    profile_sink.active_profile = "power-saver"
    engine.on_properties_changed({"ActiveProfile": "power-saver"})
    engine.on_power_state_changed()

    assert profile_sink.requests == []
    assert profile_sink.active_profile == "power-saver"


def test_missing_profile_service_notifies_and_resets(power_source, app_tracker, fake_config, scheduler, notifier):
    profile_sink = FakeProfileSink(active_profile=None, profiles=())
    engine = ProfileEngine(power_source, profile_sink, app_tracker, fake_config, scheduler, notifier=notifier)

    engine.start()
    engine.on_external_profile_change(None)

    assert notifier.messages == [("Package power-profiles-daemon is not installed", None)]
    assert profile_sink.requests == []
    state = engine.gate.state
    assert state.effective_profile is None
    assert state.requested_profile is None
    assert state.committed_profile is None


def test_placeholder_driver_notifies_with_docs_link(power_source, app_tracker, fake_config, scheduler, notifier):
    profile_sink = FakeProfileSink(drivers=["placeholder", None, "placeholder"])
    engine = ProfileEngine(power_source, profile_sink, app_tracker, fake_config, scheduler, notifier=notifier)

    engine.validate_drivers()

    assert len(notifier.messages) == 1
    assert notifier.messages[0][1] == PLATFORM_DRIVERS_DOC


def test_working_driver_does_not_notify(engine, notifier):
    engine.validate_drivers()

    assert notifier.messages == []


def test_payload_without_known_keys_is_ignored(engine, profile_sink):
    engine.start()
    before = engine.gate.state

    engine.on_properties_changed({"Profiles": []})
    engine.on_properties_changed({})
    engine.on_properties_changed(None)

    assert engine.gate.state == before


def test_degraded_profile_change_does_not_commit(engine, profile_sink):
    profile_sink.echo = None
    engine.start()
    assert not engine.gate.committed

    engine.on_properties_changed({"ActiveProfile": "performance", "PerformanceDegraded": "high-operating-temperature"})
    assert not engine.gate.committed

    engine.on_properties_changed({"ActiveProfile": "performance"})
    assert engine.gate.committed


def test_lap_detection_is_debounced(engine, profile_sink, scheduler):
    """Two lap-detected events 3s apart: one re-apply, 5s after the second."""
    engine.start()

    # the daemon lowers the profile because the laptop is on a lap
    profile_sink.active_profile = "balanced"
    engine.on_properties_changed({"ActiveProfile": "balanced", "PerformanceDegraded": "lap-detected"})
    assert engine.lap_timer.is_running()

    scheduler.advance(3)
    engine.on_properties_changed({"PerformanceDegraded": "lap-detected"})

    scheduler.advance(4)
    assert profile_sink.requests == ["performance"]

    scheduler.advance(1)
    assert profile_sink.requests == ["performance", "performance"]
    assert engine.gate.committed

    scheduler.advance(30)
    assert profile_sink.requests == ["performance", "performance"]
    assert scheduler.pending == 0


def test_lap_detection_ignored_when_lap_mode_disabled(engine, fake_config):
    fake_config.settings = Settings(ac_profile="performance", lap_mode=False)
    engine.start()

    engine.on_properties_changed({"PerformanceDegraded": "lap-detected"})

    assert not engine.lap_timer.is_running()


def test_lap_detection_ignored_on_battery(engine, power_source):
    power_source.set(DeviceState.DISCHARGING, 80.0)
    engine.start()

    engine.on_properties_changed({"PerformanceDegraded": "lap-detected"})

    assert not engine.lap_timer.is_running()


def test_other_degradation_reason_is_only_logged(engine, caplog):
    engine.start()
    before = engine.gate.state

    with caplog.at_level(logging.INFO):
        engine.on_properties_changed({"PerformanceDegraded": "high-operating-temperature"})

    assert "high-operating-temperature" in caplog.text
    assert not engine.lap_timer.is_running()
    assert engine.gate.state == before


def test_profile_change_cancels_pending_lap_timer(engine, profile_sink):
    engine.start()
    engine.on_properties_changed({"PerformanceDegraded": "lap-detected"})
    assert engine.lap_timer.is_running()

    engine.on_properties_changed({"ActiveProfile": "performance"})

    assert not engine.lap_timer.is_running()


def test_stop_restores_balanced_and_resets(engine, profile_sink, scheduler):
    engine.start()
    engine.on_properties_changed({"PerformanceDegraded": "lap-detected"})

    engine.stop()

    assert profile_sink.requests[-1] == "balanced"
    assert not engine.lap_timer.is_running()
    assert engine.gate.state == TransitionState()
    assert scheduler.pending == 0


def test_failing_handler_does_not_stop_dispatcher(engine, power_source, profile_sink, caplog):
    engine.start()

    def broken():
        raise RuntimeError("upower went away")

    power_source.get_power_state = broken
    with caplog.at_level(logging.ERROR):
        engine.on_power_state_changed()
    assert "upower went away" in caplog.text

    # the queue keeps working afterwards
    del power_source.get_power_state
    power_source.set(DeviceState.DISCHARGING, 5.0)
    engine.on_power_state_changed()
    assert profile_sink.requests[-1] == "power-saver"


@pytest.mark.parametrize("percentage", [None, 50.0])
def test_unknown_power_state_uses_ac_default(power_source, profile_sink, app_tracker, fake_config, scheduler, percentage):
    power_source.set(DeviceState.UNKNOWN, percentage)
    engine = ProfileEngine(power_source, profile_sink, app_tracker, fake_config, scheduler)

    conditions = engine.get_conditions()

    assert not conditions.has_battery
    assert conditions.configured_profile == "performance"


def test_config_change_rescans_performance_apps(power_source, profile_sink, scheduler, monkeypatch):
    monkeypatch.setattr(
        performance_apps.psutil,
        "process_iter",
        lambda attrs=None: [SimpleNamespace(info={"name": "steam", "exe": "/usr/bin/steam"})],
    )
    power_source.set(DeviceState.DISCHARGING, 80.0)
    config = FakeConfig(Settings(perf_apps_battery_profile="performance", performance_apps=frozenset({"steam"})))
    engine = ProfileEngine(power_source, profile_sink, PerformanceAppTracker(), config, scheduler)

    engine.start()

    assert profile_sink.requests == ["performance"]


def test_config_change_scans_before_evaluating(engine, app_tracker):
    engine.on_config_changed()

    assert app_tracker.scans == 1
