"""Shared pytest fixtures and fakes for the test suite."""

from typing import Any, Callable, Dict, List, Optional

import pytest

from auto_power_profile.config.config import Settings
from auto_power_profile.globals import VALID_PROFILES
from auto_power_profile.modules.engine import ProfileEngine
from auto_power_profile.modules.power_source import PowerState
from auto_power_profile.types import DeviceState


class FakeScheduler:
    """Manual clock standing in for the GLib main loop."""

    def __init__(self) -> None:
        self.now = 0.0
        self._next_id = 1
        self._sources: Dict[int, Dict[str, Any]] = {}

    def _add(self, interval: float, callback: Callable[[], bool]) -> int:
        source_id = self._next_id
        self._next_id += 1
        self._sources[source_id] = {"due": self.now + interval, "interval": interval, "callback": callback}
        return source_id

    def timeout_add_seconds(self, interval: int, callback: Callable[[], bool]) -> int:
        return self._add(interval, callback)

    def idle_add(self, callback: Callable[[], bool]) -> int:
        return self._add(0, callback)

    def source_remove(self, source_id: int) -> None:
        # GLib warns on unknown ids, so do the tests
        assert source_id in self._sources, f"unknown source {source_id}"
        del self._sources[source_id]

    @property
    def pending(self) -> int:
        return len(self._sources)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running every source that falls due."""
        target = self.now + seconds
        while True:
            due = [(s["due"], sid) for sid, s in self._sources.items() if s["due"] <= target]
            if not due:
                break
            when, source_id = min(due)
            self.now = when
            source = self._sources[source_id]
            keep = source["callback"]()
            if source_id in self._sources:
                if keep:
                    source["due"] = self.now + source["interval"]
                else:
                    del self._sources[source_id]
        self.now = target


class FakePowerSource:
    def __init__(self, state: DeviceState = DeviceState.CHARGING, percentage: Optional[float] = 80.0) -> None:
        self.power_state = PowerState(state, percentage)

    def set(self, state: DeviceState, percentage: Optional[float]) -> None:
        self.power_state = PowerState(state, percentage)

    def get_power_state(self) -> PowerState:
        return self.power_state


class FakeProfileSink:
    """
    Profile service that records switch requests.

    With echo=True a switch immediately calls the registered callback, like
    a service emitting PropertiesChanged synchronously.
    """

    def __init__(self, active_profile: Optional[str] = "balanced", profiles=VALID_PROFILES, drivers=None) -> None:
        self.active_profile = active_profile
        self.performance_degraded = ""
        self._profiles = list(profiles)
        self._drivers = drivers if drivers is not None else ["intel_pstate", None, None]
        self.requests: List[str] = []
        self.echo: Optional[Callable[[Dict[str, Any]], None]] = None

    def available_profiles(self) -> List[str]:
        return list(self._profiles)

    def drivers(self, profile: str) -> List[Optional[str]]:
        return list(self._drivers) if profile in self._profiles else []

    def set_active_profile(self, profile: str) -> bool:
        self.requests.append(profile)
        self.active_profile = profile
        if self.echo is not None:
            self.echo({"ActiveProfile": profile})
        return True


class FakeAppTracker:
    def __init__(self) -> None:
        self.active = False
        self.applications = frozenset()
        self.scans = 0

    def set_applications(self, applications) -> None:
        self.applications = frozenset(applications)

    def scan(self) -> bool:
        self.scans += 1
        return False

    def has_active_performance_apps(self) -> bool:
        return self.active


class FakeConfig:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()

    def get_settings(self) -> Settings:
        return self.settings


class FakeNotifier:
    def __init__(self) -> None:
        self.messages: List[tuple] = []

    def notify(self, body: str, uri: Optional[str] = None) -> None:
        self.messages.append((body, uri))


class FakeDesktopSettings:
    def __init__(self, animations: bool = True) -> None:
        self.values = {"enable-animations": animations}

    def get_boolean(self, key: str) -> bool:
        return self.values[key]

    def set_boolean(self, key: str, value: bool) -> None:
        self.values[key] = value


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def power_source() -> FakePowerSource:
    return FakePowerSource()


@pytest.fixture
def profile_sink() -> FakeProfileSink:
    return FakeProfileSink()


@pytest.fixture
def app_tracker() -> FakeAppTracker:
    return FakeAppTracker()


@pytest.fixture
def fake_config() -> FakeConfig:
    return FakeConfig(Settings(ac_profile="performance", battery_profile="balanced"))


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def engine(power_source, profile_sink, app_tracker, fake_config, scheduler, notifier) -> ProfileEngine:
    """Engine wired to fakes; the sink reports its changes back synchronously."""
    engine = ProfileEngine(power_source, profile_sink, app_tracker, fake_config, scheduler, notifier=notifier)
    profile_sink.echo = engine.on_properties_changed
    return engine
