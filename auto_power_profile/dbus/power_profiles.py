#!/usr/bin/env python3
"""
Client for the org.freedesktop.UPower.PowerProfiles D-Bus interface.

This is the side of power-profiles-daemon the engine talks to: it reads the
active and available profiles, watches for changes made by anybody and
requests profile switches.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from dasbus.connection import SystemMessageBus
from dasbus.error import DBusError
from dasbus.typing import get_native
from gi.repository import GLib

from .constants import (
    ACTIVE_PROFILE,
    PERFORMANCE_DEGRADED,
    POWER_PROFILES_SERVICES,
    PROFILE_DRIVER_KEYS,
)

log = logging.getLogger(__name__)


class PowerProfilesClient:
    """
    Talks to power-profiles-daemon on the system bus.

    Every read degrades to "nothing known" when the daemon is unavailable:
    no active profile, no profiles, no degradation.
    """

    def __init__(self, bus=None):
        self._bus = bus or SystemMessageBus()
        self._proxy = None
        self._service_name: Optional[str] = None

    @property
    def connected(self) -> bool:
        return self._proxy is not None

    @property
    def service_name(self) -> Optional[str]:
        return self._service_name

    def connect(self) -> bool:
        """
        Find the profile service, trying the current name before the legacy one.

        Returns:
            True if a service answered
        """
        for service_name, object_path in POWER_PROFILES_SERVICES:
            proxy = self._bus.get_proxy(service_name, object_path)
            try:
                proxy.ActiveProfile
            except (DBusError, GLib.Error) as e:
                log.debug(f"{service_name} not available: {e}")
                continue

            self._proxy = proxy
            self._service_name = service_name
            log.info(f"Connected to power-profiles-daemon ({service_name})")
            return True

        log.error("Failed to connect to power-profiles-daemon: no power profiles service found")
        return False

    def _get(self, name: str, default: Any) -> Any:
        if self._proxy is None:
            return default
        try:
            return get_native(getattr(self._proxy, name))
        except (DBusError, GLib.Error) as e:
            log.error(f"Failed to read {name}: {e}")
            return default

    @property
    def active_profile(self) -> Optional[str]:
        return self._get(ACTIVE_PROFILE, None) or None

    @property
    def performance_degraded(self) -> str:
        return self._get(PERFORMANCE_DEGRADED, "")

    @property
    def profiles(self) -> List[Dict[str, Any]]:
        """Profiles as plain dictionaries ({"Profile": ..., "Driver": ...})."""
        return self._get("Profiles", [])

    def available_profiles(self) -> List[str]:
        return [p["Profile"] for p in self.profiles if p.get("Profile")]

    def drivers(self, profile: str) -> List[Optional[str]]:
        """Driver, PlatformDriver and CpuDriver of the given profile."""
        for p in self.profiles:
            if p.get("Profile") == profile:
                return [p.get(key) for key in PROFILE_DRIVER_KEYS]
        return []

    def set_active_profile(self, profile: str) -> bool:
        if self._proxy is None:
            log.error(f"Can't switch to {profile}: power-profiles-daemon is not connected")
            return False
        try:
            self._proxy.ActiveProfile = profile
        except (DBusError, GLib.Error) as e:
            log.error(f"Failed to switch profile: {e}")
            return False
        return True

    def watch(self, callback: Callable[[Dict[str, Any]], None]) -> bool:
        """
        Call callback with the changed properties on every PropertiesChanged.

        Args:
            callback: receives a dictionary of the changed properties, unpacked
        """
        if self._proxy is None:
            return False
        self._proxy.PropertiesChanged.connect(
            lambda interface, changed, invalidated: callback(get_native(changed))
        )
        return True
