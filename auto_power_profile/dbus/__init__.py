#!/usr/bin/env python3
"""
D-Bus support for auto-power-profile.

Clients for the services the engine depends on: UPower for the battery
state, power-profiles-daemon (org.freedesktop.UPower.PowerProfiles) for
reading and switching profiles, and the notification server for warnings.
"""

from .power_profiles import PowerProfilesClient
from .upower import UPowerSource
from .notifications import Notifier
from .constants import (
    POWER_PROFILES_SERVICES,
    UPOWER_SERVICE_NAME,
    UPOWER_DISPLAY_DEVICE_PATH,
)

__all__ = [
    # Clients
    "PowerProfilesClient",
    "UPowerSource",
    "Notifier",
    # Constants
    "POWER_PROFILES_SERVICES",
    "UPOWER_SERVICE_NAME",
    "UPOWER_DISPLAY_DEVICE_PATH",
]
