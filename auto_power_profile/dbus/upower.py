#!/usr/bin/env python3
"""
Power state source backed by UPower's DisplayDevice.
"""

import logging
from typing import Callable

from dasbus.connection import SystemMessageBus
from dasbus.error import DBusError
from gi.repository import GLib

from auto_power_profile.modules.power_source import UNKNOWN_POWER_STATE, PowerState
from auto_power_profile.types import DeviceState

from .constants import UPOWER_DISPLAY_DEVICE_PATH, UPOWER_SERVICE_NAME

log = logging.getLogger(__name__)


class UPowerSource:
    """
    Reads State and Percentage of the UPower display device.

    When UPower can't be reached the source reports an unknown state without
    percentage, which the evaluator treats as "no battery data".
    """

    def __init__(self, bus=None):
        self._bus = bus or SystemMessageBus()
        self._proxy = self._bus.get_proxy(UPOWER_SERVICE_NAME, UPOWER_DISPLAY_DEVICE_PATH)

    def get_power_state(self) -> PowerState:
        try:
            state = DeviceState.from_upower(self._proxy.State)
            percentage = float(self._proxy.Percentage)
        except (DBusError, GLib.Error) as e:
            log.error(f"Failed to read UPower device state: {e}")
            return UNKNOWN_POWER_STATE
        return PowerState(state, percentage)

    def watch(self, callback: Callable[[], None]) -> bool:
        """
        Call callback whenever the device properties change.

        :return: True if the signal could be connected
        """
        try:
            self._proxy.PropertiesChanged.connect(lambda interface, changed, invalidated: callback())
        except (DBusError, GLib.Error) as e:
            log.error(f"Failed to connect to UPower: {e}")
            return False
        log.info("Connected to UPower daemon")
        return True
