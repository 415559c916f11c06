from dataclasses import dataclass
import logging

import psutil

from auto_power_profile.globals import FULL_BATTERY_PERCENTAGE
from auto_power_profile.modules.conditions import has_battery, is_on_battery
from auto_power_profile.types import DeviceState


@dataclass(frozen=True)
class PowerState:
    state: DeviceState
    percentage: float | None

    @property
    def has_battery(self) -> bool:
        return has_battery(self.state, self.percentage)

    @property
    def on_battery(self) -> bool:
        return is_on_battery(self.state)

    def __repr__(self) -> str:
        if self.percentage is None:
            return self.state.value
        return f"{self.state.value} ({self.percentage:.0f}%)"


UNKNOWN_POWER_STATE = PowerState(DeviceState.UNKNOWN, None)


class PsutilPowerSource:
    """
    Power state read through psutil.

    Used when UPower is not available. psutil has no change notifications,
    so the EventObserver polls it.
    """

    def get_power_state(self) -> PowerState:
        try:
            battery = psutil.sensors_battery()
        except Exception as e:
            logging.error("failed to read battery state: %s", e)
            return UNKNOWN_POWER_STATE

        if battery is None:
            return UNKNOWN_POWER_STATE

        percentage = float(battery.percent)
        if battery.power_plugged is None:
            state = DeviceState.UNKNOWN
        elif battery.power_plugged:
            state = DeviceState.FULLY_CHARGED if percentage >= FULL_BATTERY_PERCENTAGE else DeviceState.CHARGING
        else:
            state = DeviceState.DISCHARGING
        return PowerState(state, percentage)
