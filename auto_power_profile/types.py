from enum import Enum


class ObserverEvent(Enum):
    POWER_STATE = "POWER_STATE"
    PERFORMANCE_APPS = "PERFORMANCE_APPS"


class DeviceState(Enum):
    UNKNOWN = "unknown"
    CHARGING = "charging"
    DISCHARGING = "discharging"
    EMPTY = "empty"
    FULLY_CHARGED = "fully-charged"
    PENDING_CHARGE = "pending-charge"
    PENDING_DISCHARGE = "pending-discharge"

    @classmethod
    def from_upower(cls, value) -> "DeviceState":
        """
        Map UPower's numeric device state (0-6) to a DeviceState.

        Anything outside the known range is treated as UNKNOWN.
        """
        try:
            index = int(value)
        except (TypeError, ValueError):
            return cls.UNKNOWN
        if 0 <= index < len(_UPOWER_STATES):
            return _UPOWER_STATES[index]
        return cls.UNKNOWN


# ordered like the UPowerDeviceState enum
_UPOWER_STATES = (
    DeviceState.UNKNOWN,
    DeviceState.CHARGING,
    DeviceState.DISCHARGING,
    DeviceState.EMPTY,
    DeviceState.FULLY_CHARGED,
    DeviceState.PENDING_CHARGE,
    DeviceState.PENDING_DISCHARGE,
)
