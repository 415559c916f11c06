from dataclasses import dataclass

from auto_power_profile.globals import (
    DEFAULT_AC_PROFILE,
    DEFAULT_BATTERY_PROFILE,
    DEFAULT_BATTERY_THRESHOLD,
    DEFAULT_PERF_APPS_AC_PROFILE,
    DEFAULT_PERF_APPS_BATTERY_PROFILE,
    FULL_BATTERY_PERCENTAGE,
    LOW_BATTERY_PROFILE,
)
from auto_power_profile.types import DeviceState

ON_BATTERY_STATES = (DeviceState.PENDING_DISCHARGE, DeviceState.DISCHARGING)


@dataclass(frozen=True)
class PowerConditions:
    has_battery: bool
    on_battery: bool
    on_ac: bool
    low_battery: bool
    perf_apps: bool
    configured_profile: str


def to_device_state(value: DeviceState | str | int | None) -> DeviceState:
    """
    Normalize whatever the power source handed over into a DeviceState.

    Accepts a DeviceState, its string value ("discharging") or UPower's
    numeric code. Missing or unrecognised values become UNKNOWN.
    """
    if isinstance(value, DeviceState):
        return value
    if value is None or isinstance(value, bool):
        return DeviceState.UNKNOWN
    if isinstance(value, int):
        return DeviceState.from_upower(value)
    try:
        return DeviceState(value)
    except ValueError:
        return DeviceState.UNKNOWN


def has_battery(state: DeviceState | str | int | None, percentage: float | None) -> bool:
    return not (to_device_state(state) is DeviceState.UNKNOWN or percentage is None)


def is_on_battery(state: DeviceState | str | int | None) -> bool:
    return to_device_state(state) in ON_BATTERY_STATES


def select_profile(
    on_battery: bool,
    low_battery: bool,
    perf_apps_present: bool,
    on_battery_default: str | None,
    on_ac_default: str | None,
    perf_apps_bat_mode: str | None,
    perf_apps_ac_mode: str | None,
) -> str:
    """
    Pick the profile for the given conditions.

    Priority order:
    1. Performance apps running (per power source profile)
    2. Low battery (always power-saver)
    3. Configured default for the power source

    Empty or missing profile names fall back to the package defaults.
    """
    if perf_apps_present:
        if on_battery:
            return perf_apps_bat_mode or DEFAULT_PERF_APPS_BATTERY_PROFILE
        return perf_apps_ac_mode or DEFAULT_PERF_APPS_AC_PROFILE

    if low_battery:
        return LOW_BATTERY_PROFILE

    if on_battery:
        return on_battery_default or DEFAULT_BATTERY_PROFILE
    return on_ac_default or DEFAULT_AC_PROFILE


def evaluate(
    power_state: DeviceState | str | int | None,
    battery_percentage: float | None,
    threshold: int | None,
    on_battery_default: str | None,
    on_ac_default: str | None,
    perf_apps_present: bool,
    perf_apps_bat_mode: str | None = None,
    perf_apps_ac_mode: str | None = None,
) -> PowerConditions:
    """
    Evaluate the current power conditions and the profile they call for.

    Side effect free: the same inputs always give the same PowerConditions.
    A missing percentage counts as a full battery and a missing threshold as
    the default threshold, so absent battery data never reports low battery.

    :param power_state: device state reported by the power source
    :param battery_percentage: charge level in percent, None if unknown
    :param threshold: percentage at or below which the battery is low
    :param on_battery_default: profile to use on battery
    :param on_ac_default: profile to use on AC
    :param perf_apps_present: whether a performance app is running
    :param perf_apps_bat_mode: profile for performance apps on battery
    :param perf_apps_ac_mode: profile for performance apps on AC
    :return: the evaluated PowerConditions
    """
    state = to_device_state(power_state)
    on_battery = is_on_battery(state)

    percentage = FULL_BATTERY_PERCENTAGE if battery_percentage is None else battery_percentage
    limit = DEFAULT_BATTERY_THRESHOLD if threshold is None else threshold
    low_battery = on_battery and percentage <= limit

    perf_apps = bool(perf_apps_present)

    return PowerConditions(
        has_battery=has_battery(state, battery_percentage),
        on_battery=on_battery,
        on_ac=not on_battery,
        low_battery=low_battery,
        perf_apps=perf_apps,
        configured_profile=select_profile(
            on_battery,
            low_battery,
            perf_apps,
            on_battery_default,
            on_ac_default,
            perf_apps_bat_mode,
            perf_apps_ac_mode,
        ),
    )
