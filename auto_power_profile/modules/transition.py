from dataclasses import dataclass, replace
import logging


@dataclass
class TransitionState:
    effective_profile: str | None = None
    requested_profile: str | None = None
    committed_profile: str | None = None
    last_on_battery: bool | None = None
    last_low_battery: bool | None = None
    last_perf_apps: bool | None = None


class TransitionGate:
    """
    Hysteresis between the profile the engine wants and the one in effect.

    Once a requested profile has been confirmed by the profile service, the
    same request is not repeated until one of the gating conditions (on
    battery, low battery, performance apps) changes. A user or another tool
    can therefore pick a different profile without the engine switching it
    straight back.

    The state is only touched through report() and request().
    """

    def __init__(self) -> None:
        self._state = TransitionState()

    @property
    def state(self) -> TransitionState:
        """A copy of the current transition state."""
        return replace(self._state)

    @property
    def committed(self) -> bool:
        return self._state.committed_profile is not None

    def report(
        self,
        effective_profile: str | None = None,
        on_battery: bool | None = None,
        low_battery: bool | None = None,
        perf_apps: bool | None = None,
    ) -> None:
        """
        Record the profile the service reports as active.

        Commits a pending request when the effective profile matches it.
        Called without an effective profile, the gate is fully reset.

        :param effective_profile: profile currently active, None if unknown
        :param on_battery: running on battery
        :param low_battery: battery below threshold
        :param perf_apps: performance apps running
        """
        state = self._state
        state.effective_profile = effective_profile
        state.last_on_battery = on_battery
        state.last_low_battery = low_battery
        state.last_perf_apps = perf_apps

        if (
            state.requested_profile
            and not state.committed_profile
            and effective_profile == state.requested_profile
        ):
            state.committed_profile = state.requested_profile
            logging.debug("transition to %s committed", state.committed_profile)

        if not effective_profile:
            state.effective_profile = None
            state.requested_profile = None
            state.committed_profile = None

    def reset(self) -> None:
        self.report()

    def request(
        self,
        configured_profile: str,
        on_battery: bool,
        low_battery: bool,
        perf_apps: bool,
    ) -> bool:
        """
        Ask whether switching to configured_profile is allowed now.

        :return: True if the caller may switch, False if the request is suppressed
        """
        state = self._state
        allowed = (
            state.last_low_battery != low_battery
            or state.last_on_battery != on_battery
            or state.last_perf_apps != perf_apps
            or not state.committed_profile
        )

        if allowed:
            state.requested_profile = configured_profile
            state.committed_profile = None
        return allowed
