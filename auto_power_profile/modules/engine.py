from collections import deque
import logging
from typing import Any, Callable, Deque, Mapping, Tuple

from auto_power_profile.config.config import Settings
from auto_power_profile.globals import (
    LAP_DETECTED,
    LAP_MODE_DEBOUNCE_SECONDS,
    PLACEHOLDER_DRIVER,
    PLATFORM_DRIVERS_DOC,
    SHUTDOWN_PROFILE,
)
from auto_power_profile.modules.conditions import PowerConditions, evaluate
from auto_power_profile.modules.timer import CustomTimer, Scheduler
from auto_power_profile.modules.transition import TransitionGate

log = logging.getLogger(__name__)


class ProfileEngine:
    """
    Decides which power profile should be active and applies it.

    Every event (power state, settings, performance apps, profile service
    changes, lap mode timeout) goes through one dispatcher queue. Handlers run
    one at a time to completion; an event raised while a handler is running
    is queued behind it instead of being handled re-entrantly.

    Each evaluation runs the condition evaluator, asks the TransitionGate
    whether a switch is allowed and, if so, asks the profile service to
    switch. The service's change notification is reported back to the gate.
    """

    def __init__(
        self,
        power_source,
        profile_sink,
        app_tracker,
        config,
        scheduler: Scheduler,
        notifier=None,
        animations=None,
    ) -> None:
        """
        :param power_source: provides get_power_state()
        :param profile_sink: the power profiles service client
        :param app_tracker: provides has_active_performance_apps() and set_applications()
        :param config: provides get_settings()
        :param scheduler: main loop used for the lap mode timer
        :param notifier: shows user-visible warnings, optional
        :param animations: AnimationController, optional
        """
        self.power_source = power_source
        self.profile_sink = profile_sink
        self.app_tracker = app_tracker
        self.config = config
        self.notifier = notifier
        self.animations = animations

        self._gate = TransitionGate()
        self._lap_timer = CustomTimer(LAP_MODE_DEBOUNCE_SECONDS, self._on_lap_timeout, scheduler)
        self._settings: Settings = config.get_settings()
        self._queue: Deque[Tuple[Callable[..., Any], tuple]] = deque()
        self._dispatching = False

    @property
    def gate(self) -> TransitionGate:
        return self._gate

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def lap_timer(self) -> CustomTimer:
        return self._lap_timer

    # ==================== dispatcher ====================

    def _dispatch(self, handler: Callable[..., Any], *args: Any) -> None:
        self._queue.append((handler, args))
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._queue:
                handler, args = self._queue.popleft()
                try:
                    handler(*args)
                except Exception as e:
                    log.error("Error in event handler %s: %s", handler.__name__, e)
        finally:
            self._dispatching = False

    # ==================== entry points ====================

    def evaluate_and_maybe_switch(self) -> PowerConditions:
        conditions = self.get_conditions()
        self._dispatch(self._check_profile)
        return conditions

    def on_power_state_changed(self, *args: Any) -> None:
        self._dispatch(self._check_profile)

    def on_performance_apps_changed(self, *args: Any) -> None:
        self._dispatch(self._check_profile)

    def on_config_changed(self) -> None:
        self._dispatch(self._reload_settings)

    def on_external_profile_change(self, effective_profile: str | None, degraded_reason: str | None = None) -> None:
        """
        The profile service reported a new active profile.

        :param effective_profile: the profile now active, None if the service is gone
        :param degraded_reason: PerformanceDegraded value sent along with it
        """
        self._dispatch(self._handle_profile_change, True, effective_profile, degraded_reason)

    def on_properties_changed(self, changed: Mapping[str, Any]) -> None:
        """
        Raw PropertiesChanged payload from the profile service.

        Only ActiveProfile and PerformanceDegraded are looked at, and only when
        present in the payload.
        """
        changed = changed or {}
        profile_changed = bool(changed.get("ActiveProfile"))
        degraded_reason = changed.get("PerformanceDegraded")
        if not profile_changed and degraded_reason is None:
            return
        effective_profile = self.profile_sink.active_profile if profile_changed else None
        self._dispatch(self._handle_profile_change, profile_changed, effective_profile, degraded_reason)

    def start(self) -> None:
        log.info("starting power profile engine")
        self.validate_drivers()
        self.on_config_changed()

    def stop(self) -> None:
        """Cancel the lap mode timer, put the system back to balanced and reset."""
        log.info("stopping power profile engine")
        self._lap_timer.cancel()
        if self.animations is not None:
            self.animations.restore()
        self._switch_profile(SHUTDOWN_PROFILE)
        self._gate.reset()

    # ==================== handlers ====================

    def get_conditions(self) -> PowerConditions:
        power = self.power_source.get_power_state()
        settings = self._settings
        return evaluate(
            power.state,
            power.percentage,
            settings.threshold,
            settings.battery_profile,
            settings.ac_profile,
            self.app_tracker.has_active_performance_apps(),
            settings.perf_apps_battery_profile,
            settings.perf_apps_ac_profile,
        )

    def _check_profile(self) -> None:
        conditions = self.get_conditions()
        log.info(
            "evaluating power conditions: profile=%s on_battery=%s low_battery=%s perf_apps=%s",
            conditions.configured_profile,
            conditions.on_battery,
            conditions.low_battery,
            conditions.perf_apps,
        )

        if self._gate.request(
            conditions.configured_profile,
            conditions.on_battery,
            conditions.low_battery,
            conditions.perf_apps,
        ):
            active = self.profile_sink.active_profile
            if active == conditions.configured_profile:
                # no change will be signalled, confirm the request right away
                self._gate.report(active, conditions.on_battery, conditions.low_battery, conditions.perf_apps)
            else:
                self._switch_profile(conditions.configured_profile)
        else:
            log.debug("profile change blocked by transition gate")

        if self.animations is not None:
            self.animations.update(conditions.on_battery, self._settings.disable_animations_on_battery)

    def _reload_settings(self) -> None:
        self._settings = self.config.get_settings()
        log.info(
            "settings updated: ac=%s battery=%s threshold=%s performance apps=%d",
            self._settings.ac_profile,
            self._settings.battery_profile,
            self._settings.threshold,
            len(self._settings.performance_apps),
        )
        self.app_tracker.set_applications(self._settings.performance_apps)
        self.app_tracker.scan()
        # new settings may call for a profile the gate would otherwise suppress
        self._gate.reset()
        self._check_profile()

    def _handle_profile_change(self, profile_changed: bool, effective_profile: str | None, degraded_reason: str | None) -> None:
        conditions = self.get_conditions()

        if profile_changed:
            self._lap_timer.cancel()
            # a degraded profile does not confirm our request
            if not degraded_reason:
                self._gate.report(
                    effective_profile,
                    conditions.on_battery,
                    conditions.low_battery,
                    conditions.perf_apps,
                )

        if not (conditions.on_ac and degraded_reason):
            return

        if degraded_reason == LAP_DETECTED and self._settings.lap_mode:
            log.info("lap detected, re-applying profile in %ds", LAP_MODE_DEBOUNCE_SECONDS)
            self._lap_timer.restart()
        else:
            log.info("ActiveProfile: %s, PerformanceDegraded: %s", self.profile_sink.active_profile, degraded_reason)

    def _on_lap_timeout(self) -> None:
        self._dispatch(self._reapply_after_lap)

    def _reapply_after_lap(self) -> None:
        self._gate.reset()
        self._check_profile()

    # ==================== profile service ====================

    def _switch_profile(self, target_profile: str) -> None:
        active = self.profile_sink.active_profile
        if target_profile == active:
            return

        available = self.profile_sink.available_profiles()
        if target_profile not in available:
            log.error(
                "Profile '%s' is not available. Available profiles: %s",
                target_profile,
                ", ".join(available),
            )
            return

        log.info("switching profile from '%s' to '%s'", active, target_profile)
        self.profile_sink.set_active_profile(target_profile)

    def validate_drivers(self) -> None:
        """Warn the user when profile switching can't have a real effect."""
        active = self.profile_sink.active_profile
        if not active:
            self._notify("Package power-profiles-daemon is not installed")
            return

        drivers = self.profile_sink.drivers(active)
        if not any(driver and driver != PLACEHOLDER_DRIVER for driver in drivers):
            self._notify(
                "No system-specific platform driver is available. "
                "Consider upgrading power-profiles-daemon and linux kernel",
                PLATFORM_DRIVERS_DOC,
            )

    def _notify(self, body: str, uri: str | None = None) -> None:
        log.warning(body)
        if self.notifier is not None:
            self.notifier.notify(body, uri)
