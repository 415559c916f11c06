from typing import Any, Callable, Dict, List
import logging

from auto_power_profile.globals import CHECK_INTERVAL
from auto_power_profile.modules.performance_apps import PerformanceAppTracker
from auto_power_profile.modules.power_source import PowerState
from auto_power_profile.modules.timer import Scheduler
from auto_power_profile.types import ObserverEvent


class EventObserver:
    """
    Polls sources that have no change notifications and notifies listeners.

    The performance app tracker is always polled; the power source only when
    one is given (psutil). Polling runs on the scheduler every CHECK_INTERVAL
    seconds, so listeners are called on the main loop.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        app_tracker: PerformanceAppTracker,
        power_source=None,
        interval: int = CHECK_INTERVAL,
    ) -> None:
        self.scheduler = scheduler
        self.app_tracker = app_tracker
        self.power_source = power_source
        self.interval = interval
        self._listeners: Dict[ObserverEvent, List[Callable[[Any], None]]] = {}
        self._last_power_state: PowerState | None = None
        self._source_id: int | None = None

    def _observe_power_state(self) -> None:
        if self.power_source is None:
            return
        try:
            state: PowerState = self.power_source.get_power_state()
            if state != self._last_power_state:
                self._last_power_state = state
                self._notify_listeners(ObserverEvent.POWER_STATE, state)
        except Exception as e:
            logging.error("Error in power state observation: %s", e)

    def _observe_performance_apps(self) -> None:
        try:
            if self.app_tracker.scan():
                self._notify_listeners(
                    ObserverEvent.PERFORMANCE_APPS,
                    self.app_tracker.has_active_performance_apps(),
                )
        except Exception as e:
            logging.error("Error in performance app observation: %s", e)

    def poll(self) -> bool:
        self._observe_power_state()
        self._observe_performance_apps()
        return True

    def _notify_listeners(self, event: ObserverEvent, value: Any) -> None:
        for cb in self._listeners.get(event, []):
            try:
                cb(value)
            except Exception as e:
                logging.error("Error in event listener callback: %s %s", getattr(cb, "__name__", cb), e)

    def listen(self, event: ObserverEvent, callback: Callable[[Any], None]) -> bool:
        """
        Register a callback for a specific event type.

        :param event: The event type to listen for
        :param callback: The callback function to execute when event occurs
        :return: True if registration was successful
        """
        self._listeners.setdefault(event, []).append(callback)
        return True

    def unlisten(self, event: ObserverEvent, callback: Callable[[Any], None]) -> bool:
        """
        Unregister a callback for a specific event type.

        :return: True if callback was found and removed, False otherwise
        """
        if callback in self._listeners.get(event, []):
            self._listeners[event].remove(callback)
            return True
        return False

    def start(self) -> None:
        if self._source_id is not None:
            return
        self._source_id = self.scheduler.timeout_add_seconds(self.interval, self.poll)

    def stop(self) -> None:
        if self._source_id is not None:
            self.scheduler.source_remove(self._source_id)
            self._source_id = None
