from typing import Callable

from gi.repository import GLib


class GLibScheduler:
    """Scheduler running callbacks on the default GLib main context."""

    def timeout_add_seconds(self, interval: int, callback: Callable[[], bool]) -> int:
        return GLib.timeout_add_seconds(interval, callback, priority=GLib.PRIORITY_DEFAULT)

    def source_remove(self, source_id: int) -> None:
        GLib.source_remove(source_id)

    def idle_add(self, callback: Callable[[], bool]) -> int:
        return GLib.idle_add(callback, priority=GLib.PRIORITY_DEFAULT)
