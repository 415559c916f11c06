from typing import Callable, Protocol


class Scheduler(Protocol):
    """
    The main loop primitives the engine needs.

    GLibScheduler provides them on the GLib main loop; callbacks returning
    True are kept, anything else is removed after it ran once.
    """

    def timeout_add_seconds(self, interval: int, callback: Callable[[], bool]) -> int: ...

    def source_remove(self, source_id: int) -> None: ...

    def idle_add(self, callback: Callable[[], bool]) -> int: ...


class CustomTimer:
    def __init__(self, timeout: int, callback: Callable[[], None], scheduler: Scheduler) -> None:
        """
        A single-shot timer that can be restarted.

        :param timeout: Time in seconds after which the callback is executed.
        :param callback: The function to call when the timer expires.
        :param scheduler: Main loop the timer is scheduled on.
        """
        self.timeout: int = timeout
        self.callback: Callable[[], None] = callback
        self.scheduler: Scheduler = scheduler
        self._source_id: int | None = None

    def start(self) -> None:
        """
        Start the timer.

        Cancels any existing timer before starting a new one.
        """
        self.cancel()
        self._source_id = self.scheduler.timeout_add_seconds(self.timeout, self._expire)

    def restart(self) -> None:
        self.start()

    def cancel(self) -> None:
        """
        Cancel the timer.

        If the timer is not pending (never started, already fired or
        cancelled), nothing happens.
        """
        if self._source_id is not None:
            self.scheduler.source_remove(self._source_id)
            self._source_id = None

    def is_running(self) -> bool:
        return self._source_id is not None

    def _expire(self) -> bool:
        # the source is gone once this returns False
        self._source_id = None
        self.callback()
        return False
