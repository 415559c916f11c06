import logging
import os
from typing import FrozenSet, Iterable, Set

import psutil

DESKTOP_SUFFIX = ".desktop"


def normalize_app_name(name: str) -> str:
    """
    Turn a configured application id into the name matched against processes.

    "org.blender.Blender.desktop" and "steam.desktop" become
    "org.blender.blender" and "steam".
    """
    name = name.strip().lower()
    if name.endswith(DESKTOP_SUFFIX):
        name = name[: -len(DESKTOP_SUFFIX)]
    return name


class PerformanceAppTracker:
    """
    Keeps track of which configured performance applications are running.

    A process matches when its name or the basename of its executable equals
    a configured name, ignoring case and a ".desktop" suffix. For reverse-DNS
    application ids ("org.blender.Blender") the last component is matched as
    well.
    """

    def __init__(self, applications: Iterable[str] = ()) -> None:
        self._applications: Set[str] = set()
        self._running: Set[str] = set()
        self.set_applications(applications)

    @property
    def applications(self) -> FrozenSet[str]:
        return frozenset(self._applications)

    @property
    def running(self) -> FrozenSet[str]:
        return frozenset(self._running)

    def set_applications(self, applications: Iterable[str]) -> None:
        self._applications = {normalize_app_name(app) for app in applications if app and app.strip()}
        # drop apps that are no longer configured
        self._running &= self._applications
        logging.debug("tracking performance apps: %s", sorted(self._applications))

    def has_active_performance_apps(self) -> bool:
        return bool(self._running)

    def _match(self, process_name: str | None) -> str | None:
        if not process_name:
            return None
        process_name = process_name.lower()
        for app in self._applications:
            if process_name == app or process_name == app.rsplit(".", 1)[-1]:
                return app
        return None

    def scan(self) -> bool:
        """
        Rescan running processes.

        :return: True if performance app presence flipped since the last scan
        """
        running: Set[str] = set()
        if self._applications:
            for proc in psutil.process_iter(["name", "exe"]):
                exe = proc.info.get("exe")
                app = self._match(proc.info.get("name")) or self._match(os.path.basename(exe) if exe else None)
                if app:
                    running.add(app)

        for app in running - self._running:
            logging.info("performance app started: %s", app)
        for app in self._running - running:
            logging.info("performance app closed: %s", app)

        changed = bool(running) != bool(self._running)
        self._running = running
        return changed
