import logging

import pyinotify

log = logging.getLogger(__name__)

# create, delete, modify and moves of files inside the config directory
MASK = pyinotify.IN_CREATE | pyinotify.IN_DELETE | pyinotify.IN_MODIFY | pyinotify.IN_MOVED_FROM | pyinotify.IN_MOVED_TO


class ConfigEventHandler(pyinotify.ProcessEvent):
    """Reloads the config whenever an event touches the config file itself."""

    def my_init(self, config=None) -> None:
        self.config = config

    def process_default(self, event: pyinotify.Event) -> None:
        # editors save through backup files ending in "~"
        if event.pathname.rstrip("~") != self.config.path:
            return
        log.debug("%s on %s, reloading config", event.maskname, event.pathname)
        self.config.update_config()
