from configparser import ConfigParser, Error as ConfigParserError
from dataclasses import dataclass, field
import logging
import os
import sys
from typing import Callable, FrozenSet, List

import pyinotify

from auto_power_profile.config.config_event_handler import ConfigEventHandler, MASK
from auto_power_profile.globals import (
    APP_NAME,
    DEFAULT_AC_PROFILE,
    DEFAULT_BATTERY_PROFILE,
    DEFAULT_BATTERY_THRESHOLD,
    DEFAULT_PERF_APPS_AC_PROFILE,
    DEFAULT_PERF_APPS_BATTERY_PROFILE,
    SYSTEM_CONFIG_FILE,
    USER_CONFIG_DIR,
    VALID_PROFILES,
)

log = logging.getLogger(__name__)

# config file sections
CHARGER = "charger"
BATTERY = "battery"
PERFORMANCE_APPS = "performance_apps"


@dataclass(frozen=True)
class Settings:
    ac_profile: str = DEFAULT_AC_PROFILE
    battery_profile: str = DEFAULT_BATTERY_PROFILE
    threshold: int = DEFAULT_BATTERY_THRESHOLD
    lap_mode: bool = True
    perf_apps_ac_profile: str = DEFAULT_PERF_APPS_AC_PROFILE
    perf_apps_battery_profile: str = DEFAULT_PERF_APPS_BATTERY_PROFILE
    performance_apps: FrozenSet[str] = field(default_factory=frozenset)
    disable_animations_on_battery: bool = False


def find_config_file(args_config_file) -> str:
    """
    Find the config file to use.

    Look for a config file in the following priorization order:
    1. Command line argument
    2. User config file
    3. System config file

    :param args_config_file: Path to the config file provided as a command line argument
    :return: The path to the config file to use
    """
    user_config_file = os.path.join(USER_CONFIG_DIR, APP_NAME, f"{APP_NAME}.conf")

    if args_config_file is not None:                                # (1) Command line argument was specified
        if os.path.isfile(args_config_file): return args_config_file
        print(f"Config file specified with '--config {args_config_file}' not found.")
        sys.exit(1)
    elif os.path.isfile(user_config_file): return user_config_file  # (2) User config file
    else: return SYSTEM_CONFIG_FILE                                  # (3) System config file (default if nothing else is found)


class Config:
    def __init__(self) -> None:
        self.path: str = ""
        self._config: ConfigParser = ConfigParser(interpolation=None)
        self._listeners: List[Callable[[], None]] = []
        self.watch_manager: pyinotify.WatchManager | None = None
        self.notifier: pyinotify.ThreadedNotifier | None = None

    def set_path(self, path: str, watch: bool = True) -> None:
        self.path = path
        if watch:
            self.watch_manager = pyinotify.WatchManager()
            # check for file changes using threading
            self.notifier = pyinotify.ThreadedNotifier(self.watch_manager, ConfigEventHandler(config=self))
            if os.path.isdir(os.path.dirname(path)):
                self.watch_manager.add_watch(os.path.dirname(path), mask=MASK)
        self.update_config()

    def has_config(self) -> bool:
        return os.path.isfile(self.path)

    def get_config(self) -> ConfigParser:
        return self._config

    def add_listener(self, callback: Callable[[], None]) -> None:
        """Call callback after every reload. It runs on the notifier thread."""
        self._listeners.append(callback)

    def update_config(self) -> None:
        # parse into a new ConfigParser so readers never see a half-read file
        parser = ConfigParser(interpolation=None)
        try: parser.read(self.path, encoding="utf-8")
        except (ConfigParserError, UnicodeDecodeError) as e:
            log.error("The following error occured while parsing the config file: %s", e)
            parser = ConfigParser(interpolation=None)
        self._config = parser

        for callback in self._listeners:
            try: callback()
            except Exception as e: log.error("Error in config listener %s: %s", getattr(callback, "__name__", callback), e)

    def _get_profile(self, section: str, option: str, default: str) -> str:
        value = self._config.get(section, option, fallback="").strip()
        if not value: return default
        if value not in VALID_PROFILES:
            log.warning("Invalid profile '%s' for [%s] %s, using '%s'", value, section, option, default)
            return default
        return value

    def _get_boolean(self, section: str, option: str, default: bool) -> bool:
        try: return self._config.getboolean(section, option, fallback=default)
        except ValueError:
            log.warning("Invalid value for [%s] %s: %s", section, option, self._config.get(section, option))
            return default

    def _get_threshold(self) -> int:
        try: threshold = self._config.getint(BATTERY, "threshold", fallback=DEFAULT_BATTERY_THRESHOLD)
        except ValueError:
            log.warning("Invalid value for [%s] threshold: %s", BATTERY, self._config.get(BATTERY, "threshold"))
            return DEFAULT_BATTERY_THRESHOLD
        if not 0 <= threshold <= 100:
            log.warning("Battery threshold %s is not within 0-100, using %s", threshold, DEFAULT_BATTERY_THRESHOLD)
            return DEFAULT_BATTERY_THRESHOLD
        return threshold

    def get_settings(self) -> Settings:
        apps = self._config.get(PERFORMANCE_APPS, "apps", fallback="")
        return Settings(
            ac_profile=self._get_profile(CHARGER, "profile", DEFAULT_AC_PROFILE),
            battery_profile=self._get_profile(BATTERY, "profile", DEFAULT_BATTERY_PROFILE),
            threshold=self._get_threshold(),
            lap_mode=self._get_boolean(CHARGER, "lap_mode", True),
            perf_apps_ac_profile=self._get_profile(CHARGER, "performance_apps_profile", DEFAULT_PERF_APPS_AC_PROFILE),
            perf_apps_battery_profile=self._get_profile(BATTERY, "performance_apps_profile", DEFAULT_PERF_APPS_BATTERY_PROFILE),
            performance_apps=frozenset(app for app in apps.replace(",", " ").split() if app),
            disable_animations_on_battery=self._get_boolean(BATTERY, "disable_animations", False),
        )

config = Config()
