from os import getenv, path

APP_NAME = "auto-power-profile"
VERSION = "1.0.0"

PROFILE_POWER_SAVER = "power-saver"
PROFILE_BALANCED = "balanced"
PROFILE_PERFORMANCE = "performance"
VALID_PROFILES = (PROFILE_POWER_SAVER, PROFILE_BALANCED, PROFILE_PERFORMANCE) # from the lowest power to the highest

DEFAULT_AC_PROFILE = PROFILE_BALANCED
DEFAULT_BATTERY_PROFILE = PROFILE_BALANCED
DEFAULT_PERF_APPS_AC_PROFILE = PROFILE_PERFORMANCE
DEFAULT_PERF_APPS_BATTERY_PROFILE = PROFILE_BALANCED
LOW_BATTERY_PROFILE = PROFILE_POWER_SAVER
SHUTDOWN_PROFILE = PROFILE_BALANCED

DEFAULT_BATTERY_THRESHOLD = 20
FULL_BATTERY_PERCENTAGE = 100

LAP_DETECTED = "lap-detected"
LAP_MODE_DEBOUNCE_SECONDS = 5

CHECK_INTERVAL = 2  # seconds between observer polls

PLACEHOLDER_DRIVER = "placeholder"
PLATFORM_DRIVERS_DOC = "https://upower.pages.freedesktop.org/power-profiles-daemon/power-profiles-daemon-Platform-Profile-Drivers.html"

SYSTEM_CONFIG_FILE = "/etc/auto-power-profile.conf"
USER_CONFIG_DIR = getenv("XDG_CONFIG_HOME", default=path.expanduser("~/.config"))
LOG_DIR = path.join(getenv("XDG_STATE_HOME", default=path.expanduser("~/.local/state")), APP_NAME)
