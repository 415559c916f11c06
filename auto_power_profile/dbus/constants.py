#!/usr/bin/env python3
"""
D-Bus names used to talk to UPower, power-profiles-daemon and the
notification server.
"""

# power-profiles-daemon, newest name first
POWER_PROFILES_SERVICES = [
    ("org.freedesktop.UPower.PowerProfiles", "/org/freedesktop/UPower/PowerProfiles"),
    ("net.hadess.PowerProfiles", "/net/hadess/PowerProfiles"),
]

# UPower composite battery device
UPOWER_SERVICE_NAME = "org.freedesktop.UPower"
UPOWER_DISPLAY_DEVICE_PATH = "/org/freedesktop/UPower/devices/DisplayDevice"

# freedesktop notifications
NOTIFICATIONS_SERVICE_NAME = "org.freedesktop.Notifications"
NOTIFICATIONS_OBJECT_PATH = "/org/freedesktop/Notifications"
NOTIFICATION_ICON = "dialog-warning-symbolic"
NOTIFICATION_URGENCY_CRITICAL = 2
NOTIFICATION_DEFAULT_ACTION = "default"

# properties of the profile service the engine reacts to
ACTIVE_PROFILE = "ActiveProfile"
PERFORMANCE_DEGRADED = "PerformanceDegraded"
PROFILE_DRIVER_KEYS = ("Driver", "PlatformDriver", "CpuDriver")
