#!/usr/bin/env python3
"""
User-visible warnings through the freedesktop notification server.
"""

import logging
from typing import Optional

from dasbus.connection import SessionMessageBus
from dasbus.error import DBusError
from dasbus.typing import Byte, get_variant
from gi.repository import Gio, GLib

from auto_power_profile.globals import APP_NAME

from .constants import (
    NOTIFICATION_DEFAULT_ACTION,
    NOTIFICATION_ICON,
    NOTIFICATION_URGENCY_CRITICAL,
    NOTIFICATIONS_OBJECT_PATH,
    NOTIFICATIONS_SERVICE_NAME,
)

log = logging.getLogger(__name__)

TITLE = "Auto Power Profile"


class Notifier:
    """
    Shows one critical notification at a time.

    A new notification replaces the previous one. When a URI is given, the
    notification gets a "Show details" action opening it.
    """

    def __init__(self, bus=None):
        self._bus = bus or SessionMessageBus()
        self._proxy = self._bus.get_proxy(NOTIFICATIONS_SERVICE_NAME, NOTIFICATIONS_OBJECT_PATH)
        self._notification_id = 0
        self._uri: Optional[str] = None
        self._action_connected = False

    def notify(self, body: str, uri: Optional[str] = None) -> None:
        actions = [NOTIFICATION_DEFAULT_ACTION, "Show details"] if uri else []
        hints = {"urgency": get_variant(Byte, NOTIFICATION_URGENCY_CRITICAL)}
        try:
            self._notification_id = self._proxy.Notify(
                APP_NAME, self._notification_id, NOTIFICATION_ICON, TITLE, body, actions, hints, -1
            )
        except (DBusError, GLib.Error) as e:
            log.warning(f"Failed to show notification: {e}")
            return

        self._uri = uri
        if uri and not self._action_connected:
            self._proxy.ActionInvoked.connect(self._on_action_invoked)
            self._action_connected = True

    def _on_action_invoked(self, notification_id: int, action_key: str) -> None:
        if notification_id != self._notification_id or not self._uri:
            return
        try:
            Gio.AppInfo.launch_default_for_uri(self._uri, None)
        except GLib.Error as e:
            log.warning(f"Failed to open {self._uri}: {e}")

    def destroy(self) -> None:
        if not self._notification_id:
            return
        try:
            self._proxy.CloseNotification(self._notification_id)
        except (DBusError, GLib.Error) as e:
            log.debug(f"Failed to close notification: {e}")
        self._notification_id = 0
