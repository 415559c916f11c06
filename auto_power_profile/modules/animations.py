import logging

ANIMATIONS_KEY = "enable-animations"


class AnimationController:
    """
    Turns desktop animations off while on battery.

    settings is a Gio.Settings for org.gnome.desktop.interface (anything with
    get_boolean/set_boolean works). The user's own value is saved before the
    first change and put back on AC, when the feature is switched off and on
    shutdown.
    """

    def __init__(self, settings) -> None:
        self._settings = settings
        self._saved: bool | None = None

    @property
    def overridden(self) -> bool:
        return self._saved is not None

    def update(self, on_battery: bool, enabled: bool) -> None:
        if not enabled or not on_battery:
            self.restore()
            return

        if self._saved is None:
            self._saved = self._settings.get_boolean(ANIMATIONS_KEY)
            logging.info("saving original animation setting: %s", self._saved)

        if self._settings.get_boolean(ANIMATIONS_KEY):
            logging.info("disabling animations on battery")
            self._settings.set_boolean(ANIMATIONS_KEY, False)

    def restore(self) -> None:
        if self._saved is None:
            return
        logging.info("restoring original animation setting: %s", self._saved)
        self._settings.set_boolean(ANIMATIONS_KEY, self._saved)
        self._saved = None
