#!/usr/bin/env python3
#
# auto-power-profile - Automatic power profile switching for Linux desktops

import logging
import signal
import sys

import click
from dasbus.loop import EventLoop
from gi.repository import Gio, GLib

from auto_power_profile.config.config import config as conf, find_config_file
from auto_power_profile.dbus import Notifier, PowerProfilesClient, UPowerSource
from auto_power_profile.globals import APP_NAME, VERSION
from auto_power_profile.modules.animations import AnimationController
from auto_power_profile.modules.engine import ProfileEngine
from auto_power_profile.modules.observer import EventObserver
from auto_power_profile.modules.performance_apps import PerformanceAppTracker
from auto_power_profile.modules.power_source import PsutilPowerSource
from auto_power_profile.modules.scheduler import GLibScheduler
from auto_power_profile.prints import print_colon, print_conditions, print_header, print_info, print_separator, print_warning
from auto_power_profile.tools import setup_logger
from auto_power_profile.types import ObserverEvent

DESKTOP_INTERFACE_SCHEMA = "org.gnome.desktop.interface"


def get_power_source(source: str):
    return UPowerSource() if source == "upower" else PsutilPowerSource()


def get_animation_controller() -> AnimationController | None:
    schemas = Gio.SettingsSchemaSource.get_default()
    if schemas is None or schemas.lookup(DESKTOP_INTERFACE_SCHEMA, True) is None:
        logging.info("%s schema not installed, animation control unavailable", DESKTOP_INTERFACE_SCHEMA)
        return None
    return AnimationController(Gio.Settings.new(DESKTOP_INTERFACE_SCHEMA))


def run_daemon(source: str) -> None:
    scheduler = GLibScheduler()
    power_source = get_power_source(source)
    profile_sink = PowerProfilesClient()
    sink_connected = profile_sink.connect()
    notifier = Notifier()
    app_tracker = PerformanceAppTracker(conf.get_settings().performance_apps)
    app_tracker.scan()

    engine = ProfileEngine(
        power_source,
        profile_sink,
        app_tracker,
        conf,
        scheduler,
        notifier=notifier,
        animations=get_animation_controller(),
    )

    # UPower pushes changes, psutil has to be polled
    polled_source = None
    if isinstance(power_source, UPowerSource):
        power_source.watch(engine.on_power_state_changed)
    else:
        polled_source = power_source
    observer = EventObserver(scheduler, app_tracker, power_source=polled_source)
    observer.listen(ObserverEvent.POWER_STATE, engine.on_power_state_changed)
    observer.listen(ObserverEvent.PERFORMANCE_APPS, engine.on_performance_apps_changed)

    if sink_connected:
        profile_sink.watch(engine.on_properties_changed)

    def on_config_changed() -> bool:
        engine.on_config_changed()
        return GLib.SOURCE_REMOVE

    # pyinotify calls listeners on its own thread, hand over to the main loop
    conf.add_listener(lambda: scheduler.idle_add(on_config_changed))
    conf.notifier.start()

    loop = EventLoop()

    def quit_loop() -> bool:
        logging.info("received termination signal, shutting down")
        loop.quit()
        return GLib.SOURCE_REMOVE

    GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signal.SIGINT, quit_loop)
    GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signal.SIGTERM, quit_loop)

    engine.start()
    observer.start()
    try:
        loop.run()
    finally:
        observer.stop()
        engine.stop()
        notifier.destroy()
        conf.notifier.stop()


def show_status(source: str) -> None:
    settings = conf.get_settings()
    power_source = get_power_source(source)
    profile_sink = PowerProfilesClient()
    app_tracker = PerformanceAppTracker(settings.performance_apps)
    app_tracker.scan()

    print_header(APP_NAME, color=12)
    print_colon("Config file", conf.path if conf.has_config() else "none (using defaults)")
    print_colon("Power state", repr(power_source.get_power_state()))
    print_colon("AC profile", settings.ac_profile)
    print_colon("Battery profile", settings.battery_profile)
    print_colon("Battery threshold", f"{settings.threshold}%")
    print_colon("Lap mode", "enabled" if settings.lap_mode else "disabled")
    print_colon("Performance apps", ", ".join(sorted(settings.performance_apps)) or "none")
    print_colon("Running performance apps", ", ".join(sorted(app_tracker.running)) or "none")

    if profile_sink.connect():
        print_colon("Profile service", profile_sink.service_name)
        print_colon("Active profile", profile_sink.active_profile)
        print_colon("Available profiles", ", ".join(profile_sink.available_profiles()))
        if profile_sink.performance_degraded:
            print_colon("Performance degraded", profile_sink.performance_degraded)
    else:
        print_warning("power-profiles-daemon is not available")

    engine = ProfileEngine(power_source, profile_sink, app_tracker, conf, GLibScheduler())
    print_conditions(engine.get_conditions())
    print_separator()


@click.command()
@click.option("--daemon", is_flag=True, help="Switch power profiles automatically until stopped")
@click.option("--status", is_flag=True, help="Show power conditions and the profile they call for")
@click.option("--config", is_flag=False, required=False, help="Use config file at defined path")
@click.option("--source", type=click.Choice(["upower", "psutil"]), default="upower", show_default=True, help="Where to read the battery state from")
@click.option("--debug", is_flag=True, help="Show debug logs")
@click.option("--version", is_flag=True, help="Show currently installed version")
def main(daemon, status, config, source, debug, version):
    if version:
        print(f"{APP_NAME} {VERSION}")
        return

    config_path = find_config_file(config)

    if daemon:
        setup_logger(debug)
        conf.set_path(config_path)
        if conf.has_config():
            logging.info("Using settings defined in %s file", config_path)
        run_daemon(source)
    elif status:
        logging.basicConfig(level=logging.DEBUG if debug else logging.WARNING)
        conf.set_path(config_path, watch=False)
        show_status(source)
    else:
        print_info("Nothing to do")
        print(f"\nRun: \"{APP_NAME} --help\" for list of available options.")
        sys.exit(1)


if __name__ == "__main__": main()
