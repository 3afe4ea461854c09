import logging
import signal
from typing import Optional

from app_config import AppConfig, AppConfigurationError, load_app_config
from command_channel import CommandChannelError, CommandListener, ensure_fifo
from notify import DesktopNotifier, NotificationError
from pomodoro import RunState, StateStore, TimerDurations, TimerEngine
from runtime import RuntimeBootstrap, RuntimeEngine
from runtime.console import ConsoleStatus
from runtime.ticks import SoundCue
from server import StatusServer, StatusServerConfig, StatusServerConfigurationError


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodoro_app")


def setup_signal_handlers(runtime: RuntimeEngine, logger: logging.Logger) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logger.info("%s received, stopping...", signal.Signals(signum).name)
        runtime.request_shutdown()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def build_durations(app_config: AppConfig) -> TimerDurations:
    timer = app_config.timer
    return TimerDurations(
        pomodoro_seconds=max(1, round(timer.pomodoro_minutes * 60)),
        short_break_seconds=max(1, round(timer.short_break_minutes * 60)),
        long_break_seconds=max(1, round(timer.long_break_minutes * 60)),
        pomodoros_per_long_break=timer.pomodoros_per_long_break,
    )


def build_engine(app_config: AppConfig, store: StateStore) -> TimerEngine:
    initial_run_state = RunState.RUNNING if app_config.timer.autostart else RunState.STOPPED
    engine = TimerEngine(
        durations=build_durations(app_config),
        initial_run_state=initial_run_state,
        persister=store,
        logger=logging.getLogger("pomodoro"),
    )
    if app_config.state.restore_on_start:
        persisted = store.load()
        if persisted is not None:
            engine.restore(persisted.phase, persisted.elapsed_seconds, persisted.cycle)
    return engine


def build_sound(app_config: AppConfig, logger: logging.Logger) -> Optional[SoundCue]:
    settings = app_config.notifications
    if not settings.enabled or not settings.sound_file:
        return None

    try:
        from notify.sound import SoundPlayer

        return SoundPlayer.from_file(
            settings.sound_file,
            output_device_index=settings.output_device,
            logger=logging.getLogger("notify.sound"),
        )
    except (ImportError, OSError, NotificationError) as error:
        logger.error("Sound cue disabled: %s", error)
        return None


def build_status_server(
    app_config: AppConfig,
    engine: TimerEngine,
    logger: logging.Logger,
) -> Optional[StatusServer]:
    try:
        config = StatusServerConfig.from_settings(app_config.status_server)
    except StatusServerConfigurationError as error:
        logger.error("Status server configuration error: %s", error)
        logger.warning("Continuing without status server.")
        return None

    if not config.enabled:
        return None

    server = StatusServer(
        config=config,
        snapshot_fn=engine.snapshot,
        logger=logging.getLogger("status_server"),
    )
    try:
        server.start()
    except Exception as error:
        logger.error("Status server startup failed: %s", error)
        logger.warning("Continuing without status server.")
        return None
    return server


def main() -> int:
    """Run the pomodoro timer until stopped through the command FIFO."""
    logger = setup_logging(level=logging.INFO)

    try:
        app_config = load_app_config()
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1

    logging.getLogger().setLevel(logging.getLevelName(app_config.logging.level))
    if app_config.source_file:
        logger.info("Loaded runtime config: %s", app_config.source_file)
    else:
        logger.info("No config file found; using defaults")

    try:
        fifo_path = ensure_fifo(app_config.command_channel.path)
    except CommandChannelError as error:
        logger.error("Command channel unavailable: %s", error)
        return 1

    store = StateStore(app_config.state.path, logger=logging.getLogger("pomodoro.store"))
    engine = build_engine(app_config, store)

    notifier: Optional[DesktopNotifier] = None
    if app_config.notifications.enabled:
        try:
            notifier = DesktopNotifier(
                command=app_config.notifications.command,
                logger=logging.getLogger("notify"),
            )
        except NotificationError as error:
            logger.error("Notifications disabled: %s", error)

    runtime = RuntimeEngine(
        RuntimeBootstrap(
            logger=logging.getLogger("runtime"),
            engine=engine,
            console=ConsoleStatus(app_config.console.format),
            command_listener_factory=lambda handler: CommandListener(
                fifo_path,
                handler,
                logger=logging.getLogger("command_channel"),
            ),
            tick_interval_seconds=app_config.timer.tick_interval_seconds,
            exit_on_stop=app_config.runtime.exit_on_stop,
            persist_on_tick=app_config.state.persist_on_tick,
            notifier=notifier,
            sound=build_sound(app_config, logger),
            status_server=build_status_server(app_config, engine, logger),
        )
    )
    setup_signal_handlers(runtime, logger)

    try:
        return runtime.run()
    except CommandChannelError as error:
        logger.error("Command channel unavailable: %s", error)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
