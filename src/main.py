import asyncio
import logging
import signal
from typing import Optional

from app_config import AppConfigurationError, load_app_config
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from server import ServerConfigurationError, UIServer, UIServerConfig


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("pomodoro_app")


def setup_signal_handlers(stop_event: asyncio.Event) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""
    logger = logging.getLogger("pomodoro_app")
    loop = asyncio.get_running_loop()

    def signal_handler(signum: int) -> None:
        logger.info("%s received, stopping...", signal.Signals(signum).name)
        stop_event.set()

    for signum in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(signum, signal_handler, signum)
        except NotImplementedError:
            # Windows event loops do not support signal handlers.
            logger.debug("Signal handler for %s not installed", signum)


def main() -> int:
    """Run the pomodoro session service."""
    logger = setup_logging(level=logging.INFO)

    try:
        app_config = load_app_config()
        logger.info("Loaded runtime config: %s", app_config.source_file or "defaults")
    except AppConfigurationError as error:
        logger.error(f"App configuration error: {error}")
        return 1

    ui_server: Optional[UIServer] = None
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error(f"UI server configuration error: {error}")
        return 1

    if ui_server_config.enabled:
        ui_server = UIServer(
            config=ui_server_config,
            logger=logging.getLogger("ui_server"),
        )
    else:
        logger.info("UI server disabled via ui_server.enabled=false")

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logging.getLogger("runtime"),
            app_config=app_config,
            ui_server=ui_server,
            hooks=RuntimeHooks(setup_signal_handlers=setup_signal_handlers),
        )
    )

    try:
        return asyncio.run(engine.run())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by keyboard interrupt.")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
