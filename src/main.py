import logging
import signal
from typing import Callable, Optional

from app_config import AppConfigurationError, load_app_config
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from server import ServerConfigurationError, UIServer, UIServerConfig


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("eyebreak")


def setup_signal_handlers(request_shutdown: Callable[[str], None]) -> None:
    """Turn SIGTERM and SIGINT into a shutdown event on the runtime queue."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        request_shutdown(signal.Signals(signum).name)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def main() -> int:
    logger = setup_logging(level=logging.INFO)

    try:
        app_config = load_app_config(required=False)
    except AppConfigurationError as error:
        logger.error("Configuration error: %s", error)
        return 1

    logging.getLogger().setLevel(app_config.logging.level)
    if app_config.source_file:
        logger.info("Loaded configuration from %s", app_config.source_file)
    else:
        logger.info("No config file found; using defaults")

    ui_server: Optional[UIServer] = None
    try:
        ui_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error("UI server configuration error: %s", error)
        return 1

    if ui_config.enabled:
        ui_server = UIServer(config=ui_config, logger=logging.getLogger("ui_server"))
        try:
            ui_server.start()
        except RuntimeError as error:
            logger.error("Failed to start UI server: %s", error)
            return 1
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
    return engine.run()


if __name__ == "__main__":
    raise SystemExit(main())
