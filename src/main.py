import logging
import signal
import sys
from typing import Optional

from app_config import AppConfigurationError, load_app_config, resolve_config_path
from runtime import RuntimeBootstrap, RuntimeEngine
from server import ServerConfigurationError, UIServer, UIServerConfig


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("focus_timer")


def setup_signal_handlers(engine: RuntimeEngine) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logging.getLogger("focus_timer").info(
            "%s received, stopping...",
            signal.Signals(signum).name,
        )
        engine.request_shutdown()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def start_ui_server(app_config, logger: logging.Logger) -> Optional[UIServer]:
    """Start the websocket bridge, or return None to continue without it."""
    try:
        ui_server_config = UIServerConfig.from_settings(app_config.ui_server)
    except ServerConfigurationError as error:
        logger.error(f"UI server configuration error: {error}")
        logger.warning("Continuing without UI server.")
        return None

    if not ui_server_config.enabled:
        logger.info("UI server disabled via [ui_server] enabled = false")
        return None

    ui_server = UIServer(config=ui_server_config, logger=logging.getLogger("ui_server"))
    try:
        logger.info("Starting UI server...")
        ui_server.start(timeout_seconds=5.0)
    except Exception as error:
        logger.error(f"UI server startup failed: {error}")
        logger.warning("Continuing without UI server.")
        return None

    logger.info(
        "UI server ready at ws://%s:%d%s",
        ui_server.host,
        ui_server.port,
        ui_server.websocket_path,
    )
    return ui_server


def main(argv: Optional[list[str]] = None) -> int:
    """Run the focus timer until interrupted."""
    args = sys.argv[1:] if argv is None else argv
    config_arg = args[0] if args else None

    logger = setup_logging(level=logging.INFO)

    try:
        config_path = resolve_config_path(config_arg)
        app_config = load_app_config(config_arg)
    except AppConfigurationError as error:
        logger.error(f"App configuration error: {error}")
        return 1

    logging.getLogger().setLevel(app_config.logging.level)
    if app_config.source_file:
        logger.info("Loaded runtime config: %s", config_path)
    else:
        logger.info("No config file at %s, using defaults", config_path)

    ui_server = start_ui_server(app_config, logger)
    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            ui_server=ui_server,
        )
    )
    setup_signal_handlers(engine)
    return engine.run()


if __name__ == "__main__":
    raise SystemExit(main())
