"""Main entry point for Salon Engine."""

import logging
import sys
from datetime import datetime
from pathlib import Path

import uvicorn

from salon_engine.config import ConfigLoader, ConfigLoadError


def setup_logging(debug: bool = False):
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    log_file = None

    # Add file handler if debug mode is enabled
    if debug:
        log_dir = Path("data/debug_logs/server")
        log_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"server_{timestamp}.log"

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(file_handler)

    # Root stays at INFO to keep library logs quiet
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )

    salon_logger = logging.getLogger('salon_engine')
    salon_logger.setLevel(level)

    # Silence noisy third-party loggers
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)

    startup_logger = logging.getLogger(__name__)
    if log_file:
        startup_logger.info(f"[STARTUP] Server log file: {log_file}")
    startup_logger.info(f"[STARTUP] Logging configured: salon_engine logger level={logging.getLevelName(level)}")

    return log_file


def main():
    """Run the FastAPI server."""
    try:
        system_config = ConfigLoader().load_system_config()
    except ConfigLoadError as e:
        # Logging isn't configured yet
        logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        logging.getLogger(__name__).error(f"[STARTUP] {e}")
        sys.exit(1)

    setup_logging(debug=system_config.debug)

    logger = logging.getLogger(__name__)
    logger.info(f"Starting Salon Engine server (debug mode: {system_config.debug})...")
    logger.info(f"Server will listen on {system_config.api_host}:{system_config.api_port}")

    uvicorn.run(
        "salon_engine.api.app:create_app",
        factory=True,
        host=system_config.api_host,
        port=system_config.api_port,
        reload=False,
        log_level="info",
        log_config=None,  # Keep our basicConfig
    )


if __name__ == "__main__":
    main()
