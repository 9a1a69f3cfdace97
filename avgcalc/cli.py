"""Command-line interface for the average calculator."""

import sys
import argparse
import logging
import uvicorn
from .config import Config
from .logging import setup_logging, get_logger
from .server import create_app

logger = get_logger(__name__)


def main():
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="Serve sliding-window averages over the upstream number feeds."
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: search for config.yaml)"
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Bind address (overrides config)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Listening port (overrides config and PORT)"
    )

    args = parser.parse_args()

    try:
        config = Config(args.config)
    except FileNotFoundError as e:
        logging.basicConfig(level=logging.ERROR, format='[%(levelname)s] %(message)s')
        logger.error(f"Config file not found: {e}")
        sys.exit(1)
    except Exception as e:
        logging.basicConfig(level=logging.ERROR, format='[%(levelname)s] %(message)s')
        logger.error(f"Error loading config: {e}")
        sys.exit(1)

    setup_logging(config)

    host = args.host or config.host
    port = args.port or config.port
    app = create_app(config)

    logger.info(f"Running at http://{host}:{port} ({config.environment})")
    # uvicorn owns SIGINT/SIGTERM and drives the app lifespan on shutdown
    uvicorn.run(app, host=host, port=port, log_config=None, access_log=config.access_log)
    logger.info("Server stopped")


if __name__ == "__main__":
    main()
