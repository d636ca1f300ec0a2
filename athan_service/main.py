import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from athan_service.core.config import Config
from athan_service.core.context import ServiceContext
from athan_service.core.db import Database, resolve_db_url

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


def setup_basic_logging():
    """Setup basic stdout logging before config is loaded"""
    root_logger = logging.getLogger()
    if not root_logger.handlers:  # Only add handler if none exists
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)
        root_logger.setLevel(logging.DEBUG)
        logging.debug("Basic logging initialized")


def setup_logging(logging_config: Dict[str, Any]) -> None:
    """Configure logging to write to both file and stdout"""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(getattr(logging, str(logging_config.get("level", "INFO")).upper(), logging.INFO))

    formatter = logging.Formatter(LOG_FORMAT)

    log_file = logging_config.get("file")
    if log_file:
        Path(log_file).expanduser().parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(Path(log_file).expanduser())
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.info("Athan service starting...")


def main(argv=None) -> None:
    setup_basic_logging()

    parser = argparse.ArgumentParser(description='Prayer times and Hijri calendar service')
    parser.add_argument('--config',
                        help='Path to config file (default: ./config.yaml)')
    parser.add_argument('--host', help='Override api.host from config')
    parser.add_argument('--port', type=int, help='Override api.port from config')
    args = parser.parse_args(argv)

    config = Config(config_path=args.config)
    setup_logging(config.get_section("logging"))

    config_data = dict(config.data)
    config_data["upstream"] = config.get_section("upstream")
    config_data["prayer"] = config.get_section("prayer")

    database = Database(resolve_db_url(config.data))
    ctx = ServiceContext(config_data, database)

    api_config = config.get_section("api")
    host = args.host or api_config.get("host", "127.0.0.1")
    port = args.port or int(api_config.get("port", 8765))

    from athan_service.api.server import run_api_server
    run_api_server(ctx, host, port)


if __name__ == "__main__":
    main()
