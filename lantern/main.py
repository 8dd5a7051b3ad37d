import argparse
import logging
import sys

from lantern.core.app import TrackerApp
from lantern.core.config import Config
from lantern.core.db import init_db


def setup_basic_logging():
    """Setup basic stdout logging before config is loaded"""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
        ))
        root_logger.addHandler(handler)
        root_logger.setLevel(logging.DEBUG)
        logging.debug("Basic logging initialized")


def main(argv=None):
    setup_basic_logging()

    parser = argparse.ArgumentParser(description='Ramadhan Lantern')
    parser.add_argument('--config',
                        help='Path to config file (default: ~/.ramadhan_lantern/config.yaml)')
    parser.add_argument('--watch-config', action='store_true',
                        help='Reload the config file when it changes')
    args = parser.parse_args(argv)

    config = Config(config_path=args.config, watch=args.watch_config)
    init_db(config.data)

    app = TrackerApp(config)
    app.run()


if __name__ == "__main__":
    main()
