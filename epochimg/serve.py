#!/usr/bin/env python3
# epochimg/serve.py
import argparse
import logging
import sys

import uvicorn

from . import config, fonts
from .app import create_app

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"


def setup_logging(level="INFO"):
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Serve Unix timestamps as images")
    parser.add_argument("--config", help="YAML config file (default: $EPOCHIMG_CONFIG)")
    parser.add_argument("--write-config", action="store_true", help="write the default config file and exit")
    args = parser.parse_args(argv)

    if args.write_config:
        print(f"Wrote {config.save_default(args.config)}")
        return 0

    try:
        cfg = config.load(args.config)
        setup_logging(cfg["logging"]["level"])
        host, port = config.resolve_bind(cfg)
    except config.ConfigError as e:
        logging.error(f"Config error: {e}")
        return 1

    logging.info("Server starting...")
    try:
        face = fonts.get_face()
    except fonts.FontLoadError as e:
        logging.error(f"Cannot start: {e}")
        return 1

    try:
        app = create_app(cfg, face)
    except config.ConfigError as e:
        logging.error(f"Config error: {e}")
        return 1

    logging.info(f"Listening on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=cfg["logging"]["level"].lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
