"""CLI entry point."""

import os
import sys
from typing import List, Optional, Tuple

from common.logging_config import setup_logging
from cli.config import Config
from cli.repl import repl_loop

USAGE = "usage: cloudfire [--debug] [--server HOST:PORT]"


def parse_server(value: str) -> Tuple[str, int]:
    """
    Split 'host:port' (or a bare host, port 8000).

    Raises:
        ValueError: If the port is not a number
    """
    host, _, port = value.rpartition(":")
    if not host:
        return value, 8000
    return host, int(port)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for CLI."""
    args = list(sys.argv[1:] if argv is None else argv)

    debug = '--debug' in args
    if debug:
        args.remove('--debug')
    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('cli', log_level=log_level)

    if '--server' in args:
        index = args.index('--server')
        try:
            host, port = parse_server(args[index + 1])
        except (IndexError, ValueError):
            print(USAGE)
            sys.exit(2)
        Config().set_server(host, port)
        logger.info(f"Server set to {host}:{port}")

    logger.info("CLI starting...")
    try:
        repl_loop()
    except Exception as e:
        logger.error(f"CLI error: {e}", exc_info=True)
        raise
    finally:
        logger.info("CLI exiting")


if __name__ == "__main__":
    main()
