"""Entry-point for launching the CLI application."""
from __future__ import annotations

import argparse
import logging

from .presentation.cli import config
from .presentation.cli.app import main as cli_main


def setup_logging(verbose: bool = False, level: str | None = None) -> None:
    """Configure root logging; ``verbose`` forces DEBUG."""
    if verbose:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, (level or "WARNING").upper(), logging.WARNING)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main() -> None:
    """Run the CLI presentation layer."""
    parser = argparse.ArgumentParser(prog="dead-city", description="Survive the dead city.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()
    setup_logging(args.verbose, config.load_config()["log_level"])
    cli_main()


if __name__ == "__main__":
    main()
