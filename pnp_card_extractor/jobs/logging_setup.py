"""Shared logging switches for the command-line jobs."""

import argparse
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Each -v lowers the threshold one step from WARNING
VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def add_logging_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )
    parser.add_argument(
        "-s",
        "--silent",
        action="store_true",
        help="Do not print any logging messages",
    )


def log_level(verbose: int, silent: bool) -> int:
    if silent:
        return logging.CRITICAL + 1
    return VERBOSITY_LEVELS[min(verbose, len(VERBOSITY_LEVELS) - 1)]


def configure_logging(args: argparse.Namespace) -> None:
    logging.basicConfig(
        level=log_level(args.verbose, args.silent),
        format=LOG_FORMAT,
    )
