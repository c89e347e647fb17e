"""Command line tool for checking gateway objects against admission policies."""

import argparse
import asyncio
import logging
import sys
import traceback

from ingress_sync.exceptions import IngressSyncException
from . import validate

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for validating gateway objects.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    validate.ValidateAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Ingress-sync command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except IngressSyncException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("ingress-sync error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
