"""Main CLI dispatcher for jstrace."""

import argparse
import sys

from jstrace import __version__
from .instrument import add_instrument_parser, run_instrument
from .dumpmap import add_map_parser, run_map


def main(argv=None):
    """Main entry point for the jstrace CLI.

    Returns:
        int: Exit code (0 for success, non-zero for error).
    """
    parser = argparse.ArgumentParser(
        description="jstrace - coverage instrumentation for JavaScript", prog="jstrace"
    )

    parser.add_argument("--version", action="version", version="jstrace %s" % __version__)

    subparsers = parser.add_subparsers(
        dest="command", help="Available commands", required=True
    )

    add_instrument_parser(subparsers)
    add_map_parser(subparsers)

    args = parser.parse_args(argv)

    if args.command == "instrument":
        return run_instrument(args)
    elif args.command == "map":
        return run_map(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
