"""
``jstrace instrument``: instrument JavaScript files from the command line.

Every file is instrumented independently. A file that fails to parse is
reported and skipped; the others are still written. The exit status is 1
when any file failed.

With ``-o`` the inputs keep their layout below the deepest directory they
share, so files with the same name in different directories do not collide.
"""

import logging
import os
import sys
from pathlib import Path

from jstrace.application.errors import JsTraceError
from jstrace.application.instrumenter import Instrumenter
from jstrace.util.application.console import Console
from jstrace.util.application.errorhandler import ErrorHandler

LOG = logging.getLogger(__name__)


def add_instrument_parser(subparsers):
    """Add the instrument subcommand to the argument parser."""
    parser = subparsers.add_parser(
        "instrument", help="Instrument JavaScript files for coverage tracing"
    )

    parser.add_argument("files", nargs="+", type=Path, help="JavaScript files to instrument")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Directory to write instrumented files to (default: stdout, single file only)",
    )
    parser.add_argument(
        "--trace-variable",
        default=None,
        help="Global variable holding the runtime record (default: __trace__)",
    )
    parser.add_argument(
        "--embed-source", action="store_true", help="Embed the original source lines in the record"
    )
    parser.add_argument(
        "--no-auto-wrap",
        action="store_true",
        help="Reject a return statement outside any function",
    )
    parser.add_argument(
        "--no-compact", action="store_true", help="Emit the preamble one statement per line"
    )
    parser.add_argument(
        "-d", "--debug", action="store_true", help="Print annotated source and phase timings"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    return parser


def instrumenterFor(args, console=None):
    return Instrumenter(
        {
            "traceVariable": args.trace_variable,
            "embedSource": args.embed_source,
            "noAutoWrap": args.no_auto_wrap,
            "noCompact": args.no_compact,
            "debug": args.debug,
        },
        console=console,
    )


def outputPaths(output, paths):
    """Target of every input under ``output``.

    Each file keeps its path relative to the deepest directory holding all
    inputs, so ``a/index.js`` and ``b/index.js`` stay apart.
    """
    resolved = [path.resolve() for path in paths]
    root = Path(os.path.commonpath([path.parent for path in resolved]))
    return [output / path.relative_to(root) for path in resolved]


def run_instrument(args, out=None, err=None):
    """Instrument ``args.files``.

    Args:
        args: Parsed command line.
        out: Stream for instrumented code when no output directory is given.
        err: Stream for diagnostics.

    Returns:
        int: 0 when every file was instrumented, 1 otherwise.
    """
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr

    level = logging.DEBUG if args.debug else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    if args.output is None and len(args.files) > 1:
        print("Error: --output is required when instrumenting several files", file=err)
        return 1

    try:
        instrumenter = instrumenterFor(args, Console(out=err))
    except JsTraceError as e:
        print("Error: %s" % e, file=err)
        return 1

    handler = ErrorHandler(out=err)
    if args.output is not None:
        os.makedirs(args.output, exist_ok=True)
        targets = outputPaths(args.output, args.files)
    else:
        targets = [None] * len(args.files)
    written = {}

    with handler.statusManager():
        for path, target in zip(args.files, targets):
            try:
                code = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                handler.error("IOError", str(e), ['File "%s"' % path])
                continue

            try:
                generated = instrumenter.instrument_sync(code, str(path))
            except JsTraceError as e:
                handler.exception(e, str(path))
                continue

            if not instrumenter.last_map.statements:
                handler.warn("EmptyUnit", "nothing to count", ['File "%s"' % path])

            if target is None:
                out.write(generated)
            elif target in written:
                handler.error(
                    "OutputClash",
                    "%s would overwrite the output of %s" % (path, written[target]),
                    ['File "%s"' % target],
                )
            else:
                written[target] = path
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(generated, encoding="utf-8")
                LOG.info("%s -> %s", path, target)

        handler.finalize()

    return 1 if handler.errorCount else 0
