"""
``jstrace map``: print the instrumentation map of a file as JSON.

The output has the ``statementMap``/``branchMap``/``fnMap`` layout coverage
report tools read, keyed by the same ids the instrumented code counts with.
"""

import json
import sys
from pathlib import Path

from jstrace.analysis import locations
from jstrace.application.errors import JsTraceError
from jstrace.frontend import parser


def add_map_parser(subparsers):
    """Add the map subcommand to the argument parser."""
    parser_ = subparsers.add_parser(
        "map", help="Print the instrumentation map of a JavaScript file"
    )
    parser_.add_argument("file", type=Path, help="JavaScript file")
    parser_.add_argument("--indent", type=int, default=2, help="JSON indentation")
    return parser_


def run_map(args, out=None, err=None):
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr

    try:
        code = args.file.read_text(encoding="utf-8")
        program = parser.parse(code, str(args.file))
    except (OSError, UnicodeDecodeError, JsTraceError) as e:
        print("Error: %s" % e, file=err)
        return 1

    try:
        with parser.nestingGuard(str(args.file)):
            imap = locations.index(program).map
    except JsTraceError as e:
        print("Error: %s" % e, file=err)
        return 1

    result = dict(path=str(args.file), **imap.to_dict())
    out.write(json.dumps(result, indent=args.indent))
    out.write("\n")
    return 0
