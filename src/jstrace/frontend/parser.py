"""
Parser adapter for JavaScript source units.

This module turns source text into the typed AST of
``jstrace.language.javascript.ast``. Parsing is delegated to the tree-sitter
JavaScript grammar; the concrete tree is then lowered by ``ASTConverter``.

**Error model:**
- Input that is not a ``str`` is a programmer error: ``InputError`` is raised
  before anything else happens.
- Malformed syntax is a data error: ``parse`` raises ``ParseError`` and
  ``parse_unit`` returns a ``ParseResult`` carrying the error, so batch
  callers can report the file and keep going.
- Programs the grammar accepts but an engine would refuse (``break`` with no
  target and the like, see ``earlyerrors``) fail the same way, as does a
  unit nested deeper than the Python stack allows.

**Shebang handling:**
A first line starting with ``#!`` is turned into a line comment before
parsing. The line count is unchanged, so line numbers in the map and in the
generated code still match the original file.
"""

import bisect
import contextlib
import logging
import re
import threading
from dataclasses import dataclass
from typing import Optional

import tree_sitter_javascript
from tree_sitter import Language, Parser

from jstrace.application.errors import InputError, ParseError
from jstrace.frontend import earlyerrors
from jstrace.frontend.ast_converter import ASTConverter
from jstrace.language.asttools.origin import Location, Span
from jstrace.language.javascript import ast as js_ast

LOG = logging.getLogger(__name__)

JAVASCRIPT = Language(tree_sitter_javascript.language())

# tree-sitter parsers must not be shared between threads.
_local = threading.local()

NESTING_TOO_DEEP = "Nesting too deep"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def _parser():
    parser = getattr(_local, "parser", None)
    if parser is None:
        parser = Parser(JAVASCRIPT)
        _local.parser = parser
    return parser


def neutralizeShebang(text):
    """Comment out a leading ``#!`` interpreter line, keeping line count."""
    if text.startswith("#!"):
        return "//" + text
    return text


class SourceText(object):
    """
    The text actually handed to the parser, with offset bookkeeping.

    tree-sitter reports byte offsets into the UTF-8 encoding; locations in
    the instrumentation map use character columns. This class converts
    between the two.

    Attributes:
        original: The text as given by the caller.
        text: The text after shebang neutralization.
        data: ``text`` encoded as UTF-8.
    """

    __slots__ = "original", "text", "data", "lineStarts"

    def __init__(self, original):
        self.original = original
        self.text = neutralizeShebang(original)
        self.data = self.text.encode("utf-8")

        self.lineStarts = [0]
        for i, byte in enumerate(self.data):
            if byte == 0x0A:
                self.lineStarts.append(i + 1)

    def position(self, offset):
        """Return ``(line, column)`` for a byte offset (1-based line)."""
        row = bisect.bisect_right(self.lineStarts, offset) - 1
        start = self.lineStarts[row]
        column = len(self.data[start:offset].decode("utf-8", errors="replace"))
        return row + 1, column

    def location(self, start, end):
        startLine, startColumn = self.position(start)
        endLine, endColumn = self.position(end)
        return Location(startLine, startColumn, endLine, endColumn)

    def span(self, node):
        return Span(node.start_byte, node.end_byte, self.location(node.start_byte, node.end_byte))

    def slice(self, start, end):
        return self.data[start:end].decode("utf-8")

    def lines(self):
        """Original source lines, in order, without line terminators."""
        return _LINE_BREAK.split(self.original)


@dataclass
class ParseResult:
    """Outcome of parsing one unit: a program or a failure, never both."""

    source: SourceText
    program: Optional[js_ast.Program] = None
    error: Optional[ParseError] = None

    @property
    def ok(self):
        return self.error is None


def _firstError(node):
    """Depth-first search for the first ERROR or MISSING node."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_error or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return node


def _describeError(source, node):
    if node.is_missing:
        return "Missing %s" % node.type
    snippet = source.slice(node.start_byte, node.end_byte).strip()
    if not snippet:
        return "Unexpected end of input"
    snippet = snippet.splitlines()[0]
    if len(snippet) > 40:
        snippet = snippet[:37] + "..."
    return "Unexpected token %r" % snippet


def nestingError(filename=None):
    return ParseError(NESTING_TOO_DEEP, filename=filename)


@contextlib.contextmanager
def nestingGuard(filename=None):
    """Report exhausted Python recursion on a deeply nested unit as a
    ``ParseError``."""
    try:
        yield
    except RecursionError:
        raise nestingError(filename) from None


def checkText(text):
    if not isinstance(text, str):
        raise InputError("Code must be a string, got %s" % type(text).__name__)


def parse_unit(text, filename=None):
    """Parse source text, returning a ``ParseResult``.

    Args:
        text: JavaScript source.
        filename: Optional file key, used only in diagnostics.

    Returns:
        ParseResult whose ``program`` is set on success and ``error`` on
        failure.

    Raises:
        InputError: If ``text`` is not a string.
    """
    checkText(text)
    source = SourceText(text)
    tree = _parser().parse(source.data)
    root = tree.root_node

    if root.has_error:
        bad = _firstError(root)
        line, column = source.position(bad.start_byte)
        error = ParseError(_describeError(source, bad), line, column, filename)
        LOG.debug("parse failure: %s", error)
        return ParseResult(source, error=error)

    try:
        program = ASTConverter(source).convertProgram(root)
        earlyerrors.check(program, filename)
    except RecursionError:
        return ParseResult(source, error=nestingError(filename))
    except ParseError as error:
        LOG.debug("early error: %s", error)
        return ParseResult(source, error=error)
    return ParseResult(source, program=program)


def parse(text, filename=None):
    """Parse source text into a typed ``Program``.

    Raises:
        InputError: If ``text`` is not a string.
        ParseError: If the text is not valid JavaScript.
    """
    result = parse_unit(text, filename)
    if not result.ok:
        raise result.error
    return result.program
