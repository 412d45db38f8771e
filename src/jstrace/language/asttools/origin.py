"""
Source origin tracking for JavaScript AST nodes.

This module provides the byte span and line/column location carried by every
typed AST node, and the formatting used when a location is shown to a user
(parse errors, debug walks, map dumps).
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Location:
    """Line/column range of a node in the original source.

    Lines are 1-indexed and columns are 0-indexed character offsets, which is
    the convention report generators expect for ``statementMap`` entries.

    Attributes:
        start_line: First line of the node.
        start_column: Column of the first character.
        end_line: Last line of the node.
        end_column: Column one past the last character.
    """

    start_line: int
    start_column: int
    end_line: int
    end_column: int

    def to_dict(self):
        """Serialize as ``{"start": {...}, "end": {...}}``."""
        return {
            "start": {"line": self.start_line, "column": self.start_column},
            "end": {"line": self.end_line, "column": self.end_column},
        }

    def originString(self, filename=None, name=None):
        """Format the location for diagnostics.

        Args:
            filename: Optional file key to prefix.
            name: Optional contextual name (function name, node kind).

        Returns:
            String like ``'File "a.js", line 3:4 in foo'``.
        """
        if filename:
            s = 'File "%s", ' % filename
        else:
            s = ""
        s = "%sline %d:%d" % (s, self.start_line, self.start_column)
        if name:
            s = "%s in %s" % (s, name)
        return s


@dataclass(frozen=True)
class Span:
    """Byte range of a node in the parsed text, plus its ``Location``."""

    start: int
    end: int
    loc: Location
