"""
Console output and timing for instrumentation phases.

The console prints nested, timed scopes (``begin [ parse ]`` /
``end [ parse ] 1.2 ms``) and line-numbered listings of source text. The
instrumenter only talks to it in debug mode.
"""

import sys
import time

from jstrace.util.io import formatting


class Scope(object):
    """One node of the scope tree.

    Attributes:
        parent: Parent scope, or None for root scope.
        name: Name of this scope.
    """

    def __init__(self, parent, name):
        self.parent = parent
        self.name = name

    def begin(self):
        self._start = time.perf_counter()

    def end(self):
        self._end = time.perf_counter()

    @property
    def elapsed(self):
        """Seconds between ``begin`` and ``end``."""
        return self._end - self._start

    def path(self):
        if self.parent is None:
            return ()
        else:
            return self.parent.path() + (self.name,)

    def child(self, name):
        return Scope(self, name)


class ConsoleScopeManager(object):
    """Context manager for console scopes.

    Example:
        with console.scope("parse"):
            ...
    """

    __slots__ = "console", "name"

    def __init__(self, console, name):
        self.console = console
        self.name = name

    def __enter__(self):
        self.console.begin(self.name)

    def __exit__(self, type, value, tb):
        self.console.end()


class Console(object):
    """Hierarchical console output with timing and scoping.

    Attributes:
        out: Output stream (default: sys.stdout).
        root: Root scope of the hierarchy.
        current: Currently active scope.
    """

    def __init__(self, out=None):
        if out is None:
            out = sys.stdout
        self.out = out

        self.root = Scope(None, "root")
        self.current = self.root

    def path(self):
        """Formatted path of the current scope, e.g. ``[ a.js | parse ]``."""
        return "[ %s ]" % " | ".join(self.current.path())

    def begin(self, name):
        scope = self.current.child(name)
        scope.begin()
        self.current = scope

        self.output("begin %s" % self.path(), 0)

    def end(self):
        self.current.end()
        self.output(
            "end   %s %s" % (self.path(), formatting.elapsedTime(self.current.elapsed)),
            0,
        )
        self.current = self.current.parent

    def scope(self, name):
        """Create a context manager for a scope.

        Args:
            name: Name of the scope.

        Returns:
            ConsoleScopeManager instance for use with 'with' statement.
        """
        return ConsoleScopeManager(self, name)

    def output(self, s, tabs=1):
        """Write one line, indented by ``tabs`` tab characters."""
        if tabs:
            self.out.write("\t" * tabs)
        self.out.write(s)
        self.out.write("\n")

    def annotated(self, title, lines):
        """Print ``lines`` under a heading, each prefixed by its line number.

        Args:
            title: Heading printed above the listing.
            lines: Iterable of source lines without terminators.
        """
        lines = list(lines)
        width = len(str(len(lines)))
        self.output("---- %s ----" % title, 0)
        for number, line in enumerate(lines, 1):
            self.output("%*d | %s" % (width, number, line), 0)
        self.output("-" * (len(title) + 10), 0)
