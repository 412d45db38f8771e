"""
Error collection and reporting for batch instrumentation.

A batch run (the command line tool, ``Instrumenter.instrument_many``) must
not stop at the first malformed file. Failures are recorded here, shown
together, and turned into an ``InstrumentationAbort`` at the end of the run.
"""

import sys

from . import compilerexceptions


class ShowStatusManager(object):
    """Context manager printing the run status on exit.

    An ``InstrumentationAbort`` raised inside the block is swallowed after
    the status line is printed; any other exception propagates.
    """

    __slots__ = "handler"

    def __init__(self, handler):
        self.handler = handler

    def __enter__(self):
        pass

    def __exit__(self, type, value, tb):
        self.handler.flush()

        if type is not None:
            self.handler.write("Instrumentation Aborted - " + self.handler.statusString())
        else:
            self.handler.write("Instrumentation Successful - " + self.handler.statusString())

        return type is compilerexceptions.InstrumentationAbort


class ErrorHandler(object):
    """Collects errors and warnings for a batch of units.

    Attributes:
        out: Stream reports are written to (default: sys.stderr).
        errorCount: Number of errors recorded.
        warningCount: Number of warnings recorded.
        buffer: Buffered ``(classification, message, trace)`` tuples.
    """

    def __init__(self, out=None):
        self.out = out
        self.errorCount = 0
        self.warningCount = 0

        self.buffer = []

    def write(self, line):
        print(line, file=self.out if self.out is not None else sys.stderr)

    def error(self, classification, message, trace=()):
        """Record an error.

        Args:
            classification: Error category, usually the exception class name.
            message: Error message.
            trace: Origin strings pointing at the failure.
        """
        self.buffer.append((classification, message, tuple(trace)))
        self.errorCount += 1

    def warn(self, classification, message, trace=()):
        self.buffer.append((classification, message, tuple(trace)))
        self.warningCount += 1

    def exception(self, exc, filename=None):
        """Record a ``JsTraceError`` raised while processing ``filename``."""
        trace = []
        line = getattr(exc, "line", None)
        if line is not None:
            column = getattr(exc, "column", None) or 0
            trace.append('File "%s", line %d:%d' % (filename or "<unknown>", line, column))
        elif filename:
            trace.append('File "%s"' % filename)
        message = getattr(exc, "message", None) or str(exc)
        self.error(type(exc).__name__, message, trace)

    def displayError(self, classification, message, trace):
        self.write("%s: %s" % (classification, message))
        for origin in trace:
            self.write("\t" + origin)

    def statusString(self):
        return "%d errors, %d warnings" % (self.errorCount, self.warningCount)

    def finalize(self):
        """Raise ``InstrumentationAbort`` if any error was recorded."""
        if self.errorCount > 0:
            raise compilerexceptions.InstrumentationAbort(self.statusString())

    def flush(self):
        for cls, msg, trace in self.buffer:
            self.displayError(cls, msg, trace)
        self.buffer = []

    def statusManager(self):
        return ShowStatusManager(self)
