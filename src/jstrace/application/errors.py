"""
Error handling for jstrace instrumentation.

This module defines the exception classes raised by the instrumentation
pipeline. Two families matter to callers:

- ``InputError`` signals misuse (input that is not text, a trace variable
  that cannot be spliced into code). It is raised immediately, before any
  parsing, and retrying with the same input can never succeed.
- ``ParseError`` signals bad input data. Batch callers are expected to catch
  it, report the offending file and move on to the next one.
"""


class JsTraceError(Exception):
    """Base class for all jstrace errors."""
    pass


class InputError(JsTraceError, TypeError):
    """
    Exception raised when the instrumenter is called with invalid arguments.

    The ``inputError`` attribute lets generic error handlers tell caller
    mistakes apart from malformed source.
    """

    inputError = True


class ParseError(JsTraceError):
    """
    Exception raised when a source unit cannot be parsed.

    Attributes:
        message: Human readable description of the failure.
        line: 1-based line of the first error, or None if unknown.
        column: 0-based column of the first error, or None if unknown.
        filename: File key of the unit, when known.
    """

    def __init__(self, message, line=None, column=None, filename=None):
        self.message = message
        self.line = line
        self.column = column
        self.filename = filename
        super().__init__(self.describe())

    def describe(self):
        where = []
        if self.filename:
            where.append(self.filename)
        if self.line is not None:
            where.append("line %d" % self.line)
            if self.column is not None:
                where[-1] += ":%d" % self.column
        if where:
            return "%s (%s)" % (self.message, ", ".join(where))
        return self.message


class IllegalReturnError(ParseError):
    """
    Exception raised for a ``return`` outside any function when the unit is
    not wrapped in an invocable scope.
    """
    pass
