"""Instrumenter: the public entry point.

``Instrumenter`` ties the pipeline together for one source unit::

    text --parse--> Program --wrapping check--> --index--> LocationIndex
         --generate--> instrumented text

Three ways in:

- ``instrument_sync(code, filename)`` returns the generated text or raises.
- ``instrument(code, filename, callback)`` runs the same pipeline on a
  worker thread and reports through ``callback(err, generated)``. Argument
  errors are still raised immediately, before the thread starts.
- ``instrument_many(units, callback, limit)`` instruments several units
  with at most ``limit`` running at once.

After every successful call ``last_map`` holds the instrumentation map of
that unit and ``last_file_trace()`` its zero-filled record entry.
"""

import contextlib
import dataclasses
import hashlib
import logging
import threading

from jstrace.analysis import locations
from jstrace.application.config import InstrumenterOptions
from jstrace.application.errors import InputError, JsTraceError
from jstrace.application.wrapping import WrappingPolicy
from jstrace.codegen import rewriter
from jstrace.frontend import parser
from jstrace.runtime.record import FileTrace
from jstrace.util.application.async_utils import async_func, async_limited
from jstrace.util.application.console import Console

LOG = logging.getLogger(__name__)


def placeholderKey(code):
    """Deterministic file key for a unit instrumented without one."""
    digest = hashlib.md5(code.encode("utf-8")).hexdigest()[:12]
    return "<anonymous-%s>.js" % digest


def checkFilename(filename):
    if filename is not None and not isinstance(filename, str):
        raise InputError("File name must be a string, got %s" % type(filename).__name__)


class Instrumenter(object):
    """Instruments JavaScript source units.

    Args:
        options: ``InstrumenterOptions`` or a mapping of option names.
        console: Console used for debug output; created on demand.
        **kwargs: Individual options, overriding ``options``.

    Raises:
        InputError: For unknown options or an invalid trace variable.
    """

    def __init__(self, options=None, console=None, **kwargs):
        opts = InstrumenterOptions.from_mapping(options)
        if kwargs:
            opts = InstrumenterOptions.from_mapping(
                dict(dataclasses.asdict(opts), **kwargs)
            )
        self.options = opts
        self.wrapping = WrappingPolicy(opts.no_auto_wrap)
        self.console = console

        self._lock = threading.Lock()
        self.lastMap = None
        self.lastFileTrace = None

    @property
    def last_map(self):
        """``InstrumentationMap`` of the last successfully instrumented unit."""
        return self.lastMap

    def last_file_trace(self):
        """A fresh copy of the zero-filled record entry of the last unit."""
        with self._lock:
            trace = self.lastFileTrace
        return trace.copy() if trace is not None else None

    def _phase(self, name):
        if self.options.debug:
            return self._console().scope(name)
        return contextlib.nullcontext()

    def _console(self):
        if self.console is None:
            self.console = Console()
        return self.console

    def instrument_sync(self, code, filename=None):
        """Instrument one unit and return the generated text.

        Args:
            code: JavaScript source.
            filename: File key the counts are recorded under. A placeholder
                derived from the source is used when omitted.

        Returns:
            The instrumented JavaScript source.

        Raises:
            InputError: If ``code`` or ``filename`` is not a string.
            ParseError: If ``code`` is not valid JavaScript, or (with
                ``noAutoWrap``) contains a ``return`` outside any function.
        """
        parser.checkText(code)
        checkFilename(filename)
        key = filename if filename is not None else placeholderKey(code)

        with parser.nestingGuard(key), self._phase(key):
            with self._phase("parse"):
                result = parser.parse_unit(code, key)
            if not result.ok:
                raise result.error
            program = result.program

            self.wrapping.check(program, key)

            with self._phase("index"):
                index = locations.index(program, self.options.walk_debug)

            with self._phase("generate"):
                generated = rewriter.generate(
                    result.source, program, index, key, self.options
                )

        LOG.debug(
            "instrumented %s: %d statements, %d branches, %d functions",
            key,
            len(index.map.statements),
            len(index.map.branches),
            len(index.map.functions),
        )

        if self.options.debug:
            console = self._console()
            console.annotated("original %s" % key, result.source.lines())
            console.annotated("instrumented %s" % key, generated.splitlines())

        code_lines = result.source.lines() if self.options.embed_source else None
        with self._lock:
            self.lastMap = index.map
            self.lastFileTrace = FileTrace.initial(index.map, code_lines)
        return generated

    def _run(self, code, filename, callback):
        try:
            generated = self.instrument_sync(code, filename)
        except JsTraceError as e:
            LOG.debug("instrumentation of %s failed: %s", filename, e)
            if callback is not None:
                callback(e, None)
            return
        except Exception as e:
            LOG.exception("unexpected failure instrumenting %s", filename)
            if callback is not None:
                callback(e, None)
            return
        if callback is not None:
            callback(None, generated)

    def instrument(self, code, filename=None, callback=None):
        """Instrument one unit on a worker thread.

        Args:
            code: JavaScript source.
            filename: File key, as for ``instrument_sync``.
            callback: Called as ``callback(err, generated)``; exactly one of
                the two is None. ``err`` is usually a ``ParseError``, but any
                exception raised while instrumenting is delivered the same way.

        Returns:
            The started ``threading.Thread``.

        Raises:
            InputError: Immediately, if ``code`` or ``filename`` is not a
                string.
        """
        parser.checkText(code)
        checkFilename(filename)
        return async_func(self._run)(code, filename, callback)

    def instrument_many(self, units, callback=None, limit=4):
        """Instrument several units, at most ``limit`` at a time.

        Args:
            units: Iterable of ``(code, filename)`` pairs.
            callback: Called as ``callback(filename, err, generated)`` for
                every unit.
            limit: Maximum number of units processed concurrently.

        Returns:
            List of the started threads, in input order.

        Raises:
            InputError: Before any work starts, if any unit has a non-string
                ``code`` or ``filename``.
        """
        units = list(units)
        for code, filename in units:
            parser.checkText(code)
            checkFilename(filename)

        def report(filename):
            if callback is None:
                return None
            return lambda err, generated: callback(filename, err, generated)

        worker = async_limited(limit)(self._run)
        return [worker(code, filename, report(filename)) for code, filename in units]

