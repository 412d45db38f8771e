import io
import threading
import time
import unittest

from jstrace.util.application import async_utils
from jstrace.util.application.compilerexceptions import InstrumentationAbort
from jstrace.util.application.console import Console
from jstrace.util.application.errorhandler import ErrorHandler
from jstrace.util.io.formatting import elapsedTime
from jstrace.util.typedispatch import (
    TypeDispatchDeclarationError,
    TypeDispatchError,
    TypeDispatcher,
    defaultdispatch,
    dispatch,
)


class TestTypeDispatch(unittest.TestCase):
    def testTD(self):
        def visitNumber(self, node):
            return "number"

        def visitDefault(self, node):
            return "default"

        class FooBar(TypeDispatcher):
            num = dispatch(int)(visitNumber)
            default = defaultdispatch(visitDefault)

        self.assertEqual(FooBar.__dict__["num"], visitNumber)
        self.assertEqual(FooBar.__dict__["default"], visitDefault)

        foo = FooBar()

        self.assertEqual(foo(1), "number")
        self.assertEqual(foo(2**70), "number")
        self.assertEqual(foo(True), "number")
        self.assertEqual(foo(1.0), "default")

    def testInheritedHandlers(self):
        class Base(TypeDispatcher):
            @dispatch(str)
            def visitStr(self, node):
                return "str"

        class Derived(Base):
            @dispatch(int)
            def visitInt(self, node):
                return "int"

        d = Derived()
        self.assertEqual(d("x"), "str")
        self.assertEqual(d(1), "int")
        with self.assertRaises(TypeDispatchError):
            d(1.0)

    def testDuplicateHandlers(self):
        with self.assertRaises(TypeDispatchDeclarationError):

            class Broken(TypeDispatcher):
                @dispatch(int)
                def a(self, node):
                    pass

                @dispatch(int)
                def b(self, node):
                    pass


class TestAsyncUtils(unittest.TestCase):
    def testAsyncFunc(self):
        results = []

        @async_utils.async_func
        def work(value):
            results.append(value)

        thread = work(3)
        self.assertIsInstance(thread, threading.Thread)
        thread.join()
        self.assertEqual(results, [3])

    def testAsyncLimited(self):
        lock = threading.Lock()
        state = {"running": 0, "peak": 0}

        @async_utils.async_limited(2)
        def work():
            with lock:
                state["running"] += 1
                state["peak"] = max(state["peak"], state["running"])
            time.sleep(0.01)
            with lock:
                state["running"] -= 1

        threads = [work() for _ in range(6)]
        for thread in threads:
            thread.join()
        self.assertLessEqual(state["peak"], 2)
        self.assertEqual(state["running"], 0)

    def testAsyncLimitedReleasesOnError(self):
        @async_utils.async_limited(1)
        def fail():
            raise ValueError("boom")

        # Thread exceptions are reported by threading.excepthook.
        original = threading.excepthook
        threading.excepthook = lambda args: None
        try:
            fail().join()
            fail().join()
        finally:
            threading.excepthook = original


class TestErrorHandler(unittest.TestCase):
    def testDeferredReport(self):
        out = io.StringIO()
        handler = ErrorHandler(out=out)
        handler.error("ParseError", "Unexpected token ':'", ['File "a.js", line 1:17'])
        handler.warn("Note", "something odd")
        self.assertEqual(out.getvalue(), "")
        self.assertEqual(handler.statusString(), "1 errors, 1 warnings")

        handler.flush()
        self.assertEqual(
            out.getvalue(),
            "ParseError: Unexpected token ':'\n\tFile \"a.js\", line 1:17\nNote: something odd\n",
        )

    def testStatusManagerSwallowsAbort(self):
        out = io.StringIO()
        handler = ErrorHandler(out=out)
        with handler.statusManager():
            handler.error("ParseError", "bad", [])
            handler.finalize()
        self.assertIn("Instrumentation Aborted - 1 errors, 0 warnings", out.getvalue())

    def testFinalize(self):
        handler = ErrorHandler(out=io.StringIO())
        handler.finalize()
        handler.error("X", "y")
        with self.assertRaises(InstrumentationAbort):
            handler.finalize()


class TestConsole(unittest.TestCase):
    def testScopes(self):
        out = io.StringIO()
        console = Console(out=out)
        with console.scope("a.js"):
            with console.scope("parse"):
                pass
        lines = out.getvalue().splitlines()
        self.assertEqual(lines[0], "begin [ a.js ]")
        self.assertEqual(lines[1], "begin [ a.js | parse ]")
        self.assertTrue(lines[2].startswith("end   [ a.js | parse ]"))
        self.assertTrue(lines[3].startswith("end   [ a.js ]"))

    def testAnnotated(self):
        out = io.StringIO()
        Console(out=out).annotated("t", ["x"] * 10)
        lines = out.getvalue().splitlines()
        self.assertEqual(lines[0], "---- t ----")
        self.assertEqual(lines[1], " 1 | x")
        self.assertEqual(lines[10], "10 | x")

    def testElapsedTime(self):
        self.assertEqual(elapsedTime(0.05), "   50 ms")
        self.assertEqual(elapsedTime(120.0), "    2 m")
