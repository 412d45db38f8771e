"""Execution tests: function counts and directive prologues."""

THROWER = [
    "function f(a) {",
    "    if (a) throw new Error('bad');",
    "    return a;",
    "}",
    "var failures = 0;",
    "try { f(args[0]); } catch (e) { failures++; }",
    "output = [f(0), failures];",
]


class TestFunctionCounts:
    def test_thrown_and_returned(self, verifier):
        verifier(THROWER).verify(
            [1],
            [0, 1],
            {1: 1, 2: 2, 3: 1, 4: 1, 5: 1, 6: 1, 7: 1, 8: 1, 9: 1},
            {1: [1, 1]},
            {1: 2},
        )

    def test_returned_only(self, verifier):
        verifier(THROWER).verify(
            [0],
            [0, 0],
            {1: 1, 2: 2, 3: 0, 4: 2, 5: 1, 6: 1, 7: 1, 8: 0, 9: 1},
            {1: [0, 2]},
            {1: 2},
        )

    def test_expression_bodied_arrow(self, verifier):
        code = [
            "var double = (x) => x * 2;",
            "var total = 0;",
            "[1, 2, 3].forEach(function (v) { total += double(v); });",
            "output = total;",
        ]
        verifier(code).verify([], 12, {1: 1, 2: 1, 3: 1, 4: 3, 5: 1}, {}, {1: 3, 2: 3})

    def test_function_never_called(self, verifier):
        code = ["function unused() { return 1; }", "output = 2;"]
        verifier(code).verify([], 2, {1: 1, 2: 0, 3: 1}, {}, {1: 0})


class TestDirectives:
    def test_other_directive_is_counted(self, verifier):
        verifier(["'tag';", "output = 1;"]).verify([], 1, {1: 1, 2: 1})

    def test_strict_mode_kept_after_counted_directive(self, verifier):
        code = [
            "function f() {",
            "    'use strict';",
            "    'tag';",
            "    return this === undefined;",
            "}",
            "output = f();",
        ]
        verifier(code).verify([], True, {1: 1, 2: 1, 3: 1, 4: 1}, {}, {1: 1})
