"""Execution tests: switch clauses and short-circuit operators."""

import pytest

SWITCH = [
    "var seen = [];",
    "switch (args[0]) {",
    "  case 1: seen.push('one'); break;",
    "  case 2: seen.push('two');",
    "  default: seen.push('default');",
    "}",
    "output = seen.join(',');",
]


@pytest.mark.parametrize(
    "value, output, statements, slots",
    [
        (1, "one", {3: 1, 4: 1, 5: 0, 6: 0}, [1, 0, 0]),
        (2, "two,default", {3: 0, 4: 0, 5: 1, 6: 1}, [0, 1, 1]),
        (3, "default", {3: 0, 4: 0, 5: 0, 6: 1}, [0, 0, 1]),
    ],
)
def test_switch_clauses(verifier, value, output, statements, slots):
    expected = {1: 1, 2: 1, 7: 1}
    expected.update(statements)
    verifier(SWITCH).verify([value], output, expected, {1: slots})


LAZY = [
    "var side = [];",
    "var r = 0 && side.push('and');",
    "var q = 1 || side.push('or');",
    "var n = args[0] ?? side.push('nullish');",
    "output = [r, q, n, side];",
]


class TestShortCircuit:
    STATEMENTS = {1: 1, 2: 1, 3: 1, 4: 1, 5: 1}

    def test_skipped_operands_do_not_run(self, verifier):
        verifier(LAZY).verify(
            [4], [0, 1, 4, []], self.STATEMENTS, {1: [1, 0], 2: [1, 0], 3: [1, 0]}
        )

    def test_evaluated_right_operand(self, verifier):
        verifier(LAZY).verify(
            [None], [0, 1, 1, ["nullish"]], self.STATEMENTS, {1: [1, 0], 2: [1, 0], 3: [1, 1]}
        )


class TestLongChains:
    def test_every_operand_evaluated(self, verifier):
        code = ["output = " + " || ".join(["0"] * 299 + ["7"]) + ";"]
        verifier(code).verify([], 7, {1: 1}, {i: [1, 1] for i in range(1, 300)})

    def test_first_operand_short_circuits(self, verifier):
        # ``boom`` is not defined: evaluating any right operand would throw.
        code = ["output = " + " || ".join(["5"] + ["boom()"] * 299) + ";"]
        verifier(code).verify([], 5, {1: 1}, {i: [1, 0] for i in range(1, 300)})
