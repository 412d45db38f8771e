"""Execution tests: loops and labels."""


class TestSimpleWhile:
    CODE = [
        "var x = args[0], i=0;",
        "while (i < x) i++;",
        "output = i;",
    ]

    def test_trace_loop_exactly_once(self, verifier):
        verifier(self.CODE).verify([1], 1, {1: 1, 2: 1, 3: 1, 4: 1})

    def test_trace_loop_multiple_times(self, verifier):
        verifier(self.CODE).verify([10], 10, {1: 1, 2: 1, 3: 10, 4: 1})


class TestWhileStatementOnDifferentLine:
    CODE = [
        "var x = args[0], i=0;",
        "while (i < x)",
        "   i++;",
        "output = i;",
    ]

    def test_trace_loop(self, verifier):
        verifier(self.CODE).verify([10], 10, {1: 1, 2: 1, 3: 10, 4: 1})

    def test_not_trace_loop_at_all(self, verifier):
        verifier(self.CODE).verify([-1], 0, {1: 1, 2: 1, 3: 0, 4: 1})

    def test_line_numbers_kept(self, verifier):
        v = verifier(self.CODE)
        assert v.generated.count("\n") == len(self.CODE) - 1
        assert v.instrumenter.last_map.statements[3].start_line == 3


def test_while_in_block(verifier):
    code = [
        "var x = args[0], i=0;",
        "while (i < x) { i++; }",
        "output = i;",
    ]
    verifier(code).verify([10], 10, {1: 1, 2: 1, 3: 10, 4: 1})


class TestLabeledWhile:
    CODE = [
        "var x = args[0], i=0, j=0, output = 0;",
        "outer:",
        "   while (i++ < x) {",
        "       j =0;",
        "       while (j++ < i) {",
        "           output++;",
        "           if (j === 2) continue outer;",
        "       }",
        "   }",
    ]

    def test_all_branches_exercised(self, verifier):
        verifier(self.CODE).verify(
            [10],
            19,
            {1: 1, 2: 1, 3: 1, 4: 10, 5: 10, 6: 19, 7: 19, 8: 9},
            {1: [9, 10]},
        )

    def test_nothing_exercised(self, verifier):
        verifier(self.CODE).verify(
            [-1],
            0,
            {1: 1, 2: 1, 3: 1, 4: 0, 5: 0, 6: 0, 7: 0, 8: 0},
            {1: [0, 0]},
        )


def test_do_while_and_for(verifier):
    code = [
        "var n = 0;",
        "do n++; while (n < args[0]);",
        "for (var k = 0; k < 3; k++) n += k;",
        "for (var p in {a: 1, b: 2}) n++;",
        "output = n;",
    ]
    verifier(code).verify([4], 9, {1: 1, 2: 1, 3: 4, 4: 1, 5: 3, 6: 1, 7: 2, 8: 1})
