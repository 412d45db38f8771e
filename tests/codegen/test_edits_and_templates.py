"""Tests for insertion ordering and the code templates."""

import io
import json
import unittest

from jstrace.codegen import templates
from jstrace.codegen.edits import EditList


class TestEditList(unittest.TestCase):
    def test_no_edits(self):
        self.assertEqual(EditList().apply("abc".encode("utf-8")), "abc")

    def test_openings_in_recording_order(self):
        edits = EditList()
        edits.open(1, "[")
        edits.open(1, "(")
        self.assertEqual(edits.apply(b"abc"), "a[(bc")

    def test_closings_inner_first(self):
        edits = EditList()
        edits.wrap(0, 3, "<", ">")
        edits.wrap(1, 3, "(", ")")
        self.assertEqual(edits.apply(b"abc"), "<a(bc)>")

    def test_closings_before_openings_at_same_offset(self):
        edits = EditList()
        edits.wrap(0, 1, "(", ")")
        edits.wrap(1, 2, "[", "]")
        self.assertEqual(edits.apply(b"ab"), "(a)[b]")

    def test_multibyte_text(self):
        data = "é = 1;".encode("utf-8")
        edits = EditList()
        edits.open(len("é".encode("utf-8")), "!")
        self.assertEqual(edits.apply(data), "é! = 1;")
        self.assertEqual(len(edits), 1)


class TestTemplates(unittest.TestCase):
    def test_tracker_name_is_stable_identifier(self):
        name = templates.trackerName("c:\\a\\b.js")
        self.assertEqual(name, templates.trackerName("c:\\a\\b.js"))
        self.assertNotEqual(name, templates.trackerName("c:/a/b.js"))
        self.assertRegex(name, r"^__trace_[0-9a-f]{16}$")

    def test_counters(self):
        counters = templates.Counters("T")
        self.assertEqual(counters.statement(3), "T.s['3']++;")
        self.assertEqual(counters.function(2), "T.f['2']++;")
        self.assertEqual(counters.branch(1, 0), "T.b['1'][0]++;")
        self.assertEqual(counters.branchExpression(1, 1), "T.b['1'][1]++")
        self.assertEqual(counters.functionExpression(4), "T.f['4']++")

    def test_key_spliced_as_string_literal(self):
        key = 'c:\\a\\"b".js'
        text = templates.preamble("__trace__", key, {"s": {}, "b": {}, "f": {}})
        self.assertIn(json.dumps(key), text)

    def test_compact_preamble_is_one_line(self):
        text = templates.preamble("__trace__", "a.js", {"s": {"1": 0}, "b": {}, "f": {}})
        self.assertNotIn("\n", text)
        self.assertTrue(text.startswith("var %s = " % templates.trackerName("a.js")))
        self.assertIn('{"s":{"1":0},"b":{},"f":{}}', text)

    def test_uncompacted_preamble_indents_blocks(self):
        text = templates.preamble("cov", "a.js", {"s": {}, "b": {}, "f": {}}, compact=False)
        lines = text.splitlines()
        self.assertEqual(len(lines), 9)
        self.assertTrue(lines[1].startswith("if ("))
        self.assertTrue(lines[2].startswith("    "))
        self.assertEqual(lines[3], "}")
        self.assertTrue(text.endswith("\n"))

    def test_js_output(self):
        buffer = io.StringIO()
        out = templates.JSOutput(buffer, compact=False)
        out.startBlock("if (x)")
        out.emitStatement("y();")
        out.endBlock()
        self.assertEqual(buffer.getvalue(), "if (x) {\n    y();\n}\n")
