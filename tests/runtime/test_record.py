"""Tests for the Python side of the runtime record."""

import unittest

from jstrace.analysis import locations
from jstrace.frontend import parser
from jstrace.runtime.record import FileTrace, RuntimeRecord


def mapFor(code):
    return locations.index(parser.parse(code)).map


class TestFileTrace(unittest.TestCase):
    def test_initial_is_zero_filled(self):
        imap = mapFor("if (a) b(); function f() { return x ? 1 : 2; }")
        trace = FileTrace.initial(imap)
        self.assertEqual(trace.s, {1: 0, 2: 0, 3: 0, 4: 0})
        self.assertEqual(trace.b, {1: [0, 0], 2: [0, 0]})
        self.assertEqual(trace.f, {1: 0})
        self.assertIsNone(trace.code)

    def test_wire_shape(self):
        trace = FileTrace({1: 2}, {1: [1, 0]}, {1: 1}, ["a", "b"])
        data = trace.to_dict()
        self.assertEqual(
            data, {"s": {"1": 2}, "b": {"1": [1, 0]}, "f": {"1": 1}, "code": ["a", "b"]}
        )
        self.assertEqual(FileTrace.from_dict(data), trace)
        self.assertNotIn("code", FileTrace({1: 0}).to_dict())

    def test_merge_adds_counts(self):
        trace = FileTrace({1: 1, 2: 0}, {1: [1, 0]}, {1: 1})
        trace.merge(FileTrace({1: 2, 2: 1}, {1: [0, 3]}, {1: 4}))
        self.assertEqual(trace.s, {1: 3, 2: 1})
        self.assertEqual(trace.b, {1: [1, 3]})
        self.assertEqual(trace.f, {1: 5})

    def test_summary(self):
        trace = FileTrace({1: 1, 2: 0, 3: 5}, {1: [1, 0], 2: [0, 0]}, {1: 0})
        self.assertEqual(
            trace.summary(),
            {"statements": (2, 3), "branches": (1, 4), "functions": (0, 1)},
        )


class TestRuntimeRecord(unittest.TestCase):
    def setUp(self):
        self.record = RuntimeRecord()

    def test_ensure_is_idempotent(self):
        template = FileTrace({1: 0}, {}, {})
        entry = self.record.ensure("a.js", template)
        entry.s[1] = 7
        again = self.record.ensure("a.js", template)
        self.assertIs(entry, again)
        self.assertEqual(self.record["a.js"].s, {1: 7})
        self.assertEqual(template.s, {1: 0})

    def test_keys_verbatim(self):
        key = "c:\\a\\b\\c\\d\\e.js"
        self.record.ensure(key, FileTrace())
        self.assertEqual(self.record.keys(), [key])
        self.assertIn(key, self.record)
        self.assertNotIn("c:/a/b/c/d/e.js", self.record)

    def test_from_dict_and_merge(self):
        data = {"a.js": {"s": {"1": 1}, "b": {"1": [0, 1]}, "f": {}}}
        record = RuntimeRecord.from_dict(data)
        record.merge(data)
        record.merge({"b.js": {"s": {"1": 4}, "b": {}, "f": {"1": 1}}})
        self.assertEqual(record["a.js"].s, {1: 2})
        self.assertEqual(record["a.js"].b, {1: [0, 2]})
        self.assertEqual(sorted(record), ["a.js", "b.js"])
        self.assertEqual(record.to_dict()["b.js"], {"s": {"1": 4}, "b": {}, "f": {"1": 1}})

    def test_merge_copies_entries(self):
        other = RuntimeRecord.from_dict({"a.js": {"s": {"1": 1}}})
        self.record.merge(other)
        self.record["a.js"].s[1] = 10
        self.assertEqual(other["a.js"].s, {1: 1})

    def test_reset(self):
        self.record.ensure("a.js", FileTrace())
        self.record.ensure("b.js", FileTrace())
        self.record.reset("a.js")
        self.assertEqual(self.record.keys(), ["b.js"])
        self.record.reset()
        self.assertEqual(len(self.record), 0)

    def test_summary(self):
        self.record.ensure("a.js", FileTrace({1: 1, 2: 0}))
        self.assertEqual(self.record.summary("a.js")["statements"], (1, 2))

    def test_fresh_records_are_independent(self):
        RuntimeRecord().ensure("a.js", FileTrace())
        self.assertEqual(len(RuntimeRecord()), 0)
