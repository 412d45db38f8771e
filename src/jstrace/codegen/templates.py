"""Code templates for instrumented JavaScript.

This module owns every piece of JavaScript text the rewriter injects:
counter increments, and the preamble that binds the per-file record entry.
``JSOutput`` keeps track of block nesting so the preamble can be emitted
either compactly (one line, keeping every original line on its original
line number) or one statement per line with indentation.
"""

import hashlib
import io
import json


def jsString(value):
    """A JavaScript string literal for ``value`` (JSON is valid JS here)."""
    return json.dumps(value)


def trackerName(key):
    """Name of the file-local variable bound to the record entry."""
    return "__trace_" + hashlib.md5(key.encode("utf-8")).hexdigest()[:16]


# A helper class that keeps track of the indentation level, etc.
class JSOutput(object):
    """Helper class for emitting JavaScript statements.

    Attributes:
        out: Output stream to write to.
        compact: Emit everything on one line, separated by single spaces.
        indent: Current block nesting level.
    """

    __slots__ = "out", "compact", "indent", "started"

    def __init__(self, out, compact=True):
        self.out = out
        self.compact = compact
        self.indent = 0
        self.started = False

    def emitStatement(self, stmt):
        if self.compact:
            if self.started:
                self.out.write(" ")
        else:
            self.out.write("    " * self.indent)
        self.out.write(stmt)
        if not self.compact:
            self.newline()
        self.started = True

    def startBlock(self, stmt):
        """Emit ``stmt {`` and indent."""
        self.emitStatement(stmt + " {")
        self.indent += 1

    def endBlock(self):
        self.indent -= 1
        self.emitStatement("}")

    def newline(self):
        self.out.write("\n")


class Counters(object):
    """Counter increment snippets for one tracker variable."""

    __slots__ = "tracker"

    def __init__(self, tracker):
        self.tracker = tracker

    def statement(self, sid):
        return "%s.s['%d']++;" % (self.tracker, sid)

    def function(self, fid):
        return "%s.f['%d']++;" % (self.tracker, fid)

    def branch(self, bid, slot):
        """Branch increment as a statement."""
        return "%s;" % self.branchExpression(bid, slot)

    def branchExpression(self, bid, slot):
        return "%s.b['%d'][%d]++" % (self.tracker, bid, slot)

    def functionExpression(self, fid):
        return "%s.f['%d']++" % (self.tracker, fid)


def preamble(traceVariable, key, entry, compact=True):
    """Generate the record initialization preamble.

    On first execution in a process the preamble creates
    ``global[traceVariable]`` and the entry for ``key`` (``entry`` is the
    JSON-ready zero-filled record). Re-running it never resets counts that
    are already there.

    Args:
        traceVariable: Global slot holding the runtime record.
        key: File key, used verbatim as the property name.
        entry: Initial record entry, as produced by ``FileTrace.to_dict``.
        compact: Emit on a single line without a trailing newline.

    Returns:
        The preamble text.
    """
    tracker = trackerName(key)
    slot = jsString(traceVariable)
    name = jsString(key)
    if compact:
        body = json.dumps(entry, separators=(",", ":"))
    else:
        body = json.dumps(entry)

    buffer = io.StringIO()
    output = JSOutput(buffer, compact)
    output.emitStatement("var %s = (Function('return this'))();" % tracker)
    output.startBlock("if (!%s[%s])" % (tracker, slot))
    output.emitStatement("%s[%s] = {};" % (tracker, slot))
    output.endBlock()
    output.emitStatement("%s = %s[%s];" % (tracker, tracker, slot))
    output.startBlock("if (!(%s[%s]))" % (tracker, name))
    output.emitStatement("%s[%s] = %s;" % (tracker, name, body))
    output.endBlock()
    output.emitStatement("%s = %s[%s];" % (tracker, tracker, name))
    return buffer.getvalue()
