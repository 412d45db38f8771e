"""
Rewriter: emits instrumented JavaScript from a location index.

The rewriter walks the typed AST in the same pre-order as the location index
builder and, for every node that owns an id, records text insertions into
the parsed source (see ``jstrace.codegen.edits``):

- statements: ``T.s['k']++;`` immediately before the statement. A statement
  sitting in a single-statement position (``if``/``else`` arm, loop or
  ``with`` body) is wrapped in braces first. Counters for the body of a
  labeled statement go in front of the label, so the label stays attached
  to its loop. Directives other than ``use strict`` are counted at the end
  of their prologue.
- ``if``: ``T.b['k'][0]++;`` at the top of the consequent and ``[1]`` at
  the top of the alternate; when there is no ``else`` one is appended that
  only counts.
- ``switch``: ``T.b['k'][i]++;`` right after the colon of clause ``i``.
- conditional and short-circuit expressions: each alternative becomes
  ``(T.b['k'][i]++, alternative)``, so it counts only when evaluated.
- functions: ``T.f['k']++;`` as the first statement of the body, after any
  directive prologue; an expression-bodied arrow returns
  ``(T.f['k']++, body)``.

The preamble binding ``T`` goes in front of everything, after the program's
own directive prologue.
"""

import logging

from jstrace.codegen import templates
from jstrace.codegen.edits import EditList
from jstrace.language.javascript import ast as js_ast
from jstrace.runtime.record import FileTrace
from jstrace.util.typedispatch import TypeDispatcher, dispatch

LOG = logging.getLogger(__name__)


class Rewriter(TypeDispatcher):
    """Records the insertions for one unit.

    Attributes:
        source: ``SourceText`` the AST was parsed from.
        index: ``LocationIndex`` of the same AST.
        counters: Counter snippet factory bound to the tracker variable.
        edits: Collected insertions.
    """

    def __init__(self, source, index, tracker):
        self.source = source
        self.index = index
        self.counters = templates.Counters(tracker)
        self.edits = EditList()
        # Offset where the next counted statement's counter goes instead of
        # its own start (set for the body of a labeled statement).
        self.hoist = None

    def walk(self, node):
        if node is not None:
            self(node)

    def walkChildren(self, node):
        for child in node.children():
            self.walk(child)

    def afterDirectives(self, statements, default):
        """Insertion point (offset, separator) after a directive prologue."""
        last = None
        for statement in statements:
            if not isinstance(statement, js_ast.Directive):
                break
            last = statement
        if last is None:
            return default, ""
        end = last.span.end
        terminated = self.source.data[end - 1 : end] == b";"
        return end, "" if terminated else ";"

    def countDirectives(self, statements, offset):
        """Counters for the counted directives of a prologue, all at ``offset``,
        the end of the prologue."""
        for statement in statements:
            if not isinstance(statement, js_ast.Directive):
                break
            if statement.isCounted():
                self.edits.open(
                    offset, self.counters.statement(self.index.statementIds[statement])
                )

    def countStatement(self, node):
        if not node.isCounted():
            return None
        offset = self.hoist if self.hoist is not None else node.span.start
        self.hoist = None
        self.edits.open(offset, self.counters.statement(self.index.statementIds[node]))
        return offset

    def arm(self, statement, prefix=""):
        """Instrument a statement in a single-statement position.

        ``prefix`` is emitted first when the arm runs (a branch counter).
        """
        if isinstance(statement, js_ast.Block):
            if prefix:
                self.edits.open(statement.span.start + 1, prefix)
        elif prefix or statement.isCounted():
            self.edits.wrap(statement.span.start, statement.span.end, "{" + prefix, "}")
        self.walk(statement)

    def wrapAlternative(self, expression, bid, slot):
        self.edits.wrap(
            expression.span.start,
            expression.span.end,
            "(%s, " % self.counters.branchExpression(bid, slot),
            ")",
        )

    @dispatch(js_ast.Program)
    def visitProgram(self, node):
        self.walkChildren(node)

    @dispatch(js_ast.SwitchCase, js_ast.CatchClause, js_ast.Expression)
    def visitContainer(self, node):
        self.walkChildren(node)

    @dispatch(js_ast.Statement)
    def visitStatement(self, node):
        self.countStatement(node)
        self.walkChildren(node)

    @dispatch(js_ast.Directive)
    def visitDirective(self, node):
        # Counted from countDirectives.
        pass

    @dispatch(js_ast.Labeled)
    def visitLabeled(self, node):
        offset = self.countStatement(node)
        if node.body.isCounted():
            self.hoist = offset
        self.walk(node.body)

    @dispatch(js_ast.If)
    def visitIf(self, node):
        self.countStatement(node)
        bid = self.index.branchIds[node]
        if node.alternate is None:
            self.edits.close(node.span.end, " else { %s }" % self.counters.branch(bid, 1))
        self.walk(node.test)
        self.arm(node.consequent, self.counters.branch(bid, 0))
        if node.alternate is not None:
            self.arm(node.alternate, self.counters.branch(bid, 1))

    @dispatch(js_ast.While)
    def visitWhile(self, node):
        self.countStatement(node)
        self.walk(node.test)
        self.arm(node.body)

    @dispatch(js_ast.With)
    def visitWith(self, node):
        self.countStatement(node)
        self.walk(node.object)
        self.arm(node.body)

    @dispatch(js_ast.For, js_ast.ForIn)
    def visitFor(self, node):
        self.countStatement(node)
        for child in node.header:
            self.walk(child)
        self.arm(node.body)

    @dispatch(js_ast.DoWhile)
    def visitDoWhile(self, node):
        self.countStatement(node)
        self.arm(node.body)
        if node.test is not None:
            self.walk(node.test)

    @dispatch(js_ast.Switch)
    def visitSwitch(self, node):
        self.countStatement(node)
        bid = self.index.branchIds[node]
        if node.discriminant is not None:
            self.walk(node.discriminant)
        for slot, case in enumerate(node.cases):
            self.edits.open(case.bodyOffset, self.counters.branch(bid, slot))
            self.walk(case)

    @dispatch(js_ast.Conditional)
    def visitConditional(self, node):
        bid = self.index.branchIds[node]
        self.wrapAlternative(node.consequent, bid, 0)
        self.wrapAlternative(node.alternate, bid, 1)
        self.walkChildren(node)

    @dispatch(js_ast.Logical)
    def visitLogical(self, node):
        chain, first = node.spine()
        for logical in chain:
            bid = self.index.branchIds[logical]
            self.wrapAlternative(logical.left, bid, 0)
            self.wrapAlternative(logical.right, bid, 1)
        self.walk(first)
        for logical in reversed(chain):
            self.walk(logical.right)

    @dispatch(js_ast.Function)
    def visitFunction(self, node):
        fid = self.index.functionIds[node]
        body = node.body
        if node.hasBlockBody():
            offset, separator = self.afterDirectives(body.body, body.span.start + 1)
            self.edits.open(offset, separator + self.counters.function(fid))
            self.countDirectives(body.body, offset)
        else:
            self.edits.wrap(
                body.span.start,
                body.span.end,
                "(%s, " % self.counters.functionExpression(fid),
                ")",
            )
        self.walkChildren(node)


def generate(source, program, index, key, options):
    """Produce the instrumented text for one unit.

    Args:
        source: ``SourceText`` the program was parsed from.
        program: Typed ``Program``.
        index: ``LocationIndex`` built from ``program``.
        key: File key the counts are recorded under.
        options: ``InstrumenterOptions``.

    Returns:
        Instrumented JavaScript source.
    """
    tracker = templates.trackerName(key)
    rewriter = Rewriter(source, index, tracker)

    code = source.lines() if options.embed_source else None
    entry = FileTrace.initial(index.map, code).to_dict()
    offset, separator = rewriter.afterDirectives(program.body, 0)
    header = templates.preamble(
        options.trace_variable, key, entry, compact=not options.no_compact
    )
    rewriter.edits.open(offset, separator + header)
    rewriter.countDirectives(program.body, offset)

    rewriter.walk(program)
    LOG.debug("%d insertions for %s", len(rewriter.edits), key)
    return rewriter.edits.apply(source.data)
