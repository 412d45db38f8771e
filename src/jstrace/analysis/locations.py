"""
Location index builder.

This module assigns the counter ids used by instrumented code. It walks the
typed AST exactly once and records, for every node that gets a counter, the
id it received and its source location.

**Visit order (the basis of map stability):**
The walk is pre-order, depth-first, and visits children in source order.
A node receives its id *before* any of its children are visited. There is a
single counter per category for the whole unit: entering a function does not
restart or pause numbering, so ids are unique across the file and a
statement inside a loop keeps one id however often it runs.

Because ids depend only on the visit order, never on line numbers, source
that differs only in leading content the parser ignores (a neutralized
shebang line, comments) numbers its statements identically.

**What gets an id:**
- Statements: every statement except blocks, empty statements and
  ``"use strict"`` directives.
- Branches: ``if`` (2 alternatives, the second is the implicit ``else``
  when absent), conditional expressions (2), each ``&&``/``||``/``??``
  operator node (2: left and right operand), ``switch`` (one per clause).
  Operator chains are walked with a loop (``Logical.spine``) but numbered
  as if recursively. Loops and ``try`` only contribute statement ids.
- Functions: every function, on entry, before its parameters and body.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict

from jstrace.analysis.instrumentationmap import BranchInfo, FunctionInfo, InstrumentationMap
from jstrace.language.asttools.origin import Location
from jstrace.language.javascript import ast as js_ast
from jstrace.util.typedispatch import TypeDispatcher, dispatch

LOG = logging.getLogger(__name__)


@dataclass
class LocationIndex:
    """The instrumentation map plus the node -> id tables the rewriter needs."""

    map: InstrumentationMap
    statementIds: Dict[js_ast.JSNode, int] = field(default_factory=dict)
    branchIds: Dict[js_ast.JSNode, int] = field(default_factory=dict)
    functionIds: Dict[js_ast.JSNode, int] = field(default_factory=dict)


class LocationIndexBuilder(TypeDispatcher):
    """Pre-order walker assigning statement, branch and function ids.

    Attributes:
        walkDebug: Log every visited node at debug level.
    """

    def __init__(self, walkDebug=False):
        self.walkDebug = walkDebug
        self.depth = 0

        self.statements = {}
        self.branches = {}
        self.functions = {}

        self.statementIds = {}
        self.branchIds = {}
        self.functionIds = {}

    def trace(self, node):
        if self.walkDebug:
            LOG.debug("%s%s %s", "  " * self.depth, node.kind, node.span.loc.originString())

    def walk(self, node):
        if node is None:
            return
        self.trace(node)
        self.depth += 1
        try:
            self(node)
        finally:
            self.depth -= 1

    def walkChildren(self, node):
        for child in node.children():
            self.walk(child)

    def statementId(self, node):
        sid = len(self.statements) + 1
        self.statements[sid] = node.span.loc
        self.statementIds[node] = sid
        return sid

    def branchId(self, node, kind, alternatives):
        bid = len(self.branches) + 1
        self.branches[bid] = BranchInfo(kind, node.span.loc, tuple(alternatives))
        self.branchIds[node] = bid
        return bid

    def functionId(self, node):
        fid = len(self.functions) + 1
        body = node.body.span.loc
        decl = Location(
            node.span.loc.start_line,
            node.span.loc.start_column,
            body.start_line,
            body.start_column,
        )
        name = node.name or "(anonymous_%d)" % fid
        self.functions[fid] = FunctionInfo(name, node.span.loc, decl)
        self.functionIds[node] = fid
        return fid

    @dispatch(js_ast.Program, js_ast.SwitchCase, js_ast.CatchClause, js_ast.Expression)
    def visitContainer(self, node):
        self.walkChildren(node)

    @dispatch(js_ast.Statement)
    def visitStatement(self, node):
        if node.isCounted():
            self.statementId(node)
        self.walkChildren(node)

    @dispatch(js_ast.If)
    def visitIf(self, node):
        self.statementId(node)
        implicitElse = node.alternate.span.loc if node.alternate is not None else node.span.loc
        self.branchId(node, "if", (node.consequent.span.loc, implicitElse))
        self.walkChildren(node)

    @dispatch(js_ast.Switch)
    def visitSwitch(self, node):
        self.statementId(node)
        self.branchId(node, "switch", [case.span.loc for case in node.cases])
        self.walkChildren(node)

    @dispatch(js_ast.Conditional)
    def visitConditional(self, node):
        self.branchId(
            node, "cond-expr", (node.consequent.span.loc, node.alternate.span.loc)
        )
        self.walkChildren(node)

    @dispatch(js_ast.Logical)
    def visitLogical(self, node):
        # Spine operators outermost first, then the leftmost operand, then
        # the right operands from the innermost operator outward.
        chain, first = node.spine()
        for logical in chain:
            if logical is not node:
                self.trace(logical)
            self.branchId(
                logical, "binary-expr", (logical.left.span.loc, logical.right.span.loc)
            )
        self.walk(first)
        for logical in reversed(chain):
            self.walk(logical.right)

    @dispatch(js_ast.Function)
    def visitFunction(self, node):
        self.functionId(node)
        self.walkChildren(node)

    def result(self):
        return LocationIndex(
            InstrumentationMap(self.statements, self.branches, self.functions),
            self.statementIds,
            self.branchIds,
            self.functionIds,
        )


def index(program, walkDebug=False):
    """Assign ids to every counted node of ``program``.

    Args:
        program: Typed ``Program`` from the parser adapter.
        walkDebug: Log each visited node.

    Returns:
        LocationIndex with the immutable map and the node -> id tables.
    """
    builder = LocationIndexBuilder(walkDebug)
    builder.walk(program)
    return builder.result()
