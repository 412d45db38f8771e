"""
Early errors the tree-sitter grammar does not report.

tree-sitter recovers from anything it cannot parse and accepts some programs
a JavaScript engine refuses to compile. This pass runs over the typed AST
and rejects the ones that matter for jump targets and declarations:

- ``break`` outside any loop or ``switch``, ``continue`` outside any loop;
- ``break label`` / ``continue label`` naming a label that does not enclose
  the statement;
- ``continue label`` where the label is not on a loop;
- a label redeclared inside a statement it already labels;
- ``let`` as a ``let``/``const`` binding, and ``const`` without initializer.

Functions and class static blocks start a fresh context: labels and loops
outside them are not visible inside.
"""

from jstrace.application.errors import ParseError
from jstrace.language.javascript import ast as js_ast
from jstrace.util.typedispatch import TypeDispatcher, dispatch


class Context(object):
    """Jump targets visible at one point of the walk.

    Attributes:
        labels: ``(name, iteration)`` for every enclosing label.
        loops: Number of enclosing loops.
        breakables: Number of enclosing loops and ``switch`` statements.
    """

    __slots__ = "labels", "loops", "breakables"

    def __init__(self):
        self.labels = []
        self.loops = 0
        self.breakables = 0

    def find(self, name):
        for label, iteration in reversed(self.labels):
            if label == name:
                return iteration
        return None


class EarlyErrorChecker(TypeDispatcher):
    """Raises ``ParseError`` for the first early error found."""

    def __init__(self, filename=None):
        self.filename = filename
        self.context = Context()
        # Labels directly in front of the statement being visited.
        self.pending = []

    def error(self, node, message):
        loc = node.span.loc
        raise ParseError(message, loc.start_line, loc.start_column, self.filename)

    def walk(self, node):
        if node is not None:
            self(node)

    def walkChildren(self, node):
        for child in node.children():
            self.walk(child)

    def takeLabels(self, iteration):
        labels = [(name, iteration) for name in self.pending]
        self.pending = []
        return labels

    def enclosed(self, node, iteration=False, breakable=False):
        """Walk the children of ``node`` with its labels and jump scope added."""
        context = self.context
        labels = self.takeLabels(iteration)
        context.labels.extend(labels)
        context.loops += iteration
        context.breakables += breakable
        self.walkChildren(node)
        context.breakables -= breakable
        context.loops -= iteration
        del context.labels[len(context.labels) - len(labels) :]

    @dispatch(js_ast.Program, js_ast.SwitchCase, js_ast.CatchClause, js_ast.Expression)
    def visitContainer(self, node):
        self.walkChildren(node)

    @dispatch(js_ast.Statement)
    def visitStatement(self, node):
        self.enclosed(node)

    @dispatch(js_ast.While, js_ast.DoWhile, js_ast.For, js_ast.ForIn)
    def visitLoop(self, node):
        self.enclosed(node, iteration=True, breakable=True)

    @dispatch(js_ast.Switch)
    def visitSwitch(self, node):
        self.enclosed(node, breakable=True)

    @dispatch(js_ast.Labeled)
    def visitLabeled(self, node):
        if node.label in self.pending or self.context.find(node.label) is not None:
            self.error(node, "Label '%s' has already been declared" % node.label)
        self.pending.append(node.label)
        self.walk(node.body)

    @dispatch(js_ast.Break)
    def visitBreak(self, node):
        # ``a: break a;`` is legal.
        own = self.takeLabels(False)
        if node.label is None:
            if not self.context.breakables:
                self.error(node, "Illegal break statement")
        elif self.context.find(node.label) is None and (node.label, False) not in own:
            self.error(node, "Undefined label '%s'" % node.label)

    @dispatch(js_ast.Continue)
    def visitContinue(self, node):
        self.takeLabels(False)
        if node.label is None:
            if not self.context.loops:
                self.error(node, "Illegal continue statement")
            return
        iteration = self.context.find(node.label)
        if iteration is None:
            self.error(node, "Undefined label '%s'" % node.label)
        if not iteration:
            self.error(
                node,
                "Illegal continue statement: '%s' does not denote an iteration statement"
                % node.label,
            )

    @dispatch(js_ast.VariableDeclaration)
    def visitVariableDeclaration(self, node):
        if node.declarationKind in ("let", "const"):
            for name, initialized in node.declarators:
                if name == "let":
                    self.error(node, "let is disallowed as a lexically bound name")
                if node.declarationKind == "const" and not initialized:
                    self.error(node, "Missing initializer in const declaration")
        self.enclosed(node)

    @dispatch(js_ast.Function, js_ast.StaticBlock)
    def visitFunction(self, node):
        saved = self.context, self.pending
        self.context, self.pending = Context(), []
        self.walkChildren(node)
        self.context, self.pending = saved

    @dispatch(js_ast.Logical)
    def visitLogical(self, node):
        chain, first = node.spine()
        self.walk(first)
        for logical in reversed(chain):
            self.walk(logical.right)

    def check(self, program):
        self.walk(program)


def check(program, filename=None):
    """Raise ``ParseError`` if ``program`` contains an early error.

    Args:
        program: Typed ``Program``.
        filename: File key used in the error.
    """
    EarlyErrorChecker(filename).check(program)
