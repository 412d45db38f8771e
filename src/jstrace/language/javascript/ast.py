"""Typed AST for the JavaScript subset the instrumenter cares about.

The concrete syntax tree produced by the parser is loosely typed (every node
is a tagged record). The instrumenter lowers it into this closed family of
node classes so that the location index builder and the rewriter can be
written as exhaustive type dispatchers instead of string comparisons on node
tags.

Only constructs that matter for instrumentation get a dedicated class:
statements (each may receive a statement counter), the branching expressions
(conditional and short-circuit operators), and functions. Every other
expression is a ``Composite`` that only remembers its sub-expressions, in
source order, so that nested functions and branches are still reached.

Key classes:
- JSNode: Root base class, carries the node's ``Span``
- Statement: Base class for statements
- Expression: Base class for expressions
- Program: The root of a parsed unit

Nodes compare and hash by identity, so they can key the id tables built by
``jstrace.analysis.locations``.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from jstrace.language.asttools.origin import Span


@dataclass(eq=False)
class JSNode(object):
    """Root base class for all typed JavaScript nodes."""

    span: Span

    def children(self):
        """Child nodes in source order."""
        return ()

    @property
    def kind(self):
        return type(self).__name__


@dataclass(eq=False)
class Statement(JSNode):
    """Base class for statement nodes."""

    def isCounted(self):
        """Whether the statement receives a statement id."""
        return True


@dataclass(eq=False)
class Expression(JSNode):
    """Base class for expression nodes."""


def _present(*nodes):
    return tuple(n for n in nodes if n is not None)


# Statements


@dataclass(eq=False)
class Program(JSNode):
    body: List[Statement] = field(default_factory=list)

    def children(self):
        return tuple(self.body)


@dataclass(eq=False)
class Directive(Statement):
    """A directive prologue string such as ``"use strict"``.

    Only ``use strict`` goes uncounted. Other directives get a statement id,
    but their counter is emitted after the whole prologue.
    """

    value: str = ""

    def isCounted(self):
        return self.value != "use strict"


@dataclass(eq=False)
class ExpressionStatement(Statement):
    expression: Expression = None

    def children(self):
        return _present(self.expression)


@dataclass(eq=False)
class VariableDeclaration(Statement):
    """``var``, ``let`` or ``const``; keeps only the initializer expressions.

    ``declarators`` lists ``(name, initialized)`` per declarator; ``name`` is
    None for destructuring patterns.
    """

    declarationKind: str = "var"
    initializers: List[Expression] = field(default_factory=list)
    declarators: List[Tuple[Optional[str], bool]] = field(default_factory=list)

    def children(self):
        return tuple(self.initializers)


@dataclass(eq=False)
class FunctionDeclaration(Statement):
    function: "Function" = None

    def children(self):
        return _present(self.function)


@dataclass(eq=False)
class ClassDeclaration(Statement):
    name: Optional[str] = None
    members: List[Expression] = field(default_factory=list)

    def children(self):
        return tuple(self.members)


@dataclass(eq=False)
class Block(Statement):
    body: List[Statement] = field(default_factory=list)

    def children(self):
        return tuple(self.body)

    def isCounted(self):
        return False


@dataclass(eq=False)
class Empty(Statement):
    def isCounted(self):
        return False


@dataclass(eq=False)
class If(Statement):
    test: Expression = None
    consequent: Statement = None
    alternate: Optional[Statement] = None

    def children(self):
        return _present(self.test, self.consequent, self.alternate)


@dataclass(eq=False)
class SwitchCase(JSNode):
    """One ``case``/``default`` clause; ``bodyOffset`` is just past the colon."""

    test: Optional[Expression] = None
    body: List[Statement] = field(default_factory=list)
    bodyOffset: int = 0

    def children(self):
        return _present(self.test) + tuple(self.body)


@dataclass(eq=False)
class Switch(Statement):
    discriminant: Expression = None
    cases: List[SwitchCase] = field(default_factory=list)

    def children(self):
        return _present(self.discriminant) + tuple(self.cases)


@dataclass(eq=False)
class While(Statement):
    test: Expression = None
    body: Statement = None

    def children(self):
        return _present(self.test, self.body)


@dataclass(eq=False)
class DoWhile(Statement):
    body: Statement = None
    test: Expression = None

    def children(self):
        return _present(self.body, self.test)


@dataclass(eq=False)
class For(Statement):
    """``for (init; test; update)``; the header parts are plain expressions."""

    header: List[Expression] = field(default_factory=list)
    body: Statement = None

    def children(self):
        return tuple(self.header) + _present(self.body)


@dataclass(eq=False)
class ForIn(Statement):
    """``for (x in y)`` and ``for (x of y)``."""

    operator: str = "in"
    header: List[Expression] = field(default_factory=list)
    body: Statement = None

    def children(self):
        return tuple(self.header) + _present(self.body)


@dataclass(eq=False)
class Return(Statement):
    argument: Optional[Expression] = None

    def children(self):
        return _present(self.argument)


@dataclass(eq=False)
class Throw(Statement):
    argument: Expression = None

    def children(self):
        return _present(self.argument)


@dataclass(eq=False)
class Break(Statement):
    label: Optional[str] = None


@dataclass(eq=False)
class Continue(Statement):
    label: Optional[str] = None


@dataclass(eq=False)
class Labeled(Statement):
    label: str = ""
    body: Statement = None

    def children(self):
        return _present(self.body)


@dataclass(eq=False)
class CatchClause(JSNode):
    param: Optional[Expression] = None
    body: Block = None

    def children(self):
        return _present(self.param, self.body)


@dataclass(eq=False)
class Try(Statement):
    block: Block = None
    handler: Optional[CatchClause] = None
    finalizer: Optional[Block] = None

    def children(self):
        return _present(self.block, self.handler, self.finalizer)


@dataclass(eq=False)
class With(Statement):
    object: Expression = None
    body: Statement = None

    def children(self):
        return _present(self.object, self.body)


@dataclass(eq=False)
class Debugger(Statement):
    pass


@dataclass(eq=False)
class ModuleItem(Statement):
    """``import`` or ``export``; nested declarations are kept as expressions."""

    keyword: str = "import"
    expressions: List[Expression] = field(default_factory=list)

    def children(self):
        return tuple(self.expressions)


# Expressions


@dataclass(eq=False)
class Conditional(Expression):
    test: Expression = None
    consequent: Expression = None
    alternate: Expression = None

    def children(self):
        return _present(self.test, self.consequent, self.alternate)


@dataclass(eq=False)
class Logical(Expression):
    """A short-circuit operator: ``&&``, ``||`` or ``??``."""

    operator: str = "&&"
    left: Expression = None
    right: Expression = None

    def children(self):
        return _present(self.left, self.right)

    def spine(self):
        """The operators nested through ``left``, outermost first, and the
        leftmost operand.

        ``a || b || c`` parses as ``(a || b) || c``, so long chains nest to
        the left. Walkers use this instead of recursing into ``left``.
        """
        chain = [self]
        left = self.left
        while isinstance(left, Logical):
            chain.append(left)
            left = left.left
        return chain, left


@dataclass(eq=False)
class Function(Expression):
    """Any function: declaration, expression, arrow, method or accessor.

    ``body`` is a ``Block`` except for expression-bodied arrows.
    """

    functionKind: str = "expression"
    name: Optional[str] = None
    params: List[Expression] = field(default_factory=list)
    body: Union[Block, Expression] = None

    def children(self):
        return tuple(self.params) + (self.body,)

    def hasBlockBody(self):
        return isinstance(self.body, Block)


@dataclass(eq=False)
class StaticBlock(Expression):
    """A class ``static { ... }`` initialization block."""

    body: Block = None

    def children(self):
        return _present(self.body)


@dataclass(eq=False)
class Composite(Expression):
    """Any other expression; only its sub-expressions are kept."""

    nodeType: str = ""
    elements: List[JSNode] = field(default_factory=list)

    def children(self):
        return tuple(self.elements)
