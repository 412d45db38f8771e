"""
Wrapping policy: where a mainline ``return`` is allowed.

Instrumented output is meant to run either as a module body (CommonJS wraps
every file in a function, so ``return`` at the top level is legal) or as a
plain script. By default the instrumenter assumes the former and leaves a
mainline ``return`` alone. With ``noAutoWrap`` the unit is treated as a
script, and a ``return`` outside every function is rejected the same way a
JavaScript engine would reject it: as a syntax error.

The policy never changes ids, counts or the record shape. It only decides
whether a unit is accepted.
"""

from jstrace.application.errors import IllegalReturnError
from jstrace.language.javascript import ast as js_ast
from jstrace.util.typedispatch import TypeDispatcher, defaultdispatch, dispatch


class MainlineReturnFinder(TypeDispatcher):
    """Finds the first ``return`` that is not inside any function."""

    def __init__(self):
        self.found = None

    @dispatch(js_ast.Return)
    def visitReturn(self, node):
        if self.found is None:
            self.found = node

    @dispatch(js_ast.Function)
    def visitFunction(self, node):
        # Returns in here belong to the function.
        pass

    @dispatch(js_ast.Logical)
    def visitLogical(self, node):
        chain, first = node.spine()
        for operand in [first] + [logical.right for logical in reversed(chain)]:
            if self.found is not None:
                break
            self(operand)

    @defaultdispatch
    def visitOther(self, node):
        for child in node.children():
            if self.found is not None:
                break
            self(child)

    def find(self, program):
        self(program)
        return self.found


class WrappingPolicy(object):
    """
    Decides whether a program is acceptable for the requested wrapping.

    Attributes:
        noAutoWrap: Treat units as scripts; reject mainline ``return``.
    """

    __slots__ = "noAutoWrap"

    def __init__(self, noAutoWrap=False):
        self.noAutoWrap = bool(noAutoWrap)

    @property
    def autoWrap(self):
        return not self.noAutoWrap

    def check(self, program, filename=None):
        """Validate ``program``.

        Raises:
            IllegalReturnError: With auto-wrapping disabled, for the first
                ``return`` outside any function.
        """
        if self.autoWrap:
            return
        node = MainlineReturnFinder().find(program)
        if node is not None:
            loc = node.span.loc
            raise IllegalReturnError(
                "Illegal return statement", loc.start_line, loc.start_column, filename
            )
