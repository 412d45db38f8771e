"""
AST Converter for lowering tree-sitter JavaScript trees to the typed AST.

This module handles the conversion of the concrete syntax tree produced by
the tree-sitter JavaScript grammar into ``jstrace.language.javascript.ast``.
Conversion methods are selected by node type name (``convert_<type>``), the
same visitor-by-name convention ``TypeDispatcher`` supports.

Leaf expressions (identifiers, literals...) are dropped: they can contain
neither functions nor branches, so nothing downstream needs them. The one
exception is the body of an expression-bodied arrow function, which the
rewriter must still be able to wrap.
"""

import logging
from typing import List, Optional

from jstrace.language.javascript import ast as js_ast

LOG = logging.getLogger(__name__)

SKIPPED = frozenset(("comment", "html_comment", "hash_bang_line"))

LOGICAL_OPERATORS = frozenset(("&&", "||", "??"))

FUNCTION_TYPES = frozenset(
    (
        "function",
        "function_expression",
        "generator_function",
        "arrow_function",
        "method_definition",
        "function_declaration",
        "generator_function_declaration",
    )
)

DECLARATION_TYPES = frozenset(
    ("variable_declaration", "lexical_declaration", "using_declaration")
)


def namedChildren(node):
    """Named children of ``node`` except comments."""
    return [c for c in node.named_children if c.type not in SKIPPED]


class ASTConverter(object):
    """Converts tree-sitter nodes into typed JavaScript AST nodes.

    Attributes:
        source: ``SourceText`` the tree was parsed from; used for spans and
            for the text of names and operators.
    """

    def __init__(self, source):
        self.source = source

    def span(self, node):
        return self.source.span(node)

    def text(self, node):
        if node is None:
            return None
        return self.source.slice(node.start_byte, node.end_byte)

    # Statements

    def convertProgram(self, root) -> js_ast.Program:
        return js_ast.Program(self.span(root), self.statementList(namedChildren(root), True))

    def statementList(self, nodes, prologue=False) -> List[js_ast.Statement]:
        """Convert a statement sequence, recognizing a directive prologue."""
        statements = []
        for node in nodes:
            if prologue:
                directive = self.directive(node)
                if directive is not None:
                    statements.append(directive)
                    continue
                prologue = False
            statements.append(self.statement(node))
        return statements

    def directive(self, node):
        if node.type != "expression_statement":
            return None
        children = namedChildren(node)
        if len(children) != 1 or children[0].type != "string":
            return None
        return js_ast.Directive(self.span(node), self.text(children[0])[1:-1])

    def statement(self, node) -> js_ast.Statement:
        method = getattr(self, "convert_" + node.type, None)
        if method is None:
            LOG.warning("treating unknown statement type %s as an expression", node.type)
            return js_ast.ExpressionStatement(self.span(node), self.composite(node))
        return method(node)

    def convert_expression_statement(self, node):
        children = namedChildren(node)
        expression = self.expression(children[0]) if children else None
        return js_ast.ExpressionStatement(self.span(node), expression)

    def declarationInitializers(self, node):
        initializers = []
        for declarator in namedChildren(node):
            if declarator.type != "variable_declarator":
                continue
            for part in (
                declarator.child_by_field_name("name"),
                declarator.child_by_field_name("value"),
            ):
                expression = self.expression(part)
                if expression is not None:
                    initializers.append(expression)
        return initializers

    def declarators(self, node):
        result = []
        for declarator in namedChildren(node):
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            result.append(
                (
                    self.text(name) if name is not None and name.type == "identifier" else None,
                    declarator.child_by_field_name("value") is not None,
                )
            )
        return result

    def convert_variable_declaration(self, node):
        return js_ast.VariableDeclaration(
            self.span(node),
            "var",
            self.declarationInitializers(node),
            self.declarators(node),
        )

    def convert_lexical_declaration(self, node):
        kind = node.child_by_field_name("kind")
        return js_ast.VariableDeclaration(
            self.span(node),
            self.text(kind) if kind is not None else "let",
            self.declarationInitializers(node),
            self.declarators(node),
        )

    convert_using_declaration = convert_lexical_declaration

    def convert_function_declaration(self, node):
        return js_ast.FunctionDeclaration(self.span(node), self.function(node))

    convert_generator_function_declaration = convert_function_declaration

    def convert_class_declaration(self, node):
        name = node.child_by_field_name("name")
        return js_ast.ClassDeclaration(
            self.span(node), self.text(name), self.subexpressions(node)
        )

    def convert_statement_block(self, node):
        return self.block(node)

    def block(self, node, prologue=False) -> js_ast.Block:
        return js_ast.Block(self.span(node), self.statementList(namedChildren(node), prologue))

    def convert_empty_statement(self, node):
        return js_ast.Empty(self.span(node))

    def convert_debugger_statement(self, node):
        return js_ast.Debugger(self.span(node))

    def convert_if_statement(self, node):
        alternate = None
        elseClause = node.child_by_field_name("alternative")
        if elseClause is not None:
            alternate = self.statement(namedChildren(elseClause)[0])
        return js_ast.If(
            self.span(node),
            self.expression(node.child_by_field_name("condition")),
            self.statement(node.child_by_field_name("consequence")),
            alternate,
        )

    def convert_switch_statement(self, node):
        body = node.child_by_field_name("body")
        cases = [
            self.switchCase(child)
            for child in namedChildren(body)
            if child.type in ("switch_case", "switch_default")
        ]
        return js_ast.Switch(
            self.span(node), self.expression(node.child_by_field_name("value")), cases
        )

    def switchCase(self, node):
        colon = None
        statements = []
        for child in node.children:
            if colon is None:
                if child.type == ":":
                    colon = child
            elif child.is_named and child.type not in SKIPPED:
                statements.append(child)
        return js_ast.SwitchCase(
            self.span(node),
            self.expression(node.child_by_field_name("value")),
            self.statementList(statements),
            colon.end_byte if colon is not None else node.end_byte,
        )

    def convert_while_statement(self, node):
        return js_ast.While(
            self.span(node),
            self.expression(node.child_by_field_name("condition")),
            self.statement(node.child_by_field_name("body")),
        )

    def convert_do_statement(self, node):
        return js_ast.DoWhile(
            self.span(node),
            self.statement(node.child_by_field_name("body")),
            self.expression(node.child_by_field_name("condition")),
        )

    def loopHeader(self, node, body):
        header = []
        for child in namedChildren(node):
            if child == body:
                continue
            if child.type in DECLARATION_TYPES:
                parts = self.declarationInitializers(child)
                if parts:
                    header.append(js_ast.Composite(self.span(child), child.type, parts))
            elif child.type == "expression_statement":
                children = namedChildren(child)
                expression = self.expression(children[0]) if children else None
                if expression is not None:
                    header.append(expression)
            else:
                expression = self.expression(child)
                if expression is not None:
                    header.append(expression)
        return header

    def convert_for_statement(self, node):
        body = node.child_by_field_name("body")
        return js_ast.For(self.span(node), self.loopHeader(node, body), self.statement(body))

    def convert_for_in_statement(self, node):
        body = node.child_by_field_name("body")
        operator = node.child_by_field_name("operator")
        return js_ast.ForIn(
            self.span(node),
            self.text(operator) if operator is not None else "in",
            self.loopHeader(node, body),
            self.statement(body),
        )

    def convert_return_statement(self, node):
        children = namedChildren(node)
        argument = self.expression(children[0]) if children else None
        return js_ast.Return(self.span(node), argument)

    def convert_throw_statement(self, node):
        children = namedChildren(node)
        argument = self.expression(children[0]) if children else None
        return js_ast.Throw(self.span(node), argument)

    def convert_break_statement(self, node):
        return js_ast.Break(self.span(node), self.text(node.child_by_field_name("label")))

    def convert_continue_statement(self, node):
        return js_ast.Continue(self.span(node), self.text(node.child_by_field_name("label")))

    def convert_labeled_statement(self, node):
        return js_ast.Labeled(
            self.span(node),
            self.text(node.child_by_field_name("label")),
            self.statement(node.child_by_field_name("body")),
        )

    def convert_try_statement(self, node):
        handler = node.child_by_field_name("handler")
        finalizer = node.child_by_field_name("finalizer")
        catch = None
        if handler is not None:
            catch = js_ast.CatchClause(
                self.span(handler),
                self.expression(handler.child_by_field_name("parameter")),
                self.block(handler.child_by_field_name("body")),
            )
        return js_ast.Try(
            self.span(node),
            self.block(node.child_by_field_name("body")),
            catch,
            self.block(finalizer.child_by_field_name("body")) if finalizer is not None else None,
        )

    def convert_with_statement(self, node):
        return js_ast.With(
            self.span(node),
            self.expression(node.child_by_field_name("object")),
            self.statement(node.child_by_field_name("body")),
        )

    def convert_import_statement(self, node):
        return js_ast.ModuleItem(self.span(node), "import", self.subexpressions(node))

    def convert_export_statement(self, node):
        return js_ast.ModuleItem(self.span(node), "export", self.subexpressions(node))

    # Expressions

    def expression(self, node, keep=False) -> Optional[js_ast.JSNode]:
        """Convert an expression, or return None for a leaf with nothing inside.

        Args:
            node: tree-sitter node, may be None.
            keep: Return a childless ``Composite`` instead of None for leaves.
        """
        if node is None or node.type in SKIPPED:
            return None
        if node.type in FUNCTION_TYPES:
            return self.function(node)
        if node.type == "ternary_expression":
            return js_ast.Conditional(
                self.span(node),
                self.expression(node.child_by_field_name("condition")),
                self.expression(node.child_by_field_name("consequence"), True),
                self.expression(node.child_by_field_name("alternative"), True),
            )
        if self.logicalOperator(node) is not None:
            return self.logical(node)
        if node.type == "class_static_block":
            return js_ast.StaticBlock(self.span(node), self.block(node.child_by_field_name("body")))
        if node.type == "statement_block":
            return self.block(node)
        # Declarations nested in ``export`` are not statements of their own.
        if node.type in DECLARATION_TYPES:
            elements = self.declarationInitializers(node)
        else:
            elements = self.subexpressions(node)

        if not elements and not keep:
            return None
        return js_ast.Composite(self.span(node), node.type, elements)

    def logicalOperator(self, node):
        if node is None or node.type != "binary_expression":
            return None
        operator = self.text(node.child_by_field_name("operator"))
        return operator if operator in LOGICAL_OPERATORS else None

    def logical(self, node) -> js_ast.Logical:
        """Convert a chain of short-circuit operators nested to the left.

        The left spine is collected with a loop and rebuilt from the inside
        out, so a chain of any length costs no Python recursion.
        """
        chain = []
        while self.logicalOperator(node) is not None:
            chain.append(node)
            node = node.child_by_field_name("left")

        converted = self.expression(node, True)
        for operatorNode in reversed(chain):
            converted = js_ast.Logical(
                self.span(operatorNode),
                self.logicalOperator(operatorNode),
                converted,
                self.expression(operatorNode.child_by_field_name("right"), True),
            )
        return converted

    def subexpressions(self, node):
        elements = []
        for child in namedChildren(node):
            converted = self.expression(child)
            if converted is not None:
                elements.append(converted)
        return elements

    def composite(self, node):
        return js_ast.Composite(self.span(node), node.type, self.subexpressions(node))

    def function(self, node) -> js_ast.Function:
        if node.type in ("function_declaration", "generator_function_declaration"):
            kind = "declaration"
        elif node.type == "arrow_function":
            kind = "arrow"
        elif node.type == "method_definition":
            kind = "method"
        else:
            kind = "expression"

        name = node.child_by_field_name("name")
        params = []
        parameters = node.child_by_field_name("parameters")
        if parameters is not None:
            params = self.subexpressions(parameters)

        body = node.child_by_field_name("body")
        if body.type == "statement_block":
            converted = self.block(body, prologue=True)
        else:
            converted = self.expression(body, keep=True)

        return js_ast.Function(
            self.span(node),
            kind,
            self.text(name) if kind != "arrow" else None,
            params,
            converted,
        )
