"""
Monkey Abstract Syntax Tree
Immutable node types produced by the parser and walked by the interpreter.

str(node) is a structural reconstruction, not the original source: every prefix
and infix expression is parenthesized and spacing is normalized. The output is
always valid Monkey, so parsing it again yields the same reconstruction.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from lexer import Token


class Node:
    """Base of every AST node"""

    def token_literal(self) -> str:
        token = getattr(self, 'token', None)
        return token.literal if token is not None else ""


class Statement(Node):
    """A node that does not itself produce a value"""


class Expression(Node):
    """A node that evaluates to a value"""


def _token_field():
    return field(default=None, compare=False, repr=False)


def _join_statements(statements: Sequence[Statement]) -> str:
    """Render a statement sequence so adjacent statements never fuse together"""
    parts = []
    last = len(statements) - 1
    for i, statement in enumerate(statements):
        text = str(statement)
        if isinstance(statement, ExpressionStatement) and i < last:
            text += ";"
        parts.append(text)
    return " ".join(parts)


# ============================================================================
# PROGRAM AND STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class Program(Node):
    """Ordered sequence of top-level statements"""
    statements: Tuple[Statement, ...] = ()
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        return _join_statements(self.statements)


@dataclass(frozen=True)
class Identifier(Expression):
    value: str
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LetStatement(Statement):
    """let <name> = <value>;"""
    name: Identifier
    value: Expression
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        return f"let {self.name} = {self.value};"


@dataclass(frozen=True)
class ReturnStatement(Statement):
    """return <value>;"""
    return_value: Expression
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        return f"return {self.return_value};"


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    """A bare expression used as a statement"""
    expression: Expression
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        return str(self.expression)


@dataclass(frozen=True)
class BlockStatement(Statement):
    """Braced statement sequence used as if-branches and function bodies"""
    statements: Tuple[Statement, ...] = ()
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        if not self.statements:
            return "{ }"
        return "{ " + _join_statements(self.statements) + " }"


# ============================================================================
# LITERALS
# ============================================================================

@dataclass(frozen=True)
class IntegerLiteral(Expression):
    value: int
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class StringLiteral(Expression):
    value: str
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        escaped = (self.value.replace('\\', '\\\\').replace('"', '\\"')
                   .replace('\n', '\\n').replace('\t', '\\t').replace('\r', '\\r'))
        return f'"{escaped}"'


@dataclass(frozen=True)
class Boolean(Expression):
    value: bool
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class ArrayLiteral(Expression):
    elements: Tuple[Expression, ...] = ()
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        return "[" + ", ".join(str(e) for e in self.elements) + "]"


@dataclass(frozen=True)
class HashLiteral(Expression):
    """Key/value pairs kept in source order"""
    pairs: Tuple[Tuple[Expression, Expression], ...] = ()
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        return "{" + ", ".join(f"{key}: {value}" for key, value in self.pairs) + "}"


@dataclass(frozen=True)
class FunctionLiteral(Expression):
    parameters: Tuple[Identifier, ...]
    body: BlockStatement
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn({params}) {self.body}"


# ============================================================================
# OPERATORS AND COMPOUND EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class PrefixExpression(Expression):
    operator: str
    right: Expression
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass(frozen=True)
class InfixExpression(Expression):
    left: Expression
    operator: str
    right: Expression
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class IfExpression(Expression):
    condition: Expression
    consequence: BlockStatement
    alternative: Optional[BlockStatement] = None
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        result = f"if ({self.condition}) {self.consequence}"
        if self.alternative is not None:
            result += f" else {self.alternative}"
        return result


@dataclass(frozen=True)
class CallExpression(Expression):
    """<function>(<arguments>)"""
    function: Expression
    arguments: Tuple[Expression, ...] = ()
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


@dataclass(frozen=True)
class IndexExpression(Expression):
    """<left>[<index>]"""
    left: Expression
    index: Expression
    token: Optional[Token] = _token_field()

    def __str__(self) -> str:
        return f"({self.left}[{self.index}])"


# ============================================================================
# UTILITIES
# ============================================================================

def pretty_print_ast(node: Node, indent: int = 0) -> str:
    """Indented tree dump of a node, for debugging"""
    result = "  " * indent + type(node).__name__
    children = []
    for name, value in vars(node).items():
        if name == 'token':
            continue
        if isinstance(value, Node):
            children.append(value)
        elif isinstance(value, tuple):
            for item in value:
                if isinstance(item, tuple):
                    children.extend(item)
                elif isinstance(item, Node):
                    children.append(item)
        elif value is not None:
            result += f"({value!r})"
    result += "\n"

    for child in children:
        result += pretty_print_ast(child, indent + 1)

    return result
