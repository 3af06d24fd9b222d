"""
Syntax tree produced by the expression grammar.

Node shapes and type names follow the ESTree conventions used by JavaScript
parsers, so the whitelist validator can name offending nodes the way shell
users expect ("Unexpected MemberExpression"). Every node carries a ``range``
of half-open character offsets into the parsed text.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class NodeType(StrEnum):
    """Type tag of a syntax node."""

    # Statements
    PROGRAM = "Program"
    VARIABLE_DECLARATION = "VariableDeclaration"
    VARIABLE_DECLARATOR = "VariableDeclarator"
    EXPRESSION_STATEMENT = "ExpressionStatement"
    BLOCK_STATEMENT = "BlockStatement"
    EMPTY_STATEMENT = "EmptyStatement"

    # Expressions
    OBJECT_EXPRESSION = "ObjectExpression"
    PROPERTY = "Property"
    ARRAY_EXPRESSION = "ArrayExpression"
    LITERAL = "Literal"
    IDENTIFIER = "Identifier"
    THIS_EXPRESSION = "ThisExpression"
    CALL_EXPRESSION = "CallExpression"
    NEW_EXPRESSION = "NewExpression"
    MEMBER_EXPRESSION = "MemberExpression"
    UNARY_EXPRESSION = "UnaryExpression"
    BINARY_EXPRESSION = "BinaryExpression"
    LOGICAL_EXPRESSION = "LogicalExpression"


class Node(BaseModel):
    """Base class for all syntax nodes."""

    type: NodeType
    range: tuple[int, int] = Field(description="Half-open character offsets")

    model_config = ConfigDict(frozen=True)

    @property
    def start(self) -> int:
        return self.range[0]

    @property
    def end(self) -> int:
        return self.range[1]

    def source(self, text: str) -> str:
        """The slice of ``text`` this node was parsed from."""
        return text[self.range[0] : self.range[1]]


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


class Identifier(Node):
    type: NodeType = NodeType.IDENTIFIER
    name: str


class RegexLiteral(BaseModel):
    """Pattern and flags of a native /pattern/flags literal."""

    pattern: str
    flags: str = ""

    model_config = ConfigDict(frozen=True)

    @property
    def global_(self) -> bool:
        return "g" in self.flags

    @property
    def multiline(self) -> bool:
        return "m" in self.flags

    @property
    def ignore_case(self) -> bool:
        return "i" in self.flags


class Literal(Node):
    """
    A primitive literal: string, number, boolean, null or regular expression.

    For regular expressions ``value`` is None and ``regex`` holds the parts.
    """

    type: NodeType = NodeType.LITERAL
    value: bool | int | float | str | None = None
    raw: str = ""
    regex: RegexLiteral | None = None


class ThisExpression(Node):
    type: NodeType = NodeType.THIS_EXPRESSION


class ArrayExpression(Node):
    """[a, b, c]; holes are None."""

    type: NodeType = NodeType.ARRAY_EXPRESSION
    elements: list[Node | None] = Field(default_factory=list)


class Property(Node):
    """key: value inside an object literal."""

    type: NodeType = NodeType.PROPERTY
    key: Node
    value: Node
    shorthand: bool = False

    @property
    def key_name(self) -> str:
        """The property name as a string, as JavaScript would coerce it."""
        if isinstance(self.key, Identifier):
            return self.key.name
        if isinstance(self.key, Literal):
            if isinstance(self.key.value, str):
                return self.key.value
            if isinstance(self.key.value, float) and self.key.value.is_integer():
                return str(int(self.key.value))
            return str(self.key.value)
        raise TypeError(f"Unsupported property key: {self.key.type}")


class ObjectExpression(Node):
    type: NodeType = NodeType.OBJECT_EXPRESSION
    properties: list[Property] = Field(default_factory=list)


class CallExpression(Node):
    type: NodeType = NodeType.CALL_EXPRESSION
    callee: Node
    arguments: list[Node] = Field(default_factory=list)


class NewExpression(Node):
    type: NodeType = NodeType.NEW_EXPRESSION
    callee: Node
    arguments: list[Node] = Field(default_factory=list)


class MemberExpression(Node):
    """target.member or target[member]."""

    type: NodeType = NodeType.MEMBER_EXPRESSION
    target: Node
    member: Node
    computed: bool = False


class UnaryExpression(Node):
    type: NodeType = NodeType.UNARY_EXPRESSION
    operator: str
    argument: Node


class BinaryExpression(Node):
    type: NodeType = NodeType.BINARY_EXPRESSION
    operator: str
    left: Node
    right: Node


class LogicalExpression(Node):
    type: NodeType = NodeType.LOGICAL_EXPRESSION
    operator: str
    left: Node
    right: Node


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


class VariableDeclarator(Node):
    type: NodeType = NodeType.VARIABLE_DECLARATOR
    id: Identifier
    init: Node | None = None


class VariableDeclaration(Node):
    type: NodeType = NodeType.VARIABLE_DECLARATION
    kind: str = "var"
    declarations: list[VariableDeclarator] = Field(default_factory=list)


class ExpressionStatement(Node):
    type: NodeType = NodeType.EXPRESSION_STATEMENT
    expression: Node


class BlockStatement(Node):
    type: NodeType = NodeType.BLOCK_STATEMENT
    body: list[Node] = Field(default_factory=list)


class EmptyStatement(Node):
    type: NodeType = NodeType.EMPTY_STATEMENT


class Program(Node):
    type: NodeType = NodeType.PROGRAM
    body: list[Node] = Field(default_factory=list)
