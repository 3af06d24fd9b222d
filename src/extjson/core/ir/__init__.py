"""
Data models for extjson: the syntax tree consumed by the validator and the
canonical values it produces.
"""

from extjson.core.ir.syntax import (
    ArrayExpression,
    BinaryExpression,
    BlockStatement,
    CallExpression,
    EmptyStatement,
    ExpressionStatement,
    Identifier,
    Literal,
    LogicalExpression,
    MemberExpression,
    NewExpression,
    Node,
    NodeType,
    ObjectExpression,
    Program,
    Property,
    RegexLiteral,
    ThisExpression,
    UnaryExpression,
    VariableDeclaration,
    VariableDeclarator,
)
from extjson.core.ir.values import (
    DBREF_DB,
    DBREF_ID,
    DBREF_REF,
    EXTENDED_TYPES,
    BinData,
    CanonicalValue,
    ExtendedValue,
    IsoDate,
    NaNMarker,
    ObjectId,
    Regex,
    is_dbref,
    is_extended,
)

__all__ = [
    # Syntax tree
    "ArrayExpression",
    "BinaryExpression",
    "BlockStatement",
    "CallExpression",
    "EmptyStatement",
    "ExpressionStatement",
    "Identifier",
    "Literal",
    "LogicalExpression",
    "MemberExpression",
    "NewExpression",
    "Node",
    "NodeType",
    "ObjectExpression",
    "Program",
    "Property",
    "RegexLiteral",
    "ThisExpression",
    "UnaryExpression",
    "VariableDeclaration",
    "VariableDeclarator",
    # Canonical values
    "DBREF_DB",
    "DBREF_ID",
    "DBREF_REF",
    "EXTENDED_TYPES",
    "BinData",
    "CanonicalValue",
    "ExtendedValue",
    "IsoDate",
    "NaNMarker",
    "ObjectId",
    "Regex",
    "is_dbref",
    "is_extended",
]
