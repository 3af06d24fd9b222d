"""
Whitelist validator and evaluator for extended JSON syntax trees.

The tree produced by the grammar is checked node by node against a closed
set of allowed node types and constructors, and evaluated directly into
canonical values as it is walked. Nothing is ever executed as code: the only
"calls" are the six constructors in ``literals.Constructor``.

Every disallowed node produces exactly one ``StructuralError``; the walk keeps
going so that all problems in a document are reported together.
"""

from __future__ import annotations

from typing import Any

from extjson.core.errors import (
    ErrorKind,
    ParseError,
    StructuralError,
    make_structural_error,
)
from extjson.core.ir.syntax import (
    ArrayExpression,
    CallExpression,
    Identifier,
    Literal,
    NewExpression,
    Node,
    NodeType,
    ObjectExpression,
    Program,
    Property,
    UnaryExpression,
    VariableDeclaration,
)
from extjson.core.ir.values import CanonicalValue, NaNMarker
from extjson.core.literals import Constructor, construct

# Node types a property value may have
ALLOWED_PROPERTY_VALUES: frozenset[NodeType] = frozenset(
    {
        NodeType.LITERAL,
        NodeType.OBJECT_EXPRESSION,
        NodeType.ARRAY_EXPRESSION,
        NodeType.NEW_EXPRESSION,
        NodeType.CALL_EXPRESSION,
        NodeType.UNARY_EXPRESSION,
    }
)

# Identifiers with a value of their own
_GLOBAL_IDENTIFIERS: dict[str, Any] = {
    "NaN": NaNMarker(),
    "Infinity": float("inf"),
    "undefined": None,
}

# Marks a node that failed validation
_INVALID: Any = object()


def check_shape(program: Program, source: str, offset: int = 0) -> ObjectExpression:
    """Check that ``program`` is a single ``var x = {...}`` declaration.

    Args:
        program: Tree parsed from ``source``.
        source: Text the tree was parsed from.
        offset: Length of the wrapper in front of the caller's text.

    Returns:
        The object expression to evaluate.

    Raises:
        StructuralError: On the first shape violation.
    """
    text = source[offset:]

    def fail(message: str, node: Node) -> StructuralError:
        return make_structural_error(message, text, node.start - offset, node.end - offset)

    if len(program.body) != 1:
        extra = program.body[1] if len(program.body) > 1 else program
        raise fail(f"Unexpected statement {extra.type}", extra)

    statement = program.body[0]
    if not isinstance(statement, VariableDeclaration):
        raise fail(f"Expecting {NodeType.VARIABLE_DECLARATION} but found {statement.type}", statement)

    declarations = statement.declarations
    if len(declarations) != 1:
        extra_node: Node = declarations[1] if len(declarations) > 1 else statement
        raise fail(f"Unexpected variable declarations {len(declarations)}", extra_node)

    init = declarations[0].init
    if not isinstance(init, ObjectExpression):
        found = init.type if init is not None else "nothing"
        raise fail(f"Expected an object expression, found {found}", init or declarations[0])

    return init


def validate(program: Program, source: str, *, offset: int = 0) -> CanonicalValue:
    """Validate ``program`` and evaluate it into a canonical value.

    Args:
        program: Tree parsed from ``source``.
        source: Text the tree was parsed from.
        offset: Length of the wrapper in front of the caller's text; error
            locations are reported relative to the text after it.

    Returns:
        The evaluated top-level object.

    Raises:
        ParseError: With ``kind=ErrorKind.STRUCTURAL`` and one error per
            offending node.
    """
    try:
        root = check_shape(program, source, offset)
    except StructuralError as e:
        raise ParseError([e], ErrorKind.STRUCTURAL) from e

    errors: list[StructuralError] = []
    value = _Evaluator(source, offset).evaluate(root, errors)
    if errors:
        raise ParseError(list(errors), ErrorKind.STRUCTURAL)
    return value


class _Evaluator:
    """Walks a syntax tree, evaluating allowed nodes and recording errors."""

    def __init__(self, source: str, offset: int) -> None:
        self.source = source
        self.offset = offset
        self.text = source[offset:]

    def error(
        self,
        errors: list[StructuralError],
        node: Node,
        message: str,
        error_cls: type[StructuralError] = StructuralError,
    ) -> Any:
        errors.append(
            make_structural_error(
                message,
                self.text,
                node.start - self.offset,
                node.end - self.offset,
                error_cls,
            )
        )
        return _INVALID

    def evaluate(self, node: Node, errors: list[StructuralError]) -> Any:
        match node:
            case ObjectExpression():
                return self.evaluate_object(node, errors)
            case ArrayExpression():
                return self.evaluate_array(node, errors)
            case Literal():
                return self.evaluate_literal(node, errors)
            case Identifier():
                return self.evaluate_identifier(node, errors)
            case UnaryExpression():
                return self.evaluate_unary(node, errors)
            case CallExpression() | NewExpression():
                return self.evaluate_call(node, errors)
            case _:
                return self.error(errors, node, f"Unexpected {node.type}")

    def evaluate_object(self, node: ObjectExpression, errors: list[StructuralError]) -> Any:
        result: dict[str, CanonicalValue] = {}
        failed = False
        for prop in node.properties:
            value = self.evaluate_property(prop, errors)
            if value is _INVALID:
                failed = True
            else:
                result[prop.key_name] = value
        return _INVALID if failed else result

    def evaluate_property(self, prop: Property, errors: list[StructuralError]) -> Any:
        value = prop.value
        if isinstance(value, Identifier) and value.name == "NaN":
            return NaNMarker()
        if value.type not in ALLOWED_PROPERTY_VALUES:
            return self.error(errors, value, f"Unexpected value: {value.source(self.source)}")
        return self.evaluate(value, errors)

    def evaluate_array(self, node: ArrayExpression, errors: list[StructuralError]) -> Any:
        result: list[CanonicalValue] = []
        failed = False
        for element in node.elements:
            # Holes read as undefined
            value = None if element is None else self.evaluate(element, errors)
            if value is _INVALID:
                failed = True
            else:
                result.append(value)
        return _INVALID if failed else result

    def evaluate_literal(self, node: Literal, errors: list[StructuralError]) -> Any:
        if node.regex is None:
            return node.value

        # /pattern/flags is evaluated as RegExp("pattern", "flags")
        regex = node.regex
        flags = ""
        if regex.global_:
            flags += "g"
        if regex.multiline:
            flags += "m"
        if regex.ignore_case:
            flags += "i"
        call = CallExpression(
            callee=Identifier(name=Constructor.REGEXP.value, range=node.range),
            arguments=[
                Literal(value=regex.pattern, range=node.range),
                Literal(value=flags, range=node.range),
            ],
            range=node.range,
        )
        return self.evaluate_call(call, errors)

    def evaluate_identifier(self, node: Identifier, errors: list[StructuralError]) -> Any:
        if node.name in _GLOBAL_IDENTIFIERS:
            return _GLOBAL_IDENTIFIERS[node.name]
        return self.error(errors, node, f"Unexpected identifier {node.name}")

    def evaluate_unary(self, node: UnaryExpression, errors: list[StructuralError]) -> Any:
        operator = node.operator
        if operator in ("typeof", "void", "delete"):
            return self.error(errors, node, f"Unexpected operator {operator}")

        operand = self.evaluate(node.argument, errors)
        if operand is _INVALID:
            return _INVALID

        is_number = isinstance(operand, (int, float)) and not isinstance(operand, bool)
        is_nan = isinstance(operand, NaNMarker)

        if operator == "-" and is_number:
            return -operand
        if operator == "+" and is_number:
            return operand
        if operator in ("-", "+") and is_nan:
            return operand
        if operator == "~" and (is_number or is_nan):
            return ~_to_int32(operand)
        is_primitive = operand is None or is_nan or isinstance(operand, (bool, int, float, str))
        if operator == "!" and is_primitive:
            return not _truthy(operand)

        return self.error(
            errors,
            node,
            f"Unexpected operand for {operator}: {node.argument.source(self.source)}",
        )

    def evaluate_call(
        self, node: CallExpression | NewExpression, errors: list[StructuralError]
    ) -> Any:
        callee = node.callee
        constructor = None
        if isinstance(callee, Identifier):
            constructor = Constructor.lookup(callee.name)
        if constructor is None:
            name = callee.name if isinstance(callee, Identifier) else callee.source(self.source)
            return self.error(errors, node, f"bad call: {name}")

        args = [self.evaluate(arg, errors) for arg in node.arguments]
        if any(arg is _INVALID for arg in args):
            return _INVALID

        try:
            return construct(constructor, args)
        except StructuralError as e:
            return self.error(errors, node, e.message, type(e))


def _truthy(value: Any) -> bool:
    if isinstance(value, NaNMarker):
        return False
    return bool(value)


def _to_int32(value: Any) -> int:
    """JavaScript ToInt32."""
    if isinstance(value, NaNMarker) or value in (float("inf"), float("-inf")):
        return 0
    number = int(value) & 0xFFFFFFFF
    return number - 0x100000000 if number >= 0x80000000 else number
