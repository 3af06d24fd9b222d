"""
Recursive descent parser for the JavaScript expression subset.

The grammar is wider than what the validator accepts: it also builds nodes
such as member access and binary operators so that they can be reported by
type ("Unexpected MemberExpression") instead of failing as opaque syntax
errors.

Grammar (precedence low to high):
    program      → statement* EOF
    statement    → ("var" | "let" | "const") declarator ("," declarator)* ";"?
                 | ";" | "{" statement* "}" | expr ";"?
    declarator   → IDENT ("=" expr)?
    expr         → binary
    binary       → unary (binop unary)*        (precedence climbing)
    unary        → ("-" | "+" | "!" | "~" | "typeof" | "void" | "delete") unary
                 | postfix
    postfix      → (new_expr | primary) ("." name | "[" expr "]" | arguments)*
    new_expr     → "new" (new_expr | primary) ("." name | "[" expr "]")* arguments?
    primary      → literal | IDENT | "this" | object | array | "(" expr ")"
    object       → "{" (property ("," property)* ","?)? "}"
    property     → (name | STRING | NUMBER) ":" expr | IDENT
    array        → "[" (expr? ",")* expr? "]"
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from extjson.core.config import DEFAULT_MAX_DEPTH
from extjson.core.grammar.tokenizer import (
    GrammarTokenError,
    Token,
    TokenKind,
    tokenize,
)
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
    ObjectExpression,
    Program,
    Property,
    RegexLiteral,
    ThisExpression,
    UnaryExpression,
    VariableDeclaration,
    VariableDeclarator,
)


class GrammarParseError(Exception):
    """Error during parsing."""

    def __init__(self, message: str, pos: int = 0, end: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.pos = pos
        self.end = pos + 1 if end is None else end


@dataclass(frozen=True)
class SyntaxIssue:
    """A syntax error reported by the grammar, with offsets into the source."""

    message: str
    start: int
    end: int


@dataclass
class GrammarResult:
    """Outcome of ``parse_program``: a tree (if one was built) and all issues."""

    program: Program | None
    errors: list[SyntaxIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.program is not None and not self.errors


_BINARY_PRECEDENCE: dict[TokenKind, int] = {
    TokenKind.OR: 1,
    TokenKind.AND: 2,
    TokenKind.EQ: 3,
    TokenKind.NE: 3,
    TokenKind.STRICT_EQ: 3,
    TokenKind.STRICT_NE: 3,
    TokenKind.LT: 4,
    TokenKind.GT: 4,
    TokenKind.LE: 4,
    TokenKind.GE: 4,
    TokenKind.PLUS: 5,
    TokenKind.MINUS: 5,
    TokenKind.STAR: 6,
    TokenKind.SLASH: 6,
    TokenKind.PERCENT: 6,
}

_UNARY_OPERATORS = frozenset(
    {
        TokenKind.MINUS,
        TokenKind.PLUS,
        TokenKind.BANG,
        TokenKind.TILDE,
        TokenKind.TYPEOF,
        TokenKind.VOID,
        TokenKind.DELETE,
    }
)

# Tokens usable as a property name: identifiers and every keyword.
_NAME_KINDS = frozenset(
    {
        TokenKind.IDENT,
        TokenKind.VAR,
        TokenKind.LET,
        TokenKind.CONST,
        TokenKind.NEW,
        TokenKind.NULL,
        TokenKind.TRUE,
        TokenKind.FALSE,
        TokenKind.THIS,
        TokenKind.TYPEOF,
        TokenKind.VOID,
        TokenKind.DELETE,
        TokenKind.FUNCTION,
    }
)

_DECLARATION_KINDS = (TokenKind.VAR, TokenKind.LET, TokenKind.CONST)

# Expression nesting allowed beyond the container limit: the leaf value, a
# constructor call around it and unary signs on both
_EXPRESSION_SLACK = 8


class _Parser:
    """Recursive descent parser over a token list."""

    def __init__(self, tokens: list[Token], source: str, max_depth: int) -> None:
        self.tokens = tokens
        self.source = source
        self.max_depth = max_depth
        self.max_expression_depth = max_depth + _EXPRESSION_SLACK
        self.depth = 0
        self.expression_depth = 0
        self.pos = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]  # EOF

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def expect(self, kind: TokenKind) -> Token:
        if self.current.kind != kind:
            raise self.unexpected(self.current)
        return self.advance()

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    def unexpected(self, tok: Token) -> GrammarParseError:
        if tok.kind == TokenKind.EOF:
            return GrammarParseError("Unexpected end of input", tok.start, tok.end)
        if tok.kind == TokenKind.IDENT:
            message = f"Unexpected identifier {tok.value}"
        elif tok.kind == TokenKind.NUMBER:
            message = "Unexpected number"
        elif tok.kind == TokenKind.STRING:
            message = "Unexpected string"
        else:
            message = f"Unexpected token {self.source[tok.start : tok.end]}"
        return GrammarParseError(message, tok.start, tok.end)

    @contextmanager
    def nested(self, tok: Token) -> Iterator[None]:
        """One level of object, array or block nesting."""
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                raise GrammarParseError(
                    f"Maximum nesting depth of {self.max_depth} exceeded", tok.start, tok.end
                )
            yield
        finally:
            self.depth -= 1

    @contextmanager
    def nested_expression(self, tok: Token) -> Iterator[None]:
        """One level of expression, unary or ``new`` nesting."""
        self.expression_depth += 1
        try:
            if self.expression_depth > self.max_expression_depth:
                raise GrammarParseError(
                    f"Maximum expression nesting of {self.max_expression_depth} exceeded",
                    tok.start,
                    tok.end,
                )
            yield
        finally:
            self.expression_depth -= 1

    # -- Statements --

    def parse_program(self) -> Program:
        body: list[Node] = []
        while self.current.kind != TokenKind.EOF:
            body.append(self.parse_statement())
        return Program(body=body, range=(0, len(self.source)))

    def parse_statement(self) -> Node:
        tok = self.current
        if tok.kind in _DECLARATION_KINDS:
            return self.parse_variable_declaration()
        if tok.kind == TokenKind.SEMICOLON:
            self.advance()
            return EmptyStatement(range=(tok.start, tok.end))
        if tok.kind == TokenKind.LBRACE:
            return self.parse_block()

        expression = self.parse_expression()
        end = self.consume_semicolon(expression.end)
        return ExpressionStatement(expression=expression, range=(expression.start, end))

    def parse_variable_declaration(self) -> VariableDeclaration:
        kind_tok = self.advance()
        declarations = [self.parse_declarator()]
        while self.match(TokenKind.COMMA):
            declarations.append(self.parse_declarator())
        end = self.consume_semicolon(declarations[-1].end)
        return VariableDeclaration(
            kind=kind_tok.value,
            declarations=declarations,
            range=(kind_tok.start, end),
        )

    def parse_declarator(self) -> VariableDeclarator:
        name_tok = self.expect(TokenKind.IDENT)
        ident = Identifier(name=name_tok.value, range=(name_tok.start, name_tok.end))
        init = None
        if self.match(TokenKind.ASSIGN):
            init = self.parse_expression()
        end = init.end if init is not None else ident.end
        return VariableDeclarator(id=ident, init=init, range=(ident.start, end))

    def parse_block(self) -> BlockStatement:
        open_tok = self.expect(TokenKind.LBRACE)
        body: list[Node] = []
        with self.nested(open_tok):
            while self.current.kind not in (TokenKind.RBRACE, TokenKind.EOF):
                body.append(self.parse_statement())
        close_tok = self.expect(TokenKind.RBRACE)
        return BlockStatement(body=body, range=(open_tok.start, close_tok.end))

    def consume_semicolon(self, end: int) -> int:
        """Consume ";" or accept an automatically inserted one."""
        tok = self.current
        if tok.kind == TokenKind.SEMICOLON:
            self.advance()
            return tok.end
        if tok.kind in (TokenKind.EOF, TokenKind.RBRACE) or tok.newline_before:
            return end
        raise self.unexpected(tok)

    # -- Expressions --

    def parse_expression(self) -> Node:
        with self.nested_expression(self.current):
            return self.parse_binary(0)

    def parse_binary(self, min_precedence: int) -> Node:
        left = self.parse_unary()
        while True:
            precedence = _BINARY_PRECEDENCE.get(self.current.kind)
            if precedence is None or precedence <= min_precedence:
                return left
            op = self.advance()
            right = self.parse_binary(precedence)
            node_cls = (
                LogicalExpression if op.kind in (TokenKind.AND, TokenKind.OR) else BinaryExpression
            )
            left = node_cls(
                operator=op.value,
                left=left,
                right=right,
                range=(left.start, right.end),
            )

    def parse_unary(self) -> Node:
        if self.current.kind in _UNARY_OPERATORS:
            op = self.advance()
            with self.nested_expression(op):
                argument = self.parse_unary()
            return UnaryExpression(
                operator=op.value,
                argument=argument,
                range=(op.start, argument.end),
            )
        return self.parse_postfix()

    def parse_postfix(self) -> Node:
        if self.current.kind == TokenKind.NEW:
            expr = self.parse_new()
        else:
            expr = self.parse_primary()

        while True:
            if self.current.kind in (TokenKind.DOT, TokenKind.LBRACKET):
                expr = self.parse_member(expr)
            elif self.current.kind == TokenKind.LPAREN:
                arguments, end = self.parse_arguments()
                expr = CallExpression(callee=expr, arguments=arguments, range=(expr.start, end))
            else:
                return expr

    def parse_new(self) -> Node:
        new_tok = self.expect(TokenKind.NEW)
        with self.nested_expression(new_tok):
            if self.current.kind == TokenKind.NEW:
                callee = self.parse_new()
            else:
                callee = self.parse_primary()
            while self.current.kind in (TokenKind.DOT, TokenKind.LBRACKET):
                callee = self.parse_member(callee)

        arguments: list[Node] = []
        end = callee.end
        if self.current.kind == TokenKind.LPAREN:
            arguments, end = self.parse_arguments()
        return NewExpression(callee=callee, arguments=arguments, range=(new_tok.start, end))

    def parse_member(self, target: Node) -> MemberExpression:
        if self.match(TokenKind.DOT):
            name_tok = self.current
            if name_tok.kind not in _NAME_KINDS:
                raise self.unexpected(name_tok)
            self.advance()
            member: Node = Identifier(name=name_tok.value, range=(name_tok.start, name_tok.end))
            return MemberExpression(
                target=target,
                member=member,
                computed=False,
                range=(target.start, name_tok.end),
            )

        self.expect(TokenKind.LBRACKET)
        member = self.parse_expression()
        close_tok = self.expect(TokenKind.RBRACKET)
        return MemberExpression(
            target=target,
            member=member,
            computed=True,
            range=(target.start, close_tok.end),
        )

    def parse_arguments(self) -> tuple[list[Node], int]:
        """'(' (expr (',' expr)* ','?)? ')' → (arguments, end offset)"""
        self.expect(TokenKind.LPAREN)
        arguments: list[Node] = []
        while self.current.kind != TokenKind.RPAREN:
            arguments.append(self.parse_expression())
            if not self.match(TokenKind.COMMA):
                break
        close_tok = self.expect(TokenKind.RPAREN)
        return arguments, close_tok.end

    def parse_primary(self) -> Node:
        tok = self.current

        if tok.kind == TokenKind.LBRACE:
            return self.parse_object()
        if tok.kind == TokenKind.LBRACKET:
            return self.parse_array()

        if tok.kind == TokenKind.LPAREN:
            self.advance()
            expr = self.parse_expression()
            self.expect(TokenKind.RPAREN)
            return expr

        span = (tok.start, tok.end)
        raw = self.source[tok.start : tok.end]

        if tok.kind in (TokenKind.NUMBER, TokenKind.STRING):
            self.advance()
            return Literal(value=tok.value, raw=raw, range=span)
        if tok.kind == TokenKind.REGEX:
            self.advance()
            pattern, flags = tok.value
            return Literal(value=None, raw=raw, regex=RegexLiteral(pattern=pattern, flags=flags), range=span)
        if tok.kind == TokenKind.NULL:
            self.advance()
            return Literal(value=None, raw=raw, range=span)
        if tok.kind in (TokenKind.TRUE, TokenKind.FALSE):
            self.advance()
            return Literal(value=tok.kind == TokenKind.TRUE, raw=raw, range=span)
        if tok.kind == TokenKind.THIS:
            self.advance()
            return ThisExpression(range=span)
        if tok.kind == TokenKind.IDENT:
            self.advance()
            return Identifier(name=tok.value, range=span)

        raise self.unexpected(tok)

    def parse_object(self) -> ObjectExpression:
        open_tok = self.expect(TokenKind.LBRACE)
        properties: list[Property] = []
        with self.nested(open_tok):
            while self.current.kind != TokenKind.RBRACE:
                properties.append(self.parse_property())
                if not self.match(TokenKind.COMMA):
                    break
        close_tok = self.expect(TokenKind.RBRACE)
        return ObjectExpression(properties=properties, range=(open_tok.start, close_tok.end))

    def parse_property(self) -> Property:
        tok = self.current
        span = (tok.start, tok.end)

        key: Node
        if tok.kind in _NAME_KINDS:
            key = Identifier(name=tok.value, range=span)
        elif tok.kind in (TokenKind.STRING, TokenKind.NUMBER):
            key = Literal(value=tok.value, raw=self.source[tok.start : tok.end], range=span)
        else:
            raise self.unexpected(tok)
        self.advance()

        if self.match(TokenKind.COLON):
            value = self.parse_expression()
            return Property(key=key, value=value, range=(key.start, value.end))

        # Shorthand {name}
        if tok.kind == TokenKind.IDENT and self.current.kind in (TokenKind.COMMA, TokenKind.RBRACE):
            value = Identifier(name=tok.value, range=span)
            return Property(key=key, value=value, shorthand=True, range=span)

        raise self.unexpected(self.current)

    def parse_array(self) -> ArrayExpression:
        open_tok = self.expect(TokenKind.LBRACKET)
        elements: list[Node | None] = []
        with self.nested(open_tok):
            while self.current.kind != TokenKind.RBRACKET:
                if self.match(TokenKind.COMMA):
                    elements.append(None)
                    continue
                elements.append(self.parse_expression())
                if not self.match(TokenKind.COMMA):
                    break
        close_tok = self.expect(TokenKind.RBRACKET)
        return ArrayExpression(elements=elements, range=(open_tok.start, close_tok.end))


def parse_program(
    source: str,
    *,
    tolerant: bool = True,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> GrammarResult:
    """Parse source text into a ``Program`` tree.

    Args:
        source: Text to parse.
        tolerant: Collect lexical errors and keep going instead of raising on
            the first one. Grammar errors always stop the parse and are
            reported in the result.
        max_depth: Maximum nesting of objects, arrays and blocks. Expression
            nesting (parentheses, calls, unary operators) may go a few levels
            deeper so that any leaf value fits inside the innermost container.

    Returns:
        GrammarResult with the tree (None if parsing stopped) and all errors.

    Raises:
        GrammarParseError: Outside tolerant mode, on the first error.
    """
    token_errors: list[GrammarTokenError] | None = [] if tolerant else None
    try:
        tokens = tokenize(source, token_errors)
    except GrammarTokenError as e:
        raise GrammarParseError(e.message, e.pos, e.end) from e

    errors = [SyntaxIssue(e.message, e.pos, e.end) for e in token_errors or []]

    parser = _Parser(tokens, source, max_depth)
    try:
        program: Program | None = parser.parse_program()
    except GrammarParseError as e:
        if not tolerant:
            raise
        errors.append(SyntaxIssue(e.message, e.pos, e.end))
        program = None

    return GrammarResult(program=program, errors=errors)
