"""Lexer and parser for workflow expressions (the text inside ``${{ }}``)."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterator
from dataclasses import dataclass


class ExprSyntaxError(ValueError):
    """Raised for text that is not a valid expression."""

    def __init__(self, message: str, offset: int) -> None:
        super().__init__(f"{message} at offset {offset}")
        self.message = message
        self.offset = offset


class TokenKind(enum.Enum):
    """Kinds of lexical tokens; operator kinds carry their symbol."""

    IDENT = "identifier"
    STRING = "string"
    INT = "integer"
    FLOAT = "float"
    LPAREN = "("
    RPAREN = ")"
    LBRACKET = "["
    RBRACKET = "]"
    DOT = "."
    STAR = "*"
    COMMA = ","
    NOT = "!"
    LESS = "<"
    LESS_EQ = "<="
    GREATER = ">"
    GREATER_EQ = ">="
    EQ = "=="
    NOT_EQ = "!="
    AND = "&&"
    OR = "||"
    END = "end of input"


@dataclass(frozen=True)
class Token:
    """A lexical token: its kind, its value and where it starts."""

    kind: TokenKind
    value: str
    offset: int


class CompareKind(enum.Enum):
    LESS = "<"
    LESS_EQ = "<="
    GREATER = ">"
    GREATER_EQ = ">="
    EQ = "=="
    NOT_EQ = "!="


class LogicalKind(enum.Enum):
    AND = "&&"
    OR = "||"


_TWO_CHAR_OPS = {
    kind.value: kind
    for kind in (
        TokenKind.LESS_EQ,
        TokenKind.GREATER_EQ,
        TokenKind.EQ,
        TokenKind.NOT_EQ,
        TokenKind.AND,
        TokenKind.OR,
    )
}
_ONE_CHAR_OPS = {
    kind.value: kind
    for kind in (
        TokenKind.LPAREN,
        TokenKind.RPAREN,
        TokenKind.LBRACKET,
        TokenKind.RBRACKET,
        TokenKind.DOT,
        TokenKind.STAR,
        TokenKind.COMMA,
        TokenKind.NOT,
        TokenKind.LESS,
        TokenKind.GREATER,
    )
}
_COMPARE_TOKENS = {
    TokenKind.LESS,
    TokenKind.LESS_EQ,
    TokenKind.GREATER,
    TokenKind.GREATER_EQ,
    TokenKind.EQ,
    TokenKind.NOT_EQ,
}

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_-]*")
_NUMBER_RE = re.compile(
    r"-?(?:0[xX][0-9a-fA-F]+|[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?)"
)
_NUMBER_TAIL_RE = re.compile(r"[A-Za-z0-9_.]")
_WHITESPACE = " \t\r\n"


def _is_hex(text: str) -> bool:
    return "0x" in text.lower()


def _lex_string(text: str, start: int) -> tuple[str, int]:
    parts: list[str] = []
    pos = start + 1
    while True:
        quote = text.find("'", pos)
        if quote < 0:
            raise ExprSyntaxError("unterminated string literal", start)
        parts.append(text[pos:quote])
        if text.startswith("''", quote):
            parts.append("'")
            pos = quote + 2
            continue
        return "".join(parts), quote + 1


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into tokens, ending with an END token.

    Lexing stops at the first ``}}`` outside a string literal; anything after
    it is ignored.
    """
    tokens: list[Token] = []
    pos = 0
    length = len(text)
    while True:
        while pos < length and text[pos] in _WHITESPACE:
            pos += 1
        if pos >= length:
            tokens.append(Token(TokenKind.END, "", pos))
            return tokens
        if text.startswith("}}", pos):
            tokens.append(Token(TokenKind.END, "}}", pos))
            return tokens

        char = text[pos]
        if char == "'":
            value, end = _lex_string(text, pos)
            tokens.append(Token(TokenKind.STRING, value, pos))
            pos = end
            continue

        if char.isdigit() or (
            char == "-" and pos + 1 < length and text[pos + 1].isdigit()
        ):
            match = _NUMBER_RE.match(text, pos)
            end = match.end()
            if end < length and _NUMBER_TAIL_RE.match(text[end]):
                raise ExprSyntaxError(
                    f"invalid number {text[pos:end + 1]!r}", pos
                )
            literal = match.group()
            is_float = not _is_hex(literal) and any(c in literal for c in ".eE")
            kind = TokenKind.FLOAT if is_float else TokenKind.INT
            tokens.append(Token(kind, literal, pos))
            pos = end
            continue

        match = _IDENT_RE.match(text, pos)
        if match:
            tokens.append(Token(TokenKind.IDENT, match.group(), pos))
            pos = match.end()
            continue

        pair = text[pos:pos + 2]
        if pair in _TWO_CHAR_OPS:
            tokens.append(Token(_TWO_CHAR_OPS[pair], pair, pos))
            pos += 2
            continue
        if char in _ONE_CHAR_OPS:
            tokens.append(Token(_ONE_CHAR_OPS[char], char, pos))
            pos += 1
            continue

        raise ExprSyntaxError(f"unexpected character {char!r}", pos)


class _Node:
    """Base of expression tree nodes."""

    def children(self) -> tuple[_Node, ...]:
        return ()


@dataclass(frozen=True)
class VariableNode(_Node):
    name: str


@dataclass(frozen=True)
class BoolNode(_Node):
    value: bool


@dataclass(frozen=True)
class NullNode(_Node):
    value: None = None


@dataclass(frozen=True)
class IntNode(_Node):
    value: int


@dataclass(frozen=True)
class FloatNode(_Node):
    value: float


@dataclass(frozen=True)
class StringNode(_Node):
    value: str


@dataclass(frozen=True)
class IndexAccessNode(_Node):
    operand: _Node
    index: _Node

    def children(self) -> tuple[_Node, ...]:
        return (self.operand, self.index)


@dataclass(frozen=True)
class ObjectDerefNode(_Node):
    receiver: _Node
    property: str

    def children(self) -> tuple[_Node, ...]:
        return (self.receiver,)


@dataclass(frozen=True)
class ArrayDerefNode(_Node):
    receiver: _Node

    def children(self) -> tuple[_Node, ...]:
        return (self.receiver,)


@dataclass(frozen=True)
class NotOpNode(_Node):
    operand: _Node

    def children(self) -> tuple[_Node, ...]:
        return (self.operand,)


@dataclass(frozen=True)
class CompareOpNode(_Node):
    kind: CompareKind
    left: _Node
    right: _Node

    def children(self) -> tuple[_Node, ...]:
        return (self.left, self.right)


@dataclass(frozen=True)
class LogicalOpNode(_Node):
    kind: LogicalKind
    left: _Node
    right: _Node

    def children(self) -> tuple[_Node, ...]:
        return (self.left, self.right)


@dataclass(frozen=True)
class FuncCallNode(_Node):
    callee: str
    args: tuple[_Node, ...] = ()

    def children(self) -> tuple[_Node, ...]:
        return self.args


class _Parser:
    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._pos = 0

    def _peek(self) -> Token:
        return self._tokens[self._pos]

    def _next(self) -> Token:
        token = self._tokens[self._pos]
        if token.kind is not TokenKind.END:
            self._pos += 1
        return token

    def _accept(self, kind: TokenKind) -> Token | None:
        if self._peek().kind is kind:
            return self._next()
        return None

    @staticmethod
    def _unexpected(token: Token, hint: str = "") -> ExprSyntaxError:
        what = (
            "end of input"
            if token.kind is TokenKind.END
            else f"token {token.value!r}"
        )
        message = f"unexpected {what}" + (f", {hint}" if hint else "")
        return ExprSyntaxError(message, token.offset)

    def expect(self, kind: TokenKind) -> Token:
        token = self._next()
        if token.kind is not kind:
            raise self._unexpected(token, f"expected {kind.value!r}")
        return token

    def parse_or(self) -> _Node:
        node = self._parse_and()
        while self._accept(TokenKind.OR):
            node = LogicalOpNode(LogicalKind.OR, node, self._parse_and())
        return node

    def _parse_and(self) -> _Node:
        node = self._parse_compare()
        while self._accept(TokenKind.AND):
            node = LogicalOpNode(LogicalKind.AND, node, self._parse_compare())
        return node

    def _parse_compare(self) -> _Node:
        left = self._parse_prefix()
        token = self._peek()
        if token.kind not in _COMPARE_TOKENS:
            return left
        self._next()
        return CompareOpNode(CompareKind(token.kind.value), left, self._parse_compare())

    def _parse_prefix(self) -> _Node:
        if self._accept(TokenKind.NOT):
            return NotOpNode(self._parse_prefix())
        return self._parse_postfix()

    def _parse_postfix(self) -> _Node:
        node = self._parse_primary()
        while True:
            if self._accept(TokenKind.DOT):
                token = self._next()
                if token.kind is TokenKind.IDENT:
                    node = ObjectDerefNode(node, token.value)
                elif token.kind is TokenKind.STAR:
                    node = ArrayDerefNode(node)
                else:
                    raise self._unexpected(token, "expected a property name or '*'")
            elif self._accept(TokenKind.LBRACKET):
                if self._accept(TokenKind.STAR):
                    self.expect(TokenKind.RBRACKET)
                    node = ArrayDerefNode(node)
                else:
                    index = self.parse_or()
                    self.expect(TokenKind.RBRACKET)
                    node = IndexAccessNode(node, index)
            else:
                return node

    def _parse_call(self, callee: str) -> FuncCallNode:
        args: list[_Node] = []
        if not self._accept(TokenKind.RPAREN):
            while True:
                args.append(self.parse_or())
                if self._accept(TokenKind.COMMA):
                    continue
                self.expect(TokenKind.RPAREN)
                break
        return FuncCallNode(callee, tuple(args))

    def _parse_primary(self) -> _Node:
        token = self._next()
        kind = token.kind
        if kind is TokenKind.LPAREN:
            node = self.parse_or()
            self.expect(TokenKind.RPAREN)
            return node
        if kind is TokenKind.IDENT:
            if self._accept(TokenKind.LPAREN):
                return self._parse_call(token.value)
            if token.value == "null":
                return NullNode()
            if token.value == "true":
                return BoolNode(True)
            if token.value == "false":
                return BoolNode(False)
            return VariableNode(token.value)
        if kind is TokenKind.INT:
            text = token.value
            return IntNode(int(text, 16) if _is_hex(text) else int(text))
        if kind is TokenKind.FLOAT:
            return FloatNode(float(token.value))
        if kind is TokenKind.STRING:
            return StringNode(token.value)
        raise self._unexpected(token)


def parse_expression(text: str) -> _Node:
    """Parse one expression, which ends at ``}}`` or the end of ``text``."""
    parser = _Parser(tokenize(text))
    node = parser.parse_or()
    parser.expect(TokenKind.END)
    return node


def walk(node: _Node) -> Iterator[_Node]:
    """Yield ``node`` and all nodes below it, depth first, parents first."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))