"""Parser for the annotation grammar.

Both annotation shapes are a comma-separated list of pairs:

    method = "POST", path = "/users"
    description = "Full name", example = "\\"Jane\\""

Keys are checked by position, so order is part of the grammar. Each payload
is parsed on its own; nothing is shared between calls.
"""

import re
from dataclasses import dataclass
from enum import Enum

from payload_collection.errors import MalformedAttribute
from payload_collection.parser.base import EndpointDescriptor, FieldDescriptor


class TokType(Enum):
    IDENT = "identifier"
    EQ = "`=`"
    STRING = "string literal"
    COMMA = "`,`"
    EOF = "end of attribute"


@dataclass
class Token:
    type: TokType
    value: str  # unescaped contents for STRING tokens
    text: str  # text as written in the payload
    col: int  # 1-based


class FieldGrammar(str, Enum):
    """Accepted shapes of a `field` annotation. One is selected per build."""

    EXAMPLE = "example"
    DESCRIBED = "described"


ENDPOINT_KEYS = ("method", "path")

FIELD_KEYS = {
    FieldGrammar.EXAMPLE: ("example",),
    FieldGrammar.DESCRIBED: ("description", "example"),
}

_TOKEN_RE = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
    | (?P<string>"(?:[^"\\]|\\.)*")
    | (?P<eq>=)
    | (?P<comma>,)
    """,
    re.VERBOSE | re.DOTALL,
)

_ESCAPES = {'"': '"', "\\": "\\", "'": "'", "n": "\n", "r": "\r", "t": "\t", "0": "\0"}


def tokenize(payload: str) -> list[Token]:
    """Split an annotation payload into tokens, ending with an EOF token."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(payload):
        match = _TOKEN_RE.match(payload, pos)
        if match is None:
            if payload[pos] == '"':
                raise MalformedAttribute("unterminated string literal", payload[pos:], pos + 1)
            raise MalformedAttribute("unexpected character", payload[pos], pos + 1)

        kind = match.lastgroup
        text = match.group()
        if kind == "ident":
            tokens.append(Token(TokType.IDENT, text, text, pos + 1))
        elif kind == "string":
            tokens.append(Token(TokType.STRING, _unescape(text, pos + 1), text, pos + 1))
        elif kind == "eq":
            tokens.append(Token(TokType.EQ, text, text, pos + 1))
        elif kind == "comma":
            tokens.append(Token(TokType.COMMA, text, text, pos + 1))
        pos = match.end()

    tokens.append(Token(TokType.EOF, "", "", len(payload) + 1))
    return tokens


def _unescape(literal: str, col: int) -> str:
    body = literal[1:-1]
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\":
            escaped = body[i + 1]
            if escaped not in _ESCAPES:
                raise MalformedAttribute("unknown escape sequence", "\\" + escaped, col + i + 1)
            out.append(_ESCAPES[escaped])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


class _Cursor:
    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def eat(self, ttype: TokType) -> Token:
        tok = self.peek()
        if tok.type != ttype:
            if tok.type == TokType.EOF:
                raise MalformedAttribute(f"expected {ttype.value}, but the attribute ended")
            raise MalformedAttribute(f"expected {ttype.value}", tok.text, tok.col)
        self.pos += 1
        return tok


def parse_pairs(payload: str) -> list[tuple[Token, Token]]:
    """Parse `key = "value"` pairs separated by commas, with nothing trailing."""
    cursor = _Cursor(tokenize(payload))
    pairs = []
    while True:
        key = cursor.eat(TokType.IDENT)
        cursor.eat(TokType.EQ)
        value = cursor.eat(TokType.STRING)
        pairs.append((key, value))
        if cursor.peek().type != TokType.COMMA:
            break
        cursor.eat(TokType.COMMA)
    cursor.eat(TokType.EOF)
    return pairs


def _expect_keys(pairs: list[tuple[Token, Token]], expected: tuple[str, ...]) -> None:
    message = "expected " + " and ".join(f"`{k}`" for k in expected)
    for i, (key, _) in enumerate(pairs):
        if i >= len(expected):
            raise MalformedAttribute(message + ", found an extra pair", key.text, key.col)
        if key.value != expected[i]:
            raise MalformedAttribute(message, key.text, key.col)
    if len(pairs) < len(expected):
        missing = ", ".join(f"`{k}`" for k in expected[len(pairs):])
        raise MalformedAttribute(f"{message}, missing {missing}")


def parse_endpoint(payload: str) -> EndpointDescriptor:
    """Parse `method = "...", path = "..."` into an EndpointDescriptor."""
    pairs = parse_pairs(payload)
    _expect_keys(pairs, ENDPOINT_KEYS)
    (_, method), (_, path) = pairs
    for tok in (method, path):
        if not tok.value:
            raise MalformedAttribute("`method` and `path` must not be empty", tok.text, tok.col)
    return EndpointDescriptor(method=method.value, path=path.value)


def parse_field(
    name: str, payload: str, grammar: FieldGrammar = FieldGrammar.DESCRIBED
) -> FieldDescriptor:
    """Parse a `field` annotation for the field called `name`.

    Only the shape belonging to `grammar` is accepted.
    """
    pairs = parse_pairs(payload)
    _expect_keys(pairs, FIELD_KEYS[grammar])
    values = {key.value: value.value for key, value in pairs}
    return FieldDescriptor(
        name=name,
        description=values.get("description", ""),
        example=values["example"],
    )
