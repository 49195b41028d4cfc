# Google SheetDB MCP Server
# File: query/lexer.py
# Version: v1

"""Single-pass lexer for the SheetDB statement language.

Bare words (identifiers, keywords, unquoted numbers and dates such as
``2024-03-01``) are a single ``WORD`` token; keywords are recognised by the
parser, case-insensitively. Quoted text (``'...'``, ``"..."`` or
backticks) becomes a ``STRING`` token with the surrounding quotes trimmed;
there is no escaping inside quotes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional

from ..errors import MalformedStatement


class TT(Enum):
    WORD = auto()
    STRING = auto()
    STAR = auto()
    COMMA = auto()
    LPAREN = auto()
    RPAREN = auto()
    EQ = auto()
    CMP = auto()  # != <> < > <= >=, rejected by the WHERE grammar
    SEMI = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    type: TT
    text: str
    pos: int

    def is_keyword(self, *words: str) -> bool:
        return self.type is TT.WORD and self.text.upper() in words

    def describe(self) -> str:
        if self.type is TT.EOF:
            return "end of statement"
        return repr(self.text)


_SINGLES = {
    "*": TT.STAR,
    ",": TT.COMMA,
    "(": TT.LPAREN,
    ")": TT.RPAREN,
    ";": TT.SEMI,
}

_QUOTES = {"'", '"', "`"}

_BREAKERS = set(_SINGLES) | _QUOTES | {"=", "!", "<", ">"}


class Lexer:
    def __init__(self, src: str) -> None:
        self.src = src
        self.pos = 0

    def tokenise(self) -> List[Token]:
        out: List[Token] = []
        while True:
            tok = self._next()
            out.append(tok)
            if tok.type is TT.EOF:
                return out

    def _peek(self, offset: int = 0) -> Optional[str]:
        p = self.pos + offset
        return self.src[p] if p < len(self.src) else None

    def _next(self) -> Token:
        while self.pos < len(self.src) and self.src[self.pos].isspace():
            self.pos += 1

        start = self.pos
        ch = self._peek()
        if ch is None:
            return Token(TT.EOF, "", start)

        if ch in _SINGLES:
            self.pos += 1
            return Token(_SINGLES[ch], ch, start)

        two = self.src[start:start + 2]
        if two in ("!=", "<>", "<=", ">="):
            self.pos += 2
            return Token(TT.CMP, two, start)
        if ch == "=":
            self.pos += 1
            return Token(TT.EQ, ch, start)
        if ch in ("<", ">"):
            self.pos += 1
            return Token(TT.CMP, ch, start)

        if ch in _QUOTES:
            end = self.src.find(ch, start + 1)
            if end < 0:
                raise MalformedStatement(
                    f"Unterminated quoted value starting at position {start}.",
                    statement=self.src,
                    position=start,
                )
            self.pos = end + 1
            return Token(TT.STRING, self.src[start + 1:end], start)

        if ch == "!":
            raise MalformedStatement(
                f"Unexpected character '!' at position {start}.",
                statement=self.src,
                position=start,
            )

        while self.pos < len(self.src):
            c = self.src[self.pos]
            if c.isspace() or c in _BREAKERS:
                break
            self.pos += 1
        return Token(TT.WORD, self.src[start:self.pos], start)
