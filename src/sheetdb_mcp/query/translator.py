# Google SheetDB MCP Server
# File: query/translator.py
# Version: v1

"""Recursive-descent translator from one SQL-like statement to a ``Command``.

Grammar (keywords case-insensitive, optional trailing ``;``)::

    CREATE TABLE name ( col {, col} )
    DROP TABLE name
    TRUNCATE TABLE name
    INSERT INTO name ( col {, col} ) VALUES ( val {, val} ) {, ( ... )}
    SELECT ( * | col {, col} ) FROM name
        [WHERE cond {AND cond}] [ORDER BY col [ASC|DESC] {, ...}]
        [LIMIT n] [OFFSET n]
    UPDATE name SET col = val {, col = val} WHERE cond {AND cond}
    DELETE FROM name WHERE cond {AND cond}
    GET TABLES
    SHOW TABLE DETAIL

    cond := col = val

WHERE in text only supports ``=``; the richer operators are reachable
through structured filters. SELECT clauses must appear in the order shown.
A clause that appears out of that order is skipped, not rejected.
Translation fails fast: any other deviation raises ``MalformedStatement``
and an unknown leading keyword raises ``UnsupportedSyntax``.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional

from ..commands import (
    Command,
    CreateTable,
    Delete,
    DropTable,
    GetTables,
    InsertMany,
    InsertOne,
    Select,
    ShowTableDetail,
    TruncateTable,
    Update,
)
from ..errors import MalformedStatement, UnsupportedSyntax
from ..models import DESC, Filter, Literal, OrderKey, SelectOptions
from .lexer import TT, Lexer, Token

logger = logging.getLogger(__name__)

LEADING_KEYWORDS = (
    "CREATE",
    "DROP",
    "TRUNCATE",
    "INSERT",
    "SELECT",
    "UPDATE",
    "DELETE",
    "GET",
    "SHOW",
)

# Relative order SELECT clauses must follow.
_SELECT_CLAUSES = ("WHERE", "ORDER", "LIMIT", "OFFSET")

_LEADING_WORD_RE = re.compile(r"^\s*([A-Za-z]+)")


class Parser:
    def __init__(self, text: str, tokens: List[Token]) -> None:
        self.text = text
        self.tokens = tokens
        self.pos = 0

    # -- helpers -----------------------------------------------------------

    def _cur(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        tok = self._cur()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def _error(self, expected: str) -> MalformedStatement:
        tok = self._cur()
        return MalformedStatement(
            f"Expected {expected} but found {tok.describe()} at position {tok.pos}.",
            statement=self.text,
            position=tok.pos,
        )

    def _eat(self, tt: TT, expected: str) -> Token:
        if self._cur().type is not tt:
            raise self._error(expected)
        return self._advance()

    def _eat_if(self, tt: TT) -> bool:
        if self._cur().type is tt:
            self._advance()
            return True
        return False

    def _eat_keyword(self, *words: str) -> Token:
        if not self._cur().is_keyword(*words):
            raise self._error(" or ".join(words))
        return self._advance()

    def _eat_keyword_if(self, word: str) -> bool:
        if self._cur().is_keyword(word):
            self._advance()
            return True
        return False

    def _name(self, what: str = "identifier") -> str:
        tok = self._cur()
        if tok.type in (TT.WORD, TT.STRING) and tok.text:
            self._advance()
            return tok.text
        raise self._error(what)

    def _value(self) -> str:
        tok = self._cur()
        if tok.type in (TT.WORD, TT.STRING):
            self._advance()
            return tok.text
        raise self._error("a value")

    def _comma_list(self, item: Callable[[], str]) -> List[str]:
        out = [item()]
        while self._eat_if(TT.COMMA):
            out.append(item())
        return out

    def _parenthesised(self, item: Callable[[], str]) -> List[str]:
        self._eat(TT.LPAREN, "'('")
        out = self._comma_list(item)
        self._eat(TT.RPAREN, "')'")
        return out

    def _count(self, clause: str) -> int:
        tok = self._cur()
        if tok.type is TT.WORD and tok.text.isdigit():
            self._advance()
            return int(tok.text)
        raise self._error(f"a non-negative integer after {clause}")

    def _finish(self) -> None:
        self._eat_if(TT.SEMI)
        if self._cur().type is not TT.EOF:
            raise self._error("end of statement")

    # -- entry -------------------------------------------------------------

    def parse(self) -> Command:
        tok = self._cur()
        handlers: Dict[str, Callable[[], Command]] = {
            "CREATE": self._create,
            "DROP": self._drop,
            "TRUNCATE": self._truncate,
            "INSERT": self._insert,
            "SELECT": self._select,
            "UPDATE": self._update,
            "DELETE": self._delete,
            "GET": self._get,
            "SHOW": self._show,
        }
        handler = handlers.get(tok.text.upper()) if tok.type is TT.WORD else None
        if handler is None:
            raise UnsupportedSyntax(
                f"Unsupported statement: {self.text.strip()[:80]!r}. "
                f"Supported statements start with {', '.join(LEADING_KEYWORDS)}.",
                statement=self.text,
                position=tok.pos,
            )
        self._advance()
        command = handler()
        self._finish()
        return command

    # -- statements --------------------------------------------------------

    def _create(self) -> Command:
        self._eat_keyword("TABLE")
        table = self._name("table name")
        columns = self._parenthesised(lambda: self._name("column name"))
        return CreateTable(columns=columns, table=table)

    def _drop(self) -> Command:
        self._eat_keyword("TABLE")
        return DropTable(table=self._name("table name"))

    def _truncate(self) -> Command:
        self._eat_keyword("TABLE")
        return TruncateTable(table=self._name("table name"))

    def _insert(self) -> Command:
        self._eat_keyword("INTO")
        table = self._name("table name")
        columns = self._parenthesised(lambda: self._name("column name"))
        self._eat_keyword("VALUES")

        tuples = [self._parenthesised(self._value)]
        while self._eat_if(TT.COMMA):
            tuples.append(self._parenthesised(self._value))

        # Column/value counts are not checked against each other.
        rows = [dict(zip(columns, values)) for values in tuples]
        if len(rows) == 1:
            return InsertOne(obj=rows[0], table=table)
        return InsertMany(rows=rows, table=table)

    def _select(self) -> Command:
        fields: Optional[List[str]] = None
        if not self._eat_if(TT.STAR):
            fields = self._comma_list(lambda: self._name("column name or '*'"))
        self._eat_keyword("FROM")
        table = self._name("table name")

        where: Filter = {}
        order_by: List[OrderKey] = []
        limit: Optional[int] = None
        offset: Optional[int] = None

        if self._eat_keyword_if("WHERE"):
            where = self._conditions()
        if self._eat_keyword_if("ORDER"):
            self._eat_keyword("BY")
            order_by = self._order_keys()
        if self._eat_keyword_if("LIMIT"):
            limit = self._count("LIMIT")
        if self._eat_keyword_if("OFFSET"):
            offset = self._count("OFFSET")

        self._skip_out_of_order_clauses()

        options = SelectOptions(order_by=order_by, limit=limit, offset=offset, select_fields=fields)
        return Select(where=where, options=options, table=table)

    def _update(self) -> Command:
        table = self._name("table name")
        self._eat_keyword("SET")
        new_data: Dict[str, str] = {}
        while True:
            column = self._name("column name")
            self._eat(TT.EQ, "'='")
            new_data[column] = self._value()
            if not self._eat_if(TT.COMMA):
                break
        self._eat_keyword("WHERE")
        return Update(where=self._conditions(), new_data=new_data, table=table)

    def _delete(self) -> Command:
        self._eat_keyword("FROM")
        table = self._name("table name")
        self._eat_keyword("WHERE")
        return Delete(where=self._conditions(), table=table)

    def _get(self) -> Command:
        self._eat_keyword("TABLES")
        return GetTables()

    def _show(self) -> Command:
        self._eat_keyword("TABLE")
        self._eat_keyword("DETAIL")
        return ShowTableDetail()

    # -- clauses -----------------------------------------------------------

    def _conditions(self) -> Filter:
        where: Filter = {}
        while True:
            column = self._name("column name")
            if self._cur().type is TT.CMP:
                raise self._error("'=' (only equality is supported in WHERE)")
            self._eat(TT.EQ, "'='")
            where[column] = Literal(self._value())
            if not self._eat_keyword_if("AND"):
                return where

    def _order_keys(self) -> List[OrderKey]:
        keys: List[OrderKey] = []
        while True:
            column = self._name("column name")
            direction = "asc"
            if self._cur().is_keyword("ASC", "DESC"):
                direction = DESC if self._advance().text.upper() == "DESC" else "asc"
            keys.append(OrderKey(column=column, direction=direction))
            if not self._eat_if(TT.COMMA):
                return keys

    def _skip_out_of_order_clauses(self) -> None:
        while self._cur().is_keyword(*_SELECT_CLAUSES):
            start = self._advance()
            while self._cur().type not in (TT.EOF, TT.SEMI) and not self._cur().is_keyword(*_SELECT_CLAUSES):
                self._advance()
            logger.debug(
                "Ignoring out-of-order %s clause at position %d in %r.",
                start.text.upper(),
                start.pos,
                self.text,
            )


def translate(text: str) -> Command:
    """Translate one statement into a ``Command``.

    Raises ``UnsupportedSyntax`` when no statement shape is recognised and
    ``MalformedStatement`` when a recognised statement is incomplete.
    """
    if not text or not text.strip():
        raise UnsupportedSyntax("Empty statement.", statement=text or "")

    try:
        tokens = Lexer(text).tokenise()
    except MalformedStatement:
        match = _LEADING_WORD_RE.match(text)
        if not match or match.group(1).upper() not in LEADING_KEYWORDS:
            raise UnsupportedSyntax(
                f"Unsupported statement: {text.strip()[:80]!r}.", statement=text
            ) from None
        raise

    command = Parser(text, tokens).parse()
    logger.debug("Translated %r into %s.", text, command.kind)
    return command
