"""
Parser for the handful of SELECT statements the executor understands:

    SELECT COUNT(*) FROM apples
    SELECT name, color FROM apples WHERE color = 'Yellow' AND name = 'Fuji'
"""

from dataclasses import dataclass, field
from typing import Union

from sqlparse import tokens as T
from sqlparse.lexer import tokenize

from .catalog import unquote_identifier
from .errors import QueryParseError


@dataclass(frozen=True)
class ColumnName:
    name: str


@dataclass(frozen=True)
class CountStar:
    pass


Selection = Union[ColumnName, CountStar]


@dataclass(frozen=True)
class Condition:
    column: str
    value: str


@dataclass
class Query:
    selection: list[Selection]
    table: str
    conditions: list[Condition] = field(default_factory=list)

    @property
    def is_count(self) -> bool:
        return any(isinstance(s, CountStar) for s in self.selection)


@dataclass(frozen=True)
class _Token:
    ttype: object
    value: str
    # Position of the token in the original query text
    position: int


# Words that end a column or table name position
_RESERVED = {"SELECT", "FROM", "WHERE", "AND", "OR"}


class _Parser:
    def __init__(self, text: str):
        self.text = text
        self.tokens: list[_Token] = []
        position = 0
        for ttype, value in tokenize(text):
            if not (ttype in T.Whitespace or ttype in T.Comment):
                self.tokens.append(_Token(ttype, value, position))
            position += len(value)
        self.index = 0

    def remainder(self) -> str:
        if self.index >= len(self.tokens):
            return ""
        return self.text[self.tokens[self.index].position :]

    def fail(self, reason: str):
        raise QueryParseError(reason, self.remainder())

    def peek(self) -> _Token | None:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def at_keyword(self, keyword: str) -> bool:
        token = self.peek()
        return token is not None and token.value.upper() == keyword

    def accept_keyword(self, keyword: str) -> bool:
        if self.at_keyword(keyword):
            self.index += 1
            return True
        return False

    def expect_keyword(self, keyword: str, reason: str) -> None:
        if not self.accept_keyword(keyword):
            self.fail(reason)

    def accept_punctuation(self, value: str) -> bool:
        token = self.peek()
        if token is not None and token.ttype in T.Punctuation and token.value == value:
            self.index += 1
            return True
        return False

    def identifier(self, what: str) -> str:
        token = self.peek()
        if token is None:
            self.fail(f"expected {what}, got end of input")
        if token.ttype in T.Error and token.value in ("'", '"'):
            self.fail("unterminated string literal")

        is_word = token.ttype in T.Name or token.ttype in T.Keyword
        is_quoted = token.ttype in T.String.Symbol
        if not (is_word or is_quoted) or token.value.upper() in _RESERVED:
            self.fail(f"expected {what}, got {token.value!r}")
        self.index += 1
        return unquote_identifier(token.value)

    def count_star(self) -> bool:
        """Consume COUNT(*) if that's what comes next."""
        start = self.index
        if (
            self.accept_keyword("COUNT")
            and self.accept_punctuation("(")
            and self._accept_wildcard()
            and self.accept_punctuation(")")
        ):
            return True
        self.index = start
        return False

    def _accept_wildcard(self) -> bool:
        token = self.peek()
        if token is not None and token.ttype in T.Wildcard:
            self.index += 1
            return True
        return False

    def selection_list(self) -> list[Selection]:
        if self.peek() is None or self.at_keyword("FROM"):
            self.fail("empty selection list")
        if self.count_star():
            if self.accept_punctuation(","):
                self.fail("COUNT(*) cannot be combined with other columns")
            return [CountStar()]

        selection: list[Selection] = [ColumnName(self.identifier("column name"))]
        while self.accept_punctuation(","):
            selection.append(ColumnName(self.identifier("column name")))
        return selection

    def literal(self) -> str:
        token = self.peek()
        if token is None:
            self.fail("expected a quoted literal, got end of input")
        if token.ttype in T.Error and token.value == "'":
            self.fail("unterminated string literal")
        if token.ttype not in T.String.Single:
            self.fail(f"expected a quoted literal, got {token.value!r}")
        self.index += 1
        return token.value[1:-1].replace("''", "'")

    def condition(self) -> Condition:
        column = self.identifier("column name")
        token = self.peek()
        if token is None or token.ttype not in T.Operator.Comparison or token.value != "=":
            self.fail("expected '=' after column name")
        self.index += 1
        return Condition(column=column, value=self.literal())

    def query(self) -> Query:
        self.expect_keyword("SELECT", "expected SELECT")
        selection = self.selection_list()

        self.expect_keyword("FROM", "missing FROM")
        table = self.identifier("table name")

        conditions = []
        if self.accept_keyword("WHERE"):
            conditions.append(self.condition())
            while self.accept_keyword("AND"):
                conditions.append(self.condition())

        self.accept_punctuation(";")
        if self.peek() is not None:
            token = self.peek()
            if token.ttype in T.Error and token.value == "'":
                self.fail("unterminated string literal")
            self.fail("unexpected trailing input")

        return Query(selection=selection, table=table, conditions=conditions)


def parse_query(text: str) -> Query:
    return _Parser(text).query()
