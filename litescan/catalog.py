from dataclasses import dataclass, replace
from functools import cached_property
from typing import Self

from sqlparse import tokens as T
from sqlparse.lexer import tokenize

from .btree import scan_table
from .database import Database
from .errors import FormatError, TableNotFoundError
from .logging import get_logger
from .records import Record

logger = get_logger(__name__)

# The schema table always lives at page 1
SCHEMA_ROOT_PAGE = 1

# Segments of a column list that declare table constraints, not columns
TABLE_CONSTRAINTS = {"CONSTRAINT", "PRIMARY", "UNIQUE", "CHECK", "FOREIGN"}


@dataclass(frozen=True)
class ColumnDef:
    name: str
    # INTEGER PRIMARY KEY columns are stored as NULL and read as the row id
    is_rowid_alias: bool = False


def unquote_identifier(value: str) -> str:
    if len(value) >= 2 and (value[0], value[-1]) in (('"', '"'), ("`", "`"), ("[", "]")):
        inner = value[1:-1]
        if value[0] == '"':
            inner = inner.replace('""', '"')
        return inner
    return value


def _words(segment: list[tuple]) -> list[str]:
    # "PRIMARY KEY" lexes as one keyword or two depending on the sqlparse release
    words = []
    for ttype, value in segment:
        if ttype in T.Keyword:
            words.extend(value.upper().split())
        else:
            words.append(value.upper())
    return words


def _declares_primary_key(words: list[str]) -> bool:
    return any(a == "PRIMARY" and b == "KEY" for a, b in zip(words, words[1:]))


def _key_columns(segment: list[tuple]) -> list[str]:
    """Column names listed in a PRIMARY KEY (...) table constraint."""
    names = []
    depth = 0
    for ttype, value in segment:
        if ttype in T.Punctuation and value == "(":
            depth += 1
        elif ttype in T.Punctuation and value == ")":
            depth -= 1
        elif depth == 1 and ttype not in T.Punctuation and value.upper() not in ("ASC", "DESC"):
            names.append(unquote_identifier(value).lower())
    return names


def parse_column_defs(create_sql: str) -> list[ColumnDef]:
    """
    Pull the column names out of a CREATE TABLE statement.

    This is not a DDL parser: it takes the first parenthesized group, splits
    it on top-level commas and keeps the first token of each piece. A column
    aliases the row id when its declared type is exactly INTEGER and it is
    the primary key, either inline or as the only column of a
    PRIMARY KEY (...) table constraint.
    """
    segments: list[list[tuple]] = []
    depth = 0
    for ttype, value in tokenize(create_sql):
        if ttype in T.Whitespace or ttype in T.Newline or ttype in T.Comment:
            continue
        if ttype in T.Punctuation and value == "(":
            depth += 1
            if depth == 1:
                segments.append([])
                continue
        elif ttype in T.Punctuation and value == ")":
            depth -= 1
            if depth == 0:
                break
        elif ttype in T.Punctuation and value == "," and depth == 1:
            segments.append([])
            continue

        if depth >= 1:
            segments[-1].append((ttype, value))

    columns = []
    integer_columns = set()
    table_key: list[str] = []
    for segment in segments:
        if not segment:
            continue
        words = _words(segment)
        if words[0] in TABLE_CONSTRAINTS:
            if _declares_primary_key(words):
                table_key = _key_columns(segment)
            continue
        name = unquote_identifier(segment[0][1])
        is_integer = len(words) > 1 and words[1] == "INTEGER"
        if is_integer:
            integer_columns.add(name.lower())
        columns.append(ColumnDef(name, is_integer and _declares_primary_key(words[1:])))

    if not columns:
        raise FormatError("schema", f"no column list found in {create_sql!r}")

    if len(table_key) == 1 and table_key[0] in integer_columns:
        columns = [
            replace(column, is_rowid_alias=True) if column.name.lower() == table_key[0] else column
            for column in columns
        ]
    return columns


@dataclass(frozen=True)
class SchemaEntry:
    object_type: str
    name: str
    table_name: str
    root_page: int
    sql: str | None

    @classmethod
    def from_record(cls, record: Record) -> Self:
        if len(record) < 5:
            raise FormatError(
                "schema", f"schema row {record.row_id} has {len(record)} columns, expected 5"
            )

        object_type, name, table_name, root_page, sql = record.python_values[:5]
        if not all(isinstance(v, str) for v in (object_type, name, table_name)):
            raise FormatError("schema", f"schema row {record.row_id} has non-text names")

        # Views and triggers have no b-tree, their root page is stored as 0 or NULL
        root_page = root_page or 0
        if not isinstance(root_page, int):
            raise FormatError("schema", f"schema row {record.row_id} has a non-integer rootpage")

        return cls(
            object_type=object_type,
            name=name,
            table_name=table_name,
            root_page=root_page,
            sql=sql,
        )

    @cached_property
    def columns(self) -> list[ColumnDef]:
        # Parsed on first use, a table without a column list only fails when queried
        if self.object_type == "table" and self.sql:
            return parse_column_defs(self.sql)
        return []

    def column_index(self, column: str) -> int | None:
        wanted = column.lower()
        for ordinal, column_def in enumerate(self.columns):
            if column_def.name.lower() == wanted:
                return ordinal
        return None


class SchemaCatalog:
    def __init__(self, entries: list[SchemaEntry]):
        self.entries = entries

    @classmethod
    def load(cls, database: Database) -> Self:
        entries = [
            SchemaEntry.from_record(record)
            for record in scan_table(database, SCHEMA_ROOT_PAGE)
        ]
        logger.debug("loaded schema", path=database.path, entries=len(entries))
        return cls(entries)

    def table(self, name: str) -> SchemaEntry:
        wanted = unquote_identifier(name).lower()
        for entry in self.entries:
            if entry.object_type == "table" and entry.name.lower() == wanted:
                return entry
        raise TableNotFoundError(name)

    def tables(self) -> list[str]:
        return sorted(
            entry.name
            for entry in self.entries
            if entry.object_type == "table" and not entry.name.startswith("sqlite_")
        )
