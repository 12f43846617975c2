from dataclasses import dataclass
from typing import Any, Iterator

from .btree import count_rows, scan_table
from .catalog import SchemaCatalog, SchemaEntry
from .database import Database
from .errors import UnknownColumnError
from .logging import get_logger
from .records import Record
from .serial_type import SerialValue
from .sql import ColumnName, Query

logger = get_logger(__name__)


@dataclass
class QueryResult:
    columns: list[str]
    rows: Iterator[tuple[Any, ...]]

    def __iter__(self) -> Iterator[tuple[Any, ...]]:
        return self.rows


class QueryExecutor:
    """
    Runs a parsed query as a full scan of the table's b-tree.

    WHERE conditions compare a column's text form against the literal with
    exact, case-sensitive equality. NULL and BLOB columns have no text form
    and never match.
    """

    def __init__(self, database: Database, catalog: SchemaCatalog):
        self.database = database
        self.catalog = catalog

    def execute(self, query: Query) -> QueryResult:
        table = self.catalog.table(query.table)
        filters = [
            (self._resolve(table, condition.column), condition.value)
            for condition in query.conditions
        ]
        logger.debug(
            "executing query",
            table=table.name,
            root_page=table.root_page,
            conditions=len(filters),
        )

        if query.is_count:
            if filters:
                count = sum(1 for _ in self._matching(table, filters))
            else:
                # Without filters there's no need to decode a single record
                count = count_rows(self.database, table.root_page)
            return QueryResult(columns=["COUNT(*)"], rows=iter([(count,)]))

        selected = [s.name for s in query.selection if isinstance(s, ColumnName)]
        ordinals = [self._resolve(table, column) for column in selected]
        rows = (
            tuple(self._value(table, record, ordinal).value for ordinal in ordinals)
            for record in self._matching(table, filters)
        )
        return QueryResult(columns=selected, rows=rows)

    def _resolve(self, table: SchemaEntry, column: str) -> int:
        ordinal = table.column_index(column)
        if ordinal is None:
            raise UnknownColumnError(table.name, column)
        return ordinal

    def _matching(
        self, table: SchemaEntry, filters: list[tuple[int, str]]
    ) -> Iterator[Record]:
        for record in scan_table(self.database, table.root_page):
            if all(
                self._value(table, record, ordinal).as_text() == literal
                for ordinal, literal in filters
            ):
                yield record

    def _value(self, table: SchemaEntry, record: Record, ordinal: int) -> SerialValue:
        value = record.get(ordinal)
        if value.is_null and table.columns[ordinal].is_rowid_alias:
            return SerialValue.read_row_id(record.row_id)
        return value
