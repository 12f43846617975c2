from typing import Self

from .catalog import SchemaCatalog
from .config import Settings
from .database import Database
from .executor import QueryExecutor, QueryResult
from .logging import get_logger
from .sql import Query, parse_query

logger = get_logger(__name__)


class Session:
    """
    One open database file.

    The schema table is read the first time it's needed and reused after that.
    """

    def __init__(self, database: Database):
        self.database = database
        self._catalog: SchemaCatalog | None = None

    @classmethod
    def open(cls, path: str, settings: Settings | None = None) -> Self:
        database = Database.open(path, settings)
        logger.debug(
            "opened database",
            path=path,
            page_size=database.page_size,
            page_count=database.page_count,
        )
        return cls(database)

    def close(self) -> None:
        self.database.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def catalog(self) -> SchemaCatalog:
        if self._catalog is None:
            self._catalog = SchemaCatalog.load(self.database)
        return self._catalog

    def page_size(self) -> int:
        return self.database.page_size

    def table_count(self) -> int:
        # Every schema row counts, indexes and views included
        return len(self.catalog.entries)

    def list_tables(self) -> list[str]:
        return self.catalog.tables()

    def run_query(self, query: Query) -> QueryResult:
        return QueryExecutor(self.database, self.catalog).execute(query)

    def execute(self, sql: str) -> QueryResult:
        return self.run_query(parse_query(sql))
