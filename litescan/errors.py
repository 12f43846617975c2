class LiteScanError(Exception):
    """Base class for everything this package raises on purpose."""


class DatabaseIOError(LiteScanError, OSError):
    pass


class ShortReadError(DatabaseIOError):
    def __init__(self, expected: int, got: int, what: str = "bytes"):
        self.expected = expected
        self.got = got
        super().__init__(f"short read of {what}: expected {expected} bytes, got {got}")


class FormatError(LiteScanError):
    """
    The file does not look the way the format says it should.

    `stage` names where decoding was when it gave up
    (header, page, payload, record, btree, schema).
    """

    def __init__(self, stage: str, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"{stage}: {message}")


class QueryParseError(LiteScanError):
    def __init__(self, reason: str, remainder: str):
        self.reason = reason
        self.remainder = remainder
        super().__init__(f"{reason} (at: {remainder!r})" if remainder else reason)


class QueryExecutionError(LiteScanError):
    pass


class TableNotFoundError(QueryExecutionError):
    def __init__(self, table: str):
        self.table = table
        super().__init__(f"no such table: {table}")


class UnknownColumnError(QueryExecutionError):
    def __init__(self, table: str, column: str):
        self.table = table
        self.column = column
        super().__init__(f"no such column: {column} (table {table})")
