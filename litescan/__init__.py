from .errors import (
    FormatError,
    LiteScanError,
    QueryExecutionError,
    QueryParseError,
    ShortReadError,
)
from .session import Session

open = Session.open

__all__ = [
    "FormatError",
    "LiteScanError",
    "QueryExecutionError",
    "QueryParseError",
    "Session",
    "ShortReadError",
    "open",
]
