import os
from dataclasses import dataclass
from io import BufferedReader
from typing import Self

from .config import Settings, get_settings
from .errors import FormatError, ShortReadError

HEADER_SIZE = 100
MAGIC = b"SQLite format 3\x00"
VALID_PAGE_SIZES = frozenset(1 << n for n in range(9, 17))


@dataclass(frozen=True)
class DatabaseHeader:
    page_size: int
    reserved_space: int
    page_count: int

    @classmethod
    def from_bytes(cls, data: bytes, strict_page_size: bool = False) -> Self:
        """
        Parse the 100-byte database header.

        https://www.sqlite.org/fileformat.html#the_database_header
        """
        if len(data) < HEADER_SIZE:
            raise ShortReadError(HEADER_SIZE, len(data), "database header")
        if data[:16] != MAGIC:
            raise FormatError("header", "not a SQLite 3 database (bad magic string)")

        # The two-byte page size at offset 16. The value 1 stands for 65536,
        # which doesn't fit in two bytes.
        page_size = int.from_bytes(data[16:18], byteorder="big")
        if page_size == 1:
            page_size = 65536
        if strict_page_size and page_size not in VALID_PAGE_SIZES:
            raise FormatError("header", f"invalid page size: {page_size}")

        # Bytes of unused "reserved" space at the end of each page
        reserved_space = data[20]
        if reserved_space != 0:
            raise FormatError(
                "header", f"unsupported reserved space per page: {reserved_space}"
            )

        # The in-header database size, in pages
        page_count = int.from_bytes(data[28:32], byteorder="big")
        return cls(page_size=page_size, reserved_space=reserved_space, page_count=page_count)

    @property
    def usable_size(self) -> int:
        return self.page_size - self.reserved_space


class Database:
    """An open database file. Every page fetch is a seek followed by a read."""

    def __init__(self, file: BufferedReader, path: str, settings: Settings | None = None):
        self.file = file
        self.path = path
        self.settings = settings or get_settings()

        self.file.seek(0)
        self.header = DatabaseHeader.from_bytes(
            self.file.read(HEADER_SIZE),
            strict_page_size=self.settings.strict_page_size,
        )
        if self.header.page_count == 0:
            # Older writers leave the in-header size at zero
            file_size = os.fstat(self.file.fileno()).st_size
            self.header = DatabaseHeader(
                page_size=self.header.page_size,
                reserved_space=self.header.reserved_space,
                page_count=file_size // self.header.page_size,
            )

    @classmethod
    def open(cls, path: str, settings: Settings | None = None) -> Self:
        file = open(path, "rb")
        try:
            return cls(file, path, settings)
        except BaseException:
            file.close()
            raise

    def close(self) -> None:
        self.file.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def page_size(self) -> int:
        return self.header.page_size

    @property
    def usable_size(self) -> int:
        return self.header.usable_size

    @property
    def page_count(self) -> int:
        return self.header.page_count

    def check_page_number(self, page_number: int, stage: str = "btree") -> None:
        if not 1 <= page_number <= self.page_count:
            raise FormatError(
                stage,
                f"page number {page_number} out of range [1, {self.page_count}]",
            )

    def read_page(self, page_number: int, stage: str = "btree") -> bytes:
        """Return the raw bytes of a 1-based page, file header included for page 1."""
        self.check_page_number(page_number, stage)
        self.file.seek((page_number - 1) * self.page_size)
        data = self.file.read(self.page_size)
        if len(data) != self.page_size:
            raise ShortReadError(self.page_size, len(data), f"page {page_number}")
        return data
