"""
Reassembles cell payloads that spill onto overflow pages.

https://www.sqlite.org/fileformat.html#cell_payload_overflow_pages
"""

from .database import Database
from .errors import FormatError
from .logging import get_logger
from .page import LeafCell, Page

logger = get_logger(__name__)


def max_local(usable_size: int) -> int:
    # X: the largest payload that is stored entirely on a table leaf page
    return usable_size - 35


def min_local(usable_size: int) -> int:
    # M: the least amount of payload kept on the leaf page once it overflows
    return ((usable_size - 12) * 32 // 255) - 23


def local_payload_size(payload_size: int, usable_size: int) -> int:
    """Number of payload bytes stored on the b-tree page itself."""
    x = max_local(usable_size)
    if payload_size <= x:
        return payload_size

    m = min_local(usable_size)
    k = m + ((payload_size - m) % (usable_size - 4))
    return k if k <= x else m


def read_payload(database: Database, page: Page, cell: LeafCell) -> bytes:
    usable_size = database.usable_size
    local_size = local_payload_size(cell.payload_size, usable_size)

    start = cell.payload_offset
    local = page.data[start : start + local_size]
    if len(local) != local_size:
        raise FormatError(
            "payload",
            f"row {cell.row_id} on page {page.page_number} runs past the end of the page",
        )
    if local_size == cell.payload_size:
        return local

    # The four bytes following the local payload are the first overflow page
    pointer_at = start + local_size
    if pointer_at + 4 > len(page.data):
        raise FormatError(
            "payload",
            f"row {cell.row_id} on page {page.page_number} has no room for its overflow pointer",
        )
    first_overflow = int.from_bytes(page.data[pointer_at : pointer_at + 4], byteorder="big")
    remaining = cell.payload_size - local_size
    logger.debug(
        "following overflow chain",
        page=page.page_number,
        row_id=cell.row_id,
        first_overflow=first_overflow,
        remaining=remaining,
    )
    return local + read_overflow_chain(database, first_overflow, remaining)


def read_overflow_chain(database: Database, first_page: int, remaining: int) -> bytes:
    """
    Collect `remaining` bytes from the chain starting at `first_page`.

    Each overflow page starts with the 4-byte number of the next page in the
    chain (0 on the last one); the rest of the usable space is content.
    """
    chunk_size = database.usable_size - 4
    max_pages = database.settings.max_overflow_pages
    chunks = []
    visited = set()
    page_number = first_page

    while remaining > 0:
        if page_number == 0:
            raise FormatError(
                "payload", f"overflow chain ended with {remaining} bytes still missing"
            )
        if page_number in visited:
            raise FormatError("payload", f"overflow chain loops back to page {page_number}")
        if len(visited) >= max_pages:
            raise FormatError("payload", f"overflow chain longer than {max_pages} pages")
        visited.add(page_number)

        data = database.read_page(page_number, stage="payload")
        page_number = int.from_bytes(data[:4], byteorder="big")
        take = min(chunk_size, remaining)
        chunks.append(data[4 : 4 + take])
        remaining -= take

    return b"".join(chunks)
