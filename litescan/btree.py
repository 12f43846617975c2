from typing import Generator, Iterable, Iterator, Protocol, TypeVar

from .database import Database
from .errors import FormatError
from .page import Page, PageType
from .payload import read_payload
from .records import Record

T = TypeVar("T", covariant=True)


class BTreeWalker(Protocol[T]):
    def visit_leaf(self, page: Page) -> T:
        "Process a table leaf page and return a result"
        ...


class CellCounter(BTreeWalker[int]):
    def visit_leaf(self, page: Page) -> int:
        return page.cell_count


class RecordCollector(BTreeWalker[Iterator[Record]]):
    def __init__(self, database: Database):
        self.database = database

    def visit_leaf(self, page: Page) -> Iterator[Record]:
        # Cells are decoded one at a time so a consumer that stops early
        # never pays for the rest of the page.
        for cell_pointer in page.cell_pointers:
            cell = page.leaf_cell(cell_pointer)
            payload = read_payload(self.database, page, cell)
            yield Record.from_payload(cell.row_id, payload)


def walk_btree(
    database: Database,
    root_page: int,
    walker: BTreeWalker[T],
) -> Generator[T, None, None]:
    """
    Visit every leaf of the table b-tree rooted at `root_page`, left to right.

    Pages still to visit are kept on an explicit stack instead of recursing,
    so a deep or malformed tree can't exhaust the interpreter's call stack.
    """
    stack = [root_page]
    visited = set()

    while stack:
        page_number = stack.pop()
        if page_number in visited:
            raise FormatError("btree", f"page {page_number} is referenced twice")
        visited.add(page_number)

        page = Page.get_page(database, page_number)

        # Process leaf nodes
        if page.type == PageType.LEAF_TABLE_B_TREE:
            yield walker.visit_leaf(page)
        elif page.type == PageType.INTERIOR_TABLE_B_TREE:
            # The rightmost pointer is pushed first so it's popped last,
            # then the left pointers in reverse so they pop in key order.
            stack.append(page.rightmost_pointer)
            for cell in reversed(page.cells()):
                stack.append(cell.left_child)
        else:
            raise FormatError(
                "btree",
                f"page {page_number} is a {page.type.name} page, "
                "only table b-trees can be scanned",
            )


def _ascending(records: Iterable[Record]) -> Iterator[Record]:
    last_row_id = None
    for record in records:
        if last_row_id is not None and record.row_id <= last_row_id:
            raise FormatError(
                "btree",
                f"row id {record.row_id} follows {last_row_id}, keys are out of order",
            )
        last_row_id = record.row_id
        yield record


def scan_table(database: Database, root_page: int) -> Iterator[Record]:
    """Lazily yield every record of a table, in ascending row id order."""
    leaves = walk_btree(database, root_page, RecordCollector(database))
    return _ascending(record for leaf in leaves for record in leaf)


def count_rows(database: Database, root_page: int) -> int:
    return sum(walk_btree(database, root_page, CellCounter()))
