from dataclasses import dataclass
from enum import Enum
from typing import Self

from .database import HEADER_SIZE, Database
from .errors import FormatError, ShortReadError
from .varint import Varint, to_signed64


class PageType(Enum):
    INTERIOR_INDEX_B_TREE = 0x02
    INTERIOR_TABLE_B_TREE = 0x05
    LEAF_INDEX_B_TREE = 0x0A
    LEAF_TABLE_B_TREE = 0x0D

    @property
    def is_leaf(self) -> bool:
        return self in (PageType.LEAF_TABLE_B_TREE, PageType.LEAF_INDEX_B_TREE)

    @property
    def is_table(self) -> bool:
        return self in (PageType.LEAF_TABLE_B_TREE, PageType.INTERIOR_TABLE_B_TREE)


@dataclass(frozen=True)
class LeafCell:
    row_id: int
    payload_size: int
    # Offset within the page where the inline part of the payload starts
    payload_offset: int


@dataclass(frozen=True)
class InteriorCell:
    left_child: int
    key: int


class Page:
    def __init__(self, data: bytes, page_number: int):
        self.data = data
        self.page_number = page_number

        # Page 1 starts with the 100-byte database header; its b-tree
        # header follows it. Cell offsets are still relative to the page start.
        self.header_offset = HEADER_SIZE if page_number == 1 else 0
        header = data[self.header_offset :]

        # The one-byte flag at offset 0 indicating the b-tree page type.
        try:
            self.type = PageType(header[0])
        except ValueError:
            raise FormatError(
                "page", f"unknown page type 0x{header[0]:02x} on page {page_number}"
            ) from None

        # The b-tree page header is 8 bytes in size for
        # leaf pages and 12 bytes for interior pages.
        self.header_size = 8 if self.type.is_leaf else 12

        # The two-byte integer at offset 1 gives the start of the
        # first freeblock on the page, or is zero if there are no freeblocks.
        self.first_freeblock = int.from_bytes(header[1:3], byteorder="big")

        # The two-byte integer at offset 3 gives the number of cells on the page.
        self.cell_count = int.from_bytes(header[3:5], byteorder="big")

        # The two-byte integer at offset 5 designates the start of the cell
        # content area. A zero value for this integer is interpreted as 65536.
        self.content_area_start = int.from_bytes(header[5:7], byteorder="big") or 65536

        # The one-byte integer at offset 7 gives the number of fragmented
        # free bytes within the cell content area.
        self.fragmented_free_bytes = header[7]

        # The four-byte page number at offset 8 is the right-most pointer.
        # This value appears in the header of interior b-tree pages only
        # and is omitted from all other pages.
        self.rightmost_pointer = (
            None if self.type.is_leaf else int.from_bytes(header[8:12], byteorder="big")
        )

        self.cell_pointers = self._read_cell_pointers()

    @classmethod
    def get_page(cls, database: Database, page_number: int) -> Self:
        return cls(database.read_page(page_number), page_number)

    def _read_cell_pointers(self) -> list[int]:
        # The cell pointer array of a b-tree page immediately
        # follows the b-tree page header.
        #
        # It consists of K 2-byte integer offsets to the
        # cell contents, where K is the cell count.
        #
        # The cell pointers are arranged in key order with
        # the left-most cell (the cell with the smallest key) first
        # and the right-most cell (the cell with the largest key) last.
        array_start = self.header_offset + self.header_size
        array_end = array_start + self.cell_count * 2
        if array_end > len(self.data):
            raise FormatError(
                "page",
                f"cell pointer array of page {self.page_number} "
                f"({self.cell_count} cells) overruns the page",
            )

        pointers = []
        for start in range(array_start, array_end, 2):
            pointer = int.from_bytes(self.data[start : start + 2], byteorder="big")
            if not array_end <= pointer < len(self.data):
                raise FormatError(
                    "page",
                    f"cell pointer {pointer} outside the content area "
                    f"of page {self.page_number}",
                )
            pointers.append(pointer)
        return pointers

    def leaf_cell(self, cell_pointer: int) -> LeafCell:
        # Table leaf cells start with the payload size and the rowid,
        # both varints, followed by the payload itself.
        if self.type is not PageType.LEAF_TABLE_B_TREE:
            raise FormatError("page", f"page {self.page_number} is not a table leaf")
        try:
            payload_size = Varint.from_data(self.data, cell_pointer)
            row_id = Varint.from_data(self.data, cell_pointer + payload_size.bytes_length)
        except ShortReadError as e:
            raise FormatError(
                "page", f"cell at {cell_pointer} on page {self.page_number} is truncated: {e}"
            ) from e
        return LeafCell(
            row_id=to_signed64(row_id.value),
            payload_size=payload_size.value,
            payload_offset=cell_pointer + payload_size.bytes_length + row_id.bytes_length,
        )

    def interior_cell(self, cell_pointer: int) -> InteriorCell:
        # For Table B-Tree Interior Cells, the first piece of information
        # is a 4-byte big-endian page number which is the left child pointer,
        # followed by the integer key as a varint.
        if self.type is not PageType.INTERIOR_TABLE_B_TREE:
            raise FormatError("page", f"page {self.page_number} is not a table interior")
        if cell_pointer + 4 > len(self.data):
            raise FormatError(
                "page", f"cell at {cell_pointer} on page {self.page_number} is truncated"
            )
        left_child = int.from_bytes(self.data[cell_pointer : cell_pointer + 4], byteorder="big")
        try:
            key = Varint.from_data(self.data, cell_pointer + 4)
        except ShortReadError as e:
            raise FormatError(
                "page", f"cell at {cell_pointer} on page {self.page_number} is truncated: {e}"
            ) from e
        return InteriorCell(left_child=left_child, key=to_signed64(key.value))

    def cells(self) -> list[LeafCell] | list[InteriorCell]:
        if self.type is PageType.LEAF_TABLE_B_TREE:
            return [self.leaf_cell(pointer) for pointer in self.cell_pointers]
        return [self.interior_cell(pointer) for pointer in self.cell_pointers]
