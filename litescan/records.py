from dataclasses import dataclass, field
from typing import Any

from .errors import FormatError, ShortReadError
from .serial_type import SerialValue, SQLiteSerialType
from .varint import Varint


def parse_header(data: bytes) -> tuple[int, list[tuple[SQLiteSerialType, int]]]:
    """
    The header begins with a single varint which determines the total number of bytes in the header.
    The varint value is the size of the header in bytes including the size varint itself.
    Following the size varint are one or more additional varints, one per column.
    These additional varints are called "serial type" numbers and determine the datatype of each column.
    The values for each column in the record immediately follow the header.

    Returns the offset of the first value and the (serial type, bytes_length)
    pair of every column.

    https://www.sqlite.org/fileformat.html#record_format
    """
    try:
        # First piece of information is the record header size
        record_header = Varint.from_data(data)
    except ShortReadError as e:
        raise FormatError("record", f"truncated record header: {e}") from e

    header_size = record_header.value
    if header_size < record_header.bytes_length or header_size > len(data):
        raise FormatError(
            "record", f"header size {header_size} does not fit a {len(data)}-byte payload"
        )

    serial_types = []
    # The next pieces are varints describing the column types and sizes
    offset = record_header.bytes_length
    while offset < header_size:
        try:
            serial_type_varint = Varint.from_data(data, offset)
        except ShortReadError as e:
            raise FormatError("record", f"truncated serial type: {e}") from e
        offset += serial_type_varint.bytes_length
        serial_types.append(SQLiteSerialType.decode(serial_type_varint.value))

    if offset != header_size:
        raise FormatError(
            "record",
            f"serial types consumed {offset} header bytes, header declares {header_size}",
        )

    return header_size, serial_types


@dataclass(frozen=True)
class Record:
    row_id: int
    values: list[SerialValue] = field(default_factory=list)

    @classmethod
    def from_payload(cls, row_id: int, data: bytes) -> "Record":
        offset, serial_types = parse_header(data)

        values = []
        # With the serial types and associated sizes for each column
        # we can start picking out the data
        for serial_type, bytes_length in serial_types:
            column_data = data[offset : offset + bytes_length]
            if len(column_data) != bytes_length:
                raise FormatError(
                    "record",
                    f"row {row_id}: {serial_type.description} column needs "
                    f"{bytes_length} bytes, only {len(column_data)} left",
                )
            values.append(SerialValue.read(serial_type, column_data))
            offset += bytes_length

        return cls(row_id=row_id, values=values)

    def __len__(self) -> int:
        return len(self.values)

    def get(self, ordinal: int) -> SerialValue:
        # Rows written before an ALTER TABLE ADD COLUMN are missing the
        # trailing columns, which read as NULL.
        if ordinal < len(self.values):
            return self.values[ordinal]
        return SerialValue(SQLiteSerialType.NULL, None)

    @property
    def python_values(self) -> list[Any]:
        return [value.value for value in self.values]
