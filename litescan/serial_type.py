import struct
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .errors import FormatError


class SQLiteSerialType(Enum):
    # Predefined types
    NULL = (0, "NULL value", 0)
    INT8 = (1, "8-bit integer", 1)
    INT16 = (2, "16-bit integer", 2)
    INT24 = (3, "24-bit integer", 3)
    INT32 = (4, "32-bit integer", 4)
    INT48 = (5, "48-bit integer", 6)
    INT64 = (6, "64-bit integer", 8)
    FLOAT64 = (7, "64-bit float", 8)
    INT_0 = (8, "Integer value 0", 0)
    INT_1 = (9, "Integer value 1", 0)
    # Dynamic types, the length is carried by the code itself
    BLOB = (12, "BLOB value", None)
    TEXT = (13, "TEXT value", None)

    def __init__(self, code: int, description: str, bytes_length: Optional[int] = None):
        self.code = code
        self.description = description
        self.bytes_length = bytes_length

    @staticmethod
    def decode(code: int) -> tuple["SQLiteSerialType", int]:
        """Returns (serial type, bytes_length) for a given type code"""
        if 0 <= code <= 9:
            member = _FIXED_TYPES[code]
            return member, member.bytes_length

        # Handle dynamic types
        if code >= 12:
            if code % 2 == 0:
                return SQLiteSerialType.BLOB, (code - 12) // 2
            return SQLiteSerialType.TEXT, (code - 13) // 2

        # 10 and 11 are reserved for internal use
        raise FormatError("record", f"invalid serial type code: {code}")

    @property
    def is_blob(self) -> bool:
        return self is SQLiteSerialType.BLOB

    @property
    def is_text(self) -> bool:
        return self is SQLiteSerialType.TEXT

    @property
    def is_integer(self) -> bool:
        return 1 <= self.code <= 6 or self.code in (8, 9)


_FIXED_TYPES = {member.code: member for member in SQLiteSerialType if member.code <= 9}


@dataclass(frozen=True)
class SerialValue:
    serial_type: SQLiteSerialType
    value: Any

    @classmethod
    def read(cls, serial_type: SQLiteSerialType, data: bytes) -> "SerialValue":
        """Decode `data`, which must be exactly the bytes of one column."""
        if serial_type is SQLiteSerialType.NULL:
            return cls(serial_type, None)
        if serial_type is SQLiteSerialType.INT_0:
            return cls(serial_type, 0)
        if serial_type is SQLiteSerialType.INT_1:
            return cls(serial_type, 1)
        if serial_type is SQLiteSerialType.FLOAT64:
            return cls(serial_type, struct.unpack(">d", data)[0])
        if serial_type.is_blob:
            return cls(serial_type, bytes(data))
        if serial_type.is_text:
            try:
                return cls(serial_type, bytes(data).decode("utf-8"))
            except UnicodeDecodeError as e:
                raise FormatError("record", f"invalid UTF-8 in text column: {e}") from e
        return cls(serial_type, int.from_bytes(data, byteorder="big", signed=True))

    @classmethod
    def read_row_id(cls, row_id: int) -> "SerialValue":
        return cls(SQLiteSerialType.INT64, row_id)

    @property
    def is_null(self) -> bool:
        return self.serial_type is SQLiteSerialType.NULL

    def as_text(self) -> str | None:
        """
        Render the value the way it is compared against string literals.

        NULL and BLOB values have no text form and return None.
        """
        if self.serial_type.is_text:
            return self.value
        if self.is_null or self.serial_type.is_blob:
            return None
        if self.serial_type is SQLiteSerialType.FLOAT64:
            return repr(self.value)
        return str(self.value)
