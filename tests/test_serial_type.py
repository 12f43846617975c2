import struct

import pytest

from litescan.errors import FormatError
from litescan.serial_type import SerialValue, SQLiteSerialType


class TestSerialTypeDecode:
    @pytest.mark.parametrize(
        "code, serial_type, length",
        [
            (0, SQLiteSerialType.NULL, 0),
            (1, SQLiteSerialType.INT8, 1),
            (2, SQLiteSerialType.INT16, 2),
            (3, SQLiteSerialType.INT24, 3),
            (4, SQLiteSerialType.INT32, 4),
            (5, SQLiteSerialType.INT48, 6),
            (6, SQLiteSerialType.INT64, 8),
            (7, SQLiteSerialType.FLOAT64, 8),
            (8, SQLiteSerialType.INT_0, 0),
            (9, SQLiteSerialType.INT_1, 0),
        ],
    )
    def test_fixed_codes(self, code, serial_type, length):
        assert SQLiteSerialType.decode(code) == (serial_type, length)

    @pytest.mark.parametrize("code", [12, 14, 18, 200, 10_000])
    def test_even_codes_are_blobs(self, code):
        assert SQLiteSerialType.decode(code) == (SQLiteSerialType.BLOB, (code - 12) // 2)

    @pytest.mark.parametrize("code", [13, 15, 23, 201, 10_001])
    def test_odd_codes_are_text(self, code):
        assert SQLiteSerialType.decode(code) == (SQLiteSerialType.TEXT, (code - 13) // 2)

    @pytest.mark.parametrize("code", [10, 11])
    def test_reserved_codes_fail(self, code):
        with pytest.raises(FormatError) as excinfo:
            SQLiteSerialType.decode(code)
        assert excinfo.value.stage == "record"


class TestSerialValue:
    def test_integers_are_sign_extended(self):
        assert SerialValue.read(SQLiteSerialType.INT8, b"\xff").value == -1
        assert SerialValue.read(SQLiteSerialType.INT16, b"\x80\x00").value == -32768
        assert SerialValue.read(SQLiteSerialType.INT24, b"\xff\xff\xfe").value == -2
        assert SerialValue.read(SQLiteSerialType.INT24, b"\x7f\xff\xff").value == 2**23 - 1
        assert SerialValue.read(SQLiteSerialType.INT48, b"\xff" * 6).value == -1
        assert SerialValue.read(SQLiteSerialType.INT64, b"\x00" * 7 + b"\x2a").value == 42

    def test_constant_integers(self):
        assert SerialValue.read(SQLiteSerialType.INT_0, b"").value == 0
        assert SerialValue.read(SQLiteSerialType.INT_1, b"").value == 1

    def test_float(self):
        value = SerialValue.read(SQLiteSerialType.FLOAT64, struct.pack(">d", -2.5))
        assert value.value == -2.5

    def test_text_and_blob(self):
        assert SerialValue.read(SQLiteSerialType.TEXT, "héllo".encode()).value == "héllo"
        assert SerialValue.read(SQLiteSerialType.BLOB, b"\x00\x01").value == b"\x00\x01"

    def test_invalid_utf8_is_a_format_error(self):
        with pytest.raises(FormatError):
            SerialValue.read(SQLiteSerialType.TEXT, b"\xff\xfe")

    def test_as_text(self):
        assert SerialValue(SQLiteSerialType.TEXT, "Yellow").as_text() == "Yellow"
        assert SerialValue(SQLiteSerialType.INT16, 300).as_text() == "300"
        assert SerialValue(SQLiteSerialType.FLOAT64, 1.5).as_text() == "1.5"
        assert SerialValue(SQLiteSerialType.INT_1, 1).as_text() == "1"
        assert SerialValue(SQLiteSerialType.NULL, None).as_text() is None
        assert SerialValue(SQLiteSerialType.BLOB, b"abc").as_text() is None
