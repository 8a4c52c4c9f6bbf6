from datetime import date, datetime
from enum import Enum
from pathlib import Path

from core.utils.json_serializers import json_serializer
from webhdfs_output.codec import CompressionMode


class Color(Enum):
    RED = "red"
    BLUE = "blue"


# =========================================================================
# json_serializer
# =========================================================================


class TestJsonSerializer:

    def test_serializes_datetime_to_isoformat(self):
        dt = datetime(2025, 6, 15, 10, 30, 0)
        assert json_serializer(dt) == "2025-06-15T10:30:00"

    def test_serializes_datetime_with_microseconds(self):
        dt = datetime(2025, 1, 1, 0, 0, 0, 123456)
        assert json_serializer(dt) == "2025-01-01T00:00:00.123456"

    def test_serializes_date_to_isoformat(self):
        assert json_serializer(date(2025, 12, 25)) == "2025-12-25"

    def test_serializes_path_to_string(self):
        assert json_serializer(Path("/etc/security/logs.keytab")) == "/etc/security/logs.keytab"

    def test_serializes_enum_to_value(self):
        assert json_serializer(Color.RED) == "red"
        assert json_serializer(CompressionMode.SNAPPY) == "snappy"

    def test_bytes_replaced_by_length(self):
        assert json_serializer(b"hello") == "<5 bytes>"
        assert json_serializer(bytearray(3)) == "<3 bytes>"

    def test_fallback_to_string(self):
        assert json_serializer(42) == "42"
        assert json_serializer(None) == "None"

    def test_fallback_for_set(self):
        assert isinstance(json_serializer({1, 2, 3}), str)
