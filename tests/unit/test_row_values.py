from datetime import date, datetime
from decimal import Decimal

import pytest

from adapters.values import Row, ValueKind, kind_of, normalize_value


def test_normalize_value_maps_driver_types():
    assert normalize_value(Decimal("12.50")) == 12.5
    assert normalize_value(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05"
    assert normalize_value(date(2024, 1, 2)) == "2024-01-02"
    assert normalize_value(bytearray(b"ab")) == b"ab"
    assert normalize_value(memoryview(b"cd")) == b"cd"
    assert normalize_value(True) is True
    assert normalize_value(None) is None


def test_kind_of_distinguishes_bool_from_int():
    assert kind_of(True) is ValueKind.BOOL
    assert kind_of(1) is ValueKind.INT
    assert kind_of(1.0) is ValueKind.FLOAT
    assert kind_of("x") is ValueKind.STRING
    assert kind_of(b"x") is ValueKind.BYTES
    assert kind_of(None) is ValueKind.NULL
    with pytest.raises(TypeError):
        kind_of(Decimal("1"))


def test_row_from_pairs_normalizes():
    row = Row.from_pairs([("total", Decimal("3.5")), ("created", date(2024, 5, 1))])
    assert row == {"total": 3.5, "created": "2024-05-01"}
    assert row.kind("total") is ValueKind.FLOAT


def test_row_typed_accessors():
    row = Row({"id": b"17", "ratio": "0.25", "name": b"caf\xc3\xa9", "flag": "yes", "gone": None, "n": 3})
    assert row.get_int("id") == 17
    assert row.get_int("ratio") == 0
    assert row.get_float("ratio") == 0.25
    assert row.get_str("name") == "café"
    assert row.get_str("n") == "3"
    assert row.get_bytes("n") == b"3"
    assert row.get_bool("flag") is True
    assert row.get_bool("n") is True


def test_row_accessors_default_for_null_and_missing():
    row = Row({"gone": None})
    assert row.get_int("gone") == 0
    assert row.get_int("missing", default=None) is None
    assert row.get_str("gone", default="n/a") == "n/a"
    assert row.get_bool("gone") is False


def test_row_get_bool_rejects_garbage():
    with pytest.raises(ValueError, match="not a boolean"):
        Row({"flag": "maybe"}).get_bool("flag")
