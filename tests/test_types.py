"""Tests for the validator catalog."""

import uuid

import pytest

from cassandra_cli.errors import LiteralTypeError, SchemaError
from cassandra_cli.types import REGISTRY, LONG_MAX, LONG_MIN, Validator, ValidatorRegistry


class TestValidatorEncoding:
    """Tests for literal encode/decode per validator."""

    def test_utf8(self):
        assert Validator.UTF8.encode("héllo") == "héllo".encode("utf-8")
        assert Validator.UTF8.decode(b"hello") == "hello"

    def test_utf8_invalid_bytes(self):
        with pytest.raises(LiteralTypeError):
            Validator.UTF8.decode(b"\xff\xfe")

    def test_long(self):
        assert Validator.LONG.encode("15") == b"\x00" * 7 + b"\x0f"
        assert Validator.LONG.encode("-1") == b"\xff" * 8
        assert Validator.LONG.decode(Validator.LONG.encode("-23876")) == "-23876"

    def test_long_bounds(self):
        assert Validator.LONG.decode(Validator.LONG.encode(str(LONG_MAX))) == str(LONG_MAX)
        assert Validator.LONG.decode(Validator.LONG.encode(str(LONG_MIN))) == str(LONG_MIN)
        with pytest.raises(LiteralTypeError):
            Validator.LONG.encode(str(LONG_MAX + 1))

    def test_long_rejects_text(self):
        with pytest.raises(LiteralTypeError):
            Validator.LONG.encode("abc")

    def test_long_decode_requires_eight_bytes(self):
        with pytest.raises(LiteralTypeError):
            Validator.LONG.decode(b"\x01\x02")
        assert Validator.LONG.decode(b"") == ""

    def test_integer_minimal_twos_complement(self):
        assert Validator.INTEGER.encode("0") == b"\x00"
        assert Validator.INTEGER.encode("127") == b"\x7f"
        assert Validator.INTEGER.encode("128") == b"\x00\x80"
        assert Validator.INTEGER.encode("-1") == b"\xff"
        assert Validator.INTEGER.encode("-128") == b"\x80"
        assert Validator.INTEGER.encode("-129") == b"\xff\x7f"

    def test_integer_arbitrary_precision(self):
        text = "123848374878933948398384"
        assert Validator.INTEGER.decode(Validator.INTEGER.encode(text)) == text
        assert Validator.INTEGER.decode(Validator.INTEGER.encode("-340897")) == "-340897"

    def test_integer_beyond_digit_limit(self):
        ones = "1" * 5000
        encoded = Validator.INTEGER.encode(ones)
        assert int.from_bytes(encoded, "big", signed=True) == (10 ** 5000 - 1) // 9
        assert Validator.INTEGER.decode(encoded) == ones
        padded = "-1" + "0" * 2500 + "5"
        assert Validator.INTEGER.decode(Validator.INTEGER.encode(padded)) == padded
        assert Validator.INTEGER.decode(Validator.INTEGER.encode("007")) == "7"

    def test_long_rejects_huge_literal(self):
        with pytest.raises(LiteralTypeError, match="out of range"):
            Validator.LONG.encode("9" * 5000)

    def test_lexical_uuid(self):
        text = "550e8400-e29b-41d4-a716-446655440000"
        data = Validator.LEXICAL_UUID.encode(text)
        assert len(data) == 16
        assert Validator.LEXICAL_UUID.decode(data) == text

    def test_time_uuid_requires_version_one(self):
        text = "a8098c1a-f86e-11da-bd1a-00112444be1e"
        assert Validator.TIME_UUID.decode(Validator.TIME_UUID.encode(text)) == text
        with pytest.raises(LiteralTypeError):
            Validator.TIME_UUID.encode("550e8400-e29b-41d4-a716-446655440000")

    def test_time_uuid_now(self):
        value = uuid.UUID(bytes=Validator.TIME_UUID.encode("now"))
        assert value.version == 1

    def test_uuid_rejects_garbage(self):
        with pytest.raises(LiteralTypeError):
            Validator.LEXICAL_UUID.encode("not-a-uuid")

    def test_bytes_hex(self):
        assert Validator.BYTES.encode("0a0b") == b"\x0a\x0b"
        assert Validator.BYTES.encode("abc") == b"\x0a\xbc"
        assert Validator.BYTES.decode(b"\x0a\xbc") == "0abc"
        with pytest.raises(LiteralTypeError):
            Validator.BYTES.encode("xyz")

    def test_counter_not_encodable(self):
        with pytest.raises(LiteralTypeError):
            Validator.COUNTER.encode("1")
        assert Validator.COUNTER.decode(Validator.LONG.encode("42")) == "42"


class TestValidatorGenerate:
    def test_generate_uuids(self):
        assert uuid.UUID(bytes=Validator.TIME_UUID.generate()).version == 1
        assert uuid.UUID(bytes=Validator.LEXICAL_UUID.generate()).version == 4

    def test_generate_requires_argument_for_others(self):
        with pytest.raises(LiteralTypeError):
            Validator.LONG.generate()


class TestSortKey:
    def test_long_sorts_numerically(self):
        values = ["10", "-5", "2"]
        encoded = sorted((Validator.LONG.encode(v) for v in values), key=Validator.LONG.sort_key)
        assert [Validator.LONG.decode(e) for e in encoded] == ["-5", "2", "10"]

    def test_integer_sorts_numerically(self):
        values = ["98349387493847748398334", "-1", "98349387493"]
        encoded = sorted((Validator.INTEGER.encode(v) for v in values), key=Validator.INTEGER.sort_key)
        assert [Validator.INTEGER.decode(e) for e in encoded] == ["-1", "98349387493", "98349387493847748398334"]

    def test_bytes_sort_lexically(self):
        assert Validator.UTF8.sort_key(b"a") < Validator.UTF8.sort_key(b"b")


class TestValidatorRegistry:
    """Tests for validator name lookup."""

    @pytest.mark.parametrize("name", [
        "LongType",
        "longtype",
        "long",
        "Long",
        "org.apache.cassandra.db.marshal.LongType",
        "'LongType'",
    ])
    def test_lookup_forms(self, name):
        assert REGISTRY.get(name) is Validator.LONG

    def test_unknown_fails_closed(self):
        assert REGISTRY.get("FloatType") is None
        assert "FloatType" not in REGISTRY
        with pytest.raises(SchemaError):
            REGISTRY.get_or_raise("FloatType")

    def test_list_names(self):
        registry = ValidatorRegistry()
        assert set(registry.list_names()) == {
            "utf8", "long", "integer", "lexicaluuid", "timeuuid", "counter", "bytes",
        }
