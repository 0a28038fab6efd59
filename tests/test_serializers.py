import math

import pytest

from hadoopstream.serializers import (
    BoolSerializer,
    ComplexSerializer,
    FloatSerializer,
    IntSerializer,
    JsonSerializer,
    NoKey,
    SerializationError,
    StringSerializer,
    UintSerializer,
    serializer_for,
)


@pytest.mark.parametrize("bits", [8, 16, 32, 64])
def test_int_bounds_round_trip(bits):
    serializer = IntSerializer(bits)
    low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1
    for number in (low, -1, 0, 1, high):
        assert serializer.deserialize(serializer.serialize(number)) == number


@pytest.mark.parametrize("bits", [8, 16, 32, 64])
def test_int_out_of_range(bits):
    serializer = IntSerializer(bits)
    too_big = str(2 ** (bits - 1)).encode()
    too_small = str(-(2 ** (bits - 1)) - 1).encode()
    with pytest.raises(SerializationError, match="out of range"):
        serializer.deserialize(too_big)
    with pytest.raises(SerializationError, match="out of range"):
        serializer.deserialize(too_small)
    with pytest.raises(SerializationError):
        serializer.serialize(2 ** (bits - 1))


def test_int_accepts_sign_and_leading_zeros():
    serializer = IntSerializer(8)
    assert serializer.deserialize(b"+12") == 12
    assert serializer.deserialize(b"-0012") == -12


@pytest.mark.parametrize("data", [b"", b"abc", b" 1", b"1 ", b"1_0", b"1.5", b"--1", b"0x10"])
def test_int_invalid_syntax(data):
    with pytest.raises(SerializationError, match="invalid syntax"):
        IntSerializer(64).deserialize(data)


def test_int_rejects_non_integers_on_serialize():
    with pytest.raises(SerializationError):
        IntSerializer(32).serialize(1.5)


def test_int_rejects_unknown_size():
    with pytest.raises(ValueError):
        IntSerializer(12)


@pytest.mark.parametrize("bits", [8, 16, 32, 64])
def test_uint_bounds_round_trip(bits):
    serializer = UintSerializer(bits)
    for number in (0, 1, 2**bits - 1):
        assert serializer.deserialize(serializer.serialize(number)) == number
    with pytest.raises(SerializationError, match="out of range"):
        serializer.deserialize(str(2**bits).encode())


@pytest.mark.parametrize("data", [b"-1", b"+1", b"", b"x"])
def test_uint_rejects_signs_and_garbage(data):
    with pytest.raises(SerializationError, match="invalid syntax"):
        UintSerializer(64).deserialize(data)


def test_uint_serialize_rejects_negative():
    with pytest.raises(SerializationError):
        UintSerializer(8).serialize(-1)


@pytest.mark.parametrize("value", [0.1, 1e21, -2.5, 1e-7, 123456.789, 5e-324, 1.7976931348623157e308])
def test_float64_round_trip_in_plain_notation(value):
    serializer = FloatSerializer(64)
    data = serializer.serialize(value)
    assert b"e" not in data and b"E" not in data
    assert serializer.deserialize(data) == value


def test_float64_whole_number_has_no_fraction():
    data = FloatSerializer(64).serialize(42.0)
    assert b"." not in data
    assert FloatSerializer(64).deserialize(data) == 42.0


def test_float32_shortest_form():
    serializer = FloatSerializer(32)
    value = serializer.deserialize(b"0.1")
    assert value != 0.1
    assert serializer.serialize(value) == b"0.1"


def test_float_special_values():
    serializer = FloatSerializer(64)
    assert serializer.serialize(math.inf) == b"+Inf"
    assert serializer.serialize(math.nan) == b"NaN"
    assert serializer.deserialize(serializer.serialize(-math.inf)) == -math.inf
    assert serializer.deserialize(b"inf") == math.inf
    assert serializer.deserialize(b"-Infinity") == -math.inf
    assert math.isnan(serializer.deserialize(b"NaN"))


def test_float_hex_form():
    assert FloatSerializer(64).deserialize(b"0x1p-2") == float.fromhex("0x1p-2")


@pytest.mark.parametrize("data", [b"", b" 1.5", b"1_0", b"abc", b"+nan", b"1e", b"0x1"])
def test_float_invalid_syntax(data):
    with pytest.raises(SerializationError, match="invalid syntax"):
        FloatSerializer(64).deserialize(data)


def test_float_range_errors():
    with pytest.raises(SerializationError, match="out of range"):
        FloatSerializer(64).deserialize(b"1e400")
    with pytest.raises(SerializationError, match="out of range"):
        FloatSerializer(32).deserialize(b"1e39")
    assert FloatSerializer(32).deserialize(b"1e38") > 0


def test_float32_serialize_overflow():
    with pytest.raises(SerializationError):
        FloatSerializer(32).serialize(1e300)


@pytest.mark.parametrize("flag", [True, False])
def test_bool_round_trip(flag):
    serializer = BoolSerializer()
    assert serializer.deserialize(serializer.serialize(flag)) is flag


@pytest.mark.parametrize("data", [b"1", b"t", b"T", b"TRUE", b"true", b"True"])
def test_bool_true_spellings(data):
    serializer = BoolSerializer()
    assert serializer.deserialize(data) is serializer.deserialize(serializer.serialize(True))


@pytest.mark.parametrize("data", [b"0", b"f", b"F", b"FALSE", b"false", b"False"])
def test_bool_false_spellings(data):
    serializer = BoolSerializer()
    assert serializer.deserialize(data) is serializer.deserialize(serializer.serialize(False))


@pytest.mark.parametrize("data", [b"yes", b"", b"tRUE", b"2"])
def test_bool_invalid(data):
    with pytest.raises(SerializationError):
        BoolSerializer().deserialize(data)


def test_complex_format():
    assert ComplexSerializer(128).serialize(complex(1, 2)) == b"(1+2i)"


@pytest.mark.parametrize("value", [complex(1, 2), complex(-0.5, -3.25), complex(0, 0), complex(1e21, 1e-7)])
def test_complex_round_trip(value):
    serializer = ComplexSerializer(128)
    assert serializer.deserialize(serializer.serialize(value)) == value


def test_complex_forms():
    serializer = ComplexSerializer(128)
    assert serializer.deserialize(b"(1+2i)") == complex(1, 2)
    assert serializer.deserialize(b"1-2i") == complex(1, -2)
    assert serializer.deserialize(b"3i") == complex(0, 3)
    assert serializer.deserialize(b"5") == complex(5, 0)
    assert math.isnan(serializer.deserialize(b"(1+NaNi)").imag)


def test_complex64_uses_float32_parts():
    serializer = ComplexSerializer(64)
    value = serializer.deserialize(b"(0.1+0.2i)")
    assert value.real != 0.1
    assert serializer.serialize(value) == b"(0.1+0.2i)"


@pytest.mark.parametrize("data", [b"1++2i", b"1+2", b"i", b"1+i", b"(1+2i", b"1+2ii", b""])
def test_complex_invalid(data):
    with pytest.raises(SerializationError):
        ComplexSerializer(128).deserialize(data)


def test_string_round_trip_keeps_raw_bytes():
    serializer = StringSerializer()
    data = b"caf\xc3\xa9 \xff\xfe"
    assert serializer.serialize(serializer.deserialize(data)) == data
    assert serializer.deserialize(serializer.serialize("hello")) == "hello"


def test_json_round_trip_and_sorted_keys():
    serializer = JsonSerializer()
    value = {"b": [1, 2.5, None], "a": {"x": True}}
    data = serializer.serialize(value)
    assert serializer.deserialize(data) == value
    assert data.index(b'"a"') < data.index(b'"b"')
    assert b" " not in data


def test_json_escapes_html_characters():
    serializer = JsonSerializer()
    value = {"html": "<a & b>"}
    data = serializer.serialize(value)
    assert b"<" not in data and b">" not in data and b"&" not in data
    assert serializer.deserialize(data) == value


def test_json_expected_type():
    mapping = JsonSerializer(dict)
    with pytest.raises(SerializationError):
        mapping.deserialize(b"[1]")
    assert mapping.deserialize(b"null") is None
    assert JsonSerializer(list).deserialize(b"[1, 2]") == [1, 2]


@pytest.mark.parametrize("data", [b"", b"{", b"NaN", b"[1] x"])
def test_json_invalid(data):
    with pytest.raises(SerializationError):
        JsonSerializer().deserialize(data)


def test_json_rejects_nan_on_serialize():
    with pytest.raises(SerializationError):
        JsonSerializer().serialize([math.nan])


def test_serializer_for_known_names():
    assert serializer_for("map").deserialize(b'{"k":1}') == {"k": 1}
    assert serializer_for("array").deserialize(b"[1]") == [1]
    with pytest.raises(SerializationError, match="out of range"):
        serializer_for("int8").deserialize(b"128")
    assert serializer_for("uint8").deserialize(b"255") == 255
    assert serializer_for("string").deserialize(b"abc") == "abc"


def test_serializer_for_unknown_name():
    with pytest.raises(ValueError, match="not support type"):
        serializer_for("chan")


def test_no_key_works_as_a_single_mapping_key():
    grouped = {NoKey(): "first"}
    grouped[NoKey()] = "second"
    assert len(grouped) == 1
    assert grouped[NoKey()] == "second"
    assert grouped.get("key") is None