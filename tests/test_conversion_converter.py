"""
Tests for cfgbind/conversion/converter.py

The converter is exercised directly, without a Configuration, using small
hand-written raw values whose expected results are easy to reason about.
"""

from datetime import datetime
from enum import Enum

import numpy as np
import pytest

from cfgbind.binding.views import TypedView
from cfgbind.config.settings import BindingSettings
from cfgbind.conversion.converter import TypeConverter
from cfgbind.schema.contracts import (
    BOOLEAN,
    BYTE,
    CHAR,
    DOUBLE,
    FLOAT,
    INT,
    LONG,
    SHORT,
    STRING,
    Accessor,
    SchemaContract,
    array_of,
    contract_of,
    enum_of,
    opaque,
)
from cfgbind.utils.errors import (
    AmbiguousCharacterError,
    ConversionError,
    InvalidLiteralError,
    TypeMismatchError,
    UnsupportedConversionError,
)


class Mode(Enum):
    FAST = 1
    SAFE = 2


@pytest.fixture
def converter(settings):
    return TypeConverter(settings=settings)


def test_string_is_returned_unchanged(converter):
    """Test that strings need no conversion."""
    assert converter.convert(STRING, "abc") == "abc"


@pytest.mark.parametrize("target, raw, expected, dtype", [
    (BYTE, "3", 3, np.int8),
    (BYTE, "-128", -128, np.int8),
    (SHORT, "8", 8, np.int16),
    (INT, "+9", 9, np.int32),
    (LONG, "9223372036854775807", 2**63 - 1, np.int64),
])
def test_integer_literals(converter, target, raw, expected, dtype):
    """Test decimal integer parsing into the declared numpy width."""
    value = converter.convert(target, raw)

    assert value == expected
    assert isinstance(value, dtype)


@pytest.mark.parametrize("target, raw", [
    (INT, "notanumber"),
    (INT, "3.5"),
    (INT, " 3"),
    (INT, "1_000"),
    (INT, ""),
    (BYTE, "200"),
    (SHORT, "40000"),
    (INT, "2147483648"),
])
def test_invalid_integer_literals(converter, target, raw):
    """Test that malformed and out-of-range integers are invalid literals."""
    with pytest.raises(InvalidLiteralError) as exc_info:
        converter.convert(target, raw, key="value")

    assert exc_info.value.key == "value"
    assert exc_info.value.target is target
    assert exc_info.value.value == raw


def test_floating_literals(converter):
    """Test float and double parsing."""
    single = converter.convert(FLOAT, "0.9")
    double = converter.convert(DOUBLE, "0.9")

    assert isinstance(single, np.float32)
    assert isinstance(double, np.float64)
    assert np.isclose(single, 0.9)
    assert double == 0.9
    assert converter.convert(DOUBLE, "1e3") == 1000.0
    assert converter.convert(DOUBLE, ".5") == 0.5
    assert np.isnan(converter.convert(DOUBLE, "NaN"))
    assert converter.convert(DOUBLE, "-Infinity") == -np.inf
    assert converter.convert(FLOAT, "1e40") == np.inf


@pytest.mark.parametrize("raw", ["abc", "1,5", "", "0x10"])
def test_invalid_floating_literals(converter, raw):
    """Test that non-decimal strings are invalid float literals."""
    with pytest.raises(InvalidLiteralError):
        converter.convert(DOUBLE, raw)


@pytest.mark.parametrize("raw, expected", [
    ("true", True),
    ("TRUE", True),
    ("True", True),
    ("false", False),
    ("yes", False),
    ("1", False),
])
def test_boolean_literals(converter, raw, expected):
    """Test that only 'true' (any case) is True."""
    assert converter.convert(BOOLEAN, raw) is expected


def test_character_literals(converter):
    """Test that characters need exactly one character."""
    assert converter.convert(CHAR, "x") == "x"

    with pytest.raises(AmbiguousCharacterError):
        converter.convert(CHAR, "xy")
    with pytest.raises(AmbiguousCharacterError):
        converter.convert(CHAR, "")


def test_enum_literals(converter):
    """Test exact-name enum lookup."""
    assert converter.convert(enum_of(Mode), "SAFE") is Mode.SAFE

    with pytest.raises(InvalidLiteralError, match="FAST"):
        converter.convert(enum_of(Mode), "safe")


def test_enum_literals_from_mapping(converter):
    """Test enums declared as explicit literal mappings."""
    level = enum_of({"low": 1, "high": 2}, name="Level")

    assert converter.convert(level, "high") == 2
    assert converter.convert(level, 1) == 1
    with pytest.raises(InvalidLiteralError):
        converter.convert(level, "medium")


def test_mapping_enum_does_not_match_booleans(converter):
    """Test that a bare flag (True) is not taken for the variant valued 1."""
    level = enum_of({"low": 1, "high": 2}, name="Level")

    with pytest.raises(TypeMismatchError):
        converter.convert(level, True, key="level")
    with pytest.raises(TypeMismatchError):
        converter.convert(level, 1.0, key="level")


def test_array_comma_path_trims_and_drops_empty(converter):
    """Test splitting a scalar string into array elements."""
    assert converter.convert(array_of(STRING), "abc,def,ghi") == ("abc", "def", "ghi")
    assert converter.convert(array_of(STRING), " abc , ,def,ghi , ") == ("abc", "def", "ghi")
    assert converter.convert(array_of(STRING), "") == ()


def test_array_list_path_keeps_elements_whole(converter):
    """Test that accumulated lists convert element by element, unsplit."""
    result = converter.convert(array_of(STRING), ["1", "2,3", "4"])

    assert result == ("1", "2,3", "4")


def test_numeric_arrays_become_numpy_arrays(converter):
    """Test numeric elements collected into an array of the element dtype."""
    result = converter.convert(array_of(LONG), "1,2,3,4,5")

    assert isinstance(result, np.ndarray)
    assert result.dtype == np.int64
    assert np.array_equal(result, [1, 2, 3, 4, 5])

    flags = converter.convert(array_of(BOOLEAN), ["true", "false"])
    assert flags.dtype == np.bool_
    assert flags.tolist() == [True, False]

    empty = converter.convert(array_of(INT), " , ")
    assert empty.dtype == np.int32
    assert len(empty) == 0


def test_converted_arrays_are_read_only(converter):
    """Test that converted numpy arrays cannot be modified in place."""
    result = converter.convert(array_of(LONG), "1,2")

    assert not result.flags.writeable
    with pytest.raises(ValueError):
        result[0] = 99
    assert result.tolist() == [1, 2]


def test_array_element_errors_propagate(converter):
    """Test that one bad element fails the whole array."""
    with pytest.raises(InvalidLiteralError):
        converter.convert(array_of(INT), "1,two,3")


def test_array_uses_configured_separator():
    """Test splitting on a custom list separator."""
    converter = TypeConverter(settings=BindingSettings(list_separator=";"))

    assert converter.convert(array_of(STRING), "a,b;c") == ("a,b", "c")


def test_already_typed_values_pass_through(converter):
    """Test the structural fast path for pre-typed values."""
    started = datetime(2024, 1, 15)
    ports = np.array([80, 443], dtype=np.int32)

    assert converter.convert(INT, 8080) == 8080
    assert converter.convert(BYTE, np.int64(5)) == 5
    assert converter.convert(DOUBLE, 1) == 1
    assert converter.convert(BOOLEAN, True) is True
    assert converter.convert(enum_of(Mode), Mode.FAST) is Mode.FAST
    assert converter.convert(opaque(datetime), started) is started
    assert converter.convert(array_of(INT), ports) is ports


@pytest.mark.parametrize("target, raw", [
    (STRING, True),
    (INT, True),
    (INT, 2**40),
    (BYTE, 128),
    (DOUBLE, "1.0".encode()),
    (INT, ["1", "2"]),
    (CHAR, 7),
    (enum_of(Mode), 1),
    (array_of(INT), 5),
    (opaque(datetime), 5),
])
def test_non_string_mismatches(converter, target, raw):
    """Test that non-string values that do not fit the target are rejected."""
    with pytest.raises(TypeMismatchError) as exc_info:
        converter.convert(target, raw, key="value")

    assert isinstance(exc_info.value, ConversionError)
    assert isinstance(exc_info.value, TypeError)


def test_opaque_strings_are_unsupported(converter):
    """Test that opaque types have no string conversion rule."""
    with pytest.raises(UnsupportedConversionError, match="datetime"):
        converter.convert(opaque(datetime), "2024-01-15", key="started")


def test_nested_contract_uses_bind_callback(settings):
    """Test that contract targets are bound through the callback."""
    inner = SchemaContract("Inner", [Accessor("port", INT, default=1)])
    bound = []

    def bind(contract):
        bound.append(contract)
        return TypedView(contract, None)

    converter = TypeConverter(bind=bind, settings=settings)
    view = converter.convert(contract_of(inner), True)

    assert bound == [inner]
    assert isinstance(view, TypedView)


def test_nested_contract_without_binder_is_unsupported(converter):
    """Test that a converter with no binder cannot produce nested views."""
    inner = SchemaContract("Inner", [Accessor("port", INT, default=1)])

    with pytest.raises(UnsupportedConversionError):
        converter.convert(contract_of(inner), "anything")
