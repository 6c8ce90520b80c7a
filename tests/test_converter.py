"""String-to-Value Converter Tests."""

from collections.abc import Sequence
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional, Union

import pytest
from pydantic import NonNegativeInt

from envar.converter import convert, default_registry, parse_duration
from envar.exceptions import ConversionError, UnsupportedTypeError


# ============================================================================
# SCALARS
# ============================================================================


def test_convert_canonical_literals():
    """Test canonical literal for each supported kind."""
    assert convert("hello world", str) == "hello world"
    assert convert("42", int) == 42
    assert convert("true", bool) is True
    assert convert("3.14", float) == 3.14
    assert convert("30s", timedelta) == timedelta(seconds=30)
    assert convert("a,b,c", list[str]) == ["a", "b", "c"]


def test_convert_int_signs():
    """Test signed base-10 integers."""
    assert convert("-7", int) == -7
    assert convert("+3", int) == 3


@pytest.mark.parametrize("literal", ["4.2", "", "0x10", "ten", "1_000"])
def test_convert_int_rejects_non_decimal(literal):
    """Test anything but base-10 digits fails."""
    with pytest.raises(ConversionError) as exc_info:
        convert(literal, int)

    assert exc_info.value.kind == "int"
    assert exc_info.value.value == literal


def test_convert_unsigned():
    """Test non-negative constrained ints parse as unsigned."""
    assert convert("7", NonNegativeInt) == 7

    with pytest.raises(ConversionError) as exc_info:
        convert("-1", NonNegativeInt)

    assert exc_info.value.kind == "uint"


@pytest.mark.parametrize("literal", ["1", "t", "T", "TRUE", "true", "True"])
def test_convert_bool_true(literal):
    assert convert(literal, bool) is True


@pytest.mark.parametrize("literal", ["0", "f", "F", "FALSE", "false", "False"])
def test_convert_bool_false(literal):
    assert convert(literal, bool) is False


def test_convert_bool_rejects_other_words():
    """Test unknown boolean words fail."""
    with pytest.raises(ConversionError, match="bool"):
        convert("yes", bool)


def test_convert_float():
    """Test floats and float failures."""
    assert convert("-0.5", float) == -0.5
    assert convert("1e3", float) == 1000.0

    with pytest.raises(ConversionError, match="float"):
        convert("pi", float)


def test_convert_complex():
    """Test complex literals in i and j notation."""
    assert convert("1+2i", complex) == complex(1, 2)
    assert convert("(1+2i)", complex) == complex(1, 2)
    assert convert("3i", complex) == 3j
    assert convert("1+2j", complex) == complex(1, 2)
    assert convert("5", complex) == complex(5, 0)

    with pytest.raises(ConversionError, match="complex"):
        convert("1+2k", complex)


# ============================================================================
# DURATIONS
# ============================================================================


def test_parse_duration_units():
    """Test each unit and compound literals."""
    assert parse_duration("300ms") == timedelta(milliseconds=300)
    assert parse_duration("1h30m") == timedelta(hours=1, minutes=30)
    assert parse_duration("1.5h") == timedelta(minutes=90)
    assert parse_duration("2m3s") == timedelta(minutes=2, seconds=3)
    assert parse_duration("250us") == timedelta(microseconds=250)
    assert parse_duration("250µs") == timedelta(microseconds=250)
    assert parse_duration("4000ns") == timedelta(microseconds=4)


def test_parse_duration_sign_and_zero():
    """Test signs and the bare zero literal."""
    assert parse_duration("-2m") == -timedelta(minutes=2)
    assert parse_duration("+5s") == timedelta(seconds=5)
    assert parse_duration("0") == timedelta(0)


@pytest.mark.parametrize("literal", ["30", "", "-", "5 s", "1d", "s"])
def test_parse_duration_rejects_invalid(literal):
    """Test a unit is required and only known units are accepted."""
    with pytest.raises(ConversionError) as exc_info:
        parse_duration(literal)

    assert exc_info.value.kind == "timedelta"


# ============================================================================
# SEQUENCES AND WRAPPERS
# ============================================================================


def test_convert_sequence_does_not_trim():
    """Test elements keep surrounding whitespace."""
    assert convert("a, b ,c", list[str]) == ["a", " b ", "c"]


def test_convert_sequence_forms():
    """Test bare list, tuple and Sequence annotations."""
    assert convert("a,b", list) == ["a", "b"]
    assert convert("a,b", tuple[str, ...]) == ("a", "b")
    assert convert("a,b", Sequence[str]) == ["a", "b"]
    assert convert("solo", list[str]) == ["solo"]


def test_convert_sequence_of_ints():
    """Test elements are converted to the element type."""
    assert convert("1,2,3", list[int]) == [1, 2, 3]

    with pytest.raises(ConversionError):
        convert("1,two,3", list[int])


def test_convert_optional():
    """Test Optional[T] and T | None convert as T."""
    assert convert("5", Optional[int]) == 5
    assert convert("5", int | None) == 5


# ============================================================================
# UNSUPPORTED TYPES AND REGISTRY
# ============================================================================


@pytest.mark.parametrize("target_type", [dict, set[str], tuple[str, int], Union[int, str], Path])
def test_convert_unsupported_types(target_type):
    """Test types outside the closed set raise UnsupportedTypeError."""
    with pytest.raises(UnsupportedTypeError) as exc_info:
        convert("value", target_type)

    assert "unsupported field type" in str(exc_info.value)
    assert "'value'" in str(exc_info.value)


def test_unsupported_type_is_conversion_error():
    """Test callers can catch both failures as ConversionError."""
    with pytest.raises(ConversionError):
        convert("x", dict)


def test_registry_custom_converter():
    """Test a registered converter extends the closed set."""
    registry = default_registry()
    registry.register(Path, Path)

    assert convert("/etc/app", Path, registry) == Path("/etc/app")
    assert convert("/a,/b", list[Path], registry) == [Path("/a"), Path("/b")]
    assert registry.get(Path) is Path


def test_default_registry_is_not_shared():
    """Test registering on one registry does not leak into the built-in one."""
    registry = default_registry()
    registry.register(Path, Path)

    with pytest.raises(UnsupportedTypeError):
        convert("/etc/app", Path)


@pytest.mark.parametrize(
    "literal, target_type",
    [("١٢", int), ("١٢", NonNegativeInt), ("١.٥", float), ("١+٢i", complex), ("١٢s", timedelta)],
)
def test_convert_rejects_non_ascii_digits(literal, target_type):
    """Test only ASCII 0-9 count as base-10 digits."""
    with pytest.raises(ConversionError):
        convert(literal, target_type)


def test_registry_custom_converter_errors_become_conversion_errors():
    """Test any exception from a registered converter surfaces as ConversionError."""
    registry = default_registry()
    registry.register(Decimal, Decimal)

    assert convert("9.50", Decimal, registry) == Decimal("9.50")

    with pytest.raises(ConversionError) as exc_info:
        convert("abc", Decimal, registry)

    assert exc_info.value.kind == "Decimal"
    assert isinstance(exc_info.value.__cause__, InvalidOperation)
