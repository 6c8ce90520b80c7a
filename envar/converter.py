"""String-to-Value Converter.

Converts raw environment strings to a field's declared type. Scalars are
looked up by type identity in a ConverterRegistry; typing forms (Optional,
Annotated, list/tuple/Sequence) are unwrapped around that lookup.
"""

import re
import types
from collections.abc import Callable, MutableSequence, Sequence
from datetime import timedelta
from typing import Annotated, Any, Union, get_args, get_origin

from envar.exceptions import ConversionError, UnsupportedTypeError

Converter = Callable[[str], Any]

_INT = re.compile(r"[+-]?[0-9]+")
_UINT = re.compile(r"\+?[0-9]+")

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})

# Microseconds per duration unit
_DURATION_UNITS = {
    "ns": 0.001,
    "us": 1.0,
    "µs": 1.0,  # U+00B5
    "μs": 1.0,  # U+03BC
    "ms": 1_000.0,
    "s": 1_000_000.0,
    "m": 60_000_000.0,
    "h": 3_600_000_000.0,
}
_DURATION_PART = re.compile(r"([0-9]+\.?[0-9]*|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION = re.compile(r"(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:ns|us|µs|μs|ms|s|m|h))+")

_SEQUENCE_ORIGINS = (list, tuple, Sequence, MutableSequence)


# ============================================================================
# SCALAR PARSERS
# ============================================================================


def parse_int(value: str) -> int:
    if not _INT.fullmatch(value):
        raise ConversionError("int", value, "not a base-10 integer")
    return int(value)


def parse_uint(value: str) -> int:
    if not _UINT.fullmatch(value):
        raise ConversionError("uint", value, "not a base-10 unsigned integer")
    return int(value)


def parse_bool(value: str) -> bool:
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConversionError("bool", value, "not a boolean literal")


def parse_float(value: str) -> float:
    if not value.isascii():
        raise ConversionError("float", value, "not a base-10 float")
    try:
        return float(value)
    except ValueError as e:
        raise ConversionError("float", value, str(e)) from e


def parse_complex(value: str) -> complex:
    """Parse "1+2i", "(1+2i)", "3i" or Python's "1+2j"."""
    literal = value.strip()
    if not literal.isascii():
        raise ConversionError("complex", value, "not a complex literal")
    if literal.startswith("(") and literal.endswith(")"):
        literal = literal[1:-1]
    if literal.endswith("i"):
        literal = literal[:-1] + "j"
    try:
        return complex(literal)
    except ValueError as e:
        raise ConversionError("complex", value, str(e)) from e


def parse_duration(value: str) -> timedelta:
    """Parse a duration literal such as "300ms", "30s", "1h30m" or "-1.5h".

    A unit is required for every number except a bare "0".
    """
    literal = value
    sign = 1
    if literal[:1] in ("+", "-"):
        sign = -1 if literal[0] == "-" else 1
        literal = literal[1:]

    if literal == "0":
        return timedelta(0)
    if not _DURATION.fullmatch(literal):
        raise ConversionError("timedelta", value, "invalid duration")

    micros = sum(float(number) * _DURATION_UNITS[unit] for number, unit in _DURATION_PART.findall(literal))
    try:
        return timedelta(microseconds=sign * micros)
    except OverflowError as e:
        raise ConversionError("timedelta", value, str(e)) from e


def parse_str(value: str) -> str:
    return value


# ============================================================================
# REGISTRY
# ============================================================================


def _kind(target_type: Any) -> str:
    if get_origin(target_type) is None and isinstance(target_type, type):
        return target_type.__name__
    return repr(target_type)


def _is_unsigned(metadata: Sequence[Any]) -> bool:
    """Annotated metadata with a non-negative lower bound (NonNegativeInt, conint(ge=0))."""
    for item in metadata:
        for bound in ("ge", "gt"):
            limit = getattr(item, bound, None)
            if isinstance(limit, int) and limit >= 0:
                return True
    return False


class ConverterRegistry:
    """Converters keyed by declared type."""

    def __init__(self):
        self._converters: dict[Any, Converter] = {}

    def register(self, target_type: Any, converter: Converter) -> None:
        """Register a converter for target_type (replaces an existing one)."""
        self._converters[target_type] = converter

    def get(self, target_type: Any) -> Converter | None:
        """Get converter by exact type."""
        return self._converters.get(target_type)

    def convert(self, value: str, target_type: Any) -> Any:
        """Convert value to target_type.

        Raises:
            UnsupportedTypeError: If no converter handles target_type
            ConversionError: If value is not a valid literal for target_type
        """
        origin = get_origin(target_type)

        if origin is Annotated:
            base, *metadata = get_args(target_type)
            if base is int and _is_unsigned(metadata):
                return parse_uint(value)
            return self.convert(value, base)

        if origin is Union or origin is types.UnionType:
            members = [arg for arg in get_args(target_type) if arg is not type(None)]
            if len(members) != 1:
                raise UnsupportedTypeError(_kind(target_type), value)
            return self.convert(value, members[0])

        if target_type in (list, tuple) or origin in _SEQUENCE_ORIGINS:
            return self._convert_sequence(value, target_type, origin)

        converter = self.get(target_type)
        if converter is None:
            raise UnsupportedTypeError(_kind(target_type), value)
        try:
            return converter(value)
        except ConversionError:
            raise
        except Exception as e:
            raise ConversionError(_kind(target_type), value, str(e) or type(e).__name__) from e

    def _convert_sequence(self, value: str, target_type: Any, origin: Any) -> list | tuple:
        args = get_args(target_type)
        container = tuple if (origin or target_type) is tuple else list

        if container is tuple and args:
            if len(args) != 2 or args[1] is not Ellipsis:
                raise UnsupportedTypeError(_kind(target_type), value)
            args = args[:1]

        parts = value.split(",")
        element_type = args[0] if args else str
        if element_type is str:
            return container(parts)
        return container(self.convert(part, element_type) for part in parts)


def default_registry() -> ConverterRegistry:
    """Registry with the built-in scalar converters."""
    registry = ConverterRegistry()
    registry.register(str, parse_str)
    registry.register(int, parse_int)
    registry.register(bool, parse_bool)
    registry.register(float, parse_float)
    registry.register(complex, parse_complex)
    registry.register(timedelta, parse_duration)
    return registry


_default = default_registry()


def convert(value: str, target_type: Any, registry: ConverterRegistry | None = None) -> Any:
    """Convert value to target_type with the given (or built-in) registry."""
    return (registry or _default).convert(value, target_type)
