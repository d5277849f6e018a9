"""
Built-in convertors.

A convertor turns the raw value of a flag into the declared type. It receives
- a str: the literal text given after '=' or after a separating space,
- True: the flag was present without a value,
- None: the flag is absent and no default applies,
- or whatever a default supplier returned (defaults go through the convertor too).

The lenient convertors map “no value” to None; the strict ones fall back to a
concrete value of their type. Text that cannot be converted raises ConversionError,
which is printable, so a top-level runner reports it instead of crashing.
"""
import math
import numbers

from .faults import ConversionError


def boolean_convertor(value, /):
    """
    True/False pass through; "true"/"1" and "false"/"0" are recognized (case and
    surrounding spaces ignored); anything else yields None.
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return None

    text = str(value).strip().lower()

    if text in ("true", "1"):
        return True
    if text in ("false", "0"):
        return False
    return None


def strict_boolean_convertor(value, /):
    result = boolean_convertor(value)
    return False if result is None else result


def string_convertor(value, /):
    if value is None:
        return None
    return str(value)


def strict_string_convertor(value, /):
    result = string_convertor(value)
    return "" if result is None else result


def number_convertor(value, /):
    """
    numbers pass through, booleans become 0/1, numeric text becomes an int when it
    is integral and a float otherwise.

    raises
    - ConversionError for text that is not a number.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, numbers.Real):
        return value

    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        raise ConversionError("%r is not a valid number" % text, value=value) from None


def strict_number_convertor(value, /):
    result = number_convertor(value)
    return math.nan if result is None else result


def integer_convertor(value, /):
    """
    like number_convertor, but the result must be integral ("5" and 5.0 are
    accepted, "5.5" is not).
    """
    result = number_convertor(value)
    if result is None:
        return None
    if isinstance(result, float) and not result.is_integer():
        raise ConversionError("%r is not a valid integer" % (value,), value=value)
    return int(result)


__all__ = (
    "boolean_convertor",
    "strict_boolean_convertor",
    "string_convertor",
    "strict_string_convertor",
    "number_convertor",
    "strict_number_convertor",
    "integer_convertor",
)
