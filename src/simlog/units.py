"""Parsing of textual energy quantities and locale-formatted decimals."""

from typing import Any

_MISSING = object()


class ParseError(ValueError):
    """Raised when a textual quantity cannot be parsed."""

    pass


def _to_float(text: str, original: Any) -> float:
    try:
        return float(text.strip())
    except ValueError:
        raise ParseError(f"Not a number: {original!r}") from None


def parse_decimal(text: Any, default: Any = _MISSING) -> float:
    """Parse a decimal that may use a comma as the decimal separator.

    Returns ``default`` when ``text`` is None; raises ParseError if no
    default was given or the text is not a number.
    """
    if text is None:
        if default is _MISSING:
            raise ParseError("No value to parse")
        return default
    if isinstance(text, bool):
        raise ParseError(f"Not a number: {text!r}")
    if isinstance(text, (int, float)):
        return float(text)

    return _to_float(str(text).replace(",", "."), text)


def parse_energy(text: Any, default: Any = _MISSING) -> float:
    """Parse an energy quantity such as "2 kWh", "1500 Wh" or "3" into kWh.

    Bare numbers are taken to be kWh. Returns ``default`` when ``text`` is
    None; raises ParseError if no default was given or the text is invalid.
    """
    if text is None:
        if default is _MISSING:
            raise ParseError("No energy value to parse")
        return default
    if isinstance(text, bool):
        raise ParseError(f"Not an energy quantity: {text!r}")
    if isinstance(text, (int, float)):
        return float(text)

    clean = str(text).strip().replace(",", ".").lower()
    if clean.endswith("kwh"):
        return _to_float(clean[:-3], text)
    if clean.endswith("wh"):
        return _to_float(clean[:-2], text) / 1000.0
    return _to_float(clean, text)


def format_energy(kwh: float, unit: str = "kWh") -> str:
    """Format an energy value in kWh as text in the given unit."""
    if unit.lower() == "wh":
        return f"{kwh * 1000.0} Wh"
    return f"{kwh} kWh"
