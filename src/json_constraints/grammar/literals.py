"""
literals.py

PURPOSE: Building blocks for GBNF productions: quoting, rule names, digit ranges.
DEPENDENCIES: None (pure Python)

ARCHITECTURE NOTES:
The target notation only offers quoted literals, character classes, rule
references, grouping, alternation (|) and zero-or-one (?). Anything that would
normally use a counted repetition is spelled out here with nested optional
groups, and integer ranges are expanded into exact digit-class alternations.

All functions are pure; the compiler decides which productions become rules.
"""

import json
import re

from json_constraints.errors import GrammarError

# One character of a JSON string body: anything except quote, backslash and
# control characters, so every generated string is valid JSON without escapes.
STRING_CHAR = r'[^"\\\x00-\x1F\x7F]'

DIGIT = "[0-9]"

# Fraction digits emitted for floats (the first one is mandatory)
FLOAT_FRACTION_DIGITS = 6

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


def literal(text: str) -> str:
    """
    Quote text as a GBNF string literal.

    Raw newlines and other control characters are rejected; callers JSON-encode
    their text first, which turns those into escape sequences.

    Raises:
        GrammarError: If text contains a control character.
    """
    if _CONTROL_CHARS.search(text):
        raise GrammarError(f"Control characters are not allowed in grammar literals: {text!r}")
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def json_literal(value: object) -> str:
    """GBNF literal that reproduces the JSON encoding of value."""
    return literal(json_text(value))


def json_text(value: object) -> str:
    """Compact JSON encoding of a scalar (non-ASCII kept as-is)."""
    return json.dumps(value, ensure_ascii=False)


def sanitize_rule_name(name: str) -> str:
    """
    Map a field name onto the GBNF identifier alphabet.

    ASCII letters and digits pass through unchanged; every other character
    becomes "-x<hex>-". The mapping is injective, and because every dash it
    produces is followed by "x", its output can never look like a shared
    primitive rule such as "string-3-20".

    Examples:
        >>> sanitize_rule_name("character")
        'character'
        >>> sanitize_rule_name("first_name")
        'first-x5f-name'
    """
    parts = []
    for char in name:
        if char.isascii() and char.isalnum():
            parts.append(char)
        else:
            parts.append(f"-x{ord(char):x}-")
    return "".join(parts)


def number_token(value: int | float) -> str:
    """
    Render a numeric bound for use inside a rule name.

    "-" becomes "m" and "." becomes "d"; a float exponent keeps its "e".

    Examples:
        >>> number_token(-5)
        'm5'
        >>> number_token(2.5)
        '2d5'
    """
    text = repr(value)
    return text.replace("-", "m").replace(".", "d").replace("+", "")


def bounded_repeat(atom: str, min_count: int, max_count: int) -> str:
    """
    Repeat atom between min_count and max_count times.

    The mandatory copies are listed, the optional ones nest so every length has
    exactly one derivation:  a a (a (a)?)?
    """
    mandatory = [atom] * min_count
    optional = ""
    for _ in range(max_count - min_count):
        optional = f"({atom} {optional})?" if optional else f"({atom})?"
    parts = mandatory + ([optional] if optional else [])
    return " ".join(parts)


def _digit_class(low: int, high: int) -> str:
    if low == high:
        return f'"{low}"'
    if low == 0 and high == 9:
        return DIGIT
    return f"[{low}-{high}]"


def _same_length_range(low: str, high: str) -> list[list[str]]:
    """
    Digit-class sequences matching every number from low to high.

    Both bounds have the same number of digits.
    """
    if len(low) == 1:
        return [[_digit_class(int(low), int(high))]]

    first_low, first_high = int(low[0]), int(high[0])
    rest_low, rest_high = low[1:], high[1:]
    width = len(rest_low)

    if first_low == first_high:
        return [
            [_digit_class(first_low, first_low)] + tail
            for tail in _same_length_range(rest_low, rest_high)
        ]

    sequences: list[list[str]] = []
    full_start, full_end = first_low, first_high

    if rest_low != "0" * width:
        sequences.extend(
            [_digit_class(first_low, first_low)] + tail
            for tail in _same_length_range(rest_low, "9" * width)
        )
        full_start += 1

    upper_partial = rest_high != "9" * width
    if upper_partial:
        full_end -= 1

    if full_start <= full_end:
        sequences.append([_digit_class(full_start, full_end)] + [DIGIT] * width)

    if upper_partial:
        sequences.extend(
            [_digit_class(first_high, first_high)] + tail
            for tail in _same_length_range("0" * width, rest_high)
        )

    return sequences


def _natural_range(low: int, high: int) -> list[list[str]]:
    """Sequences for low..high where 0 <= low <= high, without leading zeros."""
    sequences: list[list[str]] = []
    for width in range(len(str(low)), len(str(high)) + 1):
        band_low = max(low, 10 ** (width - 1) if width > 1 else 0)
        band_high = min(high, 10**width - 1)
        if band_low <= band_high:
            sequences.extend(_same_length_range(str(band_low), str(band_high)))
    return sequences


def integer_range(low: int, high: int) -> str:
    """
    Alternation matching exactly the decimal integers in [low, high].

    Example:
        >>> integer_range(0, 120)
        '[0-9] | [1-9] [0-9] | "1" [0-1] [0-9] | "1" "2" "0"'
    """
    alternatives: list[str] = []
    if low < 0:
        neg_high = min(high, -1)
        for seq in _natural_range(-neg_high, -low):
            alternatives.append(" ".join(['"-"'] + seq))
    if high >= 0:
        for seq in _natural_range(max(low, 0), high):
            alternatives.append(" ".join(seq))
    return " | ".join(alternatives)


def float_pattern(low: float, high: float) -> str:
    """
    Decimal pattern for floats between low and high.

    The sign and the magnitude of the integer part follow the bounds; the exact
    range is left to the validator.
    """
    magnitude = int(max(abs(low), abs(high)))
    integer_part = integer_range(0, magnitude)
    if " | " in integer_part:
        integer_part = f"({integer_part})"
    fraction = bounded_repeat(DIGIT, 1, FLOAT_FRACTION_DIGITS)

    parts = []
    if high < 0:
        parts.append('"-"')
    elif low < 0:
        parts.append('"-"?')
    parts.extend([integer_part, '"."', fraction])
    return " ".join(parts)
