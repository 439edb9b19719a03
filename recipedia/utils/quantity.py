"""Arithmetic on free-text ingredient quantities.

Quantities are stored as written on the recipe ("200", "1,5", "2 cups",
"a pinch"), so scaling and summing them works on the numeric tokens found
inside the text and leaves the rest untouched.
"""

import math
import re

from recipedia.utils.logger import shopping_logger

NUMBER_TOKEN_RE = re.compile(r"\d+(?:[.,]\d+)?")
SEPARATE_NUMBERS_RE = re.compile(r"\d+(?:[.,]\d+)?|\D+")
NUMERIC_RE = re.compile(r"^\s*(?:-?\d+(?:[.,]\d+)?)?\s*$")


def _round_half_up(value: float, digits: int = 2) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def format_number(value: float, decimal_separator: str = ".") -> str:
    """Render 3.0 as "3" and 1.25 as "1.25" (or "1,25" with a comma separator)."""
    if float(value).is_integer():
        return str(int(value))
    return repr(value).replace(".", decimal_separator)


def scale_quantity_for_persons(quantity: str, from_persons: int, to_persons: int) -> str:
    """Scale a quantity string written for `from_persons` to `to_persons`.

    Scales only when the string holds exactly one numeric token (dot or comma
    decimals). The result is rounded to 2 decimals and written with a comma
    decimal separator; the surrounding text is preserved.

    Args:
        quantity: Quantity as written, e.g. "200", "1.5 cups".
        from_persons: Persons count the quantity was written for.
        to_persons: Persons count to scale to.

    Returns:
        Scaled quantity, or the input unchanged when it cannot be scaled.
    """
    if from_persons <= 0 or to_persons <= 0 or from_persons == to_persons:
        return quantity

    tokens = NUMBER_TOKEN_RE.findall(quantity)
    if len(tokens) != 1:
        return quantity

    original_token = tokens[0]
    numeric_value = float(original_token.replace(",", "."))
    scaled = _round_half_up(numeric_value * to_persons / from_persons)
    return quantity.replace(original_token, format_number(scaled, ","), 1)


def is_number(value: str) -> bool:
    """True for plain numbers, with dot or comma decimals. The empty string counts as zero."""
    return bool(NUMERIC_RE.match(value))


def _to_number(value: str) -> float:
    return float(value.replace(",", ".")) if value.strip() else 0.0


def _decimal_separator(*values: str) -> str:
    # Keep the comma once an operand was written with one (scaled quantities are)
    return "," if any("," in value for value in values) else "."


def sum_number_in_string(lhs: str, rhs: str) -> str:
    return _operator_number_in_string(lhs, rhs, "+")


def subtract_number_in_string(lhs: str, rhs: str) -> str:
    return _operator_number_in_string(lhs, rhs, "-")


def _operator_number_in_string(lhs: str, rhs: str, operator: str) -> str:
    separator = _decimal_separator(lhs, rhs)

    def apply(left: float, right: float) -> str:
        result = left + right if operator == "+" else left - right
        return format_number(_round_half_up(result), separator)

    lhs_is_number = is_number(lhs)
    rhs_is_number = is_number(rhs)

    if lhs_is_number and rhs_is_number:
        return apply(_to_number(lhs), _to_number(rhs))

    if not lhs_is_number and not rhs_is_number:
        # Token-wise: "2 cups" + "3 cups" -> "5 cups"
        lhs_tokens = SEPARATE_NUMBERS_RE.findall(lhs)
        rhs_tokens = SEPARATE_NUMBERS_RE.findall(rhs)
        result = []
        for index, token in enumerate(lhs_tokens):
            other = rhs_tokens[index] if index < len(rhs_tokens) else ""
            if token.strip() and other.strip() and is_number(token) and is_number(other):
                result.append(apply(_to_number(token), _to_number(other)))
            elif token == other:
                result.append(token)
            else:
                result.append(token + other)
        return "".join(result)

    shopping_logger.error(
        f"Cannot combine a numeric and a non-numeric quantity: '{lhs}' {operator} '{rhs}'"
    )
    return lhs + rhs
