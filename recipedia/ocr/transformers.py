"""Field transformers turning recognized text into structured recipe values.

Each transformer takes an OcrResult (blocks and lines in reading order) and
returns the shape expected for one recipe field:

- transform_ocr_in_one_number(): persons / time (number, numbers, or
  PersonAndTime pairs)
- transform_ocr_in_one_string(): title / description
- transform_ocr_in_preparation(): ordered PreparationStep list
- transform_ocr_in_ingredients(): IngredientOcr columns of a per-serving table

The heuristics assume the printed recipe cards this app was built for:
"4p" for a serving count, "25m" for a duration, numbered step headings and
an ingredient table whose rows start with a serving count.
"""

import re
from typing import List, Tuple, Union

from recipedia.models.models import (
    DEFAULT_VALUE_NUMBER,
    IngredientOcr,
    IngredientQuantityPerPersons,
    OcrResult,
    PersonAndTime,
    PreparationStep,
)
from recipedia.ocr.text_extraction import (
    collapse_new_lines,
    convert_blocks_to_lines,
    convert_to_lower_case_except_first_letter,
    has_letters,
    retrieve_number_from_string,
    retrieve_number_in_str,
    starts_with_digit,
)
from recipedia.utils.config import config
from recipedia.utils.logger import ocr_logger

UNIT_IN_PARENTHESES_RE = re.compile(r"\((.*?)\)")
STEP_HEADING_RE = re.compile(r"^\d+\s*[.):-]?\s*(.*)$")
QUANTITY_NUMBER_RE = re.compile(r"\d+(?:[.,]\d+)?")

# Unitless quantities above this are taken for a misaligned column
SUSPICIOUS_QUANTITY_WITHOUT_UNIT = 10

NumberOcrValue = Union[int, List[int], PersonAndTime, List[PersonAndTime]]


class OcrParseError(ValueError):
    """Recognized text does not have the structure expected for the field."""


# ============================================================================
# Persons / time
# ============================================================================


def _numbers_or_single(elements: List[str]) -> Union[int, List[int]]:
    numbers = [retrieve_number_from_string(element) for element in elements]
    return numbers[0] if len(numbers) == 1 else numbers


def transform_ocr_in_one_number(ocr: OcrResult) -> NumberOcrValue:
    """Read serving counts and/or durations.

    Lines containing the persons marker ("4p") and lines containing the time
    marker ("25m") are collected separately. When both lists have the same
    length their entries are paired by position. Otherwise the persons
    numbers win, or whichever list is non-empty.

    Returns:
        A single value unwrapped, several values as a list, or -1 when
        nothing could be recognized.
    """
    elements = convert_blocks_to_lines(ocr.blocks)

    persons_array = [element for element in elements if config.OCR_PERSONS_MARKER in element]
    time_array = [element for element in elements if config.OCR_TIME_MARKER in element]

    if persons_array and time_array:
        if len(persons_array) != len(time_array):
            ocr_logger.debug(
                f"Persons ({len(persons_array)}) and time ({len(time_array)}) counts differ, keeping persons"
            )
            return _numbers_or_single(persons_array)
        pairs = [
            PersonAndTime(
                person=retrieve_number_from_string(persons),
                time=retrieve_number_from_string(time),
            )
            for persons, time in zip(persons_array, time_array)
        ]
        return pairs[0] if len(pairs) == 1 else pairs
    if persons_array:
        return _numbers_or_single(persons_array)
    if time_array:
        return _numbers_or_single(time_array)

    ocr_logger.error(f"Unable to convert OCR text to number: {elements}")
    return DEFAULT_VALUE_NUMBER


# ============================================================================
# Free text
# ============================================================================


def transform_ocr_in_one_string(ocr: OcrResult) -> str:
    text = ocr.text or "\n".join(block.text for block in ocr.blocks)
    return collapse_new_lines(text)


# ============================================================================
# Preparation steps
# ============================================================================


def _is_valid_step_progression(step_number: int, current_number: int) -> bool:
    """Reject step numbers far ahead of the current one (misread bullets)."""
    if current_number == 0:
        return True
    if current_number <= 2:
        return step_number <= 4 * current_number
    return step_number <= 2 * current_number


def _step_at(steps: List[PreparationStep], index: int) -> PreparationStep:
    # Backfill skipped steps so the list index stays the step number
    while len(steps) <= index:
        steps.append(PreparationStep())
    return steps[index]


def _append_line(existing: str, addition: str) -> str:
    return f"{existing}\n{addition}" if existing else addition


def _parse_step_content(text: str) -> Tuple[str, str]:
    """Split a numbered block into (title, description).

    "1. CHOP VEGETABLES\\nDice the onions" -> ("Chop vegetables", "Dice the onions")
    """
    lines = [line.strip() for line in text.split("\n") if line.strip()]
    heading = STEP_HEADING_RE.match(lines[0])
    title_text = heading.group(1) if heading else lines[0]
    remaining = lines[1:]

    if not has_letters(title_text) and remaining:
        title_text = remaining.pop(0)

    title = convert_to_lower_case_except_first_letter(title_text) if has_letters(title_text) else ""
    return title, "\n".join(remaining)


def transform_ocr_in_preparation(ocr: OcrResult) -> List[PreparationStep]:
    """Segment recognized blocks into numbered preparation steps.

    A block starting with a plausible step number opens that step; its text
    after the number is the step title. A number-only block leaves the title
    to the next block. Any other block holding letters continues the current step.
    """
    steps: List[PreparationStep] = []
    current_number = 0
    waiting_for_title = False

    for block in ocr.blocks:
        text = block.text.strip()
        if not text:
            continue

        step_number = retrieve_number_in_str(text) if starts_with_digit(text) else DEFAULT_VALUE_NUMBER

        if step_number > 0 and _is_valid_step_progression(step_number, current_number):
            current_number = step_number
            step = _step_at(steps, step_number - 1)
            title, description = _parse_step_content(text)
            if title:
                step.title = title
            if description:
                step.description = _append_line(step.description, description)
            waiting_for_title = not step.title
            continue

        if step_number > 0:
            ocr_logger.debug(f"Ignoring implausible step number {step_number} after step {current_number}")

        if not has_letters(text):
            ocr_logger.debug(f"Skipping preparation block without text: {text!r}")
            continue

        step = _step_at(steps, max(current_number, 1) - 1)
        if waiting_for_title:
            step.title = convert_to_lower_case_except_first_letter(text)
            waiting_for_title = False
        else:
            step.description = _append_line(step.description, text)

    return steps


# ============================================================================
# Ingredient table
# ============================================================================


def _persons_marker_re() -> re.Pattern:
    return re.compile(rf"^(\d+)\s*{re.escape(config.OCR_PERSONS_MARKER)}\.?$", re.IGNORECASE)


def _flatten_ingredient_lines(ocr: OcrResult) -> List[str]:
    raw_lines = [line.text.strip() for block in ocr.blocks for line in block.lines]
    # Packaging label printed above the table
    if raw_lines and "box" in raw_lines[0].lower():
        raw_lines = raw_lines[1:]

    lines: List[str] = []
    for text in raw_lines:
        if not text:
            continue
        if "pers." in text.lower() and lines:
            # "2" followed by "pers." reads as the marker "2p"
            lines[-1] += config.OCR_PERSONS_MARKER
        else:
            lines.append(text)
    return lines


def _parse_ingredient_names_and_units(header_lines: List[str]) -> List[IngredientOcr]:
    ingredients = []
    for header in header_lines:
        unit_match = UNIT_IN_PARENTHESES_RE.search(header)
        if unit_match:
            name = " ".join(UNIT_IN_PARENTHESES_RE.sub(" ", header, count=1).split())
            ingredients.append(IngredientOcr(name=name, unit=unit_match.group(1).strip()))
        else:
            ingredients.append(IngredientOcr(name=header))
    return ingredients


def _group_rows(data_lines: List[str], marker_re: re.Pattern) -> List[Tuple[int, List[str]]]:
    rows: List[Tuple[int, List[str]]] = []
    for line in data_lines:
        marker = marker_re.match(line)
        if marker:
            rows.append((int(marker.group(1)), []))
        else:
            rows[-1][1].append(line)
    return rows


def _row_quantities(tokens: List[str], expected: int) -> List[str]:
    """Quantities of a row, split on spaces when recognized on a single line ("200 1")."""
    if len(tokens) < expected:
        split_tokens = [part for token in tokens for part in token.split()]
        if len(split_tokens) == expected:
            return split_tokens
    return tokens


def _is_quantity_suspicious(quantity: str, unit: str) -> bool:
    """Missing quantity, or a large count without unit (likely a misaligned column)."""
    if not quantity:
        return True
    number = QUANTITY_NUMBER_RE.search(quantity)
    if number is None:
        return False
    return unit == "" and float(number.group().replace(",", ".")) > SUSPICIOUS_QUANTITY_WITHOUT_UNIT


def _first_suspicious_column(quantities: List[str], ingredients: List[IngredientOcr]) -> int:
    for index, ingredient in enumerate(ingredients):
        quantity = quantities[index] if index < len(quantities) else ""
        if _is_quantity_suspicious(quantity, ingredient.unit):
            return index
    return -1


def _merge_wrapped_headers(ingredients: List[IngredientOcr], first_row: List[str]) -> None:
    """Join header names that were recognized over two lines.

    "Olive" followed by "oil (ml)" produces one column too many, which shows
    as a unitless quantity that is too large in the first row. The column is
    merged with the next header as long as the columns after it look sane.
    """
    while True:
        quantities = _row_quantities(first_row, len(ingredients))
        index = _first_suspicious_column(quantities, ingredients)
        # A trailing missing quantity is a short row, not a wrapped header
        if index == -1 or index >= len(quantities) or index + 1 >= len(ingredients):
            return

        following = range(index + 1, min(len(quantities), len(ingredients)))
        if any(_is_quantity_suspicious(quantities[i], ingredients[i].unit) for i in following):
            ocr_logger.warning(
                f"Cannot merge ingredients '{ingredients[index].name}' and '{ingredients[index + 1].name}'"
            )
            return

        current, wrapped = ingredients[index], ingredients.pop(index + 1)
        ocr_logger.debug(f"Merging wrapped ingredient header '{current.name}' + '{wrapped.name}'")
        current.name = f"{current.name} {wrapped.name}"
        current.unit += wrapped.unit


def transform_ocr_in_ingredients(ocr: OcrResult) -> List[IngredientOcr]:
    """Parse an ingredient table with one quantity column per ingredient.

    Expected layout (reading order):

        Flour (g)
        Sugar (tsp)
        2p
        200
        1
        4p
        400 2

    Every line before the first persons marker names one ingredient, with
    an optional unit in parentheses. Each marker opens a row holding one
    quantity per ingredient, in header order.

    Recognition noise is repaired where possible: header names wrapped over
    two lines are joined using the first row as reference, rows missing
    quantities are skipped and rows after the first with suspicious
    quantities are dropped.

    Raises:
        OcrParseError: No persons marker was found, so the text is not an
            ingredient table.
    """
    lines = _flatten_ingredient_lines(ocr)
    marker_re = _persons_marker_re()

    header_boundary = next((index for index, line in enumerate(lines) if marker_re.match(line)), -1)
    if header_boundary == -1:
        raise OcrParseError(f"No persons marker found in ingredient table: {lines}")

    ingredients = _parse_ingredient_names_and_units(lines[:header_boundary])
    if not ingredients:
        ocr_logger.warning("Ingredient table has no ingredient names before its first persons marker")
        return []

    rows = _group_rows(lines[header_boundary:], marker_re)
    _merge_wrapped_headers(ingredients, rows[0][1])

    expected = len(ingredients)
    for row_index, (persons, tokens) in enumerate(rows):
        tokens = _row_quantities(tokens, expected)
        if len(tokens) < expected:
            ocr_logger.warning(
                f"Skipping ingredient row for {persons} persons: "
                f"expected {expected} quantities, got {len(tokens)} ({tokens})"
            )
            continue
        if len(tokens) > expected:
            ocr_logger.warning(
                f"Ingredient row for {persons} persons has {len(tokens)} quantities, "
                f"keeping the first {expected}"
            )
            tokens = tokens[:expected]
        if row_index > 0 and _first_suspicious_column(tokens, ingredients) != -1:
            ocr_logger.warning(f"Dropping suspicious ingredient row for {persons} persons: {tokens}")
            continue

        for ingredient, quantity in zip(ingredients, tokens):
            ingredient.quantity_per_persons.append(IngredientQuantityPerPersons(persons=persons, quantity=quantity))

    return ingredients
