"""Low-level text helpers for noisy OCR output.

Number extraction and case normalisation shared by the field transformers.
"""

import re
from typing import List

from recipedia.models.models import DEFAULT_VALUE_NUMBER, OcrBlock
from recipedia.utils.logger import ocr_logger

ALL_NON_DIGIT_RE = re.compile(r"\D")
FIND_ALL_NUMBERS_RE = re.compile(r"\d+")
NUMBER_AT_FIRST_INDEX_RE = re.compile(r"^\d")
# Any unicode letter (accented ones included)
LETTER_RE = re.compile(r"[^\W\d_]")
NEW_LINES_RE = re.compile(r"\n+")


def convert_blocks_to_lines(blocks: List[OcrBlock]) -> List[str]:
    """Flatten the line texts of all blocks, in reading order."""
    return [line.text for block in blocks for line in block.lines]


def retrieve_number_from_string(text: str) -> int:
    """Read the number of a token such as "4p" or "25 min".

    Only the part before the first space is kept, then every non-digit
    character is dropped.

    Returns:
        The number, or DEFAULT_VALUE_NUMBER (-1) when no digit is found.
    """
    digits = ALL_NON_DIGIT_RE.sub("", text.split(" ")[0])
    if not digits:
        ocr_logger.error(f"No digits found in OCR text '{text}'")
        return DEFAULT_VALUE_NUMBER
    return int(digits)


def retrieve_number_in_str(text: str) -> int:
    """Return the first number written before the first letter of `text`, or -1."""
    letter = LETTER_RE.search(text)
    working_str = text[: letter.start()] if letter else text
    numbers = FIND_ALL_NUMBERS_RE.findall(working_str)
    if numbers:
        return int(numbers[0])
    return DEFAULT_VALUE_NUMBER


def starts_with_digit(text: str) -> bool:
    return bool(NUMBER_AT_FIRST_INDEX_RE.match(text))


def has_letters(text: str) -> bool:
    return bool(LETTER_RE.search(text))


def convert_to_lower_case_except_first_letter(text: str) -> str:
    """'CHOP THE onions' -> 'Chop the onions'. Anything before the first letter is dropped."""
    letter = LETTER_RE.search(text)
    if not letter:
        return ""
    index = letter.start()
    return text[index].upper() + text[index + 1 :].lower()


def collapse_new_lines(text: str) -> str:
    """Replace every run of newlines with a single space."""
    return NEW_LINES_RE.sub(" ", text)
