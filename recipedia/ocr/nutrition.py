"""Nutrition label structuring.

A photographed label reads as a column of nutrient names, a "per 100 g"
heading, then the values in the same order:

    Energy
    Fat
    of which saturates
    Per 100 g
    1046 kJ
    250 kcal
    12 g
    3,5 g

Labels are recognized against English and French terms, exactly or with a
difflib ratio (OCR typos). Energy is usually printed once for a kJ and a
kcal value, so a lone energy label is duplicated and the two values are
told apart by magnitude.
"""

import re
from difflib import SequenceMatcher
from typing import Dict, List, Optional

from recipedia.models.models import NutritionFacts, OcrResult
from recipedia.ocr.text_extraction import convert_blocks_to_lines
from recipedia.utils.logger import ocr_logger

# Checked in order: the first nutrient whose terms match a label wins, so
# "saturated fat" must come before "fat" and "kj" before "energy".
NUTRIENT_TERMS: Dict[str, List[str]] = {
    "saturated_fat": ["saturated fat", "saturates", "acides gras saturés", "acides gras satures"],
    "sugars": ["sugars", "sucres"],
    "energy_kj": ["kj"],
    "energy_kcal": ["energy", "énergie", "energie", "kcal", "calories"],
    "fat": ["fat", "matières grasses", "matieres grasses", "lipides"],
    "carbohydrates": ["carbohydrate", "glucides"],
    "fiber": ["fibre", "fiber", "fibres alimentaires"],
    "protein": ["protein", "protéines", "proteines"],
    "salt": ["salt", "sel"],
    "portion_weight": ["portion weight", "serving size", "poids de la portion"],
}
PER_100G_TERMS = ["per 100 g", "per 100g", "pour 100 g", "pour 100g"]
PER_PORTION_TERMS = ["per portion", "per serving", "par portion", "pour une portion"]

ENERGY_KEYS = ("energy_kcal", "energy_kj")

MAX_NUTRITION_VALUE = 10000
# A lone energy value from this one up is read as kJ
ENERGY_KJ_FROM = 1000

_TERM_MATCH_THRESHOLD = 0.8
_FUZZY_MIN_LEN = 4
# Lines a wrapped heading ("Per" / "100 g") may span
_MAX_HEADING_LINES = 3

PARENTHESES_RE = re.compile(r"\([^)]*\)")
WHITESPACE_RE = re.compile(r"\s+")
LEADING_I_RE = re.compile(r"^I(\d)")
STARTS_WITH_LETTER_RE = re.compile(r"^[^\W\d_]")
LETTERS_BETWEEN_DIGITS_RE = re.compile(r"\d\s*[^\W\d_]+\s*\d")
ENDS_WITH_LETTERS_RE = re.compile(r"\s*[^\W\d_]+$")
DIGITS_DOTS_SPACES_RE = re.compile(r"^[\d.\s]+$")


def _matches_term(line: str, terms: List[str]) -> bool:
    text = line.strip().lower()
    for term in terms:
        if term in text:
            return True
        if len(text) >= _FUZZY_MIN_LEN and SequenceMatcher(None, text, term).ratio() >= _TERM_MATCH_THRESHOLD:
            return True
    return False


def _nutrient_key(label: str) -> Optional[str]:
    return next((key for key, terms in NUTRIENT_TERMS.items() if _matches_term(label, terms)), None)


def parse_nutrition_value(text: str) -> Optional[float]:
    """Read a label value such as "12,5 g" or "1046kJ".

    A value without trailing unit is assumed to end with a misread one
    ("12,59" for "12,5g") and loses its last character.

    Returns:
        The value rounded to 2 decimals, or None when the text is not a
        plausible nutrition value.
    """
    cleaned = PARENTHESES_RE.sub("", text.strip())
    cleaned = WHITESPACE_RE.sub(" ", cleaned).strip()
    cleaned = LEADING_I_RE.sub(r"1\1", cleaned)
    if not cleaned:
        return None

    if STARTS_WITH_LETTER_RE.match(cleaned) or LETTERS_BETWEEN_DIGITS_RE.search(cleaned):
        return None

    if ENDS_WITH_LETTERS_RE.search(cleaned):
        numeric_part = ENDS_WITH_LETTERS_RE.sub("", cleaned).strip()
    elif len(cleaned) > 1:
        numeric_part = cleaned[:-1]
    else:
        return None

    normalized = numeric_part.replace(",", ".", 1)
    if not DIGITS_DOTS_SPACES_RE.match(normalized):
        return None

    try:
        # Spaces are thousands separators: "1 046"
        value = float(normalized.replace(" ", ""))
    except ValueError:
        return None

    if value < 0 or value > MAX_NUTRITION_VALUE:
        return None
    return round(value, 2)


def _find_per_100g_heading(lines: List[str]) -> int:
    """Index of the "per 100 g" heading, joining it in place when wrapped. -1 if absent."""
    for index, line in enumerate(lines):
        if _matches_term(line, PER_100G_TERMS):
            return index

        start = line.strip().lower()
        if len(start) < 3 or not any(term.startswith(start) for term in PER_100G_TERMS):
            continue
        for end in range(index + 2, min(index + _MAX_HEADING_LINES, len(lines)) + 1):
            merged = " ".join(lines[index:end])
            if _matches_term(merged, PER_100G_TERMS):
                lines[index:end] = [merged]
                return index
    return -1


def _duplicate_lone_energy_label(labels: List[str]) -> List[str]:
    energy_indexes = [index for index, label in enumerate(labels) if _nutrient_key(label) in ENERGY_KEYS]
    if len(energy_indexes) != 1:
        return labels
    index = energy_indexes[0]
    return labels[: index + 1] + [labels[index]] + labels[index + 1 :]


def _assign_energy(values: Dict[str, float], energy: float) -> None:
    kcal, kj = values.get("energy_kcal"), values.get("energy_kj")
    if kcal is not None:
        if energy < kcal:
            values["energy_kj"], values["energy_kcal"] = kcal, energy
        else:
            values["energy_kj"] = energy
    elif kj is not None:
        if energy > kj:
            values["energy_kcal"], values["energy_kj"] = kj, energy
        else:
            values["energy_kcal"] = energy
    else:
        values["energy_kcal" if energy < ENERGY_KJ_FROM else "energy_kj"] = energy


def transform_ocr_in_nutrition(ocr: OcrResult) -> NutritionFacts:
    """Structure a nutrition label into per-100 g values.

    Returns:
        NutritionFacts with the values that could be read. Empty when the
        heading is missing or there are fewer values than labels.
    """
    lines = [line.strip() for line in convert_blocks_to_lines(ocr.blocks) if line.strip()]

    heading_index = _find_per_100g_heading(lines)
    if heading_index == -1:
        ocr_logger.warning("No 'per 100 g' heading found in nutrition label")
        return NutritionFacts()

    labels = _duplicate_lone_energy_label([line for line in lines[:heading_index] if _nutrient_key(line)])

    value_lines = lines[heading_index + 1 :]
    portion_index = next(
        (index for index, line in enumerate(value_lines) if _matches_term(line, PER_PORTION_TERMS)), -1
    )
    if portion_index != -1:
        value_lines = value_lines[:portion_index]

    if len(value_lines) < len(labels):
        ocr_logger.warning(f"Nutrition label has {len(labels)} labels but only {len(value_lines)} values")
        return NutritionFacts()

    values: Dict[str, float] = {}
    for label, raw_value in zip(labels, value_lines):
        key = _nutrient_key(label)
        value = parse_nutrition_value(raw_value)
        if value is None:
            ocr_logger.info(f"Nutrition value '{raw_value}' for '{label}' could not be converted to number")
            continue
        if key in ENERGY_KEYS:
            _assign_energy(values, value)
        else:
            values[key] = value

    ocr_logger.debug(f"Read {len(values)} nutrition value(s)")
    return NutritionFacts(**values)
