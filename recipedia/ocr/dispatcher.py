"""Route a recognition result to the transformer of the requested recipe field,
and merge the structured value into an add/edit recipe form."""

from typing import Any, Callable, Dict, List, Union

from recipedia.models.models import (
    DEFAULT_VALUE_NUMBER,
    Ingredient,
    IngredientOcr,
    IngredientType,
    NutritionFacts,
    OcrResult,
    PersonAndTime,
    PreparationStep,
    RecipeField,
    RecipeFormState,
)
from recipedia.ocr.nutrition import transform_ocr_in_nutrition
from recipedia.ocr.transformers import (
    OcrParseError,
    transform_ocr_in_ingredients,
    transform_ocr_in_one_number,
    transform_ocr_in_one_string,
    transform_ocr_in_preparation,
)
from recipedia.utils.config import config
from recipedia.utils.logger import ocr_logger
from recipedia.utils.quantity import scale_quantity_for_persons

WarningHandler = Callable[[str], None]

OcrFieldValue = Union[
    str,
    int,
    List[int],
    PersonAndTime,
    List[PersonAndTime],
    List[PreparationStep],
    List[IngredientOcr],
    NutritionFacts,
]


def recognize_field(ocr: OcrResult, field: RecipeField) -> OcrFieldValue:
    """Structure a recognition result as the value of one recipe field.

    Raises:
        OcrParseError: The ingredient table could not be parsed.
    """
    ocr_logger.debug(f"Recognizing field {field.value}", extra={"field": field.value})

    if field in (RecipeField.TIME, RecipeField.PERSONS):
        return transform_ocr_in_one_number(ocr)
    if field in (RecipeField.TITLE, RecipeField.DESCRIPTION):
        return transform_ocr_in_one_string(ocr)
    if field == RecipeField.PREPARATION:
        return transform_ocr_in_preparation(ocr)
    if field == RecipeField.INGREDIENTS:
        return transform_ocr_in_ingredients(ocr)
    if field == RecipeField.NUTRITION:
        return transform_ocr_in_nutrition(ocr)
    if field == RecipeField.TAGS:
        return ""
    if field == RecipeField.IMAGE:
        ocr_logger.error("Image field cannot be recognized from text", extra={"field": field.value})
        return ""

    ocr_logger.error(f"Unrecognized field: {field}", extra={"field": str(field)})
    return ""


def _default_warning_handler(message: str) -> None:
    ocr_logger.warning(f"OCR extraction warning: {message}")


def _number_fields(field: RecipeField, value: Any) -> Dict[str, int]:
    key = "persons" if field == RecipeField.PERSONS else "time"
    if isinstance(value, int):
        return {key: value}
    if isinstance(value, PersonAndTime):
        return {"persons": value.person, "time": value.time}
    if isinstance(value, list) and value:
        first = value[0]
        if isinstance(first, int):
            return {key: first}
        if isinstance(first, PersonAndTime):
            return {"persons": first.person, "time": first.time}
    return {}


def _ingredients_for_persons(
    columns: List[IngredientOcr],
    current_persons: int,
    warn: WarningHandler,
) -> List[Ingredient]:
    quantities = columns[0].quantity_per_persons
    wanted_persons = current_persons if current_persons > 0 else config.DEFAULT_PERSONS
    row_index = next((index for index, row in enumerate(quantities) if row.persons == wanted_persons), -1)

    if row_index != -1:
        ocr_persons = target_persons = wanted_persons
    else:
        row_index = 0
        ocr_persons = quantities[0].persons
        if current_persons > 0:
            target_persons = current_persons
            warn(
                f"Couldn't find exact match for persons ({current_persons}) in ingredient. "
                f"Using {ocr_persons} and scaling to {target_persons}."
            )
        else:
            target_persons = ocr_persons
            warn(f"Couldn't find exact match for persons in ingredient. Using first available : {ocr_persons}.")

    return [
        Ingredient(
            name=column.name,
            unit=column.unit,
            quantity=scale_quantity_for_persons(
                column.quantity_per_persons[row_index].quantity, ocr_persons, target_persons
            ),
            type=IngredientType.UNDEFINED,
            season=[],
        )
        for column in columns
    ]


def extract_field_from_ocr(
    ocr: OcrResult,
    field: RecipeField,
    current_state: RecipeFormState,
    on_warn: WarningHandler = _default_warning_handler,
) -> Dict[str, Any]:
    """Recognize one field and merge it into the recipe form.

    Args:
        ocr: Recognition result of the photographed area.
        field: Field the user is filling.
        current_state: Current form values. Steps and ingredients are
            appended to, persons is used to pick and scale quantities.
        on_warn: Called with a message whenever the recognized value cannot
            be used.

    Returns:
        The form fields to update, keyed by "title", "description",
        "preparation", "persons", "time", "ingredients" or "nutrition". Empty when
        nothing usable was recognized.
    """

    def warn(message: str) -> None:
        on_warn(f"{message} {{field: {field.value}, ocr: {ocr.text!r}}}")

    try:
        value = recognize_field(ocr, field)
    except OcrParseError as e:
        warn(f"Could not parse ingredient table: {e}")
        return {}

    if field in (RecipeField.TITLE, RecipeField.DESCRIPTION):
        if isinstance(value, str):
            return {field.value.lower(): value}
        warn(f"Expected string for {field.value.lower()}")
        return {}

    if field == RecipeField.PREPARATION:
        if isinstance(value, list) and value:
            return {"preparation": [*current_state.preparation, *value]}
        warn("Expected non empty array of preparation steps for preparation")
        return {}

    if field in (RecipeField.PERSONS, RecipeField.TIME):
        updates = _number_fields(field, value)
        if not updates or DEFAULT_VALUE_NUMBER in updates.values():
            warn("Could not parse persons/time field")
            return {}
        return updates

    if field == RecipeField.INGREDIENTS:
        if isinstance(value, list) and value and value[0].quantity_per_persons:
            ingredients = _ingredients_for_persons(value, current_state.persons, warn)
            return {"ingredients": [*current_state.ingredients, *ingredients]}
        warn("Expected non empty array of ingredient objects")
        return {}

    if field == RecipeField.NUTRITION:
        if isinstance(value, NutritionFacts) and not value.is_empty():
            return {"nutrition": value}
        warn("Expected nutrition object for nutrition field")
        return {}

    warn(f"Field {field.value} cannot be filled from recognized text")
    return {}
