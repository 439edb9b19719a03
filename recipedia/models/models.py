"""Data models and schemas for the Recipedia core.

Defines Pydantic models for the catalog records (recipes, ingredients, tags,
shopping list items), the OCR recognition input and intermediate shapes, and
the filter vocabulary. All models use Pydantic v2.

Equality between records is domain equality, not field-by-field model
equality: see the ``is_*_equal`` functions at the bottom of this module.
"""

from enum import Enum
from typing import List, Optional, Annotated, Union

from pydantic import BaseModel, Field, ConfigDict


# Sentinel returned when a numeric field could not be read
DEFAULT_VALUE_NUMBER = -1


class IngredientType(str, Enum):
    """Ingredient categories. UNDEFINED means the type is unknown."""

    GRAIN_OR_CEREAL = "Grain or Cereal"
    LEGUMES = "Legumes"
    VEGETABLE = "Vegetable"
    PLANT_PROTEIN = "Plant Protein"
    CONDIMENT = "Condiment"
    SAUCE = "Sauce"
    MEAT = "Meat"
    POULTRY = "Poultry"
    FISH = "Fish"
    SEAFOOD = "Seafood"
    DAIRY = "Dairy"
    CHEESE = "Cheese"
    SUGAR = "Sugar"
    SPICE = "Spice"
    FRUIT = "Fruit"
    OIL_AND_FAT = "Oil and Fat"
    NUTS_AND_SEEDS = "Nuts and Seeds"
    SWEETENER = "Sweetener"
    UNDEFINED = "Undefined"


class NonIngredientFilter(str, Enum):
    """Filter categories that do not correspond to an ingredient type."""

    RECIPE_TITLE_INCLUDE = "recipeTitleInclude"
    PREP_TIME = "Preparation Time"
    IN_SEASON = "Only in-season ingredients"
    TAGS = "Tags"
    PURCHASED = "Already purchased"


# A filter category is either an ingredient type or one of the other filters
ListFilter = Union[IngredientType, NonIngredientFilter]

# Category -> selected values. An absent key means "no constraint".
FilterState = dict[ListFilter, list[str]]


class RecipeField(str, Enum):
    """Recipe fields that can be filled from an OCR capture."""

    IMAGE = "IMAGE_SOURCE"
    TITLE = "TITLE"
    DESCRIPTION = "DESCRIPTION"
    TAGS = "TAGS"
    PERSONS = "PERSONS"
    INGREDIENTS = "INGREDIENTS"
    PREPARATION = "PREPARATION"
    TIME = "TIME"
    NUTRITION = "NUTRITION"


class Tag(BaseModel):
    """Catalog tag. Two tags are the same tag when their names match."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: Annotated[Optional[int], Field(None, description="Catalog identifier, None until persisted")]
    name: Annotated[str, Field(description="Tag name, e.g. 'Vegetarian'")]


class Ingredient(BaseModel):
    """Catalog ingredient, or an ingredient line of a recipe.

    Quantity is free text because recipe cards carry values such as
    "a pinch" or "1/2".
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    id: Annotated[Optional[int], Field(None, description="Catalog identifier, None until persisted")]
    name: Annotated[str, Field(description="Ingredient name, e.g. 'Parmesan'")]
    unit: Annotated[str, Field("", description="Unit of measurement, e.g. 'g', 'ml', 'pieces'")]
    quantity: Annotated[Optional[str], Field(None, description="Quantity as written, possibly non-numeric")]
    type: Annotated[IngredientType, Field(IngredientType.UNDEFINED, description="Ingredient category")]
    season: Annotated[
        List[str],
        Field(default_factory=list, description="Month tokens ('1'..'12') or '*' for all year"),
    ]


class NutritionFacts(BaseModel):
    """Nutrition values per 100 g read from a product label. Unread values are None."""

    energy_kcal: Annotated[Optional[float], Field(None, ge=0, description="Energy in kcal")]
    energy_kj: Annotated[Optional[float], Field(None, ge=0, description="Energy in kJ")]
    fat: Optional[float] = None
    saturated_fat: Optional[float] = None
    carbohydrates: Optional[float] = None
    sugars: Optional[float] = None
    fiber: Optional[float] = None
    protein: Optional[float] = None
    salt: Optional[float] = None
    portion_weight: Annotated[Optional[float], Field(None, description="Weight of one portion in grams")]

    def is_empty(self) -> bool:
        return all(value is None for value in self.model_dump().values())


class PreparationStep(BaseModel):
    """One preparation step. Its position in the recipe is the step number."""

    title: Annotated[str, Field("", description="Short step title")]
    description: Annotated[str, Field("", description="Step instructions")]


class Recipe(BaseModel):
    """Domain model for a recipe."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: Annotated[Optional[int], Field(None, description="Catalog identifier, None until persisted")]
    image_source: Annotated[str, Field("", description="Reference to the recipe picture")]
    title: Annotated[str, Field(description="Recipe title")]
    description: Annotated[str, Field("", description="Free text description")]
    tags: Annotated[List[Tag], Field(default_factory=list)]
    persons: Annotated[int, Field(DEFAULT_VALUE_NUMBER, description="Number of servings")]
    ingredients: Annotated[List[Ingredient], Field(default_factory=list)]
    season: Annotated[List[str], Field(default_factory=list, description="Month tokens or '*'")]
    preparation: Annotated[List[PreparationStep], Field(default_factory=list)]
    time: Annotated[int, Field(0, ge=0, description="Total preparation time in minutes")]
    nutrition: Annotated[Optional[NutritionFacts], Field(None, description="Nutrition label values, if known")]


class ShoppingListItem(BaseModel):
    """Shopping list entry aggregated from one or more recipes."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: Annotated[Optional[int], Field(None, description="Catalog identifier, None until persisted")]
    type: Annotated[ListFilter, Field(description="Ingredient type, or a non-ingredient category")]
    name: Annotated[str, Field(description="Item name")]
    quantity: Annotated[str, Field("", description="Aggregated quantity as text")]
    unit: Annotated[str, Field("", description="Unit of measurement")]
    recipes: Annotated[List[str], Field(default_factory=list, description="Titles of contributing recipes")]
    purchased: Annotated[bool, Field(False)]


class RecipeFormState(BaseModel):
    """Fields of an add/edit recipe form that OCR results are merged into."""

    preparation: Annotated[List[PreparationStep], Field(default_factory=list)]
    persons: Annotated[int, Field(DEFAULT_VALUE_NUMBER, description="Persons currently set, -1 if unset")]
    tags: Annotated[List[Tag], Field(default_factory=list)]
    ingredients: Annotated[List[Ingredient], Field(default_factory=list)]


# ============================================================================
# OCR recognition input and intermediate shapes
# ============================================================================


class OcrLine(BaseModel):
    """One recognized text line."""

    text: str


class OcrBlock(BaseModel):
    """A visually grouped region of recognized text."""

    text: Annotated[str, Field("", description="Block text, lines joined with newlines")]
    lines: Annotated[List[OcrLine], Field(default_factory=list)]


class OcrResult(BaseModel):
    """Recognition output handed over by the OCR engine, in reading order."""

    text: Annotated[str, Field("", description="Full recognized text")]
    blocks: Annotated[List[OcrBlock], Field(default_factory=list)]


class PersonAndTime(BaseModel):
    """Serving count and prep time found next to each other on a card."""

    person: int
    time: int


class IngredientQuantityPerPersons(BaseModel):
    """Quantity of one ingredient for a given serving count."""

    persons: int
    quantity: str


class IngredientOcr(BaseModel):
    """One ingredient column of a recipe card table."""

    name: str
    unit: str = ""
    quantity_per_persons: List[IngredientQuantityPerPersons] = Field(default_factory=list)


# ============================================================================
# Domain equality
# ============================================================================


def is_tag_equal(tag: Tag, other: Tag) -> bool:
    return tag.name == other.name


def is_ingredient_equal(ingredient: Ingredient, other: Ingredient) -> bool:
    """Name and unit must match. Types must match unless one is UNDEFINED.

    Quantity and season are never compared.
    """
    if ingredient.name != other.name or ingredient.unit != other.unit:
        return False
    if IngredientType.UNDEFINED in (ingredient.type, other.type):
        return True
    return ingredient.type == other.type


def is_shopping_equal(item: ShoppingListItem, other: ShoppingListItem) -> bool:
    return item.type == other.type and item.name == other.name and item.unit == other.unit


def is_step_equal(step: PreparationStep, other: PreparationStep) -> bool:
    return step.title == other.title and step.description == other.description


def _lists_equal(lhs: list, rhs: list, predicate) -> bool:
    return len(lhs) == len(rhs) and all(predicate(a, b) for a, b in zip(lhs, rhs))


def is_recipe_partially_equal(recipe: Recipe, other: Recipe) -> bool:
    """Near-duplicate check used before inserting a recipe.

    Only image, title and description are compared.
    """
    return (
        recipe.image_source == other.image_source
        and recipe.title == other.title
        and recipe.description == other.description
    )


def is_recipe_equal(recipe: Recipe, other: Recipe) -> bool:
    """Full equality used to check that a cached recipe still exists.

    Every field except the catalog id is compared, nested lists in order.
    """
    return (
        is_recipe_partially_equal(recipe, other)
        and recipe.persons == other.persons
        and recipe.time == other.time
        and recipe.season == other.season
        and recipe.nutrition == other.nutrition
        and _lists_equal(recipe.tags, other.tags, is_tag_equal)
        and _lists_equal(recipe.ingredients, other.ingredients, is_ingredient_equal)
        and _lists_equal(recipe.preparation, other.preparation, is_step_equal)
    )


def as_list_filter(category: Union[ListFilter, str]) -> Optional[ListFilter]:
    """Resolve a raw category string to its enum member, None if unknown."""
    if isinstance(category, (IngredientType, NonIngredientFilter)):
        return category
    for enum_class in (IngredientType, NonIngredientFilter):
        try:
            return enum_class(category)
        except ValueError:
            continue
    return None


def is_ingredient_filter(category: Union[ListFilter, str]) -> bool:
    return isinstance(as_list_filter(category), IngredientType)


def array_of_type(ingredients: List[Ingredient], ingredient_type: IngredientType) -> List[Ingredient]:
    """Return the ingredients of the given type, in their original order."""
    return [ingredient for ingredient in ingredients if ingredient.type == ingredient_type]
