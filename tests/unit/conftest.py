"""Shared datasets for unit tests: a small recipe catalog with its tags and ingredients."""

from typing import List

import pytest

from recipedia.models.models import (
    Ingredient,
    IngredientType,
    OcrBlock,
    OcrLine,
    OcrResult,
    PreparationStep,
    Recipe,
    Tag,
)

ALL_YEAR = ["*"]
SUMMER = ["6", "7", "8"]
WINTER = ["10", "11", "12", "1", "2", "3"]


def make_ocr(*blocks: List[str]) -> OcrResult:
    """Build an OcrResult where each argument is the list of lines of one block."""
    ocr_blocks = [OcrBlock(text="\n".join(lines), lines=[OcrLine(text=line) for line in lines]) for lines in blocks]
    return OcrResult(text="\n".join(block.text for block in ocr_blocks), blocks=ocr_blocks)


def _ingredient(name, unit, quantity, ingredient_type, season) -> Ingredient:
    return Ingredient(name=name, unit=unit, quantity=quantity, type=ingredient_type, season=season)


TAGS = [
    Tag(id=1, name="Italian"),
    Tag(id=2, name="Quick Meal"),
    Tag(id=3, name="Mexican"),
    Tag(id=4, name="Breakfast"),
    Tag(id=5, name="Vegetarian"),
    Tag(id=6, name="Healthy"),
    Tag(id=7, name="Dessert"),
    Tag(id=8, name="Indian"),
]


def _tags(*names: str) -> List[Tag]:
    return [tag for name in names for tag in TAGS if tag.name == name]


def build_recipes() -> List[Recipe]:
    return [
        Recipe(
            id=1,
            image_source="spaghetti_bolognese.png",
            title="Spaghetti Bolognese",
            description="A classic Italian pasta dish with rich meat sauce.",
            tags=_tags("Italian"),
            persons=4,
            ingredients=[
                _ingredient("Spaghetti", "g", "200", IngredientType.GRAIN_OR_CEREAL, ALL_YEAR),
                _ingredient("Ground Beef", "g", "300", IngredientType.MEAT, ALL_YEAR),
                _ingredient("Tomato Sauce", "ml", "250", IngredientType.SAUCE, ALL_YEAR),
            ],
            preparation=[
                PreparationStep(title="Boil", description="Cook the spaghetti."),
                PreparationStep(title="Sauce", description="Brown the beef, add the sauce."),
            ],
            time=33,
        ),
        Recipe(
            id=2,
            image_source="chicken_tacos.png",
            title="Chicken Tacos",
            description="Tortillas filled with spiced chicken.",
            tags=_tags("Mexican", "Quick Meal"),
            persons=2,
            ingredients=[
                _ingredient("Chicken Breast", "g", "250", IngredientType.POULTRY, ALL_YEAR),
                _ingredient("Tortillas", "pieces", "4", IngredientType.GRAIN_OR_CEREAL, ALL_YEAR),
                _ingredient("Tomato", "pieces", "2", IngredientType.VEGETABLE, ["6", "7", "8", "9"]),
            ],
            time=20,
        ),
        Recipe(
            id=3,
            image_source="pancakes.png",
            title="Classic Pancakes",
            description="Fluffy pancakes for breakfast.",
            tags=_tags("Breakfast", "Vegetarian"),
            persons=4,
            ingredients=[
                _ingredient("Flour", "g", "200", IngredientType.GRAIN_OR_CEREAL, ALL_YEAR),
                _ingredient("Milk", "ml", "300", IngredientType.DAIRY, ALL_YEAR),
                _ingredient("Sugar", "g", "50", IngredientType.SUGAR, ALL_YEAR),
            ],
            time=25,
        ),
        Recipe(
            id=4,
            image_source="caesar_salad.png",
            title="Caesar Salad",
            description="Crisp romaine with parmesan and croutons.",
            tags=_tags("Healthy", "Quick Meal"),
            persons=2,
            ingredients=[
                _ingredient("Romaine Lettuce", "head", "1", IngredientType.VEGETABLE, ["5", "6", "7", "8", "9"]),
                _ingredient("Parmesan", "g", "50", IngredientType.CHEESE, ALL_YEAR),
                _ingredient("Croutons", "g", "100", IngredientType.GRAIN_OR_CEREAL, ALL_YEAR),
            ],
            time=15,
        ),
        Recipe(
            id=5,
            image_source="vegetable_soup.png",
            title="Vegetable Soup",
            description="Warm winter soup.",
            tags=_tags("Vegetarian", "Healthy"),
            persons=4,
            ingredients=[
                _ingredient("Carrots", "g", "300", IngredientType.VEGETABLE, WINTER),
                _ingredient("Leeks", "pieces", "2", IngredientType.VEGETABLE, WINTER),
            ],
            time=40,
        ),
        Recipe(
            id=6,
            image_source="chocolate_cake.png",
            title="Chocolate Cake",
            description="Rich and moist.",
            tags=_tags("Dessert"),
            persons=8,
            ingredients=[
                _ingredient("Flour", "g", "250", IngredientType.GRAIN_OR_CEREAL, ALL_YEAR),
                _ingredient("Sugar", "g", "200", IngredientType.SUGAR, ALL_YEAR),
                _ingredient("Cocoa Powder", "g", "75", IngredientType.SWEETENER, ALL_YEAR),
            ],
            time=60,
        ),
        Recipe(
            id=7,
            image_source="pesto_pasta.png",
            title="Pesto Pasta",
            description="Pasta tossed in basil pesto.",
            tags=_tags("Italian", "Quick Meal"),
            persons=2,
            ingredients=[
                _ingredient("Penne", "g", "250", IngredientType.GRAIN_OR_CEREAL, ALL_YEAR),
                _ingredient("Basil", "g", "30", IngredientType.SPICE, SUMMER),
                _ingredient("Pine Nuts", "g", "30", IngredientType.NUTS_AND_SEEDS, ALL_YEAR),
                _ingredient("Parmesan", "g", "40", IngredientType.CHEESE, ALL_YEAR),
            ],
            time=20,
        ),
        Recipe(
            id=8,
            image_source="lentil_curry.png",
            title="Lentil Curry",
            description="Spiced lentils simmered in coconut milk.",
            tags=_tags("Indian", "Vegetarian"),
            persons=4,
            ingredients=[
                _ingredient("Lentils", "g", "200", IngredientType.LEGUMES, ALL_YEAR),
                _ingredient("Coconut Milk", "ml", "400", IngredientType.OIL_AND_FAT, ALL_YEAR),
                _ingredient("Curry Powder", "tbsp", "2", IngredientType.SPICE, ALL_YEAR),
            ],
            time=35,
        ),
        Recipe(
            id=9,
            image_source="bruschetta.png",
            title="Tomato Bruschetta",
            description="Toasted bread topped with tomato and basil.",
            tags=_tags("Healthy"),
            persons=4,
            ingredients=[
                _ingredient("Tomato", "pieces", "3", IngredientType.VEGETABLE, ["6", "7", "8", "9"]),
                _ingredient("Basil", "g", "10", IngredientType.SPICE, SUMMER),
                _ingredient("Croutons", "g", "150", IngredientType.GRAIN_OR_CEREAL, ALL_YEAR),
            ],
            time=10,
        ),
    ]


@pytest.fixture
def recipes() -> List[Recipe]:
    return build_recipes()


@pytest.fixture
def tags_catalog() -> List[Tag]:
    return [tag.model_copy() for tag in TAGS]


@pytest.fixture
def ingredients_catalog(recipes) -> List[Ingredient]:
    """Distinct catalog ingredients (no quantity) used across the recipes."""
    catalog: List[Ingredient] = []
    for recipe in recipes:
        for ingredient in recipe.ingredients:
            if all(existing.name != ingredient.name for existing in catalog):
                catalog.append(ingredient.model_copy(update={"id": len(catalog) + 1, "quantity": None}))
    return catalog


@pytest.fixture
def ocr_factory():
    return make_ocr
