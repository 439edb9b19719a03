"""Unit tests for Pydantic models and domain equality."""

import pytest
from pydantic import ValidationError

from recipedia.models.models import (
    DEFAULT_VALUE_NUMBER,
    Ingredient,
    IngredientType,
    NonIngredientFilter,
    NutritionFacts,
    OcrResult,
    PreparationStep,
    Recipe,
    ShoppingListItem,
    Tag,
    array_of_type,
    as_list_filter,
    is_ingredient_equal,
    is_ingredient_filter,
    is_recipe_equal,
    is_recipe_partially_equal,
    is_shopping_equal,
    is_tag_equal,
)


class TestRecipeModel:
    """Test Recipe model validation."""

    def test_minimal_recipe_defaults(self):
        recipe = Recipe(title="Toast")

        assert recipe.id is None
        assert recipe.persons == DEFAULT_VALUE_NUMBER
        assert recipe.time == 0
        assert recipe.tags == []
        assert recipe.preparation == []

    def test_title_is_required(self):
        with pytest.raises(ValidationError) as exc:
            Recipe(description="No title")
        assert "title" in str(exc.value)

    def test_negative_time_rejected(self):
        with pytest.raises(ValidationError):
            Recipe(title="Toast", time=-5)

    def test_whitespace_stripped(self):
        assert Recipe(title="  Toast  ").title == "Toast"

    def test_round_trip_json(self, recipes):
        original = recipes[6]
        restored = Recipe.model_validate_json(original.model_dump_json())

        assert restored == original


class TestIngredientModel:
    def test_defaults(self):
        ingredient = Ingredient(name="Salt")

        assert ingredient.unit == ""
        assert ingredient.quantity is None
        assert ingredient.type == IngredientType.UNDEFINED
        assert ingredient.season == []

    def test_type_from_value(self):
        assert Ingredient(name="Rice", type="Grain or Cereal").type == IngredientType.GRAIN_OR_CEREAL

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            Ingredient(name="Rice", type="Carbs")


class TestShoppingListItemModel:
    def test_type_accepts_non_ingredient_filter(self):
        item = ShoppingListItem(type="Already purchased", name="Bags")

        assert item.type == NonIngredientFilter.PURCHASED
        assert item.purchased is False

    def test_type_accepts_ingredient_type(self):
        item = ShoppingListItem(type=IngredientType.DAIRY, name="Milk", quantity="1", unit="l")

        assert item.type == IngredientType.DAIRY


class TestOcrResultModel:
    def test_parse_from_json(self):
        ocr = OcrResult.model_validate_json(
            '{"text": "4p", "blocks": [{"text": "4p", "lines": [{"text": "4p"}]}]}'
        )

        assert ocr.blocks[0].lines[0].text == "4p"

    def test_empty_result(self):
        assert OcrResult().blocks == []


class TestDomainEquality:
    """Test the is_*_equal functions."""

    def test_tags_compare_by_name_only(self):
        assert is_tag_equal(Tag(id=1, name="Italian"), Tag(id=9, name="Italian"))
        assert not is_tag_equal(Tag(name="Italian"), Tag(name="italian"))

    def test_ingredient_equality_ignores_quantity_and_season(self):
        lhs = Ingredient(name="Flour", unit="g", quantity="200", type=IngredientType.GRAIN_OR_CEREAL, season=["*"])
        rhs = Ingredient(name="Flour", unit="g", quantity="50", type=IngredientType.GRAIN_OR_CEREAL, season=["1"])

        assert is_ingredient_equal(lhs, rhs)

    def test_ingredient_equality_with_undefined_type(self):
        typed = Ingredient(name="Flour", unit="g", type=IngredientType.GRAIN_OR_CEREAL)
        untyped = Ingredient(name="Flour", unit="g")

        assert is_ingredient_equal(typed, untyped)
        assert is_ingredient_equal(untyped, typed)

    def test_ingredient_equality_with_different_types(self):
        lhs = Ingredient(name="Flour", unit="g", type=IngredientType.GRAIN_OR_CEREAL)
        rhs = Ingredient(name="Flour", unit="g", type=IngredientType.SUGAR)

        assert not is_ingredient_equal(lhs, rhs)

    def test_ingredient_equality_with_different_units(self):
        assert not is_ingredient_equal(Ingredient(name="Milk", unit="ml"), Ingredient(name="Milk", unit="l"))

    def test_shopping_equality(self):
        item = ShoppingListItem(type=IngredientType.DAIRY, name="Milk", unit="ml", quantity="300")
        same = ShoppingListItem(type=IngredientType.DAIRY, name="Milk", unit="ml", quantity="1", purchased=True)
        other_type = ShoppingListItem(type=IngredientType.SAUCE, name="Milk", unit="ml")

        assert is_shopping_equal(item, same)
        assert not is_shopping_equal(item, other_type)

    def test_partial_equality_ignores_everything_but_identity_fields(self, recipes):
        recipe = recipes[0]
        changed = recipe.model_copy(update={"tags": [], "ingredients": [], "persons": 12, "time": 1, "season": ["5"]})

        assert is_recipe_partially_equal(recipe, changed)

    @pytest.mark.parametrize("field, value", [("image_source", "other.png"), ("title", "Other"), ("description", "")])
    def test_partial_equality_sensitive_to_identity_fields(self, recipes, field, value):
        recipe = recipes[0]

        assert not is_recipe_partially_equal(recipe, recipe.model_copy(update={field: value}))

    def test_full_equality_ignores_id(self, recipes):
        recipe = recipes[0]

        assert is_recipe_equal(recipe, recipe.model_copy(update={"id": 42}))

    def test_full_equality_is_order_sensitive(self, recipes):
        recipe = recipes[0]
        reordered = recipe.model_copy(update={"preparation": list(reversed(recipe.preparation))})

        assert not is_recipe_equal(recipe, reordered)

    def test_full_equality_compares_nested_lists(self, recipes):
        recipe = recipes[0]
        extra_step = recipe.model_copy(update={"preparation": [*recipe.preparation, PreparationStep(title="Serve")]})
        other_tags = recipe.model_copy(update={"tags": [Tag(name="French")]})

        assert not is_recipe_equal(recipe, extra_step)
        assert not is_recipe_equal(recipe, other_tags)
        assert not is_recipe_equal(recipe, recipe.model_copy(update={"time": 34}))


class TestFilterHelpers:
    def test_as_list_filter_resolves_strings(self):
        assert as_list_filter("Tags") == NonIngredientFilter.TAGS
        assert as_list_filter("Cheese") == IngredientType.CHEESE
        assert as_list_filter(IngredientType.FISH) is IngredientType.FISH
        assert as_list_filter("Calories") is None

    def test_is_ingredient_filter(self):
        assert is_ingredient_filter(IngredientType.VEGETABLE)
        assert is_ingredient_filter("Nuts and Seeds")
        assert not is_ingredient_filter(NonIngredientFilter.PREP_TIME)
        assert not is_ingredient_filter("unknown")

    def test_array_of_type_keeps_order(self, recipes):
        pesto = recipes[6]

        cheeses = array_of_type(pesto.ingredients, IngredientType.CHEESE)
        grains = array_of_type(recipes[3].ingredients, IngredientType.GRAIN_OR_CEREAL)

        assert [ingredient.name for ingredient in cheeses] == ["Parmesan"]
        assert [ingredient.name for ingredient in grains] == ["Croutons"]
        assert array_of_type(pesto.ingredients, IngredientType.FISH) == []

    def test_array_of_type_and_complement_rebuild_list(self, recipes):
        ingredients = [ingredient for recipe in recipes for ingredient in recipe.ingredients]

        for ingredient_type in IngredientType:
            selected = array_of_type(ingredients, ingredient_type)
            complement = [ingredient for ingredient in ingredients if ingredient.type != ingredient_type]

            assert all(ingredient.type == ingredient_type for ingredient in selected)
            assert sorted(map(id, selected + complement)) == sorted(map(id, ingredients))


class TestNutritionFacts:
    def test_empty_by_default(self):
        assert NutritionFacts().is_empty()

    def test_zero_value_is_not_empty(self):
        assert not NutritionFacts(salt=0).is_empty()

    def test_negative_energy_rejected(self):
        with pytest.raises(ValidationError):
            NutritionFacts(energy_kcal=-1)

    def test_nutrition_part_of_recipe_equality(self, recipes):
        recipe = recipes[0]
        labelled = recipe.model_copy(update={"nutrition": NutritionFacts(fat=12)})

        assert not is_recipe_equal(recipe, labelled)
        assert is_recipe_equal(labelled, labelled.model_copy(deep=True))
