"""Shopping list aggregation.

A recipe added to the shopping list contributes one item per ingredient.
Items with the same type, name and unit are merged: their quantities are
summed and the contributing recipe titles are kept so that the recipe can
be taken back out later.
"""

from typing import List

from recipedia.models.models import Recipe, ShoppingListItem, is_shopping_equal
from recipedia.utils.logger import shopping_logger
from recipedia.utils.quantity import subtract_number_in_string, sum_number_in_string


def _items_from_recipe(recipe: Recipe) -> List[ShoppingListItem]:
    return [
        ShoppingListItem(
            type=ingredient.type,
            name=ingredient.name,
            quantity=ingredient.quantity or "",
            unit=ingredient.unit,
            recipes=[recipe.title],
        )
        for ingredient in recipe.ingredients
    ]


def _find_item(items: List[ShoppingListItem], wanted: ShoppingListItem):
    return next((item for item in items if is_shopping_equal(item, wanted)), None)


def add_recipe_to_shopping(items: List[ShoppingListItem], recipe: Recipe) -> List[ShoppingListItem]:
    """Return a new shopping list with the ingredients of `recipe` added.

    A recipe already in the list is not added again.
    """
    updated = [item.model_copy(deep=True) for item in items]

    if any(recipe.title in item.recipes for item in updated):
        shopping_logger.warning(f"Recipe '{recipe.title}' is already in the shopping list")
        return updated

    for new_item in _items_from_recipe(recipe):
        existing = _find_item(updated, new_item)
        if existing is None:
            updated.append(new_item)
            continue
        existing.quantity = sum_number_in_string(existing.quantity, new_item.quantity)
        if recipe.title not in existing.recipes:
            existing.recipes.append(recipe.title)

    shopping_logger.info(f"Added recipe '{recipe.title}' to shopping list ({len(recipe.ingredients)} ingredients)")
    return updated


def remove_recipe_from_shopping(items: List[ShoppingListItem], recipe: Recipe) -> List[ShoppingListItem]:
    """Return a new shopping list without the contribution of `recipe`.

    Items no longer needed by any recipe are dropped.
    """
    updated = [item.model_copy(deep=True) for item in items]

    for old_item in _items_from_recipe(recipe):
        existing = _find_item(updated, old_item)
        if existing is None or recipe.title not in existing.recipes:
            shopping_logger.warning(
                f"'{old_item.name}' of recipe '{recipe.title}' is not in the shopping list",
                extra={"category": old_item.type.value},
            )
            continue
        existing.recipes.remove(recipe.title)
        if existing.recipes:
            existing.quantity = subtract_number_in_string(existing.quantity, old_item.quantity)
        else:
            updated.remove(existing)

    return updated


def set_purchased(
    items: List[ShoppingListItem],
    item: ShoppingListItem,
    purchased: bool,
) -> List[ShoppingListItem]:
    """Return a new shopping list where `item` is marked (un)purchased."""
    updated = []
    found = False
    for current in items:
        if is_shopping_equal(current, item):
            found = True
            current = current.model_copy(update={"purchased": purchased})
        updated.append(current)

    if not found:
        shopping_logger.warning(f"Cannot mark '{item.name}' as purchased: not in the shopping list")
    return updated
