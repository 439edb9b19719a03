"""Catalog matching for tags and ingredients proposed by the user or by OCR.

Proposals whose name already exists in the catalog (case-insensitive) are
accepted right away; everything else is handed back so the user can pick a
similar catalog entry or create a new one.
"""

from difflib import SequenceMatcher
from typing import Callable, List, Optional, Sequence, TypeVar

from recipedia.models.models import (
    Ingredient,
    Recipe,
    Tag,
    is_recipe_equal,
    is_recipe_partially_equal,
)
from recipedia.utils.config import config
from recipedia.utils.logger import validation_logger

Named = TypeVar("Named", Tag, Ingredient)


def _name_similarity(a: str, b: str) -> float:
    return SequenceMatcher(None, a, b).ratio()


def _find_exact_match(name: str, candidates: List[Named]) -> Optional[Named]:
    lowered = name.lower()
    return next((candidate for candidate in candidates if candidate.name.lower() == lowered), None)


def process_tags_for_validation(
    tags: List[Tag],
    find_similar: Callable[[str], List[Tag]],
    on_exact_match: Callable[[Tag], None],
) -> List[Tag]:
    """Accept catalog tags and return the ones needing validation.

    Args:
        tags: Proposed tags, in order.
        find_similar: Catalog lookup returning candidates for a name.
        on_exact_match: Called with the catalog tag for each exact match.

    Returns:
        Proposals without an exact catalog match, unchanged and in order.
    """
    needing_validation = []
    for tag in tags:
        exact_match = _find_exact_match(tag.name, find_similar(tag.name))
        if exact_match is not None:
            validation_logger.debug(f"Tag '{tag.name}' matches catalog tag '{exact_match.name}'")
            on_exact_match(exact_match)
        else:
            needing_validation.append(tag)
    return needing_validation


def process_ingredients_for_validation(
    ingredients: List[Ingredient],
    find_similar: Callable[[str], List[Ingredient]],
    on_exact_match: Callable[[Ingredient], None],
) -> List[Ingredient]:
    """Accept catalog ingredients and return the ones needing validation.

    The ingredient passed to `on_exact_match` is the catalog record, with the
    proposal's quantity and unit kept when they are non-empty.
    """
    needing_validation = []
    for ingredient in ingredients:
        exact_match = _find_exact_match(ingredient.name, find_similar(ingredient.name))
        if exact_match is None:
            needing_validation.append(ingredient)
            continue

        merged = exact_match.model_copy(
            update={
                "quantity": ingredient.quantity or exact_match.quantity,
                "unit": ingredient.unit or exact_match.unit,
            }
        )
        validation_logger.debug(
            f"Ingredient '{ingredient.name}' matches catalog ingredient '{exact_match.name}'",
            extra={"category": exact_match.type.value},
        )
        on_exact_match(merged)
    return needing_validation


def find_similar_by_name(
    catalog: Sequence[Named],
    name: str,
    threshold: Optional[float] = None,
    limit: Optional[int] = None,
) -> List[Named]:
    """Catalog entries resembling `name`, best first.

    Exact (case-insensitive) matches come first, then entries containing or
    contained in the name, then entries whose difflib ratio reaches
    `threshold`. At most `limit` entries are returned.
    """
    threshold = config.SIMILARITY_THRESHOLD if threshold is None else threshold
    limit = config.MAX_SIMILAR_RESULTS if limit is None else limit

    needle = name.strip().lower()
    if not needle:
        return []

    exact, substring, fuzzy = [], [], []
    for candidate in catalog:
        candidate_name = candidate.name.lower()
        if not candidate_name:
            continue
        if candidate_name == needle:
            exact.append(candidate)
        elif needle in candidate_name or candidate_name in needle:
            substring.append(candidate)
        else:
            similarity = _name_similarity(needle, candidate_name)
            if similarity >= threshold:
                fuzzy.append((similarity, candidate))

    fuzzy.sort(key=lambda scored: scored[0], reverse=True)
    return (exact + substring + [candidate for _, candidate in fuzzy])[:limit]


def make_similarity_lookup(catalog: Sequence[Named]) -> Callable[[str], List[Named]]:
    """Bind `find_similar_by_name` to a catalog, with the configured threshold and limit."""

    def find_similar(name: str) -> List[Named]:
        return find_similar_by_name(catalog, name)

    return find_similar


def find_partial_duplicate(recipe: Recipe, catalog: Sequence[Recipe]) -> Optional[Recipe]:
    """Return the catalog recipe sharing image, title and description with `recipe`."""
    return next((existing for existing in catalog if is_recipe_partially_equal(existing, recipe)), None)


def prune_missing_recipes(cached: List[Recipe], fresh: Sequence[Recipe]) -> List[Recipe]:
    """Keep the cached recipes that still exist, unchanged, in the fresh catalog."""
    kept = [recipe for recipe in cached if any(is_recipe_equal(recipe, other) for other in fresh)]
    if len(kept) != len(cached):
        validation_logger.info(f"Dropped {len(cached) - len(kept)} cached recipe(s) missing from the catalog")
    return kept
