"""Plan view for the plan-editing UI."""
from typing import Any, Dict, List

from recettes.domain.Catalog import RecipeCatalog
from recettes.domain.Plan import Plan

__all__ = ["describe_plan"]


def describe_plan(plan: Plan, catalog: RecipeCatalog) -> List[Dict[str, Any]]:
    """Return one row per plan entry whose recipe still exists.

    Row structure:
        { recipe_id, title, servings, servings_base, options: { <group>: bool, ... } }

    Only the optional groups the recipe defines are listed; stored flags for
    groups the recipe no longer has are left out.
    """
    rows = []
    for entry in plan:
        recipe = catalog.get(entry.recipe_id)
        if recipe is None:
            continue
        rows.append({
            'recipe_id': recipe.id,
            'title': recipe.title,
            'servings': entry.servings_requested if entry.servings_requested is not None else recipe.servings_base,
            'servings_base': recipe.servings_base,
            'options': {label: entry.is_group_enabled(label) for label in recipe.optional_group_labels()},
        })
    return rows
