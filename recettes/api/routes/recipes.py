from fastapi import APIRouter, Depends, HTTPException, Query

from recettes.api.dependencies import get_session
from recettes.domain.Recipe import Recipe
from recettes.logic.planning.session import PlanSession

router = APIRouter(prefix="/api/recipes", tags=["recipes"])


def _summary(recipe: Recipe) -> dict:
    return {
        "id": recipe.id,
        "title": recipe.title,
        "tags": recipe.tags,
        "season": recipe.season,
        "servings": recipe.servings_base,
        "time": recipe.time,
        "calories": recipe.base_calories_per_person,
    }


@router.get("")
@router.get("/")
def list_recipes(q: str = Query(default=""), session: PlanSession = Depends(get_session)):
    """Return the catalog, optionally filtered by a search string (title, tags, season)."""
    recipes = session.catalog.search(q)
    return {"count": len(recipes), "total": len(session.catalog), "recipes": [_summary(r) for r in recipes]}


@router.get("/{recipe_id}")
def recipe_detail(recipe_id: str, session: PlanSession = Depends(get_session)):
    recipe = session.catalog.get(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    detail = recipe.to_dict()
    detail["ingredient_lines"] = {label: [str(line) for line in lines]
                                  for label, lines in recipe.ingredient_groups.items()}
    detail["option_lines"] = {label: [str(line) for line in lines]
                              for label, lines in recipe.optional_groups.items()}
    return detail
