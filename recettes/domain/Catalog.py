"""Recipe catalog: read-only, in-memory collection of recipes keyed by id."""
import unicodedata
from typing import Dict, Iterable, Iterator, List, Optional

from recettes.domain.Recipe import Recipe


def normalize_text(value: str) -> str:
    """Lowercase and strip accents ("Épinards" -> "epinards") for search matching."""
    decomposed = unicodedata.normalize("NFD", (value or "").lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


class RecipeCatalog:
    def __init__(self, recipes: Optional[Iterable[Recipe]] = None):
        self._recipes: Dict[str, Recipe] = {}
        for recipe in recipes or []:
            # First recipe with a given id wins
            self._recipes.setdefault(recipe.id, recipe)

    def get(self, recipe_id: str) -> Optional[Recipe]:
        return self._recipes.get(recipe_id)

    def __contains__(self, recipe_id) -> bool:
        return recipe_id in self._recipes

    def __iter__(self) -> Iterator[Recipe]:
        return iter(self._recipes.values())

    def __len__(self) -> int:
        return len(self._recipes)

    def search(self, query: str = "") -> List[Recipe]:
        '''
        Returns recipes whose title, tags or season tags contain the query
        (case and accent insensitive). An empty query returns every recipe.
        '''
        needle = normalize_text(query.strip()) if query else ""
        if not needle:
            return list(self)
        result = []
        for recipe in self:
            haystack = " ".join(normalize_text(part) for part in [recipe.title, *recipe.tags, *recipe.season] if part)
            if needle in haystack:
                result.append(recipe)
        return result

    def __str__(self) -> str:
        return f"RecipeCatalog({len(self)} recipes)"

    __repr__ = __str__
