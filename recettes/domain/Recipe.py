"""Recipe domain entity: title, servings base, ingredient groups, optional groups, calories."""
from typing import Any, Dict, List, Optional
from recettes.domain.Ingredient import IngredientLine, _first_present


def _groups_from(raw) -> Dict[str, List[IngredientLine]]:
    if not isinstance(raw, dict):
        return {}
    groups: Dict[str, List[IngredientLine]] = {}
    for label, items in raw.items():
        if not isinstance(items, list):
            continue
        groups[str(label)] = [IngredientLine.from_dict(item) for item in items if isinstance(item, dict)]
    return groups


def _steps_from(raw) -> List[str]:
    steps = []
    for step in raw if isinstance(raw, list) else []:
        if isinstance(step, str):
            steps.append(step)
        elif isinstance(step, dict) and step.get("description"):
            steps.append(str(step["description"]))
    return steps


class Recipe:
    def __init__(self, id: str = "", title: str = "", servings_base: Optional[int] = None,
                 ingredient_groups: Optional[Dict[str, List[IngredientLine]]] = None,
                 optional_groups: Optional[Dict[str, List[IngredientLine]]] = None,
                 tags: Optional[List[str]] = None, season: Optional[List[str]] = None,
                 prep_minutes: Optional[int] = None, cook_minutes: Optional[int] = None,
                 steps: Optional[List[str]] = None, calories: Optional[Dict[str, Any]] = None):
        self.id = id
        self.title = title
        self.servings_base = servings_base
        # Dicts keep authoring order, which is the display order of groups
        self.ingredient_groups = dict(ingredient_groups) if ingredient_groups else {}
        self.optional_groups = dict(optional_groups) if optional_groups else {}
        self.tags = tags[:] if tags else []
        self.season = season[:] if season else []
        self.prep_minutes = prep_minutes
        self.cook_minutes = cook_minutes
        self.steps = steps[:] if steps else []
        self.calories = calories if isinstance(calories, dict) else {}

    def __str__(self) -> str:
        return f"{self.title} ({self.id}) - {self.servings_base or '?'} portions - Tags: {', '.join(self.tags)}"

    __repr__ = __str__

    @property
    def time(self) -> Optional[int]:
        """Total preparation + cooking minutes, None when the recipe gives neither."""
        if self.prep_minutes is None and self.cook_minutes is None:
            return None
        return (self.prep_minutes or 0) + (self.cook_minutes or 0)

    @property
    def base_calories_per_person(self):
        return self.calories.get("base_par_personne", self.calories.get("sans_feculent_par_personne"))

    def optional_group_labels(self) -> List[str]:
        return list(self.optional_groups)

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        temps = d.get("temps") if isinstance(d.get("temps"), dict) else {}
        servings = _first_present(d, "portions", "servings_base")
        if isinstance(servings, bool) or not isinstance(servings, (int, float)) or servings <= 0:
            servings = None
        return Recipe(
            id=str(d.get("id") or ""),
            title=_first_present(d, "titre", "title") or "",
            servings_base=servings,
            ingredient_groups=_groups_from(_first_present(d, "ingredients", "ingredient_groups")),
            optional_groups=_groups_from(_first_present(d, "options", "optional_groups")),
            tags=list(d.get("tags") or []),
            season=list(_first_present(d, "saison", "season") or []),
            prep_minutes=temps.get("preparation_minutes", d.get("prep_minutes")),
            cook_minutes=temps.get("cuisson_minutes", d.get("cook_minutes")),
            steps=_steps_from(_first_present(d, "etapes", "steps")),
            calories=d.get("calories"),
        )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "servings_base": self.servings_base,
            "tags": self.tags,
            "season": self.season,
            "time": self.time,
            "prep_minutes": self.prep_minutes,
            "cook_minutes": self.cook_minutes,
            "ingredient_groups": {label: [line.to_dict() for line in lines]
                                  for label, lines in self.ingredient_groups.items()},
            "optional_groups": {label: [line.to_dict() for line in lines]
                                for label, lines in self.optional_groups.items()},
            "steps": self.steps,
            "calories": self.calories,
        }
