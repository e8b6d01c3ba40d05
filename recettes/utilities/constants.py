from typing import Final

PLAN_STORAGE_KEY: Final[str] = "mealPlanner"
SAVE_DEBOUNCE_SECONDS: Final[float] = 0.3
REMOTE_POLL_SECONDS: Final[float] = 2.0
REMOTE_COLLECTION: Final[str] = "plannings"
MANIFEST_FILE: Final[str] = "recettes.json"

# Servings used when a recipe does not declare its own base
DEFAULT_SERVINGS: Final[int] = 2
DEFAULT_SERVINGS_INCREMENT: Final[int] = 1
MIN_SERVINGS: Final[int] = 1

MAX_EVENTS: Final[int] = 300
