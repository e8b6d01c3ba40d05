import json
import logging
from typing import Optional

from recettes.domain.Plan import Plan, PlanDocumentError
from recettes.infra.Local_Cache import LocalCache
from recettes.utilities.constants import PLAN_STORAGE_KEY

logger = logging.getLogger(__name__)


class PlanRepository:
    """Reads and writes the meal plan as a serialized {items: [...]} blob in the local cache."""

    def __init__(self, cache: LocalCache, key: str = PLAN_STORAGE_KEY):
        self.cache = cache
        self.key = key

    def load(self) -> Optional[Plan]:
        """Return the cached plan, or None when nothing usable is cached.

        Malformed content (invalid JSON or not a plan document) is discarded
        with a warning so the caller keeps its in-memory default.
        """
        try:
            raw = self.cache.read(self.key)
        except OSError as e:
            logger.warning("Could not read cached plan %s: %s", self.key, e)
            return None
        if not raw:
            return None
        try:
            return Plan.from_document(json.loads(raw))
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON in cached plan %s: %s", self.key, e)
        except PlanDocumentError as e:
            logger.warning("Discarding malformed cached plan %s: %s", self.key, e)
        return None

    def save(self, plan: Plan) -> bool:
        """Write the full plan snapshot. Returns False (and logs) if the write failed."""
        try:
            self.cache.write(self.key, json.dumps(plan.to_dict(), ensure_ascii=False))
            return True
        except OSError as e:
            logger.error("Failed to save plan to local cache: %s", e)
            return False
