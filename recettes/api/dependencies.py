"""Application-wide plan session, built lazily from configuration."""
import logging
from typing import Optional

from recettes.events import web_observers
from recettes.infra.Http_Store import HttpDocumentStore
from recettes.infra.Local_Cache import LocalCache
from recettes.infra.Plan_Repository import PlanRepository
from recettes.infra.Recipe_Repository import reading_from_recipes
from recettes.logic.planning.session import PlanSession
from recettes.utilities import config

logger = logging.getLogger(__name__)

_session: Optional[PlanSession] = None


def build_session() -> PlanSession:
    """Load the catalog, wire local cache + optional remote store, adopt the cached plan."""
    catalog = reading_from_recipes(config.RECIPES_DIR)
    repository = PlanRepository(LocalCache(config.CACHE_DIR), config.PLAN_STORAGE_KEY)
    remote = None
    if config.REMOTE_STORE_URL:
        remote = HttpDocumentStore(config.REMOTE_STORE_URL, token=config.REMOTE_STORE_TOKEN,
                                   poll_interval=config.REMOTE_POLL_SECONDS)
        logger.info("Remote plan store: %s", config.REMOTE_STORE_URL)
    else:
        logger.info("No remote plan store configured; plan is kept in the local cache")
    web_observers.start()
    return PlanSession(catalog, repository, remote, debounce_seconds=config.SAVE_DEBOUNCE_SECONDS).start()


def get_session() -> PlanSession:
    """Get the global PlanSession instance."""
    global _session
    if _session is None:
        _session = build_session()
    return _session


async def close_session() -> None:
    global _session
    if _session is not None:
        await _session.close()
        if _session.remote is not None:
            await _session.remote.aclose()
        _session = None
