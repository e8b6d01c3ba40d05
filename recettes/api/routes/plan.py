import logging

from fastapi import APIRouter, Depends

from recettes.api.dependencies import get_session
from recettes.logic.planning.session import PlanSession
from recettes.logic.planning.summary import describe_plan
from recettes.utilities.validators import AddPlanItemInput, OptionToggleInput, ServingsInput

router = APIRouter(prefix="/api/plan", tags=["plan"])
logger = logging.getLogger(__name__)


def _plan_response(session: PlanSession) -> dict:
    items = describe_plan(session.plan, session.catalog)
    return {"items": items, "count": len(items), "authenticated": session.authenticated}


# Handlers are async so a debounced remote write can be scheduled on the running loop
@router.get("")
@router.get("/")
async def get_plan(session: PlanSession = Depends(get_session)):
    return _plan_response(session)


@router.post("/items")
async def add_item(payload: AddPlanItemInput, session: PlanSession = Depends(get_session)):
    if not session.store.add(payload.recipe_id):
        logger.info("Plan add ignored for unknown recipe %s", payload.recipe_id)
    return _plan_response(session)


@router.delete("/items/{recipe_id}")
async def remove_item(recipe_id: str, session: PlanSession = Depends(get_session)):
    session.store.remove(recipe_id)
    return _plan_response(session)


@router.put("/items/{recipe_id}/servings")
async def update_servings(recipe_id: str, payload: ServingsInput, session: PlanSession = Depends(get_session)):
    session.store.set_servings(recipe_id, payload.servings)
    return _plan_response(session)


@router.put("/items/{recipe_id}/options/{group}")
async def toggle_option(recipe_id: str, group: str, payload: OptionToggleInput,
                        session: PlanSession = Depends(get_session)):
    session.store.toggle_optional_group(recipe_id, group, payload.enabled)
    return _plan_response(session)
