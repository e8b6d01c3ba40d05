from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Depends, Query, Response

from recettes.api.dependencies import close_session, get_session
from recettes.api.routes import plan, recipes
from recettes.events.web_observers import get_events as get_web_events
from recettes.infra.pdf_utils import generate_pdf_for_shopping_list
from recettes.logic.planning.session import PlanSession
from recettes.utilities.validators import IdentityInput

# Logging
logger = logging.getLogger("recettes_app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Flush a pending remote write and detach the subscription on shutdown
    await close_session()
    logger.info("Plan session closed")


# Initialize FastAPI app
app = FastAPI(title="Recettes Meal Planner API", lifespan=lifespan)

# Include routers
app.include_router(recipes.router)
app.include_router(plan.router)


# -------------------- API: Shopping List (JSON) --------------------
@app.get('/api/shopping-list')
@app.get('/api/shopping-list/')
async def api_shopping_list(session: PlanSession = Depends(get_session)):
    items = [line.to_dict() for line in session.ledger]
    return {"items": items, "count": len(items)}


@app.get("/export_pdf")
async def export_pdf(session: PlanSession = Depends(get_session)):
    pdf_bytes = generate_pdf_for_shopping_list(session.ledger)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="liste-de-courses.pdf"'},
    )


# -------------------- API: Identity / sync --------------------
@app.post('/api/session/identity')
async def api_identity_changed(payload: IdentityInput, session: PlanSession = Depends(get_session)):
    """Identity-change notification from the authentication layer (identity=None signs out)."""
    logger.info("Identity change: %s", payload.identity or "signed out")
    await session.on_identity_changed(payload.identity)
    return {"identity": session.identity, "authenticated": session.authenticated}


# -------------------- API: Events (polling) --------------------
@app.get('/api/events')
def api_events(since: Optional[int] = Query(default=None)):
    return get_web_events(since)
