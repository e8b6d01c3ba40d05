"""Web-facing observers for plan events.

This module subscribes to an event bus for:
  - plan.changed
  - plan.replaced
  - ledger.updated
  - sync.failed

and stores a lightweight in-memory ring buffer of recent events that the
web layer serves from /api/events so a UI can refresh its plan and shopping
list without a full page reload.

Design:
  * Each event stored with an auto-increment integer id (cursor) so clients
    can request only newer events (since=<last_id_seen>).
  * Thread-safety ensured with a simple Lock.
  * A MAX_EVENTS cap prevents unbounded memory growth.
"""
from __future__ import annotations
import logging
from typing import List, Dict, Any, Optional
from threading import Lock
from datetime import datetime, timezone

from recettes.utilities.constants import MAX_EVENTS
from .Event_Bus import (
    EventBus, GLOBAL_EVENT_BUS, PLAN_CHANGED, PLAN_REPLACED, LEDGER_UPDATED, SYNC_FAILED
)

logger = logging.getLogger(__name__)

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
_started_on: List[EventBus] = []


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat()
        }
        # Keep only JSON-friendly fields; the plan/ledger objects stay server side
        if isinstance(payload, dict):
            for k in ('reason', 'recipe_id', 'source', 'count', 'operation', 'identity', 'error'):
                if k in payload:
                    evt[k] = payload[k]
        _events.append(evt)
        _next_id += 1
        # Trim buffer
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


def start(bus: Optional[EventBus] = None):
    """Idempotent start: subscribe observers once per bus."""
    bus = bus or GLOBAL_EVENT_BUS
    if any(b is bus for b in _started_on):
        return
    for name in (PLAN_CHANGED, PLAN_REPLACED, LEDGER_UPDATED, SYNC_FAILED):
        bus.subscribe(name, _record)
    _started_on.append(bus)
    logger.debug("Web observers subscribed")


def get_events(since: int | None = None) -> Dict[str, Any]:
    """Return events newer than 'since' (exclusive).

    If since is None, returns the last N (up to MAX_EVENTS) events.
    Response includes next_cursor (largest id) so client can poll with since=next_cursor.
    """
    with _lock:
        if since is None:
            data = list(_events)
        else:
            data = [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'get_events']
