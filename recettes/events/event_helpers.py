"""Event helper utilities.

Helpers that build the payloads for plan-related events and publish them on
the given bus (the global one by default).

Quick import:
    from recettes.events.event_helpers import (
        publish_plan_changed, publish_plan_replaced, publish_ledger_updated, publish_sync_failed
    )
"""
from __future__ import annotations
from typing import Iterable, Any, Optional
from .Event_Bus import (
    EventBus, GLOBAL_EVENT_BUS,
    PLAN_CHANGED, PLAN_REPLACED, LEDGER_UPDATED, SYNC_FAILED
)

__all__ = [
    'publish_plan_changed', 'publish_plan_replaced', 'publish_ledger_updated', 'publish_sync_failed',
]


def publish_plan_changed(plan: Any, reason: str, recipe_id: str, bus: Optional[EventBus] = None):
    """Publish a plan.changed event after a user mutation."""
    (bus or GLOBAL_EVENT_BUS).publish(PLAN_CHANGED, {
        'plan': plan,
        'reason': reason,
        'recipe_id': recipe_id
    })


def publish_plan_replaced(plan: Any, source: str, bus: Optional[EventBus] = None):
    """Publish a plan.replaced event (whole plan adopted from cache or remote)."""
    (bus or GLOBAL_EVENT_BUS).publish(PLAN_REPLACED, {
        'plan': plan,
        'source': source
    })


def publish_ledger_updated(lines: Iterable[Any], bus: Optional[EventBus] = None):
    """Publish the freshly computed shopping ledger.

    Payload structure:
        {
          'count': <int>,
          'lines': [ ShoppingLedgerLine, ... ]
        }
    """
    lines_list = list(lines) if not isinstance(lines, list) else lines
    (bus or GLOBAL_EVENT_BUS).publish(LEDGER_UPDATED, {
        'count': len(lines_list),
        'lines': lines_list
    })


def publish_sync_failed(operation: str, identity: Optional[str], error: Exception,
                        bus: Optional[EventBus] = None):
    """Publish a sync.failed event (remote read/write/subscribe error)."""
    (bus or GLOBAL_EVENT_BUS).publish(SYNC_FAILED, {
        'operation': operation,
        'identity': identity,
        'error': str(error)
    })
