"""Simple Event Bus / Observer implementation for plan state changes.

Event names:
  plan.changed   -> payload {"plan": Plan, "reason": str, "recipe_id": str}
  plan.replaced  -> payload {"plan": Plan, "source": "cache" | "remote"}
  ledger.updated -> payload {"lines": [ShoppingLedgerLine, ...]}
  sync.failed    -> payload {"operation": str, "identity": str, "error": str}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PLAN_CHANGED = "plan.changed"
PLAN_REPLACED = "plan.replaced"
LEDGER_UPDATED = "ledger.updated"
SYNC_FAILED = "sync.failed"


class EventBus:
	def __init__(self):
		self._subscribers: Dict[str, List[Callable[[str, Any], None]]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		if callback not in self._subscribers[event_name]:
			self._subscribers[event_name].append(callback)

	def unsubscribe(self, event_name: str, callback: Callable[[str, Any], None]):
		try:
			self._subscribers[event_name].remove(callback)
		except (ValueError, KeyError):
			pass

	def publish(self, event_name: str, payload: Any):
		for cb in list(self._subscribers.get(event_name, [])):
			try:
				cb(event_name, payload)
			except Exception:
				logger.exception("[EventBus] Error delivering %s to %s", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS',
	'PLAN_CHANGED', 'PLAN_REPLACED', 'LEDGER_UPDATED', 'SYNC_FAILED'
]
