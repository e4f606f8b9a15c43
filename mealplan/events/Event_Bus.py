"""Simple Event Bus / Observer implementation for plan change notifications.

Event names:
  plan.saved -> payload {"week_start": str, "plan": WeekPlan, "dates": [str]}
  plan.week_loaded -> payload {"week_start": str, "created": bool}
  plan.moved -> payload {"source": str, "dest": str, "recipe_id": str|None}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PLAN_SAVED = "plan.saved"
PLAN_WEEK_LOADED = "plan.week_loaded"
PLAN_MOVED = "plan.moved"


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
			except Exception:  # pragma: no cover
				logger.exception("Error delivering %s to %s", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()

__all__ = ['EventBus', 'GLOBAL_EVENT_BUS', 'PLAN_SAVED', 'PLAN_WEEK_LOADED', 'PLAN_MOVED']
