"""Web-facing observers for plan events.

Subscribes to the GLOBAL_EVENT_BUS for plan.saved, plan.week_loaded and
plan.moved and keeps a ring buffer of recent events that the presentation
layer polls (``/api/plan/events?since=<cursor>``) to know when its week or
month view must be refreshed.

Each event gets an auto-increment integer id (cursor) so clients request only
newer events. MAX_PLAN_EVENTS caps memory use.
"""
from __future__ import annotations
from typing import List, Dict, Any
from threading import Lock
from datetime import datetime, timezone

from mealplan.utilities.config import MAX_PLAN_EVENTS
from .Event_Bus import GLOBAL_EVENT_BUS, PLAN_SAVED, PLAN_WEEK_LOADED, PLAN_MOVED

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
_started = False


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        }
        # Keep only JSON friendly fields
        if isinstance(payload, dict):
            for k in ('week_start', 'created', 'dates', 'source', 'dest', 'recipe_id'):
                if k in payload:
                    evt[k] = payload[k]
        _events.append(evt)
        _next_id += 1
        if len(_events) > MAX_PLAN_EVENTS:
            del _events[: len(_events) - MAX_PLAN_EVENTS]


def start():
    """Idempotent start: subscribe observers once."""
    global _started
    if _started:
        return
    for name in (PLAN_SAVED, PLAN_WEEK_LOADED, PLAN_MOVED):
        GLOBAL_EVENT_BUS.subscribe(name, _record)
    _started = True


def get_events(since: int | None = None) -> Dict[str, Any]:
    """Return events newer than 'since' (exclusive).

    If since is None, returns the buffered events. Response includes
    next_cursor (largest id) so the client can poll with since=next_cursor.
    """
    with _lock:
        if since is None:
            data = list(_events)
        else:
            data = [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'get_events']
