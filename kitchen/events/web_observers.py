"""Activity feed observers for rotation and composition events.

Subscribes to the GLOBAL_EVENT_BUS for slot edits, applied swaps, new
sub-recipe links and rejected cycles, and keeps a small in-memory ring buffer
the API serves at /api/events. Each entry carries an increasing id so a
client can poll with since=<last id seen>.
"""
from __future__ import annotations
from typing import List, Dict, Any, Optional
from threading import Lock
from datetime import datetime, timezone

from .Event_Bus import (
    GLOBAL_EVENT_BUS, ROTATION_SLOT_UPDATED, ROTATION_SWAP_APPLIED,
    COMPOSITION_LINK_ADDED, COMPOSITION_CYCLE_REJECTED,
)

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
MAX_EVENTS = 300
_started = False

_WATCHED = (
    ROTATION_SLOT_UPDATED, ROTATION_SWAP_APPLIED,
    COMPOSITION_LINK_ADDED, COMPOSITION_CYCLE_REJECTED,
)


def _flatten(payload: Any) -> Dict[str, Any]:
    """Turn domain objects in a payload into plain dicts."""
    if not isinstance(payload, dict):
        return {}
    out = {}
    for k, v in payload.items():
        out[k] = v.to_dict() if hasattr(v, 'to_dict') else v
    return out


def _record(event_name: str, payload: Any):
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat(),
        }
        evt.update(_flatten(payload))
        _events.append(evt)
        _next_id += 1
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


def start():
    """Idempotent start: subscribe observers once."""
    global _started
    if _started:
        return
    for name in _WATCHED:
        GLOBAL_EVENT_BUS.subscribe(name, _record)
    _started = True


def get_events(since: Optional[int] = None) -> Dict[str, Any]:
    """Return events newer than 'since' (exclusive), or the whole buffer."""
    with _lock:
        if since is None:
            data = list(_events)
        else:
            data = [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


__all__ = ['start', 'get_events', 'MAX_EVENTS']
