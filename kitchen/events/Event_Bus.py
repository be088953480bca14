"""Simple Event Bus / Observer implementation for rotation changes.

Event names used so far:
  rotation.slot_updated -> payload {"slot": RotationSlot, "previous_recipe_id": int | None}
  rotation.swap_applied -> payload {"swap": SuggestedSwap, "slot": RotationSlot}
  composition.link_added -> payload {"link": SubRecipeLink}
  composition.cycle_rejected -> payload {"parent_id": int, "child_id": int}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
ROTATION_SLOT_UPDATED = "rotation.slot_updated"
ROTATION_SWAP_APPLIED = "rotation.swap_applied"
COMPOSITION_LINK_ADDED = "composition.link_added"
COMPOSITION_CYCLE_REJECTED = "composition.cycle_rejected"


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
			except Exception:  # subscriber errors never reach the publisher
				logger.exception("Error delivering %s to %r", event_name, cb)


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS',
	'ROTATION_SLOT_UPDATED', 'ROTATION_SWAP_APPLIED',
	'COMPOSITION_LINK_ADDED', 'COMPOSITION_CYCLE_REJECTED',
]
