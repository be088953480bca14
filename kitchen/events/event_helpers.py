"""Event helper utilities.

Helpers that publish rotation and composition events on a given bus
(the global bus when none is passed).

Quick import:
    from kitchen.events.event_helpers import (
        publish_slot_updated, publish_swap_applied,
        publish_link_added, publish_cycle_rejected,
    )
"""
from __future__ import annotations
from typing import Any, Optional
from .Event_Bus import (
    EventBus, GLOBAL_EVENT_BUS,
    ROTATION_SLOT_UPDATED, ROTATION_SWAP_APPLIED,
    COMPOSITION_LINK_ADDED, COMPOSITION_CYCLE_REJECTED,
)

__all__ = [
    'publish_slot_updated', 'publish_swap_applied',
    'publish_link_added', 'publish_cycle_rejected',
]


def _bus(bus: Optional[EventBus]) -> EventBus:
    return bus if bus is not None else GLOBAL_EVENT_BUS


def publish_slot_updated(slot: Any, previous_recipe_id: Optional[int], bus: Optional[EventBus] = None):
    """Publish a rotation.slot_updated event."""
    _bus(bus).publish(ROTATION_SLOT_UPDATED, {
        'slot': slot,
        'previous_recipe_id': previous_recipe_id,
    })


def publish_swap_applied(swap: Any, slot: Any, bus: Optional[EventBus] = None):
    """Publish a rotation.swap_applied event."""
    _bus(bus).publish(ROTATION_SWAP_APPLIED, {
        'swap': swap,
        'slot': slot,
    })


def publish_link_added(link: Any, bus: Optional[EventBus] = None):
    _bus(bus).publish(COMPOSITION_LINK_ADDED, {'link': link})


def publish_cycle_rejected(parent_id: int, child_id: int, bus: Optional[EventBus] = None):
    _bus(bus).publish(COMPOSITION_CYCLE_REJECTED, {
        'parent_id': parent_id,
        'child_id': child_id,
    })
