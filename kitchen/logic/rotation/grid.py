"""Rotation grid: validated slot reads/writes and calendar-week rendering.

The grid is sparse: only slots that were written exist in the repository.
Reading an unwritten key yields an unfilled RotationSlot.
"""
from __future__ import annotations
import logging
from collections import defaultdict
from datetime import date
from itertools import product
from typing import Dict, Iterator, List, Optional

from kitchen.domain.errors import NotFoundError, ValidationError
from kitchen.domain.MenuPlanEntry import MenuPlanEntry
from kitchen.domain.Rotation import RotationSlot, RotationTemplate, SlotKey
from kitchen.events.Event_Bus import EventBus
from kitchen.events.event_helpers import publish_slot_updated
from kitchen.infra.Repository import KitchenRepository
from kitchen.logic.weeks.week_mapper import (
    date_for_day_of_week, map_meal_name, normalize_iso_week, rotation_week_nr, week_date_range,
)
from kitchen.utilities.constants import COURSES, DAYS_OF_WEEK, MEALS

logger = logging.getLogger(__name__)

__all__ = ["RotationGrid", "slot_sort_key"]

_DAY_ORDER = {dow: i for i, dow in enumerate(DAYS_OF_WEEK)}
_MEAL_ORDER = {m: i for i, m in enumerate(MEALS)}
_COURSE_ORDER = {c: i for i, c in enumerate(COURSES)}


def slot_sort_key(key: SlotKey) -> tuple:
    """Kitchen order: week, Monday..Sunday, lunch before dinner, course order, location."""
    return (key.week_nr, _DAY_ORDER.get(key.day_of_week, 99), _MEAL_ORDER.get(key.meal, 99),
            _COURSE_ORDER.get(key.course, 99), key.location)


class RotationGrid:
    def __init__(self, repository: KitchenRepository, event_bus: Optional[EventBus] = None):
        self.repository = repository
        self._event_bus = event_bus

    # --- templates & keys ---
    def template(self, template_id: int) -> RotationTemplate:
        template = self.repository.get_template(template_id)
        if template is None:
            raise NotFoundError(f"Rotation template {template_id} not found")
        return template

    def make_key(self, template_id: int, week_nr: int, day_of_week: int, meal: str,
                 course: str, location: str) -> SlotKey:
        """Build a fully validated key; alternate meal codes are normalized first."""
        template = self.template(template_id)
        meal = map_meal_name(meal)
        if not isinstance(week_nr, int) or not 1 <= week_nr <= template.week_count:
            raise ValidationError(f"week_nr must be in 1..{template.week_count}, got {week_nr}")
        if day_of_week not in DAYS_OF_WEEK:
            raise ValidationError(f"day_of_week must be in 0..6 (0=Sunday), got {day_of_week}")
        if meal not in MEALS:
            raise ValidationError(f"meal must be one of {', '.join(MEALS)}, got {meal!r}")
        if course not in COURSES:
            raise ValidationError(f"course must be one of {', '.join(COURSES)}, got {course!r}")
        if location not in template.locations:
            raise ValidationError(f"location {location!r} is not active in template {template_id}")
        return SlotKey(template_id, week_nr, day_of_week, meal, course, location)

    def iter_keys(self, template: RotationTemplate, week_nr: Optional[int] = None) -> Iterator[SlotKey]:
        """Every addressable key of the template, in kitchen order."""
        weeks = [week_nr] if week_nr is not None else range(1, template.week_count + 1)
        for week, dow, meal, course, location in product(weeks, DAYS_OF_WEEK, MEALS, COURSES,
                                                          template.locations):
            yield SlotKey(template.id, week, dow, meal, course, location)

    def total_slot_count(self, template: RotationTemplate) -> int:
        return template.week_count * len(DAYS_OF_WEEK) * len(MEALS) * len(COURSES) * len(template.locations)

    # --- slot access ---
    def get_slot(self, key: SlotKey) -> RotationSlot:
        slot = self.repository.get_slot(key)
        return slot if slot is not None else RotationSlot(key)

    def set_slot(self, key: SlotKey, recipe_id: Optional[int], portions: int = 1) -> RotationSlot:
        """Direct edit of one slot. Validation happens before anything is written."""
        key = self.make_key(*key)
        if isinstance(portions, bool) or not isinstance(portions, int) or portions < 1:
            raise ValidationError(f"portions must be a positive integer, got {portions!r}")
        if recipe_id is not None and self.repository.get_recipe(recipe_id) is None:
            raise ValidationError(f"Recipe {recipe_id} does not exist")
        previous = self.repository.get_slot(key)
        slot = self.repository.put_slot(RotationSlot(key, recipe_id, portions))
        logger.info("Slot updated: %s", slot)
        publish_slot_updated(slot, previous.recipe_id if previous else None, bus=self._event_bus)
        return slot

    def clear_slot(self, key: SlotKey) -> bool:
        key = self.make_key(*key)
        previous = self.repository.get_slot(key)
        removed = self.repository.delete_slot(key)
        if removed:
            publish_slot_updated(RotationSlot(key), previous.recipe_id if previous else None, bus=self._event_bus)
        return removed

    def clear(self, template_id: int, scope: str, week_nr: Optional[int] = None,
              day_of_week: Optional[int] = None) -> int:
        """Empty stored slots by scope ('all', 'week' or 'day'); returns how many were filled."""
        template = self.template(template_id)
        if scope == "all":
            targets = self.repository.list_slots(template_id)
        elif scope == "week":
            if week_nr is None:
                raise ValidationError("week_nr is required for scope=week")
            targets = self.repository.list_slots(template_id, week_nr)
        elif scope == "day":
            if week_nr is None or day_of_week is None:
                raise ValidationError("week_nr and day_of_week are required for scope=day")
            targets = [s for s in self.repository.list_slots(template_id, week_nr)
                       if s.key.day_of_week == day_of_week]
        else:
            raise ValidationError("scope must be 'all', 'week' or 'day'")
        cleared = 0
        for slot in targets:
            if self.repository.delete_slot(slot.key) and slot.is_filled:
                cleared += 1
        logger.info("Cleared %d slots of template %s (scope=%s)", cleared, template.id, scope)
        return cleared

    def slots(self, template_id: int, week_nr: Optional[int] = None) -> List[RotationSlot]:
        """Stored slots, in kitchen order."""
        return sorted(self.repository.list_slots(template_id, week_nr), key=lambda s: slot_sort_key(s.key))

    def resolved_slots(self, template_id: int) -> List[RotationSlot]:
        """Every addressable slot of the template; unwritten keys come back unfilled."""
        template = self.template(template_id)
        stored = {s.key: s for s in self.repository.list_slots(template_id)}
        return [stored.get(key) or RotationSlot(key) for key in self.iter_keys(template)]

    def overview(self, template_id: int) -> dict:
        template = self.template(template_id)
        weeks: Dict[int, List[dict]] = defaultdict(list)
        filled = 0
        for slot in self.slots(template_id):
            weeks[slot.key.week_nr].append(slot.to_dict())
            filled += slot.is_filled
        return {
            "template": template.to_dict(),
            "weeks": dict(weeks),
            "total_slots": self.total_slot_count(template),
            "filled_slots": filled,
        }

    # --- calendar projection ---
    def render_week(self, template_id: int, year: int, iso_week: int) -> List[MenuPlanEntry]:
        """Project the rotation week matching a calendar week onto concrete dates."""
        template = self.template(template_id)
        monday, _sunday = week_date_range(year, iso_week)
        week_nr = rotation_week_nr(normalize_iso_week(year, iso_week)[1], template.week_count)
        entries = []
        for slot in self.slots(template_id, week_nr):
            if not slot.is_filled:
                continue
            k = slot.key
            entries.append(MenuPlanEntry(
                date=date_for_day_of_week(monday, k.day_of_week),
                meal=map_meal_name(k.meal),
                course=k.course,
                recipe_id=slot.recipe_id,
                portions=slot.portions,
                location=k.location,
                rotation_week_nr=week_nr,
            ))
        return entries

    def render_date(self, template_id: int, d: date) -> List[MenuPlanEntry]:
        iso = d.isocalendar()
        return [e for e in self.render_week(template_id, iso[0], iso[1]) if e.date == d]
