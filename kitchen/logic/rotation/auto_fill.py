"""Rule-based filling of empty rotation slots.

Culinary rules:
- soups, meat/fish mains and vegetarian mains each come from their own pool
- side*a slots only take starch sides, side*b slots only vegetable sides
  (untagged sides are never used)
- recipes tagged no-rotation are ignored
- dessert slots are never filled
- a recipe is never served twice on the same day at the same location
- every location runs through its pools independently

Pools are ordered by recipe id and walked round-robin, so the same grid and
recipe book always produce the same fill.
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Dict, List, Optional, Set, Tuple

from kitchen.domain.Recipe import Recipe
from kitchen.events.Event_Bus import EventBus
from kitchen.infra.Repository import KitchenRepository
from kitchen.logic.rotation.grid import RotationGrid
from kitchen.utilities.constants import AUTO_FILL_POOLS, NO_ROTATION_TAG

logger = logging.getLogger(__name__)

__all__ = ["AutoFillResult", "recipe_pool", "auto_fill"]

_SOUP_CATEGORIES = ("soup", "clear soup", "cream soup")
_MEAT_CATEGORIES = ("meat", "fish")
_VEGGIE_CATEGORIES = ("veggie", "vegetarian", "vegan")
_SIDE_CATEGORIES = ("side",)
_STARCH_TAGS = ("starch",)
_VEGETABLE_TAGS = ("vegetable",)


def recipe_pool(recipe: Recipe) -> Optional[str]:
    """Pool a recipe is drawn from, or None when it never enters the rotation."""
    tags = {t.strip().lower() for t in recipe.tags}
    if NO_ROTATION_TAG in tags:
        return None
    category = (recipe.category or "").strip().lower()
    if category in _SOUP_CATEGORIES:
        return "soup"
    if category in _MEAT_CATEGORIES:
        return "main_meat"
    if category in _VEGGIE_CATEGORIES:
        return "main_veggie"
    if category in _SIDE_CATEGORIES:
        if tags.intersection(_STARCH_TAGS):
            return "starch"
        if tags.intersection(_VEGETABLE_TAGS):
            return "vegetable"
    return None


class _Pool:
    """Round-robin cursor over one pool's recipes."""

    def __init__(self, recipes: List[Recipe], start: int = 0):
        self.recipes = recipes
        self.idx = start

    def next(self, used_today: Set[int]) -> Optional[Recipe]:
        for _ in range(len(self.recipes)):
            recipe = self.recipes[self.idx % len(self.recipes)]
            self.idx += 1
            if recipe.id not in used_today:
                return recipe
        return None


class AutoFillResult:
    def __init__(self, filled: int = 0, skipped: int = 0):
        self.filled = filled
        self.skipped = skipped

    def __repr__(self) -> str:
        return f"AutoFillResult(filled={self.filled}, skipped={self.skipped})"

    def to_dict(self):
        return {"filled": self.filled, "skipped": self.skipped}


def _pools_by_location(recipes: List[Recipe], locations: List[str]) -> Dict[str, Dict[str, _Pool]]:
    grouped: Dict[str, List[Recipe]] = {name: [] for name in set(AUTO_FILL_POOLS.values())}
    for recipe in sorted(recipes, key=lambda r: r.id):
        pool = recipe_pool(recipe)
        if pool is not None:
            grouped[pool].append(recipe)
    logger.info("Auto-fill pools: %s", ", ".join(f"{name}={len(members)}" for name, members in sorted(grouped.items())))

    # each location starts at a different point of every pool
    pools: Dict[str, Dict[str, _Pool]] = {}
    for i, location in enumerate(locations):
        pools[location] = {
            name: _Pool(members, (i * len(members)) // len(locations))
            for name, members in grouped.items()
        }
    return pools


def auto_fill(repository: KitchenRepository, template_id: int, overwrite: bool = False,
              event_bus: Optional[EventBus] = None) -> AutoFillResult:
    """Fill the template's slots from the recipe pools.

    Filled slots are kept unless `overwrite` is set; their recipes still count
    as used for the day. Every write goes through RotationGrid.set_slot.
    """
    grid = RotationGrid(repository, event_bus)
    template = grid.template(template_id)
    pools = _pools_by_location(repository.list_recipes(), template.locations)
    stored = {s.key: s for s in repository.list_slots(template_id)}

    result = AutoFillResult()
    used: Dict[Tuple[int, int, str], Set[int]] = defaultdict(set)
    if not overwrite:
        for key, slot in stored.items():
            if slot.is_filled:
                used[(key.week_nr, key.day_of_week, key.location)].add(slot.recipe_id)

    for key in grid.iter_keys(template):
        used_today = used[(key.week_nr, key.day_of_week, key.location)]
        slot = stored.get(key)
        pool_name = AUTO_FILL_POOLS.get(key.course)
        if pool_name is None or (slot is not None and slot.is_filled and not overwrite):
            result.skipped += 1
            continue
        recipe = pools[key.location][pool_name].next(used_today)
        if recipe is None:
            result.skipped += 1
            continue
        grid.set_slot(key, recipe.id, slot.portions if slot is not None else 1)
        used_today.add(recipe.id)
        result.filled += 1

    logger.info("Auto-filled template %s: %s", template_id, result)
    return result
