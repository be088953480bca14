"""Sub-recipe composition graph: cycle checks and ingredient resolution.

Recipes are opaque integer ids; edges come from the repository's
`get_sub_recipe_links(parent_id)`. Every traversal is iterative and keeps a
visited set, so an already-corrupted graph still terminates.
"""
from __future__ import annotations
import logging
from collections import deque
from typing import List, Optional, Set

from kitchen.domain.errors import CycleRejected, NotFoundError, ValidationError
from kitchen.domain.SubRecipeLink import SubRecipeLink
from kitchen.events.Event_Bus import EventBus
from kitchen.events.event_helpers import publish_cycle_rejected, publish_link_added
from kitchen.infra.Repository import KitchenRepository

logger = logging.getLogger(__name__)

__all__ = ["CompositionGraph", "ResolvedIngredient"]


class ResolvedIngredient:
    """One ingredient line after flattening sub-recipes."""

    def __init__(self, name: str, quantity: float, unit: str, from_sub_recipe: Optional[str] = None):
        self.name = name
        self.quantity = quantity
        self.unit = unit
        self.from_sub_recipe = from_sub_recipe

    def __repr__(self) -> str:
        src = f" (via {self.from_sub_recipe})" if self.from_sub_recipe else ""
        return f"{self.name} - {self.quantity} {self.unit}{src}"

    def to_dict(self):
        return {
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "from_sub_recipe": self.from_sub_recipe,
        }


class CompositionGraph:
    def __init__(self, repository: KitchenRepository, event_bus: Optional[EventBus] = None):
        self.repository = repository
        self._event_bus = event_bus

    def would_create_cycle(self, parent_id: int, child_id: int) -> bool:
        """True if adding parent -> child would close a cycle (self-loops included)."""
        if parent_id == child_id:
            return True
        visited: Set[int] = {parent_id}
        queue = deque([child_id])
        while queue:
            current = queue.popleft()
            if current == parent_id:
                return True
            if current in visited:
                continue
            visited.add(current)
            for link in self.repository.get_sub_recipe_links(current):
                queue.append(link.child_recipe_id)
        return False

    def has_cyclic_composition(self, recipe_id: int) -> bool:
        """True when one of the recipe's sub-recipes leads back to the recipe itself."""
        return any(self.would_create_cycle(recipe_id, link.child_recipe_id)
                   for link in self.repository.get_sub_recipe_links(recipe_id))

    def link(self, parent_id: int, child_id: int, portion_multiplier: float = 1.0) -> SubRecipeLink:
        """Persist parent -> child after the cycle check; nothing is written on rejection."""
        if portion_multiplier is None or portion_multiplier <= 0:
            raise ValidationError(f"portion multiplier must be positive, got {portion_multiplier}")
        for recipe_id in (parent_id, child_id):
            if self.repository.get_recipe(recipe_id) is None:
                raise NotFoundError(f"Recipe {recipe_id} not found")
        if self.would_create_cycle(parent_id, child_id):
            logger.warning("Rejected sub-recipe link %s -> %s (cycle)", parent_id, child_id)
            publish_cycle_rejected(parent_id, child_id, bus=self._event_bus)
            raise CycleRejected(parent_id, child_id)
        link = self.repository.add_sub_recipe_link(SubRecipeLink(parent_id, child_id, portion_multiplier))
        logger.info("Linked sub-recipe %s", link)
        publish_link_added(link, bus=self._event_bus)
        return link

    def resolve_ingredients(self, recipe_id: int, portion_multiplier: float = 1.0) -> List[ResolvedIngredient]:
        """Flatten a recipe's ingredients, pulling in sub-recipes with compounded multipliers.

        A sub-recipe already on the current path is skipped, so a pre-existing
        cycle contributes each recipe at most once per path.
        """
        result: List[ResolvedIngredient] = []
        # (recipe id, multiplier, ids on the path, name of the top-level sub-recipe)
        stack = [(recipe_id, portion_multiplier, frozenset(), None)]
        while stack:
            current, multiplier, path, via = stack.pop()
            if current in path:
                continue
            recipe = self.repository.get_recipe(current)
            if recipe is None:
                continue
            for ing in recipe.ingredients:
                result.append(ResolvedIngredient(ing.name, ing.quantity * multiplier, ing.unit, via))
            child_path = path | {current}
            links = self.repository.get_sub_recipe_links(current)
            # reversed so children are resolved in link order
            for link in reversed(links):
                child_via = via
                if child_via is None:
                    child = self.repository.get_recipe(link.child_recipe_id)
                    child_via = child.name if child else f"Recipe #{link.child_recipe_id}"
                stack.append((link.child_recipe_id, multiplier * link.portion_multiplier, child_path, child_via))
        return result
