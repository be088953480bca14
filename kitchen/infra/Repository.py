"""Storage boundary the rotation core depends on.

The core only talks to this interface; concrete stores live next to it
(in-memory for tests, JSON files for the default runtime).
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from kitchen.domain.Recipe import Recipe
from kitchen.domain.Rotation import RotationSlot, RotationTemplate, SlotKey
from kitchen.domain.SubRecipeLink import SubRecipeLink


class KitchenRepository(ABC):
    # --- recipes (read-only from the core's point of view) ---
    @abstractmethod
    def get_recipe(self, recipe_id: int) -> Optional[Recipe]: ...

    @abstractmethod
    def list_recipes(self) -> List[Recipe]: ...

    # --- composition graph ---
    @abstractmethod
    def get_sub_recipe_links(self, recipe_id: int) -> List[SubRecipeLink]:
        """Outgoing links of `recipe_id` (recipe_id is the parent)."""

    @abstractmethod
    def add_sub_recipe_link(self, link: SubRecipeLink) -> SubRecipeLink: ...

    # --- templates ---
    @abstractmethod
    def get_template(self, template_id: int) -> Optional[RotationTemplate]: ...

    @abstractmethod
    def list_templates(self) -> List[RotationTemplate]: ...

    @abstractmethod
    def save_template(self, template: RotationTemplate) -> RotationTemplate:
        """Insert (id == 0 assigns a new id) or update a template."""

    # --- slots ---
    @abstractmethod
    def get_slot(self, key: SlotKey) -> Optional[RotationSlot]: ...

    @abstractmethod
    def put_slot(self, slot: RotationSlot) -> RotationSlot:
        """Insert or overwrite the slot stored under slot.key."""

    @abstractmethod
    def delete_slot(self, key: SlotKey) -> bool: ...

    @abstractmethod
    def list_slots(self, template_id: int, week_nr: Optional[int] = None) -> List[RotationSlot]: ...

    @abstractmethod
    def replace_recipe_if(self, key: SlotKey, expected_recipe_id: Optional[int],
                          new_recipe_id: Optional[int]) -> Optional[RotationSlot]:
        """Compare-and-set on the slot's recipe id.

        Writes `new_recipe_id` only if the live recipe id (None for an absent
        slot) equals `expected_recipe_id`. Portions are kept. Returns the
        updated slot, or None when the comparison failed.
        """


__all__ = ['KitchenRepository']
