"""In-memory repository (tests, demos). Recipe ids are opaque keys into plain dicts."""
from threading import Lock
from typing import Dict, Iterable, List, Optional

from kitchen.domain.Recipe import Recipe
from kitchen.domain.Rotation import RotationSlot, RotationTemplate, SlotKey
from kitchen.domain.SubRecipeLink import SubRecipeLink
from kitchen.infra.Repository import KitchenRepository


class MemoryRepository(KitchenRepository):
    def __init__(self, recipes: Optional[Iterable[Recipe]] = None,
                 links: Optional[Iterable[SubRecipeLink]] = None,
                 templates: Optional[Iterable[RotationTemplate]] = None):
        self._lock = Lock()
        self._recipes: Dict[int, Recipe] = {r.id: r for r in recipes or []}
        self._links: Dict[int, List[SubRecipeLink]] = {}
        self._templates: Dict[int, RotationTemplate] = {}
        self._slots: Dict[SlotKey, RotationSlot] = {}
        for link in links or []:
            self.add_sub_recipe_link(link)
        for template in templates or []:
            self.save_template(template)

    def add_recipe(self, recipe: Recipe) -> Recipe:
        self._recipes[recipe.id] = recipe
        return recipe

    def get_recipe(self, recipe_id):
        return self._recipes.get(recipe_id)

    def list_recipes(self):
        return [self._recipes[k] for k in sorted(self._recipes)]

    def get_sub_recipe_links(self, recipe_id):
        return list(self._links.get(recipe_id, []))

    def add_sub_recipe_link(self, link):
        self._links.setdefault(link.parent_recipe_id, []).append(link)
        return link

    def get_template(self, template_id):
        return self._templates.get(template_id)

    def list_templates(self):
        return [self._templates[k] for k in sorted(self._templates)]

    def save_template(self, template):
        if not template.id:
            template.id = max(self._templates, default=0) + 1
        self._templates[template.id] = template
        return template

    def get_slot(self, key):
        return self._slots.get(key)

    def put_slot(self, slot):
        with self._lock:
            self._slots[slot.key] = slot
        return slot

    def delete_slot(self, key):
        with self._lock:
            return self._slots.pop(key, None) is not None

    def list_slots(self, template_id, week_nr=None):
        return [s for k, s in self._slots.items()
                if k.template_id == template_id and (week_nr is None or k.week_nr == week_nr)]

    def replace_recipe_if(self, key, expected_recipe_id, new_recipe_id):
        with self._lock:
            slot = self._slots.get(key)
            live = slot.recipe_id if slot else None
            if live != expected_recipe_id:
                return None
            updated = RotationSlot(key, new_recipe_id, slot.portions if slot else 1)
            self._slots[key] = updated
            return updated
