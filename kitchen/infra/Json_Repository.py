"""JSON file repository: recipes, sub-recipe links, templates and slots as files in a data directory."""
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional, Union

from kitchen.domain.Recipe import Recipe
from kitchen.domain.Rotation import RotationSlot, RotationTemplate, SlotKey
from kitchen.domain.SubRecipeLink import SubRecipeLink
from kitchen.infra.Repository import KitchenRepository
from kitchen.infra.paths import DATA_DIR, RECIPES_FILE_NAME, SUB_RECIPES_FILE_NAME, ROTATION_FILE_NAME

logger = logging.getLogger(__name__)


def _read_json(path: Path, default):
    """Read a JSON file, falling back to `default` when missing or unreadable."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return data if data is not None else default
    except FileNotFoundError:
        return default
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {path}: {e}")
        return default


def _atomic_write(path: Path, data: Any):
    os.makedirs(path.parent, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.stem}_", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            json.dump(data, tmp, indent=2, ensure_ascii=False)
        shutil.move(tmp_path, str(path))
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


class JsonRepository(KitchenRepository):
    def __init__(self, data_dir: Union[str, Path, None] = None):
        self.data_dir = Path(data_dir) if data_dir is not None else DATA_DIR
        self.recipes_file = self.data_dir / RECIPES_FILE_NAME
        self.sub_recipes_file = self.data_dir / SUB_RECIPES_FILE_NAME
        self.rotation_file = self.data_dir / ROTATION_FILE_NAME
        self._lock = Lock()

    # --- raw store helpers ---
    def _load_rotation(self) -> Dict[str, List[dict]]:
        store = _read_json(self.rotation_file, {})
        store.setdefault("templates", [])
        store.setdefault("slots", [])
        return store

    def _save_rotation(self, store: Dict[str, List[dict]]):
        _atomic_write(self.rotation_file, store)

    @staticmethod
    def _slot_index(store: Dict[str, List[dict]], key: SlotKey) -> Optional[int]:
        for i, raw in enumerate(store["slots"]):
            if SlotKey.from_dict(raw) == key:
                return i
        return None

    # --- recipes ---
    def list_recipes(self):
        recipes = []
        for entry in _read_json(self.recipes_file, []):
            try:
                recipes.append(Recipe.from_dict(entry))
            except (TypeError, ValueError) as e:
                logger.error(f"Skipping malformed recipe entry {entry!r}: {e}")
        return recipes

    def get_recipe(self, recipe_id):
        for recipe in self.list_recipes():
            if recipe.id == recipe_id:
                return recipe
        return None

    def save_recipe(self, recipe: Recipe) -> Recipe:
        with self._lock:
            entries = [r for r in _read_json(self.recipes_file, []) if r.get("id") != recipe.id]
            entries.append(recipe.to_dict())
            entries.sort(key=lambda r: r.get("id", 0))
            _atomic_write(self.recipes_file, entries)
        return recipe

    # --- composition graph ---
    def get_sub_recipe_links(self, recipe_id):
        return [SubRecipeLink.from_dict(raw) for raw in _read_json(self.sub_recipes_file, [])
                if raw.get("parent_recipe_id") == recipe_id]

    def add_sub_recipe_link(self, link):
        with self._lock:
            links = _read_json(self.sub_recipes_file, [])
            links.append(link.to_dict())
            _atomic_write(self.sub_recipes_file, links)
        return link

    # --- templates ---
    def get_template(self, template_id):
        for raw in self._load_rotation()["templates"]:
            if raw.get("id") == template_id:
                return RotationTemplate.from_dict(raw)
        return None

    def list_templates(self):
        return [RotationTemplate.from_dict(raw) for raw in self._load_rotation()["templates"]]

    def save_template(self, template):
        with self._lock:
            store = self._load_rotation()
            if not template.id:
                template.id = max((t.get("id", 0) for t in store["templates"]), default=0) + 1
            store["templates"] = [t for t in store["templates"] if t.get("id") != template.id]
            store["templates"].append(template.to_dict())
            store["templates"].sort(key=lambda t: t["id"])
            self._save_rotation(store)
        return template

    # --- slots ---
    def get_slot(self, key):
        store = self._load_rotation()
        idx = self._slot_index(store, key)
        return RotationSlot.from_dict(store["slots"][idx]) if idx is not None else None

    def put_slot(self, slot):
        with self._lock:
            store = self._load_rotation()
            idx = self._slot_index(store, slot.key)
            if idx is None:
                store["slots"].append(slot.to_dict())
            else:
                store["slots"][idx] = slot.to_dict()
            self._save_rotation(store)
        return slot

    def delete_slot(self, key):
        with self._lock:
            store = self._load_rotation()
            idx = self._slot_index(store, key)
            if idx is None:
                return False
            del store["slots"][idx]
            self._save_rotation(store)
            return True

    def list_slots(self, template_id, week_nr=None):
        return [RotationSlot.from_dict(raw) for raw in self._load_rotation()["slots"]
                if raw.get("template_id") == template_id
                and (week_nr is None or raw.get("week_nr") == week_nr)]

    def replace_recipe_if(self, key, expected_recipe_id, new_recipe_id):
        with self._lock:
            store = self._load_rotation()
            idx = self._slot_index(store, key)
            live = store["slots"][idx].get("recipe_id") if idx is not None else None
            if live != expected_recipe_id:
                return None
            portions = store["slots"][idx].get("portions", 1) if idx is not None else 1
            updated = RotationSlot(key, new_recipe_id, portions)
            if idx is None:
                store["slots"].append(updated.to_dict())
            else:
                store["slots"][idx] = updated.to_dict()
            self._save_rotation(store)
            return updated


__all__ = ['JsonRepository']
