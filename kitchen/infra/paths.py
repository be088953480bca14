from pathlib import Path

from kitchen.utilities.config import DATA_DIR as _CONFIG_DATA_DIR

# Centralized paths for data files (single source of truth)
DATA_DIR = Path(_CONFIG_DATA_DIR).resolve()
RECIPES_FILE_NAME = 'recipes.json'
SUB_RECIPES_FILE_NAME = 'sub_recipes.json'
ROTATION_FILE_NAME = 'rotation.json'

__all__ = ['DATA_DIR', 'RECIPES_FILE_NAME', 'SUB_RECIPES_FILE_NAME', 'ROTATION_FILE_NAME']
