"""Recipe domain entity as read from the recipe store (read-only for the rotation core)."""
from kitchen.domain.Ingredient import Ingredient
from typing import Iterable, List, Optional


class Recipe:
    def __init__(self, id: int = 0, name: str = "", category: str = "", portions: int = 1,
                 allergens: Optional[Iterable[str]] = None, tags: Optional[List[str]] = None,
                 season: str = "all", ingredients: Optional[List[Ingredient]] = None,
                 prep_time: int = 0):
        self.id = id
        self.name = name
        self.category = category
        self.portions = portions
        self.allergens = set(allergens) if allergens else set()
        self.tags = tags[:] if tags else []
        self.season = season or "all"
        self.ingredients = ingredients[:] if ingredients else []
        self.prep_time = prep_time

    def __str__(self) -> str:
        return (f"#{self.id} {self.name} ({self.category}) - {self.portions} portions - "
                f"Season: {self.season} - Allergens: {', '.join(sorted(self.allergens)) or '-'}")

    __repr__ = __str__

    def is_in_season(self, season: str) -> bool:
        return self.season == "all" or self.season == season

    @staticmethod
    def from_dict(data):
        d = dict(data)
        d['ingredients'] = [Ingredient.from_dict(ing) for ing in d.get('ingredients', [])]
        allowed = {"id", "name", "category", "portions", "allergens", "tags", "season",
                   "ingredients", "prep_time"}
        return Recipe(**{k: v for k, v in d.items() if k in allowed})

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "portions": self.portions,
            "allergens": sorted(self.allergens),
            "tags": self.tags,
            "season": self.season,
            "ingredients": [ing.to_dict() for ing in self.ingredients],
            "prep_time": self.prep_time,
        }
