"""Directed composition edge: one parent portion consumes `portion_multiplier` child portions."""


class SubRecipeLink:
    def __init__(self, parent_recipe_id: int, child_recipe_id: int, portion_multiplier: float = 1.0):
        self.parent_recipe_id = parent_recipe_id
        self.child_recipe_id = child_recipe_id
        self.portion_multiplier = portion_multiplier

    def __str__(self) -> str:
        return f"{self.parent_recipe_id} -> {self.child_recipe_id} (x{self.portion_multiplier})"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        return SubRecipeLink(
            int(data["parent_recipe_id"]),
            int(data["child_recipe_id"]),
            data.get("portion_multiplier", 1.0),
        )

    def to_dict(self):
        return {
            "parent_recipe_id": self.parent_recipe_id,
            "child_recipe_id": self.child_recipe_id,
            "portion_multiplier": self.portion_multiplier,
        }
