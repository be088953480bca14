"""SuggestedSwap: an ephemeral proposal to change the recipe of one rotation slot."""
from typing import Optional


class SuggestedSwap:
    def __init__(self, week_nr: int, day_of_week: int, meal: str, course: str,
                 current_recipe_id: Optional[int], suggested_recipe_id: int, reason: str = "",
                 location: Optional[str] = None, current_recipe_name: Optional[str] = None,
                 suggested_recipe_name: Optional[str] = None):
        self.week_nr = week_nr
        self.day_of_week = day_of_week
        self.meal = meal
        self.course = course
        self.current_recipe_id = current_recipe_id
        self.suggested_recipe_id = suggested_recipe_id
        self.reason = reason
        self.location = location
        self.current_recipe_name = current_recipe_name
        self.suggested_recipe_name = suggested_recipe_name

    def target(self) -> tuple:
        """Slot coordinates this swap points at (location may be None)."""
        return (self.week_nr, self.day_of_week, self.meal, self.course, self.location)

    def __str__(self) -> str:
        where = f"W{self.week_nr} D{self.day_of_week} {self.meal}/{self.course}"
        if self.location:
            where += f"@{self.location}"
        return f"{where}: {self.current_recipe_id} -> {self.suggested_recipe_id} ({self.reason})"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data)
        allowed = {"week_nr", "day_of_week", "meal", "course", "current_recipe_id",
                   "suggested_recipe_id", "reason", "location", "current_recipe_name",
                   "suggested_recipe_name"}
        return SuggestedSwap(**{k: v for k, v in d.items() if k in allowed})

    def to_dict(self):
        return {
            "week_nr": self.week_nr,
            "day_of_week": self.day_of_week,
            "meal": self.meal,
            "course": self.course,
            "location": self.location,
            "current_recipe_id": self.current_recipe_id,
            "current_recipe_name": self.current_recipe_name,
            "suggested_recipe_id": self.suggested_recipe_id,
            "suggested_recipe_name": self.suggested_recipe_name,
            "reason": self.reason,
        }
