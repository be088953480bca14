"""MenuPlanEntry: a rotation slot projected onto a concrete calendar date (derived, never edited)."""
from datetime import date
from kitchen.utilities.constants import DATE_FORMAT


class MenuPlanEntry:
    def __init__(self, date: date, meal: str, course: str, recipe_id: int, portions: int,
                 location: str, rotation_week_nr: int):
        self.date = date
        self.meal = meal
        self.course = course
        self.recipe_id = recipe_id
        self.portions = portions
        self.location = location
        self.rotation_week_nr = rotation_week_nr

    def __str__(self) -> str:
        return (f"{self.date.strftime(DATE_FORMAT)} {self.meal}/{self.course}@{self.location}: "
                f"{self.recipe_id} x{self.portions} (rotation week {self.rotation_week_nr})")

    __repr__ = __str__

    def to_dict(self):
        return {
            "date": self.date.strftime(DATE_FORMAT),
            "meal": self.meal,
            "course": self.course,
            "recipe_id": self.recipe_id,
            "portions": self.portions,
            "location": self.location,
            "rotation_week_nr": self.rotation_week_nr,
        }
