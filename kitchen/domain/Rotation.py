"""Rotation template and slot entities.

A template describes an N-week menu cycle served at one or more locations.
Slots are addressed by a full SlotKey; a key without a stored slot is simply
unfilled.
"""
from typing import Iterable, List, NamedTuple, Optional


class RotationTemplate:
    def __init__(self, id: int = 0, name: str = "", week_count: int = 6,
                 locations: Optional[Iterable[str]] = None, is_active: bool = True):
        self.id = id
        self.name = name
        self.week_count = week_count
        self.locations: List[str] = sorted(set(locations)) if locations else []
        self.is_active = is_active

    def __str__(self) -> str:
        return f"Template #{self.id} {self.name} - {self.week_count} weeks - Locations: {', '.join(self.locations)}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        d = dict(data)
        allowed = {"id", "name", "week_count", "locations", "is_active"}
        return RotationTemplate(**{k: v for k, v in d.items() if k in allowed})

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "week_count": self.week_count,
            "locations": list(self.locations),
            "is_active": self.is_active,
        }


class SlotKey(NamedTuple):
    template_id: int
    week_nr: int
    day_of_week: int
    meal: str
    course: str
    location: str

    def to_dict(self):
        return self._asdict()

    @staticmethod
    def from_dict(data) -> "SlotKey":
        return SlotKey(
            template_id=int(data["template_id"]),
            week_nr=int(data["week_nr"]),
            day_of_week=int(data["day_of_week"]),
            meal=data["meal"],
            course=data["course"],
            location=data["location"],
        )


class RotationSlot:
    def __init__(self, key: SlotKey, recipe_id: Optional[int] = None, portions: int = 1):
        self.key = key
        self.recipe_id = recipe_id
        self.portions = portions

    @property
    def is_filled(self) -> bool:
        return self.recipe_id is not None

    def __eq__(self, other) -> bool:
        if not isinstance(other, RotationSlot):
            return NotImplemented
        return (self.key, self.recipe_id, self.portions) == (other.key, other.recipe_id, other.portions)

    def __str__(self) -> str:
        k = self.key
        recipe = self.recipe_id if self.recipe_id is not None else "-"
        return f"W{k.week_nr} D{k.day_of_week} {k.meal}/{k.course}@{k.location}: {recipe} x{self.portions}"

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        return RotationSlot(SlotKey.from_dict(data), data.get("recipe_id"), data.get("portions", 1) or 1)

    def to_dict(self):
        d = self.key.to_dict()
        d["recipe_id"] = self.recipe_id
        d["portions"] = self.portions
        return d
