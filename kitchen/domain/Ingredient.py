"""Ingredient line of a recipe: name, quantity, unit, optional category."""


class Ingredient:
    def __init__(self, name: str = "", quantity: float = 0, unit: str = "", category: str = ""):
        self.name = name
        self.quantity = quantity
        self.unit = unit
        self.category = category

    def __str__(self) -> str:
        parts = [f"{self.name} - {self.quantity} {self.unit}"]
        if self.category:
            parts.append(f"Category: {self.category}")
        return " - ".join(parts)

    __repr__ = __str__

    @staticmethod
    def from_dict(data):
        '''Creates an Ingredient from a dictionary. Ignores unknown keys.'''
        d = dict(data) if isinstance(data, dict) else {}
        # Older exports stored the quantity as 'amount'
        if "quantity" not in d and "amount" in d:
            d["quantity"] = d["amount"]
        allowed = {"name", "quantity", "unit", "category"}
        filtered = {k: v for k, v in d.items() if k in allowed}
        filtered.setdefault("name", "")
        filtered.setdefault("quantity", 0)
        filtered.setdefault("unit", "")
        return Ingredient(**filtered)

    def to_dict(self):
        return {
            "name": self.name,
            "quantity": self.quantity,
            "unit": self.unit,
            "category": self.category,
        }
