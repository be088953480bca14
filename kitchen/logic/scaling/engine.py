"""Non-linear portion scaling for batch cooking.

Going from 4 to 400 portions, meat and vegetables scale linearly but salt,
spices, leavening and frying fat do not. Each ingredient is classified once
from its name, then scaled with the power law of its class:

    Standard          r
    Liquid            r ** 0.9   (less evaporation in bulk)
    Leavening Agent   r ** 0.8
    Spice/Herb        r ** 0.7   (flavour intensifies in large batches)
    Cooking Fat       r ** 0.6   (follows pan surface, not volume)

with r = to_portions / from_portions. For every r > 1 this keeps
Fat < Spice < Leavening < Liquid < Standard. Scaled quantities are kept
exact; only `to_dict` rounds them (to QUANTITY_DECIMALS) for display.
"""
from __future__ import annotations
import re
from enum import Enum
from typing import Callable, Dict, List, Tuple

from kitchen.domain.errors import ScalingDomainError
from kitchen.domain.Ingredient import Ingredient
from kitchen.domain.Recipe import Recipe
from kitchen.utilities.constants import QUANTITY_DECIMALS

__all__ = ["IngredientClass", "ScaledIngredient", "ScalingEngine", "classify_ingredient"]


class IngredientClass(str, Enum):
    STANDARD = "Standard"
    SPICE_HERB = "Spice/Herb"
    LEAVENING = "Leavening Agent"
    COOKING_FAT = "Cooking Fat"
    LIQUID = "Liquid"


# (German stems matched anywhere, English words matched whole), checked in this order
_KEYWORDS: List[Tuple[IngredientClass, Tuple[str, ...], Tuple[str, ...]]] = [
    (IngredientClass.COOKING_FAT,
     ("öl zum braten", "öl (zum braten)", "butter zum braten", "butter (zum braten)",
      "butterschmalz", "schmalz", "bratfett", "bratöl"),
     ("frying oil", "oil for frying", "frying fat", "lard", "dripping", "ghee", "clarified butter")),
    (IngredientClass.SPICE_HERB,
     ("salz", "pfeffer", "paprika", "oregano", "basilikum", "thymian", "rosmarin", "majoran",
      "kümmel", "koriander", "zimt", "muskat", "nelke", "curry", "chili", "ingwer", "knoblauch",
      "zwiebel", "kurkuma", "kardamom", "safran", "vanille", "gewürz", "kraut", "kräuter",
      "petersilie", "schnittlauch", "dill", "estragon", "lorbeer"),
     ("salt", "pepper", "peppercorn", "black pepper", "cayenne", "oregano", "basil", "thyme",
      "rosemary", "marjoram", "caraway", "cumin", "coriander", "cinnamon", "nutmeg", "clove",
      "curry", "chili", "chilli", "ginger", "garlic", "onion", "turmeric", "cardamom", "saffron",
      "vanilla", "spice", "herb", "parsley", "chive", "dill", "tarragon", "bay leaf")),
    (IngredientClass.LEAVENING,
     ("backpulver", "trockenhefe", "hefe", "gelatine", "natron", "pektin", "agar"),
     ("baking powder", "baking soda", "yeast", "gelatin", "gelatine", "pectin", "agar")),
    (IngredientClass.LIQUID,
     ("brühe", "fond", "sahne", "rahm", "suppe", "sauce", "soße", "wein", "bouillon", "obers"),
     ("stock", "broth", "cream", "soup", "sauce", "wine", "bouillon")),
]

# Produce that shares a name with a seasoning
_STANDARD_OVERRIDES = ("bell pepper", "paprikaschote", "spring onion", "frühlingszwiebel")


def _power(exponent: float) -> Callable[[float], float]:
    return lambda ratio: ratio ** exponent


_SCALING_LAWS: Dict[IngredientClass, Tuple[Callable[[float], float], str]] = {
    IngredientClass.STANDARD: (lambda ratio: ratio, "Scaled linearly"),
    IngredientClass.LIQUID: (_power(0.9), "Less evaporation in larger batches"),
    IngredientClass.LEAVENING: (_power(0.8), "Leavening reacts chemically, scaled slightly down"),
    IngredientClass.SPICE_HERB: (_power(0.7), "Seasoning intensifies in large batches"),
    IngredientClass.COOKING_FAT: (_power(0.6), "Frying fat follows pan surface, not volume"),
}


def _word_match(word: str, text: str) -> bool:
    return re.search(rf"\b{re.escape(word)}(?:e?s)?\b", text) is not None


def classify_ingredient(name: str) -> IngredientClass:
    """Classify an ingredient by keywords in its name (the unit is ignored)."""
    normalized = (name or "").lower().strip()
    if any(override in normalized for override in _STANDARD_OVERRIDES):
        return IngredientClass.STANDARD
    for ingredient_class, stems, words in _KEYWORDS:
        if any(stem in normalized for stem in stems):
            return ingredient_class
        if any(_word_match(word, normalized) for word in words):
            return ingredient_class
    return IngredientClass.STANDARD


class ScaledIngredient:
    def __init__(self, name: str, original_quantity: float, scaled_quantity: float, unit: str,
                 scaling_factor: float, scaling_note: str, ingredient_class: IngredientClass):
        self.name = name
        self.original_quantity = original_quantity
        self.scaled_quantity = scaled_quantity
        self.unit = unit
        self.scaling_factor = scaling_factor
        self.scaling_note = scaling_note
        self.ingredient_class = ingredient_class

    def __repr__(self) -> str:
        return (f"{self.name}: {self.original_quantity} -> {self.scaled_quantity} {self.unit} "
                f"(x{self.scaling_factor}, {self.ingredient_class.value})")

    def to_dict(self):
        return {
            "name": self.name,
            "original_quantity": self.original_quantity,
            "scaled_quantity": round(self.scaled_quantity, QUANTITY_DECIMALS),
            "unit": self.unit,
            "scaling_factor": round(self.scaling_factor, QUANTITY_DECIMALS),
            "scaling_note": self.scaling_note,
            "ingredient_class": self.ingredient_class.value,
        }


class ScalingEngine:
    def classify(self, name: str) -> IngredientClass:
        return classify_ingredient(name)

    def scale(self, ingredient: Ingredient, from_portions: float, to_portions: float) -> ScaledIngredient:
        if from_portions is None or to_portions is None or from_portions <= 0 or to_portions <= 0:
            raise ScalingDomainError("portion count must be positive")
        ingredient_class = self.classify(ingredient.name)
        law, note = _SCALING_LAWS[ingredient_class]
        if from_portions == to_portions:
            factor, note = 1.0, "Unchanged"
            quantity = ingredient.quantity
        else:
            factor = law(to_portions / from_portions)
            quantity = ingredient.quantity * factor
        return ScaledIngredient(
            name=ingredient.name,
            original_quantity=ingredient.quantity,
            scaled_quantity=quantity,
            unit=ingredient.unit,
            scaling_factor=factor,
            scaling_note=note,
            ingredient_class=ingredient_class,
        )

    def preview(self, name: str, quantity: float, unit: str,
                from_portions: float, to_portions: float) -> ScaledIngredient:
        """Scale a bare ingredient tuple (UI preview before a recipe edit is saved)."""
        return self.scale(Ingredient(name, quantity, unit), from_portions, to_portions)

    def scale_recipe(self, recipe: Recipe, target_portions: float) -> List[ScaledIngredient]:
        """Scale every ingredient of `recipe` from its declared baseline portions."""
        baseline = recipe.portions or 1
        return [self.scale(ing, baseline, target_portions) for ing in recipe.ingredients]
