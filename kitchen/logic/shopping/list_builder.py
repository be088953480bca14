"""Weekly shopping list built from the rendered rotation.

Provides build_shopping_list(repository, template_id, year, iso_week, guest_counts=None).
Each menu entry's recipe is flattened through its sub-recipes, scaled from the
recipe baseline to the number of guests times the slot portions, and summed
per (ingredient, unit).
"""
from collections import defaultdict
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from kitchen.domain.Ingredient import Ingredient
from kitchen.infra.Repository import KitchenRepository
from kitchen.logic.composition.graph import CompositionGraph
from kitchen.logic.rotation.grid import RotationGrid
from kitchen.logic.scaling.engine import ScalingEngine
from kitchen.logic.weeks.week_mapper import normalize_iso_week, rotation_week_nr
from kitchen.utilities.config import DEFAULT_PAX, FALLBACK_PAX
from kitchen.utilities.constants import DATE_FORMAT, QUANTITY_DECIMALS

GuestCounts = Dict[Tuple[date, str, str], int]


def _normalize(name: str) -> str:
    return (name or '').strip().lower()


def guests_for(d: date, meal: str, location: str, guest_counts: Optional[GuestCounts] = None) -> int:
    """Recorded guest count for a service, else the location default."""
    if guest_counts and (d, meal, location) in guest_counts:
        return guest_counts[(d, meal, location)]
    return DEFAULT_PAX.get(location, FALLBACK_PAX)


def build_shopping_list(repository: KitchenRepository, template_id: int, year: int, iso_week: int,
                        guest_counts: Optional[GuestCounts] = None) -> Dict[str, Any]:
    """Aggregate scaled ingredient needs for one calendar week.

    Returns:
        { year, week, rotation_week_nr, items, count } where each item is
        { name, unit, quantity, daily_breakdown: {date: quantity} }, sorted by name.
    """
    grid = RotationGrid(repository)
    graph = CompositionGraph(repository)
    scaler = ScalingEngine()
    entries = grid.render_week(template_id, year, iso_week)

    totals: Dict[Tuple[str, str], Dict[str, Any]] = {}
    for entry in entries:
        recipe = repository.get_recipe(entry.recipe_id)
        if recipe is None:
            continue
        pax = guests_for(entry.date, entry.meal, entry.location, guest_counts)
        target = pax * entry.portions
        if target <= 0:
            # no guests booked for this service
            continue
        baseline = recipe.portions or 1
        for resolved in graph.resolve_ingredients(recipe.id):
            scaled = scaler.scale(Ingredient(resolved.name, resolved.quantity, resolved.unit), baseline, target)
            key = (_normalize(resolved.name), resolved.unit or '')
            item = totals.get(key)
            if item is None:
                item = totals[key] = {
                    "name": resolved.name.strip(),
                    "unit": resolved.unit or '',
                    "quantity": 0.0,
                    "daily_breakdown": defaultdict(float),
                }
            item["quantity"] += scaled.scaled_quantity
            item["daily_breakdown"][entry.date.strftime(DATE_FORMAT)] += scaled.scaled_quantity

    items: List[Dict[str, Any]] = []
    for key in sorted(totals):
        item = totals[key]
        item["quantity"] = round(item["quantity"], QUANTITY_DECIMALS)
        item["daily_breakdown"] = {d: round(q, QUANTITY_DECIMALS) for d, q in sorted(item["daily_breakdown"].items())}
        items.append(item)

    year, iso_week = normalize_iso_week(year, iso_week)
    week_nr = rotation_week_nr(iso_week, grid.template(template_id).week_count)
    return {
        "year": year,
        "week": iso_week,
        "rotation_week_nr": week_nr,
        "items": items,
        "count": len(items),
    }
