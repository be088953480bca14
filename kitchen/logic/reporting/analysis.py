"""Quality metrics over a filled rotation grid.

Everything here is computed from a slot list plus recipe metadata; inputs are
never modified. Dessert slots hold a fixed dessert variation and are left out
of the repetition and seasonal metrics.
"""
from __future__ import annotations
import math
from collections import Counter, defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Set, Tuple

from kitchen.domain.Recipe import Recipe
from kitchen.domain.Rotation import RotationSlot, RotationTemplate
from kitchen.infra.Repository import KitchenRepository
from kitchen.logic.rotation.grid import RotationGrid, slot_sort_key
from kitchen.logic.weeks.week_mapper import current_season
from kitchen.utilities.config import ALLERGEN_CONCENTRATION_THRESHOLD, VARIETY_WINDOW_WEEKS
from kitchen.utilities.constants import SCORING_EXEMPT_COURSES

__all__ = ["RotationAnalysis", "AnalysisEngine", "analyze_slots", "fill_percentage", "percent"]


def percent(part: float, whole: float) -> int:
    """Percentage rounded half up; 0 for an empty whole."""
    if whole <= 0:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))


def fill_percentage(slots: Iterable[RotationSlot]) -> int:
    slots = list(slots)
    return percent(sum(1 for s in slots if s.is_filled), len(slots))


def _scored(slots: Iterable[RotationSlot]) -> List[RotationSlot]:
    return [s for s in slots if s.is_filled and s.key.course not in SCORING_EXEMPT_COURSES]


def trailing_weeks(week_nr: int, week_count: int, window: int) -> Set[int]:
    """Rotation weeks before `week_nr` inside the window, wrapping around the cycle."""
    return {((week_nr - 1 - back) % week_count) + 1 for back in range(1, max(window, 1))} - {week_nr}


class RotationAnalysis:
    def __init__(self, total_slots: int, filled_slots: int, fill_percentage: int, variety_score: int,
                 duplicates_per_week: Dict[int, int], recipes_used_multiple_times: List[dict],
                 category_distribution: Dict[str, int], allergen_coverage: Dict[str, int],
                 allergen_hotspots: Dict[int, List[str]], weekly_balance: List[dict],
                 seasonal_fit: int, season: str):
        self.total_slots = total_slots
        self.filled_slots = filled_slots
        self.empty_slots = total_slots - filled_slots
        self.fill_percentage = fill_percentage
        self.variety_score = variety_score
        self.duplicates_per_week = duplicates_per_week
        self.recipes_used_multiple_times = recipes_used_multiple_times
        self.category_distribution = category_distribution
        self.allergen_coverage = allergen_coverage
        self.allergen_hotspots = allergen_hotspots
        self.weekly_balance = weekly_balance
        self.seasonal_fit = seasonal_fit
        self.season = season

    def to_dict(self):
        return {
            "total_slots": self.total_slots,
            "filled_slots": self.filled_slots,
            "empty_slots": self.empty_slots,
            "fill_percentage": self.fill_percentage,
            "variety_score": self.variety_score,
            "duplicates_per_week": self.duplicates_per_week,
            "recipes_used_multiple_times": self.recipes_used_multiple_times,
            "category_distribution": self.category_distribution,
            "allergen_coverage": self.allergen_coverage,
            "allergen_hotspots": self.allergen_hotspots,
            "weekly_balance": self.weekly_balance,
            "seasonal_fit": self.seasonal_fit,
            "season": self.season,
        }


def repetition_counts(slots: Iterable[RotationSlot], week_count: int,
                      window: int = VARIETY_WINDOW_WEEKS) -> Tuple[int, Dict[int, int], Set[tuple]]:
    """Count repeated slots per rotation week, across all locations.

    Returns (repeats, duplicates per week, keys of repeated slots). A slot is a
    repeat if its recipe appeared earlier in the same week at any location, or
    at all in the trailing window; only same-week repeats count as week
    duplicates.
    """
    weeks: Dict[int, List[RotationSlot]] = defaultdict(list)
    for slot in sorted(_scored(slots), key=lambda s: slot_sort_key(s.key)):
        weeks[slot.key.week_nr].append(slot)
    week_recipes = {week: {s.recipe_id for s in members} for week, members in weeks.items()}

    repeats = 0
    duplicates = {w: 0 for w in range(1, week_count + 1)}
    repeated_keys: Set[tuple] = set()
    for week, members in weeks.items():
        earlier: Set[int] = set()
        for prev in trailing_weeks(week, week_count, window):
            earlier |= week_recipes.get(prev, set())
        seen: Set[int] = set()
        for slot in members:
            if slot.recipe_id in seen:
                duplicates[week] = duplicates.get(week, 0) + 1
                repeats += 1
                repeated_keys.add(slot.key)
            elif slot.recipe_id in earlier:
                repeats += 1
                repeated_keys.add(slot.key)
            seen.add(slot.recipe_id)
    return repeats, duplicates, repeated_keys


def analyze_slots(template: RotationTemplate, slots: Iterable[RotationSlot], recipes: Dict[int, Recipe],
                  today: Optional[date] = None, window: int = VARIETY_WINDOW_WEEKS,
                  allergen_threshold: float = ALLERGEN_CONCENTRATION_THRESHOLD) -> RotationAnalysis:
    """Score a resolved slot set (unfilled slots included) against recipe metadata."""
    slots = list(slots)
    season = current_season(today or date.today())
    filled = [s for s in slots if s.is_filled]
    scored = _scored(slots)

    repeats, duplicates, _ = repetition_counts(slots, template.week_count, window)
    variety_score = percent(len(scored) - repeats, len(scored))

    usage = Counter(s.recipe_id for s in scored)
    used_multiple = sorted(
        ({"recipe_id": rid,
          "recipe_name": recipes[rid].name if rid in recipes else f"Recipe #{rid}",
          "count": count}
         for rid, count in usage.items() if count > 1),
        key=lambda item: (-item["count"], item["recipe_id"]),
    )

    categories: Counter = Counter()
    allergens: Counter = Counter()
    week_allergens: Dict[int, Counter] = defaultdict(Counter)
    week_filled: Counter = Counter()
    for slot in filled:
        week_filled[slot.key.week_nr] += 1
        recipe = recipes.get(slot.recipe_id)
        if recipe is None:
            continue
        categories[recipe.category or "uncategorized"] += 1
        for code in recipe.allergens:
            allergens[code] += 1
            week_allergens[slot.key.week_nr][code] += 1

    hotspots: Dict[int, List[str]] = {}
    for week, counts in sorted(week_allergens.items()):
        over = sorted(code for code, n in counts.items() if n / week_filled[week] > allergen_threshold)
        if over:
            hotspots[week] = over

    week_totals: Counter = Counter(s.key.week_nr for s in slots)
    weekly_balance = [
        {"week_nr": w, "filled": week_filled[w], "total": week_totals[w]}
        for w in range(1, template.week_count + 1)
    ]

    seasonal = [recipes[s.recipe_id] for s in scored if s.recipe_id in recipes]
    seasonal_fit = percent(sum(1 for r in seasonal if r.is_in_season(season)), len(seasonal))

    return RotationAnalysis(
        total_slots=len(slots),
        filled_slots=len(filled),
        fill_percentage=fill_percentage(slots),
        variety_score=variety_score,
        duplicates_per_week=duplicates,
        recipes_used_multiple_times=used_multiple,
        category_distribution=dict(categories.most_common()),
        allergen_coverage=dict(allergens.most_common()),
        allergen_hotspots=hotspots,
        weekly_balance=weekly_balance,
        seasonal_fit=seasonal_fit,
        season=season,
    )


class AnalysisEngine:
    def __init__(self, repository: KitchenRepository):
        self.repository = repository
        self.grid = RotationGrid(repository)

    def recipe_index(self) -> Dict[int, Recipe]:
        return {r.id: r for r in self.repository.list_recipes()}

    def analyze(self, template_id: int, today: Optional[date] = None) -> RotationAnalysis:
        template = self.grid.template(template_id)
        return analyze_slots(template, self.grid.resolved_slots(template_id), self.recipe_index(), today)
