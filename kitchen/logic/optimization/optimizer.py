"""Swap proposals and the swap application protocol.

`propose` only reads the grid. It either runs the deterministic scorer or,
when an external suggestion list is passed in, validates that list against
the live grid. `apply` re-checks every swap against live state and writes it
with a compare-and-set on the slot's recipe id.
"""
from __future__ import annotations
import logging
from collections import Counter, defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Set

from kitchen.domain.errors import CycleRejected, RotationError, StaleProposal, ValidationError
from kitchen.domain.Recipe import Recipe
from kitchen.domain.Rotation import RotationSlot, RotationTemplate, SlotKey
from kitchen.domain.SuggestedSwap import SuggestedSwap
from kitchen.events.Event_Bus import EventBus
from kitchen.events.event_helpers import publish_swap_applied
from kitchen.infra.Repository import KitchenRepository
from kitchen.logic.composition.graph import CompositionGraph
from kitchen.logic.reporting.analysis import AnalysisEngine, RotationAnalysis, analyze_slots, repetition_counts, trailing_weeks
from kitchen.logic.rotation.grid import RotationGrid, slot_sort_key
from kitchen.logic.weeks.week_mapper import current_season
from kitchen.utilities.config import MAX_SWAPS, VARIETY_WINDOW_WEEKS
from kitchen.utilities.constants import SCORING_EXEMPT_COURSES

logger = logging.getLogger(__name__)

__all__ = ["FocusFlags", "OptimizationProposal", "OptimizationEngine"]


class FocusFlags:
    def __init__(self, variety: bool = True, seasonality: bool = False, cost: bool = False):
        self.variety = variety
        self.seasonality = seasonality
        self.cost = cost

    def __repr__(self) -> str:
        return f"FocusFlags(variety={self.variety}, seasonality={self.seasonality}, cost={self.cost})"


class OptimizationProposal:
    def __init__(self, swaps: List[SuggestedSwap], summary: str, analysis: RotationAnalysis):
        self.swaps = swaps
        self.summary = summary
        self.analysis = analysis

    def to_dict(self):
        return {
            "swaps": [s.to_dict() for s in self.swaps],
            "summary": self.summary,
            "analysis": self.analysis.to_dict(),
        }


class _Plan:
    """Working state of one proposal run: usage counts follow the swaps planned so far."""

    def __init__(self, slots: List[RotationSlot]):
        self.week_usage: Dict[int, Counter] = defaultdict(Counter)
        self.usage: Counter = Counter()
        for slot in slots:
            if slot.is_filled and slot.key.course not in SCORING_EXEMPT_COURSES:
                self.week_usage[slot.key.week_nr][slot.recipe_id] += 1
                self.usage[slot.recipe_id] += 1
        self.targeted: set = set()
        self.swaps: List[SuggestedSwap] = []
        self.kinds: Counter = Counter()

    def record(self, key: SlotKey, swap: SuggestedSwap, kind: str):
        week = self.week_usage[key.week_nr]
        if swap.current_recipe_id is not None:
            week[swap.current_recipe_id] -= 1
            self.usage[swap.current_recipe_id] -= 1
        week[swap.suggested_recipe_id] += 1
        self.usage[swap.suggested_recipe_id] += 1
        self.targeted.add(key)
        self.swaps.append(swap)
        self.kinds[kind] += 1


class OptimizationEngine:
    def __init__(self, repository: KitchenRepository, event_bus: Optional[EventBus] = None,
                 max_swaps: int = MAX_SWAPS, window: int = VARIETY_WINDOW_WEEKS):
        self.repository = repository
        self.grid = RotationGrid(repository, event_bus)
        self.graph = CompositionGraph(repository, event_bus)
        self.analysis = AnalysisEngine(repository)
        self.max_swaps = max_swaps
        self.window = window
        self._event_bus = event_bus

    # --- proposal ---
    def propose(self, template_id: int, focus: Optional[FocusFlags] = None,
                suggestions: Optional[Iterable[SuggestedSwap]] = None,
                today: Optional[date] = None) -> OptimizationProposal:
        focus = focus or FocusFlags()
        today = today or date.today()
        template = self.grid.template(template_id)
        slots = self.grid.resolved_slots(template_id)
        recipes = self.analysis.recipe_index()
        analysis = analyze_slots(template, slots, recipes, today, self.window)

        plan = _Plan(slots)
        if suggestions is not None:
            self._validate_suggestions(template, slots, recipes, list(suggestions), plan)
        else:
            season = current_season(today)
            if focus.variety:
                self._propose_variety(template, slots, recipes, focus, season, plan)
            if focus.seasonality:
                self._propose_seasonal(template, slots, recipes, focus, season, plan)
            if focus.cost:
                self._propose_cost(template, slots, recipes, focus, season, plan)

        summary = self._summary(plan, analysis, external=suggestions is not None)
        logger.info("Proposal for template %s: %s", template_id, summary)
        return OptimizationProposal(plan.swaps, summary, analysis)

    def _full(self, plan: _Plan) -> bool:
        return len(plan.swaps) >= self.max_swaps

    def _window_weeks(self, template: RotationTemplate, week_nr: int) -> Set[int]:
        """Weeks a recipe placed in `week_nr` would repeat against, looking back and ahead."""
        weeks = {week_nr} | trailing_weeks(week_nr, template.week_count, self.window)
        weeks |= {w for w in range(1, template.week_count + 1)
                  if week_nr in trailing_weeks(w, template.week_count, self.window)}
        return weeks

    def _pick(self, template: RotationTemplate, key: SlotKey, current: Recipe, recipes: Dict[int, Recipe],
              focus: FocusFlags, season: str, plan: _Plan, require_season: bool = False,
              faster_than: Optional[int] = None) -> Optional[Recipe]:
        """Best same-category replacement that does not repeat inside the variety window."""
        blocked: Set[int] = set()
        for week in self._window_weeks(template, key.week_nr):
            blocked |= set(+plan.week_usage[week])
        candidates = []
        for recipe in recipes.values():
            if recipe.id == current.id or recipe.category != current.category or recipe.id in blocked:
                continue
            if require_season and not recipe.is_in_season(season):
                continue
            if faster_than is not None and not recipe.prep_time < faster_than:
                continue
            if self.graph.has_cyclic_composition(recipe.id):
                continue
            candidates.append(recipe)

        def rank(r: Recipe) -> tuple:
            return (
                0 if not focus.seasonality or r.is_in_season(season) else 1,
                plan.usage[r.id],
                r.prep_time if focus.cost else 0,
                r.id,
            )

        return min(candidates, key=rank) if candidates else None

    def _swap(self, key: SlotKey, current: Recipe, new: Recipe, reason: str) -> SuggestedSwap:
        return SuggestedSwap(
            week_nr=key.week_nr, day_of_week=key.day_of_week, meal=key.meal, course=key.course,
            current_recipe_id=current.id, suggested_recipe_id=new.id, reason=reason,
            location=key.location, current_recipe_name=current.name, suggested_recipe_name=new.name,
        )

    def _candidates(self, slots: List[RotationSlot], recipes: Dict[int, Recipe], plan: _Plan):
        for slot in sorted(slots, key=lambda s: slot_sort_key(s.key)):
            if (not slot.is_filled or slot.key.course in SCORING_EXEMPT_COURSES
                    or slot.key in plan.targeted or slot.recipe_id not in recipes):
                continue
            yield slot, recipes[slot.recipe_id]

    def _propose_variety(self, template, slots, recipes, focus, season, plan):
        _repeats, _dupes, repeated = repetition_counts(slots, template.week_count, self.window)
        for slot, current in self._candidates(slots, recipes, plan):
            if self._full(plan):
                return
            if slot.key not in repeated:
                continue
            new = self._pick(template, slot.key, current, recipes, focus, season, plan)
            if new is None:
                continue
            reason = f"'{current.name}' repeats within {self.window} week(s); '{new.name}' is used less often"
            plan.record(slot.key, self._swap(slot.key, current, new, reason), "variety")

    def _propose_seasonal(self, template, slots, recipes, focus, season, plan):
        for slot, current in self._candidates(slots, recipes, plan):
            if self._full(plan):
                return
            if current.is_in_season(season):
                continue
            new = self._pick(template, slot.key, current, recipes, focus, season, plan, require_season=True)
            if new is None:
                continue
            reason = f"'{current.name}' is a {current.season} dish; '{new.name}' fits {season}"
            plan.record(slot.key, self._swap(slot.key, current, new, reason), "season")

    def _propose_cost(self, template, slots, recipes, focus, season, plan):
        for slot, current in self._candidates(slots, recipes, plan):
            if self._full(plan):
                return
            if not current.prep_time:
                continue
            new = self._pick(template, slot.key, current, recipes, focus, season, plan,
                             require_season=focus.seasonality, faster_than=current.prep_time)
            if new is None:
                continue
            reason = f"'{new.name}' takes {new.prep_time} min instead of {current.prep_time} min"
            plan.record(slot.key, self._swap(slot.key, current, new, reason), "cost")

    def _validate_suggestions(self, template: RotationTemplate, slots: List[RotationSlot],
                              recipes: Dict[int, Recipe], suggestions: List[SuggestedSwap], plan: _Plan):
        live = {s.key: s.recipe_id for s in slots}
        for swap in suggestions:
            if self._full(plan):
                break
            try:
                keys = self._candidate_keys(template, swap)
            except ValidationError as e:
                logger.info("Dropping suggestion %s: %s", swap, e)
                continue
            target = next((k for k in keys if live.get(k) == swap.current_recipe_id and k not in plan.targeted), None)
            suggested = recipes.get(swap.suggested_recipe_id)
            current = recipes.get(swap.current_recipe_id) if swap.current_recipe_id is not None else None
            if target is None or suggested is None or suggested.id == swap.current_recipe_id:
                logger.info("Dropping suggestion %s: stale target or unknown recipe", swap)
                continue
            if target.course in SCORING_EXEMPT_COURSES:
                logger.info("Dropping suggestion %s: %s slots are fixed", swap, target.course)
                continue
            if current is not None and current.category != suggested.category:
                logger.info("Dropping suggestion %s: category %s != %s", swap, suggested.category, current.category)
                continue
            if self.graph.has_cyclic_composition(suggested.id):
                logger.info("Dropping suggestion %s: recipe %s has a cyclic composition", swap, suggested.id)
                continue
            accepted = SuggestedSwap(
                week_nr=target.week_nr, day_of_week=target.day_of_week, meal=target.meal,
                course=target.course, current_recipe_id=swap.current_recipe_id,
                suggested_recipe_id=suggested.id, reason=swap.reason, location=target.location,
                current_recipe_name=current.name if current else None,
                suggested_recipe_name=suggested.name,
            )
            plan.record(target, accepted, "external")

    def _summary(self, plan: _Plan, analysis: RotationAnalysis, external: bool) -> str:
        scores = (f"Variety {analysis.variety_score}/100, seasonal fit {analysis.seasonal_fit}/100, "
                  f"{analysis.fill_percentage}% of slots filled.")
        if not plan.swaps:
            lead = ("None of the suggested swaps are valid against the current rotation."
                    if external else "No swaps proposed; the rotation already meets the selected focus.")
            return f"{lead} {scores}"
        kinds = ", ".join(f"{kind}: {n}" for kind, n in sorted(plan.kinds.items()))
        return f"{len(plan.swaps)} swap(s) proposed ({kinds}). {scores}"

    # --- application ---
    def _candidate_keys(self, template: RotationTemplate, swap: SuggestedSwap) -> List[SlotKey]:
        locations = [swap.location] if swap.location else template.locations
        return [self.grid.make_key(template.id, swap.week_nr, swap.day_of_week, swap.meal, swap.course, loc)
                for loc in locations]

    def apply(self, template_id: int, swap: SuggestedSwap) -> RotationSlot:
        """Apply one swap against live grid state; portions are left unchanged."""
        template = self.grid.template(template_id)
        keys = self._candidate_keys(template, swap)
        if swap.suggested_recipe_id is None or self.repository.get_recipe(swap.suggested_recipe_id) is None:
            raise ValidationError(f"Suggested recipe {swap.suggested_recipe_id} does not exist")

        target = None
        for key in keys:
            slot = self.repository.get_slot(key)
            if (slot.recipe_id if slot else None) == swap.current_recipe_id:
                target = key
                break
        if target is None:
            raise StaleProposal(f"No slot at {swap.target()} still holds recipe {swap.current_recipe_id}")

        if self.graph.has_cyclic_composition(swap.suggested_recipe_id):
            raise CycleRejected(swap.suggested_recipe_id, swap.suggested_recipe_id,
                                f"Recipe {swap.suggested_recipe_id} has a cyclic sub-recipe composition")

        updated = self.repository.replace_recipe_if(target, swap.current_recipe_id, swap.suggested_recipe_id)
        if updated is None:
            raise StaleProposal(f"Slot {tuple(target)} changed while the swap was being applied")
        logger.info("Applied swap %s", swap)
        publish_swap_applied(swap, updated, bus=self._event_bus)
        return updated

    def apply_many(self, template_id: int, swaps: Iterable[SuggestedSwap]) -> dict:
        """Apply swaps one at a time; each is re-validated and may fail on its own."""
        applied, failed = [], []
        for swap in swaps:
            try:
                applied.append(self.apply(template_id, swap).to_dict())
            except RotationError as e:
                logger.warning("Swap %s failed: %s", swap, e)
                failed.append({"swap": swap.to_dict(), "error": type(e).__name__, "detail": str(e)})
        return {"applied": applied, "failed": failed}
