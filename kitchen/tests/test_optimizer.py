import unittest
from datetime import date

from kitchen.domain.errors import CycleRejected, StaleProposal, ValidationError
from kitchen.domain.Recipe import Recipe
from kitchen.domain.SubRecipeLink import SubRecipeLink
from kitchen.domain.SuggestedSwap import SuggestedSwap
from kitchen.events.Event_Bus import ROTATION_SWAP_APPLIED, EventBus
from kitchen.logic.optimization.optimizer import FocusFlags, OptimizationEngine
from kitchen.logic.reporting.analysis import AnalysisEngine
from kitchen.logic.rotation.grid import RotationGrid
from kitchen.tests.sample_kitchen import key, make_repository

WINTER = date(2025, 1, 15)


def swap(current, suggested, day_of_week=2, course="main1", location="city", week_nr=1, meal="lunch"):
    return SuggestedSwap(week_nr, day_of_week, meal, course, current, suggested, "test", location)


class TestPropose(unittest.TestCase):
    def setUp(self):
        self.repo, self.template = make_repository(week_count=1, locations=("city",))
        self.grid = RotationGrid(self.repo)
        self.engine = OptimizationEngine(self.repo)

    def test_repeated_recipe_gets_same_category_swap(self):
        self.grid.set_slot(key(day_of_week=1), 10)
        self.grid.set_slot(key(day_of_week=2), 10)
        before = self.repo.list_slots(self.template.id)

        proposal = self.engine.propose(self.template.id, FocusFlags(), today=WINTER)

        self.assertEqual(len(proposal.swaps), 1)
        s = proposal.swaps[0]
        self.assertEqual((s.day_of_week, s.current_recipe_id, s.suggested_recipe_id), (2, 10, 11))
        self.assertEqual(s.location, "city")
        self.assertEqual(s.suggested_recipe_name, "Chicken Curry")
        self.assertIn("1 swap(s) proposed", proposal.summary)
        # proposing never writes
        self.assertEqual(self.repo.list_slots(self.template.id), before)

    def test_dessert_is_never_swapped(self):
        self.grid.set_slot(key(day_of_week=1, course="dessert"), 40)
        self.grid.set_slot(key(day_of_week=2, course="dessert"), 40)
        proposal = self.engine.propose(self.template.id, FocusFlags(variety=True, seasonality=True, cost=True),
                                       today=WINTER)
        self.assertEqual(proposal.swaps, [])
        self.assertIn("No swaps proposed", proposal.summary)

    def test_seasonal_focus(self):
        self.grid.set_slot(key(course="main2"), 21)
        proposal = self.engine.propose(self.template.id, FocusFlags(variety=False, seasonality=True),
                                       today=WINTER)
        self.assertEqual([(s.current_recipe_id, s.suggested_recipe_id) for s in proposal.swaps], [(21, 20)])

    def test_cost_focus_prefers_faster_recipe(self):
        self.grid.set_slot(key(), 10)
        proposal = self.engine.propose(self.template.id, FocusFlags(variety=False, cost=True), today=WINTER)
        self.assertEqual([(s.current_recipe_id, s.suggested_recipe_id) for s in proposal.swaps], [(10, 12)])

    def test_swap_cap(self):
        for day in (1, 2, 3):
            self.grid.set_slot(key(day_of_week=day), 10)
        engine = OptimizationEngine(self.repo, max_swaps=1)
        self.assertEqual(len(engine.propose(self.template.id, today=WINTER).swaps), 1)

    def test_no_proposed_recipe_repeats_in_week(self):
        for day in (1, 2, 3, 4):
            self.grid.set_slot(key(day_of_week=day), 10)
        proposal = self.engine.propose(self.template.id, today=WINTER)
        suggested = [s.suggested_recipe_id for s in proposal.swaps]
        self.assertEqual(sorted(suggested), [11, 12])

    def test_cyclic_recipe_not_proposed(self):
        self.repo.add_recipe(Recipe(13, "Meat Pie", "meat", prep_time=5))
        self.repo.add_sub_recipe_link(SubRecipeLink(13, 50))
        self.repo.add_sub_recipe_link(SubRecipeLink(50, 13))
        self.grid.set_slot(key(), 10)
        proposal = self.engine.propose(self.template.id, FocusFlags(variety=False, cost=True), today=WINTER)
        self.assertNotIn(13, [s.suggested_recipe_id for s in proposal.swaps])

    def test_external_suggestions_are_filtered(self):
        self.grid.set_slot(key(day_of_week=1), 10)
        self.grid.set_slot(key(day_of_week=2), 10)
        self.grid.set_slot(key(day_of_week=3, course="dessert"), 40)
        suggestions = [
            swap(10, 12, location=None),          # valid, location resolved
            swap(10, 20, day_of_week=1),           # wrong category
            swap(40, 41, day_of_week=3, course="dessert"),
            swap(10, 999, day_of_week=1),          # unknown recipe
            swap(11, 12, day_of_week=1),           # stale: slot holds 10
            swap(10, 11, week_nr=5),               # outside the cycle
        ]
        proposal = self.engine.propose(self.template.id, suggestions=suggestions, today=WINTER)
        self.assertEqual(len(proposal.swaps), 1)
        accepted = proposal.swaps[0]
        self.assertEqual((accepted.day_of_week, accepted.suggested_recipe_id), (2, 12))
        self.assertEqual(accepted.location, "city")
        self.assertEqual(accepted.current_recipe_name, "Goulash")

    def test_cyclic_external_suggestion_dropped(self):
        self.repo.add_recipe(Recipe(13, "Meat Pie", "meat"))
        self.repo.add_sub_recipe_link(SubRecipeLink(13, 50))
        self.repo.add_sub_recipe_link(SubRecipeLink(50, 13))
        self.grid.set_slot(key(day_of_week=2), 10)
        proposal = self.engine.propose(self.template.id, suggestions=[swap(10, 13), swap(10, 11)], today=WINTER)
        self.assertEqual([s.suggested_recipe_id for s in proposal.swaps], [11])


class TestVarietyWindow(unittest.TestCase):
    def setUp(self):
        self.repo, self.template = make_repository(week_count=3, locations=("city",))
        self.grid = RotationGrid(self.repo)
        self.engine = OptimizationEngine(self.repo)
        self.analysis = AnalysisEngine(self.repo)

    def test_swap_does_not_push_repeat_into_next_week(self):
        self.repo.add_recipe(Recipe(13, "Schnitzel", "meat", prep_time=30))
        self.grid.set_slot(key(week_nr=2, day_of_week=1), 10)
        self.grid.set_slot(key(week_nr=2, day_of_week=2), 10)
        self.grid.set_slot(key(week_nr=3, day_of_week=1), 11)
        self.grid.set_slot(key(week_nr=3, day_of_week=2), 12)
        self.assertEqual(self.analysis.analyze(self.template.id, today=WINTER).variety_score, 75)

        proposal = self.engine.propose(self.template.id, today=WINTER)
        # 11 and 12 are served in week 3, whose window reaches back into week 2
        self.assertEqual([s.suggested_recipe_id for s in proposal.swaps], [13])
        self.engine.apply_many(self.template.id, proposal.swaps)
        self.assertEqual(self.analysis.analyze(self.template.id, today=WINTER).variety_score, 100)

    def test_no_swap_when_every_candidate_repeats(self):
        self.grid.set_slot(key(week_nr=2, day_of_week=1), 10)
        self.grid.set_slot(key(week_nr=2, day_of_week=2), 10)
        self.grid.set_slot(key(week_nr=3, day_of_week=1), 11)
        self.grid.set_slot(key(week_nr=3, day_of_week=2), 12)
        self.assertEqual(self.engine.propose(self.template.id, today=WINTER).swaps, [])


class TestApply(unittest.TestCase):
    def setUp(self):
        self.repo, self.template = make_repository(week_count=1)
        self.grid = RotationGrid(self.repo)
        self.bus = EventBus()
        self.engine = OptimizationEngine(self.repo, event_bus=self.bus)
        self.grid.set_slot(key(day_of_week=2), 10, portions=3)

    def test_apply_keeps_portions(self):
        slot = self.engine.apply(self.template.id, swap(10, 11))
        self.assertEqual(slot.recipe_id, 11)
        self.assertEqual(slot.portions, 3)
        self.assertEqual(self.grid.get_slot(key(day_of_week=2)).recipe_id, 11)

    def test_apply_twice_is_stale(self):
        self.engine.apply(self.template.id, swap(10, 11))
        with self.assertRaises(StaleProposal):
            self.engine.apply(self.template.id, swap(10, 11))
        self.assertEqual(self.grid.get_slot(key(day_of_week=2)).recipe_id, 11)

    def test_edit_between_propose_and_apply(self):
        pending = swap(10, 11)
        self.grid.set_slot(key(day_of_week=2), 12)
        with self.assertRaises(StaleProposal):
            self.engine.apply(self.template.id, pending)
        self.assertEqual(self.grid.get_slot(key(day_of_week=2)).recipe_id, 12)

    def test_cyclic_composition_rejected(self):
        self.repo.add_recipe(Recipe(13, "Meat Pie", "meat"))
        self.repo.add_sub_recipe_link(SubRecipeLink(13, 50))
        self.repo.add_sub_recipe_link(SubRecipeLink(50, 13))
        with self.assertRaises(CycleRejected):
            self.engine.apply(self.template.id, swap(10, 13))
        self.assertEqual(self.grid.get_slot(key(day_of_week=2)).recipe_id, 10)

    def test_invalid_input(self):
        with self.assertRaises(ValidationError):
            self.engine.apply(self.template.id, swap(10, 999))
        with self.assertRaises(ValidationError):
            self.engine.apply(self.template.id, swap(10, 11, week_nr=9))
        with self.assertRaises(ValidationError):
            self.engine.apply(self.template.id, swap(10, 11, location="airport"))

    def test_location_resolved_when_missing(self):
        self.grid.set_slot(key(day_of_week=3, location="sued"), 10)
        slot = self.engine.apply(self.template.id, swap(10, 12, day_of_week=3, location=None))
        self.assertEqual(slot.key.location, "sued")
        self.assertFalse(self.grid.get_slot(key(day_of_week=3, location="city")).is_filled)

    def test_apply_publishes_event(self):
        seen = []
        self.bus.subscribe(ROTATION_SWAP_APPLIED, lambda name, payload: seen.append(payload['slot'].recipe_id))
        self.engine.apply(self.template.id, swap(10, 11))
        self.assertEqual(seen, [11])

    def test_apply_many_reports_each_swap(self):
        result = self.engine.apply_many(self.template.id, [swap(10, 11), swap(10, 12)])
        self.assertEqual(len(result["applied"]), 1)
        self.assertEqual(result["applied"][0]["recipe_id"], 11)
        self.assertEqual(len(result["failed"]), 1)
        self.assertEqual(result["failed"][0]["error"], "StaleProposal")


if __name__ == '__main__':
    unittest.main()
