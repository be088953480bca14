import unittest
from datetime import date

from kitchen.domain.errors import NotFoundError, ValidationError
from kitchen.events.Event_Bus import ROTATION_SLOT_UPDATED, EventBus
from kitchen.infra.Memory_Repository import MemoryRepository
from kitchen.logic.rotation.grid import RotationGrid
from kitchen.logic.rotation.templates import (
    add_location, create_template, ensure_default_template, remove_location,
)
from kitchen.tests.sample_kitchen import key, make_repository


class TestSlotEdits(unittest.TestCase):
    def setUp(self):
        self.repo, self.template = make_repository()
        self.grid = RotationGrid(self.repo)

    def test_set_and_get(self):
        self.grid.set_slot(key(), 10, portions=3)
        slot = self.grid.get_slot(key())
        self.assertEqual(slot.recipe_id, 10)
        self.assertEqual(slot.portions, 3)
        self.assertTrue(slot.is_filled)

    def test_unwritten_slot_is_unfilled(self):
        slot = self.grid.get_slot(key(week_nr=2))
        self.assertFalse(slot.is_filled)
        self.assertEqual(slot.portions, 1)

    def test_invalid_coordinates_write_nothing(self):
        bad_keys = [
            key(week_nr=7),
            key(week_nr=0),
            key(day_of_week=7),
            key(meal="breakfast"),
            key(course="starter"),
            key(location="airport"),
        ]
        for bad in bad_keys:
            with self.assertRaises(ValidationError, msg=str(bad)):
                self.grid.set_slot(bad, 10)
        self.assertEqual(self.repo.list_slots(self.template.id), [])

    def test_meal_alias_is_normalized(self):
        slot = self.grid.set_slot(key(meal="mittag"), 10)
        self.assertEqual(slot.key.meal, "lunch")
        self.assertEqual(self.grid.get_slot(key()).recipe_id, 10)

    def test_rejects_bad_portions_and_unknown_recipe(self):
        with self.assertRaises(ValidationError):
            self.grid.set_slot(key(), 10, portions=0)
        with self.assertRaises(ValidationError):
            self.grid.set_slot(key(), 999)
        self.assertFalse(self.grid.get_slot(key()).is_filled)

    def test_unknown_template(self):
        with self.assertRaises(NotFoundError):
            self.grid.set_slot(key(template_id=99), 10)

    def test_rewrite_keeps_one_slot_per_key(self):
        self.grid.set_slot(key(), 10)
        self.grid.set_slot(key(), 11)
        slots = self.repo.list_slots(self.template.id)
        self.assertEqual(len(slots), 1)
        self.assertEqual(slots[0].recipe_id, 11)

    def test_update_is_published(self):
        bus = EventBus()
        seen = []
        bus.subscribe(ROTATION_SLOT_UPDATED, lambda name, payload: seen.append(payload))
        grid = RotationGrid(self.repo, event_bus=bus)
        grid.set_slot(key(), 10)
        grid.set_slot(key(), 11)
        self.assertEqual([p['previous_recipe_id'] for p in seen], [None, 10])

    def test_resolved_slots_cover_whole_grid(self):
        self.grid.set_slot(key(), 10)
        resolved = self.grid.resolved_slots(self.template.id)
        self.assertEqual(len(resolved), 6 * 7 * 2 * 8 * 2)
        self.assertEqual(len(resolved), self.grid.total_slot_count(self.template))
        self.assertEqual(sum(1 for s in resolved if s.is_filled), 1)


class TestClearing(unittest.TestCase):
    def setUp(self):
        self.repo, self.template = make_repository()
        self.grid = RotationGrid(self.repo)
        self.grid.set_slot(key(course="main1"), 10)
        self.grid.set_slot(key(course="main2"), 20)
        self.grid.set_slot(key(day_of_week=2), 11)
        self.grid.set_slot(key(week_nr=2), 12)

    def test_clear_by_scope(self):
        self.assertEqual(self.grid.clear(self.template.id, "day", week_nr=1, day_of_week=1), 2)
        self.assertEqual(self.grid.clear(self.template.id, "week", week_nr=1), 1)
        self.assertEqual(self.grid.clear(self.template.id, "all"), 1)
        self.assertEqual(self.repo.list_slots(self.template.id), [])

    def test_invalid_scope(self):
        with self.assertRaises(ValidationError):
            self.grid.clear(self.template.id, "month")
        with self.assertRaises(ValidationError):
            self.grid.clear(self.template.id, "week")


class TestRenderWeek(unittest.TestCase):
    def setUp(self):
        self.repo, self.template = make_repository()
        self.grid = RotationGrid(self.repo)
        self.grid.set_slot(key(day_of_week=1, course="main1"), 10, portions=2)
        self.grid.set_slot(key(day_of_week=0, meal="dinner", course="soup", location="sued"), 1)

    def test_first_calendar_week(self):
        entries = self.grid.render_week(self.template.id, 2025, 1)
        by_recipe = {e.recipe_id: e for e in entries}
        self.assertEqual(by_recipe[10].date, date(2024, 12, 30))
        self.assertEqual(by_recipe[10].portions, 2)
        self.assertEqual(by_recipe[1].date, date(2025, 1, 5))
        self.assertEqual(by_recipe[1].location, "sued")
        self.assertTrue(all(e.rotation_week_nr == 1 for e in entries))

    def test_cycle_repeats(self):
        entries = self.grid.render_week(self.template.id, 2025, 7)
        self.assertEqual(sorted(e.recipe_id for e in entries), [1, 10])
        self.assertIn(date(2025, 2, 10), [e.date for e in entries])
        self.assertEqual(self.grid.render_week(self.template.id, 2025, 2), [])

    def test_render_date(self):
        entries = self.grid.render_date(self.template.id, date(2025, 1, 5))
        self.assertEqual([e.recipe_id for e in entries], [1])

    def test_week_past_year_end_folds_as_next_year(self):
        # 2025 has 52 ISO weeks: its "week 53" is 2026-W01, rotation week 1
        self.grid.set_slot(key(week_nr=5), 11)
        entries = self.grid.render_week(self.template.id, 2025, 53)
        main = [(e.date, e.recipe_id, e.rotation_week_nr) for e in entries if e.course == "main1"]
        self.assertEqual(main, [(date(2025, 12, 29), 10, 1)])
        by_date = self.grid.render_date(self.template.id, date(2025, 12, 29))
        self.assertEqual([e.to_dict() for e in by_date], [e.to_dict() for e in entries if e.date == date(2025, 12, 29)])
        self.assertEqual([e.to_dict() for e in entries],
                         [e.to_dict() for e in self.grid.render_week(self.template.id, 2026, 1)])


class TestTemplates(unittest.TestCase):
    def test_default_template_created_once(self):
        repo = MemoryRepository()
        first = ensure_default_template(repo)
        self.assertEqual(first.week_count, 6)
        self.assertEqual(first.locations, ["city", "sued"])
        self.assertEqual(ensure_default_template(repo).id, first.id)
        self.assertEqual(len(repo.list_templates()), 1)

    def test_create_template_validation(self):
        repo = MemoryRepository()
        with self.assertRaises(ValidationError):
            create_template(repo, "Broken", 0, ["city"])
        with self.assertRaises(ValidationError):
            create_template(repo, "Broken", 4, [" "])

    def test_locations(self):
        repo, template = make_repository()
        grid = RotationGrid(repo)
        self.assertEqual(add_location(repo, template.id, "airport").locations, ["airport", "city", "sued"])
        grid.set_slot(key(location="airport"), 10)
        with self.assertRaises(ValidationError):
            remove_location(repo, template.id, "airport")
        grid.clear_slot(key(location="airport"))
        self.assertEqual(remove_location(repo, template.id, "airport").locations, ["city", "sued"])
        remove_location(repo, template.id, "sued")
        with self.assertRaises(ValidationError):
            remove_location(repo, template.id, "city")


if __name__ == '__main__':
    unittest.main()
