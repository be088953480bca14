import json
import tempfile
import unittest
from pathlib import Path

from kitchen.domain.Recipe import Recipe
from kitchen.domain.Rotation import RotationSlot, RotationTemplate
from kitchen.domain.SubRecipeLink import SubRecipeLink
from kitchen.infra.Json_Repository import JsonRepository
from kitchen.logic.composition.graph import CompositionGraph
from kitchen.tests.sample_kitchen import key, sample_recipes


class TestJsonRepository(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._tmp.name)
        self.repo = JsonRepository(self.data_dir)

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_files_read_as_empty(self):
        self.assertEqual(self.repo.list_recipes(), [])
        self.assertEqual(self.repo.list_templates(), [])
        self.assertIsNone(self.repo.get_slot(key()))
        self.assertEqual(self.repo.get_sub_recipe_links(1), [])

    def test_invalid_json_is_logged(self):
        (self.data_dir / "recipes.json").write_text("{not json", encoding="utf-8")
        with self.assertLogs("kitchen.infra.Json_Repository", level="ERROR"):
            self.assertEqual(self.repo.list_recipes(), [])

    def test_round_trip_through_files(self):
        for recipe in sample_recipes():
            self.repo.save_recipe(recipe)
        template = self.repo.save_template(RotationTemplate(0, "Main", 6, ["sued", "city"]))
        self.repo.put_slot(RotationSlot(key(template_id=template.id), 10, 4))
        self.repo.add_sub_recipe_link(SubRecipeLink(10, 50, 0.5))

        reopened = JsonRepository(self.data_dir)
        self.assertEqual(reopened.get_recipe(10).name, "Goulash")
        self.assertEqual(reopened.get_template(template.id).locations, ["city", "sued"])
        self.assertEqual(reopened.get_slot(key(template_id=template.id)).portions, 4)
        self.assertEqual(reopened.get_sub_recipe_links(10)[0].portion_multiplier, 0.5)

        stored = json.loads((self.data_dir / "rotation.json").read_text(encoding="utf-8"))
        self.assertEqual(len(stored["slots"]), 1)

    def test_put_slot_replaces_same_key(self):
        self.repo.put_slot(RotationSlot(key(), 10))
        self.repo.put_slot(RotationSlot(key(), 11))
        self.assertEqual([s.recipe_id for s in self.repo.list_slots(1)], [11])
        self.assertTrue(self.repo.delete_slot(key()))
        self.assertFalse(self.repo.delete_slot(key()))

    def test_compare_and_set(self):
        self.repo.put_slot(RotationSlot(key(), 10, 3))
        self.assertIsNone(self.repo.replace_recipe_if(key(), 11, 12))
        updated = self.repo.replace_recipe_if(key(), 10, 12)
        self.assertEqual((updated.recipe_id, updated.portions), (12, 3))
        self.assertEqual(self.repo.get_slot(key()).recipe_id, 12)

    def test_cycle_check_against_stored_links(self):
        self.repo.save_recipe(Recipe(1, "Stock", "sauce"))
        self.repo.save_recipe(Recipe(2, "Sauce", "sauce"))
        graph = CompositionGraph(self.repo)
        graph.link(2, 1)
        self.assertTrue(graph.would_create_cycle(1, 2))


if __name__ == '__main__':
    unittest.main()
