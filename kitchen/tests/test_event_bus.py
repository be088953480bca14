import unittest

from kitchen.events import web_observers
from kitchen.events.Event_Bus import GLOBAL_EVENT_BUS, ROTATION_SLOT_UPDATED, EventBus
from kitchen.events.event_helpers import publish_slot_updated
from kitchen.domain.Rotation import RotationSlot
from kitchen.tests.sample_kitchen import key


class TestEventBus(unittest.TestCase):
    def test_subscribe_publish_unsubscribe(self):
        bus = EventBus()
        seen = []

        def cb(name, payload):
            seen.append((name, payload))

        bus.subscribe("x", cb)
        bus.subscribe("x", cb)  # duplicates ignored
        bus.publish("x", 1)
        bus.unsubscribe("x", cb)
        bus.publish("x", 2)
        self.assertEqual(seen, [("x", 1)])

    def test_failing_subscriber_is_logged(self):
        bus = EventBus()
        seen = []

        def broken(name, payload):
            raise RuntimeError("boom")

        bus.subscribe("x", broken)
        bus.subscribe("x", lambda name, payload: seen.append(payload))
        with self.assertLogs("kitchen.events.Event_Bus", level="ERROR"):
            bus.publish("x", 7)
        self.assertEqual(seen, [7])


class TestActivityFeed(unittest.TestCase):
    def test_slot_updates_are_recorded(self):
        web_observers.start()
        cursor = web_observers.get_events()['next_cursor']
        publish_slot_updated(RotationSlot(key(), 10), None)
        feed = web_observers.get_events(since=cursor)
        self.assertEqual(len(feed['events']), 1)
        evt = feed['events'][0]
        self.assertEqual(evt['type'], ROTATION_SLOT_UPDATED)
        self.assertEqual(evt['slot']['recipe_id'], 10)
        self.assertGreater(feed['next_cursor'], cursor)

    def test_start_is_idempotent(self):
        web_observers.start()
        web_observers.start()
        cursor = web_observers.get_events()['next_cursor']
        GLOBAL_EVENT_BUS.publish(ROTATION_SLOT_UPDATED, {'slot': RotationSlot(key(), 11)})
        self.assertEqual(len(web_observers.get_events(since=cursor)['events']), 1)


if __name__ == '__main__':
    unittest.main()
