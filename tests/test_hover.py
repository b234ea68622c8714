import unittest

from treerings.hover import HoverBridge


class TestHoverBridge(unittest.TestCase):
    def setUp(self):
        self.events = []
        self.bridge = HoverBridge(self.events.append)

    def test_enter_and_leave_are_delivered_once(self):
        self.bridge.enter(3)
        self.bridge.leave()
        self.assertEqual(self.events, [3, None])

    def test_without_listener_events_are_dropped(self):
        bridge = HoverBridge()
        bridge.enter(1)
        bridge.leave()
        bridge.set_listener(self.events.append)
        self.assertEqual(self.events, [])

    def test_replaced_listener_no_longer_receives(self):
        other = []
        self.bridge.enter(1)
        self.bridge.set_listener(other.append)
        self.bridge.leave()
        self.bridge.enter(2)

        self.assertEqual(self.events, [1])
        self.assertEqual(other, [None, 2])

    def test_listener_read_at_dispatch_time(self):
        # a listener swapping itself out must not receive the next event
        received = []

        def first(ref):
            received.append(("first", ref))
            self.bridge.set_listener(lambda r: received.append(("second", r)))

        self.bridge.set_listener(first)
        self.bridge.enter(5)
        self.bridge.enter(6)
        self.assertEqual(received, [("first", 5), ("second", 6)])
