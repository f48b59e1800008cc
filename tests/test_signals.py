"""Tests for Signal value cells."""

from calclock.signals import Signal


class TestSignal:
    def test_holds_initial_value(self):
        assert Signal(False).value is False

    def test_set_notifies_subscribers(self):
        signal = Signal(0)
        seen = []
        signal.subscribe(seen.append)

        signal.set(1)
        signal.set(2)

        assert seen == [1, 2]
        assert signal.value == 2

    def test_unsubscribe(self):
        signal = Signal(0)
        seen = []
        unsubscribe = signal.subscribe(seen.append)

        signal.set(1)
        unsubscribe()
        signal.set(2)

        assert seen == [1]

    def test_subscribe_first_fires_once(self):
        signal = Signal(None)
        seen = []
        signal.subscribe_first(seen.append, lambda v: v is not None)

        signal.set(None)
        signal.set((1.0, 2.0))
        signal.set((3.0, 4.0))

        assert seen == [(1.0, 2.0)]

    def test_subscribe_first_fires_immediately_if_already_satisfied(self):
        signal = Signal(True)
        seen = []
        signal.subscribe_first(seen.append)
        signal.set(True)
        assert seen == [True]
