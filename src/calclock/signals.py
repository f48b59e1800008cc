"""Single-writer value cells that readers can subscribe to."""

from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class Signal(Generic[T]):
    """
    Holds the latest value of something and tells subscribers when it changes.

    One component writes with set(); any number of readers check .value or
    subscribe() to callbacks. Everything runs on the event loop thread, so
    there is no locking.
    """

    def __init__(self, value: T):
        self._value = value
        self._subscribers: list[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Store a new value and notify subscribers."""
        self._value = value
        for callback in list(self._subscribers):
            callback(value)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Call `callback` with every future value. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def subscribe_first(
        self,
        callback: Callable[[T], None],
        predicate: Callable[[T], bool] = bool,
    ) -> None:
        """Call `callback` once, the first time a value satisfies `predicate`.

        Fires straight away if the current value already does.
        """
        if predicate(self._value):
            callback(self._value)
            return

        def once(value: T) -> None:
            if predicate(value):
                unsubscribe()
                callback(value)

        unsubscribe = self.subscribe(once)

    def __repr__(self) -> str:
        return f"Signal({self._value!r})"
