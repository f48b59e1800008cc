"""Named, ordered groups of display items."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Section(Generic[T]):
    """A header and the items listed under it.

    Items keep the order they were given in. Callers sort before grouping.
    """

    header: str
    items: tuple[T, ...] = ()

    def __post_init__(self):
        # Stored as a tuple whatever iterable was passed
        object.__setattr__(self, "items", tuple(self.items))

    def with_items(self, items) -> "Section[T]":
        """Copy of this section with a different item list."""
        return Section(header=self.header, items=tuple(items))
