"""Search filters a source exposes to the host's filter sheet."""

from typing import Any, List, Optional, Sequence, Tuple, Type, TypeVar


F = TypeVar("F", bound="Filter")


class Filter:
    """Base filter: a display name plus a mutable state set by the host."""

    def __init__(self, name: str, state: Any = None):
        self.name = name
        self.state = state

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, state={self.state!r})"


class Header(Filter):
    """Static text shown in the filter sheet."""

    def __init__(self, name: str):
        super().__init__(name, 0)


class Separator(Filter):
    """Visual divider between filters."""

    def __init__(self, name: str = ""):
        super().__init__(name, 0)


class CheckBox(Filter):
    """Boolean toggle."""

    def __init__(self, name: str, state: bool = False):
        super().__init__(name, state)


class Select(Filter):
    """Single choice among values; state is the selected index."""

    def __init__(self, name: str, values: Sequence[str], state: int = 0):
        super().__init__(name, state)
        self.values = list(values)


class UriPartFilter(Select):
    """Select whose options map to URL fragments.

    Args:
        name: Display name
        pairs: (label, uri_part) tuples in display order
    """

    def __init__(self, name: str, pairs: Sequence[Tuple[str, Optional[str]]], state: int = 0):
        self.pairs = list(pairs)
        super().__init__(name, [label for label, _ in self.pairs], state)

    def to_uri_part(self) -> Optional[str]:
        return self.pairs[self.state][1]


class FilterList(list):
    """Ordered list of filters with typed lookup."""

    def __init__(self, *filters: Filter):
        super().__init__(filters)

    def first_of(self, filter_type: Type[F]) -> Optional[F]:
        """Return the first filter of the given type, or None."""
        for item in self:
            if isinstance(item, filter_type):
                return item
        return None

    def of_type(self, filter_type: Type[F]) -> List[F]:
        return [item for item in self if isinstance(item, filter_type)]
