from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, List


class InMemoryQueryable:
    """A list of objects exposing the :class:`~rulefilter.core.ports.Queryable` surface.

    Works with :class:`~rulefilter.core.strategy.InMemoryStrategy`, whose native
    filters are plain predicates.
    """

    def __init__(self, objects: Iterable[Any] = ()) -> None:
        self._objects: List[Any] = list(objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._objects)

    def add(self, obj: Any) -> None:
        self._objects.append(obj)

    def find(self, native_filter: Callable[[Any], bool]) -> List[Any]:
        if not callable(native_filter):
            raise TypeError(
                f"{type(self).__name__} filters with predicates, got {type(native_filter).__name__}"
            )
        return [obj for obj in self._objects if native_filter(obj)]

    def contains(self, native_filter: Callable[[Any], bool], obj: Any) -> bool:
        return any(o is obj or o == obj for o in self._objects) and bool(native_filter(obj))


__all__ = ["InMemoryQueryable"]
