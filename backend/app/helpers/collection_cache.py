"""Ordered in-memory collection keyed by ``id``, used for optimistic cache edits."""

from typing import Callable, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


class CollectionCache(Generic[T]):
    """
    Ordered list of records with insert/update/remove by id.

    Usage:
      plants = CollectionCache[Plant]()
      plants.replace(fetched)
      plants.insert(created)        # prepended, newest first
      plants.update(changed)        # replaced in place, no-op when unknown
      plants.remove(plant_id)
    """

    def __init__(self, key: Callable[[T], str] = lambda item: item.id):  # type: ignore[attr-defined]
        self._key = key
        self._items: List[T] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    def items(self) -> List[T]:
        return list(self._items)

    def get(self, item_id: str) -> Optional[T]:
        for item in self._items:
            if self._key(item) == item_id:
                return item
        return None

    def replace(self, items: Iterable[T]) -> None:
        self._items = list(items)

    def insert(self, item: T) -> None:
        self._items = [item] + [i for i in self._items if self._key(i) != self._key(item)]

    def update(self, item: T) -> bool:
        item_id = self._key(item)
        found = False
        updated: List[T] = []
        for existing in self._items:
            if self._key(existing) == item_id:
                updated.append(item)
                found = True
            else:
                updated.append(existing)
        self._items = updated
        return found

    def remove(self, item_id: str) -> bool:
        before = len(self._items)
        self._items = [i for i in self._items if self._key(i) != item_id]
        return len(self._items) != before

    def remove_where(self, predicate: Callable[[T], bool]) -> int:
        before = len(self._items)
        self._items = [i for i in self._items if not predicate(i)]
        return before - len(self._items)

    def clear(self) -> None:
        self._items = []
