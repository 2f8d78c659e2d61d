from __future__ import annotations

from typing import Generic, Iterator, TypeVar


T = TypeVar("T")


class Pool(Generic[T]):
    """
    Arena of index-addressed slots.

    Entities keep their slot index in ``pool_index`` and an ``alive`` flag.
    Destroying an entity only flips the flag; the slot is released by
    ``reap()``, so snapshots taken earlier in a tick stay valid.
    Freed slots are reused lowest-first, so iteration follows slot order,
    not insertion order: an entity added after a removal can come before
    older ones. The order is still deterministic for a given history.
    """

    def __init__(self) -> None:
        self._slots: list[T | None] = []
        self._free: list[int] = []

    def add(self, entity: T) -> int:
        if self._free:
            self._free.sort()
            index = self._free.pop(0)
            self._slots[index] = entity
        else:
            index = len(self._slots)
            self._slots.append(entity)
        entity.pool_index = index
        return index

    def get(self, index: int) -> T | None:
        if index < 0 or index >= len(self._slots):
            return None
        return self._slots[index]

    def remove(self, entity: T) -> bool:
        index = getattr(entity, "pool_index", -1)
        if self.get(index) is not entity:
            return False
        entity.alive = False
        self._release(index)
        return True

    def snapshot(self) -> list[T]:
        """Live entities at call time, in slot order."""
        return [e for e in self._slots if e is not None and e.alive]

    def reap(self) -> list[T]:
        """Release every slot whose entity is no longer alive."""
        dead: list[T] = []
        for index, entity in enumerate(self._slots):
            if entity is not None and not entity.alive:
                dead.append(entity)
                self._release(index)
        return dead

    def clear(self) -> None:
        for entity in self._slots:
            if entity is not None:
                entity.alive = False
                entity.pool_index = -1
        self._slots.clear()
        self._free.clear()

    def _release(self, index: int) -> None:
        entity = self._slots[index]
        if entity is not None:
            entity.pool_index = -1
        self._slots[index] = None
        self._free.append(index)

    def __iter__(self) -> Iterator[T]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return sum(1 for e in self._slots if e is not None and e.alive)

    def __bool__(self) -> bool:
        return len(self) > 0

    def __contains__(self, entity: object) -> bool:
        index = getattr(entity, "pool_index", -1)
        return self.get(index) is entity and bool(getattr(entity, "alive", False))
