from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np

from ..model.entities import Monster, Projectile


Contact = tuple[Projectile, Monster]


class ContactDetector(Protocol):
    def detect(self, projectiles: Sequence[Projectile], monsters: Sequence[Monster]) -> list[Contact]: ...

    def reset(self) -> None: ...


def overlapping_pairs(projectiles: Sequence[Projectile], monsters: Sequence[Monster]) -> list[Contact]:
    """All (projectile, monster) circle overlaps, projectile-major in input order."""
    if not projectiles or not monsters:
        return []
    p_xy = np.array([(p.x, p.y) for p in projectiles], dtype=float)
    m_xy = np.array([(m.x, m.y) for m in monsters], dtype=float)
    p_r = np.array([p.radius for p in projectiles], dtype=float)
    m_r = np.array([m.radius for m in monsters], dtype=float)

    delta = p_xy[:, None, :] - m_xy[None, :, :]
    dist_sq = np.einsum("ijk,ijk->ij", delta, delta)
    reach = p_r[:, None] + m_r[None, :]
    hits = np.argwhere(dist_sq < reach * reach)
    return [(projectiles[int(i)], monsters[int(j)]) for i, j in hits]


class OverlapDetector:
    """
    Brute-force broad phase reporting contact *begins* only.

    A pair that keeps overlapping on later steps is not reported again,
    so a surviving projectile hits a monster once per pass through it.
    """

    def __init__(self) -> None:
        self._touching: set[tuple[int, int]] = set()

    def detect(self, projectiles: Sequence[Projectile], monsters: Sequence[Monster]) -> list[Contact]:
        pairs = overlapping_pairs(projectiles, monsters)
        current: set[tuple[int, int]] = set()
        fresh: list[Contact] = []
        for projectile, monster in pairs:
            key = (projectile.uid, monster.uid)
            current.add(key)
            if key not in self._touching:
                fresh.append((projectile, monster))
        self._touching = current
        return fresh

    def reset(self) -> None:
        self._touching.clear()
