from __future__ import annotations

import logging
import math
import random
from typing import Callable, Iterable

import numpy as np

from ..model.entities import Monster, Tower
from ..model.towers import DEFAULT_ARCHETYPE


logger = logging.getLogger(__name__)

Vector = tuple[float, float]
Strategy = Callable[[Tower, list[Monster], object, random.Random], list[Vector]]


def standard_vectors(tower: Tower, monsters: list[Monster], bounds, rng: random.Random) -> list[Vector]:
    """Straight at the far edge, integer vertical jitter in [-jitter, +jitter]."""
    jitter = int(tower.jitter)
    vy = float(rng.randint(-jitter, jitter)) if jitter > 0 else 0.0
    return [(float(tower.projectile_speed), vy)]


def spread_angles(count: int, spread_degrees: float) -> list[float]:
    """Shot angles in radians, evenly spaced and symmetric about 0."""
    if count <= 1:
        return [0.0]
    half = math.radians(float(spread_degrees)) / 2.0
    return [float(a) for a in np.linspace(-half, half, int(count))]


def spread_vectors(tower: Tower, monsters: list[Monster], bounds, rng: random.Random) -> list[Vector]:
    speed = float(tower.projectile_speed)
    return [
        (math.cos(angle) * speed, math.sin(angle) * speed)
        for angle in spread_angles(tower.projectile_count, tower.spread_angle)
    ]


def find_sniper_target(tower: Tower, monsters: Iterable[Monster]) -> Monster | None:
    """Closest live monster within range; the first one enumerated wins a tie."""
    candidates = [m for m in monsters if m.alive]
    if not candidates:
        return None
    xs = np.fromiter((m.x for m in candidates), dtype=float, count=len(candidates))
    ys = np.fromiter((m.y for m in candidates), dtype=float, count=len(candidates))
    dist = np.hypot(xs - float(tower.x), ys - float(tower.y))
    dist[dist > float(tower.range)] = np.inf
    idx = int(np.argmin(dist))
    if not np.isfinite(dist[idx]):
        return None
    return candidates[idx]


def sniper_vectors(tower: Tower, monsters: list[Monster], bounds, rng: random.Random) -> list[Vector]:
    speed = float(tower.projectile_speed)
    target = find_sniper_target(tower, monsters)
    if target is None:
        return [(speed, 0.0)]
    angle = math.atan2(target.y - tower.y, target.x - tower.x)
    return [(math.cos(angle) * speed, math.sin(angle) * speed)]


TARGETING_STRATEGIES: dict[str, Strategy] = {
    "Standard": standard_vectors,
    "Spread": spread_vectors,
    "Sniper": sniper_vectors,
}


def get_strategy(archetype: str) -> Strategy:
    strategy = TARGETING_STRATEGIES.get(archetype)
    if strategy is None:
        logger.warning("Unknown tower archetype %r, defaulting to %s", archetype, DEFAULT_ARCHETYPE)
        return TARGETING_STRATEGIES[DEFAULT_ARCHETYPE]
    return strategy


def select_vectors(
    tower: Tower,
    monsters: list[Monster],
    bounds,
    rng: random.Random,
) -> list[Vector]:
    return get_strategy(tower.archetype)(tower, monsters, bounds, rng)
