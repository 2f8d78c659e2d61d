from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Iterable

import numpy as np

from ..model.entities import Monster, Projectile
from ..model.state import ScoreLedger
from .firing import spawn_bullet


WRONG = "wrong"
CLUSTER_KIND = "cluster"


@dataclass(slots=True)
class CollisionOutcome:
    damage_applied: float = 0.0
    died: bool = False
    deflected: bool = False
    points: int = 0
    spawned: list[Projectile] = field(default_factory=list)
    # stale pair, nothing happened
    ignored: bool = False


def can_damage(projectile: Projectile, monster: Monster) -> bool:
    """
    Difficulty matching rule.

    "wrong" monsters come from wrong answers and no tower carries that tag,
    so any bullet may hurt them.
    """
    if monster.difficulty == WRONG:
        return True
    return projectile.difficulty == monster.difficulty


def cluster_burst_angles(count: int) -> list[float]:
    """Full circle, evenly spaced, first shot straight ahead (angle 0)."""
    if count <= 0:
        return []
    return [float(a) for a in np.linspace(0.0, 2.0 * math.pi, int(count), endpoint=False)]


def burst_cluster(state, projectile: Projectile, monster: Monster) -> list[Projectile]:
    spec = projectile.cluster_spec()
    bullet_radius = float(state.config.projectile.size) * 0.5
    # start just clear of the struck monster so the burst does not re-hit it at once
    offset = monster.radius + bullet_radius + 1.0
    spawned: list[Projectile] = []
    for angle in cluster_burst_angles(spec.count):
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        spawned.append(
            spawn_bullet(
                state,
                monster.x + cos_a * offset,
                monster.y + sin_a * offset,
                cos_a * spec.speed,
                sin_a * spec.speed,
                difficulty=monster.difficulty,
                damage=spec.damage,
            )
        )
    return spawned


def resolve_collision(state, projectile: Projectile, monster: Monster) -> CollisionOutcome:
    # either side may already have been destroyed by an earlier pair this step
    if not projectile.alive or not monster.alive:
        return CollisionOutcome(ignored=True)

    if projectile.kind == CLUSTER_KIND:
        spawned = burst_cluster(state, projectile, monster)
        projectile.destroy()
        state.emit("cluster_burst", projectile)
        return CollisionOutcome(spawned=spawned)

    if not can_damage(projectile, monster):
        projectile.vy = -projectile.vy
        projectile.register_bounce()
        return CollisionOutcome(deflected=True)

    before = monster.health
    died = monster.apply_damage(projectile.damage)
    projectile.register_bounce()
    outcome = CollisionOutcome(damage_applied=before - monster.health, died=died)
    if died:
        outcome.points = int(state.config.points.get(monster.difficulty, 0))
        ledger: ScoreLedger = state.session
        ledger.award(outcome.points)
        state.emit("monster_death", monster)
    else:
        state.emit("monster_hurt", monster)
    return outcome


def resolve_contacts(state, contacts: Iterable[tuple[Projectile, Monster]]) -> list[CollisionOutcome]:
    return [resolve_collision(state, projectile, monster) for projectile, monster in contacts]
