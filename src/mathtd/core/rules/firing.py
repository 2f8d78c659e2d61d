from __future__ import annotations

import logging
from typing import Callable

from ..model.entities import Projectile, Tower
from ..rng import get_state_rng
from .targeting import select_vectors


logger = logging.getLogger(__name__)

DEFAULT_PROJECTILE_KIND = "bullet"


def spawn_bullet(
    state,
    x: float,
    y: float,
    vx: float,
    vy: float,
    *,
    difficulty: str,
    damage: float,
) -> Projectile:
    cfg = state.config.projectile
    projectile = Projectile(
        uid=state.next_uid(),
        x=float(x),
        y=float(y),
        vx=float(vx),
        vy=float(vy),
        difficulty=difficulty,
        damage=float(damage),
        max_bounces=int(cfg.max_bounces),
        size=float(cfg.size),
        kind="bullet",
    )
    state.projectiles.add(projectile)
    return projectile


def _build_bullet(state, tower: Tower, x: float, y: float, vx: float, vy: float) -> Projectile:
    return spawn_bullet(state, x, y, vx, vy, difficulty=tower.difficulty, damage=tower.damage)


def _build_cluster(state, tower: Tower, x: float, y: float, vx: float, vy: float) -> Projectile:
    cfg = state.config.projectile
    projectile = Projectile(
        uid=state.next_uid(),
        x=float(x),
        y=float(y),
        vx=float(vx),
        vy=float(vy),
        difficulty=tower.difficulty,
        # the shell only bursts, the sub-bullets do the damage
        damage=0.0,
        max_bounces=int(cfg.max_bounces),
        # drawn slightly larger than a bullet
        size=float(cfg.size) * 1.3,
        kind="cluster",
        cluster_count=int(tower.cluster_count),
        cluster_damage=float(tower.cluster_damage),
        cluster_speed=float(tower.cluster_speed),
    )
    state.projectiles.add(projectile)
    return projectile


PROJECTILE_BUILDERS: dict[str, Callable[..., Projectile]] = {
    "bullet": _build_bullet,
    "cluster": _build_cluster,
}


def create_projectile(state, tower: Tower, x: float, y: float, vx: float, vy: float) -> Projectile:
    builder = PROJECTILE_BUILDERS.get(tower.projectile_type)
    if builder is None:
        logger.warning(
            "Unknown projectile kind %r on %s tower, defaulting to %s",
            tower.projectile_type,
            tower.difficulty,
            DEFAULT_PROJECTILE_KIND,
        )
        builder = PROJECTILE_BUILDERS[DEFAULT_PROJECTILE_KIND]
    return builder(state, tower, x, y, vx, vy)


def fire(state, tower: Tower) -> list[Projectile]:
    """
    Emit one projectile per firing vector of the tower's strategy.

    Shots start ahead of the tower centre so they do not overlap it.
    Does not touch the cooldown; see activation.step_towers.
    """
    if not tower.alive:
        return []
    vectors = select_vectors(
        tower,
        state.monsters.snapshot(),
        state.config.field,
        get_state_rng(state),
    )
    origin_x = tower.x + float(state.config.projectile.spawn_offset)
    origin_y = tower.y
    spawned = [create_projectile(state, tower, origin_x, origin_y, vx, vy) for vx, vy in vectors]
    tower.shots_fired += 1
    state.emit("tower_fire", tower)
    return spawned
