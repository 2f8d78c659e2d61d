from __future__ import annotations

from dataclasses import dataclass, fields, replace
import logging
from typing import Any


logger = logging.getLogger(__name__)

ARCHETYPES: tuple[str, ...] = ("Standard", "Spread", "Sniper")
PROJECTILE_KINDS: tuple[str, ...] = ("bullet", "cluster")
DEFAULT_ARCHETYPE = "Standard"
DEFAULT_DIFFICULTY = "easy"


@dataclass(frozen=True)
class TowerDef:
    difficulty: str
    archetype: str
    # seconds between shots
    fire_rate: float
    damage: float
    projectile_speed: float
    range: float = 0.0
    projectile_count: int = 1
    spread_angle: float = 0.0
    # Standard only: vertical wobble in [-jitter, +jitter]
    jitter: float = 0.0
    projectile_type: str = "bullet"
    cluster_count: int = 0
    cluster_damage: float = 0.0
    cluster_speed: float = 0.0

    # upgrade schedule, applied per correct answer once active
    fire_rate_step: float = 0.85
    min_fire_rate: float = 0.25
    max_projectile_count: int = 1
    damage_step: float = 0.0
    speed_step: float = 0.0
    max_projectile_speed: float = 0.0


TOWER_DEFS: dict[str, TowerDef] = {
    "easy": TowerDef(
        difficulty="easy",
        archetype="Standard",
        fire_rate=1.5,
        damage=1,
        projectile_speed=300,
        jitter=30,
        fire_rate_step=0.8,
        min_fire_rate=0.25,
    ),
    "medium": TowerDef(
        difficulty="medium",
        archetype="Spread",
        fire_rate=2.0,
        damage=1,
        projectile_speed=300,
        projectile_count=3,
        spread_angle=30,
        fire_rate_step=0.9,
        min_fire_rate=0.5,
        max_projectile_count=7,
    ),
    "hard": TowerDef(
        difficulty="hard",
        archetype="Sniper",
        fire_rate=2.5,
        damage=1,
        projectile_speed=600,
        range=450,
        fire_rate_step=0.9,
        min_fire_rate=0.6,
        damage_step=1,
        speed_step=50,
        max_projectile_speed=1000,
    ),
    "cluster": TowerDef(
        difficulty="cluster",
        archetype="Standard",
        fire_rate=3.0,
        damage=0,
        projectile_speed=250,
        projectile_type="cluster",
        cluster_count=5,
        cluster_damage=1,
        cluster_speed=300,
        jitter=30,
        fire_rate_step=0.85,
        min_fire_rate=0.75,
    ),
}


def get_tower_def(difficulty: str, defs: dict[str, TowerDef] | None = None) -> TowerDef:
    table = TOWER_DEFS if defs is None else defs
    tower_def = table.get(difficulty)
    if tower_def is None:
        logger.warning("Unknown tower difficulty %r, defaulting to %s", difficulty, DEFAULT_DIFFICULTY)
        return table[DEFAULT_DIFFICULTY]
    return tower_def


def tower_def_from_dict(base: TowerDef, overrides: dict[str, Any]) -> TowerDef:
    if not isinstance(overrides, dict):
        raise ValueError(f"tower overrides for {base.difficulty!r} must be an object")
    known = {f.name for f in fields(TowerDef)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ValueError(f"unknown tower config keys for {base.difficulty!r}: {', '.join(unknown)}")
    if "difficulty" in overrides and overrides["difficulty"] != base.difficulty:
        raise ValueError("tower difficulty cannot be overridden")
    if overrides.get("archetype", base.archetype) not in ARCHETYPES:
        raise ValueError(f"unknown tower archetype {overrides['archetype']!r}")
    if overrides.get("projectile_type", base.projectile_type) not in PROJECTILE_KINDS:
        raise ValueError(f"unknown projectile kind {overrides['projectile_type']!r}")
    return replace(base, **overrides)
