from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from .towers import TowerDef


DORMANT = "dormant"
ACTIVE = "active"


@dataclass(frozen=True, slots=True)
class ClusterSpec:
    count: int
    damage: float
    speed: float


@dataclass(slots=True)
class Tower:
    lane: int
    slot: int
    x: float
    y: float
    difficulty: str
    archetype: str
    tower_def: TowerDef

    fire_rate: float
    damage: float
    projectile_speed: float
    range: float
    projectile_count: int
    spread_angle: float
    jitter: float
    projectile_type: str
    cluster_count: int
    cluster_damage: float
    cluster_speed: float

    cooldown: float = 0.0
    state: str = DORMANT
    problem: Any = None
    correct_answers: int = 0
    shots_fired: int = 0
    alive: bool = True
    pool_index: int = -1

    @property
    def is_active(self) -> bool:
        return self.state == ACTIVE

    def destroy(self) -> None:
        self.alive = False


@dataclass(slots=True)
class Monster:
    uid: int
    x: float
    y: float
    vx: float
    vy: float
    difficulty: str
    health: float
    max_health: float
    size: float
    speed: float
    angle: float = 0.0
    # projectiles never push an immovable body
    immovable: bool = False
    alive: bool = True
    pool_index: int = -1

    @property
    def radius(self) -> float:
        return self.size * 0.5

    def apply_damage(self, amount: float) -> bool:
        """Returns True only on the call that kills the monster."""
        if not self.alive:
            return False
        self.health = max(0.0, self.health - max(0.0, float(amount)))
        if self.health > 0.0:
            return False
        self.alive = False
        return True

    def is_expired(self, bounds) -> bool:
        # the defender line is the left edge of the play field
        return not self.alive or self.x < 0.0

    def destroy(self) -> None:
        self.alive = False


@dataclass(slots=True)
class Projectile:
    uid: int
    x: float
    y: float
    vx: float
    vy: float
    difficulty: str
    damage: float
    max_bounces: int
    size: float
    kind: str = "bullet"
    bounce_count: int = 0
    cluster_count: int = 0
    cluster_damage: float = 0.0
    cluster_speed: float = 0.0
    alive: bool = True
    pool_index: int = -1

    @property
    def radius(self) -> float:
        return self.size * 0.5

    def register_bounce(self) -> bool:
        """Count one bounce; returns True when this bounce used up the last one."""
        if not self.alive:
            return False
        self.bounce_count += 1
        if self.bounce_count >= self.max_bounces:
            self.alive = False
            return True
        return False

    def is_expired(self, bounds) -> bool:
        if not self.alive:
            return True
        margin = float(getattr(bounds, "offscreen_margin", 50.0))
        width = float(getattr(bounds, "width", 0.0))
        return self.x < -margin or self.x > width + margin

    def cluster_spec(self) -> ClusterSpec:
        return ClusterSpec(
            count=int(self.cluster_count),
            damage=float(self.cluster_damage),
            speed=float(self.cluster_speed),
        )

    def destroy(self) -> None:
        self.alive = False
