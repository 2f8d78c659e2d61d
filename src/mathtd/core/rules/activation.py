from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Callable

from ..model.entities import ACTIVE, DORMANT, Projectile, Tower
from .firing import fire
from .spawner import spawn_wrong_monster


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AnswerResult:
    correct_towers: list[Tower] = field(default_factory=list)
    activated: list[Tower] = field(default_factory=list)
    wrong_monster_spawned: bool = False

    @property
    def any_correct(self) -> bool:
        return bool(self.correct_towers)


def tick_cooldown(tower: Tower, dt: float) -> None:
    if tower.cooldown > 0.0:
        tower.cooldown = max(0.0, tower.cooldown - dt)


def can_fire(tower: Tower) -> bool:
    return tower.alive and tower.state == ACTIVE and tower.cooldown <= 0.0


def reset_cooldown(tower: Tower) -> None:
    tower.cooldown = float(tower.fire_rate)


def activate(tower: Tower) -> bool:
    """Dormant -> active, once. The tower fires on the next step."""
    if tower.state != DORMANT:
        return False
    tower.state = ACTIVE
    tower.cooldown = 0.0
    return True


def _faster(tower: Tower) -> None:
    d = tower.tower_def
    tower.fire_rate = max(float(d.min_fire_rate), tower.fire_rate * float(d.fire_rate_step))


def _upgrade_standard(tower: Tower) -> None:
    _faster(tower)


def _upgrade_spread(tower: Tower) -> None:
    _faster(tower)
    limit = max(int(tower.tower_def.max_projectile_count), tower.projectile_count)
    tower.projectile_count = min(limit, tower.projectile_count + 1)


def _upgrade_sniper(tower: Tower) -> None:
    _faster(tower)
    d = tower.tower_def
    tower.damage += float(d.damage_step)
    if d.max_projectile_speed > 0:
        tower.projectile_speed = min(float(d.max_projectile_speed), tower.projectile_speed + float(d.speed_step))


UPGRADES: dict[str, Callable[[Tower], None]] = {
    "Standard": _upgrade_standard,
    "Spread": _upgrade_spread,
    "Sniper": _upgrade_sniper,
}


def upgrade_tower(tower: Tower) -> None:
    upgrade = UPGRADES.get(tower.archetype)
    if upgrade is None:
        logger.warning("No upgrade schedule for archetype %r, using Standard", tower.archetype)
        upgrade = _upgrade_standard
    upgrade(tower)


def on_correct_answer(tower: Tower, maths) -> bool:
    """
    First correct answer activates the tower; later ones upgrade it.
    Either way the tower gets a fresh problem. Returns True on activation.
    """
    tower.correct_answers += 1
    activated = activate(tower)
    if not activated:
        upgrade_tower(tower)
    tower.problem = maths.generate_problem_for_difficulty(tower.difficulty)
    return activated


def submit_answer(state, maths, raw) -> AnswerResult:
    """Check one typed answer against every tower's problem, in pool order."""
    result = AnswerResult()
    if state.game_over:
        return result
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return result
    for tower in state.towers.snapshot():
        if tower.problem is None:
            continue
        if not maths.check_answer(tower.problem, raw):
            continue
        result.correct_towers.append(tower)
        if on_correct_answer(tower, maths):
            result.activated.append(tower)
        state.emit("tower_correct", tower)

    if not result.correct_towers and state.config.spawn_wrong_on_miss and state.towers:
        spawn_wrong_monster(state)
        result.wrong_monster_spawned = True
    logger.debug(
        "answer=%r correct=%s activated=%s",
        raw,
        len(result.correct_towers),
        len(result.activated),
    )
    return result


def step_towers(state, dt: float) -> list[Projectile]:
    """Advance cooldowns and fire every ready tower, in stable pool order."""
    spawned: list[Projectile] = []
    for tower in state.towers.snapshot():
        tick_cooldown(tower, dt)
        if can_fire(tower):
            spawned.extend(fire(state, tower))
            reset_cooldown(tower)
    return spawned
