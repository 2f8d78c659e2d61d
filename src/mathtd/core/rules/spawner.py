from __future__ import annotations

import logging
import math
from typing import Sequence

from ..model.entities import Monster
from ..rng import get_state_rng, rand_choice, rand_uniform


logger = logging.getLogger(__name__)

WRONG = "wrong"


def _velocity(speed: float, angle_degrees: float) -> tuple[float, float]:
    # angle 0 = straight left, positive = drifting down
    a = math.radians(angle_degrees)
    return -speed * math.cos(a), speed * math.sin(a)


def _entry_y(state, size: float, lane: int | None, y: float | None) -> float:
    field = state.config.field
    if y is not None:
        return float(y)
    if lane is not None:
        if not 0 <= lane < len(field.lanes):
            raise ValueError(f"Lane out of range: {lane}")
        return float(field.lanes[lane])
    half = size * 0.5
    return rand_uniform(state, half, float(field.play_height) - half)


def spawn_monster(
    state,
    difficulty: str,
    *,
    lane: int | None = None,
    x: float | None = None,
    y: float | None = None,
    angle_degrees: float = 0.0,
    speed_multiplier: float = 1.0,
    health: float | None = None,
) -> Monster:
    """Build a monster entering from the right edge and hand it to the combat core."""
    if difficulty == WRONG:
        return spawn_wrong_monster(
            state,
            x=x,
            y=y,
            angle_degrees=angle_degrees,
            speed_multiplier=speed_multiplier,
        )
    cfg = state.config.monster
    hp = cfg.health.get(difficulty) if health is None else float(health)
    if hp is None:
        logger.warning("No health configured for %r monsters, using 1", difficulty)
        hp = 1.0
    size = float(cfg.size)
    speed = float(cfg.speed) * float(speed_multiplier)
    vx, vy = _velocity(speed, angle_degrees)
    monster = Monster(
        uid=state.next_uid(),
        x=float(x) if x is not None else float(state.config.field.width) + size * 0.5,
        y=_entry_y(state, size, lane, y),
        vx=vx,
        vy=vy,
        difficulty=difficulty,
        health=float(hp),
        max_health=float(hp),
        size=size,
        speed=speed,
        angle=float(angle_degrees),
    )
    state.monsters.add(monster)
    state.emit("monster_spawn", monster)
    return monster


def spawn_wrong_monster(
    state,
    *,
    x: float | None = None,
    y: float | None = None,
    angle_degrees: float | None = None,
    speed_multiplier: float = 1.0,
) -> Monster:
    """
    Monster released by a wrong answer: faster, enters at an angle and
    bounces between the top and bottom of the play field.
    """
    cfg = state.config.wrong_monster
    size = float(cfg.size)
    if angle_degrees is None:
        angle_degrees = rand_uniform(state, -cfg.max_angle, cfg.max_angle)
    speed = float(state.config.monster.speed) * float(speed_multiplier) * float(cfg.speed_multiplier)
    vx, vy = _velocity(speed, angle_degrees)
    monster = Monster(
        uid=state.next_uid(),
        x=float(x) if x is not None else float(state.config.field.width) + size * 0.5,
        y=_entry_y(state, size, None, y),
        vx=vx,
        vy=vy,
        difficulty=WRONG,
        health=float(cfg.health),
        max_health=float(cfg.health),
        size=size,
        speed=speed,
        angle=float(angle_degrees),
        immovable=True,
    )
    state.monsters.add(monster)
    state.emit("monster_spawn", monster)
    return monster


class WaveSpawner:
    """
    Fixed-cadence spawn schedule.

    Each wave releases `wave_size` monsters `interval` seconds apart, then
    waits `wave_gap` seconds. Monsters get a little faster every wave.
    """

    def __init__(
        self,
        *,
        interval: float = 2.0,
        wave_size: int = 5,
        wave_gap: float = 6.0,
        difficulties: Sequence[str] = ("easy", "medium", "hard"),
        max_angle: float = 20.0,
        speed_step: float = 0.1,
        first_delay: float = 1.0,
    ) -> None:
        if interval <= 0 or wave_gap <= 0:
            raise ValueError("interval and wave_gap must be > 0")
        if wave_size < 1:
            raise ValueError("wave_size must be >= 1")
        if not difficulties:
            raise ValueError("difficulties must not be empty")
        self.interval = float(interval)
        self.wave_size = int(wave_size)
        self.wave_gap = float(wave_gap)
        self.difficulties = tuple(difficulties)
        self.max_angle = float(max_angle)
        self.speed_step = float(speed_step)
        self.wave = 0
        self._remaining = 0
        self._timer = max(0.0, float(first_delay))

    def speed_multiplier(self) -> float:
        return 1.0 + self.speed_step * max(0, self.wave - 1)

    def step(self, state, dt: float) -> list[Monster]:
        if state.game_over:
            return []
        spawned: list[Monster] = []
        self._timer -= max(0.0, dt)
        while self._timer <= 0.0:
            if self._remaining <= 0:
                self.wave += 1
                self._remaining = self.wave_size
                logger.info("wave=%s size=%s", self.wave, self.wave_size)
            spawned.append(self._spawn_one(state))
            self._remaining -= 1
            self._timer += self.wave_gap if self._remaining == 0 else self.interval
        return spawned

    def _spawn_one(self, state) -> Monster:
        lanes = state.config.field.lanes
        lane = get_state_rng(state).randrange(len(lanes))
        return spawn_monster(
            state,
            rand_choice(state, self.difficulties),
            lane=lane,
            angle_degrees=rand_uniform(state, -self.max_angle, self.max_angle),
            speed_multiplier=self.speed_multiplier(),
        )
