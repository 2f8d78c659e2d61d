# src/mathtd/core/engine.py
from __future__ import annotations

import logging
from typing import Any, Literal

from .maths import MathsManager
from .model.config import CombatConfig
from .model.entities import Monster, Projectile, Tower
from .model.state import GameState, ScoreLedger, SessionContext, new_game_state
from .rng import get_state_rng
from .rules.activation import AnswerResult, step_towers, submit_answer
from .rules.bounce import step_bounces
from .rules.collision import CollisionOutcome, resolve_collision, resolve_contacts
from .rules.contacts import ContactDetector, OverlapDetector
from .rules.firing import fire
from .rules.motion import step_motion
from .rules.placement import assign_tower, clear_slot, cycle_slot
from .rules.spawner import WaveSpawner, spawn_monster


logger = logging.getLogger(__name__)

ActionType = Literal[
    "PAUSE_TOGGLE",
    "ASSIGN_TOWER",
    "CLEAR_SLOT",
    "CYCLE_SLOT",
    "SUBMIT_ANSWER",
    "SPAWN_MONSTER",
    "TOGGLE_MUSIC",
    "TOGGLE_SOUND",
]


class Engine:
    """
    Deterministic combat core with no GUI dependency.

    advance() runs fixed 60 Hz steps. Within one step the order is:
    spawns, towers (cooldown then fire), motion, contacts and collision
    resolution, boundary bounces, defender line, reaping.
    """
    FRAME_DT = 1.0 / 60.0

    def __init__(
        self,
        config: CombatConfig | None = None,
        *,
        seed: int | None = None,
        maths: MathsManager | None = None,
        detector: ContactDetector | None = None,
        spawner: WaveSpawner | None = None,
        session: SessionContext | None = None,
    ):
        self.config = config
        self.seed = seed
        self.state: GameState = new_game_state(config, seed=seed, session=session)
        self.maths = maths if maths is not None else MathsManager(rng=get_state_rng(self.state))
        self.detector: ContactDetector = detector if detector is not None else OverlapDetector()
        self.spawner = spawner
        self._accum = 0.0

    def reset(self, *, session: SessionContext | None = None) -> None:
        self.state = new_game_state(self.config, seed=self.seed, session=session)
        self.maths.fallback.rng = get_state_rng(self.state)
        self.detector.reset()
        self._accum = 0.0

    def act(self, action_type: ActionType, payload: dict[str, Any] | None = None) -> Any:
        payload = payload or {}
        if action_type == "TOGGLE_MUSIC":
            self.state.session.music_enabled = not self.state.session.music_enabled
            return self.state.session.music_enabled
        if action_type == "TOGGLE_SOUND":
            self.state.session.sound_enabled = not self.state.session.sound_enabled
            return self.state.session.sound_enabled

        if self.state.game_over:
            return None

        if action_type == "PAUSE_TOGGLE":
            self.state.paused = not self.state.paused
            return self.state.paused
        if action_type == "ASSIGN_TOWER":
            lane, slot = self._cell(payload)
            return assign_tower(self.state, lane, slot, str(payload.get("difficulty", "easy")), self.maths)
        if action_type == "CLEAR_SLOT":
            lane, slot = self._cell(payload)
            return clear_slot(self.state, lane, slot)
        if action_type == "CYCLE_SLOT":
            lane, slot = self._cell(payload)
            return cycle_slot(self.state, lane, slot, self.maths)
        if action_type == "SUBMIT_ANSWER":
            return self.submit_answer(payload.get("answer"))
        if action_type == "SPAWN_MONSTER":
            return spawn_monster(
                self.state,
                str(payload.get("difficulty", "easy")),
                lane=payload.get("lane"),
                y=payload.get("y"),
                angle_degrees=float(payload.get("angle", 0.0)),
                speed_multiplier=float(payload.get("speed_multiplier", 1.0)),
            )

        raise ValueError(f"Unknown action_type={action_type!r}")

    @staticmethod
    def _cell(payload: dict[str, Any]) -> tuple[int, int]:
        lane = payload.get("lane")
        slot = payload.get("slot")
        if lane is None or slot is None:
            raise ValueError(f"Action needs 'lane' and 'slot': {payload!r}")
        return int(lane), int(slot)

    def submit_answer(self, raw: Any) -> AnswerResult:
        return submit_answer(self.state, self.maths, raw)

    def fire(self, tower: Tower) -> list[Projectile]:
        return fire(self.state, tower)

    def resolve_collision(self, projectile: Projectile, monster: Monster) -> CollisionOutcome:
        return resolve_collision(self.state, projectile, monster)

    def is_expired(self, entity: Monster | Projectile) -> bool:
        return entity.is_expired(self.state.config.field)

    def advance(self, dt_seconds: float) -> str | None:
        if self.state.game_over or self.state.paused:
            return None

        self._accum += max(0.0, dt_seconds)
        while self._accum >= self.FRAME_DT:
            self._accum -= self.FRAME_DT
            self.step(self.FRAME_DT)
            if self.state.game_over:
                return "game lost"
        return None

    def step(self, dt: float) -> None:
        s = self.state
        if s.game_over or s.paused:
            return

        # events only cover the current step; collaborators read them in between
        s.events.clear()

        if self.spawner is not None:
            self.spawner.step(s, dt)

        step_towers(s, dt)
        step_motion(s, dt)

        contacts = self.detector.detect(s.projectiles.snapshot(), s.monsters.snapshot())
        if contacts:
            resolve_contacts(s, contacts)

        step_bounces(s)
        self._check_defender_line()

        s.projectiles.reap()
        s.monsters.reap()
        s.time += dt
        s.ticks += 1

    def _check_defender_line(self) -> None:
        s = self.state
        ledger: ScoreLedger = s.session
        for monster in s.monsters.snapshot():
            if not monster.is_expired(s.config.field):
                continue
            monster.destroy()
            s.emit("monster_escaped", monster)
            if ledger.lose_life():
                logger.info("game over score=%s ticks=%s", s.session.score, s.ticks)
                s.emit("game_over", s.session.final_score)
                return

    def observe(self) -> dict[str, Any]:
        s = self.state
        return {
            "score": s.session.score,
            "lives": s.session.lives,
            "time": s.time,
            "paused": s.paused,
            "game_over": s.game_over,
            "towers": [
                {
                    "lane": t.lane,
                    "slot": t.slot,
                    "difficulty": t.difficulty,
                    "archetype": t.archetype,
                    "state": t.state,
                    "fire_rate": t.fire_rate,
                    "cooldown": t.cooldown,
                    "problem": getattr(t.problem, "expression", None),
                }
                for t in s.towers.snapshot()
            ],
            "monsters": [
                {
                    "uid": m.uid,
                    "x": m.x,
                    "y": m.y,
                    "difficulty": m.difficulty,
                    "health": m.health,
                    "max_health": m.max_health,
                }
                for m in s.monsters.snapshot()
            ],
            "projectiles": [
                {
                    "uid": p.uid,
                    "x": p.x,
                    "y": p.y,
                    "vx": p.vx,
                    "vy": p.vy,
                    "difficulty": p.difficulty,
                    "kind": p.kind,
                    "bounce_count": p.bounce_count,
                }
                for p in s.projectiles.snapshot()
            ],
        }
