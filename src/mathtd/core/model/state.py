from __future__ import annotations
from dataclasses import dataclass, field
import itertools
import random
from typing import Any, Protocol

from ..rng import seed_state
from .config import CombatConfig, default_combat_config
from .entities import Monster, Projectile, Tower
from .pool import Pool


class ScoreLedger(Protocol):
    def award(self, points: int) -> None: ...

    def lose_life(self) -> bool: ...


@dataclass(slots=True)
class SessionContext:
    """
    Cross-scene flags and the score/lives ledger for one play session.
    Created when a session starts and dropped when it ends.
    """
    score: int = 0
    lives: int = 10
    music_enabled: bool = True
    sound_enabled: bool = True
    final_score: int | None = None
    game_over: bool = False

    def award(self, points: int) -> None:
        self.score += int(points)

    def lose_life(self) -> bool:
        """Returns True when this loss ends the session."""
        if self.game_over:
            return False
        self.lives -= 1
        if self.lives <= 0:
            self.lives = 0
            self.game_over = True
            self.final_score = self.score
            return True
        return False


@dataclass(slots=True)
class GameState:
    config: CombatConfig = field(default_factory=default_combat_config)
    session: SessionContext = field(default_factory=SessionContext)
    paused: bool = False
    time: float = 0.0
    ticks: int = 0

    towers: Pool[Tower] = field(default_factory=Pool)
    monsters: Pool[Monster] = field(default_factory=Pool)
    projectiles: Pool[Projectile] = field(default_factory=Pool)
    # (lane, slot) -> tower
    cells: dict[tuple[int, int], Tower] = field(default_factory=dict)

    # (name, payload) pairs for audio/visual collaborators; Engine.step clears
    # them, so they only cover the latest step plus actions taken since
    events: list[tuple[str, Any]] = field(default_factory=list)

    rng_seed: int = 1
    rng: random.Random | None = None
    _uids: Any = field(default_factory=lambda: itertools.count(1))

    @property
    def game_over(self) -> bool:
        return self.session.game_over

    @property
    def score(self) -> int:
        return self.session.score

    @property
    def lives(self) -> int:
        return self.session.lives

    def next_uid(self) -> int:
        return next(self._uids)

    def emit(self, name: str, payload: Any = None) -> None:
        self.events.append((name, payload))

    def drain_events(self) -> list[tuple[str, Any]]:
        out = list(self.events)
        self.events.clear()
        return out


def new_game_state(
    config: CombatConfig | None = None,
    *,
    seed: int | None = None,
    session: SessionContext | None = None,
) -> GameState:
    cfg = config if config is not None else default_combat_config()
    if session is None:
        session = SessionContext(lives=cfg.start_lives)
    state = GameState(config=cfg, session=session)
    seed_state(state, seed)
    return state
