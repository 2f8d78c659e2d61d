from __future__ import annotations
from pathlib import Path
import argparse
import logging

from mathtd.core.engine import Engine
from mathtd.core.model.config import load_combat_config
from mathtd.core.rules.activation import on_correct_answer
from mathtd.core.rules.spawner import WaveSpawner
from mathtd.testing.scenarios import ScenarioRunner, apply_scenario, load_scenario, resolve_scenario_path


logger = logging.getLogger(__name__)


def _parse_tower(arg: str) -> tuple[str, int, int]:
    # difficulty:lane:slot, e.g. hard:1:2
    parts = arg.split(":")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"tower must be difficulty:lane:slot, got {arg!r}")
    try:
        return parts[0], int(parts[1]), int(parts[2])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"bad lane/slot in {arg!r}") from exc


def _run_scenario(engine: Engine, scenario: str) -> int:
    definition = load_scenario(resolve_scenario_path(scenario, Path.cwd()))
    apply_scenario(engine, definition)
    runner = ScenarioRunner(definition, engine)
    status = runner.run()
    s = engine.state
    print(f"scenario={definition.name} status={status} ticks={runner.ticks} score={s.score} lives={s.lives}")
    return 0 if status == "passed" else 1


def main() -> int:
    ap = argparse.ArgumentParser(description="Run the combat core without a display.")
    ap.add_argument("--seconds", type=float, default=30.0)
    ap.add_argument("--fps", type=int, default=60)
    ap.add_argument("--seed", type=int, default=1)
    ap.add_argument("--config", default=None, help="JSON file merged over the default combat config")
    ap.add_argument("--set", dest="overrides", action="append", default=[], help="dotted override, e.g. projectile.max_bounces=5")
    ap.add_argument("--tower", dest="towers", action="append", type=_parse_tower, default=[], help="difficulty:lane:slot (active from the start)")
    ap.add_argument("--scenario", default=None, help="Scenario name (data/scenarios/<name>.json) or path")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_combat_config(args.config, args.overrides)
    engine = Engine(config, seed=args.seed)

    if args.scenario:
        return _run_scenario(engine, args.scenario)

    engine.spawner = WaveSpawner()
    for difficulty, lane, slot in args.towers or [("easy", 0, 0), ("medium", 1, 0), ("hard", 2, 0), ("cluster", 3, 0)]:
        tower = engine.act("ASSIGN_TOWER", {"lane": lane, "slot": slot, "difficulty": difficulty})
        on_correct_answer(tower, engine.maths)

    ticks = int(args.seconds * args.fps)
    dt = 1.0 / max(1, args.fps)
    outcome = None
    for _ in range(ticks):
        outcome = engine.advance(dt)
        if outcome is not None:
            break

    s = engine.state
    print(
        f"time={s.time:.1f}s score={s.score} lives={s.lives} wave={engine.spawner.wave} "
        f"monsters={len(s.monsters)} projectiles={len(s.projectiles)} outcome={outcome or 'running'}"
    )
    for t in s.towers.snapshot():
        logger.info(
            "tower lane=%s slot=%s %s/%s shots=%s fire_rate=%.2f",
            t.lane,
            t.slot,
            t.difficulty,
            t.archetype,
            t.shots_fired,
            t.fire_rate,
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
