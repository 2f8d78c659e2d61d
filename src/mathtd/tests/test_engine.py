from pathlib import Path

import pytest

from mathtd.core.engine import Engine
from mathtd.core.model.state import SessionContext
from mathtd.core.rules.activation import on_correct_answer
from mathtd.core.rules.spawner import WaveSpawner, spawn_monster
from mathtd.testing.scenarios import (
    ScenarioRunner,
    apply_scenario,
    load_scenario,
    resolve_scenario_path,
    scenario_from_dict,
)


REPO_ROOT = Path(__file__).resolve().parents[3]


def test_advance_runs_fixed_steps() -> None:
    engine = Engine(seed=1)

    engine.advance(Engine.FRAME_DT / 2)
    assert engine.state.ticks == 0
    engine.advance(Engine.FRAME_DT / 2)
    assert engine.state.ticks == 1

    engine.advance(Engine.FRAME_DT * 3 + 0.001)
    assert engine.state.ticks == 4
    assert engine.state.time == pytest.approx(4 * Engine.FRAME_DT)


def test_pause_stops_time() -> None:
    engine = Engine(seed=1)
    assert engine.act("PAUSE_TOGGLE") is True

    engine.advance(1.0)

    assert engine.state.ticks == 0
    assert engine.act("PAUSE_TOGGLE") is False


def test_monster_crossing_defender_line_costs_a_life() -> None:
    engine = Engine(seed=1)
    monster = spawn_monster(engine.state, "easy", lane=0, x=0.5)

    engine.step(Engine.FRAME_DT)

    assert not monster.alive
    assert engine.state.lives == 9
    names = [name for name, _ in engine.state.drain_events()]
    assert "monster_escaped" in names
    assert not engine.state.monsters


def test_last_life_ends_the_game() -> None:
    engine = Engine(seed=1, session=SessionContext(score=40, lives=1))
    spawn_monster(engine.state, "easy", lane=0, x=0.5)

    assert engine.advance(Engine.FRAME_DT) == "game lost"
    assert engine.state.game_over
    assert engine.state.session.final_score == 40
    assert ("game_over", 40) in engine.state.events

    ticks = engine.state.ticks
    assert engine.advance(1.0) is None
    assert engine.state.ticks == ticks
    assert engine.act("SUBMIT_ANSWER", {"answer": "3"}) is None
    assert engine.act("TOGGLE_MUSIC") is False


def test_unknown_action_is_rejected() -> None:
    engine = Engine(seed=1)
    with pytest.raises(ValueError):
        engine.act("BUY_TOWER", {})
    with pytest.raises(ValueError):
        engine.act("ASSIGN_TOWER", {"difficulty": "easy"})


def test_submit_answer_action_activates_tower() -> None:
    engine = Engine(seed=2)
    tower = engine.act("ASSIGN_TOWER", {"lane": 1, "slot": 0, "difficulty": "hard"})

    result = engine.act("SUBMIT_ANSWER", {"answer": tower.problem.formatted_answer})

    assert result.activated == [tower]
    assert tower.is_active
    engine.step(Engine.FRAME_DT)
    assert len(engine.state.projectiles) == 1


def test_cycle_and_clear_actions() -> None:
    engine = Engine(seed=2)
    tower = engine.act("CYCLE_SLOT", {"lane": 0, "slot": 1})
    assert tower.difficulty == "easy"
    assert engine.act("CLEAR_SLOT", {"lane": 0, "slot": 1}) is True
    assert not engine.state.towers


def test_observe_reports_entities() -> None:
    engine = Engine(seed=2)
    engine.act("ASSIGN_TOWER", {"lane": 0, "slot": 0, "difficulty": "easy"})
    engine.act("SPAWN_MONSTER", {"difficulty": "medium", "lane": 2})

    obs = engine.observe()

    assert obs["lives"] == 10
    assert obs["towers"][0]["state"] == "dormant"
    assert obs["towers"][0]["problem"]
    assert obs["monsters"][0]["health"] == 2.0
    assert obs["projectiles"] == []


def _run_waves(seed: int) -> dict:
    engine = Engine(seed=seed, spawner=WaveSpawner())
    for difficulty, lane in (("easy", 0), ("medium", 1), ("hard", 2), ("cluster", 3)):
        tower = engine.act("ASSIGN_TOWER", {"lane": lane, "slot": 0, "difficulty": difficulty})
        on_correct_answer(tower, engine.maths)
    for _ in range(900):
        engine.step(Engine.FRAME_DT)
    return engine.observe()


def test_same_seed_same_game() -> None:
    assert _run_waves(5) == _run_waves(5)


def test_reset_restores_fresh_state() -> None:
    engine = Engine(seed=5, spawner=None)
    engine.act("ASSIGN_TOWER", {"lane": 0, "slot": 0, "difficulty": "easy"})
    engine.step(Engine.FRAME_DT)

    engine.reset()

    assert engine.state.ticks == 0
    assert not engine.state.towers
    assert engine.state.lives == 10


def test_sniper_scenario_passes() -> None:
    path = resolve_scenario_path("sniper_clears_lane", REPO_ROOT)
    definition = load_scenario(path)
    engine = Engine()
    apply_scenario(engine, definition)

    runner = ScenarioRunner(definition, engine)
    status = runner.run()

    assert status == "passed"
    assert engine.state.score == 30
    assert engine.state.lives == definition.starting_lives
    assert runner.ticks < definition.goal.max_ticks


def test_survive_goal_passes_with_no_monsters() -> None:
    definition = scenario_from_dict(
        {"starting_lives": 2, "goal": {"type": "survive", "max_ticks": 30}},
    )
    engine = Engine()
    apply_scenario(engine, definition)

    runner = ScenarioRunner(definition, engine)

    assert runner.run() == "passed"
    assert runner.ticks == 30


def test_scenario_requires_starting_lives() -> None:
    with pytest.raises(ValueError, match="starting_lives"):
        scenario_from_dict({"towers": []})
    with pytest.raises(ValueError):
        scenario_from_dict({"starting_lives": 1, "goal": {"type": "escort"}})


def test_resolve_scenario_path() -> None:
    root = Path("/tmp/game")
    assert resolve_scenario_path("basic", root) == root / "data" / "scenarios" / "basic.json"
    assert resolve_scenario_path("extra/basic", root) == root / "extra" / "basic.json"
    assert resolve_scenario_path("x.json", root) == root / "x.json"


def test_events_only_cover_latest_step() -> None:
    engine = Engine(seed=5, spawner=WaveSpawner(), session=SessionContext(lives=10**6))
    for difficulty, lane in (("easy", 0), ("medium", 1), ("hard", 2), ("cluster", 3)):
        tower = engine.act("ASSIGN_TOWER", {"lane": lane, "slot": 0, "difficulty": difficulty})
        on_correct_answer(tower, engine.maths)

    largest = 0
    fired = 0
    for _ in range(3 * 3600):
        engine.step(Engine.FRAME_DT)
        events = engine.state.events
        largest = max(largest, len(events))
        fired += sum(1 for name, _ in events if name == "tower_fire")

    assert fired > 100
    assert largest <= 40


def test_scenario_rejects_bad_monster_lane() -> None:
    with pytest.raises(ValueError, match="lane"):
        scenario_from_dict({"starting_lives": 1, "monsters": [{"difficulty": "easy", "lane": -1}]})
    with pytest.raises(ValueError, match="lane"):
        scenario_from_dict({"starting_lives": 1, "monsters": [{"difficulty": "easy", "lane": "top"}]})

    definition = scenario_from_dict({"starting_lives": 1, "monsters": [{"difficulty": "easy", "lane": 4}]})
    with pytest.raises(ValueError, match="lane 4"):
        apply_scenario(Engine(), definition)
