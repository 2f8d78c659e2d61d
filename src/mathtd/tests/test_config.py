import json

import pytest

from mathtd.core.model.config import (
    apply_overrides,
    default_combat_config,
    deep_merge,
    load_combat_config,
)
from mathtd.core.model.towers import TOWER_DEFS, get_tower_def


def test_defaults() -> None:
    cfg = default_combat_config()

    assert cfg.field.play_height == 688
    assert cfg.field.lanes == (86.0, 258.0, 430.0, 602.0)
    assert cfg.projectile.max_bounces == 3
    assert cfg.monster.health["cluster"] == 4.0
    assert cfg.points["wrong"] == 5
    assert cfg.start_lives == 10
    assert cfg.towers["hard"].archetype == "Sniper"


def test_cell_xy() -> None:
    field = default_combat_config().field
    assert field.cell_xy(1, 2) == (220.0, 258.0)
    with pytest.raises(ValueError):
        field.cell_xy(4, 0)
    with pytest.raises(ValueError):
        field.cell_xy(0, -1)


def test_dotted_overrides_are_cast() -> None:
    cfg = load_combat_config(
        overrides=[
            "projectile.max_bounces=5",
            "monster.speed=72.5",
            "game.spawn_wrong_on_miss=false",
            "field.lanes=[100, 300]",
        ]
    )
    assert cfg.projectile.max_bounces == 5
    assert cfg.monster.speed == 72.5
    assert cfg.spawn_wrong_on_miss is False
    assert cfg.field.lanes == (100.0, 300.0)


def test_loading_does_not_mutate_defaults() -> None:
    load_combat_config(overrides=["projectile.max_bounces=9"])
    assert default_combat_config().projectile.max_bounces == 3


def test_json_file_is_merged_over_defaults(tmp_path) -> None:
    path = tmp_path / "combat.json"
    path.write_text(json.dumps({"points": {"easy": 15}, "game": {"start_lives": 3}}), encoding="utf-8")

    cfg = load_combat_config(path)

    assert cfg.points["easy"] == 15
    assert cfg.points["hard"] == 30
    assert cfg.start_lives == 3


def test_unknown_keys_are_rejected(tmp_path) -> None:
    path = tmp_path / "combat.json"
    path.write_text(json.dumps({"projectile": {"bounciness": 2}}), encoding="utf-8")

    with pytest.raises(ValueError, match="projectile.bounciness"):
        load_combat_config(path)


@pytest.mark.parametrize(
    "override",
    [
        "projectile.max_bounces=0",
        "game.start_lives=0",
        "field.play_height=900",
        "points.easy=lots",
        "schema_version=2",
    ],
)
def test_invalid_values_are_rejected(override: str) -> None:
    with pytest.raises(ValueError):
        load_combat_config(overrides=[override])


def test_malformed_override() -> None:
    with pytest.raises(ValueError):
        apply_overrides({}, ["projectile.size"])
    with pytest.raises(ValueError):
        apply_overrides({}, ["projectile..size=3"])


def test_tower_overrides_replace_fields() -> None:
    cfg = load_combat_config(overrides=["towers.easy.fire_rate=0.5", "towers.medium.projectile_count=5"])

    assert cfg.towers["easy"].fire_rate == 0.5
    assert cfg.towers["easy"].archetype == "Standard"
    assert cfg.towers["medium"].projectile_count == 5


def test_known_archetype_override_is_accepted() -> None:
    cfg = load_combat_config(overrides=["towers.easy.archetype=Sniper"])
    assert cfg.towers["easy"].archetype == "Sniper"
    assert TOWER_DEFS["easy"].fire_rate == 1.5


@pytest.mark.parametrize(
    "override",
    [
        "towers.laser.fire_rate=1",
        "towers.easy.colour=red",
        "towers.easy.difficulty=hard",
        "towers.easy.archetype=Laser",
        "towers.cluster.projectile_type=plasma",
    ],
)
def test_bad_tower_overrides(override: str) -> None:
    with pytest.raises(ValueError):
        load_combat_config(overrides=[override])


def test_unknown_tower_difficulty_defaults_to_easy(caplog) -> None:
    assert get_tower_def("legendary") is TOWER_DEFS["easy"]
    assert "Unknown tower difficulty" in caplog.text


def test_deep_merge_keeps_siblings() -> None:
    merged = deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}, "d": 4})
    assert merged == {"a": {"b": 1, "c": 3}, "d": 4}
