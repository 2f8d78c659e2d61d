from __future__ import annotations

import copy
from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any

from .towers import TOWER_DEFS, TowerDef, tower_def_from_dict


DIFFICULTIES: tuple[str, ...] = ("easy", "medium", "hard", "cluster", "wrong")
TOWER_DIFFICULTIES: tuple[str, ...] = ("easy", "medium", "hard", "cluster")

_SUPPORTED_SCHEMA_VERSIONS = {1}

DEFAULT_CONFIG: dict[str, Any] = {
    "schema_version": 1,
    "field": {
        "width": 1024,
        "height": 768,
        # bottom 80 px of the canvas hosts the answer input
        "play_height": 688,
        "lanes": [86, 258, 430, 602],
        "slots_x": [60, 140, 220],
        "offscreen_margin": 50,
    },
    "projectile": {
        "size": 10,
        "max_bounces": 3,
        "spawn_offset": 30,
    },
    "monster": {
        "size": 40,
        "speed": 60,
        "health": {"easy": 1, "medium": 2, "hard": 3, "cluster": 4},
    },
    "wrong_monster": {
        "size": 40,
        "speed_multiplier": 2.0,
        "health": 3,
        "max_angle": 45,
    },
    "points": {"easy": 10, "medium": 20, "hard": 30, "cluster": 40, "wrong": 5},
    "game": {
        "start_lives": 10,
        "spawn_wrong_on_miss": True,
    },
    "towers": {},
}

_ALLOWED_KEYS: dict[str, Any] = {
    "schema_version": None,
    "field": {
        "width": None,
        "height": None,
        "play_height": None,
        "lanes": None,
        "slots_x": None,
        "offscreen_margin": None,
    },
    "projectile": {
        "size": None,
        "max_bounces": None,
        "spawn_offset": None,
    },
    "monster": {
        "size": None,
        "speed": None,
        "health": {d: None for d in TOWER_DIFFICULTIES},
    },
    "wrong_monster": {
        "size": None,
        "speed_multiplier": None,
        "health": None,
        "max_angle": None,
    },
    "points": {d: None for d in DIFFICULTIES},
    "game": {
        "start_lives": None,
        "spawn_wrong_on_miss": None,
    },
    # per-difficulty TowerDef field overrides, checked in tower_def_from_dict
    "towers": None,
}


@dataclass(frozen=True, slots=True)
class PlayField:
    width: float
    height: float
    play_height: float
    lanes: tuple[float, ...]
    slots_x: tuple[float, ...]
    offscreen_margin: float = 50.0

    def cell_xy(self, lane: int, slot: int) -> tuple[float, float]:
        if not (0 <= lane < len(self.lanes)) or not (0 <= slot < len(self.slots_x)):
            raise ValueError(f"Cell out of range: lane={lane} slot={slot}")
        return float(self.slots_x[slot]), float(self.lanes[lane])


@dataclass(frozen=True, slots=True)
class ProjectileConfig:
    size: float
    max_bounces: int
    spawn_offset: float


@dataclass(frozen=True, slots=True)
class MonsterConfig:
    size: float
    speed: float
    health: dict[str, float]


@dataclass(frozen=True, slots=True)
class WrongMonsterConfig:
    size: float
    speed_multiplier: float
    health: float
    max_angle: float


@dataclass(frozen=True, slots=True)
class CombatConfig:
    field: PlayField
    projectile: ProjectileConfig
    monster: MonsterConfig
    wrong_monster: WrongMonsterConfig
    points: dict[str, int]
    start_lives: int
    spawn_wrong_on_miss: bool
    towers: dict[str, TowerDef]


def combat_config_from_dict(cfg: dict[str, Any]) -> CombatConfig:
    f = cfg["field"]
    p = cfg["projectile"]
    m = cfg["monster"]
    w = cfg["wrong_monster"]
    g = cfg["game"]

    play_height = float(f["play_height"])
    if play_height <= 0 or play_height > float(f["height"]):
        raise ValueError(f"field.play_height must be in (0, height]: {play_height}")

    towers = dict(TOWER_DEFS)
    for difficulty, overrides in (cfg.get("towers") or {}).items():
        if difficulty not in TOWER_DIFFICULTIES:
            raise ValueError(f"Unknown tower difficulty in config: {difficulty!r}")
        towers[difficulty] = tower_def_from_dict(towers[difficulty], overrides)

    return CombatConfig(
        field=PlayField(
            width=float(f["width"]),
            height=float(f["height"]),
            play_height=play_height,
            lanes=tuple(float(y) for y in f["lanes"]),
            slots_x=tuple(float(x) for x in f["slots_x"]),
            offscreen_margin=float(f["offscreen_margin"]),
        ),
        projectile=ProjectileConfig(
            size=float(p["size"]),
            max_bounces=int(p["max_bounces"]),
            spawn_offset=float(p["spawn_offset"]),
        ),
        monster=MonsterConfig(
            size=float(m["size"]),
            speed=float(m["speed"]),
            health={k: float(v) for k, v in m["health"].items()},
        ),
        wrong_monster=WrongMonsterConfig(
            size=float(w["size"]),
            speed_multiplier=float(w["speed_multiplier"]),
            health=float(w["health"]),
            max_angle=float(w["max_angle"]),
        ),
        points={k: int(v) for k, v in cfg["points"].items()},
        start_lives=int(g["start_lives"]),
        spawn_wrong_on_miss=bool(g["spawn_wrong_on_miss"]),
        towers=towers,
    )


def default_combat_config() -> CombatConfig:
    return combat_config_from_dict(DEFAULT_CONFIG)


def load_json_config(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    if not isinstance(payload, dict):
        raise ValueError(f"config root must be a JSON object: {p}")
    _check_keys(payload)
    return payload


def load_combat_config(
    path: str | Path | None = None,
    overrides: list[str] | None = None,
) -> CombatConfig:
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if path is not None:
        cfg = deep_merge(cfg, load_json_config(path))
    cfg = apply_overrides(cfg, overrides)
    _validate_config(cfg)
    return combat_config_from_dict(cfg)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in out and isinstance(out[key], dict) and isinstance(value, dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def apply_overrides(cfg: dict[str, Any], overrides_list: list[str] | None) -> dict[str, Any]:
    if not overrides_list:
        return cfg

    out = cfg
    for item in overrides_list:
        if "=" not in item:
            raise ValueError(f"override must contain '=': {item}")
        path_str, value_str = item.split("=", 1)
        if not path_str:
            raise ValueError(f"override path empty: {item}")
        keys = path_str.split(".")
        if any(not key for key in keys):
            raise ValueError(f"override path has empty segment: {item}")
        value = _cast_scalar(value_str)

        cursor = out
        for key in keys[:-1]:
            if key not in cursor or not isinstance(cursor[key], dict):
                cursor[key] = {}
            cursor = cursor[key]
        cursor[keys[-1]] = value
    return out


def _cast_scalar(value: str) -> Any:
    lowered = value.strip().lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    if value.startswith("["):
        return json.loads(value)
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_dict(parent: dict[str, Any], key: str) -> dict[str, Any]:
    if key not in parent:
        raise ValueError(f"missing '{key}' section in config")
    value = parent[key]
    if not isinstance(value, dict):
        raise ValueError(f"config '{key}' must be a JSON object")
    return value


def _require_number(parent: dict[str, Any], key: str) -> float:
    if key not in parent:
        raise ValueError(f"missing '{key}' in config")
    value = parent[key]
    if not _is_number(value):
        raise ValueError(f"config '{key}' must be a number")
    return float(value)


def _check_keys(cfg: dict[str, Any]) -> None:
    unknown = _find_unknown_keys(cfg, _ALLOWED_KEYS, path="")
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ValueError(f"unknown config keys: {unknown_str}")

    schema_version = cfg.get("schema_version", 1)
    if schema_version not in _SUPPORTED_SCHEMA_VERSIONS:
        raise ValueError(f"unsupported schema_version: {schema_version}")


def _validate_config(cfg: dict[str, Any]) -> None:
    _check_keys(cfg)

    field_cfg = _require_dict(cfg, "field")
    width = _require_number(field_cfg, "width")
    height = _require_number(field_cfg, "height")
    if width <= 0 or height <= 0:
        raise ValueError("field.width and field.height must be > 0")
    if not field_cfg.get("lanes") or not field_cfg.get("slots_x"):
        raise ValueError("field.lanes and field.slots_x must be non-empty lists")

    projectile_cfg = _require_dict(cfg, "projectile")
    if _require_number(projectile_cfg, "max_bounces") < 1:
        raise ValueError("projectile.max_bounces must be >= 1")
    if _require_number(projectile_cfg, "size") <= 0:
        raise ValueError("projectile.size must be > 0")

    monster_cfg = _require_dict(cfg, "monster")
    if _require_number(monster_cfg, "size") <= 0:
        raise ValueError("monster.size must be > 0")

    points_cfg = _require_dict(cfg, "points")
    for difficulty in DIFFICULTIES:
        _require_number(points_cfg, difficulty)

    game_cfg = _require_dict(cfg, "game")
    if _require_number(game_cfg, "start_lives") < 1:
        raise ValueError("game.start_lives must be >= 1")


def _find_unknown_keys(value: Any, allowed: Any, *, path: str) -> list[str]:
    if not isinstance(value, dict) or not isinstance(allowed, dict):
        return []
    unknown: list[str] = []
    for key, sub_value in value.items():
        if key not in allowed:
            unknown.append(f"{path}{key}" if path else key)
            continue
        sub_allowed = allowed[key]
        if isinstance(sub_value, dict) and isinstance(sub_allowed, dict):
            child_path = f"{path}{key}."
            unknown.extend(_find_unknown_keys(sub_value, sub_allowed, path=child_path))
    return unknown
