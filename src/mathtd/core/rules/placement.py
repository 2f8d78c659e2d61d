from __future__ import annotations

from ..model.entities import Tower
from ..model.towers import get_tower_def


# order a slot cycles through when clicked; None is an empty slot
SLOT_CYCLE: tuple[str | None, ...] = (None, "easy", "medium", "hard")


def make_tower(state, lane: int, slot: int, difficulty: str) -> Tower:
    x, y = state.config.field.cell_xy(lane, slot)
    tower_def = get_tower_def(difficulty, state.config.towers)
    return Tower(
        lane=int(lane),
        slot=int(slot),
        x=x,
        y=y,
        difficulty=tower_def.difficulty,
        archetype=tower_def.archetype,
        tower_def=tower_def,
        fire_rate=float(tower_def.fire_rate),
        damage=float(tower_def.damage),
        projectile_speed=float(tower_def.projectile_speed),
        range=float(tower_def.range),
        projectile_count=int(tower_def.projectile_count),
        spread_angle=float(tower_def.spread_angle),
        jitter=float(tower_def.jitter),
        projectile_type=tower_def.projectile_type,
        cluster_count=int(tower_def.cluster_count),
        cluster_damage=float(tower_def.cluster_damage),
        cluster_speed=float(tower_def.cluster_speed),
    )


def tower_at(state, lane: int, slot: int) -> Tower | None:
    tower = state.cells.get((lane, slot))
    if tower is None or not tower.alive:
        return None
    return tower


def clear_slot(state, lane: int, slot: int) -> bool:
    tower = state.cells.pop((lane, slot), None)
    if tower is None:
        return False
    state.towers.remove(tower)
    return True


def assign_tower(state, lane: int, slot: int, difficulty: str, maths=None) -> Tower:
    """
    Put a new dormant tower in (lane, slot), replacing whatever was there.
    The tower gets its first problem from `maths` when one is given.
    """
    tower = make_tower(state, lane, slot, difficulty)
    clear_slot(state, lane, slot)
    state.towers.add(tower)
    state.cells[(lane, slot)] = tower
    if maths is not None:
        tower.problem = maths.generate_problem_for_difficulty(tower.difficulty)
    return tower


def cycle_slot(state, lane: int, slot: int, maths=None) -> Tower | None:
    current = tower_at(state, lane, slot)
    try:
        idx = SLOT_CYCLE.index(current.difficulty if current is not None else None)
    except ValueError:
        idx = 0
    difficulty = SLOT_CYCLE[(idx + 1) % len(SLOT_CYCLE)]
    if difficulty is None:
        clear_slot(state, lane, slot)
        return None
    return assign_tower(state, lane, slot, difficulty, maths)
