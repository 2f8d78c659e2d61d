from __future__ import annotations


def step_motion(state, dt: float) -> None:
    """Advance every live monster and projectile by its velocity over dt seconds."""
    if dt <= 0.0:
        return
    for monster in state.monsters.snapshot():
        monster.x += monster.vx * dt
        monster.y += monster.vy * dt
    for projectile in state.projectiles.snapshot():
        projectile.x += projectile.vx * dt
        projectile.y += projectile.vy * dt
