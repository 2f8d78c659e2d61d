from __future__ import annotations

from ..model.entities import Monster, Projectile


def bounce_monster(monster: Monster, field) -> bool:
    """
    Keep a monster inside the play field vertically.

    The check is against the play-field height, not the canvas: the bottom
    strip of the canvas belongs to the answer input.
    Monsters are never contained horizontally.
    """
    if not monster.alive:
        return False
    half = monster.radius
    bottom = float(field.play_height) - half
    if monster.y < half:
        monster.y = half
        monster.vy = abs(monster.vy)
        return True
    if monster.y > bottom:
        monster.y = bottom
        monster.vy = -abs(monster.vy)
        return True
    return False


def bounce_projectile(projectile: Projectile, field) -> bool:
    """
    Reflect off the top/bottom of the play field and count the bounce.

    Returns True if the projectile touched a boundary this call. The
    projectile is destroyed by register_bounce() once it runs out of bounces.
    """
    if not projectile.alive:
        return False
    radius = projectile.radius
    bottom = float(field.play_height)
    if projectile.y - radius <= 0.0:
        projectile.y = radius
        projectile.vy = abs(projectile.vy)
    elif projectile.y + radius >= bottom:
        projectile.y = bottom - radius
        projectile.vy = -abs(projectile.vy)
    else:
        return False
    projectile.register_bounce()
    return True


def cull_projectile(projectile: Projectile, field) -> bool:
    """Projectiles leave play through the left/right edges; returns True if culled."""
    if projectile.alive and projectile.is_expired(field):
        projectile.destroy()
        return True
    return False


def step_bounces(state) -> None:
    field = state.config.field
    for projectile in state.projectiles.snapshot():
        bounce_projectile(projectile, field)
        cull_projectile(projectile, field)
    for monster in state.monsters.snapshot():
        bounce_monster(monster, field)
