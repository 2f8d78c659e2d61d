from __future__ import annotations

import random


def normalize_seed(seed: int | None) -> int:
    if seed is None:
        return 1
    seed_val = int(seed) & 0x7FFFFFFF
    return seed_val if seed_val != 0 else 1


def seed_state(state, seed: int | None) -> int:
    seed_val = normalize_seed(seed)
    setattr(state, "rng_seed", seed_val)
    setattr(state, "rng", random.Random(seed_val))
    return seed_val


def get_state_rng(state) -> random.Random:
    rng = getattr(state, "rng", None)
    if rng is None:
        seed_state(state, getattr(state, "rng_seed", None))
        rng = state.rng
    return rng


def rand_between(state, low: int, high: int) -> int:
    """Inclusive on both ends."""
    return get_state_rng(state).randint(int(low), int(high))


def rand_uniform(state, low: float, high: float) -> float:
    return get_state_rng(state).uniform(float(low), float(high))


def rand_choice(state, options):
    return options[get_state_rng(state).randrange(len(options))]
