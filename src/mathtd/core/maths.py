from __future__ import annotations

from dataclasses import dataclass
import logging
import math
import random
from typing import Any, Protocol


logger = logging.getLogger(__name__)

MAX_TIER = 6
DEFAULT_BASE_TIER = 1
PROBLEM_TYPES: tuple[str, ...] = ("all", "addition", "subtraction", "multiplication", "division")

# difficulty -> tier offset from the base tier
TIER_OFFSETS: dict[str, int] = {
    "easy": -1,
    "medium": 0,
    "hard": 1,
    "cluster": 2,
}

# largest operand per tier for the built-in generator
OPERAND_LIMITS: tuple[int, ...] = (5, 10, 12, 20, 50, 100, 100)
TIMES_TABLE_LIMITS: tuple[int, ...] = (2, 5, 10, 12, 12, 12, 15)


@dataclass(frozen=True, slots=True)
class Problem:
    expression: str
    answer: float
    formatted_answer: str
    tier: int = 0
    kind: str = "addition"


class ProblemProvider(Protocol):
    def generate_problem(self, tier: int, problem_type: str | None = None) -> Problem: ...

    def check_answer(self, problem: Problem, raw: Any) -> bool: ...


def parse_answer(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


class BuiltinProblems:
    """Small arithmetic generator used when no provider is plugged in, or it fails."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng if rng is not None else random.Random()

    def generate_problem(self, tier: int, problem_type: str | None = None) -> Problem:
        tier = max(0, min(int(tier), MAX_TIER))
        kind = problem_type if problem_type in PROBLEM_TYPES[1:] else "addition"
        limit = OPERAND_LIMITS[tier]
        table = TIMES_TABLE_LIMITS[tier]
        rng = self.rng

        if kind == "subtraction":
            a = rng.randint(1, limit)
            b = rng.randint(1, limit)
            a, b = max(a, b), min(a, b)
            expression, answer = f"{a} - {b}", a - b
        elif kind == "multiplication":
            a = rng.randint(1, table)
            b = rng.randint(1, table)
            expression, answer = f"{a} × {b}", a * b
        elif kind == "division":
            b = rng.randint(1, table)
            answer = rng.randint(1, table)
            expression = f"{answer * b} ÷ {b}"
        else:
            a = rng.randint(1, limit)
            b = rng.randint(1, limit)
            expression, answer = f"{a} + {b}", a + b

        return Problem(
            expression=expression,
            answer=float(answer),
            formatted_answer=_format_number(answer),
            tier=tier,
            kind=kind,
        )

    def check_answer(self, problem: Problem, raw: Any) -> bool:
        value = parse_answer(raw)
        if value is None:
            return False
        return math.isclose(value, float(problem.answer), abs_tol=1e-9)


class MathsManager:
    """
    Issues problems per tower difficulty and checks typed answers.

    Never raises into the game loop: provider failures fall back to the
    built-in generator and to a plain numeric comparison.
    """

    def __init__(
        self,
        provider: ProblemProvider | None = None,
        *,
        base_tier: int = DEFAULT_BASE_TIER,
        problem_type: str = "all",
        rng: random.Random | None = None,
    ) -> None:
        self.fallback = BuiltinProblems(rng)
        self.provider: ProblemProvider = provider if provider is not None else self.fallback
        self.set_base_tier(base_tier)
        self.set_problem_type(problem_type)

    def set_base_tier(self, tier: int) -> None:
        try:
            value = int(tier)
        except (TypeError, ValueError):
            value = -1
        if value < 0 or value > MAX_TIER:
            logger.warning("Base tier %r out of range, using %s", tier, DEFAULT_BASE_TIER)
            value = DEFAULT_BASE_TIER
        self.base_tier = value

    def set_problem_type(self, problem_type: str) -> None:
        self.problem_type = problem_type if problem_type in PROBLEM_TYPES else "all"

    def tier_for_difficulty(self, difficulty: str) -> int:
        offset = TIER_OFFSETS.get(difficulty, TIER_OFFSETS["easy"])
        return max(0, min(self.base_tier + offset, MAX_TIER))

    def generate_problem_for_difficulty(self, difficulty: str) -> Problem:
        tier = self.tier_for_difficulty(difficulty)
        use_type = self.problem_type != "all"
        problem_type = self.problem_type if use_type else None

        try:
            return self.provider.generate_problem(tier, problem_type)
        except Exception as exc:
            if use_type:
                try:
                    return self.provider.generate_problem(tier, None)
                except Exception as fallback_exc:
                    logger.warning("Problem generation failed, using fallback: %s", fallback_exc)
                    return self.fallback.generate_problem(tier, problem_type)
            logger.warning("Problem generation failed, using fallback: %s", exc)
            return self.fallback.generate_problem(tier, problem_type)

    def check_answer(self, problem: Problem | None, raw: Any) -> bool:
        if problem is None:
            logger.warning("check_answer called without a problem")
            return False
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return False
        try:
            return self.provider.check_answer(problem, raw) is True
        except Exception as exc:
            logger.warning("check_answer failed, using numeric comparison: %s", exc)
            value = parse_answer(raw)
            answer = parse_answer(getattr(problem, "answer", None))
            return value is not None and answer is not None and value == answer
