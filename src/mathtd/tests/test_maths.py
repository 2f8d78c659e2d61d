import logging
import random

import pytest

from mathtd.core.maths import BuiltinProblems, MathsManager, Problem, parse_answer


class _BrokenProvider:
    def generate_problem(self, tier, problem_type=None):
        raise RuntimeError("no problems today")

    def check_answer(self, problem, raw):
        raise RuntimeError("cannot check")


class _TypedOnlyFails:
    def __init__(self) -> None:
        self.calls = []

    def generate_problem(self, tier, problem_type=None):
        self.calls.append(problem_type)
        if problem_type is not None:
            raise KeyError(problem_type)
        return Problem(expression="1 + 1", answer=2.0, formatted_answer="2", tier=tier)

    def check_answer(self, problem, raw):
        return parse_answer(raw) == problem.answer


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("12", 12.0),
        (" 3.5 ", 3.5),
        ("-4", -4.0),
        (7, 7.0),
        ("", None),
        ("  ", None),
        ("abc", None),
        ("nan", None),
        ("inf", None),
        (None, None),
        (True, None),
    ],
)
def test_parse_answer(raw, expected) -> None:
    assert parse_answer(raw) == expected


@pytest.mark.parametrize("kind", ["addition", "subtraction", "multiplication", "division"])
def test_builtin_problems_are_consistent(kind: str) -> None:
    gen = BuiltinProblems(random.Random(3))
    for tier in range(7):
        problem = gen.generate_problem(tier, kind)
        assert problem.kind == kind
        assert problem.tier == tier
        assert float(problem.answer).is_integer()
        assert problem.answer >= 0
        assert gen.check_answer(problem, problem.formatted_answer)
        assert not gen.check_answer(problem, str(problem.answer + 1))


def test_builtin_problem_expression_matches_answer() -> None:
    gen = BuiltinProblems(random.Random(8))
    problem = gen.generate_problem(2, "addition")
    a, b = (int(part) for part in problem.expression.split(" + "))
    assert problem.answer == a + b


def test_tier_follows_difficulty() -> None:
    maths = MathsManager(base_tier=1, rng=random.Random(1))
    assert maths.tier_for_difficulty("easy") == 0
    assert maths.tier_for_difficulty("medium") == 1
    assert maths.tier_for_difficulty("hard") == 2
    assert maths.tier_for_difficulty("cluster") == 3

    maths.set_base_tier(6)
    assert maths.tier_for_difficulty("hard") == 6
    maths.set_base_tier(0)
    assert maths.tier_for_difficulty("easy") == 0


def test_out_of_range_base_tier_is_reset(caplog) -> None:
    maths = MathsManager(rng=random.Random(1))
    with caplog.at_level(logging.WARNING):
        maths.set_base_tier(9)
    assert maths.base_tier == 1
    assert "out of range" in caplog.text


def test_unknown_problem_type_means_all() -> None:
    maths = MathsManager(rng=random.Random(1))
    maths.set_problem_type("calculus")
    assert maths.problem_type == "all"


def test_failing_provider_falls_back_to_builtin(caplog) -> None:
    maths = MathsManager(_BrokenProvider(), rng=random.Random(2))
    with caplog.at_level(logging.WARNING):
        problem = maths.generate_problem_for_difficulty("medium")
    assert problem.tier == 1
    assert problem.expression
    assert "using fallback" in caplog.text


def test_typed_request_retries_without_type() -> None:
    provider = _TypedOnlyFails()
    maths = MathsManager(provider, problem_type="division", rng=random.Random(2))

    problem = maths.generate_problem_for_difficulty("easy")

    assert problem.expression == "1 + 1"
    assert provider.calls == ["division", None]


def test_check_answer_falls_back_to_numeric_comparison(caplog) -> None:
    maths = MathsManager(_BrokenProvider(), rng=random.Random(2))
    problem = Problem(expression="6 × 7", answer=42.0, formatted_answer="42")

    with caplog.at_level(logging.WARNING):
        assert maths.check_answer(problem, "42") is True
        assert maths.check_answer(problem, "41") is False
    assert "numeric comparison" in caplog.text


def test_check_answer_without_problem_is_false(caplog) -> None:
    maths = MathsManager(rng=random.Random(2))
    with caplog.at_level(logging.WARNING):
        assert maths.check_answer(None, "3") is False
    assert "without a problem" in caplog.text


def test_blank_answer_never_matches(maths) -> None:
    problem = Problem(expression="0 + 0", answer=0.0, formatted_answer="0")
    assert maths.check_answer(problem, "") is False
    assert maths.check_answer(problem, "0") is True
