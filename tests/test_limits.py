import pytest

from colmena.limits import (
    EVAL_PER_HOST_MB,
    EVAL_RESERVE_MB,
    EvaluationNodeLimit,
    ParallelismLimit,
    available_memory_kb,
    heuristic_limit,
)


def test_parse_auto_is_heuristic():
    assert EvaluationNodeLimit.parse("auto") == EvaluationNodeLimit()
    assert str(EvaluationNodeLimit()) == "auto"


@pytest.mark.parametrize("text", ["auto", "0", "7", "128"])
def test_display_round_trip(text):
    assert str(EvaluationNodeLimit.parse(text)) == text


def test_zero_means_unlimited():
    assert EvaluationNodeLimit.parse("0").get_limit() is None


def test_manual_limit():
    assert EvaluationNodeLimit.parse("7").get_limit() == 7


@pytest.mark.parametrize("bad", ["", "-1", "abc", "1.5", "auto "])
def test_parse_rejects_invalid(bad):
    with pytest.raises(ValueError, match="valid number or `auto`"):
        EvaluationNodeLimit.parse(bad)


def test_heuristic_limit_is_at_least_one():
    assert heuristic_limit(0) == 1
    assert heuristic_limit(EVAL_RESERVE_MB * 1024) == 1


def test_heuristic_limit_reserves_memory():
    per_host_kb = EVAL_PER_HOST_MB * 1024
    reserve_kb = EVAL_RESERVE_MB * 1024
    for hosts in (2, 5, 17):
        assert heuristic_limit(reserve_kb + hosts * per_host_kb) == hosts


def test_heuristic_limit_is_monotonic():
    values = [heuristic_limit(kb) for kb in range(0, 16 * 1024 * 1024, 100_000)]
    assert values == sorted(values)


def test_heuristic_get_limit_is_positive():
    limit = EvaluationNodeLimit().get_limit()
    assert isinstance(limit, int) and limit >= 1
    memory = available_memory_kb()
    if memory is not None:
        assert limit == heuristic_limit(memory)


def test_parallelism_defaults():
    limit = ParallelismLimit()
    assert limit.evaluation_limit == 1
    assert limit.apply_limit == 10


def test_with_apply_limit_keeps_evaluation():
    limit = ParallelismLimit(evaluation=2).with_apply_limit(3)
    assert limit.apply_limit == 3
    assert limit.evaluation_limit == 2


@pytest.mark.asyncio
async def test_apply_semaphore_enforces_limit():
    limit = ParallelismLimit().with_apply_limit(1)
    assert not limit.apply.locked()
    await limit.apply.acquire()
    assert limit.apply.locked()
    limit.apply.release()
    assert not limit.apply.locked()