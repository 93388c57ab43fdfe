import pytest

from proxybench.bench.models import Result
from proxybench.errors import ConfigurationError
from proxybench.ranking import (
    SORT_BANDWIDTH,
    SORT_TTFB,
    compile_filter,
    normalize_sort_field,
    rank,
    select_names,
)


def _result(name, bandwidth, ttfb):
    return Result(name=name, bandwidth=bandwidth, ttfb=ttfb)


def test_select_names_uses_search_and_sorts():
    names = {"HK 02", "JP 01", "HK 01", "US west"}

    assert select_names(names, "HK") == ["HK 01", "HK 02"]
    assert select_names(names, ".*") == ["HK 01", "HK 02", "JP 01", "US west"]
    assert select_names(names, "^nothing$") == []


def test_compile_filter_rejects_invalid_regex():
    with pytest.raises(ConfigurationError):
        compile_filter("([unclosed")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("b", SORT_BANDWIDTH),
        ("bandwidth", SORT_BANDWIDTH),
        ("T", SORT_TTFB),
        (" ttfb ", SORT_TTFB),
    ],
)
def test_normalize_sort_field_aliases(raw, expected):
    assert normalize_sort_field(raw) == expected


@pytest.mark.parametrize("raw", ["", "latency", "x"])
def test_normalize_sort_field_rejects_unknown(raw):
    with pytest.raises(ConfigurationError):
        normalize_sort_field(raw)


def test_rank_by_bandwidth_descending_with_unavailable_last():
    results = [
        _result("slow", 100.0, 0.3),
        Result.unavailable("dead"),
        _result("fast", 5000.0, 0.5),
        _result("mid", 1000.0, 0.1),
    ]

    assert [r.name for r in rank(results, "b")] == ["fast", "mid", "slow", "dead"]


def test_rank_by_ttfb_ascending_with_unavailable_last():
    results = [
        Result.unavailable("dead"),
        _result("slow", 100.0, 0.3),
        _result("fast", 5000.0, 0.5),
        _result("mid", 1000.0, 0.1),
    ]

    assert [r.name for r in rank(results, "ttfb")] == ["mid", "slow", "fast", "dead"]


def test_rank_is_stable_for_ties():
    results = [
        _result("first", 10.0, 0.2),
        _result("second", 10.0, 0.2),
        Result.unavailable("dead-1"),
        Result.unavailable("dead-2"),
    ]

    assert [r.name for r in rank(results, SORT_BANDWIDTH)] == ["first", "second", "dead-1", "dead-2"]
    assert [r.name for r in rank(results, SORT_TTFB)] == ["first", "second", "dead-1", "dead-2"]


def test_rank_does_not_mutate_input():
    results = [_result("a", 1.0, 0.1), _result("b", 2.0, 0.2)]

    rank(results, "b")

    assert [r.name for r in results] == ["a", "b"]
