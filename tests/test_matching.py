import random

import pytest

from pairingengine.exceptions import InvalidConfigurationException, PairingConstraintError
from pairingengine.pairing.matching import (
    find_perfect_matching,
    greedy_matching,
    search_matching,
)


def _any(first, second):
    return True


def _covers(pairs, items):
    flat = [item for pair in pairs for item in pair]
    return sorted(flat) == sorted(items)


def test_greedy_pairs_in_order():
    pairs, stranded = greedy_matching(["a", "b", "c", "d"], _any)
    assert pairs == [("a", "b"), ("c", "d")]
    assert stranded == []


def test_greedy_reports_stranded_items():
    def not_with_a(first, second):
        return "a" not in (first, second)

    pairs, stranded = greedy_matching(["a", "b", "c"], not_with_a)
    assert pairs == [("b", "c")]
    assert stranded == ["a"]


def test_perfect_matching_respects_predicate():
    items = [f"t{i}" for i in range(12)]
    forbidden = {frozenset((f"t{i}", f"t{i + 1}")) for i in range(0, 12, 2)}

    def allowed(first, second):
        return frozenset((first, second)) not in forbidden

    pairs = find_perfect_matching(items, allowed, random.Random(7))
    assert _covers(pairs, items)
    assert all(allowed(a, b) for a, b in pairs)


def test_search_finds_the_only_matching():
    # a-b and c-d is the single valid matching
    valid = {frozenset("ab"), frozenset("cd"), frozenset("ac")}

    def allowed(first, second):
        return frozenset((first, second)) in valid

    pairs = find_perfect_matching(list("abcd"), allowed, random.Random(1), max_attempts=0)
    assert {frozenset(pair) for pair in pairs} == {frozenset("ab"), frozenset("cd")}


def test_same_seed_same_matching():
    items = list(range(10))
    first = find_perfect_matching(items, _any, random.Random(42))
    second = find_perfect_matching(items, _any, random.Random(42))
    assert first == second


def test_odd_count_is_a_configuration_error():
    with pytest.raises(InvalidConfigurationException):
        find_perfect_matching(["a", "b", "c"], _any, random.Random(0))


def test_impossible_matching_reports_stranded():
    def not_with_a(first, second):
        return "a" not in (first, second)

    with pytest.raises(PairingConstraintError) as excinfo:
        find_perfect_matching(list("abcd"), not_with_a, random.Random(0))
    assert "a" in excinfo.value.unmatched_ids


def test_search_budget_is_bounded():
    with pytest.raises(PairingConstraintError):
        find_perfect_matching(
            list("abcd"), _any, random.Random(0), max_attempts=0, max_steps=0
        )


def test_deterministic_search_where_greedy_strands():
    # greedy takes a-b first and strands c and d
    valid = {frozenset("ab"), frozenset("ac"), frozenset("bd")}

    def allowed(first, second):
        return frozenset((first, second)) in valid

    assert greedy_matching(list("abcd"), allowed)[1] == ["c", "d"]
    pairs = search_matching(list("abcd"), allowed)
    assert {frozenset(pair) for pair in pairs} == {frozenset("ac"), frozenset("bd")}


def test_deterministic_search_returns_none_without_matching():
    assert search_matching(list("abc"), _any) is None
    assert search_matching(list("abcd"), lambda a, b: "a" not in (a, b)) is None
    assert search_matching([], _any) == []
