import sys

import pytest

from f1_finish.modules.resolve import (
    NOT_FOUND,
    EntityNotFound,
    resolve,
    resolve_entity,
    substring_distance,
    suggest,
)
from f1_finish.utils import SUGGESTION_LIMIT


def test_substring_tier():
    assert resolve("ham", ["lewis_hamilton", "max_verstappen"]) == "lewis_hamilton"


def test_exact_tier_beats_substring():
    choices = ["lewis_hamilton", "hamilton"]
    assert resolve("hamilton", choices) == "hamilton"
    assert resolve("  HAMILTON ", choices) == "hamilton"


def test_exact_tier_skips_approximate(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("approximate tier should not run")

    monkeypatch.setattr(sys.modules["f1_finish.modules.resolve"], "substring_distance", fail)
    assert resolve("hamilton", ["hamilton", "hamiltom"]) == "hamilton"


def test_returns_original_casing():
    assert resolve("silverstone", ["Silverstone Circuit", "Monza"]) == "Silverstone Circuit"


def test_resolution_is_idempotent():
    choices = ["max_verstappen", "verstappen", "lewis_hamilton"]
    for query in ["max", "VERST", "hamiltn"]:
        match = resolve(query, choices)
        assert match is not NOT_FOUND
        assert resolve(match, choices) == match


def test_ties_follow_choice_order():
    assert resolve("red", ["red_bull", "redbull_racing"]) == "red_bull"
    assert resolve("red", ["redbull_racing", "red_bull"]) == "redbull_racing"


def test_approximate_tier_allows_small_typos():
    assert resolve("verstapen", ["lewis_hamilton", "max_verstappen"]) == "max_verstappen"
    assert resolve("monze", ["Silverstone Circuit", "Autodromo Nazionale di Monza"]) == "Autodromo Nazionale di Monza"


def test_approximate_tier_rejects_distant_queries():
    assert resolve("nonexistent_driver_zzz", ["lewis_hamilton", "max_verstappen"]) is NOT_FOUND


def test_empty_query_is_not_found():
    assert resolve("", ["hamilton"]) is NOT_FOUND
    assert resolve("   ", ["hamilton"]) is NOT_FOUND
    assert resolve(None, ["hamilton"]) is NOT_FOUND


def test_substring_distance():
    assert substring_distance("monza", "autodromo nazionale di monza") == 0
    assert substring_distance("monze", "monza") == 1
    assert substring_distance("abc", "") == 3


def test_not_found_carries_capped_suggestions():
    choices = [f"driver_{i:02d}" for i in range(30)]
    with pytest.raises(EntityNotFound) as err:
        resolve_entity("driver", "nonexistent_driver_zzz", choices)
    assert err.value.kind == "driver"
    assert err.value.query == "nonexistent_driver_zzz"
    assert 0 < len(err.value.suggestions) <= SUGGESTION_LIMIT
    assert err.value.suggestions == choices[:SUGGESTION_LIMIT]


def test_suggest_short_list():
    assert suggest(["a", "b"]) == ["a", "b"]
