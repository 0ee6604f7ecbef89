"""Tests for backend.analysis.scorer."""

from __future__ import annotations

import pytest

from backend.analysis.scorer import CRITERIA, MAX_WEIGHT, score, score_breakdown


def test_weights_sum_to_100() -> None:
    assert MAX_WEIGHT == 100
    assert sum(c.weight for c in CRITERIA) == 100


def test_perfect_page_scores_100(make_facts) -> None:
    facts = make_facts()
    assert score(facts) == 100
    assert all(passed for _, _, passed in score_breakdown(facts))


def test_score_is_deterministic(make_facts) -> None:
    facts = make_facts(title={"is_optimal": False}, links={"broken": 2})
    assert {score(facts) for _ in range(5)} == {75}


@pytest.mark.parametrize(
    "overrides, lost",
    [
        ({"status": {"is_success": False, "status_code": 500}}, 15),
        ({"title": {"exists": False}}, 15),
        ({"title": {"is_optimal": False}}, 15),
        ({"h1": {"count": 2}}, 10),
        ({"h1": {"count": 0}}, 10),
        ({"meta": {"exists": False}}, 15),
        ({"meta": {"is_optimal": False}}, 15),
        ({"images": {"percentage": 79}}, 10),
        ({"canonical": {"exists": False}}, 10),
        ({"links": {"broken": 1}}, 10),
        ({"url_shape": {"is_short": False}}, 15),
        ({"url_shape": {"is_readable": False}}, 15),
    ],
)
def test_each_criterion_is_binary(make_facts, overrides, lost) -> None:
    assert score(make_facts(**overrides)) == 100 - lost


def test_image_coverage_threshold_is_inclusive(make_facts) -> None:
    assert score(make_facts(images={"percentage": 80})) == 100


def test_worst_page_scores_zero(make_facts) -> None:
    facts = make_facts(
        status={"is_success": False},
        title={"exists": False},
        h1={"count": 0},
        meta={"exists": False},
        images={"percentage": 0},
        canonical={"exists": False},
        links={"broken": 3},
        url_shape={"is_readable": False},
    )
    assert score(facts) == 0


def test_breakdown_names_follow_checklist_order(make_facts) -> None:
    names = [name for name, _, _ in score_breakdown(make_facts())]
    assert names == [
        "http_success",
        "title",
        "h1",
        "meta_description",
        "image_alt",
        "canonical",
        "link_health",
        "url_shape",
    ]
