"""Tests for external item name matching."""

import uuid

import pytest

from breadpos.core.similarity import (
    AUTO_MATCH_THRESHOLD,
    MatchCandidate,
    best_match,
    name_similarity,
    normalize_name,
)


def test_normalize_collapses_punctuation_and_case():
    assert normalize_name("  Ube-Cheese   PANDESAL!! ") == "ube cheese pandesal"
    assert normalize_name("") == ""


@pytest.mark.parametrize(
    "a,b,expected",
    [
        ("Pandesal", "pandesal", 1.0),
        ("Spanish Bread (6pc)", "Spanish Bread", 0.9),
        ("", "Pandesal", 0.0),
    ],
)
def test_name_similarity_rules(a, b, expected):
    assert name_similarity(a, b) == expected


def test_character_overlap_is_symmetric_and_bounded():
    score = name_similarity("Ensaymada", "Ensaimada")
    assert score == name_similarity("Ensaimada", "Ensaymada")
    assert 0.0 < score < 1.0
    assert score >= AUTO_MATCH_THRESHOLD


def test_unrelated_names_score_low():
    assert name_similarity("Pandesal", "Ube Cake") < AUTO_MATCH_THRESHOLD


def test_best_match_prefers_highest_score():
    candidates = [
        MatchCandidate(uuid.uuid4(), "Ube Cake"),
        MatchCandidate(uuid.uuid4(), "Pandesal"),
    ]

    match = best_match("PANDESAL", candidates)

    assert match.candidate.product_name == "Pandesal"
    assert match.score == 1.0
    assert match.is_auto


def test_best_match_ties_keep_catalog_order():
    first = MatchCandidate(uuid.uuid4(), "Cheese Roll")
    second = MatchCandidate(uuid.uuid4(), "Cheese Roll")

    match = best_match("cheese roll", [first, second])

    assert match.candidate is first


def test_variant_label_is_matched():
    product_id = uuid.uuid4()
    candidates = [
        MatchCandidate(product_id, "Cheese Roll"),
        MatchCandidate(product_id, "Cheese Roll", variant_index=1, variant_name="Box of 6"),
    ]

    match = best_match("Cheese Roll Box of 6", candidates)

    assert match.candidate.variant_index == 1
    assert match.score == 1.0


def test_best_match_without_candidates():
    assert best_match("Pandesal", []) is None
