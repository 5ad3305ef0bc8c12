"""
Candidate scorer tests - relevance gate, bonuses, generic penalty, absolute selection.
"""

import pytest

from candidate_scorer import (
    ImageCandidate,
    is_generic,
    minimum_score_for,
    score_candidate,
    select_best,
    text_relevance,
)
from visual_config import DEFAULT_SCORING_WEIGHTS, ScoringWeights


def _portrait(alt: str, url: str = "https://img/p.jpg") -> ImageCandidate:
    return ImageCandidate(url=url, alt_text=alt, width=2400, height=3600)


def test_irrelevant_stock_photo_scores_zero():
    cand = _portrait("business meeting stock photo")
    assert score_candidate(cand, ["robot", "ai"], 0) == 0.0
    assert select_best([cand], ["robot", "ai"], segment_index=1) is None


def test_perfect_candidate_hits_theoretical_max():
    cand = _portrait("Red Tesla car parked on the street")
    assert score_candidate(cand, ["tesla", "car"], 0) == pytest.approx(66.0)


def test_landscape_and_resolution_are_scaled():
    cand = ImageCandidate(url="u", alt_text="tesla car", width=1400, height=900)
    # 50 relevance + 2.4 landscape + 3 resolution (halfway) + 3.2 position(1)
    assert score_candidate(cand, ["tesla", "car"], 1) == pytest.approx(58.6)


def test_square_gets_half_orientation_bonus():
    cand = ImageCandidate(url="u", alt_text="tesla car", width=2000, height=2000)
    assert score_candidate(cand, ["tesla", "car"], 0) == pytest.approx(50 + 3 + 6 + 4)


def test_small_images_get_no_resolution_points():
    cand = ImageCandidate(url="u", alt_text="tesla car", width=640, height=960)
    assert score_candidate(cand, ["tesla", "car"], 0) == pytest.approx(50 + 6 + 0 + 4)


def test_position_bonus_decays_to_zero():
    cand = _portrait("tesla")
    assert score_candidate(cand, ["tesla"], 5) == pytest.approx(62.0)
    assert score_candidate(cand, ["tesla"], 9) == pytest.approx(62.0)


def test_relevance_below_gate_scores_zero():
    # 1 of 7 keywords = 7.1 pts < 8
    kws = ["tesla", "zebra", "volcano", "guitar", "piano", "banana", "castle"]
    assert text_relevance("tesla", kws) < DEFAULT_SCORING_WEIGHTS.min_text_relevance
    assert score_candidate(_portrait("tesla"), kws, 0) == 0.0


def test_empty_keywords_score_zero():
    assert score_candidate(_portrait("anything"), [], 0) == 0.0


def test_generic_penalty_applies():
    assert is_generic("Futuristic robot in neon light")
    assert not is_generic("Red Tesla car")
    cand = _portrait("Futuristic robot on stage")
    assert score_candidate(cand, ["robot"], 0) == pytest.approx(66 - 20)


def test_score_is_floored_at_zero():
    kws = ["robot", "zebra", "volcano", "guitar", "piano", "banana"]
    cand = ImageCandidate(url="u", alt_text="glowing robot", width=500, height=300)
    assert score_candidate(cand, kws, 5) == 0.0


def test_first_segment_threshold_is_stricter():
    assert minimum_score_for(0) == 45
    assert minimum_score_for(1) == 35
    assert minimum_score_for(2) == 35
    assert minimum_score_for(0) >= minimum_score_for(1)


def test_first_threshold_never_below_regular_one():
    w = ScoringWeights(minimum_score=50, first_image_min_score=40)
    assert w.first_image_min_score == 50
    assert minimum_score_for(0, w) >= minimum_score_for(1, w)


def test_ideal_width_must_exceed_minimum_width():
    with pytest.raises(ValueError):
        ScoringWeights(minimum_width=2000, ideal_width=1000)


def test_candidate_between_thresholds_depends_on_segment():
    # 25 relevance + 6 + 6 + 4 = 41
    cand = ImageCandidate(url="u", alt_text="tesla", width=2000, height=3000)
    assert score_candidate(cand, ["tesla", "car"], 0) == pytest.approx(41.0)
    assert select_best([cand], ["tesla", "car"], segment_index=1) is not None
    assert select_best([cand], ["tesla", "car"], segment_index=0) is None


def test_select_best_picks_highest_score():
    cands = [
        ImageCandidate(url="a", alt_text="tesla", width=800, height=600),
        _portrait("tesla car at night", url="b"),
        _portrait("business meeting", url="c"),
    ]
    best = select_best(cands, ["tesla", "car"])
    assert best is not None
    assert best.url == "b"
    assert best.position == 1
    assert best.alt == "tesla car at night"


def test_select_best_keeps_earliest_on_tie():
    filler = [ImageCandidate(url=f"x{i}", alt_text="nothing", width=100, height=100) for i in range(5)]
    tied = [_portrait("tesla", url="first"), _portrait("tesla", url="second")]
    best = select_best(filler + tied, ["tesla"])
    assert best is not None
    assert best.url == "first"
    assert best.position == 5


def test_select_best_empty():
    assert select_best([], ["tesla"]) is None
