"""Unit tests for the utilization -> score impact heuristic"""

import pytest
from credit_optimizer.domain.models import NO_IMPACT, ScoreRange
from credit_optimizer.domain.policy import OptimizerPolicy
from credit_optimizer.domain.score_impact import (
    INCREASE_BANDS,
    IMPROVEMENT_BANDS,
    estimate_score_impact,
    find_band,
    severity_multiplier,
)


@pytest.mark.parametrize("starting", [0, 10, 45.45, 99])
def test_no_change_has_no_impact(starting):
    """Test zero improvement is always {0, 0}"""
    assert estimate_score_impact(0, starting) == NO_IMPACT


def test_small_increase():
    assert estimate_score_impact(-3) == ScoreRange(min=-15, max=-5)


def test_increase_band_boundary_is_inclusive():
    """Test a 5-point rise still falls in the first band"""
    assert estimate_score_impact(-5) == ScoreRange(min=-15, max=-5)
    assert estimate_score_impact(-5.01) == ScoreRange(min=-25, max=-10)


def test_large_increase_uses_last_band():
    assert estimate_score_impact(-50) == ScoreRange(min=-120, max=-90)


def test_increase_ignores_starting_utilization():
    """Test severity scaling applies to gains only"""
    assert estimate_score_impact(-15, 80) == estimate_score_impact(-15, 5)


def test_improvement_scaled_by_severity():
    """Test 40-point drop from a 30%+ start: {50, 75} x 0.85, rounded half up"""
    assert estimate_score_impact(40, 45) == ScoreRange(min=43, max=64)


def test_improvement_from_low_start():
    """Test {5, 12} x 0.6"""
    assert estimate_score_impact(3, 5) == ScoreRange(min=3, max=7)


def test_improvement_capped():
    """Test maximum is capped at 150 points"""
    impact = estimate_score_impact(60, 80)

    assert impact.min == 111  # 85 x 1.3 = 110.5
    assert impact.max == 150  # 120 x 1.3 = 156


def test_cap_comes_from_policy():
    policy = OptimizerPolicy(max_positive_impact=100)
    assert estimate_score_impact(60, 80, policy) == ScoreRange(min=100, max=100)


def test_severity_multiplier_tiers():
    assert severity_multiplier(75) == 1.3
    assert severity_multiplier(70) == 1.3
    assert severity_multiplier(55) == 1.1
    assert severity_multiplier(30) == 0.85
    assert severity_multiplier(29.9) == 0.6


def test_bands_are_ascending():
    for bands in (INCREASE_BANDS, IMPROVEMENT_BANDS):
        thresholds = [band.threshold for band in bands]
        assert thresholds == sorted(thresholds)


def test_find_band():
    assert find_band(12, IMPROVEMENT_BANDS).threshold == 20
    assert find_band(1000, IMPROVEMENT_BANDS).threshold == float("inf")
