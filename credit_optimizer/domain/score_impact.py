"""
Heuristic credit score impact of a change in overall utilization.

Utilization drives roughly 30% of a FICO score. These bands approximate how many
points move when overall utilization changes; they are documented ranges, not a
certified scoring model.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

from credit_optimizer.domain.models import NO_IMPACT, ScoreRange
from credit_optimizer.domain.policy import DEFAULT_POLICY, OptimizerPolicy
from credit_optimizer.utils.math_utils import round_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImpactBand:
    """Points range for changes of up to ``threshold`` percentage points"""

    threshold: float
    min: int
    max: int


@dataclass(frozen=True)
class SeverityTier:
    """Multiplier applied when starting utilization is at least ``floor`` percent"""

    floor: float
    multiplier: float


# Utilization went up: magnitude of the increase -> points lost
INCREASE_BANDS: List[ImpactBand] = [
    ImpactBand(threshold=5, min=-15, max=-5),
    ImpactBand(threshold=10, min=-25, max=-10),
    ImpactBand(threshold=20, min=-45, max=-25),
    ImpactBand(threshold=30, min=-70, max=-45),
    ImpactBand(threshold=40, min=-90, max=-70),
    ImpactBand(threshold=float("inf"), min=-120, max=-90),
]

# Utilization went down: size of the drop -> points gained, before severity scaling
IMPROVEMENT_BANDS: List[ImpactBand] = [
    ImpactBand(threshold=5, min=5, max=12),
    ImpactBand(threshold=10, min=10, max=20),
    ImpactBand(threshold=20, min=20, max=35),
    ImpactBand(threshold=30, min=35, max=55),
    ImpactBand(threshold=40, min=50, max=75),
    ImpactBand(threshold=50, min=65, max=95),
    ImpactBand(threshold=float("inf"), min=85, max=120),
]

# Same drop is worth more when recovering from a worse position. Highest floor first.
SEVERITY_TIERS: List[SeverityTier] = [
    SeverityTier(floor=70, multiplier=1.3),
    SeverityTier(floor=50, multiplier=1.1),
    SeverityTier(floor=30, multiplier=0.85),
    SeverityTier(floor=0, multiplier=0.6),
]


def find_band(magnitude: float, bands: Sequence[ImpactBand]) -> ImpactBand:
    """First band (ascending) whose threshold covers the magnitude"""
    for band in bands:
        if magnitude <= band.threshold:
            return band
    return bands[-1]


def severity_multiplier(starting_utilization: float) -> float:
    for tier in SEVERITY_TIERS:
        if starting_utilization >= tier.floor:
            return tier.multiplier
    return SEVERITY_TIERS[-1].multiplier


def estimate_score_impact(
    utilization_improvement: float,
    starting_utilization: float = 50.0,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> ScoreRange:
    """
    Estimate the score change for a drop (positive) or rise (negative) in utilization.

    Args:
        utilization_improvement: Percentage points utilization fell by (negative = rose)
        starting_utilization: Overall utilization before the change; scales gains only
        policy: Supplies the cap on positive estimates

    Returns:
        ScoreRange in points; {0, 0} when nothing changed

    Example:
        45% -> 5% overall is a 40-point drop from a 30%+ start:
        band {50, 75} x 0.85 -> {43, 64}
    """
    if utilization_improvement == 0:
        return NO_IMPACT

    if utilization_improvement < 0:
        band = find_band(abs(utilization_improvement), INCREASE_BANDS)
        return ScoreRange(min=band.min, max=band.max)

    band = find_band(utilization_improvement, IMPROVEMENT_BANDS)
    multiplier = severity_multiplier(starting_utilization)
    cap = policy.max_positive_impact

    estimate = ScoreRange(
        min=min(round_points(band.min * multiplier), cap),
        max=min(round_points(band.max * multiplier), cap),
    )
    logger.debug(
        "Score impact for %.2f pt improvement from %.2f%%: x%s -> %s",
        utilization_improvement,
        starting_utilization,
        multiplier,
        estimate,
    )
    return estimate
