"""Priority scoring - which card should the next payment dollar go to"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import List, Sequence

from credit_optimizer.domain.models import Card, PriorityBreakdown, PriorityScore
from credit_optimizer.domain.policy import DEFAULT_POLICY, OptimizerPolicy
from credit_optimizer.utils.date_utils import days_until, next_occurrence
from credit_optimizer.utils.math_utils import round_points

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UtilizationTier:
    threshold: float  # applies when utilization is above this
    score: int
    reason: str


@dataclass(frozen=True)
class UrgencyTier:
    days: float  # applies when the statement is at most this many days away
    score: int


@dataclass(frozen=True)
class NearThresholdBonus:
    lower: float  # exclusive
    upper: float  # inclusive
    bonus: int
    reason: str


UTILIZATION_TIERS: List[UtilizationTier] = [
    UtilizationTier(threshold=90, score=40, reason="Critical: Over 90% utilization"),
    UtilizationTier(threshold=75, score=35, reason="Very high utilization (over 75%)"),
    UtilizationTier(threshold=50, score=30, reason="High utilization (over 50%)"),
    UtilizationTier(threshold=30, score=20, reason="Above optimal threshold (30%)"),
    UtilizationTier(threshold=10, score=10, reason="In acceptable range but not optimal"),
    UtilizationTier(threshold=float("-inf"), score=5, reason="Already in optimal range"),
]

# One small payment away from crossing a scoring boundary
NEAR_THRESHOLD_BONUSES: List[NearThresholdBonus] = [
    NearThresholdBonus(lower=30, upper=35, bonus=5, reason="Just above 30% threshold - easy win"),
    NearThresholdBonus(lower=50, upper=55, bonus=3, reason="Just above 50% - high impact opportunity"),
]

TIME_URGENCY_TIERS: List[UrgencyTier] = [
    UrgencyTier(days=3, score=20),
    UrgencyTier(days=7, score=15),
    UrgencyTier(days=14, score=10),
    UrgencyTier(days=float("inf"), score=5),
]

APR_WEIGHT_MAX = 25
CREDIT_LIMIT_WEIGHT_MAX = 15


def effective_apr(card: Card, policy: OptimizerPolicy = DEFAULT_POLICY) -> float:
    """Card APR, or the policy default when the card has none on file"""
    return card.apr if card.apr is not None else policy.default_apr


def _utilization_component(utilization: float, reasoning: List[str]) -> int:
    tier = next(t for t in UTILIZATION_TIERS if utilization > t.threshold)
    score = tier.score
    reasoning.append(tier.reason)

    for bonus in NEAR_THRESHOLD_BONUSES:
        if bonus.lower < utilization <= bonus.upper:
            score += bonus.bonus
            reasoning.append(bonus.reason)

    return score


def _apr_component(apr: float, max_apr: float, reasoning: List[str]) -> int:
    if apr > 25:
        reasoning.append(f"Very high APR ({apr:.2f}%)")
    elif apr > 20:
        reasoning.append(f"High APR ({apr:.2f}%)")
    elif apr > 15:
        reasoning.append(f"Moderate APR ({apr:.2f}%)")

    if max_apr <= 0:
        return 0
    return round_points(apr / max_apr * APR_WEIGHT_MAX)


def _urgency_component(days_to_statement: int, reasoning: List[str]) -> int:
    tier = next(t for t in TIME_URGENCY_TIERS if days_to_statement <= t.days)

    if tier is TIME_URGENCY_TIERS[0]:
        reasoning.append(f"Urgent: Statement closes in {days_to_statement} days")
    elif days_to_statement <= 7:
        reasoning.append(f"Statement closes soon ({days_to_statement} days)")
    elif days_to_statement <= 14:
        reasoning.append(f"Statement closes in {days_to_statement} days")
    else:
        reasoning.append("Statement date not urgent")

    return tier.score


def _credit_limit_component(limit: float, max_limit: float, reasoning: List[str]) -> int:
    if limit >= 10_000:
        reasoning.append(f"Large credit limit (${limit / 1000:.0f}k) - high score impact")
    elif limit >= 5_000:
        reasoning.append(f"Medium credit limit (${limit / 1000:.0f}k)")

    if max_limit <= 0:
        return 0
    return round_points(limit / max_limit * CREDIT_LIMIT_WEIGHT_MAX)


def score_card(
    card: Card,
    all_cards: Sequence[Card],
    reference_date: date | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> PriorityScore:
    """
    Weighted priority (0-100) for one card relative to the rest of the set.

    Components:
    - Utilization impact (0-40): tiered, plus near-threshold bonuses
    - APR weight (0-25): card APR relative to the highest APR in the set
    - Time urgency (0-20): days until the next statement date
    - Credit-limit weight (0-15): limit relative to the largest limit in the set

    Reasoning strings are explanatory only; they do not feed the score.
    """
    today = reference_date or date.today()
    reasoning: List[str] = []

    max_apr = max((effective_apr(c, policy) for c in all_cards), default=0.0)
    max_limit = max((c.credit_limit for c in all_cards), default=0.0)
    days_to_statement = days_until(next_occurrence(card.statement_day, today), today)

    breakdown = PriorityBreakdown(
        utilization_impact=_utilization_component(card.utilization, reasoning),
        apr_weight=_apr_component(effective_apr(card, policy), max_apr, reasoning),
        time_urgency=_urgency_component(days_to_statement, reasoning),
        credit_limit_weight=_credit_limit_component(card.credit_limit, max_limit, reasoning),
    )
    total = (
        breakdown.utilization_impact
        + breakdown.apr_weight
        + breakdown.time_urgency
        + breakdown.credit_limit_weight
    )

    return PriorityScore(
        card_id=card.card_id,
        total_score=total,
        breakdown=breakdown,
        reasoning=reasoning,
    )


def rank_by_priority(
    cards: Sequence[Card],
    reference_date: date | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> List[PriorityScore]:
    """Score every card and rank them 1..N by descending score (ties keep input order)"""
    scores = [score_card(card, cards, reference_date, policy) for card in cards]
    ordered = sorted(scores, key=lambda score: score.total_score, reverse=True)
    ranked = [replace(score, rank=position) for position, score in enumerate(ordered, start=1)]

    logger.debug("Priority ranking: %s", [(s.card_id, s.total_score) for s in ranked])
    return ranked
