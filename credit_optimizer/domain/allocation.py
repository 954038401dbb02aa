"""
Budget allocation strategies.

Every strategy first covers each card's minimum payment, then distributes what is
left of the budget by its own policy. A budget below the sum of minimums is
rejected up front with InsufficientBudgetError.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Sequence

from credit_optimizer.domain.exceptions import InsufficientBudgetError, UnknownStrategyError
from credit_optimizer.domain.models import (
    AllocationStrategy,
    Card,
    CardAllocation,
    ImpactSummary,
    StrategyType,
    utilization,
)
from credit_optimizer.domain.policy import DEFAULT_POLICY, OptimizerPolicy
from credit_optimizer.domain.portfolio import summarize
from credit_optimizer.domain.priority import effective_apr, rank_by_priority
from credit_optimizer.utils.math_utils import round_half_up, round_points

logger = logging.getLogger(__name__)

# Float noise left over after subtracting payments
_EPSILON = 1e-9

# Paid down in this order by the max-score strategy
MAX_SCORE_THRESHOLDS = [90, 75, 50, 30, 10, 0]


@dataclass(frozen=True)
class CrossingBonus:
    threshold: float
    bonus: int


# Points for dropping from above to at/below a threshold in one payment event
CROSSING_BONUSES: List[CrossingBonus] = [
    CrossingBonus(threshold=90, bonus=30),
    CrossingBonus(threshold=75, bonus=20),
    CrossingBonus(threshold=50, bonus=15),
    CrossingBonus(threshold=30, bonus=25),
    CrossingBonus(threshold=10, bonus=15),
]

PAYMENT_EVENT_POINTS_PER_PERCENT = 0.5


def minimum_payment(card: Card, policy: OptimizerPolicy = DEFAULT_POLICY) -> float:
    """Issuer-style minimum: 2% of balance, at least $25, never more than the balance"""
    floor_or_ratio = max(policy.minimum_payment_floor, card.current_balance * policy.minimum_payment_ratio)
    return min(card.current_balance, floor_or_ratio)


def estimate_payment_event_impact(utilization_before: float, utilization_after: float) -> int:
    """
    Coarse score estimate for a single budget event.

    Bonus points for each threshold crossed (15-30) plus 0.5 point per percentage
    point of improvement. Never negative. Independent of the band table in
    score_impact, which estimates portfolio-level moves.
    """
    score = 0.0
    for crossing in CROSSING_BONUSES:
        if utilization_before > crossing.threshold >= utilization_after:
            score += crossing.bonus

    score += (utilization_before - utilization_after) * PAYMENT_EVENT_POINTS_PER_PERCENT
    return round_points(max(score, 0.0))


def calculate_impact(
    cards: Sequence[Card],
    allocations: Sequence[CardAllocation],
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> ImpactSummary:
    """Summarize what a set of allocations does to the portfolio"""
    totals = summarize(cards)
    balance_after = sum(a.new_balance for a in allocations)
    total_paid = sum(a.amount for a in allocations)

    before = totals.overall_utilization
    after = utilization(balance_after, totals.total_credit_limit)

    interest_saved = 0.0
    for card, allocation in zip(cards, allocations):
        reduction = card.current_balance - allocation.new_balance
        interest_saved += reduction * effective_apr(card, policy) / 100 / 12

    # Theoretical payment that brings every card to the target utilization
    optimal_payment = totals.total_balance - totals.total_credit_limit * policy.target_utilization
    if optimal_payment <= 0:
        percent_of_optimal = 100.0
    else:
        percent_of_optimal = min(total_paid / optimal_payment * 100, 100.0)

    return ImpactSummary(
        total_payment=round_half_up(total_paid, 2),
        overall_utilization_before=round_half_up(before, 1),
        overall_utilization_after=round_half_up(after, 1),
        estimated_score_impact=estimate_payment_event_impact(before, after),
        interest_saved=round_half_up(interest_saved, 2),
        cards_under_30_percent=sum(1 for a in allocations if a.new_utilization < 30),
        cards_optimal=sum(1 for a in allocations if a.new_utilization < 10),
        percent_of_optimal_achieved=round_points(percent_of_optimal),
    )


def validate_budget(cards: Sequence[Card], total_budget: float, policy: OptimizerPolicy = DEFAULT_POLICY) -> float:
    """
    Check the budget covers every minimum payment.

    Returns: budget remaining after minimums
    Raises: InsufficientBudgetError with the shortfall
    """
    required = sum(minimum_payment(card, policy) for card in cards)
    if round(total_budget, 2) < round(required, 2):
        logger.warning(
            "Budget %.2f below required minimums %.2f",
            total_budget,
            required,
        )
        raise InsufficientBudgetError(total_budget, required)
    return total_budget - required


def _initial_allocations(cards: Sequence[Card], policy: OptimizerPolicy) -> List[CardAllocation]:
    allocations = []
    for card in cards:
        minimum = minimum_payment(card, policy)
        new_balance = card.current_balance - minimum
        allocations.append(
            CardAllocation(
                card_id=card.card_id,
                card_name=card.name,
                amount=minimum,
                new_balance=new_balance,
                new_utilization=utilization(new_balance, card.credit_limit),
                priority_rank=0,
                reasoning="Minimum payment",
            )
        )
    return allocations


def _apply_payment(allocation: CardAllocation, additional: float, card: Card, reasoning: str) -> float:
    """Add up to ``additional`` to an allocation, never past the card's balance. Returns amount applied."""
    payment = min(additional, allocation.new_balance)
    if payment <= _EPSILON:
        return 0.0

    allocation.amount += payment
    allocation.new_balance -= payment
    allocation.new_utilization = utilization(allocation.new_balance, card.credit_limit)
    allocation.reasoning = reasoning
    return payment


def _pay_in_order(
    ordered_cards: Sequence[Card],
    allocations_by_id: Dict[str, CardAllocation],
    remaining: float,
    reasoning: Callable[[Card], str],
) -> float:
    """Pour the remaining budget into cards one at a time, paying each off before the next"""
    for card in ordered_cards:
        if remaining <= _EPSILON:
            break
        remaining -= _apply_payment(allocations_by_id[card.card_id], remaining, card, reasoning(card))
    return remaining


def allocate_for_max_score(
    cards: Sequence[Card],
    total_budget: float,
    reference_date: date | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> AllocationStrategy:
    """
    Greedy threshold paydown for the largest score gain.

    For each threshold 90 -> 75 -> 50 -> 30 -> 10 -> 0, cards still above it are
    paid toward it in priority order until it is met or the budget runs out.
    Anything left goes to the highest-priority cards until they reach zero.
    """
    remaining = validate_budget(cards, total_budget, policy)
    allocations = _initial_allocations(cards, policy)
    priorities = {score.card_id: score for score in rank_by_priority(cards, reference_date, policy)}
    cards_by_id = {card.card_id: card for card in cards}

    def by_priority(allocs: Sequence[CardAllocation]) -> List[CardAllocation]:
        return sorted(allocs, key=lambda a: priorities[a.card_id].total_score, reverse=True)

    for threshold in MAX_SCORE_THRESHOLDS:
        if remaining <= _EPSILON:
            break

        reason = f"Get under {threshold}% utilization" if threshold else "Pay off remaining balance"
        for allocation in by_priority([a for a in allocations if a.new_utilization > threshold]):
            if remaining <= _EPSILON:
                break
            card = cards_by_id[allocation.card_id]
            to_threshold = allocation.new_balance - card.credit_limit * threshold / 100
            remaining -= _apply_payment(allocation, min(remaining, to_threshold), card, reason)

    for allocation in by_priority(allocations):
        if remaining <= _EPSILON:
            break
        card = cards_by_id[allocation.card_id]
        remaining -= _apply_payment(allocation, remaining, card, "Maximize score impact")

    for allocation in allocations:
        allocation.priority_rank = priorities[allocation.card_id].rank

    return AllocationStrategy(
        type=StrategyType.MAX_SCORE,
        name="Maximum Score Impact",
        description="Optimized to improve your credit score the most",
        allocations=allocations,
        expected_impact=calculate_impact(cards, allocations, policy),
    )


def allocate_for_min_interest(
    cards: Sequence[Card],
    total_budget: float,
    reference_date: date | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> AllocationStrategy:
    """Avalanche: highest APR first, each card paid off before the next"""
    remaining = validate_budget(cards, total_budget, policy)
    allocations = _initial_allocations(cards, policy)
    allocations_by_id = {a.card_id: a for a in allocations}
    cards_by_apr = sorted(cards, key=lambda card: effective_apr(card, policy), reverse=True)

    _pay_in_order(
        cards_by_apr,
        allocations_by_id,
        remaining,
        lambda card: f"Highest APR ({effective_apr(card, policy):.2f}%) - saves most interest",
    )

    for rank, card in enumerate(cards_by_apr, start=1):
        allocations_by_id[card.card_id].priority_rank = rank

    return AllocationStrategy(
        type=StrategyType.MIN_INTEREST,
        name="Minimum Interest (Avalanche)",
        description="Save the most money on interest charges",
        allocations=allocations,
        expected_impact=calculate_impact(cards, allocations, policy),
    )


def allocate_for_utilization(
    cards: Sequence[Card],
    total_budget: float,
    reference_date: date | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> AllocationStrategy:
    """Highest current utilization first, each card paid off before the next"""
    remaining = validate_budget(cards, total_budget, policy)
    allocations = _initial_allocations(cards, policy)
    allocations_by_id = {a.card_id: a for a in allocations}
    cards_by_utilization = sorted(cards, key=lambda card: card.utilization, reverse=True)

    _pay_in_order(
        cards_by_utilization,
        allocations_by_id,
        remaining,
        lambda card: f"Highest utilization ({card.utilization:.0f}%)",
    )

    for rank, card in enumerate(cards_by_utilization, start=1):
        allocations_by_id[card.card_id].priority_rank = rank

    return AllocationStrategy(
        type=StrategyType.UTILIZATION_FOCUS,
        name="Utilization Focus",
        description="Target highest utilization cards first",
        allocations=allocations,
        expected_impact=calculate_impact(cards, allocations, policy),
    )


def _equal_shares(
    cards: Sequence[Card], total_budget: float, policy: OptimizerPolicy
) -> tuple[List[float], set[int]]:
    """
    Split the whole budget evenly. A card whose even share falls below its
    minimum payment gets the minimum instead and the rest is re-split among
    the other cards.
    """
    minimums = [minimum_payment(card, policy) for card in cards]
    fixed: Dict[int, float] = {}

    while True:
        open_cards = [i for i in range(len(cards)) if i not in fixed]
        if not open_cards:
            share = 0.0
            break
        share = (total_budget - sum(fixed.values())) / len(open_cards)
        short = [i for i in open_cards if minimums[i] > share]
        if not short:
            break
        for i in short:
            fixed[i] = minimums[i]

    return [fixed.get(i, share) for i in range(len(cards))], set(fixed)


def allocate_equally(
    cards: Sequence[Card],
    total_budget: float,
    reference_date: date | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> AllocationStrategy:
    """Entire budget split evenly across cards, each capped at its own balance"""
    validate_budget(cards, total_budget, policy)
    priorities = {score.card_id: score for score in rank_by_priority(cards, reference_date, policy)}
    shares, raised_to_minimum = _equal_shares(cards, total_budget, policy) if cards else ([], set())

    allocations = []
    for index, (card, share) in enumerate(zip(cards, shares)):
        payment = min(share, card.current_balance)
        new_balance = card.current_balance - payment

        if payment < share:
            reasoning = "Equal share capped at balance - paid in full"
        elif index in raised_to_minimum:
            reasoning = "Minimum payment exceeds equal share"
        else:
            reasoning = "Equal distribution"

        allocations.append(
            CardAllocation(
                card_id=card.card_id,
                card_name=card.name,
                amount=payment,
                new_balance=new_balance,
                new_utilization=utilization(new_balance, card.credit_limit),
                priority_rank=priorities[card.card_id].rank,
                reasoning=reasoning,
            )
        )

    return AllocationStrategy(
        type=StrategyType.EQUAL_DISTRIBUTION,
        name="Equal Distribution",
        description="Split budget equally across all cards",
        allocations=allocations,
        expected_impact=calculate_impact(cards, allocations, policy),
    )


STRATEGIES: Dict[StrategyType, Callable[..., AllocationStrategy]] = {
    StrategyType.MAX_SCORE: allocate_for_max_score,
    StrategyType.MIN_INTEREST: allocate_for_min_interest,
    StrategyType.UTILIZATION_FOCUS: allocate_for_utilization,
    StrategyType.EQUAL_DISTRIBUTION: allocate_equally,
}


def allocate_budget(
    strategy: StrategyType | str,
    cards: Sequence[Card],
    total_budget: float,
    reference_date: date | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> AllocationStrategy:
    """
    Main entry point: distribute a budget across cards with the named strategy.

    Raises:
        UnknownStrategyError: strategy tag not recognized
        InsufficientBudgetError: budget below the sum of minimum payments
    """
    try:
        strategy_type = StrategyType(strategy)
    except ValueError as e:
        raise UnknownStrategyError(f"Unknown allocation strategy: {strategy}") from e

    result = STRATEGIES[strategy_type](cards, total_budget, reference_date, policy)
    logger.info(
        "Allocated %.2f across %d card(s) with %s: %.1f%% -> %.1f%%",
        total_budget,
        len(cards),
        strategy_type.value,
        result.expected_impact.overall_utilization_before,
        result.expected_impact.overall_utilization_after,
    )
    return result


def compare_strategies(
    cards: Sequence[Card],
    total_budget: float,
    reference_date: date | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> List[AllocationStrategy]:
    """Run all four strategies on the same budget, in StrategyType order"""
    return [allocate_budget(strategy, cards, total_budget, reference_date, policy) for strategy in StrategyType]
