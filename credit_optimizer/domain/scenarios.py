"""
What-if scenarios against the current card set.

Every simulator compares its outcome with a baseline computed from its own input,
so results can be chained by feeding ``result.cards`` into the next scenario.
Guard failures (unknown card, amount over limit, ...) never raise: they return
the unchanged baseline with a warning explaining why.
"""

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Sequence

from credit_optimizer.domain.exceptions import UnknownScenarioError
from credit_optimizer.domain.models import (
    NO_IMPACT,
    Card,
    ComparisonResult,
    NetChange,
    ScenarioKind,
    ScenarioMetrics,
    ScenarioResult,
    ScoreRange,
    utilization,
)
from credit_optimizer.domain.policy import DEFAULT_POLICY, OptimizerPolicy
from credit_optimizer.domain.portfolio import summarize
from credit_optimizer.domain.score_impact import estimate_score_impact
from credit_optimizer.utils.date_utils import next_occurrence

logger = logging.getLogger(__name__)

CARD_NOT_FOUND = "Card not found"
HIGH_LIMIT_PRODUCT_CHANGE = 5_000


def calculate_baseline(cards: Sequence[Card]) -> ScenarioResult:
    """Current state of a card set, with no change and no score impact"""
    totals = summarize(cards)
    return ScenarioResult(
        cards=list(cards),
        overall_utilization=totals.overall_utilization,
        utilization_change=0.0,
        estimated_score_impact=NO_IMPACT,
        score_change=NO_IMPACT,
        metrics=ScenarioMetrics(
            total_credit_limit=totals.total_credit_limit,
            total_balance=totals.total_balance,
            cards_over_30_percent=totals.cards_over_30_percent,
            cards_over_50_percent=totals.cards_over_50_percent,
            average_utilization=totals.average_utilization,
        ),
    )


def _refuse(baseline: ScenarioResult, warning: str) -> ScenarioResult:
    logger.info("Scenario refused: %s", warning)
    return replace(baseline, warnings=[warning], recommendations=[], applied=False)


def _find_card(cards: Sequence[Card], card_id: str) -> Optional[Card]:
    return next((card for card in cards if card.card_id == card_id), None)


def _with_card(cards: Sequence[Card], updated: Card) -> List[Card]:
    return [updated if card.card_id == updated.card_id else card for card in cards]


def _diff(
    baseline: ScenarioResult,
    updated_cards: Sequence[Card],
    warnings: List[str],
    recommendations: List[str],
    policy: OptimizerPolicy,
    score_adjustment: Optional[ScoreRange] = None,
) -> ScenarioResult:
    """Build the scenario result for an updated card set relative to its baseline"""
    result = calculate_baseline(updated_cards)
    improvement = baseline.overall_utilization - result.overall_utilization
    impact = estimate_score_impact(improvement, baseline.overall_utilization, policy)

    if score_adjustment is not None:
        impact = ScoreRange(min=impact.min + score_adjustment.min, max=impact.max + score_adjustment.max)

    return replace(
        result,
        utilization_change=result.overall_utilization - baseline.overall_utilization,
        estimated_score_impact=impact,
        score_change=impact,
        warnings=warnings,
        recommendations=recommendations,
    )


def simulate_payment(
    cards: Sequence[Card],
    card_id: str,
    payment_amount: float,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> ScenarioResult:
    """Pay ``payment_amount`` toward one card (balance floors at zero)"""
    baseline = calculate_baseline(cards)
    card = _find_card(cards, card_id)
    if card is None:
        return _refuse(baseline, CARD_NOT_FOUND)
    if payment_amount <= 0:
        return _refuse(baseline, "Payment amount must be greater than zero.")

    warnings: List[str] = []
    recommendations: List[str] = []

    minimum = card.current_balance * policy.minimum_payment_ratio
    if payment_amount < minimum and payment_amount < card.current_balance:
        warnings.append(
            f"Payment below minimum (${minimum:.0f}). You'll be charged a late fee (~$25-40)."
        )

    remaining = max(card.current_balance - payment_amount, 0.0)
    new_utilization = utilization(remaining, card.credit_limit)

    if new_utilization > 30:
        warnings.append(
            f"Card utilization will be {new_utilization:.1f}%, which may hurt your score. Consider paying more."
        )
    elif new_utilization < 10:
        recommendations.append(
            f"Excellent! This payment brings utilization to {new_utilization:.1f}%, optimal for credit scores."
        )

    if remaining > 0:
        apr = card.apr if card.apr is not None else policy.assumed_apr
        monthly_interest = remaining * apr / 100 / 12
        warnings.append(
            f"Remaining balance of ${remaining:,.2f} will accrue ~${monthly_interest:,.2f} in interest this month."
        )
    else:
        recommendations.append("Paying in full means zero interest charges!")

    updated = _with_card(cards, replace(card, current_balance=remaining))
    return _diff(baseline, updated, warnings, recommendations, policy)


def simulate_purchase(
    cards: Sequence[Card],
    card_id: str,
    purchase_amount: float,
    purchase_date: date,
    reference_date: date | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> ScenarioResult:
    """
    Add a purchase to one card.

    A purchase dated before the card's upcoming statement date is reported on that
    statement; one on or after it is not reported until the next cycle.
    """
    baseline = calculate_baseline(cards)
    card = _find_card(cards, card_id)
    if card is None:
        return _refuse(baseline, CARD_NOT_FOUND)
    if purchase_amount <= 0:
        return _refuse(baseline, "Purchase amount must be greater than zero.")

    new_balance = card.current_balance + purchase_amount
    if new_balance > card.credit_limit:
        return _refuse(
            baseline,
            f"This purchase would exceed your credit limit by ${new_balance - card.credit_limit:,.2f}. "
            "Transaction will be declined.",
        )

    warnings: List[str] = []
    recommendations: List[str] = []

    statement_date = next_occurrence(card.statement_day, reference_date or date.today())
    new_utilization = utilization(new_balance, card.credit_limit)

    if purchase_date < statement_date:
        warnings.append(
            f"Purchase before statement date means {new_utilization:.1f}% utilization "
            "will be reported to credit bureaus."
        )
        if new_utilization > 30:
            wait_days = (statement_date - purchase_date).days
            after_statement = statement_date + timedelta(days=1)
            recommendations.append(
                f"Consider waiting {wait_days} days until after your statement date "
                f"({after_statement.isoformat()}) to make this purchase."
            )
            recommendations.append(
                f"Or, pay down ${purchase_amount * 0.7:,.2f} before the statement closes "
                "to keep utilization under 30%."
            )
    else:
        recommendations.append(
            f"Good timing! Purchase after statement date means current {baseline.overall_utilization:.1f}% "
            "utilization is reported, not the higher amount."
        )
        recommendations.append(
            "You'll have until the next billing cycle to pay this off before it affects your credit report."
        )

    updated = _with_card(cards, replace(card, current_balance=new_balance))
    return _diff(baseline, updated, warnings, recommendations, policy)


def simulate_limit_increase(
    cards: Sequence[Card],
    card_id: str,
    new_limit: float,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> ScenarioResult:
    """Raise (or change) one card's credit limit"""
    baseline = calculate_baseline(cards)
    card = _find_card(cards, card_id)
    if card is None:
        return _refuse(baseline, CARD_NOT_FOUND)
    if new_limit <= 0 or new_limit < card.current_balance:
        return _refuse(
            baseline,
            f"New limit (${new_limit:,.2f}) cannot be lower than current balance (${card.current_balance:,.2f}).",
        )

    percent_increase = (new_limit - card.credit_limit) / card.credit_limit * 100
    new_utilization = utilization(card.current_balance, new_limit)

    recommendations = [
        f"Credit limit increase of {percent_increase:.0f}% drops this card's utilization "
        f"from {card.utilization:.1f}% to {new_utilization:.1f}%."
    ]
    if new_utilization < 10:
        recommendations.append("Excellent! New utilization under 10% is optimal for credit scores.")
    recommendations.append(
        "Best time to request: 6-12 months after your last increase, or after a significant income increase."
    )
    recommendations.append(
        "Tip: Call your card issuer and request an increase. Many issuers approve 50-100% increases automatically."
    )

    updated = _with_card(cards, replace(card, credit_limit=new_limit))
    return _diff(baseline, updated, [], recommendations, policy)


def _new_card_id(cards: Sequence[Card]) -> str:
    """Smallest new-card-{n} id not already taken in the set"""
    taken = {card.card_id for card in cards}
    n = 1
    while f"new-card-{n}" in taken:
        n += 1
    return f"new-card-{n}"


def simulate_new_card(
    cards: Sequence[Card],
    new_card_limit: float,
    starting_balance: float = 0.0,
    include_hard_inquiry: bool = True,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> ScenarioResult:
    """Open a hypothetical new card and add it to the set"""
    baseline = calculate_baseline(cards)
    if new_card_limit <= 0:
        return _refuse(baseline, "New card limit must be greater than zero.")
    if starting_balance < 0:
        return _refuse(baseline, "Starting balance cannot be negative.")

    new_card = Card(
        card_id=_new_card_id(cards),
        name="New Card",
        credit_limit=new_card_limit,
        current_balance=starting_balance,
        statement_day=policy.new_card_statement_day,
        due_day=policy.new_card_due_day,
    )
    updated = [*cards, new_card]
    after = summarize(updated)

    warnings: List[str] = []
    recommendations: List[str] = []
    adjustment = None

    if include_hard_inquiry:
        best, worst = policy.hard_inquiry_penalty
        adjustment = ScoreRange(min=-worst, max=-best)
        warnings.append(f"Hard inquiry will temporarily decrease your score by {best}-{worst} points for ~12 months.")
        recommendations.append(f"Short-term impact: -{best} to -{worst} points from hard inquiry.")

    recommendations.append(
        f"Long-term benefit: Overall utilization drops from {baseline.overall_utilization:.1f}% "
        f"to {after.overall_utilization:.1f}%."
    )

    if cards:
        warnings.append(
            "Opening a new card will lower your average account age, which may temporarily "
            "reduce your score by 5-15 points."
        )

    result = _diff(baseline, updated, warnings, recommendations, policy, score_adjustment=adjustment)
    change = result.score_change
    result.recommendations.append(
        f"Estimated net score change: {change.min:+d} to {change.max:+d} points after 6 months."
    )
    result.recommendations.append(
        f"Credit mix benefit: Having {len(updated)} cards shows diverse credit management."
    )
    return result


def _is_oldest_card(cards: Sequence[Card], target: Card) -> bool:
    """
    Oldest account by open date when every card has one; otherwise fall back to
    treating the first card in the input as the oldest.
    """
    if len(cards) < 2:
        return False
    if all(card.opened_on is not None for card in cards):
        return target.opened_on == min(card.opened_on for card in cards)
    return cards[0].card_id == target.card_id


def simulate_card_closure(
    cards: Sequence[Card],
    card_id: str,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> ScenarioResult:
    """Close a paid-off card, removing its limit from the portfolio"""
    baseline = calculate_baseline(cards)
    card = _find_card(cards, card_id)
    if card is None:
        return _refuse(baseline, CARD_NOT_FOUND)
    if card.current_balance > 0:
        return _refuse(
            baseline,
            f"You cannot close a card with an outstanding balance of ${card.current_balance:,.2f}. Pay it off first.",
        )

    updated = [c for c in cards if c.card_id != card_id]
    after = summarize(updated)

    warnings = [
        f"Closing this card will reduce your total available credit by ${card.credit_limit:,.2f}.",
        f"Overall utilization will increase from {baseline.overall_utilization:.1f}% "
        f"to {after.overall_utilization:.1f}%.",
    ]
    recommendations = [
        "Alternative: Keep the card open with a $0 balance. Set up a small recurring charge "
        "(like Netflix) with autopay to prevent closure due to inactivity."
    ]
    if card.credit_limit > HIGH_LIMIT_PRODUCT_CHANGE:
        recommendations.append(
            "This card has a high credit limit. Consider requesting a product change "
            "to a no-annual-fee version instead of closing."
        )

    result = _diff(baseline, updated, warnings, recommendations, policy)
    result.warnings.append(
        f"Estimated score impact: {result.score_change.min} to {result.score_change.max} points."
    )
    if _is_oldest_card(cards, card):
        result.warnings.append(
            "WARNING: This appears to be one of your oldest cards. Closing it may hurt your credit age "
            "and reduce your score by an additional 10-20 points."
        )
    return result


def simulate_balance_transfer(
    cards: Sequence[Card],
    from_card_id: str,
    to_card_id: str,
    transfer_amount: float,
    transfer_fee_percent: float | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> ScenarioResult:
    """
    Move a balance (plus fee) from one card to another.

    Savings assume the source card charges ``policy.assumed_apr`` (20%) and the
    destination runs a 0% intro rate for a year: net = amount x 20% - fee.
    """
    if transfer_fee_percent is None:
        transfer_fee_percent = policy.transfer_fee_percent

    baseline = calculate_baseline(cards)
    source = _find_card(cards, from_card_id)
    destination = _find_card(cards, to_card_id)
    if source is None or destination is None:
        return _refuse(baseline, CARD_NOT_FOUND)
    if source.card_id == destination.card_id:
        return _refuse(baseline, "Source and destination must be different cards.")
    if transfer_amount <= 0:
        return _refuse(baseline, "Transfer amount must be greater than zero.")
    if transfer_amount > source.current_balance:
        return _refuse(
            baseline,
            f"Transfer amount (${transfer_amount:,.2f}) exceeds available balance on source card "
            f"(${source.current_balance:,.2f}).",
        )

    fee = transfer_amount * transfer_fee_percent / 100
    total_moved = transfer_amount + fee
    if destination.current_balance + total_moved > destination.credit_limit:
        maximum = destination.credit_limit - destination.current_balance - fee
        return _refuse(
            baseline,
            f"Transfer would exceed destination card's credit limit. Maximum you can transfer: ${maximum:,.2f}.",
        )

    source_after = replace(source, current_balance=source.current_balance - transfer_amount)
    destination_after = replace(destination, current_balance=destination.current_balance + total_moved)
    updated = _with_card(_with_card(cards, source_after), destination_after)

    warnings: List[str] = []
    recommendations = [
        f"{source.name}: Utilization drops from {source.utilization:.1f}% to {source_after.utilization:.1f}%."
    ]

    destination_move = (
        f"{destination.name}: Utilization increases from {destination.utilization:.1f}% "
        f"to {destination_after.utilization:.1f}%"
    )
    if destination_after.utilization > 30:
        warnings.append(f"{destination_move}. This may hurt your score.")
    else:
        recommendations.append(f"{destination_move} (still under 30%).")

    warnings.append(f"Balance transfer fee: ${fee:,.2f} ({transfer_fee_percent:g}% of transfer amount).")

    yearly_interest = transfer_amount * policy.assumed_apr / 100
    net_savings = transfer_net_savings(transfer_amount, transfer_fee_percent, policy)
    if net_savings > 0:
        recommendations.append(
            f"Potential interest savings: ${yearly_interest:,.2f}/year. Net benefit after fee: ${net_savings:,.2f}."
        )
    else:
        warnings.append(f"Fee (${fee:,.2f}) may outweigh interest savings (${yearly_interest:,.2f}/year).")

    return _diff(baseline, updated, warnings, recommendations, policy)


def transfer_net_savings(
    transfer_amount: float,
    transfer_fee_percent: float | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> float:
    """First-year savings of a transfer: avoided interest at the assumed APR minus the fee"""
    if transfer_fee_percent is None:
        transfer_fee_percent = policy.transfer_fee_percent
    return transfer_amount * policy.assumed_apr / 100 - transfer_amount * transfer_fee_percent / 100


SIMULATORS: Dict[ScenarioKind, Callable[..., ScenarioResult]] = {
    ScenarioKind.PAYMENT: simulate_payment,
    ScenarioKind.PURCHASE: simulate_purchase,
    ScenarioKind.LIMIT_INCREASE: simulate_limit_increase,
    ScenarioKind.NEW_CARD: simulate_new_card,
    ScenarioKind.CARD_CLOSURE: simulate_card_closure,
    ScenarioKind.BALANCE_TRANSFER: simulate_balance_transfer,
}


def run_scenario(kind: ScenarioKind | str, cards: Sequence[Card], **params) -> ScenarioResult:
    """
    Dispatch to the simulator for ``kind`` with its keyword parameters.

    Raises:
        UnknownScenarioError: kind not recognized
    """
    try:
        scenario_kind = ScenarioKind(kind)
    except ValueError as e:
        raise UnknownScenarioError(f"Unknown scenario: {kind}") from e

    result = SIMULATORS[scenario_kind](cards, **params)
    logger.info(
        "Scenario %s: utilization %+.2f pts, est. %s, %d warning(s)",
        scenario_kind.value,
        result.utilization_change,
        result.estimated_score_impact,
        len(result.warnings),
    )
    return result


def compare_scenarios(baseline: ScenarioResult, scenario: ScenarioResult) -> ComparisonResult:
    """
    Classify each headline metric as an improvement or a decline.

    - Overall utilization: lower is better
    - Cards over 30%: fewer is better
    - Total available credit: higher is better
    - Average estimated score impact: higher is better

    Net change is positive/negative by majority, neutral on a tie.
    """
    improvements: List[str] = []
    declines: List[str] = []

    before_util, after_util = baseline.overall_utilization, scenario.overall_utilization
    if after_util < before_util:
        improvements.append(f"Utilization improves: {before_util:.1f}% → {after_util:.1f}%")
    elif after_util > before_util:
        declines.append(f"Utilization worsens: {before_util:.1f}% → {after_util:.1f}%")

    before_over, after_over = baseline.metrics.cards_over_30_percent, scenario.metrics.cards_over_30_percent
    if after_over < before_over:
        improvements.append(f"Cards over 30%: {before_over} → {after_over}")
    elif after_over > before_over:
        declines.append(f"Cards over 30%: {before_over} → {after_over}")

    before_credit, after_credit = baseline.metrics.total_credit_limit, scenario.metrics.total_credit_limit
    if after_credit > before_credit:
        improvements.append(f"Available credit increases: ${before_credit:,.0f} → ${after_credit:,.0f}")
    elif after_credit < before_credit:
        declines.append(f"Available credit decreases: ${before_credit:,.0f} → ${after_credit:,.0f}")

    before_score = baseline.estimated_score_impact.midpoint
    after_score = scenario.estimated_score_impact.midpoint
    if after_score > before_score:
        improvements.append(f"Score impact improves: {before_score:+.0f} pts → {after_score:+.0f} pts")
    elif after_score < before_score:
        declines.append(f"Score impact worsens: {before_score:+.0f} pts → {after_score:+.0f} pts")

    if len(improvements) > len(declines):
        net_change = NetChange.POSITIVE
    elif len(declines) > len(improvements):
        net_change = NetChange.NEGATIVE
    else:
        net_change = NetChange.NEUTRAL

    return ComparisonResult(
        baseline=baseline,
        scenario=scenario,
        improvements=improvements,
        declines=declines,
        net_change=net_change,
    )
