"""Multi-card optimization and the flattened payment schedule built from it"""

import logging
from datetime import date
from typing import List, Sequence

from credit_optimizer.domain.models import (
    Card,
    EventKind,
    OptimizationResult,
    PaymentEvent,
    utilization,
)
from credit_optimizer.domain.planner import plan_card, target_balance
from credit_optimizer.domain.policy import DEFAULT_POLICY, OptimizerPolicy
from credit_optimizer.domain.portfolio import summarize
from credit_optimizer.domain.score_impact import estimate_score_impact

logger = logging.getLogger(__name__)


def optimize_portfolio(
    cards: Sequence[Card],
    target_utilization: float | None = None,
    reference_date: date | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> OptimizationResult:
    """
    Plan every card and estimate the portfolio-level effect.

    Requirements:
    - Plans ordered by current utilization, highest first (ties keep input order)
    - Optimized balance per card is min(current, target): cards already under
      target keep their real balance
    - Score impact uses the current overall utilization as severity baseline
    """
    if target_utilization is None:
        target_utilization = policy.target_utilization

    ordered = sorted(cards, key=lambda card: card.utilization, reverse=True)
    plans = [plan_card(card, target_utilization, reference_date, policy) for card in ordered]

    totals = summarize(cards)
    optimized_balance = sum(
        min(card.current_balance, target_balance(card.credit_limit, target_utilization))
        for card in cards
    )
    optimized_utilization = utilization(optimized_balance, totals.total_credit_limit)
    improvement = totals.overall_utilization - optimized_utilization

    result = OptimizationResult(
        cards=plans,
        total_credit_limit=totals.total_credit_limit,
        total_current_balance=totals.total_balance,
        current_overall_utilization=totals.overall_utilization,
        optimized_overall_utilization=optimized_utilization,
        utilization_improvement=improvement,
        estimated_score_impact=estimate_score_impact(improvement, totals.overall_utilization, policy),
    )

    logger.info(
        "Optimized %d card(s): %.1f%% -> %.1f%% overall, est. %s",
        len(plans),
        result.current_overall_utilization,
        result.optimized_overall_utilization,
        result.estimated_score_impact,
    )
    return result


def payment_schedule(result: OptimizationResult, include_statement_dates: bool = False) -> List[PaymentEvent]:
    """
    Flatten an optimization result into dated events for reminders or calendars.

    Each payment carries the card balance left after it. Events are ordered by
    date; same-day events keep plan order.
    """
    events: List[PaymentEvent] = []

    for plan in result.cards:
        card = plan.card
        balance = card.current_balance

        if include_statement_dates:
            events.append(
                PaymentEvent(
                    card_id=card.card_id,
                    card_name=card.name,
                    date=plan.next_statement_date,
                    kind=EventKind.STATEMENT,
                    amount=0.0,
                    description=f"Statement closes - {card.name} balance is reported to credit bureaus",
                )
            )

        for payment in plan.payments:
            balance = max(balance - payment.amount, 0.0)
            events.append(
                PaymentEvent(
                    card_id=card.card_id,
                    card_name=card.name,
                    date=payment.date,
                    kind=EventKind(payment.purpose.value),
                    amount=payment.amount,
                    description=payment.description,
                    balance_after=balance,
                    utilization_after=utilization(balance, card.credit_limit),
                )
            )

    return sorted(events, key=lambda event: event.date)
