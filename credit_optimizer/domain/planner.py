"""Per-card payment schedule: pay before the statement closes, settle by the due date"""

import logging
from datetime import date, timedelta
from typing import List

from credit_optimizer.domain.models import (
    Card,
    CardPaymentPlan,
    Payment,
    PaymentPurpose,
    UtilizationStatus,
)
from credit_optimizer.domain.policy import DEFAULT_POLICY, OptimizerPolicy
from credit_optimizer.utils.date_utils import days_until, resolve_cycle_dates

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    UtilizationStatus.GOOD: "Good",
    UtilizationStatus.MEDIUM: "Medium",
    UtilizationStatus.HIGH: "High",
    UtilizationStatus.OVERLIMIT: "Over Limit",
}


def utilization_status(utilization_percent: float) -> UtilizationStatus:
    """
    Classify utilization into display bands.

    - > 100%: overlimit
    - > 30%: high (above the commonly cited scoring threshold)
    - > 10%: medium
    - otherwise: good
    """
    if utilization_percent > 100:
        return UtilizationStatus.OVERLIMIT
    elif utilization_percent > 30:
        return UtilizationStatus.HIGH
    elif utilization_percent > 10:
        return UtilizationStatus.MEDIUM
    return UtilizationStatus.GOOD


def utilization_label(utilization_percent: float) -> str:
    return STATUS_LABELS[utilization_status(utilization_percent)]


def target_balance(credit_limit: float, target_utilization: float) -> float:
    """Balance that reports exactly the target utilization (fraction, e.g. 0.05)"""
    return credit_limit * target_utilization


def _format_percent(value: float) -> str:
    return f"{value:g}%"


def plan_card(
    card: Card,
    target_utilization: float | None = None,
    reference_date: date | None = None,
    policy: OptimizerPolicy = DEFAULT_POLICY,
) -> CardPaymentPlan:
    """
    Build the payment schedule for one card.

    States, by balance position:
    1. Over limit: urgent payment today down to 90% of the limit, then an
       optimization payment before the statement, then the remainder on the due date
    2. Needs optimization: pay down to target before the statement (2 days ahead,
       or tomorrow if that is too close), then the target balance on the due date
    3. Already optimal: one balance payment on the due date
    4. Zero balance: nothing to pay

    Args:
        card: Card to plan for
        target_utilization: Fraction of the limit to report (default from policy, 0.05)
        reference_date: "Today" for date resolution (default: date.today())
        policy: Policy assumptions

    Returns:
        CardPaymentPlan with 0-3 payments in chronological order
    """
    if target_utilization is None:
        target_utilization = policy.target_utilization
    today = reference_date or date.today()
    tomorrow = today + timedelta(days=1)

    next_statement, next_due = resolve_cycle_dates(card.statement_day, card.due_day, today)

    current_utilization = card.utilization
    goal_balance = target_balance(card.credit_limit, target_utilization)
    target_percent = target_utilization * 100

    is_over_limit = card.current_balance > card.credit_limit
    is_already_optimal = card.current_balance <= goal_balance
    needs_optimization = not is_already_optimal and card.current_balance > 0

    optimization_date = next_statement - timedelta(days=policy.optimization_days_before)
    optimization_note = f"Optimization payment - reduces reported balance to {_format_percent(target_percent)}"

    payments: List[Payment] = []
    new_utilization = current_utilization

    if is_over_limit:
        urgent_amount = card.current_balance - card.credit_limit * policy.urgent_paydown_ratio
        payments.append(
            Payment(
                date=today,
                amount=urgent_amount,
                purpose=PaymentPurpose.OPTIMIZATION,
                description="URGENT: Pay immediately to get under credit limit",
            )
        )

        remaining = card.current_balance - urgent_amount
        optimization_amount = max(0.0, remaining - goal_balance)
        if optimization_amount > 0:
            payments.append(
                Payment(
                    date=tomorrow if optimization_date < today else optimization_date,
                    amount=optimization_amount,
                    purpose=PaymentPurpose.OPTIMIZATION,
                    description=optimization_note,
                )
            )

        final_amount = min(goal_balance, remaining - optimization_amount)
        if final_amount > 0:
            payments.append(
                Payment(
                    date=next_due,
                    amount=final_amount,
                    purpose=PaymentPurpose.BALANCE,
                    description="Pay remaining balance to avoid interest",
                )
            )

        new_utilization = target_percent

    elif needs_optimization:
        optimization_amount = card.current_balance - goal_balance

        # Too close to the statement to wait for the usual lead time
        if days_until(optimization_date, today) < 2:
            payments.append(
                Payment(
                    date=tomorrow,
                    amount=optimization_amount,
                    purpose=PaymentPurpose.OPTIMIZATION,
                    description=f"{optimization_note} (statement date is very close!)",
                )
            )
        else:
            payments.append(
                Payment(
                    date=optimization_date,
                    amount=optimization_amount,
                    purpose=PaymentPurpose.OPTIMIZATION,
                    description=optimization_note,
                )
            )

        if goal_balance > 0:
            payments.append(
                Payment(
                    date=next_due,
                    amount=goal_balance,
                    purpose=PaymentPurpose.BALANCE,
                    description="Pay remaining balance to avoid interest",
                )
            )

        new_utilization = target_percent

    elif card.current_balance > 0:
        payments.append(
            Payment(
                date=next_due,
                amount=card.current_balance,
                purpose=PaymentPurpose.BALANCE,
                description="Pay balance by due date - already optimally utilized!",
            )
        )

    logger.debug(
        "Planned card %s: %.1f%% -> %.1f%%, %d payment(s)",
        card.card_id,
        current_utilization,
        new_utilization,
        len(payments),
    )

    return CardPaymentPlan(
        card=card,
        current_utilization=current_utilization,
        target_utilization=target_percent,
        new_utilization=new_utilization,
        payments=payments,
        next_statement_date=next_statement,
        next_due_date=next_due,
        needs_optimization=needs_optimization,
        is_over_limit=is_over_limit,
        is_already_optimal=is_already_optimal,
        utilization_status=utilization_status(current_utilization),
    )
