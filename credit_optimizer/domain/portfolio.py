"""Portfolio aggregates shared by the optimizer, allocation and scenario engines"""

from dataclasses import dataclass
from typing import Sequence

from credit_optimizer.domain.models import Card, utilization


@dataclass(frozen=True)
class PortfolioTotals:
    total_credit_limit: float
    total_balance: float
    overall_utilization: float
    cards_over_30_percent: int
    cards_over_50_percent: int
    average_utilization: float


def summarize(cards: Sequence[Card]) -> PortfolioTotals:
    """
    Aggregate a card set. An empty set yields all-zero totals.

    Overall utilization is sum(balances) / sum(limits), which weights large limits
    more than the per-card average does.
    """
    total_limit = sum(card.credit_limit for card in cards)
    total_balance = sum(card.current_balance for card in cards)
    per_card = [card.utilization for card in cards]

    return PortfolioTotals(
        total_credit_limit=total_limit,
        total_balance=total_balance,
        overall_utilization=utilization(total_balance, total_limit),
        cards_over_30_percent=sum(1 for u in per_card if u > 30),
        cards_over_50_percent=sum(1 for u in per_card if u > 50),
        average_utilization=sum(per_card) / len(per_card) if per_card else 0.0,
    )
