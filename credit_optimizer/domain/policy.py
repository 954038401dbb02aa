"""Policy assumptions the calculators run under, with their documented defaults"""

from dataclasses import dataclass


@dataclass(frozen=True)
class OptimizerPolicy:
    """
    Tunable assumptions behind every calculation.

    Defaults:
    - target_utilization = 0.05: reported balance to aim for (5% of the limit)
    - optimization_days_before = 2: optimization payment lands this many days before the statement
    - urgent_paydown_ratio = 0.90: over-limit cards are first paid down to 90% of the limit
    - minimum_payment_ratio = 0.02: card minimum payment as a share of balance
    - minimum_payment_floor = 25.0: minimum payment never below $25 (unless the balance is smaller)
    - default_apr = 18.0: APR assumed for ranking/allocation when a card has none
    - assumed_apr = 20.0: APR assumed for interest projections (transfers, unpaid balances)
    - transfer_fee_percent = 3.0: balance transfer fee
    - new_card_statement_day / new_card_due_day = 15 / 10: cycle of a hypothetical new card
    - hard_inquiry_penalty = (5, 10): points lost to a hard inquiry (best, worst)
    - max_positive_impact = 150: cap on any estimated score gain
    """

    target_utilization: float = 0.05
    optimization_days_before: int = 2
    urgent_paydown_ratio: float = 0.90
    minimum_payment_ratio: float = 0.02
    minimum_payment_floor: float = 25.0
    default_apr: float = 18.0
    assumed_apr: float = 20.0
    transfer_fee_percent: float = 3.0
    new_card_statement_day: int = 15
    new_card_due_day: int = 10
    hard_inquiry_penalty: tuple[int, int] = (5, 10)
    max_positive_impact: int = 150


DEFAULT_POLICY = OptimizerPolicy()
