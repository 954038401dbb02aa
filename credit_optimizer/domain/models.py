"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional

from credit_optimizer.domain.exceptions import InvalidCardError


def utilization(balance: float, limit: float) -> float:
    """Utilization percentage; a non-positive limit yields 0 instead of inf/NaN"""
    if limit <= 0:
        return 0.0
    return balance / limit * 100


class PaymentPurpose(str, Enum):
    OPTIMIZATION = "optimization"  # before statement date, lowers reported balance
    BALANCE = "balance"  # by due date, avoids interest


class UtilizationStatus(str, Enum):
    GOOD = "good"
    MEDIUM = "medium"
    HIGH = "high"
    OVERLIMIT = "overlimit"


class StrategyType(str, Enum):
    MAX_SCORE = "max_score"
    MIN_INTEREST = "min_interest"
    UTILIZATION_FOCUS = "utilization_focus"
    EQUAL_DISTRIBUTION = "equal_distribution"


class ScenarioKind(str, Enum):
    PAYMENT = "payment"
    PURCHASE = "purchase"
    LIMIT_INCREASE = "limit_increase"
    NEW_CARD = "new_card"
    CARD_CLOSURE = "card_closure"
    BALANCE_TRANSFER = "balance_transfer"


class NetChange(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class EventKind(str, Enum):
    OPTIMIZATION = "optimization"
    BALANCE = "balance"
    STATEMENT = "statement"


@dataclass(frozen=True)
class Card:
    """Credit card as supplied by the caller (never mutated by the engine)"""

    card_id: str
    name: str
    credit_limit: float
    current_balance: float  # may exceed the limit
    statement_day: int  # day of month, 1-31
    due_day: int  # day of month, 1-31
    apr: Optional[float] = None  # percent, e.g. 24.99
    image_url: Optional[str] = None
    opened_on: Optional[date] = None

    def __post_init__(self):
        if self.credit_limit <= 0:
            raise InvalidCardError(f"Card {self.card_id}: credit limit must be positive")
        if self.current_balance < 0:
            raise InvalidCardError(f"Card {self.card_id}: balance cannot be negative")
        for label, day in (("statement", self.statement_day), ("due", self.due_day)):
            if not 1 <= day <= 31:
                raise InvalidCardError(f"Card {self.card_id}: {label} day must be between 1 and 31")
        if self.apr is not None and self.apr < 0:
            raise InvalidCardError(f"Card {self.card_id}: APR cannot be negative")

    @property
    def utilization(self) -> float:
        return utilization(self.current_balance, self.credit_limit)

    @property
    def available_credit(self) -> float:
        return max(self.credit_limit - self.current_balance, 0.0)


@dataclass(frozen=True)
class ScoreRange:
    """Estimated credit score change in points"""

    min: int
    max: int

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


NO_IMPACT = ScoreRange(min=0, max=0)


@dataclass(frozen=True)
class Payment:
    """Single scheduled payment"""

    date: date
    amount: float
    purpose: PaymentPurpose
    description: str


@dataclass
class CardPaymentPlan:
    """Payment schedule and status for one card"""

    card: Card
    current_utilization: float
    target_utilization: float  # percent
    new_utilization: float
    payments: List[Payment]
    next_statement_date: date
    next_due_date: date
    needs_optimization: bool
    is_over_limit: bool
    is_already_optimal: bool
    utilization_status: UtilizationStatus


@dataclass
class OptimizationResult:
    """Portfolio-wide plan, highest-utilization cards first"""

    cards: List[CardPaymentPlan]
    total_credit_limit: float
    total_current_balance: float
    current_overall_utilization: float
    optimized_overall_utilization: float
    utilization_improvement: float  # percentage points
    estimated_score_impact: ScoreRange


@dataclass(frozen=True)
class PriorityBreakdown:
    utilization_impact: int  # 0-40
    apr_weight: int  # 0-25
    time_urgency: int  # 0-20
    credit_limit_weight: int  # 0-15


@dataclass(frozen=True)
class PriorityScore:
    """Weighted 0-100 payment priority for one card"""

    card_id: str
    total_score: int
    breakdown: PriorityBreakdown
    reasoning: List[str]
    rank: int = 0  # 1 = highest priority, assigned after ranking the full set


@dataclass
class CardAllocation:
    """Share of a budget assigned to one card"""

    card_id: str
    card_name: str
    amount: float
    new_balance: float
    new_utilization: float
    priority_rank: int
    reasoning: str


@dataclass
class ImpactSummary:
    """Expected effect of spending a budget under one strategy"""

    total_payment: float
    overall_utilization_before: float
    overall_utilization_after: float
    estimated_score_impact: int
    interest_saved: float  # one month
    cards_under_30_percent: int
    cards_optimal: int  # under 10%
    percent_of_optimal_achieved: int


@dataclass
class AllocationStrategy:
    """Budget distribution produced by one strategy"""

    type: StrategyType
    name: str
    description: str
    allocations: List[CardAllocation]
    expected_impact: ImpactSummary


@dataclass
class ScenarioMetrics:
    total_credit_limit: float
    total_balance: float
    cards_over_30_percent: int
    cards_over_50_percent: int
    average_utilization: float  # mean of per-card utilization


@dataclass
class ScenarioResult:
    """Card set after a hypothetical action, diffed against its input"""

    cards: List[Card]
    overall_utilization: float
    utilization_change: float  # percentage points vs baseline, positive = worse
    estimated_score_impact: ScoreRange
    score_change: ScoreRange
    metrics: ScenarioMetrics
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    applied: bool = True  # False when a guard refused the action and the baseline came back


@dataclass
class ComparisonResult:
    baseline: ScenarioResult
    scenario: ScenarioResult
    improvements: List[str]
    declines: List[str]
    net_change: NetChange


@dataclass(frozen=True)
class PaymentEvent:
    """Flattened schedule entry consumed by reminder/calendar layers"""

    card_id: str
    card_name: str
    date: date
    kind: EventKind
    amount: float
    description: str
    balance_after: Optional[float] = None
    utilization_after: Optional[float] = None
