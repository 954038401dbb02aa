"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from credit_optimizer.domain.models import (
    Card,
    EventKind,
    NetChange,
    PaymentPurpose,
    ScenarioMetrics,
    ScenarioResult,
    ScoreRange,
    StrategyType,
    UtilizationStatus,
)


class Schema(BaseModel):
    """Base schema; responses are read straight off domain dataclasses"""

    model_config = ConfigDict(from_attributes=True)


class CardSchema(Schema):
    """Credit card as sent by the client"""

    card_id: str = Field(..., min_length=1, description="Card identifier")
    name: str = Field(..., min_length=1, description="Display name")
    credit_limit: float = Field(..., gt=0)
    current_balance: float = Field(..., ge=0, description="May exceed the credit limit")
    statement_day: int = Field(..., ge=1, le=31, description="Day of month the statement closes")
    due_day: int = Field(..., ge=1, le=31, description="Day of month payment is due")
    apr: Optional[float] = Field(None, ge=0, description="Annual percentage rate, e.g. 24.99")
    image_url: Optional[str] = None
    opened_on: Optional[date] = None

    def to_domain(self) -> Card:
        return Card(**self.model_dump())


class ScoreRangeSchema(Schema):
    min: int
    max: int


class PortfolioRequest(BaseModel):
    """Request body for portfolio-level endpoints"""

    cards: List[CardSchema]
    target_utilization: Optional[float] = Field(None, ge=0, le=1, description="Fraction, e.g. 0.05")
    reference_date: Optional[date] = None

    def domain_cards(self) -> List[Card]:
        return [card.to_domain() for card in self.cards]


class PlanRequest(BaseModel):
    """Request body for POST /v1/plan"""

    card: CardSchema
    target_utilization: Optional[float] = Field(None, ge=0, le=1, description="Fraction, e.g. 0.05")
    reference_date: Optional[date] = None


class ScheduleRequest(PortfolioRequest):
    """Request body for POST /v1/schedule"""

    include_statement_dates: bool = False


class PaymentSchema(Schema):
    date: date
    amount: float
    purpose: PaymentPurpose
    description: str


class PlanResponse(Schema):
    """Response for POST /v1/plan"""

    card: CardSchema
    current_utilization: float
    target_utilization: float
    new_utilization: float
    payments: List[PaymentSchema]
    next_statement_date: date
    next_due_date: date
    needs_optimization: bool
    is_over_limit: bool
    is_already_optimal: bool
    utilization_status: UtilizationStatus


class OptimizationResponse(Schema):
    """Response for POST /v1/optimize"""

    cards: List[PlanResponse]
    total_credit_limit: float
    total_current_balance: float
    current_overall_utilization: float
    optimized_overall_utilization: float
    utilization_improvement: float
    estimated_score_impact: ScoreRangeSchema


class PaymentEventSchema(Schema):
    card_id: str
    card_name: str
    date: date
    kind: EventKind
    amount: float
    description: str
    balance_after: Optional[float] = None
    utilization_after: Optional[float] = None


class PriorityRequest(BaseModel):
    """Request body for POST /v1/priority"""

    cards: List[CardSchema]
    reference_date: Optional[date] = None


class PriorityBreakdownSchema(Schema):
    utilization_impact: int
    apr_weight: int
    time_urgency: int
    credit_limit_weight: int


class PriorityScoreSchema(Schema):
    card_id: str
    total_score: int
    breakdown: PriorityBreakdownSchema
    reasoning: List[str]
    rank: int


class AllocationRequest(BaseModel):
    """Request body for POST /v1/allocate and /v1/allocate/compare"""

    strategy: str = StrategyType.MAX_SCORE.value
    cards: List[CardSchema]
    budget: float = Field(..., ge=0, description="Total amount available this cycle")
    reference_date: Optional[date] = None


class CardAllocationSchema(Schema):
    card_id: str
    card_name: str
    amount: float
    new_balance: float
    new_utilization: float
    priority_rank: int
    reasoning: str


class ImpactSummarySchema(Schema):
    total_payment: float
    overall_utilization_before: float
    overall_utilization_after: float
    estimated_score_impact: int
    interest_saved: float
    cards_under_30_percent: int
    cards_optimal: int
    percent_of_optimal_achieved: int


class AllocationResponse(Schema):
    type: StrategyType
    name: str
    description: str
    allocations: List[CardAllocationSchema]
    expected_impact: ImpactSummarySchema


class ScenarioRequest(BaseModel):
    """
    Request body for POST /v1/scenarios/{kind}.

    Which fields are required depends on the kind:
    - payment: card_id, amount
    - purchase: card_id, amount, purchase_date
    - limit_increase: card_id, new_limit
    - new_card: new_limit (starting_balance, include_hard_inquiry optional)
    - card_closure: card_id
    - balance_transfer: from_card_id, to_card_id, amount (transfer_fee_percent optional)
    """

    cards: List[CardSchema]
    card_id: Optional[str] = None
    amount: Optional[float] = None
    purchase_date: Optional[date] = None
    new_limit: Optional[float] = None
    starting_balance: float = Field(0.0, ge=0)
    include_hard_inquiry: bool = True
    from_card_id: Optional[str] = None
    to_card_id: Optional[str] = None
    transfer_fee_percent: Optional[float] = Field(None, ge=0)
    reference_date: Optional[date] = None


class ScenarioMetricsSchema(Schema):
    total_credit_limit: float
    total_balance: float
    cards_over_30_percent: int
    cards_over_50_percent: int
    average_utilization: float


class ScenarioResultSchema(Schema):
    cards: List[CardSchema]
    overall_utilization: float
    utilization_change: float
    estimated_score_impact: ScoreRangeSchema
    score_change: ScoreRangeSchema
    metrics: ScenarioMetricsSchema
    warnings: List[str] = []
    recommendations: List[str] = []
    applied: bool = True

    def to_domain(self) -> ScenarioResult:
        return ScenarioResult(
            cards=[card.to_domain() for card in self.cards],
            overall_utilization=self.overall_utilization,
            utilization_change=self.utilization_change,
            estimated_score_impact=ScoreRange(**self.estimated_score_impact.model_dump()),
            score_change=ScoreRange(**self.score_change.model_dump()),
            metrics=ScenarioMetrics(**self.metrics.model_dump()),
            warnings=list(self.warnings),
            recommendations=list(self.recommendations),
            applied=self.applied,
        )


class ComparisonRequest(BaseModel):
    """Request body for POST /v1/scenarios/compare"""

    baseline: ScenarioResultSchema
    scenario: ScenarioResultSchema


class ComparisonResponse(Schema):
    baseline: ScenarioResultSchema
    scenario: ScenarioResultSchema
    improvements: List[str]
    declines: List[str]
    net_change: NetChange
