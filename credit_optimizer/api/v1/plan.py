"""Payment timing endpoints - single-card plan, portfolio optimization, schedule, score impact"""

import logging
import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from credit_optimizer.api.dependencies import get_policy, get_request_id
from credit_optimizer.api.v1.schemas import (
    OptimizationResponse,
    PaymentEventSchema,
    PlanRequest,
    PlanResponse,
    PortfolioRequest,
    ScheduleRequest,
    ScoreRangeSchema,
)
from credit_optimizer.domain.exceptions import InvalidCardError
from credit_optimizer.domain.optimizer import optimize_portfolio, payment_schedule
from credit_optimizer.domain.planner import plan_card
from credit_optimizer.domain.policy import OptimizerPolicy
from credit_optimizer.domain.score_impact import estimate_score_impact
from credit_optimizer.infrastructure.observability.logging import log_calculation
from credit_optimizer.infrastructure.observability.metrics import record_calculation

router = APIRouter()


def _elapsed_ms(start_time: float) -> float:
    return (time.time() - start_time) * 1000


@router.post("/plan", response_model=PlanResponse)
def create_plan(
    request_body: PlanRequest,
    request: Request,
    policy: OptimizerPolicy = Depends(get_policy),
):
    """
    Two-payment plan for a single card.

    Returns:
        Optimization payment before the statement date, balance payment by the due date
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        card = request_body.card.to_domain()
    except InvalidCardError as e:
        logging.warning(f"Invalid card: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    card_plan = plan_card(card, request_body.target_utilization, request_body.reference_date, policy)

    record_calculation("plan", 1)
    log_calculation(request_id, "plan", 1, _elapsed_ms(start_time))

    return PlanResponse.model_validate(card_plan)


@router.post("/optimize", response_model=OptimizationResponse)
def optimize(
    request_body: PortfolioRequest,
    request: Request,
    policy: OptimizerPolicy = Depends(get_policy),
):
    """
    Plan every card in the portfolio, highest utilization first.

    Returns:
        Per-card plans with overall utilization before/after and estimated score impact
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        cards = request_body.domain_cards()
    except InvalidCardError as e:
        logging.warning(f"Invalid card: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    result = optimize_portfolio(cards, request_body.target_utilization, request_body.reference_date, policy)

    record_calculation("optimize", len(cards))
    log_calculation(request_id, "optimize", len(cards), _elapsed_ms(start_time))

    return OptimizationResponse.model_validate(result)


@router.post("/schedule", response_model=List[PaymentEventSchema])
def create_schedule(
    request_body: ScheduleRequest,
    request: Request,
    policy: OptimizerPolicy = Depends(get_policy),
):
    """Portfolio plan flattened into dated payment events, earliest first"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        cards = request_body.domain_cards()
    except InvalidCardError as e:
        logging.warning(f"Invalid card: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    result = optimize_portfolio(cards, request_body.target_utilization, request_body.reference_date, policy)
    events = payment_schedule(result, include_statement_dates=request_body.include_statement_dates)

    record_calculation("schedule", len(cards))
    log_calculation(request_id, "schedule", len(cards), _elapsed_ms(start_time))

    return [PaymentEventSchema.model_validate(event) for event in events]


@router.get("/score-impact", response_model=ScoreRangeSchema)
def get_score_impact(
    request: Request,
    improvement: float = Query(..., description="Utilization drop in percentage points (negative = increase)"),
    starting_utilization: float = Query(50.0, ge=0, description="Overall utilization before the change"),
    policy: OptimizerPolicy = Depends(get_policy),
):
    """Estimated credit score change for a utilization move"""
    start_time = time.time()

    impact = estimate_score_impact(improvement, starting_utilization, policy)

    record_calculation("score_impact", 0)
    log_calculation(get_request_id(request), "score_impact", 0, _elapsed_ms(start_time))

    return ScoreRangeSchema.model_validate(impact)
