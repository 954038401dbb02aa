"""Budget endpoints - payment priority ranking and strategy-based allocation"""

import logging
import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from credit_optimizer.api.dependencies import get_policy, get_request_id
from credit_optimizer.api.v1.schemas import (
    AllocationRequest,
    AllocationResponse,
    PriorityRequest,
    PriorityScoreSchema,
)
from credit_optimizer.domain.allocation import allocate_budget, compare_strategies
from credit_optimizer.domain.exceptions import (
    InsufficientBudgetError,
    InvalidCardError,
    UnknownStrategyError,
)
from credit_optimizer.domain.policy import OptimizerPolicy
from credit_optimizer.domain.priority import rank_by_priority
from credit_optimizer.infrastructure.observability.logging import log_calculation
from credit_optimizer.infrastructure.observability.metrics import (
    allocation_rejections_counter,
    record_calculation,
)

router = APIRouter()


def _insufficient_budget(e: InsufficientBudgetError, request_id: str) -> HTTPException:
    allocation_rejections_counter.inc()
    logging.warning(f"Insufficient budget: {e}", extra={"request_id": request_id})
    return HTTPException(
        status_code=422,
        detail={
            "message": str(e),
            "budget": e.budget,
            "required": e.required,
            "shortfall": e.shortfall,
        },
    )


@router.post("/priority", response_model=List[PriorityScoreSchema])
def rank_cards(
    request_body: PriorityRequest,
    request: Request,
    policy: OptimizerPolicy = Depends(get_policy),
):
    """
    Rank cards by payment priority.

    Returns:
        Scores (0-100) with per-component breakdown, rank 1 first
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        cards = [card.to_domain() for card in request_body.cards]
    except InvalidCardError as e:
        logging.warning(f"Invalid card: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    scores = rank_by_priority(cards, request_body.reference_date, policy)

    duration_ms = (time.time() - start_time) * 1000
    record_calculation("priority", len(cards))
    log_calculation(request_id, "priority", len(cards), duration_ms)

    return [PriorityScoreSchema.model_validate(score) for score in scores]


@router.post("/allocate", response_model=AllocationResponse)
def allocate(
    request_body: AllocationRequest,
    request: Request,
    policy: OptimizerPolicy = Depends(get_policy),
):
    """
    Distribute a payment budget across cards with one strategy.

    Flow:
    1. Reject budgets below the sum of minimum payments (422 with shortfall)
    2. Cover every minimum payment
    3. Spend the rest per the strategy
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        cards = [card.to_domain() for card in request_body.cards]
        result = allocate_budget(
            request_body.strategy, cards, request_body.budget, request_body.reference_date, policy
        )

    except InsufficientBudgetError as e:
        raise _insufficient_budget(e, request_id)

    except UnknownStrategyError as e:
        logging.warning(f"Unknown strategy: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidCardError as e:
        logging.warning(f"Invalid card: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    duration_ms = (time.time() - start_time) * 1000
    record_calculation("allocate", len(cards))
    log_calculation(request_id, "allocate", len(cards), duration_ms)

    return AllocationResponse.model_validate(result)


@router.post("/allocate/compare", response_model=List[AllocationResponse])
def compare_allocations(
    request_body: AllocationRequest,
    request: Request,
    policy: OptimizerPolicy = Depends(get_policy),
):
    """Run every strategy on the same budget; the strategy field is ignored"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        cards = [card.to_domain() for card in request_body.cards]
        results = compare_strategies(cards, request_body.budget, request_body.reference_date, policy)

    except InsufficientBudgetError as e:
        raise _insufficient_budget(e, request_id)

    except InvalidCardError as e:
        logging.warning(f"Invalid card: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    duration_ms = (time.time() - start_time) * 1000
    record_calculation("allocate_compare", len(cards))
    log_calculation(request_id, "allocate_compare", len(cards), duration_ms)

    return [AllocationResponse.model_validate(result) for result in results]
