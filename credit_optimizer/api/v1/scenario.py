"""What-if scenario endpoints"""

import logging
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request

from credit_optimizer.api.dependencies import get_policy, get_request_id
from credit_optimizer.api.v1.schemas import (
    ComparisonRequest,
    ComparisonResponse,
    ScenarioRequest,
    ScenarioResultSchema,
)
from credit_optimizer.domain.exceptions import InvalidCardError, UnknownScenarioError
from credit_optimizer.domain.policy import OptimizerPolicy
from credit_optimizer.domain.scenarios import compare_scenarios, run_scenario
from credit_optimizer.infrastructure.observability.logging import log_calculation
from credit_optimizer.infrastructure.observability.metrics import record_calculation, record_scenario

router = APIRouter()

# Simulator keyword -> request field, per scenario kind
REQUIRED_PARAMS: Dict[str, Dict[str, str]] = {
    "payment": {"card_id": "card_id", "payment_amount": "amount"},
    "purchase": {"card_id": "card_id", "purchase_amount": "amount", "purchase_date": "purchase_date"},
    "limit_increase": {"card_id": "card_id", "new_limit": "new_limit"},
    "new_card": {"new_card_limit": "new_limit"},
    "card_closure": {"card_id": "card_id"},
    "balance_transfer": {"from_card_id": "from_card_id", "to_card_id": "to_card_id", "transfer_amount": "amount"},
}

OPTIONAL_PARAMS: Dict[str, Dict[str, str]] = {
    "purchase": {"reference_date": "reference_date"},
    "new_card": {"starting_balance": "starting_balance", "include_hard_inquiry": "include_hard_inquiry"},
    "balance_transfer": {"transfer_fee_percent": "transfer_fee_percent"},
}


def build_scenario_params(kind: str, request_body: ScenarioRequest) -> Dict[str, Any]:
    """
    Map request fields onto the simulator's keyword arguments.

    Unknown kinds map to no parameters; the dispatcher rejects them.

    Raises:
        HTTPException: 422 when a field the kind needs is missing
    """
    params: Dict[str, Any] = {}

    missing = []
    for keyword, field_name in REQUIRED_PARAMS.get(kind, {}).items():
        value = getattr(request_body, field_name)
        if value is None:
            missing.append(field_name)
        params[keyword] = value
    if missing:
        raise HTTPException(status_code=422, detail=f"Scenario '{kind}' requires: {', '.join(missing)}")

    for keyword, field_name in OPTIONAL_PARAMS.get(kind, {}).items():
        value = getattr(request_body, field_name)
        if value is not None:
            params[keyword] = value

    return params


# Declared before /scenarios/{kind} so "compare" is not read as a kind
@router.post("/scenarios/compare", response_model=ComparisonResponse)
def compare(request_body: ComparisonRequest, request: Request):
    """
    Compare two scenario results metric by metric.

    Returns:
        Improvements, declines and the net direction of the change
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        baseline = request_body.baseline.to_domain()
        scenario = request_body.scenario.to_domain()
    except InvalidCardError as e:
        logging.warning(f"Invalid card: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    comparison = compare_scenarios(baseline, scenario)

    duration_ms = (time.time() - start_time) * 1000
    card_count = len(scenario.cards)
    record_calculation("scenario_compare", card_count)
    log_calculation(request_id, "scenario_compare", card_count, duration_ms)

    return ComparisonResponse.model_validate(comparison)


@router.post("/scenarios/{kind}", response_model=ScenarioResultSchema)
def simulate(
    kind: str,
    request_body: ScenarioRequest,
    request: Request,
    policy: OptimizerPolicy = Depends(get_policy),
):
    """
    Apply a hypothetical action to the card set.

    Kinds: payment, purchase, limit_increase, new_card, card_closure, balance_transfer.
    A refused action (unknown card, amount over limit, ...) still returns 200 with
    the unchanged baseline, a warning, and applied=false.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    params = build_scenario_params(kind, request_body)

    try:
        cards = [card.to_domain() for card in request_body.cards]
        result = run_scenario(kind, cards, policy=policy, **params)

    except UnknownScenarioError as e:
        logging.warning(f"Unknown scenario: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidCardError as e:
        logging.warning(f"Invalid card: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    duration_ms = (time.time() - start_time) * 1000
    record_scenario(kind, refused=not result.applied)
    record_calculation("scenario", len(cards))
    log_calculation(request_id, f"scenario:{kind}", len(cards), duration_ms)

    return ScenarioResultSchema.model_validate(result)
