"""Unit tests for budget allocation strategies"""

from datetime import date
import pytest
from credit_optimizer.domain.allocation import (
    allocate_budget,
    allocate_equally,
    allocate_for_max_score,
    allocate_for_min_interest,
    allocate_for_utilization,
    compare_strategies,
    estimate_payment_event_impact,
    minimum_payment,
    validate_budget,
)
from credit_optimizer.domain.exceptions import InsufficientBudgetError, UnknownStrategyError
from credit_optimizer.domain.models import Card, StrategyType


def _amounts(strategy) -> dict[str, float]:
    return {a.card_id: a.amount for a in strategy.allocations}


def test_minimum_payment(portfolio: list[Card]):
    """Test 2% of balance with a $25 floor"""
    assert [minimum_payment(card) for card in portfolio] == [100, 180, 25]


def test_minimum_payment_capped_at_balance():
    card = Card(card_id="tiny", name="Tiny", credit_limit=1000, current_balance=10, statement_day=1, due_day=20)
    assert minimum_payment(card) == 10


def test_insufficient_budget(portfolio: list[Card], reference_date: date):
    """Test budget below the 305 of minimums is rejected with the shortfall"""
    with pytest.raises(InsufficientBudgetError) as exc_info:
        allocate_budget(StrategyType.MAX_SCORE, portfolio, 300, reference_date)

    assert exc_info.value.shortfall == 5.0
    assert exc_info.value.required == 305
    assert "short by $5.00" in str(exc_info.value)


@pytest.mark.parametrize("strategy", list(StrategyType))
def test_every_strategy_rejects_insufficient_budget(strategy, portfolio: list[Card], reference_date: date):
    with pytest.raises(InsufficientBudgetError):
        allocate_budget(strategy, portfolio, 100, reference_date)


def test_validate_budget_returns_remainder(portfolio: list[Card]):
    assert validate_budget(portfolio, 1000) == pytest.approx(695)


def test_unknown_strategy(portfolio: list[Card]):
    with pytest.raises(UnknownStrategyError):
        allocate_budget("snowball", portfolio, 1000)


def test_max_score_threshold_paydown(portfolio: list[Card], reference_date: date):
    """Test card-b is brought to 50% first, then the rest goes toward 30% by priority"""
    result = allocate_for_max_score(portfolio, 2000, reference_date)
    amounts = _amounts(result)

    assert amounts["card-a"] == pytest.approx(100)
    assert amounts["card-b"] == pytest.approx(1875)
    assert amounts["card-c"] == pytest.approx(25)
    assert sum(amounts.values()) == pytest.approx(2000)

    card_b = next(a for a in result.allocations if a.card_id == "card-b")
    assert card_b.reasoning == "Get under 30% utilization"
    assert card_b.priority_rank == 1


def test_max_score_budget_beyond_balances(portfolio: list[Card], reference_date: date):
    """Test no card is paid past zero and leftover budget is not invented"""
    result = allocate_for_max_score(portfolio, 20000, reference_date)

    assert all(a.new_balance == pytest.approx(0) for a in result.allocations)
    assert result.expected_impact.total_payment == 15000
    assert result.expected_impact.cards_optimal == 3


def test_min_interest_highest_apr_first(portfolio: list[Card], reference_date: date):
    result = allocate_for_min_interest(portfolio, 1000, reference_date)
    amounts = _amounts(result)

    assert amounts == pytest.approx({"card-a": 795, "card-b": 180, "card-c": 25})
    assert {a.card_id: a.priority_rank for a in result.allocations} == {"card-a": 1, "card-b": 2, "card-c": 3}
    assert result.expected_impact.interest_saved > 0


def test_utilization_focus_highest_utilization_first(portfolio: list[Card], reference_date: date):
    result = allocate_for_utilization(portfolio, 1000, reference_date)

    assert _amounts(result) == pytest.approx({"card-a": 100, "card-b": 875, "card-c": 25})


def test_pay_in_order_moves_on_after_payoff(portfolio: list[Card], reference_date: date):
    """Test budget overflows to the next card once the first is paid off"""
    result = allocate_for_min_interest(portfolio, 7000, reference_date)
    amounts = _amounts(result)

    assert amounts["card-a"] == pytest.approx(5000)
    assert amounts["card-b"] == pytest.approx(1975)
    assert sum(amounts.values()) == pytest.approx(7000)


def test_equal_distribution(portfolio: list[Card], reference_date: date):
    result = allocate_equally(portfolio, 1200, reference_date)

    assert _amounts(result) == pytest.approx({"card-a": 400, "card-b": 400, "card-c": 400})
    assert all(a.reasoning == "Equal distribution" for a in result.allocations)


def test_equal_distribution_capped_at_balance(portfolio: list[Card], reference_date: date):
    result = allocate_equally(portfolio, 4500, reference_date)
    card_c = next(a for a in result.allocations if a.card_id == "card-c")

    assert card_c.amount == 1000
    assert card_c.new_balance == 0
    assert card_c.reasoning == "Equal share capped at balance - paid in full"


def test_equal_distribution_honors_minimums(portfolio: list[Card], reference_date: date):
    """Test cards whose minimum exceeds the even share get the minimum, the rest re-split"""
    result = allocate_equally(portfolio, 305, reference_date)
    by_id = {a.card_id: a for a in result.allocations}

    assert by_id["card-a"].amount == pytest.approx(100)
    assert by_id["card-b"].amount == pytest.approx(180)
    assert by_id["card-c"].amount == pytest.approx(25)
    assert by_id["card-b"].reasoning == "Minimum payment exceeds equal share"
    assert by_id["card-c"].reasoning == "Equal distribution"


@pytest.mark.parametrize("strategy", list(StrategyType))
def test_allocations_never_exceed_budget_or_balance(strategy, portfolio: list[Card], reference_date: date):
    result = allocate_budget(strategy, portfolio, 3000, reference_date)
    balances = {card.card_id: card.current_balance for card in portfolio}

    assert sum(a.amount for a in result.allocations) <= 3000 + 1e-6
    for allocation in result.allocations:
        assert 0 <= allocation.amount <= balances[allocation.card_id] + 1e-6
        assert allocation.new_balance >= -1e-6


def test_compare_strategies(portfolio: list[Card], reference_date: date):
    results = compare_strategies(portfolio, 2000, reference_date)

    assert [r.type for r in results] == list(StrategyType)
    assert all(r.expected_impact.overall_utilization_before == 45.5 for r in results)


def test_impact_summary(portfolio: list[Card], reference_date: date):
    impact = allocate_for_max_score(portfolio, 2000, reference_date).expected_impact

    assert impact.total_payment == 2000
    assert impact.overall_utilization_after == 39.4  # 13000 / 33000
    assert impact.cards_under_30_percent == 1
    assert impact.percent_of_optimal_achieved == 15  # 2000 of 13350


def test_payment_event_impact():
    """Test threshold crossing bonuses plus half a point per percentage point"""
    assert estimate_payment_event_impact(95, 25) == 125  # 30 + 20 + 15 + 25 + 35
    assert estimate_payment_event_impact(55, 45) == 20
    assert estimate_payment_event_impact(20, 25) == 0


def test_inputs_not_mutated(portfolio: list[Card], reference_date: date):
    allocate_for_max_score(portfolio, 5000, reference_date)
    assert [card.current_balance for card in portfolio] == [5000, 9000, 1000]
