"""Prometheus metrics for calculation volume, budget rejections, and scenario outcomes"""

from prometheus_client import Counter, Histogram

# Calculation metrics
calculation_counter = Counter(
    "credit_optimizer_calculations_total",
    "Calculations served",
    ["operation"],  # plan | optimize | score_impact | priority | allocate | allocate_compare | scenario | scenario_compare | schedule
)

portfolio_size_histogram = Histogram(
    "credit_optimizer_portfolio_cards",
    "Number of cards per calculation request",
    buckets=[1, 2, 3, 5, 8, 13, 21],
)

# Allocation metrics
allocation_rejections_counter = Counter(
    "credit_optimizer_allocation_rejections_total",
    "Allocations rejected because the budget did not cover minimum payments",
)

# Scenario metrics
scenario_counter = Counter(
    "credit_optimizer_scenarios_total",
    "What-if scenarios simulated",
    ["kind", "outcome"],  # outcome: applied | refused
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_calculation(operation: str, card_count: int) -> None:
    """Record one calculation and the portfolio size it ran on"""
    calculation_counter.labels(operation=operation).inc()
    portfolio_size_histogram.observe(card_count)


def record_scenario(kind: str, refused: bool) -> None:
    """Record a scenario run; refused means a guard returned the baseline unchanged"""
    outcome = "refused" if refused else "applied"
    scenario_counter.labels(kind=kind, outcome=outcome).inc()
