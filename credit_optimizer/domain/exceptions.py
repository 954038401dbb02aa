"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidCardError(DomainException):
    """Card data violates the model invariants (limit, balance, cycle days, APR)"""

    pass


class InsufficientBudgetError(DomainException):
    """Allocation budget does not cover the sum of minimum payments"""

    def __init__(self, budget: float, required: float):
        self.budget = budget
        self.required = required
        self.shortfall = round(required - budget, 2)
        super().__init__(
            f"Budget (${budget:,.2f}) is below required minimums (${required:,.2f}); "
            f"short by ${self.shortfall:,.2f}"
        )


class UnknownStrategyError(DomainException):
    """Requested allocation strategy does not exist"""

    pass


class UnknownScenarioError(DomainException):
    """Requested scenario kind does not exist"""

    pass
