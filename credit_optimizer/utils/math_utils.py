"""Numeric helpers shared by the calculators"""

from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a spreadsheet does (2.5 -> 3), not banker's rounding"""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_points(value: float) -> int:
    """Round a score estimate to whole points"""
    return int(round_half_up(value))
