# hrms/scoring/rounding.py

from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, places: int = 0) -> float:
    """
    Round .5 away from zero instead of Python's banker's rounding, so that
    62.5 becomes 63 the way score consumers expect.
    """
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)
