"""
Weighted random outcomes for the mock gateway.

Each table is a list of ``(threshold, outcome)`` pairs with increasing
cumulative thresholds; a uniform draw in [0, 1) picks the first row whose
threshold is above it.
"""
import random
from typing import Callable, List, Tuple

# Checkout authorization outcomes.
SUCCESS = "SUCCESS"
INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
SERVER_ERROR = "SERVER_ERROR"

# Extra outcome of the standalone /authorize surface.
INCORRECT_CARD = "INCORRECT_CARD"

# 70 / 20 / 10
CHECKOUT_OUTCOMES: List[Tuple[float, str]] = [
    (0.7, SUCCESS),
    (0.9, INSUFFICIENT_FUNDS),
    (1.0, SERVER_ERROR),
]

# 60 / 17 / 17 / 6
GATEWAY_OUTCOMES: List[Tuple[float, str]] = [
    (0.6, SUCCESS),
    (0.77, INCORRECT_CARD),
    (0.94, INSUFFICIENT_FUNDS),
    (1.0, SERVER_ERROR),
]


def pick_weighted(table: List[Tuple[float, str]], draw: float) -> str:
    for threshold, outcome in table:
        if draw < threshold:
            return outcome
    # draw is expected in [0, 1); anything at or past the last threshold takes the last row
    return table[-1][1]


def pick_outcome(rand: Callable[[], float] = random.random) -> str:
    """Authorization result used by checkout."""
    return pick_weighted(CHECKOUT_OUTCOMES, rand())


def pick_gateway_outcome(rand: Callable[[], float] = random.random) -> str:
    """Result of the one-shot /authorize endpoint. Not the same distribution as checkout."""
    return pick_weighted(GATEWAY_OUTCOMES, rand())
