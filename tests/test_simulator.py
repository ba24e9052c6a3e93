import random
from collections import Counter

import pytest

from payment_service.app import simulator
from payment_service.app.simulator import (
    CHECKOUT_OUTCOMES,
    GATEWAY_OUTCOMES,
    INCORRECT_CARD,
    INSUFFICIENT_FUNDS,
    SERVER_ERROR,
    SUCCESS,
    pick_gateway_outcome,
    pick_outcome,
)


@pytest.mark.parametrize(
    "draw, expected",
    [
        (0.0, SUCCESS),
        (0.6999, SUCCESS),
        (0.7, INSUFFICIENT_FUNDS),
        (0.8999, INSUFFICIENT_FUNDS),
        (0.9, SERVER_ERROR),
        (0.9999, SERVER_ERROR),
    ],
)
def test_checkout_thresholds(draw, expected):
    assert pick_outcome(lambda: draw) == expected


@pytest.mark.parametrize(
    "draw, expected",
    [
        (0.0, SUCCESS),
        (0.5999, SUCCESS),
        (0.6, INCORRECT_CARD),
        (0.7699, INCORRECT_CARD),
        (0.77, INSUFFICIENT_FUNDS),
        (0.9399, INSUFFICIENT_FUNDS),
        (0.94, SERVER_ERROR),
        (0.9999, SERVER_ERROR),
    ],
)
def test_gateway_thresholds(draw, expected):
    assert pick_gateway_outcome(lambda: draw) == expected


def test_tables_are_cumulative_and_cover_unit_interval():
    for table in (CHECKOUT_OUTCOMES, GATEWAY_OUTCOMES):
        thresholds = [threshold for threshold, _ in table]
        assert thresholds == sorted(thresholds)
        assert thresholds[-1] == 1.0


def test_checkout_never_returns_incorrect_card():
    outcomes = {outcome for _, outcome in CHECKOUT_OUTCOMES}
    assert outcomes == {SUCCESS, INSUFFICIENT_FUNDS, SERVER_ERROR}


def test_draw_past_last_threshold_takes_last_outcome():
    assert simulator.pick_weighted(CHECKOUT_OUTCOMES, 1.0) == SERVER_ERROR


def test_checkout_distribution_is_70_20_10():
    rng = random.Random(20240601)
    counts = Counter(pick_outcome(rng.random) for _ in range(20000))
    assert counts[SUCCESS] / 20000 == pytest.approx(0.7, abs=0.02)
    assert counts[INSUFFICIENT_FUNDS] / 20000 == pytest.approx(0.2, abs=0.02)
    assert counts[SERVER_ERROR] / 20000 == pytest.approx(0.1, abs=0.02)


def test_gateway_distribution_is_60_17_17_6():
    rng = random.Random(7)
    counts = Counter(pick_gateway_outcome(rng.random) for _ in range(20000))
    assert counts[SUCCESS] / 20000 == pytest.approx(0.6, abs=0.02)
    assert counts[INCORRECT_CARD] / 20000 == pytest.approx(0.17, abs=0.02)
    assert counts[INSUFFICIENT_FUNDS] / 20000 == pytest.approx(0.17, abs=0.02)
    assert counts[SERVER_ERROR] / 20000 == pytest.approx(0.06, abs=0.02)
