import math

import pytest

from restake_validator.core.validation_core.tick_math import price_to_tick, tick_to_price


def test_tick_zero_is_unit_price():
    assert tick_to_price(0) == 1.0
    assert price_to_tick(1.0) == 0


def test_single_tick_step():
    assert tick_to_price(1) == pytest.approx(1.0001)
    assert tick_to_price(-1) == pytest.approx(1 / 1.0001)


@pytest.mark.parametrize("tick", list(range(-200_000, 200_001, 9_973)) + [1, -1, 76_012, 80_067])
def test_round_trip_within_boundary_imprecision(tick):
    # float rounding may land a hair under the boundary and floor to tick - 1
    assert price_to_tick(tick_to_price(tick)) in (tick, tick - 1)


@pytest.mark.parametrize("tick", list(range(-200_000, 200_001, 9_973)) + [1, -1, 76_012, 80_067])
def test_round_trip_exact_away_from_boundary(tick):
    nudged = tick_to_price(tick) * (1 + 1e-9)
    assert price_to_tick(nudged) == tick


def test_price_to_tick_brackets_price():
    t = price_to_tick(2000)
    assert tick_to_price(t) <= 2000 * (1 + 1e-12)
    assert tick_to_price(t + 1) > 2000
    assert t == math.floor(math.log(2000) / math.log(1.0001))


def test_tick_to_price_is_monotonic():
    prices = [tick_to_price(t) for t in range(-5, 6)]
    assert prices == sorted(prices)


@pytest.mark.parametrize("price", [0, -1.5])
def test_price_to_tick_rejects_non_positive(price):
    with pytest.raises(ValueError):
        price_to_tick(price)
