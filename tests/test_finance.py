import random
from decimal import Decimal

import pytest

from gymledger.core.finance import (
    AssignmentRate,
    BlendedRates,
    Rates,
    aggregate,
    class_financials,
    estimate_group_financials,
    growth_from_zero_baseline,
    growth_with_unit_floor,
    half_up,
    money,
    occupancy_percent,
)

RATES = Rates(revenue_per_student=Decimal("28"), fixed_cost_per_class=Decimal("78"))
PROFESSOR = AssignmentRate(hourly_rate=Decimal("100"), multiplier=Decimal("2"))


def test_single_class_scenario():
    fin = class_financials(10, [PROFESSOR], RATES)
    assert fin.revenue == Decimal("280")
    assert fin.role_cost == Decimal("100")
    assert fin.rank_cost == Decimal("20")
    assert fin.cost == Decimal("198")
    assert fin.result == Decimal("82")
    assert occupancy_percent(10, 20) == 50


def test_empty_class_still_pays_fixed_and_role_cost():
    fin = class_financials(0, [PROFESSOR], RATES)
    assert fin.revenue == 0
    assert fin.cost == Decimal("178")
    assert fin.result == Decimal("-178")


def test_class_without_teachers_costs_fixed_only():
    fin = class_financials(5, [], RATES)
    assert fin.cost == Decimal("78")
    assert fin.result == Decimal("62")


def test_multiple_teachers_sum_rates_and_multipliers():
    intern = AssignmentRate(hourly_rate=Decimal("50"), multiplier=Decimal("1"))
    fin = class_financials(20, [PROFESSOR, intern], RATES)
    assert fin.role_cost == Decimal("150")
    assert fin.rank_cost == Decimal("60")
    assert fin.cost == Decimal("288")
    assert fin.result == Decimal("272")


def test_cost_and_result_identities_hold_for_random_classes():
    rng = random.Random(7)
    for _ in range(200):
        assignments = [
            AssignmentRate(
                hourly_rate=Decimal(rng.randint(100, 20000)) / 100,
                multiplier=Decimal(rng.randint(0, 500)) / 100,
            )
            for _ in range(rng.randint(0, 3))
        ]
        fin = class_financials(rng.randint(0, 40), assignments, RATES)
        assert fin.cost == fin.fixed_cost + fin.role_cost + fin.rank_cost
        assert fin.result == fin.revenue - fin.cost


def test_aggregate_adds_each_component():
    group = aggregate([class_financials(10, [PROFESSOR], RATES), class_financials(0, [PROFESSOR], RATES)])
    assert group.revenue == Decimal("280")
    assert group.fixed_cost == Decimal("156")
    assert group.role_cost == Decimal("200")
    assert group.rank_cost == Decimal("20")
    assert group.result == Decimal("-96")


def test_blended_estimate():
    blended = BlendedRates(role_cost_per_class=Decimal("112.5"), multiplier_per_student=Decimal("2.25"))
    fin = estimate_group_financials(3, 15, RATES, blended)
    assert fin.revenue == Decimal("420")
    assert fin.fixed_cost == Decimal("234")
    assert fin.role_cost == Decimal("337.5")
    assert fin.rank_cost == Decimal("33.75")
    assert money(fin.result) == Decimal("-185.25")


@pytest.mark.parametrize(
    "attendance,capacity,expected",
    [(10, 20, 50), (20, 20, 100), (25, 20, 100), (5, 0, 0), (0, 20, 0), (1, 3, 33), (1, 8, 13)],
)
def test_occupancy_is_bounded(attendance, capacity, expected):
    assert occupancy_percent(attendance, capacity) == expected


@pytest.mark.parametrize(
    "value,expected",
    [(Decimal("2.5"), 3), (Decimal("-2.5"), -2), (Decimal("56.09"), 56), (Decimal("-12"), -12)],
)
def test_half_up_rounds_halves_upwards(value, expected):
    assert half_up(value) == expected


def test_money_growth_from_zero_previous():
    assert growth_from_zero_baseline(Decimal("500"), Decimal("0")) == 100
    assert growth_from_zero_baseline(Decimal("0"), Decimal("0")) == 0
    assert growth_from_zero_baseline(Decimal("-10"), Decimal("0")) == 0


def test_smaller_loss_reads_as_growth():
    assert growth_from_zero_baseline(Decimal("-50"), Decimal("-100")) == 50
    assert growth_from_zero_baseline(Decimal("-150"), Decimal("-100")) == -50


def test_count_growth_treats_zero_previous_as_one():
    assert growth_with_unit_floor(5, 0) == 400
    assert growth_with_unit_floor(0, 0) == -100
    assert growth_with_unit_floor(3, 2) == 50
    assert growth_with_unit_floor(44, 50) == -12
