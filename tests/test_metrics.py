import pytest

from finboard.metrics import (
    CURRENT_RATIO,
    DEBT_RATIO,
    QUICK_RATIO,
    ThresholdRule,
    add_present,
    classify,
    compute_ratio,
    current_ratio,
    debt_ratio,
    liquidity_ratio,
    pct_of_total,
    quick_ratio,
    safe_div,
)


@pytest.mark.parametrize(
    "a,b,expected",
    [(6, 3, 2.0), (None, 3, None), (6, None, None), (6, 0, None), (0, 5, 0.0), (None, None, None)],
)
def test_safe_div(a, b, expected):
    assert safe_div(a, b) == expected


def test_liquidity_ratio_suppresses_small_denominator():
    assert liquidity_ratio(10_000, 500, minimum=1000) is None
    assert liquidity_ratio(None, 500, minimum=1000) is None
    assert liquidity_ratio(3000, -1500, minimum=1000) == -2.0
    assert liquidity_ratio(3000, 1000, minimum=1000) == 3.0


def test_pct_of_total():
    assert pct_of_total(25, 100) == 0.25
    assert pct_of_total(25, -100) == 0.25
    assert pct_of_total(-25, 100) == -0.25
    assert pct_of_total(25, 0) is None
    assert pct_of_total(None, 100) is None
    assert pct_of_total(25, None) is None


def test_add_present_propagates_absence():
    assert add_present(1, 2) == 3.0
    assert add_present(1, None) is None
    assert add_present() is None


def test_statement_ratios():
    fields = {
        "cash": 5000.0,
        "receivables": 3000.0,
        "current_assets": 10000.0,
        "current_liabilities": 4000.0,
        "total_liabilities": 6000.0,
        "net_assets": 3000.0,
    }
    assert quick_ratio(fields) == 2.0
    assert current_ratio(fields) == 2.5
    assert debt_ratio(fields) == 2.0
    assert compute_ratio(QUICK_RATIO, fields) == 2.0
    assert compute_ratio(CURRENT_RATIO, fields) == 2.5
    assert compute_ratio(DEBT_RATIO, fields) == 2.0
    assert compute_ratio("Unknown Ratio", fields) is None


def test_ratios_with_missing_inputs_are_absent():
    fields = {"cash": 5000.0, "current_assets": 10000.0, "current_liabilities": 4000.0}
    assert quick_ratio(fields) is None
    assert current_ratio(fields) == 2.5
    assert debt_ratio(fields) is None


def test_debt_ratio_has_no_liquidity_guard():
    assert debt_ratio({"total_liabilities": 100.0, "net_assets": 50.0}) == 2.0


HIGHER = ThresholdRule(good=2.0, warn=1.0, direction="higher")
LOWER = ThresholdRule(good=1.0, warn=2.0, direction="lower")


@pytest.mark.parametrize("value,expected", [(2.5, "good"), (2.0, "good"), (1.5, "warn"), (1.0, "warn"), (0.5, "bad")])
def test_classify_higher(value, expected):
    assert classify(value, HIGHER) == expected


@pytest.mark.parametrize("value,expected", [(0.5, "good"), (1.0, "good"), (1.5, "warn"), (2.0, "warn"), (2.5, "bad")])
def test_classify_lower(value, expected):
    assert classify(value, LOWER) == expected


def test_classify_neutral():
    assert classify(None, HIGHER) == "neutral"
    assert classify(float("nan"), HIGHER) == "neutral"
    assert classify(1.0, None) == "neutral"


def test_classify_higher_is_monotonic():
    rank = {"bad": 0, "warn": 1, "good": 2}
    values = [x / 4 for x in range(-8, 20)]
    ranks = [rank[classify(v, HIGHER)] for v in values]
    assert ranks == sorted(ranks)
