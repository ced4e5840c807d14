from finboard.filters import RatioFilters, Thresholds, normalize_filters, normalize_thresholds, rule_for
from finboard.metrics import ThresholdRule


def test_default_rules():
    rules = Thresholds().rules()
    assert rules["Quick Ratio"] == ThresholdRule(2.0, 1.0, "higher")
    assert rules["Current Ratio"] == ThresholdRule(2.0, 1.0, "higher")
    assert rules["Debt Ratio"] == ThresholdRule(1.0, 2.0, "lower")


def test_rule_for_matches_case_insensitively():
    assert rule_for(Thresholds(), "  quick ratio ") == ThresholdRule(2.0, 1.0, "higher")
    assert rule_for(Thresholds(), "Operating Margin") is None
    assert rule_for(Thresholds(), None) is None


def test_debt_direction_is_configurable():
    rule = rule_for(Thresholds(debt_direction="higher"), "Debt Ratio")
    assert rule.direction == "higher"
    assert rule_for(Thresholds(debt_direction="sideways"), "Debt Ratio").direction == "lower"


def test_normalize_thresholds_uses_defaults_for_bad_values():
    t = normalize_thresholds({"quick_good": "3", "quick_warn": "x", "min_liquidity_denominator": "$5,000"})
    assert t.quick_good == 3.0
    assert t.quick_warn == 1.0
    assert t.min_liquidity_denominator == 5000.0
    assert normalize_thresholds(None) == Thresholds()


def test_normalize_filters_defaults():
    f = normalize_filters({}, available_metrics=["Current Ratio", "Quick Ratio"])
    assert f == RatioFilters(metric="Current Ratio")


def test_normalize_filters_sanitizes_input():
    f = normalize_filters(
        {"org": " Roots ", "metric": "Debt Ratio", "year_min": "2021", "year_max": "soon", "chart_type": "PIE"}
    )
    assert f.org == "Roots"
    assert f.metric == "Debt Ratio"
    assert f.year_min == 2021
    assert f.year_max is None
    assert f.chart_type == "bar"
    assert normalize_filters({"chart_type": "Line"}).chart_type == "line"
