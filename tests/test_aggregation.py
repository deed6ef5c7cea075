"""Tests for the aggregation engine."""

from datetime import datetime

import pytest

from app.domain.filters import Period, PeriodWindow
from app.domain.models import DailySummary
from app.services.aggregation import (
    build_chart_series,
    build_daily_summaries,
    build_product_rollups,
    build_recent_daily_series,
    compute_day_stats,
    compute_period_stats,
    filter_by_period,
)
from conftest import make_record


def summary(day, revenue, products=1, units=1, top="A"):
    return DailySummary(
        date=day,
        total_revenue=revenue,
        total_products=products,
        total_units_sold=units,
        top_product=top,
        top_product_revenue=revenue,
    )


class TestDailySummaries:
    def test_sorted_newest_first(self, two_day_ledger):
        summaries = build_daily_summaries(two_day_ledger)
        assert [s.date for s in summaries] == ["2024-01-02", "2024-01-01"]

    def test_totals_per_day(self):
        ledger = {
            "2024-03-05": [
                make_record("Rice", 20, 10, 50, "r"),
                make_record("Beans", 8, 3, 120, "b"),
            ]
        }
        [day] = build_daily_summaries(ledger)
        assert day.total_revenue == 860
        assert day.total_products == 2
        assert day.total_units_sold == 13
        assert day.top_product == "Rice"
        assert day.top_product_revenue == 500

    def test_top_product_tie_keeps_first_seen(self):
        ledger = {
            "2024-03-05": [
                make_record("First", 10, 2, 50, "f"),
                make_record("Second", 10, 1, 100, "s"),
            ]
        }
        [day] = build_daily_summaries(ledger)
        assert day.top_product == "First"

    def test_empty_ledger(self):
        assert build_daily_summaries({}) == []


class TestProductRollups:
    def test_two_day_rollup(self, two_day_ledger):
        [rollup] = build_product_rollups(two_day_ledger)
        assert rollup.product_name == "A"
        assert rollup.total_revenue == 900
        assert rollup.total_units_sold == 9
        assert rollup.average_price == 100
        assert rollup.appearances == 2
        assert rollup.last_sold == "2024-01-02"

    def test_sorted_by_revenue_with_stable_ties(self):
        ledger = {
            "2024-01-01": [
                make_record("Low", 10, 1, 10, "l"),
                make_record("TieA", 10, 2, 50, "ta"),
                make_record("TieB", 10, 1, 100, "tb"),
                make_record("High", 10, 10, 100, "h"),
            ]
        }
        names = [r.product_name for r in build_product_rollups(ledger)]
        assert names == ["High", "TieA", "TieB", "Low"]

    def test_names_are_case_sensitive(self):
        ledger = {"2024-01-01": [make_record("milk", 5, 1, 10, "m1"), make_record("Milk", 5, 1, 10, "m2")]}
        assert {r.product_name for r in build_product_rollups(ledger)} == {"milk", "Milk"}

    def test_zero_units_has_no_average_price(self):
        ledger = {"2024-01-01": [make_record("Unsold", 5, 0, 10, "u")]}
        [rollup] = build_product_rollups(ledger)
        assert rollup.total_units_sold == 0
        assert rollup.average_price is None

    def test_empty_ledger(self):
        assert build_product_rollups({}) == []


class TestFilterByPeriod:
    def test_all_returns_everything(self):
        summaries = [summary("2020-01-02", 1), summary("2020-01-01", 2)]
        assert filter_by_period(summaries, Period.ALL) == summaries

    def test_window_uses_explicit_now(self):
        now = datetime(2024, 1, 31, 15, 30)
        summaries = [
            summary("2024-01-31", 1),
            summary("2024-01-24", 2),
            summary("2024-01-23", 3),
        ]
        kept = filter_by_period(summaries, "7days", now=now)
        assert [s.date for s in kept] == ["2024-01-31", "2024-01-24"]

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            filter_by_period([], "365days")

    def test_period_window_start(self):
        window = PeriodWindow(period=Period.LAST_30_DAYS, now=datetime(2024, 3, 1))
        assert window.start.isoformat() == "2024-01-31"
        assert PeriodWindow(period=Period.ALL, now=datetime(2024, 3, 1)).start is None


class TestPeriodStats:
    def test_two_day_ledger(self, two_day_ledger):
        filtered = filter_by_period(build_daily_summaries(two_day_ledger), Period.ALL)
        stats = compute_period_stats(filtered)
        assert stats.days == 2
        assert stats.total.revenue == 900
        assert stats.avg_daily.revenue == 450
        # later day 500 against earlier day 400
        assert stats.growth_rate == pytest.approx(25.0)

    def test_equal_halves_have_no_growth(self):
        stats = compute_period_stats([summary("2024-01-02", 450), summary("2024-01-01", 450)])
        assert stats.growth_rate == 0

    def test_single_entry_has_no_growth(self):
        stats = compute_period_stats([summary("2024-01-01", 300)])
        assert stats.days == 1
        assert stats.growth_rate == 0

    def test_odd_count_gives_extra_day_to_earlier_half(self):
        filtered = [
            summary("2024-01-03", 300),
            summary("2024-01-02", 100),
            summary("2024-01-01", 100),
        ]
        # later = [300], earlier = [100, 100]
        assert compute_period_stats(filtered).growth_rate == pytest.approx(200.0)

    def test_zero_baseline(self):
        stats = compute_period_stats([summary("2024-01-02", 500), summary("2024-01-01", 0)])
        assert stats.growth_rate == 0

    def test_empty(self):
        stats = compute_period_stats([])
        assert stats.days == 0
        assert stats.total.revenue == 0
        assert stats.avg_daily.revenue == 0
        assert stats.growth_rate == 0

    def test_to_dict_is_camel_case(self):
        data = compute_period_stats([summary("2024-01-01", 10)]).to_dict()
        assert set(data) == {"days", "total", "avgDaily", "growthRate"}


class TestDayAndSeries:
    def test_day_stats_share(self):
        records = [make_record("A", 10, 3, 100, "a"), make_record("B", 10, 1, 100, "b")]
        stats = compute_day_stats("2024-01-01", records)
        assert stats.top_product == "A"
        assert stats.top_product_share == pytest.approx(75.0)

    def test_day_stats_empty(self):
        stats = compute_day_stats("2024-01-01", [])
        assert stats.top_product is None
        assert stats.top_product_share == 0

    def test_chart_series_is_chronological(self):
        points = build_chart_series([summary("2024-01-02", 5, units=7), summary("2024-01-01", 3, units=2)], "units")
        assert [p.label for p in points] == ["Jan 1", "Jan 2"]
        assert [p.value for p in points] == [2, 7]

    def test_chart_series_unknown_metric(self):
        with pytest.raises(ValueError):
            build_chart_series([], "profit")

    def test_recent_series_zero_fills(self, two_day_ledger):
        series = build_recent_daily_series(two_day_ledger, days=3, now=datetime(2024, 1, 3, 9))
        assert [p["date"] for p in series] == ["2024-01-01", "2024-01-02", "2024-01-03"]
        assert [p["revenue"] for p in series] == [400.0, 500.0, 0.0]
        assert [p["units"] for p in series] == [4, 5, 0]
        assert series[0]["label"] == "Jan 1"

    def test_recent_series_on_empty_ledger(self):
        series = build_recent_daily_series({}, days=2, now=datetime(2024, 1, 3))
        assert [p["revenue"] for p in series] == [0.0, 0.0]
