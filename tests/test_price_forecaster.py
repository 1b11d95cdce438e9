"""
Tests for the Market Price Forecaster.

Forecast tests pin the random source and the start date; January dates
have a seasonal factor of exactly 1, so prices must stay within ±5% of the
crop's base price.
"""
from datetime import date, timedelta
import random

import pytest

from agroadvisor.services.price_forecaster import (
    MarketRecord,
    analyze_price_history,
    forecast_price,
    max_drawdown,
    price_trend,
    price_volume_correlation,
    seasonal_factor,
    seasonal_pattern,
)

NEW_YEAR = date(2024, 1, 1)


class TestForecastPrice:

    def test_thirty_increasing_dates(self):
        forecast = forecast_price("wheat", rng=random.Random(1), today=NEW_YEAR)

        assert len(forecast.predictions) == 30
        dates = [p.date for p in forecast.predictions]
        assert dates[0] == NEW_YEAR + timedelta(days=1)
        assert all(later > earlier for earlier, later in zip(dates, dates[1:]))

    def test_prices_within_noise_band(self):
        forecast = forecast_price("wheat", rng=random.Random(1), today=NEW_YEAR)

        for point in forecast.predictions:
            assert 33.25 <= point.price <= 36.75
            assert point.confidence == 0.75

    def test_seeded_forecasts_are_reproducible(self):
        first = forecast_price("rice", rng=random.Random(7), today=NEW_YEAR)
        second = forecast_price("rice", rng=random.Random(7), today=NEW_YEAR)
        assert first.predictions == second.predictions

    def test_unknown_crop_uses_rice_baseline(self):
        forecast = forecast_price("mango", rng=random.Random(3), today=NEW_YEAR)

        assert forecast.crop == "mango"
        assert forecast.trend == "stable"
        for point in forecast.predictions:
            assert 42.75 <= point.price <= 47.25

    def test_factors(self):
        forecast = forecast_price("wheat", rng=random.Random(1), today=NEW_YEAR)

        assert forecast.trend == "increasing"
        assert forecast.factors == [
            "Seasonal variation: 20.0%",
            "Market trend: increasing",
            "Demand level: high",
            "Weather conditions",
            "Supply and demand balance",
        ]

    def test_prices_have_two_decimals(self):
        forecast = forecast_price("tomatoes", rng=random.Random(5), today=NEW_YEAR)
        for point in forecast.predictions:
            assert round(point.price, 2) == point.price


class TestSeasonalFactor:

    def test_january_is_neutral(self):
        assert seasonal_factor(date(2024, 1, 15), 0.3) == pytest.approx(1.0)

    def test_april_peak(self):
        # month index 3 -> sin(pi/2)
        assert seasonal_factor(date(2024, 4, 15), 0.2) == pytest.approx(1.2)

    def test_october_trough(self):
        assert seasonal_factor(date(2024, 10, 1), 0.2) == pytest.approx(0.8)


class TestHistoryAnalysis:

    @pytest.fixture
    def quarterly_records(self):
        return [
            MarketRecord(date=date(2024, 1, 15), price=100, volume=10),
            MarketRecord(date=date(2024, 2, 15), price=110, volume=10),
            MarketRecord(date=date(2024, 3, 15), price=120, volume=10),
        ]

    def test_basic_stats_and_trends(self, quarterly_records):
        analysis = analyze_price_history(quarterly_records)

        assert analysis["basic"]["currentPrice"] == 120
        assert analysis["basic"]["highestPrice"] == 120
        assert analysis["basic"]["lowestPrice"] == 100
        assert analysis["basic"]["averagePrice"] == pytest.approx(110)
        assert analysis["basic"]["priceRange"] == 20
        assert analysis["trends"]["longTerm"] == "increasing"

    def test_records_are_sorted_by_date(self, quarterly_records):
        analysis = analyze_price_history(list(reversed(quarterly_records)))
        assert analysis["basic"]["currentPrice"] == 120

    def test_constant_volume_has_zero_correlation(self, quarterly_records):
        analysis = analyze_price_history(quarterly_records)

        assert analysis["volume"]["correlation"] == 0.0
        assert analysis["volume"]["volumeTrend"] == "stable"

    def test_seasonality(self, quarterly_records):
        analysis = analyze_price_history(quarterly_records)

        assert list(analysis["seasonality"]["monthlyAverages"]) == [0, 1, 2]
        assert analysis["seasonality"]["seasonalPattern"] == "moderately_seasonal"

    def test_volatility(self, quarterly_records):
        analysis = analyze_price_history(quarterly_records)
        # population std dev of 100, 110, 120
        assert analysis["volatility"]["standardDeviation"] == pytest.approx(8.16497, rel=1e-4)
        assert analysis["volatility"]["maxDrawdown"] == 0.0


class TestHelpers:

    def test_price_trend_thresholds(self):
        assert price_trend([100, 104]) == "stable"
        assert price_trend([100, 106]) == "increasing"
        assert price_trend([100, 94]) == "decreasing"
        assert price_trend([0, 50]) == "stable"

    def test_max_drawdown(self):
        assert max_drawdown([100, 80, 120, 60]) == pytest.approx(0.5)

    def test_perfect_correlation(self):
        assert price_volume_correlation([1, 2, 3], [10, 20, 30]) == pytest.approx(1.0)

    def test_seasonal_pattern_needs_three_months(self):
        records = [
            MarketRecord(date=date(2024, 1, 1), price=10),
            MarketRecord(date=date(2024, 2, 1), price=50),
        ]
        assert seasonal_pattern(records) == "insufficient_data"

    def test_highly_seasonal(self):
        records = [
            MarketRecord(date=date(2024, 1, 1), price=10),
            MarketRecord(date=date(2024, 2, 1), price=20),
            MarketRecord(date=date(2024, 3, 1), price=30),
        ]
        assert seasonal_pattern(records) == "highly_seasonal"


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
