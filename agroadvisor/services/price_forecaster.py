"""
Market Price Forecaster.

30-day price curve from a per-crop base price, a sinusoidal seasonal
factor and up to ±5% uniform noise. Historical prices and external factors
are accepted for interface compatibility but do not enter the arithmetic.

Also provides descriptive analysis of recorded market history.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence
import logging
import math
import random

from agroadvisor import config
from agroadvisor.services.agronomic_reference import get_market_profile, round_half_up

logger = logging.getLogger(__name__)

FORECAST_DAYS = 30
FORECAST_CONFIDENCE = 0.75
NOISE_AMPLITUDE = 0.1  # total spread, i.e. ±5%


@dataclass(frozen=True)
class PricePoint:
    date: date
    price: float
    confidence: float = FORECAST_CONFIDENCE

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.isoformat(), "price": self.price, "confidence": self.confidence}


@dataclass
class PriceForecast:
    crop: str
    predictions: List[PricePoint] = field(default_factory=list)
    confidence: float = FORECAST_CONFIDENCE
    factors: List[str] = field(default_factory=list)
    trend: str = "stable"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "crop": self.crop,
            "predictions": [point.to_dict() for point in self.predictions],
            "confidence": self.confidence,
            "factors": list(self.factors),
            "trend": self.trend,
        }


@dataclass(frozen=True)
class MarketRecord:
    date: date
    price: float
    volume: float = 0.0


def default_rng() -> random.Random:
    """Random source seeded from AGROADVISOR_PRICE_SEED when it is set."""
    return random.Random(config.PRICE_FORECAST_SEED)


def seasonal_factor(day: date, variation: float) -> float:
    # Month index is zero-based (January = 0).
    return 1 + math.sin(((day.month - 1) / 12) * 2 * math.pi) * variation


def price_factors(profile) -> List[str]:
    return [
        f"Seasonal variation: {profile['seasonal_variation'] * 100:.1f}%",
        f"Market trend: {profile['trend']}",
        f"Demand level: {profile['demand']}",
        "Weather conditions",
        "Supply and demand balance",
    ]


def forecast_price(
    crop: str,
    historical_data: Optional[Sequence[MarketRecord]] = None,
    external_factors: Optional[Dict[str, Any]] = None,
    rng: Optional[random.Random] = None,
    today: Optional[date] = None,
) -> PriceForecast:
    """
    Forecast daily prices for the next 30 days.

    `historical_data` and `external_factors` are not used by the model.
    Pass `rng` for reproducible output.
    """
    rng = rng or default_rng()
    start = today or date.today()
    profile = get_market_profile(crop)
    base_price = profile["base_price"]
    variation = profile["seasonal_variation"]

    if historical_data:
        logger.debug(f"Ignoring {len(historical_data)} historical records for {crop} forecast")

    predictions = []
    for offset in range(1, FORECAST_DAYS + 1):
        day = start + timedelta(days=offset)
        noise = 1 + (rng.random() - 0.5) * NOISE_AMPLITUDE
        price = base_price * seasonal_factor(day, variation) * noise
        predictions.append(PricePoint(date=day, price=round_half_up(price, 2)))

    return PriceForecast(
        crop=crop,
        predictions=predictions,
        factors=price_factors(profile),
        trend=profile["trend"],
    )


# ==================== HISTORY ANALYSIS ====================

def price_trend(prices: Sequence[float]) -> str:
    if len(prices) < 2 or prices[0] == 0:
        return "stable"
    change = (prices[-1] - prices[0]) / prices[0]
    if change > 0.05:
        return "increasing"
    if change < -0.05:
        return "decreasing"
    return "stable"


def volume_trend(volumes: Sequence[float]) -> str:
    if len(volumes) < 2 or volumes[0] == 0:
        return "stable"
    change = (volumes[-1] - volumes[0]) / volumes[0]
    if change > 0.1:
        return "increasing"
    if change < -0.1:
        return "decreasing"
    return "stable"


def volatility(prices: Sequence[float]) -> float:
    """Population standard deviation."""
    if len(prices) < 2:
        return 0.0
    mean = sum(prices) / len(prices)
    return math.sqrt(sum((p - mean) ** 2 for p in prices) / len(prices))


def max_drawdown(prices: Sequence[float]) -> float:
    worst = 0.0
    peak = prices[0]
    for price in prices[1:]:
        if price > peak:
            peak = price
        elif peak > 0:
            worst = max(worst, (peak - price) / peak)
    return worst


def price_volume_correlation(prices: Sequence[float], volumes: Sequence[float]) -> float:
    """Pearson correlation; 0 when either series is constant."""
    n = len(prices)
    if n != len(volumes) or n < 2:
        return 0.0
    sum_p = sum(prices)
    sum_v = sum(volumes)
    sum_pv = sum(p * v for p, v in zip(prices, volumes))
    sum_p2 = sum(p * p for p in prices)
    sum_v2 = sum(v * v for v in volumes)

    numerator = n * sum_pv - sum_p * sum_v
    denominator_sq = (n * sum_p2 - sum_p ** 2) * (n * sum_v2 - sum_v ** 2)
    if denominator_sq <= 0:
        return 0.0
    return numerator / math.sqrt(denominator_sq)


def monthly_averages(records: Sequence[MarketRecord]) -> Dict[int, Dict[str, float]]:
    """Average price and volume keyed by zero-based month."""
    buckets: Dict[int, Dict[str, List[float]]] = OrderedDict()
    for record in records:
        bucket = buckets.setdefault(record.date.month - 1, {"prices": [], "volumes": []})
        bucket["prices"].append(record.price)
        bucket["volumes"].append(record.volume)

    return {
        month: {
            "averagePrice": sum(b["prices"]) / len(b["prices"]),
            "averageVolume": sum(b["volumes"]) / len(b["volumes"]),
        }
        for month, b in sorted(buckets.items())
    }


def seasonal_pattern(records: Sequence[MarketRecord]) -> str:
    averages = monthly_averages(records)
    if len(averages) < 3:
        return "insufficient_data"

    prices = [entry["averagePrice"] for entry in averages.values()]
    highest = max(prices)
    spread = highest - min(prices)
    if spread < highest * 0.1:
        return "stable"
    if spread >= highest * 0.3:
        return "highly_seasonal"
    return "moderately_seasonal"


def analyze_price_history(records: Sequence[MarketRecord]) -> Dict[str, Any]:
    """
    Descriptive statistics over date-ordered market records.

    Callers must supply at least two records.
    """
    records = sorted(records, key=lambda r: r.date)
    prices = [r.price for r in records]
    volumes = [r.volume for r in records]
    average = sum(prices) / len(prices)
    std_dev = volatility(prices)

    return {
        "basic": {
            "currentPrice": prices[-1],
            "highestPrice": max(prices),
            "lowestPrice": min(prices),
            "averagePrice": average,
            "priceRange": max(prices) - min(prices),
        },
        "trends": {
            "shortTerm": price_trend(prices[-30:]),
            "mediumTerm": price_trend(prices[-90:]),
            "longTerm": price_trend(prices),
        },
        "volatility": {
            "standardDeviation": std_dev,
            "coefficientOfVariation": std_dev / average if average else 0.0,
            "maxDrawdown": max_drawdown(prices),
        },
        "volume": {
            "averageVolume": sum(volumes) / len(volumes),
            "volumeTrend": volume_trend(volumes),
            "correlation": price_volume_correlation(prices, volumes),
        },
        "seasonality": {
            "monthlyAverages": monthly_averages(records),
            "seasonalPattern": seasonal_pattern(records),
        },
    }
