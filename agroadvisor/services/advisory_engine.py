"""
Advisory Engine facade.

Single entry point used by the HTTP layer. Takes plain dict payloads,
rejects missing or non-numeric required fields with InvalidInputError,
then delegates to the independent engines. Engines themselves never fail
on well-typed input; odd values only lower confidence.
"""
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence
import json
import logging
import math
import random

from agroadvisor.services.fertilizer_planner import (
    FertilizerPlan,
    FertilizerPlanner,
    SoilAnalysis,
    build_fertilizer_guide,
)
from agroadvisor.services.health_monitor import HealthReport, SensorReading, monitor_health
from agroadvisor.services.irrigation_scheduler import (
    ForecastDay,
    IrrigationPlan,
    SensorSnapshot,
    forecast_water_usage,
    schedule_irrigation,
)
from agroadvisor.services.price_forecaster import (
    MarketRecord,
    PriceForecast,
    analyze_price_history,
    default_rng,
    forecast_price,
)
from agroadvisor.services.yield_estimator import (
    MODEL_TYPE as YIELD_MODEL_TYPE,
    YieldEstimate,
    YieldFeatures,
    estimate_yield,
)

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """Raised when a payload is missing required fields or has non-numeric values."""

    def __init__(self, message: str, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


MODELS = {
    "yieldPrediction": YIELD_MODEL_TYPE,
    "fertilizerRecommendation": "rule-based-decision-path",
    "irrigationOptimization": "rule-based-calculation",
    "healthMonitoring": "sensor-data-analysis",
    "pricePrediction": "time-series-analysis",
}


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def require_numbers(payload: Mapping[str, Any], fields: Iterable[str], context: str) -> Dict[str, float]:
    """Return the named fields as floats or raise listing every bad field."""
    values = {}
    bad = []
    for name in fields:
        number = _to_number(payload.get(name))
        if number is None:
            bad.append(name)
        else:
            values[name] = number
    if bad:
        raise InvalidInputError(
            f"{context}: missing or non-numeric fields: {', '.join(bad)}", fields=bad
        )
    return values


def optional_number(payload: Mapping[str, Any], name: str, context: str) -> Optional[float]:
    if payload.get(name) is None:
        return None
    return require_numbers(payload, [name], context)[name]


def require_text(payload: Mapping[str, Any], name: str, context: str) -> str:
    value = payload.get(name)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{context}: '{name}' is required", fields=[name])
    return value.strip()


def parse_date(value: Any, name: str, context: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()
        except ValueError:
            pass
    raise InvalidInputError(f"{context}: '{name}' must be an ISO date", fields=[name])


class AdvisoryEngine:
    """
    Facade over the advisory engines.

    `prices` replaces the default per-kg fertilizer price table, `rng`
    fixes the price forecaster's random source and `today` supplies the
    calendar anchor for schedules and forecasts.
    """

    def __init__(
        self,
        prices: Optional[Mapping[str, float]] = None,
        rng: Optional[random.Random] = None,
        today: Callable[[], date] = date.today,
    ):
        self.fertilizer_planner = FertilizerPlanner(prices)
        self.rng = rng or default_rng()
        self.today = today

    # ==================== OPERATIONS ====================

    def estimate_yield(self, payload: Mapping[str, Any]) -> YieldEstimate:
        values = require_numbers(
            payload,
            ["nitrogen", "phosphorus", "potassium", "temperature", "humidity", "ph", "rainfall"],
            "Yield prediction",
        )
        features = YieldFeatures(
            soil_type=payload.get("soil_type") or "loamy",
            irrigation_method=payload.get("irrigation_method") or "drip",
            **values,
        )
        result = estimate_yield(features)
        self.log_operation("yield_prediction", "yieldPrediction", payload, result.to_dict())
        return result

    def plan_fertilizer(self, payload: Mapping[str, Any]) -> FertilizerPlan:
        context = "Fertilizer recommendation"
        crop_type = require_text(payload, "crop_type", context)
        soil_payload = payload.get("soil_analysis")
        if not isinstance(soil_payload, Mapping):
            raise InvalidInputError(f"{context}: 'soil_analysis' is required", fields=["soil_analysis"])

        values = require_numbers(soil_payload, ["nitrogen", "phosphorus", "potassium", "ph"], context)
        soil = SoilAnalysis(
            organic_matter=optional_number(soil_payload, "organic_matter", context) or 0.0,
            soil_type=soil_payload.get("soil_type") or "loamy",
            **values,
        )
        planting_date = parse_date(payload.get("planting_date"), "planting_date", context)

        budget = optional_number(payload, "budget", context)
        if budget is not None and budget < 0:
            raise InvalidInputError(f"{context}: 'budget' cannot be negative", fields=["budget"])

        plan = self.fertilizer_planner.plan(
            crop_type,
            soil,
            planting_date,
            budget=budget,
            previous_crop=payload.get("previous_crop"),
        )
        self.log_operation("fertilizer_recommendation", "fertilizerRecommendation", payload, plan.to_dict())
        return plan

    def schedule_irrigation(self, payload: Mapping[str, Any]) -> IrrigationPlan:
        context = "Irrigation optimization"
        crop_type = require_text(payload, "crop_type", context)
        soil_type = require_text(payload, "soil_type", context)
        area = require_numbers(payload, ["area"], context)["area"]

        sensor = None
        sensor_payload = payload.get("sensor_data")
        if isinstance(sensor_payload, Mapping):
            sensor = SensorSnapshot(
                soil_moisture=optional_number(sensor_payload, "soil_moisture", context),
                temperature=optional_number(sensor_payload, "temperature", context),
                humidity=optional_number(sensor_payload, "humidity", context),
            )

        forecast = None
        weather_payload = payload.get("weather_data")
        if isinstance(weather_payload, Mapping) and weather_payload.get("forecast"):
            days = weather_payload["forecast"]
            if not isinstance(days, Sequence) or isinstance(days, str):
                raise InvalidInputError(f"{context}: weather forecast must be a list", fields=["weather_data"])
            first = days[0]
            if not isinstance(first, Mapping):
                raise InvalidInputError(f"{context}: malformed weather forecast", fields=["weather_data"])
            values = require_numbers(first, ["temperature", "humidity"], context)
            forecast = [ForecastDay(rainfall=optional_number(first, "rainfall", context) or 0.0, **values)]

        plan = schedule_irrigation(
            crop_type, soil_type, area, sensor=sensor, forecast=forecast, start_date=self.today()
        )
        self.log_operation("irrigation_optimization", "irrigationOptimization", payload, plan.to_dict())
        return plan

    def monitor_health(self, payload: Mapping[str, Any]) -> HealthReport:
        values = require_numbers(
            payload,
            ["temperature", "humidity", "soil_moisture", "light_intensity"],
            "Health monitoring",
        )
        report = monitor_health(SensorReading(**values))
        self.log_operation("health_monitoring", "healthMonitoring", payload, report.to_dict())
        return report

    def forecast_price(self, payload: Mapping[str, Any]) -> PriceForecast:
        crop = require_text(payload, "crop", "Price forecast")
        result = forecast_price(
            crop,
            historical_data=payload.get("historical_data"),
            external_factors=payload.get("external_factors"),
            rng=self.rng,
            today=self.today(),
        )
        self.log_operation("price_forecast", "pricePrediction", payload, {"points": len(result.predictions)})
        return result

    def analyze_prices(self, records: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
        context = "Price analysis"
        if len(records) < 2:
            raise InvalidInputError("Insufficient data for price analysis", fields=["records"])
        parsed = []
        for record in records:
            parsed.append(MarketRecord(
                date=parse_date(record.get("date"), "date", context),
                price=require_numbers(record, ["price"], context)["price"],
                volume=optional_number(record, "volume", context) or 0.0,
            ))
        return analyze_price_history(parsed)

    def forecast_water_usage(self, plan: IrrigationPlan, days: int = 7) -> Dict[str, Any]:
        if days < 1:
            raise InvalidInputError("Water usage forecast: 'days' must be at least 1", fields=["days"])
        return forecast_water_usage(plan, days=days, start_date=self.today())

    def fertilizer_guide(self, crop_type: str, plans: Sequence[FertilizerPlan]) -> Dict[str, Any]:
        matching = [p for p in plans if p.crop_type.lower() == crop_type.lower()]
        if not matching:
            raise InvalidInputError(
                f"No fertilizer recommendations found for {crop_type}", fields=["plans"]
            )
        guide = build_fertilizer_guide(matching)
        guide["cropType"] = crop_type
        return guide

    # ==================== STATUS & LOGGING ====================

    def get_model_status(self, model_name: str) -> Dict[str, Any]:
        if model_name not in MODELS:
            raise KeyError(model_name)
        return {
            "model": model_name,
            "method": MODELS[model_name],
            "status": "active",
            "type": "local-dataset",
            "accuracy": "75-90%",
        }

    def get_all_models_status(self) -> Dict[str, Dict[str, Any]]:
        return {name: self.get_model_status(name) for name in MODELS}

    def log_operation(self, operation: str, model: str, payload: Any, output: Any) -> None:
        logger.info(
            f"Advisory operation {operation} ({model}): "
            f"input={json.dumps(payload, default=str)[:500]} "
            f"output={json.dumps(output, default=str)[:500]}"
        )


advisory_engine = AdvisoryEngine()
