"""
Irrigation Scheduler.

Builds a 7-day watering plan:

    daily amount = crop water need x soil factor x weather factor x area

The weather factor comes from the first forecast day only. Efficiency and
advisories are derived from the latest sensor sample when one is given.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence
import logging

from agroadvisor.services.agronomic_reference import (
    HIGH_WATER_NEED_THRESHOLD,
    clamp,
    get_crop_profile,
    round_half_up,
    soil_water_factor,
)

logger = logging.getLogger(__name__)

PLANNING_HORIZON_DAYS = 7

IRRIGATION_REASONS = (
    "Regular scheduled irrigation",
    "Maintain soil moisture levels",
    "Support crop growth phase",
    "Compensate for low humidity",
    "Prevent water stress",
    "Optimize nutrient uptake",
    "Maintain crop health",
)

BASE_EFFICIENCY = 85
MIN_EFFICIENCY = 60
MAX_EFFICIENCY = 95


@dataclass
class ForecastDay:
    temperature: float
    humidity: float
    rainfall: float = 0.0


@dataclass
class SensorSnapshot:
    """Latest field telemetry; any reading may be missing."""
    soil_moisture: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None


@dataclass
class IrrigationSession:
    date: date
    amount: int
    duration: int
    reason: str
    priority: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "amount": self.amount,
            "duration": self.duration,
            "reason": self.reason,
            "priority": self.priority,
        }


@dataclass
class IrrigationPlan:
    schedule: List[IrrigationSession] = field(default_factory=list)
    water_usage: int = 0
    efficiency: int = BASE_EFFICIENCY
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schedule": [session.to_dict() for session in self.schedule],
            "waterUsage": self.water_usage,
            "efficiency": self.efficiency,
            "recommendations": list(self.recommendations),
        }


def weather_factor(forecast: Optional[Sequence[ForecastDay]]) -> float:
    """Demand multiplier from tomorrow's weather; 1.0 without a forecast."""
    if not forecast:
        return 1.0
    day = forecast[0]

    factor = 1.0
    if day.temperature > 30:
        factor += 0.2
    if day.temperature < 15:
        factor -= 0.1
    if day.humidity < 40:
        factor += 0.1
    if day.humidity > 80:
        factor -= 0.1
    if day.rainfall > 5:
        factor -= 0.3
    return clamp(factor, 0.5, 1.5)


def irrigation_priority(daily_need: float) -> str:
    if daily_need > 20:
        return "High"
    if daily_need > 15:
        return "Medium"
    return "Low"


def irrigation_efficiency(sensor: Optional[SensorSnapshot]) -> int:
    efficiency = BASE_EFFICIENCY
    if sensor is not None:
        if sensor.soil_moisture is not None:
            if sensor.soil_moisture < 0.3:
                efficiency -= 10
            if sensor.soil_moisture > 0.7:
                efficiency -= 5
        if sensor.temperature is not None and sensor.temperature > 35:
            efficiency -= 5
    return int(clamp(efficiency, MIN_EFFICIENCY, MAX_EFFICIENCY))


def irrigation_recommendations(water_need: float, soil_type: str, sensor: Optional[SensorSnapshot]) -> List[str]:
    recommendations = []

    if sensor is not None and sensor.soil_moisture is not None and sensor.soil_moisture < 0.3:
        recommendations.append("Increase irrigation frequency - soil moisture is low")

    if sensor is not None and sensor.temperature is not None and sensor.temperature > 35:
        recommendations.append("Irrigate early morning to avoid evaporation")

    if (soil_type or "").lower() == "sandy":
        recommendations.append("Use frequent, light irrigation for sandy soil")

    if water_need > HIGH_WATER_NEED_THRESHOLD:
        recommendations.append("This crop requires high water - ensure adequate irrigation")

    return recommendations


def schedule_irrigation(
    crop_type: str,
    soil_type: str,
    area: float,
    sensor: Optional[SensorSnapshot] = None,
    forecast: Optional[Sequence[ForecastDay]] = None,
    start_date: Optional[date] = None,
) -> IrrigationPlan:
    """Plan irrigation for today and the following six days."""
    start = start_date or date.today()
    water_need = get_crop_profile(crop_type)["water_need"]
    daily_need = water_need * soil_water_factor(soil_type) * weather_factor(forecast) * area

    schedule = [
        IrrigationSession(
            date=start + timedelta(days=offset),
            amount=round_half_up(daily_need),
            duration=round_half_up(daily_need / 2),
            reason=IRRIGATION_REASONS[offset % len(IRRIGATION_REASONS)],
            priority=irrigation_priority(daily_need),
        )
        for offset in range(PLANNING_HORIZON_DAYS)
    ]

    plan = IrrigationPlan(
        schedule=schedule,
        water_usage=sum(session.amount for session in schedule),
        efficiency=irrigation_efficiency(sensor),
        recommendations=irrigation_recommendations(water_need, soil_type, sensor),
    )
    logger.debug(f"Irrigation plan for {crop_type}/{soil_type}: {daily_need:.2f} per day, {plan.water_usage} total")
    return plan


def forecast_water_usage(plan: IrrigationPlan, days: int = 7, start_date: Optional[date] = None) -> Dict[str, Any]:
    """Project daily water use over the next `days` days from a stored plan."""
    start = start_date or date.today()
    by_date = {session.date: session for session in plan.schedule}

    forecast = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        session = by_date.get(day)
        forecast.append({
            "date": day.isoformat(),
            "waterUsage": session.amount if session else 0,
            "duration": session.duration if session else 0,
            "reason": session.reason if session else "No irrigation scheduled",
        })

    total = sum(entry["waterUsage"] for entry in forecast)
    return {
        "forecast": forecast,
        "totalWaterUsage": total,
        "averageDailyUsage": total / len(forecast) if forecast else 0,
    }
