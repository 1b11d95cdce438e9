"""
Crop Health Monitor.

Scores one sensor reading against safe bands. Each band subtracts
independently from a starting score of 1.0; the result is clamped to
[0, 1] and mapped to a risk tier.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from agroadvisor.services.agronomic_reference import clamp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SensorReading:
    temperature: float
    humidity: float
    soil_moisture: float
    light_intensity: float
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class Anomaly:
    type: str
    severity: str
    description: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity,
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class HealthReport:
    health_score: float
    anomalies: List[Anomaly] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    risk_level: str = "Low"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "healthScore": self.health_score,
            "anomalies": [anomaly.to_dict() for anomaly in self.anomalies],
            "recommendations": list(self.recommendations),
            "riskLevel": self.risk_level,
        }


def calculate_health_score(reading: SensorReading) -> float:
    score = 1.0

    if reading.temperature < 10 or reading.temperature > 40:
        score -= 0.3
    elif reading.temperature < 15 or reading.temperature > 35:
        score -= 0.1

    if reading.humidity < 30 or reading.humidity > 90:
        score -= 0.2
    elif reading.humidity < 40 or reading.humidity > 80:
        score -= 0.05

    if reading.soil_moisture < 0.2 or reading.soil_moisture > 0.8:
        score -= 0.4
    elif reading.soil_moisture < 0.3 or reading.soil_moisture > 0.7:
        score -= 0.1

    if reading.light_intensity < 200 or reading.light_intensity > 1000:
        score -= 0.1

    return clamp(score, 0.0, 1.0)


def detect_anomalies(reading: SensorReading, now: Optional[datetime] = None) -> List[Anomaly]:
    timestamp = now or datetime.now(timezone.utc)
    anomalies = []

    if reading.temperature > 35:
        anomalies.append(Anomaly(
            type="temperature",
            severity="High",
            description="Temperature is too high for optimal plant growth",
            timestamp=timestamp,
        ))

    if reading.soil_moisture < 0.2:
        anomalies.append(Anomaly(
            type="soil_moisture",
            severity="Critical",
            description="Soil moisture is critically low - immediate irrigation needed",
            timestamp=timestamp,
        ))

    if reading.humidity > 85:
        anomalies.append(Anomaly(
            type="humidity",
            severity="Medium",
            description="High humidity may promote disease development",
            timestamp=timestamp,
        ))

    return anomalies


def health_recommendations(reading: SensorReading, score: float) -> List[str]:
    recommendations = []

    if score < 0.3:
        recommendations.append("Urgent: Crop health is critical - immediate intervention required")
    elif score < 0.5:
        recommendations.append("High priority: Crop health is poor - take corrective action")

    if reading.temperature > 35:
        recommendations.append("Provide shade or increase ventilation to reduce temperature")
    if reading.soil_moisture < 0.3:
        recommendations.append("Increase irrigation frequency and amount")
    if reading.humidity > 80:
        recommendations.append("Improve air circulation to reduce humidity")

    return recommendations


def risk_level(score: float) -> str:
    if score >= 0.8:
        return "Low"
    if score >= 0.6:
        return "Medium"
    if score >= 0.4:
        return "High"
    return "Critical"


def monitor_health(reading: SensorReading, now: Optional[datetime] = None) -> HealthReport:
    score = calculate_health_score(reading)
    report = HealthReport(
        health_score=score,
        anomalies=detect_anomalies(reading, now=now),
        recommendations=health_recommendations(reading, score),
        risk_level=risk_level(score),
    )
    if report.anomalies:
        logger.info(f"Health check found {len(report.anomalies)} anomalies, risk {report.risk_level}")
    return report
