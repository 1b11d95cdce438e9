"""Tests for the crop health monitor."""
from datetime import datetime, timezone

import pytest

from agroadvisor.services.health_monitor import (
    SensorReading,
    calculate_health_score,
    detect_anomalies,
    monitor_health,
    risk_level,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def healthy_reading():
    return SensorReading(temperature=25, humidity=60, soil_moisture=0.5, light_intensity=500)


class TestHealthScore:

    def test_ideal_conditions(self, healthy_reading):
        assert calculate_health_score(healthy_reading) == 1.0

    def test_warm_day_mild_penalty(self):
        reading = SensorReading(temperature=36, humidity=60, soil_moisture=0.5, light_intensity=500)
        assert calculate_health_score(reading) == pytest.approx(0.9)

    def test_everything_wrong_clamps_to_zero(self):
        reading = SensorReading(temperature=45, humidity=95, soil_moisture=0.1, light_intensity=100)
        assert calculate_health_score(reading) == pytest.approx(0.0)

    def test_soil_moisture_bands(self):
        dry = SensorReading(temperature=25, humidity=60, soil_moisture=0.25, light_intensity=500)
        parched = SensorReading(temperature=25, humidity=60, soil_moisture=0.1, light_intensity=500)
        assert calculate_health_score(dry) == pytest.approx(0.9)
        assert calculate_health_score(parched) == pytest.approx(0.6)


class TestAnomalies:

    def test_single_temperature_anomaly(self):
        reading = SensorReading(temperature=36, humidity=60, soil_moisture=0.5, light_intensity=500)
        anomalies = detect_anomalies(reading, now=NOW)

        assert len(anomalies) == 1
        assert anomalies[0].type == "temperature"
        assert anomalies[0].severity == "High"
        assert anomalies[0].timestamp == NOW

    def test_order_is_temperature_moisture_humidity(self):
        reading = SensorReading(temperature=45, humidity=95, soil_moisture=0.1, light_intensity=100)
        anomalies = detect_anomalies(reading, now=NOW)

        assert [(a.type, a.severity) for a in anomalies] == [
            ("temperature", "High"),
            ("soil_moisture", "Critical"),
            ("humidity", "Medium"),
        ]

    def test_default_timestamp_is_utc(self):
        reading = SensorReading(temperature=36, humidity=60, soil_moisture=0.5, light_intensity=500)
        assert detect_anomalies(reading)[0].timestamp.tzinfo is not None


class TestRiskLevel:

    @pytest.mark.parametrize("score,expected", [
        (1.0, "Low"), (0.8, "Low"), (0.79, "Medium"), (0.6, "Medium"),
        (0.59, "High"), (0.4, "High"), (0.39, "Critical"), (0.0, "Critical"),
    ])
    def test_tiers(self, score, expected):
        assert risk_level(score) == expected


class TestMonitorHealth:

    def test_healthy_field(self, healthy_reading):
        report = monitor_health(healthy_reading, now=NOW)

        assert report.health_score == 1.0
        assert report.anomalies == []
        assert report.recommendations == []
        assert report.risk_level == "Low"

    def test_critical_field(self):
        reading = SensorReading(temperature=45, humidity=95, soil_moisture=0.1, light_intensity=100)
        report = monitor_health(reading, now=NOW)

        assert report.risk_level == "Critical"
        assert report.recommendations[0].startswith("Urgent")
        assert len(report.recommendations) == 4

    def test_to_dict(self):
        reading = SensorReading(temperature=36, humidity=60, soil_moisture=0.5, light_intensity=500)
        data = monitor_health(reading, now=NOW).to_dict()

        assert data["riskLevel"] == "Low"
        assert data["anomalies"][0]["timestamp"] == "2024-06-01T12:00:00+00:00"
        assert data["recommendations"] == ["Provide shade or increase ventilation to reduce temperature"]


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
