"""
Feature normalization for the yield model.

Raw soil and weather readings are rescaled into [0, 1] contributions.
Out-of-range values are clamped, never rejected.
"""
from dataclasses import dataclass, asdict
from typing import Dict

from agroadvisor.services.agronomic_reference import clamp


@dataclass(frozen=True)
class FeatureVector:
    """Normalized yield-model inputs."""
    nitrogen: float
    phosphorus: float
    potassium: float
    temperature: float
    humidity: float
    ph: float
    rainfall: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def normalize_nitrogen(value: float) -> float:
    return min(value / 100, 1)


def normalize_phosphorus(value: float) -> float:
    return min(value / 50, 1)


def normalize_potassium(value: float) -> float:
    return min(value / 50, 1)


def normalize_temperature(value: float) -> float:
    return clamp((value - 10) / 30, 0, 1)


def normalize_humidity(value: float) -> float:
    # Upper bound is left open; sensors report at most 100 %RH.
    return value / 100


def normalize_ph(value: float) -> float:
    return clamp((value - 4) / 6, 0, 1)


def normalize_rainfall(value: float) -> float:
    return min(value / 200, 1)


def normalize_features(
    nitrogen: float,
    phosphorus: float,
    potassium: float,
    temperature: float,
    humidity: float,
    ph: float,
    rainfall: float,
) -> FeatureVector:
    """Build a FeatureVector from raw agronomic readings."""
    return FeatureVector(
        nitrogen=normalize_nitrogen(nitrogen),
        phosphorus=normalize_phosphorus(phosphorus),
        potassium=normalize_potassium(potassium),
        temperature=normalize_temperature(temperature),
        humidity=normalize_humidity(humidity),
        ph=normalize_ph(ph),
        rainfall=normalize_rainfall(rainfall),
    )
