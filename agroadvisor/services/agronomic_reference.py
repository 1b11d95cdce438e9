"""
Agronomic reference tables.

Read-only lookup data shared by every advisory engine: crop water needs,
soil and irrigation multipliers, market baselines and the default
fertilizer price list. Tables are wrapped in MappingProxyType so they can
be read from any request thread without copying.
"""
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional
import logging
import math

logger = logging.getLogger(__name__)


def _frozen(table: Dict[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType({
        key: MappingProxyType(value) if isinstance(value, dict) else value
        for key, value in table.items()
    })


# ==================== CROPS ====================

CROP_DATASET = _frozen({
    "tomatoes": {
        "water_need": 15,
        "soil_types": ("loamy", "sandy"),
        "season": "summer",
        "growth_time": "75-90 days",
        "typical_yield": "10-15 kg per plant",
    },
    "rice": {
        "water_need": 25,
        "soil_types": ("clay", "loamy"),
        "season": "monsoon",
        "growth_time": "120-150 days",
        "typical_yield": "4-6 tons per hectare",
    },
    "wheat": {
        "water_need": 12,
        "soil_types": ("loamy", "clay"),
        "season": "winter",
        "growth_time": "100-120 days",
        "typical_yield": "3-5 tons per hectare",
    },
    "maize": {
        "water_need": 18,
        "soil_types": ("loamy", "sandy"),
        "season": "summer",
        "growth_time": "80-100 days",
        "typical_yield": "6-8 tons per hectare",
    },
})

DEFAULT_CROP = "tomatoes"

# Crops above this daily need (per unit area) get a high-water advisory.
HIGH_WATER_NEED_THRESHOLD = 20


# ==================== SOIL & IRRIGATION ====================

# Irrigation volume multiplier by soil infiltration.
SOIL_WATER_FACTORS = MappingProxyType({
    "sandy": 1.2,
    "loamy": 1.0,
    "clay": 0.8,
    "silty": 0.9,
})

# Yield multiplier by soil type.
SOIL_YIELD_FACTORS = MappingProxyType({
    "sandy": 0.8,
    "loamy": 1.0,
    "clay": 0.9,
    "silty": 0.95,
})

IRRIGATION_METHOD_FACTORS = MappingProxyType({
    "drip": 1.2,
    "sprinkler": 1.0,
    "flood": 0.8,
    "manual": 0.9,
})

DEFAULT_FACTOR = 1.0


# ==================== MARKET ====================

MARKET_DATA = _frozen({
    "rice": {
        "base_price": 45,
        "seasonal_variation": 0.15,
        "trend": "stable",
        "demand": "high",
    },
    "wheat": {
        "base_price": 35,
        "seasonal_variation": 0.20,
        "trend": "increasing",
        "demand": "high",
    },
    "tomatoes": {
        "base_price": 25,
        "seasonal_variation": 0.30,
        "trend": "volatile",
        "demand": "medium",
    },
    "maize": {
        "base_price": 20,
        "seasonal_variation": 0.25,
        "trend": "stable",
        "demand": "medium",
    },
})

DEFAULT_MARKET_CROP = "rice"


# ==================== FERTILIZER PRICES ====================

# Cost per kg in the configured currency (defaults are rupee figures).
DEFAULT_FERTILIZER_PRICES = MappingProxyType({
    "Urea": 0.5,
    "Organic": 0.3,
    "DAP": 0.8,
    "MOP": 0.6,
    "Lime": 0.2,
    "Sulfur": 0.4,
    "NPK": 0.7,
})


# ==================== LOOKUPS ====================

def _key(name: Optional[str]) -> str:
    return (name or "").lower().strip()


def get_crop_profile(crop_type: Optional[str]) -> Mapping[str, Any]:
    """Return the crop profile, falling back to tomatoes for unknown crops."""
    profile = CROP_DATASET.get(_key(crop_type))
    if profile is None:
        logger.debug(f"Crop '{crop_type}' not in reference table, using {DEFAULT_CROP}")
        return CROP_DATASET[DEFAULT_CROP]
    return profile


def get_market_profile(crop: Optional[str]) -> Mapping[str, Any]:
    """Return market baseline for a crop, falling back to rice."""
    profile = MARKET_DATA.get(_key(crop))
    if profile is None:
        logger.debug(f"Crop '{crop}' has no market baseline, using {DEFAULT_MARKET_CROP}")
        return MARKET_DATA[DEFAULT_MARKET_CROP]
    return profile


def soil_water_factor(soil_type: Optional[str]) -> float:
    return SOIL_WATER_FACTORS.get(_key(soil_type), DEFAULT_FACTOR)


def soil_yield_factor(soil_type: Optional[str]) -> float:
    return SOIL_YIELD_FACTORS.get(_key(soil_type), DEFAULT_FACTOR)


def irrigation_method_factor(method: Optional[str]) -> float:
    return IRRIGATION_METHOD_FACTORS.get(_key(method), DEFAULT_FACTOR)


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round halves towards +inf, e.g. 2.5 -> 3 and -2.5 -> -2.

    Built-in round() uses banker's rounding, which would shift amounts that
    land exactly on .5.
    """
    if ndigits == 0:
        return int(math.floor(value + 0.5))
    scale = 10 ** ndigits
    return math.floor(value * scale + 0.5) / scale


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
