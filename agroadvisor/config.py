"""
Runtime settings for AgroAdvisor.

Values come from environment variables and are read once at import time.
"""
import os
from typing import List, Optional


def _int_or_none(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


CURRENCY = os.environ.get("AGROADVISOR_CURRENCY", "INR")

# Unset means forecasts draw from an unseeded random source.
PRICE_FORECAST_SEED = _int_or_none(os.environ.get("AGROADVISOR_PRICE_SEED"))

LOG_LEVEL = os.environ.get("AGROADVISOR_LOG_LEVEL", "INFO").upper()

CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in os.environ.get("AGROADVISOR_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

COMPANY_NAME = os.environ.get("AGROADVISOR_COMPANY_NAME", "AgroAdvisor")
