"""
Pydantic schemas for the advisory API.
Requests accept camelCase (the public contract) or snake_case field names;
responses are serialized in camelCase.
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


# ==================== YIELD ====================

class YieldPredictRequest(CamelModel):
    """Soil and weather features for a yield estimate."""
    crop_type: Optional[str] = None
    nitrogen: float = Field(..., description="Soil N (kg/ha)")
    phosphorus: float = Field(..., description="Soil P (kg/ha)")
    potassium: float = Field(..., description="Soil K (kg/ha)")
    temperature: float = Field(..., description="Mean air temperature °C")
    humidity: float = Field(..., description="Relative humidity %")
    ph: float = Field(..., description="Soil pH")
    rainfall: float = Field(..., description="Seasonal rainfall mm")
    soil_type: Optional[str] = Field(None, description="sandy, loamy, clay or silty")
    irrigation_method: Optional[str] = Field(None, description="drip, sprinkler, flood or manual")


class RecommendationOut(CamelModel):
    type: str
    priority: str
    message: str
    expected_impact: str


class YieldPredictResponse(CamelModel):
    predicted_yield: int
    confidence: int
    recommendations: List[RecommendationOut] = Field(default_factory=list)
    model_type: str
    features: Optional[Dict[str, Any]] = None


# ==================== FERTILIZER ====================

class SoilAnalysisIn(CamelModel):
    nitrogen: float
    phosphorus: float
    potassium: float
    ph: float
    organic_matter: Optional[float] = None
    soil_type: Optional[str] = None


class FertilizerRecommendRequest(CamelModel):
    crop_type: str = Field(..., min_length=1)
    soil_analysis: SoilAnalysisIn
    planting_date: date
    budget: Optional[float] = Field(None, ge=0, description="Maximum spend on the program")
    previous_crop: Optional[str] = None


class FertilizerLineOut(CamelModel):
    fertilizer_type: str
    amount: float
    unit: str
    application_method: str
    timing: str
    priority: str
    reason: str
    expected_benefit: str


class ApplicationScheduleOut(CamelModel):
    date: date
    fertilizer: str
    amount: float
    method: str
    notes: str


class FertilizerRecommendResponse(CamelModel):
    fertilizers: List[FertilizerLineOut] = Field(default_factory=list)
    path: str
    confidence: int
    total_cost: float
    schedule: List[ApplicationScheduleOut] = Field(default_factory=list)
    budget_applied: bool = False
    currency: str


class FertilizerGuideRequest(CamelModel):
    crop_type: str = Field(..., min_length=1)
    plans: List[FertilizerRecommendRequest] = Field(..., min_length=1)


class FertilizerGuideResponse(CamelModel):
    crop_type: str
    total_recommendations: int
    common_fertilizers: List[Tuple[str, int]]
    common_methods: List[Tuple[str, int]]
    common_timing: List[Tuple[str, int]]
    average_cost: float


# ==================== IRRIGATION ====================

class IrrigationSensorIn(CamelModel):
    soil_moisture: Optional[float] = Field(None, description="Volumetric fraction, normally 0-1")
    temperature: Optional[float] = None
    humidity: Optional[float] = None


class ForecastDayIn(CamelModel):
    temperature: float
    humidity: float
    rainfall: float = 0.0


class WeatherDataIn(CamelModel):
    forecast: List[ForecastDayIn] = Field(default_factory=list)


class IrrigationOptimizeRequest(CamelModel):
    crop_type: str = Field(..., min_length=1)
    soil_type: str = Field(..., min_length=1)
    area: float = Field(..., gt=0, description="Field area (ha)")
    sensor_data: Optional[IrrigationSensorIn] = None
    weather_data: Optional[WeatherDataIn] = None


class IrrigationSessionOut(CamelModel):
    date: date
    amount: int
    duration: int
    reason: str
    priority: str


class IrrigationOptimizeResponse(CamelModel):
    schedule: List[IrrigationSessionOut]
    water_usage: int
    efficiency: int
    recommendations: List[str] = Field(default_factory=list)


class WaterUsageRequest(IrrigationOptimizeRequest):
    days: int = Field(default=7, ge=1, le=30)


class WaterUsageDayOut(CamelModel):
    date: date
    water_usage: int
    duration: int
    reason: str


class WaterUsageResponse(CamelModel):
    forecast: List[WaterUsageDayOut]
    total_water_usage: int
    average_daily_usage: float


# ==================== HEALTH ====================

class HealthMonitorRequest(CamelModel):
    farm_id: Optional[str] = None
    temperature: float
    humidity: float
    soil_moisture: float
    light_intensity: float


class AnomalyOut(CamelModel):
    type: str
    severity: str
    description: str
    timestamp: datetime


class HealthMonitorResponse(CamelModel):
    health_score: float
    anomalies: List[AnomalyOut] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    risk_level: str


# ==================== PRICE ====================

class PricePointOut(CamelModel):
    date: date
    price: float
    confidence: float


class PriceForecastResponse(CamelModel):
    crop: str
    predictions: List[PricePointOut]
    confidence: float
    factors: List[str]
    trend: str


class MarketRecordIn(CamelModel):
    date: date
    price: float = Field(..., ge=0)
    volume: Optional[float] = Field(None, ge=0)


class PriceAnalysisRequest(CamelModel):
    crop: str = Field(..., min_length=1)
    records: List[MarketRecordIn]


class PriceAnalysisResponse(CamelModel):
    crop: str
    data_points: int
    analysis: Dict[str, Any]


# ==================== STATUS ====================

class ModelStatus(CamelModel):
    model: str
    method: str
    status: str
    type: str
    accuracy: str
