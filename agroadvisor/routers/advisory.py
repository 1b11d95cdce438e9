"""
Advisory Router.
HTTP endpoints over the advisory engines: yield, fertilizer, irrigation,
crop health, market prices, model status and report downloads.
"""
from typing import Dict, Optional
import logging

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse

from agroadvisor.schemas.advisory_schemas import (
    FertilizerGuideRequest,
    FertilizerGuideResponse,
    FertilizerRecommendRequest,
    FertilizerRecommendResponse,
    HealthMonitorRequest,
    HealthMonitorResponse,
    IrrigationOptimizeRequest,
    IrrigationOptimizeResponse,
    ModelStatus,
    PriceAnalysisRequest,
    PriceAnalysisResponse,
    PriceForecastResponse,
    WaterUsageRequest,
    WaterUsageResponse,
    YieldPredictRequest,
    YieldPredictResponse,
)
from agroadvisor.services.advisory_engine import InvalidInputError, advisory_engine
from agroadvisor.services.advisory_excel_service import advisory_excel_service
from agroadvisor.services.advisory_pdf_service import create_fertilizer_plan_pdf

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/advisory", tags=["advisory"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _bad_request(exc: InvalidInputError) -> HTTPException:
    logger.warning(f"Rejected advisory request: {exc}")
    return HTTPException(status_code=400, detail={"message": str(exc), "fields": exc.fields})


def _attachment(filename: str) -> Dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


# ==================== YIELD ====================

@router.post("/yield/predict", response_model=YieldPredictResponse, response_model_by_alias=True)
async def predict_yield(request: YieldPredictRequest):
    """Predict yield (kg/ha) with confidence and recommendations."""
    try:
        result = advisory_engine.estimate_yield(request.model_dump())
    except InvalidInputError as e:
        raise _bad_request(e)
    return YieldPredictResponse.model_validate(result.to_dict())


# ==================== FERTILIZER ====================

@router.post("/fertilizer/recommend", response_model=FertilizerRecommendResponse, response_model_by_alias=True)
async def recommend_fertilizer(request: FertilizerRecommendRequest):
    """Rule-based fertilizer program, scaled to the budget when one is given."""
    try:
        plan = advisory_engine.plan_fertilizer(request.model_dump())
    except InvalidInputError as e:
        raise _bad_request(e)
    return FertilizerRecommendResponse.model_validate(plan.to_dict())


@router.post("/fertilizer/guide", response_model=FertilizerGuideResponse, response_model_by_alias=True)
async def fertilizer_guide(request: FertilizerGuideRequest):
    """Most common fertilizers, methods and timings across several plans of one crop."""
    try:
        plans = [advisory_engine.plan_fertilizer(p.model_dump()) for p in request.plans]
        guide = advisory_engine.fertilizer_guide(request.crop_type, plans)
    except InvalidInputError as e:
        raise _bad_request(e)
    return FertilizerGuideResponse.model_validate(guide)


@router.post("/fertilizer/excel")
async def download_fertilizer_excel(
    request: FertilizerRecommendRequest,
    farm_name: Optional[str] = Query(None, alias="farmName"),
):
    try:
        plan = advisory_engine.plan_fertilizer(request.model_dump())
    except InvalidInputError as e:
        raise _bad_request(e)

    excel_buffer = advisory_excel_service.generate_fertilizer_plan_excel(plan, farm_name=farm_name)
    filename = f"fertilizer_plan_{plan.crop_type.replace(' ', '_')}.xlsx"
    return StreamingResponse(excel_buffer, media_type=XLSX_MEDIA_TYPE, headers=_attachment(filename))


@router.post("/fertilizer/pdf")
async def download_fertilizer_pdf(
    request: FertilizerRecommendRequest,
    farm_name: Optional[str] = Query(None, alias="farmName"),
):
    try:
        plan = advisory_engine.plan_fertilizer(request.model_dump())
    except InvalidInputError as e:
        raise _bad_request(e)

    pdf_bytes = create_fertilizer_plan_pdf(plan, farm_name=farm_name)
    filename = f"fertilizer_plan_{plan.crop_type.replace(' ', '_')}.pdf"
    return StreamingResponse(
        iter([pdf_bytes]),
        media_type="application/pdf",
        headers=_attachment(filename),
    )


# ==================== IRRIGATION ====================

@router.post("/irrigation/optimize", response_model=IrrigationOptimizeResponse, response_model_by_alias=True)
async def optimize_irrigation(request: IrrigationOptimizeRequest):
    """7-day irrigation schedule for a field."""
    try:
        plan = advisory_engine.schedule_irrigation(request.model_dump())
    except InvalidInputError as e:
        raise _bad_request(e)
    return IrrigationOptimizeResponse.model_validate(plan.to_dict())


@router.post("/irrigation/water-usage", response_model=WaterUsageResponse, response_model_by_alias=True)
async def water_usage(request: WaterUsageRequest):
    """Day-by-day water use projected from a fresh irrigation plan."""
    payload = request.model_dump()
    days = payload.pop("days")
    try:
        plan = advisory_engine.schedule_irrigation(payload)
        usage = advisory_engine.forecast_water_usage(plan, days=days)
    except InvalidInputError as e:
        raise _bad_request(e)
    return WaterUsageResponse.model_validate(usage)


@router.post("/irrigation/excel")
async def download_irrigation_excel(request: IrrigationOptimizeRequest):
    try:
        plan = advisory_engine.schedule_irrigation(request.model_dump())
    except InvalidInputError as e:
        raise _bad_request(e)

    excel_buffer = advisory_excel_service.generate_irrigation_excel(
        plan, crop_type=request.crop_type, soil_type=request.soil_type, area=request.area
    )
    filename = f"irrigation_{request.crop_type.replace(' ', '_')}.xlsx"
    return StreamingResponse(excel_buffer, media_type=XLSX_MEDIA_TYPE, headers=_attachment(filename))


# ==================== HEALTH ====================

@router.post("/health/monitor", response_model=HealthMonitorResponse, response_model_by_alias=True)
async def monitor_health(request: HealthMonitorRequest):
    try:
        report = advisory_engine.monitor_health(request.model_dump())
    except InvalidInputError as e:
        raise _bad_request(e)
    return HealthMonitorResponse.model_validate(report.to_dict())


# ==================== PRICE ====================

@router.get("/price/forecast/{crop}", response_model=PriceForecastResponse, response_model_by_alias=True)
async def forecast_price(crop: str):
    """30-day price forecast; unknown crops use the rice baseline."""
    try:
        forecast = advisory_engine.forecast_price({"crop": crop})
    except InvalidInputError as e:
        raise _bad_request(e)
    return PriceForecastResponse.model_validate(forecast.to_dict())


@router.post("/price/analysis", response_model=PriceAnalysisResponse, response_model_by_alias=True)
async def analyze_prices(request: PriceAnalysisRequest):
    try:
        analysis = advisory_engine.analyze_prices([r.model_dump() for r in request.records])
    except InvalidInputError as e:
        raise _bad_request(e)
    return PriceAnalysisResponse(crop=request.crop, data_points=len(request.records), analysis=analysis)


# ==================== STATUS ====================

@router.get("/status", response_model=Dict[str, ModelStatus], response_model_by_alias=True)
async def all_models_status():
    return advisory_engine.get_all_models_status()


@router.get("/status/{model_name}", response_model=ModelStatus, response_model_by_alias=True)
async def model_status(model_name: str):
    try:
        return advisory_engine.get_model_status(model_name)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Model '{model_name}' not found")
