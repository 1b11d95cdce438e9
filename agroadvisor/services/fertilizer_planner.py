"""
Fertilizer Planner.

Rule-based fertilizer program built from a soil test:

1. Classify N, P, K and pH as LOW / NORMAL / HIGH
2. Each rule independently adds at most one amendment line
3. Schedule every line relative to the planting date
4. Score confidence from soil-test sanity
5. Enforce the budget by scaling every amount by the same factor

The rules are evaluated in a fixed order and every rule that fires is
recorded as a TraceStep so the plan can be audited afterwards.
"""
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence
import logging

from agroadvisor import config
from agroadvisor.services.agronomic_reference import (
    DEFAULT_FERTILIZER_PRICES,
    clamp,
    round_half_up,
)

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 80
MIN_CONFIDENCE = 60
MAX_CONFIDENCE = 95
BUDGET_PENALTY = 10

# (nutrient, sane low, sane high, penalty)
SOIL_TEST_PENALTIES = (
    ("ph", 5, 8, 15),
    ("nitrogen", 10, 100, 10),
    ("phosphorus", 5, 50, 10),
    ("potassium", 10, 60, 10),
)


class NutrientLevel(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class Timing(str, Enum):
    PRE_PLANTING = "pre_planting"
    AT_PLANTING = "at_planting"
    SIDE_DRESSING = "side_dressing"
    TOP_DRESSING = "top_dressing"
    POST_HARVEST = "post_harvest"


TIMING_OFFSET_DAYS = {
    Timing.PRE_PLANTING: -7,
    Timing.AT_PLANTING: 0,
    Timing.SIDE_DRESSING: 30,
    Timing.TOP_DRESSING: 45,
    Timing.POST_HARVEST: 120,
}


def classify_level(value: float, low_below: Optional[float] = None, high_above: Optional[float] = None) -> NutrientLevel:
    """Place a reading in exactly one band; LOW wins if the bands overlap."""
    if low_below is not None and value < low_below:
        return NutrientLevel.LOW
    if high_above is not None and value > high_above:
        return NutrientLevel.HIGH
    return NutrientLevel.NORMAL


@dataclass
class SoilAnalysis:
    """Farmer-supplied soil test. Values may be outside agronomic range."""
    nitrogen: float
    phosphorus: float
    potassium: float
    ph: float
    organic_matter: float = 0.0
    soil_type: str = "loamy"


@dataclass
class FertilizerLine:
    fertilizer_type: str
    amount: float
    unit: str
    application_method: str
    timing: Timing
    priority: str
    reason: str
    expected_benefit: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fertilizerType": self.fertilizer_type,
            "amount": self.amount,
            "unit": self.unit,
            "applicationMethod": self.application_method,
            "timing": self.timing.value,
            "priority": self.priority,
            "reason": self.reason,
            "expectedBenefit": self.expected_benefit,
        }


@dataclass
class ApplicationScheduleEntry:
    date: date
    fertilizer: str
    amount: float
    method: str
    notes: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "fertilizer": self.fertilizer,
            "amount": self.amount,
            "method": self.method,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class TraceStep:
    rule: str
    outcome: str


@dataclass
class FertilizerPlan:
    crop_type: str
    soil_type: str
    fertilizers: List[FertilizerLine] = field(default_factory=list)
    trace: List[TraceStep] = field(default_factory=list)
    confidence: int = BASE_CONFIDENCE
    total_cost: float = 0.0
    schedule: List[ApplicationScheduleEntry] = field(default_factory=list)
    budget_applied: bool = False
    currency: str = config.CURRENCY
    previous_crop: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fertilizers": [line.to_dict() for line in self.fertilizers],
            "path": render_decision_path(self),
            "confidence": self.confidence,
            "totalCost": self.total_cost,
            "schedule": [entry.to_dict() for entry in self.schedule],
            "budgetApplied": self.budget_applied,
            "currency": self.currency,
        }


def render_decision_path(plan: FertilizerPlan) -> str:
    """Render the trace as 'Crop: rice, Soil: loamy → Low N → Urea → ...'."""
    path = f"Crop: {plan.crop_type}, Soil: {plan.soil_type}"
    for step in plan.trace:
        path += f" → {step.rule} → {step.outcome}"
    return path


class FertilizerPlanner:
    """
    Evaluates the amendment rules against one soil test.

    Costs are looked up per kg in `prices`; any fertilizer missing from a
    custom table falls back to the default table.
    """

    def __init__(self, prices: Optional[Mapping[str, float]] = None):
        self.prices = prices if prices is not None else DEFAULT_FERTILIZER_PRICES

    def price_per_kg(self, fertilizer_type: str) -> float:
        if fertilizer_type in self.prices:
            return self.prices[fertilizer_type]
        logger.warning(f"No price for {fertilizer_type}, using default table")
        return DEFAULT_FERTILIZER_PRICES[fertilizer_type]

    def plan(
        self,
        crop_type: str,
        soil: SoilAnalysis,
        planting_date: date,
        budget: Optional[float] = None,
        previous_crop: Optional[str] = None,
    ) -> FertilizerPlan:
        plan = FertilizerPlan(
            crop_type=crop_type,
            soil_type=soil.soil_type,
            previous_crop=previous_crop,
        )
        cost = 0.0

        def add(rule: str, raw_amount: float, line: Dict[str, Any]) -> None:
            nonlocal cost
            plan.fertilizers.append(FertilizerLine(amount=round_half_up(raw_amount), unit="kg", **line))
            plan.trace.append(TraceStep(rule=rule, outcome=line["fertilizer_type"]))
            cost += raw_amount * self.price_per_kg(line["fertilizer_type"])

        n_level = classify_level(soil.nitrogen, low_below=30, high_above=80)
        if n_level is NutrientLevel.LOW:
            add("Low N", min(100, (50 - soil.nitrogen) * 2), dict(
                fertilizer_type="Urea",
                application_method="broadcast",
                timing=Timing.PRE_PLANTING,
                priority="high",
                reason="Low nitrogen levels detected",
                expected_benefit="Improved vegetative growth and yield",
            ))
        elif n_level is NutrientLevel.HIGH:
            add("High N", 20, dict(
                fertilizer_type="Organic",
                application_method="broadcast",
                timing=Timing.PRE_PLANTING,
                priority="low",
                reason="High nitrogen levels - use organic matter",
                expected_benefit="Maintain soil health and reduce leaching",
            ))

        if classify_level(soil.phosphorus, low_below=15) is NutrientLevel.LOW:
            add("Low P", min(50, (25 - soil.phosphorus) * 2), dict(
                fertilizer_type="DAP",
                application_method="band_placement",
                timing=Timing.AT_PLANTING,
                priority="high",
                reason="Low phosphorus levels detected",
                expected_benefit="Better root development and flowering",
            ))

        if classify_level(soil.potassium, low_below=20) is NutrientLevel.LOW:
            add("Low K", min(60, (40 - soil.potassium) * 1.5), dict(
                fertilizer_type="MOP",
                application_method="broadcast",
                timing=Timing.SIDE_DRESSING,
                priority="medium",
                reason="Low potassium levels detected",
                expected_benefit="Improved fruit quality and disease resistance",
            ))

        ph_level = classify_level(soil.ph, low_below=6.0, high_above=7.5)
        if ph_level is NutrientLevel.LOW:
            add("Low pH", (6.5 - soil.ph) * 100, dict(
                fertilizer_type="Lime",
                application_method="broadcast",
                timing=Timing.PRE_PLANTING,
                priority="high",
                reason="Soil pH too acidic",
                expected_benefit="Improved nutrient availability",
            ))
        elif ph_level is NutrientLevel.HIGH:
            add("High pH", (soil.ph - 7.0) * 50, dict(
                fertilizer_type="Sulfur",
                application_method="broadcast",
                timing=Timing.PRE_PLANTING,
                priority="medium",
                reason="Soil pH too alkaline",
                expected_benefit="Improved nutrient availability",
            ))

        if (crop_type or "").lower() == "rice":
            add("Rice", 25, dict(
                fertilizer_type="NPK",
                application_method="broadcast",
                timing=Timing.TOP_DRESSING,
                priority="medium",
                reason="Rice-specific nutrient needs",
                expected_benefit="Balanced nutrition for rice cultivation",
            ))

        confidence = self.soil_test_confidence(soil)

        if budget is not None and cost > budget:
            scale = budget / cost
            for line in plan.fertilizers:
                line.amount = round_half_up(line.amount * scale)
            logger.info(f"Budget {budget} below plan cost {cost:.2f}, scaling amounts by {scale:.3f}")
            cost = budget
            confidence -= BUDGET_PENALTY
            plan.budget_applied = True

        plan.confidence = int(clamp(confidence, MIN_CONFIDENCE, MAX_CONFIDENCE))
        plan.total_cost = round_half_up(cost, 2)
        plan.schedule = build_schedule(plan.fertilizers, planting_date)
        return plan

    @staticmethod
    def soil_test_confidence(soil: SoilAnalysis) -> int:
        """Unclamped confidence; the caller clamps after the budget pass."""
        confidence = BASE_CONFIDENCE
        for name, low, high, penalty in SOIL_TEST_PENALTIES:
            value = getattr(soil, name)
            if value < low or value > high:
                confidence -= penalty
        return confidence


def build_schedule(lines: Sequence[FertilizerLine], planting_date: date) -> List[ApplicationScheduleEntry]:
    """One entry per line, dated by its timing tag, sorted by date."""
    schedule = [
        ApplicationScheduleEntry(
            date=planting_date + timedelta(days=TIMING_OFFSET_DAYS[line.timing]),
            fertilizer=line.fertilizer_type,
            amount=line.amount,
            method=line.application_method,
            notes=line.reason,
        )
        for line in lines
    ]
    schedule.sort(key=lambda entry: entry.date)
    return schedule


def plan_fertilizer(
    crop_type: str,
    soil: SoilAnalysis,
    planting_date: date,
    budget: Optional[float] = None,
    previous_crop: Optional[str] = None,
    prices: Optional[Mapping[str, float]] = None,
) -> FertilizerPlan:
    return FertilizerPlanner(prices).plan(
        crop_type, soil, planting_date, budget=budget, previous_crop=previous_crop
    )


def build_fertilizer_guide(plans: Sequence[FertilizerPlan]) -> Dict[str, Any]:
    """
    Summarize past plans for one crop: most common fertilizers, methods and
    timings, plus the average plan cost. Expects at least one plan.
    """
    fertilizer_types = Counter()
    methods = Counter()
    timings = Counter()
    for plan in plans:
        for line in plan.fertilizers:
            fertilizer_types[line.fertilizer_type] += 1
            methods[line.application_method] += 1
            timings[line.timing.value] += 1

    average_cost = sum(plan.total_cost for plan in plans) / len(plans)
    return {
        "totalRecommendations": len(plans),
        "commonFertilizers": fertilizer_types.most_common(5),
        "commonMethods": methods.most_common(3),
        "commonTiming": timings.most_common(3),
        "averageCost": round_half_up(average_cost, 2),
    }
