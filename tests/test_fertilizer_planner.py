"""
Tests for the Fertilizer Planner.

Covers the amendment rules, budget scaling, schedule ordering, soil-test
confidence, pluggable prices and the per-crop guide.
"""
from datetime import date

import pytest

from agroadvisor.services.fertilizer_planner import (
    FertilizerPlanner,
    NutrientLevel,
    SoilAnalysis,
    Timing,
    build_fertilizer_guide,
    classify_level,
    plan_fertilizer,
    render_decision_path,
)

PLANTING = date(2024, 3, 1)


@pytest.fixture
def low_n_soil():
    return SoilAnalysis(nitrogen=20, phosphorus=30, potassium=30, ph=7.0)


@pytest.fixture
def depleted_soil():
    return SoilAnalysis(nitrogen=20, phosphorus=10, potassium=10, ph=5.5)


class TestClassifyLevel:

    def test_bands(self):
        assert classify_level(20, low_below=30, high_above=80) is NutrientLevel.LOW
        assert classify_level(90, low_below=30, high_above=80) is NutrientLevel.HIGH
        assert classify_level(30, low_below=30, high_above=80) is NutrientLevel.NORMAL
        assert classify_level(80, low_below=30, high_above=80) is NutrientLevel.NORMAL

    def test_open_high_band(self):
        assert classify_level(1000, low_below=15) is NutrientLevel.NORMAL


class TestRules:

    def test_balanced_soil_needs_nothing(self):
        soil = SoilAnalysis(nitrogen=50, phosphorus=20, potassium=30, ph=6.5)
        plan = plan_fertilizer("wheat", soil, PLANTING)

        assert plan.fertilizers == []
        assert plan.schedule == []
        assert plan.total_cost == 0
        assert plan.confidence == 80
        assert render_decision_path(plan) == "Crop: wheat, Soil: loamy"

    def test_low_nitrogen_urea(self, low_n_soil):
        plan = plan_fertilizer("wheat", low_n_soil, PLANTING)

        assert len(plan.fertilizers) == 1
        line = plan.fertilizers[0]
        assert line.fertilizer_type == "Urea"
        assert line.amount == 60
        assert line.timing is Timing.PRE_PLANTING
        assert plan.total_cost == pytest.approx(30.0)

    def test_high_nitrogen_organic(self):
        soil = SoilAnalysis(nitrogen=90, phosphorus=20, potassium=30, ph=6.5)
        plan = plan_fertilizer("wheat", soil, PLANTING)

        assert [l.fertilizer_type for l in plan.fertilizers] == ["Organic"]
        assert plan.fertilizers[0].amount == 20
        assert plan.total_cost == pytest.approx(6.0)

    def test_alkaline_soil_sulfur(self):
        soil = SoilAnalysis(nitrogen=50, phosphorus=20, potassium=30, ph=8.0)
        plan = plan_fertilizer("wheat", soil, PLANTING)

        assert [l.fertilizer_type for l in plan.fertilizers] == ["Sulfur"]
        assert plan.fertilizers[0].amount == 50
        assert plan.total_cost == pytest.approx(20.0)

    def test_all_rules_for_depleted_rice_field(self, depleted_soil):
        plan = plan_fertilizer("rice", depleted_soil, PLANTING)

        types = [l.fertilizer_type for l in plan.fertilizers]
        assert types == ["Urea", "DAP", "MOP", "Lime", "NPK"]
        assert [l.amount for l in plan.fertilizers] == [60, 30, 45, 100, 25]
        # 60*.5 + 30*.8 + 45*.6 + 100*.2 + 25*.7
        assert plan.total_cost == pytest.approx(118.5)
        assert plan.confidence == 80

    def test_decision_path_follows_rule_order(self, depleted_soil):
        plan = plan_fertilizer("rice", depleted_soil, PLANTING)

        assert render_decision_path(plan) == (
            "Crop: rice, Soil: loamy → Low N → Urea → Low P → DAP → Low K → MOP"
            " → Low pH → Lime → Rice → NPK"
        )
        assert plan.trace[0].rule == "Low N"
        assert plan.trace[-1].outcome == "NPK"

    def test_rice_match_is_case_insensitive(self):
        soil = SoilAnalysis(nitrogen=50, phosphorus=20, potassium=30, ph=6.5)
        plan = plan_fertilizer("Rice", soil, PLANTING)
        assert [l.fertilizer_type for l in plan.fertilizers] == ["NPK"]

    def test_amounts_are_rounded_half_up(self):
        # (40 - 19) * 1.5 = 31.5
        soil = SoilAnalysis(nitrogen=50, phosphorus=20, potassium=19, ph=6.5)
        plan = plan_fertilizer("wheat", soil, PLANTING)

        assert plan.fertilizers[0].amount == 32
        assert plan.total_cost == pytest.approx(18.9)


class TestSchedule:

    def test_schedule_sorted_by_date(self, depleted_soil):
        plan = plan_fertilizer("rice", depleted_soil, PLANTING)

        dates = [entry.date for entry in plan.schedule]
        assert dates == sorted(dates)
        assert [e.fertilizer for e in plan.schedule] == ["Urea", "Lime", "DAP", "MOP", "NPK"]
        assert plan.schedule[0].date == date(2024, 2, 23)
        assert plan.schedule[2].date == PLANTING
        assert plan.schedule[3].date == date(2024, 3, 31)
        assert plan.schedule[4].date == date(2024, 4, 15)

    def test_schedule_uses_scaled_amounts(self, depleted_soil):
        plan = plan_fertilizer("rice", depleted_soil, PLANTING, budget=50)

        amounts = {l.fertilizer_type: l.amount for l in plan.fertilizers}
        for entry in plan.schedule:
            assert entry.amount == amounts[entry.fertilizer]


class TestBudget:

    def test_budget_scales_urea_down(self, low_n_soil):
        plan = plan_fertilizer("wheat", low_n_soil, PLANTING, budget=5)

        assert plan.fertilizers[0].fertilizer_type == "Urea"
        assert plan.fertilizers[0].amount == 10
        assert plan.total_cost == 5
        assert plan.confidence == 70
        assert plan.budget_applied is True

    def test_budget_not_binding(self, low_n_soil):
        plan = plan_fertilizer("wheat", low_n_soil, PLANTING, budget=100)

        assert plan.fertilizers[0].amount == 60
        assert plan.total_cost == pytest.approx(30.0)
        assert plan.confidence == 80
        assert plan.budget_applied is False

    def test_zero_budget(self, low_n_soil):
        plan = plan_fertilizer("wheat", low_n_soil, PLANTING, budget=0)

        assert plan.fertilizers[0].amount == 0
        assert plan.total_cost == 0

    def test_budget_penalty_respects_floor(self):
        soil = SoilAnalysis(nitrogen=5, phosphorus=2, potassium=5, ph=4.0)
        plan = plan_fertilizer("wheat", soil, PLANTING, budget=1)
        assert plan.confidence == 60


class TestConfidence:

    def test_out_of_range_soil_test(self):
        soil = SoilAnalysis(nitrogen=120, phosphorus=20, potassium=30, ph=8.5)
        assert FertilizerPlanner.soil_test_confidence(soil) == 55

    def test_plan_confidence_is_clamped(self):
        soil = SoilAnalysis(nitrogen=120, phosphorus=20, potassium=30, ph=8.5)
        plan = plan_fertilizer("wheat", soil, PLANTING)
        assert plan.confidence == 60


class TestPrices:

    def test_custom_price_table(self, low_n_soil):
        plan = plan_fertilizer("wheat", low_n_soil, PLANTING, prices={"Urea": 1.0})
        assert plan.total_cost == pytest.approx(60.0)

    def test_missing_price_falls_back_to_default(self):
        soil = SoilAnalysis(nitrogen=20, phosphorus=10, potassium=30, ph=7.0)
        plan = plan_fertilizer("wheat", soil, PLANTING, prices={"Urea": 1.0})
        # 60 * 1.0 + 30 * 0.8
        assert plan.total_cost == pytest.approx(84.0)

    def test_currency_reported(self, low_n_soil):
        data = plan_fertilizer("wheat", low_n_soil, PLANTING).to_dict()
        assert data["currency"] == "INR"
        assert data["path"].startswith("Crop: wheat")
        assert data["fertilizers"][0]["timing"] == "pre_planting"
        assert data["schedule"][0]["date"] == "2024-02-23"


class TestFertilizerGuide:

    def test_guide_counts_and_average(self, low_n_soil):
        plans = [
            plan_fertilizer("wheat", low_n_soil, PLANTING),
            plan_fertilizer("wheat", SoilAnalysis(nitrogen=20, phosphorus=10, potassium=30, ph=7.0), PLANTING),
        ]
        guide = build_fertilizer_guide(plans)

        assert guide["totalRecommendations"] == 2
        assert guide["commonFertilizers"] == [("Urea", 2), ("DAP", 1)]
        assert guide["commonMethods"][0] == ("broadcast", 2)
        assert guide["commonTiming"][0] == ("pre_planting", 2)
        assert guide["averageCost"] == pytest.approx(42.0)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
