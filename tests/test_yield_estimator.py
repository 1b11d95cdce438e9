"""
Tests for the Yield Estimator and feature normalization.

1. Reference field (N=60, P=20, K=25, 25°C, 55%, pH 6.5, 100 mm) -> 782 kg/ha, 85%
2. Out-of-range readings lower confidence but never below 60
3. Recommendation rules fire independently
4. Normalization clamps, except humidity's open upper bound
"""
import pytest

from agroadvisor.services.feature_normalizer import normalize_features, normalize_humidity
from agroadvisor.services.yield_estimator import (
    RecommendationPriority,
    YieldFeatures,
    calculate_confidence,
    estimate_yield,
)


@pytest.fixture
def reference_field():
    return YieldFeatures(
        nitrogen=60, phosphorus=20, potassium=25,
        temperature=25, humidity=55, ph=6.5, rainfall=100,
        soil_type="loamy", irrigation_method="drip",
    )


class TestFeatureNormalizer:

    def test_reference_vector(self):
        vector = normalize_features(60, 20, 25, 25, 55, 6.5, 100)
        assert vector.nitrogen == pytest.approx(0.6)
        assert vector.phosphorus == pytest.approx(0.4)
        assert vector.potassium == pytest.approx(0.5)
        assert vector.temperature == pytest.approx(0.5)
        assert vector.humidity == pytest.approx(0.55)
        assert vector.ph == pytest.approx(2.5 / 6)
        assert vector.rainfall == pytest.approx(0.5)

    def test_values_are_clamped(self):
        vector = normalize_features(500, 500, 500, 80, 50, 14, 1000)
        assert vector.nitrogen == 1
        assert vector.phosphorus == 1
        assert vector.potassium == 1
        assert vector.temperature == 1
        assert vector.ph == 1
        assert vector.rainfall == 1

        cold = normalize_features(0, 0, 0, -5, 0, 2, 0)
        assert cold.temperature == 0
        assert cold.ph == 0

    def test_humidity_upper_bound_is_open(self):
        assert normalize_humidity(120) == pytest.approx(1.2)


class TestEstimateYield:

    def test_reference_field(self, reference_field):
        result = estimate_yield(reference_field)

        assert result.predicted_yield == 782
        assert result.confidence == 85
        assert [r.type for r in result.recommendations] == ["general"]
        assert result.recommendations[0].priority is RecommendationPriority.CRITICAL

    def test_to_dict_shape(self, reference_field):
        data = estimate_yield(reference_field).to_dict()

        assert data["predictedYield"] == 782
        assert data["modelType"] == "ANN-Regression"
        assert data["features"]["soil_type"] == "loamy"
        assert data["recommendations"][0]["expectedImpact"]

    def test_soil_and_irrigation_multipliers(self, reference_field):
        reference_field.soil_type = "sandy"
        reference_field.irrigation_method = "flood"
        result = estimate_yield(reference_field)

        # 651.67 * 0.8 * 0.8
        assert result.predicted_yield == 417
        types = [r.type for r in result.recommendations]
        assert "irrigation" in types

    def test_unknown_soil_and_method_use_neutral_factor(self, reference_field):
        reference_field.soil_type = "peat"
        reference_field.irrigation_method = "pivot"
        assert estimate_yield(reference_field).predicted_yield == 652

    def test_lookups_are_case_insensitive(self, reference_field):
        reference_field.soil_type = "LOAMY"
        reference_field.irrigation_method = "Drip"
        assert estimate_yield(reference_field).predicted_yield == 782

    def test_all_recommendations_fire(self):
        features = YieldFeatures(
            nitrogen=10, phosphorus=5, potassium=5,
            temperature=5, humidity=20, ph=4.5, rainfall=10,
            soil_type="sandy", irrigation_method="flood",
        )
        result = estimate_yield(features)
        types = [r.type for r in result.recommendations]

        assert types == ["fertilizer", "soil_management", "irrigation", "general"]


class TestConfidence:

    def test_penalties_accumulate(self, reference_field):
        reference_field.ph = 9
        reference_field.temperature = 40
        assert calculate_confidence(reference_field) == 60

    def test_floor_at_sixty(self):
        features = YieldFeatures(
            nitrogen=1, phosphorus=1, potassium=1,
            temperature=0, humidity=50, ph=3, rainfall=50,
        )
        assert calculate_confidence(features) == 60

    def test_single_penalty(self, reference_field):
        reference_field.nitrogen = 250
        assert calculate_confidence(reference_field) == 75


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
