"""
Calculation Tests

This test suite validates:
- Uncertainty fractions by data source and the confidence labels
- Per-ingredient emissions, ranges and rounding
- Dish aggregation, waste prevention and the perishable boost
- Response shape by detail level
"""

import pytest
from hypothesis import given, settings, strategies as st

from foodprint.calculation import (
    DetailLevel,
    IngredientEstimate,
    aggregate,
    confidence_level,
    is_perishable,
    overall_confidence,
    round_half_up,
    uncertainty_of,
)
from foodprint.data.records import DataSource


def beef(**overrides):
    values = dict(
        raw_name="beef",
        category="meat",
        subcategory="ruminant",
        specific_item="beef",
        weight_grams=180.0,
        emission_factor=25.3,
        regional_factor=0.92,
        processing_factor=0.9,
        data_source=DataSource.EXTRAPOLATED,
    )
    values.update(overrides)
    return IngredientEstimate(**values)


def rice(**overrides):
    values = dict(
        raw_name="rice",
        category="grains",
        subcategory="cereals",
        specific_item="rice",
        weight_grams=150.0,
        emission_factor=2.7,
        regional_factor=0.92,
        processing_factor=0.9,
        data_source=DataSource.EXTRAPOLATED,
    )
    values.update(overrides)
    return IngredientEstimate(**values)


# ==================== UNCERTAINTY ====================

class TestUncertainty:
    @pytest.mark.parametrize(
        "source, expected",
        [
            (DataSource.PRIMARY_RESEARCH, 0.10),
            (DataSource.SECONDARY_RESEARCH, 0.20),
            (DataSource.AI_ESTIMATED, 0.25),
            (DataSource.EXTRAPOLATED, 0.30),
            (DataSource.ERROR, 0.50),
            (DataSource.ERROR_FALLBACK, 0.50),
            ("extrapolated", 0.30),
            ("survey", 0.25),
            (None, 0.25),
        ],
    )
    def test_uncertainty_of(self, source, expected):
        assert uncertainty_of(source) == expected

    @pytest.mark.parametrize(
        "uncertainty, label",
        [(0.1, "very high"), (0.2, "high"), (0.25, "medium"), (0.3, "medium"), (0.4, "low"), (0.5, "very low")],
    )
    def test_confidence_level(self, uncertainty, label):
        assert confidence_level(uncertainty) == label

    @pytest.mark.parametrize(
        "levels, expected",
        [
            (["very high", "very high"], "very high"),
            (["high", "high"], "high"),
            (["very high", "very low"], "medium"),
            (["medium", "low"], "low"),
            (["very low"], "very low"),
            ([], "very low"),
            (["bogus"], "very low"),
        ],
    )
    def test_overall_confidence(self, levels, expected):
        assert overall_confidence(levels) == expected


# ==================== INGREDIENTS ====================

class TestIngredientEstimate:
    def test_emissions(self):
        assert beef().emissions == pytest.approx(3.770712)

    def test_range_and_confidence(self):
        lower, upper = beef().range
        assert lower == pytest.approx(3.770712 * 0.7)
        assert upper == pytest.approx(3.770712 * 1.3)
        assert beef().confidence == "medium"
        assert beef().data_quality == "extrapolated"

    def test_to_dict(self):
        entry = beef(waste_fraction=0.1).to_dict()
        assert entry == {
            "name": "beef",
            "weight": 180.0,
            "category": "meat",
            "emissions": 3.771,
            "range": {"lower": 2.639, "upper": 4.902},
            "confidence": "medium",
            "factors": {"regional": 0.92, "seasonal": 1.0, "processing": 0.9},
            "data_source": "extrapolated",
            "waste_fraction": 0.1,
        }

    def test_round_half_up(self):
        assert round_half_up(2.675, 2) == 2.68
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(0.0005, 3) == 0.001


# ==================== AGGREGATION ====================

class TestAggregate:
    def test_beef_rice_bowl(self):
        result = aggregate("Beef Rice Bowl", [beef(), rice()])
        assert result.total == pytest.approx(4.106052)
        assert result.saved == pytest.approx(4.106052 * 0.7)
        assert result.perishable is False
        assert result.confidence == "medium"

    def test_quantity_multiplies(self):
        result = aggregate("Beef Rice Bowl", [beef(), rice()], quantity=3)
        assert result.total == pytest.approx(4.106052 * 3)
        assert result.range[0] == pytest.approx(4.106052 * 3 * 0.7)

    def test_perishable_boost(self):
        milk = rice(raw_name="Whole Milk", category="dairy")
        result = aggregate("Latte", [milk])
        assert result.perishable is True
        assert result.saved == pytest.approx(result.total * 0.7 * 1.2)

    def test_is_perishable(self):
        assert is_perishable(["Sourdough Bread"])
        assert not is_perishable(["beef", "rice"])
        assert is_perishable(["tofu"], keywords=["tofu"])

    def test_empty_dish(self):
        result = aggregate("Nothing", [])
        assert result.total == 0.0
        assert result.confidence == "very low"


class TestResponseShape:
    def test_basic(self):
        response = aggregate("Beef Rice Bowl", [beef(), rice()]).to_response("basic")
        assert response == {"total": 4.11, "saved": 2.87}

    def test_standard(self):
        response = aggregate("Beef Rice Bowl", [beef(), rice()]).to_response()
        assert response == {
            "total": 4.11,
            "saved": 2.87,
            "range": {"lower": 2.87, "upper": 5.34},
            "confidence": "medium",
            "saved_range": {"lower": 2.01, "upper": 3.74},
            "dish": {"name": "Beef Rice Bowl", "quantity": 1, "ingredient_count": 2},
        }

    def test_detailed(self):
        response = aggregate("Beef Rice Bowl", [beef(), rice()]).to_response(DetailLevel.DETAILED.value)
        assert [item["name"] for item in response["ingredients"]] == ["beef", "rice"]
        assert response["ingredients"][1]["emissions"] == 0.335

    def test_unknown_detail_level(self):
        with pytest.raises(ValueError):
            aggregate("x", [beef()]).to_response("verbose")


# ==================== PROPERTIES ====================

weights = st.floats(min_value=1.0, max_value=2000.0, allow_nan=False)
factors = st.floats(min_value=0.01, max_value=100.0, allow_nan=False)
sources = st.sampled_from(list(DataSource))


class TestAggregationProperties:
    @settings(max_examples=50, deadline=None)
    @given(
        st.lists(st.tuples(weights, factors, sources), min_size=1, max_size=6),
        st.integers(min_value=1, max_value=20),
    )
    def test_total_scales_with_quantity_and_stays_in_range(self, items, quantity):
        estimates = [
            beef(weight_grams=w, emission_factor=f, data_source=s) for w, f, s in items
        ]
        single = aggregate("Dish", estimates)
        scaled = aggregate("Dish", estimates, quantity=quantity)

        assert scaled.total == pytest.approx(single.total * quantity)
        assert scaled.range[0] <= scaled.total <= scaled.range[1]
        assert scaled.saved == pytest.approx(scaled.total * 0.7)
