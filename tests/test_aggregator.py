"""Tests del agregador de scores y las etiquetas."""

from decimal import ROUND_HALF_UP, Decimal
from itertools import product

import pytest

from acematch.exceptions import ConfigurationError
from acematch.matching import LabelThresholds, MatchWeights, aggregate, label_for, overall_score
from acematch.models import MatchLabel


def _reference(location, price, bedrooms, type_score) -> int:
    exact = (
        Decimal("0.30") * price
        + Decimal("0.25") * bedrooms
        + Decimal("0.25") * location
        + Decimal("0.20") * type_score
    )
    return int(exact.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class TestOverallScore:
    """Tests de overall_score."""

    def test_all_perfect(self) -> None:
        assert overall_score(100, 100, 100, 100) == 100

    def test_all_zero(self) -> None:
        assert overall_score(0, 0, 0, 0) == 0

    def test_weighted_sum(self) -> None:
        # 0.25*100 + 0.30*0 + 0.25*100 + 0.20*100 = 70
        assert overall_score(location=100, price=0, bedrooms=100, type_score=100) == 70

    def test_half_rounds_up(self) -> None:
        # 0.30*85 + 25 + 25 + 20 = 95.5
        assert overall_score(location=100, price=85, bedrooms=100, type_score=100) == 96

    def test_matches_exact_decimal_formula(self) -> None:
        values = [0, 25, 50, 59, 60, 75, 85, 99, 100]
        for location, price, bedrooms, type_score in product(values, repeat=4):
            assert overall_score(location, price, bedrooms, type_score) == _reference(
                location, price, bedrooms, type_score
            )

    def test_custom_weights(self) -> None:
        weights = MatchWeights(price=100, bedrooms=0, location=0, type=0)
        assert overall_score(0, 42, 0, 0, weights) == 42


class TestMatchWeights:
    """Tests de validación de pesos."""

    def test_defaults_sum_100(self) -> None:
        weights = MatchWeights()
        assert (weights.price, weights.bedrooms, weights.location, weights.type) == (30, 25, 25, 20)

    def test_rejects_weights_not_summing_100(self) -> None:
        with pytest.raises(ConfigurationError):
            MatchWeights(price=40, bedrooms=25, location=25, type=20)

    def test_from_settings(self, settings) -> None:
        assert MatchWeights.from_settings(settings) == MatchWeights()

    def test_from_settings_validates(self, monkeypatch) -> None:
        from acematch.config import get_settings

        monkeypatch.setenv("WEIGHT_PRICE", "50")
        get_settings.cache_clear()
        with pytest.raises(ConfigurationError):
            MatchWeights.from_settings(get_settings())


class TestLabelFor:
    """Tests de label_for en los bordes de cada banda."""

    @pytest.mark.parametrize(
        "overall,expected",
        [
            (100, MatchLabel.EXCELLENT),
            (90, MatchLabel.EXCELLENT),
            (89, MatchLabel.GREAT),
            (75, MatchLabel.GREAT),
            (74, MatchLabel.GOOD),
            (60, MatchLabel.GOOD),
            (59, MatchLabel.POTENTIAL),
            (0, MatchLabel.POTENTIAL),
        ],
    )
    def test_boundaries(self, overall, expected) -> None:
        assert label_for(overall) == expected

    def test_label_text(self) -> None:
        assert label_for(95).value == "Excellent Match"
        assert label_for(10).value == "Potential Match"

    def test_custom_thresholds(self) -> None:
        thresholds = LabelThresholds(excellent=95, great=80, good=50)
        assert label_for(90, thresholds) == MatchLabel.GREAT
        assert label_for(55, thresholds) == MatchLabel.GOOD


class TestAggregate:
    """Tests de aggregate."""

    def test_breakdown_is_consistent(self) -> None:
        breakdown = aggregate(location=100, price=0, bedrooms=100, type_score=100)

        assert breakdown.location == 100
        assert breakdown.price == 0
        assert breakdown.bedrooms == 100
        assert breakdown.type == 100
        assert breakdown.overall == 70
        assert breakdown.label == MatchLabel.GOOD

    def test_breakdown_is_immutable(self) -> None:
        breakdown = aggregate(100, 100, 100, 100)
        with pytest.raises(Exception):
            breakdown.overall = 10
