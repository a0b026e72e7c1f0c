"""
Agregador de scores.

Combina los cuatro criterios en un score único ponderado y le asigna
una etiqueta legible.
"""

from dataclasses import dataclass

from acematch.config import Settings
from acematch.exceptions import ConfigurationError
from acematch.models import MatchBreakdown, MatchLabel


@dataclass(frozen=True)
class MatchWeights:
    """Pesos en porcentaje entero; se usan enteros para redondear sin error de float."""

    price: int = 30
    bedrooms: int = 25
    location: int = 25
    type: int = 20

    def __post_init__(self):
        total = self.price + self.bedrooms + self.location + self.type
        if total != 100:
            raise ConfigurationError(f"Los pesos deben sumar 100 (suman {total})")

    @classmethod
    def from_settings(cls, settings: Settings) -> "MatchWeights":
        return cls(
            price=settings.weight_price,
            bedrooms=settings.weight_bedrooms,
            location=settings.weight_location,
            type=settings.weight_type,
        )


@dataclass(frozen=True)
class LabelThresholds:
    """Umbrales cerrados por arriba, evaluados de mayor a menor."""

    excellent: int = 90
    great: int = 75
    good: int = 60

    @classmethod
    def from_settings(cls, settings: Settings) -> "LabelThresholds":
        return cls(
            excellent=settings.label_excellent,
            great=settings.label_great,
            good=settings.label_good,
        )


DEFAULT_WEIGHTS = MatchWeights()
DEFAULT_THRESHOLDS = LabelThresholds()


def overall_score(
    location: int,
    price: int,
    bedrooms: int,
    type_score: int,
    weights: MatchWeights = DEFAULT_WEIGHTS,
) -> int:
    """
    round(0.30*price + 0.25*bedrooms + 0.25*location + 0.20*type).

    Redondeo half-up (72.5 -> 73), calculado en enteros.
    """
    weighted = (
        weights.price * price
        + weights.bedrooms * bedrooms
        + weights.location * location
        + weights.type * type_score
    )
    return (weighted + 50) // 100


def label_for(overall: int, thresholds: LabelThresholds = DEFAULT_THRESHOLDS) -> MatchLabel:
    if overall >= thresholds.excellent:
        return MatchLabel.EXCELLENT
    if overall >= thresholds.great:
        return MatchLabel.GREAT
    if overall >= thresholds.good:
        return MatchLabel.GOOD
    return MatchLabel.POTENTIAL


def aggregate(
    location: int,
    price: int,
    bedrooms: int,
    type_score: int,
    weights: MatchWeights = DEFAULT_WEIGHTS,
    thresholds: LabelThresholds = DEFAULT_THRESHOLDS,
) -> MatchBreakdown:
    """Arma el MatchBreakdown completo a partir de los cuatro criterios."""
    overall = overall_score(location, price, bedrooms, type_score, weights)
    return MatchBreakdown(
        location=location,
        price=price,
        bedrooms=bedrooms,
        type=type_score,
        overall=overall,
        label=label_for(overall, thresholds),
    )
