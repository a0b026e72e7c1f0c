"""
Motor de matching.

Combina el filtro hard de licencia con scoring ponderado por criterio
para rankear inversores y propiedades, y decide qué matches notificar.
"""

from acematch.matching.engine import MatchingEngine, MatchResult
from acematch.matching.aggregator import (
    LabelThresholds,
    MatchWeights,
    aggregate,
    label_for,
    overall_score,
)
from acematch.matching.candidates import CandidateGenerator, passes_licence_gate
from acematch.matching.scorers import (
    score_bedrooms,
    score_location,
    score_price,
    score_type,
)

__all__ = [
    "MatchingEngine",
    "MatchResult",
    # Agregador
    "MatchWeights",
    "LabelThresholds",
    "aggregate",
    "label_for",
    "overall_score",
    # Candidatos
    "CandidateGenerator",
    "passes_licence_gate",
    # Scorers
    "score_price",
    "score_bedrooms",
    "score_type",
    "score_location",
]
