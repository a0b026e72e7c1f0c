"""
Resultado del scoring de un par inversor-propiedad.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MatchLabel(str, Enum):
    """Etiqueta que se muestra en los emails y en el panel."""

    EXCELLENT = "Excellent Match"
    GREAT = "Great Match"
    GOOD = "Good Match"
    POTENTIAL = "Potential Match"


class MatchBreakdown(BaseModel):
    """
    Desglose por criterio (0-100) más el score agregado.

    `overall` y `label` son funciones deterministas de los cuatro criterios.
    """

    model_config = ConfigDict(frozen=True)

    location: int = Field(..., ge=0, le=100)
    price: int = Field(..., ge=0, le=100)
    bedrooms: int = Field(..., ge=0, le=100)
    type: int = Field(..., ge=0, le=100)
    overall: int = Field(..., ge=0, le=100)
    label: MatchLabel
