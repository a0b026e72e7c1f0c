"""
Modelos del historial de notificaciones y del payload de envío.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from acematch.models.match import MatchBreakdown


class NotificationRecord(BaseModel):
    """
    Notificación enviada para un par (inversor, propiedad).

    Un registro implica que el envío fue exitoso. Nunca se modifica: un
    re-envío lo reemplaza con un nuevo `sent_at`/`score_at_send`.
    """

    model_config = ConfigDict(frozen=True)

    investor_id: str
    property_id: str
    sent_at: datetime
    score_at_send: int = Field(..., ge=0, le=100)

    def to_db_dict(self) -> dict:
        """Convierte a diccionario para upsert en Supabase."""
        data = self.model_dump()
        data["sent_at"] = self.sent_at.isoformat()
        return data


class NotificationClaim(BaseModel):
    """
    Intento de notificación pendiente.

    Reserva el par mientras se envía: una segunda invocación no lo vuelve
    a seleccionar hasta que se confirme, se libere o expire.
    """

    model_config = ConfigDict(frozen=True)

    investor_id: str
    property_id: str
    claimed_at: datetime
    score: int = Field(..., ge=0, le=100)

    def to_db_dict(self) -> dict:
        data = self.model_dump()
        data["claimed_at"] = self.claimed_at.isoformat()
        return data


class NotificationPayload(BaseModel):
    """
    Datos que recibe el servicio de emails para renderizar el template.

    El motor no formatea ni envía el email.
    """

    template: str = Field(..., description="new_property_match o property_matches")
    subject: str

    investor_id: str
    investor_email: Optional[str] = None
    investor_name: Optional[str] = None

    property_id: str
    breakdown: MatchBreakdown

    # Campos de presentación de la propiedad
    property_title: str
    property_type: str
    bedrooms: int
    bathrooms: int
    price: float
    image: str = ""
    availability: str
    licence: str
    condition: str
    property_url: str
    dashboard_url: str
