"""
Modelo de PropertyListing

Propiedad publicada por un landlord, normalizada para el motor de matching.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ListingStatus(str, Enum):
    """Estado de publicación. Solo AVAILABLE es candidata a matching."""

    DRAFT = "draft"
    PENDING = "pending"
    AVAILABLE = "available"
    RENTED = "rented"
    ARCHIVED = "archived"


# Valores legacy de la columna `status`
_STATUS_ALIASES = {"active": ListingStatus.AVAILABLE}


class PropertyListing(BaseModel):
    """
    Propiedad lista para el motor de matching.

    El precio se asume en la misma unidad que el presupuesto del inversor
    (mensual, anual o compra); el motor no convierte entre unidades.
    """

    model_config = ConfigDict(from_attributes=True)

    # Identificadores
    property_id: str = Field(..., description="UUID de la propiedad")

    # Atributos puntuables
    price: float = Field(..., ge=0, description="Precio en libras")
    bedrooms: int = Field(default=0, ge=0, description="Cantidad de dormitorios")
    property_type: str = Field(default="", description="Ej: Apartment, House, HMO")
    location: str = Field(default="", description="Local authority o ciudad")

    # Filtro hard
    licence: Optional[str] = Field(None, description="Ej: hmo, selective (None = sin licencia)")

    status: ListingStatus = Field(default=ListingStatus.DRAFT)

    # Campos de presentación (email y panel de admin)
    address: Optional[str] = Field(None)
    city: Optional[str] = Field(None)
    postcode: Optional[str] = Field(None)
    bathrooms: int = Field(default=0, ge=0)
    photos: list[str] = Field(default_factory=list)
    availability: str = Field(default="vacant")
    condition: str = Field(default="good")

    updated_at: Optional[datetime] = Field(None)

    @property
    def is_available(self) -> bool:
        return self.status == ListingStatus.AVAILABLE

    @classmethod
    def from_db_row(cls, row: dict) -> "PropertyListing":
        """
        Construye la propiedad desde una fila de la tabla 'properties'.

        `monthly_rent` se guarda en peniques; `price` (si viene) ya está en libras.
        """
        price = row.get("price")
        if price is None:
            price = (row.get("monthly_rent") or 0) / 100

        status = row.get("status") or ListingStatus.DRAFT.value
        status = _STATUS_ALIASES.get(status, status)

        licence = row.get("property_licence") or row.get("licence")
        if licence and str(licence).lower() == "none":
            licence = None

        return cls(
            property_id=row["id"],
            price=price,
            bedrooms=_to_int(row.get("bedrooms")),
            property_type=row.get("property_type") or "",
            location=row.get("local_authority") or row.get("city") or "",
            licence=licence,
            status=status,
            address=row.get("address"),
            city=row.get("city"),
            postcode=row.get("postcode"),
            bathrooms=_to_int(row.get("bathrooms")),
            photos=row.get("photos") or [],
            availability=row.get("availability") or "vacant",
            condition=row.get("property_condition") or "good",
            updated_at=row.get("updated_at"),
        )

    def display_title(self) -> str:
        """
        Título público: "Road Name, City, OUTWARD".

        Se omite el número de puerta y se deja solo el código postal de salida.
        """
        road = (self.address or "").split(",")[0].strip()
        road = re.sub(r"^\d+\s*", "", road).strip()
        outward = (self.postcode or "").split(" ")[0].upper()

        parts = [p for p in (road, self.city or "", outward) if p.strip()]
        words = ", ".join(parts).split(" ")
        return " ".join(
            w if outward and w == outward else w[:1].upper() + w[1:].lower()
            for w in words
        )


def _to_int(value) -> int:
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return 0
