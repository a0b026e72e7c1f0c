"""
Modelo de Inversor y Preferencias

Define las preferencias declaradas por un inversor para el motor de
matching. Las listas vacías significan "sin preferencia" (matchea todo).
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class BudgetType(str, Enum):
    """Unidad del presupuesto. No se convierte entre unidades."""

    MONTHLY = "monthly"
    ANNUAL = "annual"
    PURCHASE = "purchase"


class BudgetRange(BaseModel):
    """
    Rango de presupuesto en libras.

    `max=None` significa sin tope. Un rango con min > max se considera
    vacío y no penaliza (la validación de rangos ocurre al escribir el perfil).
    """

    min: float = Field(default=0.0, ge=0, description="Presupuesto mínimo")
    max: Optional[float] = Field(None, ge=0, description="Presupuesto máximo")
    type: BudgetType = Field(default=BudgetType.MONTHLY)

    @property
    def is_empty(self) -> bool:
        return self.max is not None and self.min > self.max


class BedroomRange(BaseModel):
    """Rango de dormitorios aceptables (inclusive)."""

    min: int = Field(default=0, ge=0)
    max: Optional[int] = Field(None, ge=0)

    @property
    def is_empty(self) -> bool:
        return self.max is not None and self.min > self.max


class InvestorPreferenceProfile(BaseModel):
    """
    Perfil de preferencias de un inversor.

    Se mapea a la tabla 'investor_preferences' (JSONB `preference_data`)
    unida con 'user_profiles'.
    """

    model_config = ConfigDict(from_attributes=True)

    # Identificadores
    investor_id: str = Field(..., description="UUID del inversor (user_profiles.id)")

    # Criterios puntuables
    budget: Optional[BudgetRange] = Field(None, description="Presupuesto")
    bedrooms: Optional[BedroomRange] = Field(None, description="Dormitorios")
    property_types: list[str] = Field(
        default_factory=list, description="Tipos aceptables (vacío = cualquiera)"
    )
    locations: list[str] = Field(
        default_factory=list, description="Zonas aceptables (vacío = cualquiera)"
    )

    # Filtro hard
    property_licences: list[str] = Field(
        default_factory=list, description="Licencias requeridas (vacío = cualquiera)"
    )

    # Informativo, no se puntúa
    operator_type: Optional[str] = Field(None, description="Ej: sa_operator, hands-off")

    # Estado
    active: bool = Field(default=True, description="Perfil activo para matching")
    notifications_enabled: bool = Field(
        default=True, description="Acepta emails de nuevos matches"
    )

    # Datos de contacto (para el panel de admin y el email)
    full_name: Optional[str] = Field(None)
    email: Optional[str] = Field(None)

    updated_at: Optional[datetime] = Field(None, description="Última actualización")

    @classmethod
    def from_db_row(cls, row: dict) -> "InvestorPreferenceProfile":
        """
        Construye el perfil desde una fila de Supabase.

        `preference_data` viene como JSONB con la forma que guarda el
        formulario de preferencias:
            {
                "budget": {"min": 1000, "max": 1500, "type": "monthly"},
                "bedrooms": {"min": 2, "max": 3},
                "property_types": ["Apartment"],
                "property_licences": ["hmo"],
                "locations": [{"city": "East London", "localAuthorities": ["Hackney"]}]
            }
        """
        data = row.get("preference_data") or {}
        profile = row.get("user_profiles") or {}

        notifications = row.get("notification_enabled")
        if notifications is None:
            notifications = profile.get("notification_enabled")

        return cls(
            investor_id=row.get("investor_id") or profile.get("id"),
            budget=_parse_budget(data.get("budget")),
            bedrooms=_parse_bedrooms(data.get("bedrooms")),
            property_types=_clean_list(data.get("property_types")),
            property_licences=_clean_list(data.get("property_licences")),
            locations=_flatten_locations(data.get("locations")),
            operator_type=row.get("operator_type"),
            active=row.get("is_active", True),
            notifications_enabled=notifications is not False,
            full_name=profile.get("full_name"),
            email=profile.get("email"),
            updated_at=row.get("updated_at"),
        )

    def is_material_change(self, previous: "InvestorPreferenceProfile") -> bool:
        """
        True si cambió algún criterio que afecta el score o el filtro hard.

        Cambios en operator_type, contacto o flags de notificación no son
        materiales: no reinician el historial de notificaciones.
        """
        return (
            _range_key(self.budget) != _range_key(previous.budget)
            or _range_key(self.bedrooms) != _range_key(previous.bedrooms)
            or _norm_set(self.property_types) != _norm_set(previous.property_types)
            or _norm_set(self.property_licences) != _norm_set(previous.property_licences)
            or _norm_set(self.locations) != _norm_set(previous.locations)
        )


def _parse_budget(raw: Any) -> Optional[BudgetRange]:
    if not raw:
        return None
    if raw.get("min") is None and raw.get("max") is None:
        return None
    return BudgetRange(
        min=raw.get("min") or 0,
        max=raw.get("max"),
        type=raw.get("type") or BudgetType.MONTHLY,
    )


def _parse_bedrooms(raw: Any) -> Optional[BedroomRange]:
    if not raw:
        return None
    if raw.get("min") is None and raw.get("max") is None:
        return None
    return BedroomRange(min=raw.get("min") or 0, max=raw.get("max"))


def _clean_list(values: Any) -> list[str]:
    return [str(v).strip() for v in (values or []) if v and str(v).strip()]


def _flatten_locations(locations: Any) -> list[str]:
    """
    Aplana las ubicaciones del formulario a nombres de zona.

    Cada entrada aporta su ciudad/sub-región y sus local authorities; si no
    tiene ninguna de las dos, aporta la región.
    """
    names: list[str] = []
    for loc in locations or []:
        if isinstance(loc, str):
            names.append(loc)
            continue
        entry = [loc.get("city")] + list(loc.get("localAuthorities") or [])
        entry = [n for n in entry if n]
        if not entry and loc.get("region"):
            entry = [loc["region"]]
        names.extend(entry)

    # Sin duplicados, preservando orden
    seen = set()
    result = []
    for name in _clean_list(names):
        key = name.lower()
        if key not in seen:
            seen.add(key)
            result.append(name)
    return result


def _norm_set(values: list[str]) -> set[str]:
    return {v.strip().lower() for v in values}


def _range_key(value: Optional[BaseModel]) -> Optional[dict]:
    return value.model_dump() if value is not None else None
