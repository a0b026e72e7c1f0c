"""
Modelos de datos del sistema.

- Inversores: InvestorPreferenceProfile y sus rangos
- Propiedades: PropertyListing
- Matching: MatchBreakdown, MatchLabel
- Notificaciones: NotificationRecord, NotificationClaim, NotificationPayload
"""

from acematch.models.investor import (
    BedroomRange,
    BudgetRange,
    BudgetType,
    InvestorPreferenceProfile,
)
from acematch.models.property import ListingStatus, PropertyListing
from acematch.models.match import MatchBreakdown, MatchLabel
from acematch.models.notification import (
    NotificationClaim,
    NotificationPayload,
    NotificationRecord,
)

__all__ = [
    # Inversores
    "InvestorPreferenceProfile",
    "BudgetRange",
    "BudgetType",
    "BedroomRange",
    # Propiedades
    "PropertyListing",
    "ListingStatus",
    # Matching
    "MatchBreakdown",
    "MatchLabel",
    # Notificaciones
    "NotificationRecord",
    "NotificationClaim",
    "NotificationPayload",
]
