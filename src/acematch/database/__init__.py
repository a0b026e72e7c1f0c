"""
Módulo de base de datos.

Provee acceso a Supabase: lectura de candidatos y ledger de notificaciones.
"""

from acematch.database.supabase_client import get_supabase_client, SupabaseClient
from acematch.database.repositories import (
    InvestorPreferenceRepository,
    PropertyRepository,
    NotificationRepository,
)

__all__ = [
    "get_supabase_client",
    "SupabaseClient",
    "InvestorPreferenceRepository",
    "PropertyRepository",
    "NotificationRepository",
]
