"""
Repositorios para operaciones en Supabase.

Cada repositorio maneja una tabla/entidad específica. El motor solo lee
candidatos y escribe en el ledger de notificaciones.
"""

from datetime import datetime, timedelta
from typing import Optional

import structlog
from pydantic import ValidationError
from supabase import PostgrestAPIError
from tenacity import Retrying, stop_after_attempt, wait_exponential

from acematch.config import AVAILABLE_STATUSES, get_settings
from acematch.database.supabase_client import get_supabase_client, SupabaseClient
from acematch.exceptions import CandidateFetchError
from acematch.models import (
    InvestorPreferenceProfile,
    NotificationClaim,
    NotificationRecord,
    PropertyListing,
)
from acematch.notifications.ledger import NotificationLedger

logger = structlog.get_logger()

# Código de Postgres para violación de unique constraint
UNIQUE_VIOLATION = "23505"


class BaseRepository:
    """Clase base para repositorios."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or get_supabase_client()
        self.settings = get_settings()

    @property
    def client(self) -> SupabaseClient:
        return self._client

    def _execute_with_retry(self, query):
        """Ejecuta una query reintentando con backoff exponencial."""
        for attempt in Retrying(
            stop=stop_after_attempt(self.settings.fetch_retry_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            reraise=True,
        ):
            with attempt:
                return query.execute()

    def _fetch_candidates(self, query, entity: str) -> list[dict]:
        """
        Trae el set completo de filas o falla.

        Raises:
            CandidateFetchError: si Supabase no respondió tras los reintentos
        """
        try:
            response = self._execute_with_retry(query)
        except Exception as e:
            logger.error("Error obteniendo candidatos", entity=entity, error=str(e))
            raise CandidateFetchError(f"No se pudo obtener {entity}") from e
        return response.data or []


class InvestorPreferenceRepository(BaseRepository):
    """Repositorio para preferencias de inversores."""

    TABLE = "investor_preferences"
    SELECT = (
        "*, user_profiles!inner(id, full_name, email, notification_enabled)"
    )

    def get_active(self) -> list[InvestorPreferenceProfile]:
        """Obtiene todos los perfiles activos."""
        query = (
            self.client.table(self.TABLE)
            .select(self.SELECT)
            .eq("is_active", True)
        )
        rows = self._fetch_candidates(query, self.TABLE)
        return _parse_rows(rows, InvestorPreferenceProfile, "investor_id")

    def get_by_investor_id(
        self, investor_id: str
    ) -> Optional[InvestorPreferenceProfile]:
        """Obtiene el perfil de un inversor (activo o no)."""
        query = (
            self.client.table(self.TABLE)
            .select(self.SELECT)
            .eq("investor_id", investor_id)
            .limit(1)
        )
        rows = self._fetch_candidates(query, self.TABLE)
        parsed = _parse_rows(rows, InvestorPreferenceProfile, "investor_id")
        return parsed[0] if parsed else None


class PropertyRepository(BaseRepository):
    """Repositorio para propiedades publicadas."""

    TABLE = "properties"

    def get_available(self) -> list[PropertyListing]:
        """Obtiene todas las propiedades disponibles."""
        query = (
            self.client.table(self.TABLE)
            .select("*")
            .in_("status", AVAILABLE_STATUSES)
        )
        rows = self._fetch_candidates(query, self.TABLE)
        return _parse_rows(rows, PropertyListing, "id")

    def get_by_id(self, property_id: str) -> Optional[PropertyListing]:
        """Obtiene una propiedad por su UUID (cualquier estado)."""
        query = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("id", property_id)
            .limit(1)
        )
        rows = self._fetch_candidates(query, self.TABLE)
        parsed = _parse_rows(rows, PropertyListing, "id")
        return parsed[0] if parsed else None

    def get_recently_available(self, since: datetime) -> list[PropertyListing]:
        """Propiedades disponibles publicadas o editadas desde `since`."""
        query = (
            self.client.table(self.TABLE)
            .select("*")
            .in_("status", AVAILABLE_STATUSES)
            .gte("updated_at", since.isoformat())
            .order("updated_at", desc=True)
        )
        rows = self._fetch_candidates(query, self.TABLE)
        return _parse_rows(rows, PropertyListing, "id")


class NotificationRepository(BaseRepository, NotificationLedger):
    """
    Ledger de notificaciones en Supabase.

    Ambas tablas tienen unique (investor_id, property_id): el insert del
    claim es el write-and-check atómico por par.
    """

    TABLE = "match_notifications"
    CLAIMS_TABLE = "match_notification_claims"

    def __init__(self, client: Optional[SupabaseClient] = None):
        super().__init__(client)
        self.claim_ttl = timedelta(minutes=self.settings.claim_ttl_minutes)

    def get(self, investor_id: str, property_id: str) -> Optional[NotificationRecord]:
        """Último envío registrado para el par."""
        response = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("investor_id", investor_id)
            .eq("property_id", property_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return NotificationRecord.model_validate(response.data[0])

    def try_claim(self, claim: NotificationClaim) -> bool:
        """Inserta el claim; si ya existe uno vigente, el par está tomado."""
        cutoff = claim.claimed_at - self.claim_ttl

        # Los claims abandonados no bloquean el par
        (
            self.client.table(self.CLAIMS_TABLE)
            .delete()
            .eq("investor_id", claim.investor_id)
            .eq("property_id", claim.property_id)
            .lt("claimed_at", cutoff.isoformat())
            .execute()
        )

        try:
            self.client.table(self.CLAIMS_TABLE).insert(claim.to_db_dict()).execute()
        except PostgrestAPIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.debug(
                    "Par ya reservado por otra invocación",
                    investor_id=claim.investor_id,
                    property_id=claim.property_id,
                )
                return False
            raise
        return True

    def release(self, investor_id: str, property_id: str) -> None:
        """Libera el claim del par."""
        (
            self.client.table(self.CLAIMS_TABLE)
            .delete()
            .eq("investor_id", investor_id)
            .eq("property_id", property_id)
            .execute()
        )

    def record(self, record: NotificationRecord) -> None:
        """Registra un envío exitoso reemplazando el anterior."""
        (
            self.client.table(self.TABLE)
            .upsert(record.to_db_dict(), on_conflict="investor_id,property_id")
            .execute()
        )
        self.release(record.investor_id, record.property_id)
        logger.info(
            "Notificación registrada",
            investor_id=record.investor_id,
            property_id=record.property_id,
            score=record.score_at_send,
        )

    def clear_investor(self, investor_id: str) -> int:
        """Borra el historial de un inversor tras un cambio material de preferencias."""
        response = (
            self.client.table(self.TABLE)
            .delete()
            .eq("investor_id", investor_id)
            .execute()
        )
        cleared = len(response.data or [])
        logger.info("Historial de notificaciones reiniciado", investor_id=investor_id, cleared=cleared)
        return cleared


def _parse_rows(rows: list[dict], model, id_field: str) -> list:
    """Convierte filas a modelos; las filas malformadas se descartan con warning."""
    parsed = []
    for row in rows:
        try:
            parsed.append(model.from_db_row(row))
        except (ValidationError, KeyError, TypeError, ValueError) as e:
            logger.warning(
                "Fila inválida descartada",
                model=model.__name__,
                row_id=row.get(id_field),
                error=str(e),
            )
    return parsed
