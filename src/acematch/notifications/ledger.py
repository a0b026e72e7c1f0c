"""
Ledger de notificaciones.

Registro persistente de qué pares (inversor, propiedad) ya fueron
notificados, más los claims de envíos en curso. El claim es el único
punto de serialización por par: dos invocaciones concurrentes nunca
notifican el mismo par.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from acematch.config import Settings
from acematch.models import NotificationClaim, NotificationRecord


@dataclass(frozen=True)
class RenotifyPolicy:
    """
    Cuándo un par ya notificado vuelve a calificar.

    Se re-notifica si el score subió al menos `min_score_increase` puntos
    desde el último envío, o si pasaron `max_age` desde entonces.
    """

    min_score_increase: int = 10
    max_age: timedelta = timedelta(days=30)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RenotifyPolicy":
        return cls(
            min_score_increase=settings.renotify_score_increase,
            max_age=timedelta(days=settings.renotify_after_days),
        )

    def allows(
        self,
        record: Optional[NotificationRecord],
        overall: int,
        now: datetime,
    ) -> bool:
        if record is None:
            return True
        if overall - record.score_at_send >= self.min_score_increase:
            return True
        return now - record.sent_at >= self.max_age


class NotificationLedger(ABC):
    """Interfaz del ledger: get/put por clave (investor_id, property_id)."""

    @abstractmethod
    def get(self, investor_id: str, property_id: str) -> Optional[NotificationRecord]:
        """Último envío registrado para el par, si existe."""
        pass

    @abstractmethod
    def try_claim(self, claim: NotificationClaim) -> bool:
        """
        Reserva el par de forma atómica.

        Devuelve False si ya hay un claim vigente (otro envío en curso).
        Los claims más viejos que el TTL se consideran abandonados.
        """
        pass

    @abstractmethod
    def release(self, investor_id: str, property_id: str) -> None:
        """Libera el claim sin registrar envío (el par puede reintentarse)."""
        pass

    @abstractmethod
    def record(self, record: NotificationRecord) -> None:
        """Registra un envío exitoso, reemplaza el anterior y libera el claim."""
        pass

    @abstractmethod
    def clear_investor(self, investor_id: str) -> int:
        """Borra el historial de un inversor. Devuelve cuántos registros borró."""
        pass


class InMemoryNotificationLedger(NotificationLedger):
    """Ledger en memoria, seguro entre threads. Para tests y uso en un solo proceso."""

    def __init__(self, claim_ttl: timedelta = timedelta(minutes=60)):
        self.claim_ttl = claim_ttl
        self._records: dict[tuple[str, str], NotificationRecord] = {}
        self._claims: dict[tuple[str, str], NotificationClaim] = {}
        self._lock = threading.Lock()

    def get(self, investor_id: str, property_id: str) -> Optional[NotificationRecord]:
        with self._lock:
            return self._records.get((investor_id, property_id))

    def try_claim(self, claim: NotificationClaim) -> bool:
        key = (claim.investor_id, claim.property_id)
        with self._lock:
            current = self._claims.get(key)
            if current and claim.claimed_at - current.claimed_at < self.claim_ttl:
                return False
            self._claims[key] = claim
            return True

    def release(self, investor_id: str, property_id: str) -> None:
        with self._lock:
            self._claims.pop((investor_id, property_id), None)

    def record(self, record: NotificationRecord) -> None:
        key = (record.investor_id, record.property_id)
        with self._lock:
            self._records[key] = record
            self._claims.pop(key, None)

    def clear_investor(self, investor_id: str) -> int:
        with self._lock:
            keys = [k for k in self._records if k[0] == investor_id]
            for key in keys:
                del self._records[key]
            return len(keys)

    def pending_claims(self) -> list[NotificationClaim]:
        with self._lock:
            return list(self._claims.values())
