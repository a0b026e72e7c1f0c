"""
Dispatcher de notificaciones.

Frontera con el servicio de emails: el motor le entrega un payload por
par y el servicio renderiza el template y lo envía.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

import aiohttp
import structlog

from acematch.config import Settings, get_settings
from acematch.models import (
    InvestorPreferenceProfile,
    MatchBreakdown,
    NotificationPayload,
    PropertyListing,
)

logger = structlog.get_logger()

# Templates del servicio de emails
NEW_PROPERTY_MATCH = "new_property_match"
PROPERTY_MATCHES = "property_matches"


def build_payload(
    profile: InvestorPreferenceProfile,
    listing: PropertyListing,
    breakdown: MatchBreakdown,
    template: str = NEW_PROPERTY_MATCH,
    settings: Optional[Settings] = None,
) -> NotificationPayload:
    """Arma el payload con los campos de presentación de la propiedad."""
    settings = settings or get_settings()
    site_url = settings.site_url.rstrip("/")
    title = listing.display_title() or listing.property_type or "Property"

    return NotificationPayload(
        template=template,
        subject=f"New {breakdown.overall}% Match: {title}",
        investor_id=profile.investor_id,
        investor_email=profile.email,
        investor_name=profile.full_name,
        property_id=listing.property_id,
        breakdown=breakdown,
        property_title=title,
        property_type=listing.property_type or "Property",
        bedrooms=listing.bedrooms,
        bathrooms=listing.bathrooms,
        price=listing.price,
        image=listing.photos[0] if listing.photos else "",
        availability=listing.availability,
        licence=listing.licence or "none",
        condition=listing.condition,
        property_url=f"{site_url}/properties/{listing.property_id}",
        dashboard_url=f"{site_url}/investor/dashboard",
    )


class NotificationDispatcher(ABC):
    """Interfaz común de los dispatchers."""

    @abstractmethod
    async def send(self, payload: NotificationPayload) -> bool:
        """
        Entrega un aviso.

        Returns:
            True solo si el servicio confirmó el envío
        """
        pass


class WebhookEmailDispatcher(NotificationDispatcher):
    """
    Envía los payloads por HTTP al servicio de emails.

    Uso:
        async with WebhookEmailDispatcher() as dispatcher:
            await engine.on_property_available(listing, dispatcher)
    """

    def __init__(
        self,
        url: Optional[str] = None,
        secret: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.url = url or settings.notification_webhook_url
        self.secret = secret or settings.notification_webhook_secret
        self.timeout = aiohttp.ClientTimeout(
            total=timeout or settings.notification_timeout_seconds
        )
        self._session: Optional[aiohttp.ClientSession] = None

        if not self.url:
            raise ValueError(
                "NOTIFICATION_WEBHOOK_URL es requerido. "
                "Configura las variables de entorno."
            )

    async def __aenter__(self):
        """Context manager entry: abre la sesión HTTP."""
        headers = {"Content-Type": "application/json"}
        if self.secret:
            headers["Authorization"] = f"Bearer {self.secret}"
        self._session = aiohttp.ClientSession(headers=headers, timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit: cierra la sesión HTTP."""
        if self._session:
            await self._session.close()
            self._session = None

    async def send(self, payload: NotificationPayload) -> bool:
        if not self._session:
            raise RuntimeError("Sesión no inicializada. Usa 'async with dispatcher:'")

        try:
            async with self._session.post(
                self.url, json=payload.model_dump(mode="json")
            ) as response:
                if 200 <= response.status < 300:
                    logger.info(
                        "Notificación enviada",
                        investor_id=payload.investor_id,
                        property_id=payload.property_id,
                        score=payload.breakdown.overall,
                    )
                    return True

                body = await response.text()
                logger.error(
                    "Servicio de emails rechazó la notificación",
                    investor_id=payload.investor_id,
                    property_id=payload.property_id,
                    status=response.status,
                    body=body[:200],
                )
                return False

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(
                "Error enviando notificación",
                investor_id=payload.investor_id,
                property_id=payload.property_id,
                error=str(e),
            )
            return False
