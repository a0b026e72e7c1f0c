"""
Motor de matching entre inversores y propiedades.

Implementa:
- Candidatos: lado opuesto elegible (con filtro hard de licencia)
- Scoring: cuatro criterios puros + agregado ponderado
- Ranking: score descendente, desempate por id del candidato
- Notificaciones: selección de matches nuevos con dedup por par y envío
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import structlog

from acematch.config import Settings, get_settings
from acematch.database import (
    InvestorPreferenceRepository,
    NotificationRepository,
    PropertyRepository,
)
from acematch.matching.aggregator import LabelThresholds, MatchWeights, aggregate
from acematch.matching.candidates import CandidateGenerator
from acematch.matching.scorers import (
    score_bedrooms,
    score_location,
    score_price,
    score_type,
)
from acematch.models import (
    InvestorPreferenceProfile,
    MatchBreakdown,
    NotificationClaim,
    NotificationRecord,
    PropertyListing,
)
from acematch.notifications import (
    NEW_PROPERTY_MATCH,
    PROPERTY_MATCHES,
    NotificationDispatcher,
    NotificationLedger,
    RenotifyPolicy,
    build_payload,
)

logger = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MatchResult:
    """Resultado de matching para un par inversor-propiedad."""

    investor: InvestorPreferenceProfile
    listing: PropertyListing
    breakdown: MatchBreakdown

    @property
    def investor_id(self) -> str:
        return self.investor.investor_id

    @property
    def property_id(self) -> str:
        return self.listing.property_id

    @property
    def overall(self) -> int:
        return self.breakdown.overall


class MatchingEngine:
    """
    Motor de matching con scoring ponderado + dedup de notificaciones.

    Flujo de una notificación:
    1. Un trigger (propiedad disponible / preferencias actualizadas)
    2. Candidatos del lado opuesto, filtrados por licencia
    3. Score de cada par y ranking
    4. Filtro de pares ya notificados (claim + regla de re-notificación)
    5. Envío vía dispatcher y registro en el ledger

    El cálculo de matches (pasos 2 y 3) no tiene efectos secundarios.
    """

    def __init__(
        self,
        investor_repo: Optional[InvestorPreferenceRepository] = None,
        property_repo: Optional[PropertyRepository] = None,
        ledger: Optional[NotificationLedger] = None,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.settings = settings or get_settings()
        self.investor_repo = investor_repo or InvestorPreferenceRepository()
        self.property_repo = property_repo or PropertyRepository()
        self.ledger = ledger or NotificationRepository()
        self.candidates = CandidateGenerator(self.investor_repo, self.property_repo)

        self.weights = MatchWeights.from_settings(self.settings)
        self.thresholds = LabelThresholds.from_settings(self.settings)
        self.renotify_policy = RenotifyPolicy.from_settings(self.settings)
        self._clock = clock or _utcnow

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score_pair(
        self, profile: InvestorPreferenceProfile, listing: PropertyListing
    ) -> MatchBreakdown:
        """Puntúa un par. Puro y determinista."""
        return aggregate(
            location=score_location(profile.locations, listing.location),
            price=score_price(profile.budget, listing.price),
            bedrooms=score_bedrooms(
                profile.bedrooms,
                listing.bedrooms,
                step_penalty=self.settings.bedroom_step_penalty,
            ),
            type_score=score_type(profile.property_types, listing.property_type),
            weights=self.weights,
            thresholds=self.thresholds,
        )

    def compute_matches_for_property(
        self,
        listing: PropertyListing,
        min_score: int = 0,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[MatchResult]:
        """
        Inversores que matchean con una propiedad.

        Args:
            listing: Propiedad (debe estar disponible para tener candidatos)
            min_score: Score mínimo a incluir
            limit: Máximo de resultados (None = todos)
            offset: Resultados a saltear (paginación)

        Returns:
            Lista de MatchResult ordenada por score, desempate por investor_id

        Raises:
            CandidateFetchError: si no se pudo leer el set de inversores
        """
        investors = self.candidates.investors_for(listing)
        matches = [
            MatchResult(investor=inv, listing=listing, breakdown=self.score_pair(inv, listing))
            for inv in investors
        ]
        ranked = _rank(matches, lambda m: m.investor_id, min_score, limit, offset)

        logger.info(
            "Matches calculados para propiedad",
            property_id=listing.property_id,
            candidates=len(investors),
            returned=len(ranked),
        )
        return ranked

    def compute_matches_for_investor(
        self,
        profile: InvestorPreferenceProfile,
        min_score: int = 0,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[MatchResult]:
        """
        Propiedades que matchean con un inversor.

        Simétrico a compute_matches_for_property; desempate por property_id.
        """
        listings = self.candidates.properties_for(profile)
        matches = [
            MatchResult(investor=profile, listing=listing, breakdown=self.score_pair(profile, listing))
            for listing in listings
        ]
        ranked = _rank(matches, lambda m: m.property_id, min_score, limit, offset)

        logger.info(
            "Matches calculados para inversor",
            investor_id=profile.investor_id,
            candidates=len(listings),
            returned=len(ranked),
        )
        return ranked

    def matched_investors(
        self,
        property_id: str,
        limit: Optional[int] = None,
        min_score: int = 0,
    ) -> list[MatchResult]:
        """Top-N de inversores para el panel de admin de una propiedad."""
        listing = self.property_repo.get_by_id(property_id)
        if listing is None:
            logger.warning("Propiedad no encontrada", property_id=property_id)
            return []
        return self.compute_matches_for_property(
            listing,
            min_score=min_score,
            limit=limit or self.settings.admin_top_n,
        )

    def matched_properties(
        self,
        investor_id: str,
        limit: int = 20,
        offset: int = 0,
        min_score: int = 0,
    ) -> list[MatchResult]:
        """Propiedades recomendadas para un inversor, paginadas."""
        profile = self.investor_repo.get_by_investor_id(investor_id)
        if profile is None:
            logger.warning("Inversor sin preferencias", investor_id=investor_id)
            return []
        return self.compute_matches_for_investor(
            profile, min_score=min_score, limit=limit, offset=offset
        )

    # ------------------------------------------------------------------
    # Notificaciones
    # ------------------------------------------------------------------

    def qualifying_matches_for_property(
        self, listing: PropertyListing
    ) -> list[MatchResult]:
        """
        Matches de una propiedad que deben notificarse ahora.

        Cada par devuelto queda reservado (claim) hasta que se confirme el
        envío, se libere o expire: una segunda llamada sin cambios devuelve [].
        """
        return self._qualify(self.compute_matches_for_property(listing))

    def qualifying_matches_for_investor(
        self, profile: InvestorPreferenceProfile
    ) -> list[MatchResult]:
        """Matches de un inversor recién activado/actualizado que deben notificarse."""
        return self._qualify(self.compute_matches_for_investor(profile))

    def _qualify(self, matches: list[MatchResult]) -> list[MatchResult]:
        now = self._clock()
        qualifying: list[MatchResult] = []
        already_claimed = 0
        already_notified = 0
        claimed: Optional[MatchResult] = None

        try:
            for match in matches:
                if match.overall < self.settings.notify_min_score:
                    continue
                if not match.investor.notifications_enabled:
                    continue

                claim = NotificationClaim(
                    investor_id=match.investor_id,
                    property_id=match.property_id,
                    claimed_at=now,
                    score=match.overall,
                )
                if not self.ledger.try_claim(claim):
                    already_claimed += 1
                    continue
                claimed = match

                record = self.ledger.get(match.investor_id, match.property_id)
                if not self.renotify_policy.allows(record, match.overall, now):
                    self.ledger.release(match.investor_id, match.property_id)
                    already_notified += 1
                else:
                    qualifying.append(match)
                claimed = None

        except Exception:
            # Sin resultados parciales: se liberan los pares ya reservados,
            # incluido el que se estaba evaluando
            pending = qualifying + ([claimed] if claimed is not None else [])
            for match in pending:
                self.ledger.release(match.investor_id, match.property_id)
            raise

        logger.info(
            "Matches a notificar",
            total=len(matches),
            qualifying=len(qualifying),
            already_claimed=already_claimed,
            already_notified=already_notified,
        )
        return qualifying

    async def notify_matches(
        self,
        matches: list[MatchResult],
        dispatcher: NotificationDispatcher,
        template: str = NEW_PROPERTY_MATCH,
    ) -> dict:
        """
        Envía los matches reservados y registra los exitosos.

        Un envío fallido no deja registro: el claim se libera y el par
        vuelve a ser elegible en la próxima invocación.

        Returns:
            Estadísticas del envío
        """
        stats = {
            "qualifying": len(matches),
            "notifications_sent": 0,
            "dispatch_failures": 0,
            "errors": 0,
        }
        semaphore = asyncio.Semaphore(self.settings.dispatch_concurrency)

        async def deliver(match: MatchResult):
            payload = build_payload(
                match.investor,
                match.listing,
                match.breakdown,
                template=template,
                settings=self.settings,
            )

            async with semaphore:
                try:
                    sent = await dispatcher.send(payload)
                except Exception as e:
                    logger.error(
                        "Error enviando notificación",
                        investor_id=match.investor_id,
                        property_id=match.property_id,
                        error=str(e),
                    )
                    sent = False

            try:
                if not sent:
                    self.ledger.release(match.investor_id, match.property_id)
                    stats["dispatch_failures"] += 1
                    return

                self.ledger.record(
                    NotificationRecord(
                        investor_id=match.investor_id,
                        property_id=match.property_id,
                        sent_at=self._clock(),
                        score_at_send=match.overall,
                    )
                )
                stats["notifications_sent"] += 1

            except Exception as e:
                logger.error(
                    "Error actualizando ledger",
                    investor_id=match.investor_id,
                    property_id=match.property_id,
                    error=str(e),
                )
                stats["errors"] += 1

        await asyncio.gather(*(deliver(m) for m in matches))

        logger.info("Envío de notificaciones completado", **stats)
        return stats

    async def on_property_available(
        self, listing: PropertyListing, dispatcher: NotificationDispatcher
    ) -> dict:
        """Trigger: una propiedad se publicó o se editó estando disponible."""
        matches = self.qualifying_matches_for_property(listing)
        return await self.notify_matches(matches, dispatcher, template=NEW_PROPERTY_MATCH)

    async def on_preferences_updated(
        self,
        profile: InvestorPreferenceProfile,
        dispatcher: NotificationDispatcher,
        previous: Optional[InvestorPreferenceProfile] = None,
    ) -> dict:
        """
        Trigger: un inversor activó o actualizó sus preferencias.

        Si el cambio es material (criterios de score o licencia), se reinicia
        su historial para que vuelva a recibir las propiedades que ahora matchean.
        """
        if previous is not None and profile.is_material_change(previous):
            self.ledger.clear_investor(profile.investor_id)

        matches = self.qualifying_matches_for_investor(profile)
        return await self.notify_matches(matches, dispatcher, template=PROPERTY_MATCHES)

    async def run_matching_cycle(
        self,
        dispatcher: NotificationDispatcher,
        since: Optional[datetime] = None,
    ) -> dict:
        """
        Ejecuta un ciclo completo de matching sobre las propiedades recientes.

        Diseñado para ser llamado por cron. Un error en una propiedad no
        corta el ciclo; se cuenta y se sigue con la siguiente.
        """
        since = since or self._clock() - timedelta(hours=self.settings.recent_window_hours)
        logger.info("Iniciando ciclo de matching", since=since.isoformat())

        stats = {
            "properties_processed": 0,
            "matches_found": 0,
            "notifications_sent": 0,
            "dispatch_failures": 0,
            "errors": 0,
        }

        try:
            listings = self.property_repo.get_recently_available(since)
        except Exception as e:
            logger.error("Error en ciclo de matching", error=str(e))
            raise

        if not listings:
            logger.info("No hay propiedades nuevas para procesar")
            return stats

        for listing in listings:
            try:
                result = await self.on_property_available(listing, dispatcher)
            except Exception as e:
                logger.error(
                    "Error procesando propiedad",
                    property_id=listing.property_id,
                    error=str(e),
                )
                stats["errors"] += 1
                continue

            stats["properties_processed"] += 1
            stats["matches_found"] += result["qualifying"]
            stats["notifications_sent"] += result["notifications_sent"]
            stats["dispatch_failures"] += result["dispatch_failures"]
            stats["errors"] += result["errors"]

        logger.info("Procesamiento de matching completado", **stats)
        return stats


def _rank(
    matches: list[MatchResult],
    candidate_id: Callable[[MatchResult], str],
    min_score: int,
    limit: Optional[int],
    offset: int,
) -> list[MatchResult]:
    """Filtra por score mínimo, ordena y pagina."""
    kept = [m for m in matches if m.overall >= min_score]
    kept.sort(key=lambda m: (-m.overall, candidate_id(m)))
    end = None if limit is None else offset + limit
    return kept[offset:end]
