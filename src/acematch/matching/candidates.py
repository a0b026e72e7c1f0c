"""
Generador de candidatos.

Dado un lado del par (propiedad o inversor), obtiene el lado opuesto
elegible para scoring y aplica el único filtro hard: la licencia.
"""

import structlog

from acematch.models import InvestorPreferenceProfile, PropertyListing

logger = structlog.get_logger()


def passes_licence_gate(
    profile: InvestorPreferenceProfile, listing: PropertyListing
) -> bool:
    """
    Un inversor que exige licencias solo puede operar propiedades con
    alguna de ellas. Sin preferencia, todo pasa.
    """
    required = {lic.strip().lower() for lic in profile.property_licences if lic.strip()}
    if not required:
        return True
    return bool(listing.licence) and listing.licence.strip().lower() in required


class CandidateGenerator:
    """
    Selecciona candidatos desde los repositorios.

    `investor_source.get_active()` y `property_source.get_available()` deben
    devolver el set completo o lanzar CandidateFetchError; nunca se filtra
    sobre un set parcial.
    """

    def __init__(self, investor_source, property_source):
        self.investor_source = investor_source
        self.property_source = property_source

    def investors_for(
        self, listing: PropertyListing
    ) -> list[InvestorPreferenceProfile]:
        """Inversores activos elegibles para una propiedad disponible."""
        if not listing.is_available:
            logger.debug(
                "Propiedad no disponible, sin candidatos",
                property_id=listing.property_id,
                status=listing.status.value,
            )
            return []

        investors = self.investor_source.get_active()
        eligible = [
            inv for inv in investors
            if inv.active and passes_licence_gate(inv, listing)
        ]

        logger.debug(
            "Candidatos para propiedad",
            property_id=listing.property_id,
            total=len(investors),
            eligible=len(eligible),
        )
        return eligible

    def properties_for(
        self, profile: InvestorPreferenceProfile
    ) -> list[PropertyListing]:
        """Propiedades disponibles elegibles para un inversor activo."""
        if not profile.active:
            logger.debug("Perfil inactivo, sin candidatos", investor_id=profile.investor_id)
            return []

        listings = self.property_source.get_available()
        eligible = [
            listing for listing in listings
            if listing.is_available and passes_licence_gate(profile, listing)
        ]

        logger.debug(
            "Candidatos para inversor",
            investor_id=profile.investor_id,
            total=len(listings),
            eligible=len(eligible),
        )
        return eligible
