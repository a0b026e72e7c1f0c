"""
Script para ejecutar el ciclo de matching y notificaciones.

Sin argumentos procesa las propiedades publicadas/editadas en la ventana
reciente (cron diario). Con --property-id o --investor-id procesa un
trigger puntual.

Uso:
    python -m acematch.scripts.run_matching
    python -m acematch.scripts.run_matching --property-id <uuid>
    python -m acematch.scripts.run_matching --investor-id <uuid>
"""

import argparse
import asyncio
import sys
from typing import Optional

import structlog

from acematch.exceptions import CandidateFetchError
from acematch.logging_config import configure_logging
from acematch.matching import MatchingEngine
from acematch.notifications import WebhookEmailDispatcher

configure_logging()

logger = structlog.get_logger()


async def run_matching(
    property_id: Optional[str] = None,
    investor_id: Optional[str] = None,
) -> dict:
    """Ejecuta el ciclo completo o un trigger puntual."""
    engine = MatchingEngine()

    async with WebhookEmailDispatcher() as dispatcher:
        if property_id:
            listing = engine.property_repo.get_by_id(property_id)
            if listing is None:
                logger.error("Propiedad no encontrada", property_id=property_id)
                return {"errors": 1}
            return await engine.on_property_available(listing, dispatcher)

        if investor_id:
            profile = engine.investor_repo.get_by_investor_id(investor_id)
            if profile is None:
                logger.error("Inversor sin preferencias", investor_id=investor_id)
                return {"errors": 1}
            return await engine.on_preferences_updated(profile, dispatcher)

        return await engine.run_matching_cycle(dispatcher)


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(
        description="Busca matches nuevos y envía notificaciones a inversores"
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--property-id", help="Procesa solo esta propiedad")
    target.add_argument("--investor-id", help="Procesa solo este inversor")
    args = parser.parse_args()

    logger.info("Iniciando matching...")

    try:
        stats = asyncio.run(
            run_matching(property_id=args.property_id, investor_id=args.investor_id)
        )

        logger.info(
            "Matching completado",
            matches=stats.get("matches_found", stats.get("qualifying", 0)),
            notifications=stats.get("notifications_sent", 0),
            failures=stats.get("dispatch_failures", 0),
        )

        sys.exit(0 if stats.get("errors", 0) == 0 else 1)

    except KeyboardInterrupt:
        logger.info("Matching interrumpido por usuario")
        sys.exit(130)
    except CandidateFetchError as e:
        logger.error("Base no disponible, reintentar más tarde", error=str(e))
        sys.exit(1)
    except Exception as e:
        logger.error("Error fatal en matching", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
