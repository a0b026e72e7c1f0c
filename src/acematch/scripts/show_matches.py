"""
Script para ver el ranking de matches de una propiedad o un inversor.

Muestra lo mismo que el panel de admin: score, etiqueta y desglose.
No escribe en el ledger.

Uso:
    python -m acematch.scripts.show_matches --property-id <uuid>
    python -m acematch.scripts.show_matches --investor-id <uuid> --limit 20 --min-score 60
"""

import argparse
import sys

import structlog

from acematch.logging_config import configure_logging
from acematch.matching import MatchingEngine, MatchResult

configure_logging()

logger = structlog.get_logger()


def format_row(position: int, match: MatchResult, by_investor: bool) -> str:
    b = match.breakdown
    if by_investor:
        who = match.investor.full_name or match.investor_id
    else:
        who = match.listing.display_title() or match.property_id
    return (
        f"{position:>3}. {b.overall:>3}% {b.label.value:<16} {who}  "
        f"[ubicación {b.location} · precio {b.price} · "
        f"dormitorios {b.bedrooms} · tipo {b.type}]"
    )


def main():
    parser = argparse.ArgumentParser(
        description="Muestra el ranking de matches (sin enviar notificaciones)"
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--property-id", help="Inversores para esta propiedad")
    target.add_argument("--investor-id", help="Propiedades para este inversor")
    parser.add_argument("--limit", type=int, default=None, help="Máximo de resultados")
    parser.add_argument("--min-score", type=int, default=0, help="Score mínimo")
    args = parser.parse_args()

    try:
        engine = MatchingEngine()
        if args.property_id:
            matches = engine.matched_investors(
                args.property_id, limit=args.limit, min_score=args.min_score
            )
        else:
            matches = engine.matched_properties(
                args.investor_id, limit=args.limit or 20, min_score=args.min_score
            )
    except Exception as e:
        logger.error("Error calculando matches", error=str(e))
        sys.exit(1)

    if not matches:
        print("Sin matches.")
        sys.exit(0)

    by_investor = bool(args.property_id)
    print()
    for i, match in enumerate(matches, start=1):
        print(format_row(i, match, by_investor))
    sys.exit(0)


if __name__ == "__main__":
    main()
