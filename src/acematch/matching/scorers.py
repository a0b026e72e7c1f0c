"""
Scorers por criterio.

Funciones puras y totales: reciben la sub-preferencia del inversor y el
atributo de la propiedad, y devuelven un entero entre 0 y 100. Más
cercanía implica más score.
"""

import math
from typing import Iterable, Optional

from acematch.config import LOCAL_AUTHORITIES, UK_REGIONS
from acematch.models import BedroomRange, BudgetRange

MAX_SCORE = 100

_REGIONS = {region.lower(): [s.lower() for s in subs] for region, subs in UK_REGIONS.items()}
_AUTHORITIES = {
    sub.lower(): [a.lower() for a in authorities]
    for sub, authorities in LOCAL_AUTHORITIES.items()
}


def score_price(budget: Optional[BudgetRange], price: float) -> int:
    """
    Score de precio contra el presupuesto.

    Dentro de [min, max] vale 100. Afuera decae linealmente hasta 0 a una
    distancia de `half_range` del borde más cercano.
    """
    if budget is None or budget.is_empty:
        return MAX_SCORE

    if budget.max is None:
        # Sin tope: solo se penaliza por debajo del mínimo
        if price >= budget.min:
            return MAX_SCORE
        return _linear_decay(budget.min - price, budget.min * 0.1)

    if budget.min <= price <= budget.max:
        return MAX_SCORE

    mid = (budget.min + budget.max) / 2
    half_range = (budget.max - budget.min) / 2
    if half_range == 0:
        half_range = mid * 0.1

    distance = budget.min - price if price < budget.min else price - budget.max
    return _linear_decay(distance, half_range)


def _linear_decay(distance: float, half_range: float) -> int:
    if half_range <= 0:
        return 0
    score = math.floor(max(0.0, MAX_SCORE - MAX_SCORE * (distance / half_range)))
    # Fuera de rango nunca llega a 100
    return min(score, MAX_SCORE - 1)


def score_bedrooms(
    preference: Optional[BedroomRange], bedrooms: int, step_penalty: int = 25
) -> int:
    """Dentro del rango vale 100; pierde `step_penalty` por dormitorio de distancia."""
    if preference is None or preference.is_empty:
        return MAX_SCORE

    if bedrooms < preference.min:
        distance = preference.min - bedrooms
    elif preference.max is not None and bedrooms > preference.max:
        distance = bedrooms - preference.max
    else:
        return MAX_SCORE

    return max(0, MAX_SCORE - step_penalty * distance)


def score_type(preferred: Iterable[str], property_type: str) -> int:
    """Match categórico: los tipos no son ordinales, no hay distancia."""
    wanted = {t.strip().lower() for t in preferred if t and t.strip()}
    if not wanted:
        return MAX_SCORE
    return MAX_SCORE if (property_type or "").strip().lower() in wanted else 0


def score_location(preferred: Iterable[str], location: str) -> int:
    """
    Match de ubicación, sin distinguir mayúsculas.

    Las local authorities de las zonas preferidas matchean por igualdad: una
    preferencia "East London" cubre una propiedad en "Hackney". Los nombres
    elegidos (y las sub-regiones de una región) matchean por contención de
    texto: "London" matchea "East London" y viceversa.
    """
    wanted = expand_locations(preferred)
    if not wanted:
        return MAX_SCORE

    listing = (location or "").strip().lower()
    if not listing:
        return 0

    if listing in expand_authorities(preferred):
        return MAX_SCORE

    for area in wanted:
        if listing == area or listing in area or area in listing:
            return MAX_SCORE
    return 0


def expand_locations(preferred: Iterable[str]) -> set[str]:
    """Normaliza los nombres y expande regiones a sus sub-regiones."""
    areas = set()
    for name in preferred:
        key = (name or "").strip().lower()
        if not key:
            continue
        areas.add(key)
        areas.update(_REGIONS.get(key, []))
    return areas


def expand_authorities(preferred: Iterable[str]) -> set[str]:
    """
    Local authorities cubiertas por las zonas preferidas.

    Una región aporta las de todas sus sub-regiones; una sub-región, las
    suyas. Los demás nombres se toman como local authority.
    """
    authorities = set()
    for area in expand_locations(preferred):
        authorities.update(_AUTHORITIES.get(area, [area]))
    return authorities
