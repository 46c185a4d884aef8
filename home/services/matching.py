"""
Contractor matching: which contractors can be offered a ticket.

A contractor qualifies when one of their service areas covers the tenant's
city and one of their specializations matches the ticket category under the
loose plural/substring rule in `categories_match`.
"""

from typing import Iterable, Optional

from home.schemas.contractor import Contractor, ContractorMatch
from home.schemas.ticket import Ticket
from home.utils.logging_config import logger

SAME_CITY_MILES = 0.0
SAME_STATE_MILES = 50.0
FAR_MILES = 200.0


def normalize_category(category: str) -> str:
    return category.strip().lower()


def _singular(value: str) -> str:
    if value.endswith("s") and len(value) > 1:
        return value[:-1]
    return value


def categories_match(first: str, second: str) -> bool:
    """
    "Appliance" matches "Appliances", "General Repair" matches
    "General Repairs". Falls back to substring containment either way, so
    short names like "AC" match far more than they should; that looseness is
    relied on by existing contractor profiles.
    """
    a = normalize_category(first)
    b = normalize_category(second)
    if a == b:
        return True
    if _singular(a) == _singular(b):
        return True
    return a in b or b in a


def serves_location(
    contractor: Contractor, city: Optional[str], state: Optional[str]
) -> bool:
    if not city or not state:
        return False
    wanted_state = state.strip().lower()
    wanted_city = city.strip().lower()
    for area_state, cities in contractor.service_areas.items():
        if area_state.strip().lower() != wanted_state:
            continue
        if any(c.strip().lower() == wanted_city for c in cities):
            return True
    return False


def can_handle(contractor: Contractor, category: str) -> bool:
    return any(categories_match(spec, category) for spec in contractor.specialization)


def estimate_distance(
    city1: Optional[str],
    state1: Optional[str],
    city2: Optional[str],
    state2: Optional[str],
) -> float:
    if not (city1 and state1 and city2 and state2):
        return FAR_MILES
    same_state = state1.strip().lower() == state2.strip().lower()
    if same_state and city1.strip().lower() == city2.strip().lower():
        return SAME_CITY_MILES
    if same_state:
        return SAME_STATE_MILES
    return FAR_MILES


def match_contractors(
    ticket: Ticket,
    city: Optional[str],
    state: Optional[str],
    contractors: Iterable[Contractor],
) -> list[Contractor]:
    """
    Eligible contractors for `ticket` in the tenant's city, best rated first.
    Equal ratings keep their roster order.
    """
    eligible = [
        c
        for c in contractors
        if serves_location(c, city, state) and can_handle(c, ticket.category)
    ]
    ranked = sorted(eligible, key=lambda c: c.rating, reverse=True)
    logger.debug(
        f"Matched {len(ranked)} contractors for ticket {ticket.id} "
        f"({ticket.category}, {city}, {state})"
    )
    return ranked


def rank_with_distance(
    ticket: Ticket,
    city: Optional[str],
    state: Optional[str],
    contractors: Iterable[Contractor],
) -> list[ContractorMatch]:
    return [
        ContractorMatch(
            contractor=c, distance=estimate_distance(city, state, c.city, c.state)
        )
        for c in match_contractors(ticket, city, state, contractors)
    ]
