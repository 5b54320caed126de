"""
Per-country shipment aggregation for the admin world map.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Dict, List, Optional

import httpx
import pycountry
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shippro.app.models.shipment import Shipment
from shippro.app.schemas.analytics import CountryShipmentStats, WorldShipmentResponse
from shippro.app.services.geocoding import resolve_coordinates

logger = logging.getLogger("shippro.world")


# Everyday names that pycountry does not carry as a name or common name
COUNTRY_ALIASES = {
    "russia": "RUS",
    "turkey": "TUR",
    "uk": "GBR",
    "great britain": "GBR",
    "england": "GBR",
    "scotland": "GBR",
    "wales": "GBR",
    "america": "USA",
    "uae": "ARE",
    "macau": "MAC",
    "vatican": "VAT",
    "vatican city": "VAT",
    "kosovo": "XKX",
    "north korea": "PRK",
    "ivory coast": "CIV",
    "swaziland": "SWZ",
    "burma": "MMR",
    "east timor": "TLS",
    "cape verde": "CPV",
}


def country_alpha3(country: str) -> Optional[str]:
    """
    ISO 3166 alpha-3 code for a country name, alpha-2 or alpha-3 code.

    Everyday names go through COUNTRY_ALIASES first; everything else must
    match a pycountry name, official name, common name or code.
    """
    if not country or not country.strip():
        return None
    name = country.strip()

    alias = COUNTRY_ALIASES.get(name.lower())
    if alias:
        return alias

    try:
        return pycountry.countries.lookup(name).alpha_3
    except LookupError:
        return None


def _country_of(address) -> Optional[str]:
    if isinstance(address, dict):
        country = address.get("country")
        if isinstance(country, str) and country.strip():
            return country.strip()
    return None


def aggregate_countries(shipments: List[Shipment]) -> List[CountryShipmentStats]:
    """
    Count each shipment once for its sender country and once for its
    receiver country. Unresolvable countries are dropped.
    """
    sent: Dict[str, int] = defaultdict(int)
    received: Dict[str, int] = defaultdict(int)
    sent_revenue: Dict[str, float] = defaultdict(float)
    received_revenue: Dict[str, float] = defaultdict(float)

    for shipment in shipments:
        cost = shipment.estimated_cost or 0.0

        sender_country = _country_of(shipment.sender_address)
        if sender_country:
            sent[sender_country] += 1
            sent_revenue[sender_country] += cost

        receiver_country = _country_of(shipment.receiver_address)
        if receiver_country:
            received[receiver_country] += 1
            received_revenue[receiver_country] += cost

    stats = []
    for country in set(sent) | set(received):
        code = country_alpha3(country)
        if not code:
            logger.debug(f"Dropping unresolvable country '{country}'")
            continue
        stats.append(CountryShipmentStats(
            country=country,
            country_code=code,
            shipment_count=sent[country] + received[country],
            total_revenue=sent_revenue[country] + received_revenue[country],
            sent_from=sent[country],
            received_in=received[country],
        ))

    stats.sort(key=lambda s: (-s.shipment_count, s.country))
    return stats


async def world_shipments(db: AsyncSession) -> WorldShipmentResponse:
    """Totals plus geocoded per-country breakdown; empty data gives no countries."""
    result = await db.execute(select(Shipment))
    shipments = list(result.scalars().all())

    countries = aggregate_countries(shipments)

    if countries:
        async with httpx.AsyncClient() as client:
            coordinates = await asyncio.gather(
                *[resolve_coordinates(client, c.country) for c in countries]
            )
        for stats, point in zip(countries, coordinates):
            stats.coordinates = point

    return WorldShipmentResponse(
        total_shipments=len(shipments),
        total_revenue=sum(s.estimated_cost or 0.0 for s in shipments),
        countries=countries,
    )
