from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable

import pandas as pd


@dataclass(frozen=True)
class RouteMaster:
    route_id: str
    origin_airport: str
    destination_airport: str
    route_name: str
    distance_km: int
    flight_time_mins: int
    route_type: str
    market_size: str
    hub_classification: str
    strategic_importance: str
    years_operating: int
    slot_restricted: bool


ROUTE_CATALOG: tuple[RouteMaster, ...] = (
    # High profit
    RouteMaster("LON-PAR", "LHR", "CDG", "London-Paris", 344, 85, "International", "Large", "Hub-Hub", "High", 8, True),
    RouteMaster("LON-NYC", "LHR", "JFK", "London-New York", 5585, 480, "International", "Large", "Hub-Hub", "High", 12, True),
    RouteMaster("PAR-ROM", "CDG", "FCO", "Paris-Rome", 1105, 140, "International", "Large", "Hub-Hub", "High", 10, False),
    RouteMaster("MAD-BCN", "MAD", "BCN", "Madrid-Barcelona", 483, 75, "Domestic", "Large", "Hub-Spoke", "High", 15, False),
    RouteMaster("FRA-MUC", "FRA", "MUC", "Frankfurt-Munich", 230, 65, "Domestic", "Large", "Hub-Spoke", "High", 18, False),
    RouteMaster("AMS-BCN", "AMS", "BCN", "Amsterdam-Barcelona", 1243, 125, "International", "Large", "Hub-Spoke", "High", 9, False),
    RouteMaster("DUB-LON", "DUB", "LHR", "Dublin-London", 463, 85, "International", "Large", "Spoke-Hub", "High", 14, True),
    RouteMaster("ZUR-VIE", "ZUR", "VIE", "Zurich-Vienna", 596, 95, "International", "Medium", "Hub-Spoke", "Medium", 7, False),
    RouteMaster("CPH-OSL", "CPH", "OSL", "Copenhagen-Oslo", 483, 75, "International", "Medium", "Hub-Hub", "Medium", 11, False),
    RouteMaster("STO-HEL", "ARN", "HEL", "Stockholm-Helsinki", 396, 70, "International", "Medium", "Hub-Hub", "Medium", 8, False),
    RouteMaster("MIA-NYC", "MIA", "JFK", "Miami-New York", 1761, 180, "Domestic", "Large", "Hub-Hub", "High", 6, True),
    RouteMaster("LAX-LAS", "LAX", "LAS", "Los Angeles-Las Vegas", 379, 65, "Domestic", "Large", "Hub-Spoke", "Medium", 13, False),
    RouteMaster("SFO-SEA", "SFO", "SEA", "San Francisco-Seattle", 1093, 125, "Domestic", "Large", "Hub-Hub", "High", 9, True),
    RouteMaster("ORD-DEN", "ORD", "DEN", "Chicago-Denver", 1474, 155, "Domestic", "Large", "Hub-Hub", "High", 11, False),
    RouteMaster("ATL-MIA", "ATL", "MIA", "Atlanta-Miami", 973, 115, "Domestic", "Large", "Hub-Hub", "High", 14, False),
    # Moderate profit
    RouteMaster("MAN-DUB", "MAN", "DUB", "Manchester-Dublin", 290, 65, "International", "Medium", "Spoke-Spoke", "Medium", 6, False),
    RouteMaster("EDI-AMS", "EDI", "AMS", "Edinburgh-Amsterdam", 565, 90, "International", "Medium", "Spoke-Hub", "Medium", 5, False),
    RouteMaster("BER-WAW", "BER", "WAW", "Berlin-Warsaw", 516, 85, "International", "Medium", "Hub-Hub", "Medium", 4, False),
    RouteMaster("MIL-NAP", "MXP", "NAP", "Milan-Naples", 658, 95, "Domestic", "Medium", "Hub-Spoke", "Medium", 8, False),
    RouteMaster("LIS-MAD", "LIS", "MAD", "Lisbon-Madrid", 502, 80, "International", "Medium", "Hub-Hub", "Medium", 7, False),
    RouteMaster("GLA-BRU", "GLA", "BRU", "Glasgow-Brussels", 664, 95, "International", "Medium", "Spoke-Hub", "Low", 3, False),
    RouteMaster("BOL-MIL", "BLQ", "MXP", "Bologna-Milan", 201, 55, "Domestic", "Small", "Spoke-Hub", "Low", 4, False),
    RouteMaster("HAM-VIE", "HAM", "VIE", "Hamburg-Vienna", 779, 105, "International", "Medium", "Spoke-Hub", "Medium", 5, False),
    RouteMaster("BUD-PRG", "BUD", "PRG", "Budapest-Prague", 443, 75, "International", "Medium", "Spoke-Spoke", "Medium", 6, False),
    RouteMaster("ATH-ROM", "ATH", "FCO", "Athens-Rome", 1054, 135, "International", "Medium", "Hub-Hub", "Medium", 9, False),
    RouteMaster("DEN-PHX", "DEN", "PHX", "Denver-Phoenix", 957, 115, "Domestic", "Medium", "Hub-Spoke", "Medium", 7, False),
    RouteMaster("SEA-PDX", "SEA", "PDX", "Seattle-Portland", 233, 55, "Domestic", "Medium", "Hub-Spoke", "Low", 8, False),
    RouteMaster("BOS-BWI", "BOS", "BWI", "Boston-Baltimore", 634, 90, "Domestic", "Medium", "Hub-Spoke", "Medium", 5, False),
    RouteMaster("DTW-MSP", "DTW", "MSP", "Detroit-Minneapolis", 981, 115, "Domestic", "Medium", "Hub-Hub", "Medium", 10, False),
    RouteMaster("IAH-DFW", "IAH", "DFW", "Houston-Dallas", 362, 65, "Domestic", "Large", "Hub-Hub", "High", 12, False),
    RouteMaster("MCO-FLL", "MCO", "FLL", "Orlando-Fort Lauderdale", 298, 60, "Domestic", "Medium", "Spoke-Spoke", "Low", 6, False),
    RouteMaster("PHX-SAN", "PHX", "SAN", "Phoenix-San Diego", 482, 75, "Domestic", "Medium", "Spoke-Spoke", "Medium", 9, False),
    RouteMaster("STL-KCI", "STL", "MCI", "St. Louis-Kansas City", 383, 65, "Domestic", "Small", "Spoke-Spoke", "Low", 7, False),
    RouteMaster("CLE-PIT", "CLE", "PIT", "Cleveland-Pittsburgh", 185, 50, "Domestic", "Small", "Spoke-Spoke", "Low", 5, False),
    RouteMaster("MEM-BNA", "MEM", "BNA", "Memphis-Nashville", 300, 60, "Domestic", "Small", "Spoke-Spoke", "Low", 4, False),
    # Loss making
    RouteMaster("BRS-PRG", "BRS", "PRG", "Bristol-Prague", 1318, 165, "International", "Small", "Spoke-Spoke", "Low", 2, False),
    RouteMaster("LDS-BUD", "LBA", "BUD", "Leeds-Budapest", 1465, 175, "International", "Small", "Spoke-Spoke", "Low", 1, False),
    RouteMaster("NCL-RIG", "NCL", "RIX", "Newcastle-Riga", 1587, 185, "International", "Small", "Spoke-Spoke", "Low", 2, False),
    RouteMaster("LPL-KRK", "LPL", "KRK", "Liverpool-Krakow", 1450, 175, "International", "Small", "Spoke-Spoke", "Low", 1, False),
    RouteMaster("CDF-OSL", "CWL", "OSL", "Cardiff-Oslo", 1238, 155, "International", "Small", "Spoke-Hub", "Low", 1, False),
    RouteMaster("BOD-TLS", "BOD", "TLS", "Bordeaux-Toulouse", 245, 55, "Domestic", "Small", "Spoke-Spoke", "Low", 3, False),
    RouteMaster("BLQ-CAG", "BLQ", "CAG", "Bologna-Cagliari", 789, 105, "Domestic", "Small", "Spoke-Spoke", "Low", 2, False),
    RouteMaster("NTE-LYS", "NTE", "LYS", "Nantes-Lyon", 356, 65, "Domestic", "Small", "Spoke-Spoke", "Low", 2, False),
    RouteMaster("HAJ-DUS", "HAJ", "DUS", "Hannover-Dusseldorf", 234, 55, "Domestic", "Small", "Spoke-Spoke", "Low", 1, False),
    RouteMaster("NUE-STR", "NUE", "STR", "Nuremberg-Stuttgart", 145, 45, "Domestic", "Small", "Spoke-Spoke", "Low", 1, False),
    RouteMaster("ABZ-INV", "ABZ", "INV", "Aberdeen-Inverness", 166, 45, "Domestic", "Small", "Spoke-Spoke", "Low", 2, False),
    RouteMaster("SOU-EXE", "SOU", "EXT", "Southampton-Exeter", 134, 40, "Domestic", "Small", "Spoke-Spoke", "Low", 1, False),
    RouteMaster("HUY-CVT", "HUY", "CVT", "Humberside-Coventry", 189, 50, "Domestic", "Small", "Spoke-Spoke", "Low", 1, False),
    RouteMaster("BHD-CAX", "BHD", "CAX", "Belfast-Carlisle", 198, 50, "Domestic", "Small", "Spoke-Spoke", "Low", 1, False),
    RouteMaster("PLY-NWI", "PLH", "NWI", "Plymouth-Norwich", 387, 65, "Domestic", "Small", "Spoke-Spoke", "Low", 1, False),
)

HIGH_PROFIT_ROUTE_IDS: frozenset[str] = frozenset(
    {
        "LON-PAR", "LON-NYC", "PAR-ROM", "MAD-BCN", "FRA-MUC", "AMS-BCN", "DUB-LON", "ZUR-VIE",
        "CPH-OSL", "STO-HEL", "MIA-NYC", "LAX-LAS", "SFO-SEA", "ORD-DEN", "ATL-MIA",
    }
)
LOSS_MAKING_ROUTE_IDS: frozenset[str] = frozenset(
    {
        "BRS-PRG", "LDS-BUD", "NCL-RIG", "LPL-KRK", "CDF-OSL", "BOD-TLS", "BLQ-CAG", "NTE-LYS",
        "HAJ-DUS", "NUE-STR", "ABZ-INV", "SOU-EXE", "HUY-CVT", "BHD-CAX", "PLY-NWI",
    }
)

BUSINESS_ROUTE_KEYWORDS = ("London", "Paris", "New York")

_ROUTES_BY_ID = {route.route_id: route for route in ROUTE_CATALOG}


def get_route(route_id: str) -> RouteMaster:
    try:
        return _ROUTES_BY_ID[route_id]
    except KeyError:
        raise KeyError(f"Unknown route_id: {route_id}") from None


def route_tier(
    route_id: str,
    high_profit_ids: Iterable[str] = HIGH_PROFIT_ROUTE_IDS,
    loss_making_ids: Iterable[str] = LOSS_MAKING_ROUTE_IDS,
) -> str:
    if route_id in high_profit_ids:
        return "high_profit"
    if route_id in loss_making_ids:
        return "loss_making"
    return "moderate"


def demand_pattern(route: RouteMaster) -> str:
    """Large markets touching a major business city fly a business profile; the rest are leisure."""
    if route.market_size == "Large" and any(
        keyword in route.route_name for keyword in BUSINESS_ROUTE_KEYWORDS
    ):
        return "business"
    return "leisure"


def route_master_frame(routes: Iterable[RouteMaster] = ROUTE_CATALOG) -> pd.DataFrame:
    return pd.DataFrame([asdict(route) for route in routes])
