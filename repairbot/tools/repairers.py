"""
Repairer directory interface and an in-memory implementation.

In production, this would query the repairers table for partners with
known coordinates. The sample directory lets the console demo and the
tests exercise location-aware prompts without a database.
"""

import logging
from typing import Optional, Protocol

from repairbot.schemas.memory_schema import RepairerRef
from repairbot.utils import haversine_km

logger = logging.getLogger(__name__)


class RepairerDirectory(Protocol):
    async def find_nearby(
        self, location: tuple[float, float], limit: int
    ) -> list[RepairerRef]: ...


SAMPLE_REPAIRERS: list[RepairerRef] = [
    RepairerRef(
        name="Atelier Mobile Bastille",
        address="12 rue de la Roquette, 75011 Paris",
        rating=4.8,
        specialties=["écran", "batterie"],
        lat=48.8546,
        lng=2.3726,
    ),
    RepairerRef(
        name="Phone Doctor Montparnasse",
        address="45 avenue du Maine, 75014 Paris",
        rating=4.5,
        specialties=["désoxydation", "carte mère"],
        lat=48.8387,
        lng=2.3210,
    ),
    RepairerRef(
        name="Répar'Express Lyon",
        address="8 rue de la République, 69002 Lyon",
        rating=4.6,
        specialties=["écran", "connecteur de charge"],
        lat=45.7624,
        lng=4.8357,
    ),
    RepairerRef(
        name="SOS Smartphone (adresse à confirmer)",
        address="Paris",
        rating=4.1,
        specialties=["batterie"],
    ),
]


class InMemoryRepairerDirectory:
    """Distance-sorted lookup over a fixed list of repairers."""

    def __init__(self, repairers: Optional[list[RepairerRef]] = None) -> None:
        self._repairers = list(SAMPLE_REPAIRERS if repairers is None else repairers)

    async def find_nearby(
        self, location: tuple[float, float], limit: int
    ) -> list[RepairerRef]:
        located = []
        for repairer in self._repairers:
            if repairer.lat is None or repairer.lng is None:
                continue
            distance = haversine_km(location, (repairer.lat, repairer.lng))
            located.append(repairer.model_copy(update={"distance_km": round(distance, 2)}))
        located.sort(key=lambda r: r.distance_km)
        logger.debug("Found %d located repairer(s), returning %d", len(located), limit)
        return located[:limit]
