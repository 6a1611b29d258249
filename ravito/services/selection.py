"""
Supplier Selection Service
==========================

Loads the data the cheapest-supplier algorithm needs and runs it.

Failure policy
--------------
Every failure converges to "no candidates": an empty zone, an empty night
roster, a data-access error or no candidate with depot coordinates.  The
service fails closed so orders are never assigned to an unverified
supplier; the distinction is only visible in the logs.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ravito.domain.clock import Clock, is_night_time, zone_clock
from ravito.domain.entities import Coordinates, SupplierSelection
from ravito.domain.pricing import DeliveryCostEstimator
from ravito.domain.selection import (
    CandidateQuote,
    eligible_supplier_ids,
    rank_candidates,
)
from ravito.infrastructure.repositories import (
    NightGuardRepository,
    SupplierRepository,
    SupplierZoneRepository,
)

logger = logging.getLogger(__name__)


class SupplierSelector:
    def __init__(
        self,
        zones: SupplierZoneRepository,
        night_guard: NightGuardRepository,
        suppliers: SupplierRepository,
        estimator: DeliveryCostEstimator,
        clock: Clock,
        night_start_hour: int = 22,
        night_end_hour: int = 6,
    ):
        self.zones = zones
        self.night_guard = night_guard
        self.suppliers = suppliers
        self.estimator = estimator
        self.clock = clock
        self.night_start_hour = night_start_hour
        self.night_end_hour = night_end_hour

    @classmethod
    def for_session(
        cls, session: AsyncSession, settings, clock: Optional[Clock] = None
    ) -> "SupplierSelector":
        return cls(
            SupplierZoneRepository(session),
            NightGuardRepository(session),
            SupplierRepository(session),
            DeliveryCostEstimator.from_settings(settings),
            clock or zone_clock(settings.timezone),
            settings.night_start_hour,
            settings.night_end_hour,
        )

    def is_night(self, now: datetime) -> bool:
        return is_night_time(now.hour, self.night_start_hour, self.night_end_hour)

    async def eligible_supplier_ids(self, zone_id: str, now: datetime) -> list[str]:
        """Supplier ids allowed to serve *zone_id* at *now*, sorted by id."""
        try:
            zone_suppliers = await self.zones.approved_supplier_ids(zone_id)
        except SQLAlchemyError:
            logger.exception("Zone coverage lookup failed for zone %s", zone_id)
            return []
        if not zone_suppliers:
            logger.warning("No approved supplier for zone %s", zone_id)
            return []

        night = self.is_night(now)
        roster: list[str] = []
        if night:
            try:
                roster = await self.night_guard.roster_supplier_ids(
                    zone_id, now.date()
                )
            except SQLAlchemyError:
                logger.exception("Night-guard lookup failed for zone %s", zone_id)
                return []
            if not roster:
                logger.warning(
                    "Night mode: no supplier on guard for zone %s on %s",
                    zone_id,
                    now.date().isoformat(),
                )
                return []

        candidates = eligible_supplier_ids(zone_suppliers, night, roster)
        if not candidates:
            logger.warning("No eligible supplier left for zone %s", zone_id)
        return candidates

    async def rank_suppliers(
        self, client: Coordinates, zone_id: str
    ) -> list[CandidateQuote]:
        """Eligible suppliers quoted and ordered cheapest first."""
        now = self.clock()
        candidate_ids = await self.eligible_supplier_ids(zone_id, now)
        if not candidate_ids:
            return []

        try:
            suppliers = await self.suppliers.get_approved(candidate_ids)
        except SQLAlchemyError:
            logger.exception("Supplier lookup failed for zone %s", zone_id)
            return []

        ranked = rank_candidates(suppliers, client, self.estimator)
        if not ranked:
            logger.warning("No costable supplier (missing depot) for zone %s", zone_id)
        return ranked

    async def select_best_supplier(
        self, client: Coordinates, zone_id: str
    ) -> Optional[SupplierSelection]:
        """Cheapest eligible supplier and its delivery cost, or None."""
        ranked = await self.rank_suppliers(client, zone_id)
        if not ranked:
            return None
        best = ranked[0]
        return SupplierSelection(
            supplier_id=best.supplier_id,
            delivery_cost=best.quote.client_cost,
            delivery_margin=best.quote.margin,
        )
