"""Supplier zone coverage requests and night-guard rosters."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from .errors import InvalidNightGuardSchedule, MembershipNotFound, SupplierNotFound
from ravito.domain.clock import Clock, zone_clock
from ravito.domain.enums import ApprovalStatus
from ravito.infrastructure.models import NightGuardScheduleModel, SupplierZoneModel
from ravito.infrastructure.repositories import (
    NightGuardRepository,
    SupplierRepository,
    SupplierZoneRepository,
)

logger = logging.getLogger(__name__)


class SupplierService:
    def __init__(
        self,
        suppliers: SupplierRepository,
        zones: SupplierZoneRepository,
        night_guard: NightGuardRepository,
        clock: Clock,
    ):
        self.suppliers = suppliers
        self.zones = zones
        self.night_guard = night_guard
        self.clock = clock

    @classmethod
    def for_session(
        cls, session: AsyncSession, settings, clock: Optional[Clock] = None
    ) -> "SupplierService":
        return cls(
            SupplierRepository(session),
            SupplierZoneRepository(session),
            NightGuardRepository(session),
            clock or zone_clock(settings.timezone),
        )

    def today(self) -> date:
        return self.clock().date()

    async def _require_supplier(self, supplier_id: str) -> None:
        if await self.suppliers.get_by_id(supplier_id) is None:
            raise SupplierNotFound(supplier_id)

    # ── Zone coverage ─────────────────────────────────────────────────

    async def request_zone(self, supplier_id: str, zone_id: str) -> SupplierZoneModel:
        """Ask to serve *zone_id*; an existing membership is returned as is."""
        await self._require_supplier(supplier_id)
        existing = await self.zones.get_membership(supplier_id, zone_id)
        if existing:
            return existing
        membership = await self.zones.create(supplier_id, zone_id)
        logger.info("Supplier %s requested zone %s", supplier_id, zone_id)
        return membership

    async def list_supplier_zones(self, supplier_id: str) -> list[SupplierZoneModel]:
        return await self.zones.list_for_supplier(supplier_id)

    async def review_zone_membership(
        self, membership_id: str, approval_status: ApprovalStatus
    ) -> SupplierZoneModel:
        membership = await self.zones.get_by_id(membership_id)
        if membership is None:
            raise MembershipNotFound(membership_id)

        membership.approval_status = approval_status
        if approval_status == ApprovalStatus.APPROVED:
            membership.approved_at = self.clock()
        else:
            membership.approved_at = None
        logger.info(
            "Zone membership %s %s", membership_id, ApprovalStatus(approval_status).value
        )
        return membership

    # ── Night guard ───────────────────────────────────────────────────

    async def get_night_guard(
        self, supplier_id: str, day: Optional[date] = None
    ) -> Optional[NightGuardScheduleModel]:
        return await self.night_guard.get_for_day(supplier_id, day or self.today())

    async def save_night_guard(
        self,
        supplier_id: str,
        covered_zones: list[str],
        day: Optional[date] = None,
    ) -> NightGuardScheduleModel:
        """Create or replace the roster for *day*; saving activates it."""
        if not covered_zones:
            raise InvalidNightGuardSchedule("Select at least one covered zone")
        await self._require_supplier(supplier_id)

        approved = set(await self.zones.approved_zone_ids(supplier_id))
        unknown = [z for z in covered_zones if z not in approved]
        if unknown:
            raise InvalidNightGuardSchedule(
                f"Zones not approved for this supplier: {', '.join(unknown)}"
            )

        day = day or self.today()
        zones = list(dict.fromkeys(covered_zones))
        schedule = await self.night_guard.get_for_day(supplier_id, day)
        if schedule is None:
            schedule = await self.night_guard.create(supplier_id, day, zones)
        else:
            schedule.covered_zones = zones
            schedule.is_active = True
        logger.info("Night guard saved for %s on %s", supplier_id, day.isoformat())
        return schedule

    async def toggle_night_guard(
        self, supplier_id: str, day: Optional[date] = None
    ) -> Optional[NightGuardScheduleModel]:
        schedule = await self.night_guard.get_for_day(supplier_id, day or self.today())
        if schedule is not None:
            schedule.is_active = not schedule.is_active
        return schedule
