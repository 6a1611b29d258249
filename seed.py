"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 4 delivery zones in Abidjan
  - 6 suppliers with depots (one without coordinates)
  - approved / pending zone memberships
  - tonight's night-guard roster for two suppliers
  - a small beverage catalogue
"""

import asyncio
from datetime import datetime
from zoneinfo import ZoneInfo

from sqlalchemy import text

from ravito.config import settings
from ravito.domain.enums import ApprovalStatus
from ravito.infrastructure.database import async_session_factory, engine
from ravito.infrastructure.models import (
    NightGuardScheduleModel,
    ProductModel,
    SupplierModel,
    SupplierZoneModel,
    ZoneModel,
)
from ravito.infrastructure.repositories import geo_point

ZONES = ["Cocody", "Plateau", "Marcory", "Yopougon"]

SUPPLIERS = [
    # name, depot (lat, lng), approved zones, pending zones
    ("Dépôt Riviera", (5.3600, -3.9700), ["Cocody", "Plateau"], []),
    ("Boissons du Plateau", (5.3250, -4.0200), ["Plateau", "Marcory"], []),
    ("Marcory Distribution", (5.3000, -3.9850), ["Marcory"], ["Cocody"]),
    ("Yop Ravitaillement", (5.3450, -4.0800), ["Yopougon"], []),
    ("Cocody Express", (5.3700, -4.0100), ["Cocody"], ["Yopougon"]),
    ("Dépôt Sans Adresse", None, ["Cocody"], []),
]

NIGHT_GUARD = {
    "Dépôt Riviera": ["Cocody"],
    "Boissons du Plateau": ["Plateau", "Marcory"],
}

PRODUCTS = [
    # reference, name, brand, unit, crate, consign
    ("SOL-65", "Solibra 65cl", "Solibra", 650, 7800, 3000),
    ("FLAG-65", "Flag Spéciale 65cl", "Solibra", 600, 7200, 3000),
    ("CAST-66", "Castel Beer 66cl", "Castel", 650, 7800, 3000),
    ("COCA-30", "Coca-Cola 30cl", "Coca-Cola", 350, 8400, 2400),
    ("AWA-150", "Eau Awa 1.5L", "Awa", 400, 2400, 0),
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM delivery_zones"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Zones ─────────────────────────────────────────────────────
        zones = {name: ZoneModel(name=name) for name in ZONES}
        session.add_all(zones.values())
        await session.flush()
        print(f"  Created {len(zones)} zones")

        # ── Suppliers & coverage ──────────────────────────────────────
        suppliers = {}
        for name, depot, approved, pending in SUPPLIERS:
            supplier = SupplierModel(business_name=name, is_approved=True)
            if depot:
                supplier.depot_lat, supplier.depot_lng = depot
                supplier.depot_point = geo_point(*depot)
            session.add(supplier)
            await session.flush()
            suppliers[name] = supplier

            for zone in approved:
                session.add(
                    SupplierZoneModel(
                        supplier_id=supplier.id,
                        zone_id=zones[zone].id,
                        approval_status=ApprovalStatus.APPROVED,
                        approved_at=datetime.now(ZoneInfo("UTC")),
                    )
                )
            for zone in pending:
                session.add(
                    SupplierZoneModel(
                        supplier_id=supplier.id,
                        zone_id=zones[zone].id,
                        approval_status=ApprovalStatus.PENDING,
                    )
                )
        await session.flush()
        print(f"  Created {len(suppliers)} suppliers")

        # ── Night guard (today, local time) ───────────────────────────
        today = datetime.now(ZoneInfo(settings.timezone)).date()
        for name, covered in NIGHT_GUARD.items():
            session.add(
                NightGuardScheduleModel(
                    supplier_id=suppliers[name].id,
                    date=today,
                    is_active=True,
                    covered_zones=[zones[z].id for z in covered],
                )
            )
        print(f"  Scheduled {len(NIGHT_GUARD)} suppliers on night guard for {today}")

        # ── Catalogue ─────────────────────────────────────────────────
        for ref, name, brand, unit, crate, consign in PRODUCTS:
            session.add(
                ProductModel(
                    reference=ref,
                    name=name,
                    brand=brand,
                    unit_price=unit,
                    crate_price=crate,
                    consign_price=consign,
                )
            )
        print(f"  Created {len(PRODUCTS)} products")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
