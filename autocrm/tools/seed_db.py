"""Seed the database with demo users and equipment-repair tickets.

Usage:
    python -m autocrm.tools.seed_db
    python -m autocrm.tools.seed_db --drop  # drop existing data first
    python -m autocrm.tools.seed_db --verify-only
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from autocrm.adapters.persistence.database import async_session_factory
from autocrm.adapters.persistence.models import (
    AIActionModel,
    TicketMessageModel,
    TicketModel,
    UserProfileModel,
)
from autocrm.adapters.persistence.repositories import SqlTicketRepository, SqlUserRepository
from autocrm.domain.entities.preferences import UserAIPreferences
from autocrm.domain.entities.ticket import Ticket
from autocrm.domain.entities.user import UserProfile
from autocrm.domain.value_objects.enums import (
    NoteVisibility,
    TicketPriority,
    TicketStatus,
    UserRole,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)

CUSTOMERS: list[tuple[str, str]] = [
    ("Alice Customer", "Demo Corp"),
    ("Bob Customer", "Demo LLC"),
    ("John Warehouse", "Warehouse Solutions Inc."),
    ("Sarah Builder", "BuildRight Construction"),
    ("Mike Shipper", "FastTrack Logistics"),
    ("Lisa Plant", "Precision Manufacturing Co."),
    ("Dave Miner", "DeepRock Mining"),
    ("Karen Store", "MegaMart Distribution"),
    ("Tom Farmer", "Harvest Equipment Ltd."),
    ("Rachel Green", "EcoSort Recycling"),
    ("Paul Docker", "Harbor Operations Inc."),
    ("Amy Process", "FoodTech Processing"),
]

# (name, role, preferences)
STAFF: list[tuple[str, UserRole, UserAIPreferences]] = [
    ("Carol Service", UserRole.SERVICE_REP, UserAIPreferences()),
    (
        "David Service",
        UserRole.SERVICE_REP,
        UserAIPreferences(require_approval=False, enable_voice_input=True),
    ),
    (
        "Frank Tech",
        UserRole.SERVICE_REP,
        UserAIPreferences(default_note_visibility=NoteVisibility.CUSTOMER),
    ),
    ("Helen Helper", UserRole.SERVICE_REP, UserAIPreferences(enable_voice_input=True)),
    ("Eva Admin", UserRole.ADMIN, UserAIPreferences()),
]

# (customer, title, description, priority, tags, assigned to Carol)
TICKETS: list[tuple[str, str, str, TicketPriority, list[str], bool]] = [
    (
        "John Warehouse",
        "Toyota 8FGU25 forklift hydraulic leak",
        "Main warehouse forklift is leaking hydraulic fluid from the mast assembly, "
        "roughly 200ml per shift.",
        TicketPriority.HIGH,
        ["forklift", "hydraulic", "leak", "toyota"],
        True,
    ),
    (
        "John Warehouse",
        "Scheduled maintenance for Raymond Reach truck",
        "Routine maintenance for the Raymond Reach truck (Model 7500).",
        TicketPriority.MEDIUM,
        ["reach-truck", "maintenance", "raymond"],
        True,
    ),
    (
        "Sarah Builder",
        "CAT excavator won't start",
        "CAT 320 won't start. Batteries seem ok. Holding up site work.",
        TicketPriority.URGENT,
        ["excavator", "caterpillar", "electrical"],
        True,
    ),
    (
        "Sarah Builder",
        "Bobcat skid steer tracks loose",
        "Tracks getting loose on Bobcat S650, clacking noise.",
        TicketPriority.HIGH,
        ["bobcat", "tracks", "noise"],
        True,
    ),
    (
        "Mike Shipper",
        "Dock leveler malfunction - Bay 3",
        "Dock leveler in Bay 3 not maintaining level position.",
        TicketPriority.HIGH,
        ["dock-leveler", "hydraulic", "blue-giant"],
        True,
    ),
    (
        "Mike Shipper",
        "Electric pallet jack battery issues",
        "Crown pallet jack battery drains within two hours.",
        TicketPriority.MEDIUM,
        ["pallet-jack", "battery", "crown"],
        True,
    ),
    (
        "Lisa Plant",
        "CNC machine spindle alignment error",
        "Haas CNC spindle alignment drifting, parts out of tolerance.",
        TicketPriority.HIGH,
        ["cnc", "haas", "spindle", "precision"],
        False,
    ),
    (
        "Lisa Plant",
        "Robot arm calibration drift",
        "Fanuc robot arm calibration drifting after each shift.",
        TicketPriority.MEDIUM,
        ["robot", "fanuc", "calibration"],
        True,
    ),
    (
        "Dave Miner",
        "Hydraulic drill rig pressure loss",
        "Atlas Copco drill rig losing hydraulic pressure under load.",
        TicketPriority.URGENT,
        ["drill-rig", "hydraulic", "atlas-copco"],
        False,
    ),
    (
        "Karen Store",
        "Conveyor belt speed sensor malfunction",
        "Sorting conveyor speed sensor reporting erratic values.",
        TicketPriority.MEDIUM,
        ["conveyor", "sensor", "sorting"],
        False,
    ),
    (
        "Tom Farmer",
        "John Deere combine harvester engine overheating",
        "Combine engine overheats after 40 minutes of operation.",
        TicketPriority.HIGH,
        ["combine", "john-deere", "engine", "cooling"],
        True,
    ),
    (
        "Tom Farmer",
        "Irrigation pump pressure fluctuation",
        "Grundfos irrigation pump pressure fluctuating between 30 and 60 PSI.",
        TicketPriority.MEDIUM,
        ["irrigation", "pump", "grundfos"],
        True,
    ),
    (
        "Rachel Green",
        "Shredder overload protection trips",
        "Untha shredder overload protection trips on every load.",
        TicketPriority.HIGH,
        ["shredder", "electrical", "untha"],
        True,
    ),
    (
        "Paul Docker",
        "STS Crane #3 keeps losing power",
        "ZPMC crane losing power when swinging trolley; F-387 code flashes.",
        TicketPriority.HIGH,
        ["gantry-crane", "electrical", "zpmc"],
        False,
    ),
    (
        "Amy Process",
        "Packaging line servo motor fault",
        "Multivac packaging line servo motor throwing Error 22-8B.",
        TicketPriority.HIGH,
        ["packaging", "servo", "multivac"],
        True,
    ),
    (
        "Alice Customer",
        "Preventive maintenance check",
        "Annual maintenance due for facility equipment.",
        TicketPriority.LOW,
        ["maintenance", "inspection", "facility"],
        True,
    ),
    (
        "Bob Customer",
        "Upgrade request for control system",
        "Requesting upgrade for the existing PLC system.",
        TicketPriority.LOW,
        ["upgrade", "plc", "automation"],
        True,
    ),
]


async def _drop_data(session: AsyncSession) -> None:
    """Delete all data in correct order (respecting FK constraints)."""
    for model in [AIActionModel, TicketMessageModel, TicketModel, UserProfileModel]:
        await session.execute(delete(model))
    await session.commit()
    logger.info("Dropped all existing data")


async def seed(drop: bool = False) -> dict[str, int]:
    """Main seed function. Returns counts of seeded records."""
    counts = {"users": 0, "tickets": 0}

    async with async_session_factory() as session:
        if drop:
            await _drop_data(session)

        existing = (
            await session.execute(select(func.count(UserProfileModel.id)))
        ).scalar() or 0
        if existing:
            logger.info("Database already has %d users, skipping (use --drop to reseed)", existing)
            return counts

        users = SqlUserRepository(session)
        tickets = SqlTicketRepository(session)

        ids: dict[str, str] = {}
        for name, company in CUSTOMERS:
            user = await users.save(
                UserProfile(id=None, full_name=name, role=UserRole.CUSTOMER, company=company)
            )
            ids[name] = user.id
            counts["users"] += 1

        for name, role, prefs in STAFF:
            user = await users.save(
                UserProfile(
                    id=None, full_name=name, role=role, company="AutoCRM", ai_preferences=prefs
                )
            )
            ids[name] = user.id
            counts["users"] += 1

        # Oldest first so the list order matches creation order
        start = datetime.now(timezone.utc) - timedelta(hours=len(TICKETS))
        for i, (customer, title, description, priority, tags, for_carol) in enumerate(TICKETS):
            await tickets.save(
                Ticket(
                    id=None,
                    title=title,
                    description=description,
                    customer_id=ids[customer],
                    status=TicketStatus.NEW,
                    priority=priority,
                    tags=set(tags),
                    assigned_to=ids["Carol Service"] if for_carol else None,
                    created_at=start + timedelta(hours=i),
                )
            )
            counts["tickets"] += 1

        await session.commit()

    logger.info("Seeded %d users and %d tickets", counts["users"], counts["tickets"])
    return counts


async def _verify_data() -> None:
    """Print sanity checks after seeding."""
    async with async_session_factory() as session:
        users = (await session.execute(select(UserProfileModel))).scalars().all()
        tickets = (await session.execute(select(TicketModel))).scalars().all()

        roles: dict[str, int] = {}
        for u in users:
            roles[u.role] = roles.get(u.role, 0) + 1
        assigned = sum(1 for t in tickets if t.assigned_to)

        print(f"\n{'='*50}")
        print("SEED VERIFICATION")
        print(f"{'='*50}")
        print(f"Users:   {len(users)} {roles}")
        print(f"Tickets: {len(tickets)} ({assigned} assigned)")
        for u in users:
            if u.role != UserRole.CUSTOMER.value:
                print(f"  {u.role:<12} {u.full_name:<16} {u.id}")
        print(f"{'='*50}\n")


def main():
    parser = argparse.ArgumentParser(description="Seed AutoCRM demo data")
    parser.add_argument(
        "--drop", action="store_true",
        help="Drop existing data before seeding",
    )
    parser.add_argument(
        "--verify-only", action="store_true",
        help="Only run verification, don't seed",
    )
    args = parser.parse_args()

    if args.verify_only:
        asyncio.run(_verify_data())
    else:
        async def run_all():
            await seed(drop=args.drop)
            await _verify_data()
        asyncio.run(run_all())


if __name__ == "__main__":
    main()
