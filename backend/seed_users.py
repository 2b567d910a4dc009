"""
Database seeding script for the Boss account.

The BOSS role cannot be registered through the API, so the first Boss is
created here, along with the cash account every branch posts receipts to.
Run this script once after the database is reachable.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.app.main import Base
from backend.app.db.session import AsyncSessionLocal, engine
from backend.app.models.user import User
from backend.app.models.ledger_account import LedgerAccount
from backend.app.models.enums import UserRole
from backend.app.models.ledger_enums import BalanceType
from backend.app.core.config import settings
from backend.app.core.security import get_password_hash
from sqlalchemy import select


async def seed_users():
    """
    Seed the Boss user and a Cash In Hand ledger account.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting seeding...")

        result = await db.execute(
            select(User).where(User.role == UserRole.BOSS)
        )
        if result.scalars().first():
            print("ℹ️  BOSS user already exists, skipping seeding")
            return

        boss = User(
            email="boss@estate.local",
            username="boss",
            full_name="The Boss",
            hashed_password=get_password_hash("boss123"),
            role=UserRole.BOSS,
            is_active=True
        )
        db.add(boss)
        await db.flush()
        print("✅ Created BOSS user (username: boss, password: boss123)")

        cash = await db.execute(
            select(LedgerAccount).where(LedgerAccount.account_name == "Cash In Hand")
        )
        if cash.scalar_one_or_none() is None:
            db.add(LedgerAccount(
                branch=settings.default_branch,
                account_name="Cash In Hand",
                group="CASH",
                opening_balance=0,
                balance_type=BalanceType.DR,
                entered_by_id=boss.id,
                active=True
            ))
            print("✅ Created ledger account 'Cash In Hand'")

        await db.commit()

        print("\n🎉 Seeding completed successfully!")
        print("\nNote: executives register via POST /v1/auth/register")


if __name__ == "__main__":
    asyncio.run(seed_users())
