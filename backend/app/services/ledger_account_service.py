"""
Ledger account service.

General accounts (bank, expenses, capital...) that JVs and manual entries
post against.
"""

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backend.app.core.config import settings
from backend.app.core.exceptions import DomainConstraintError, ValidationError
from backend.app.models.ledger_account import LedgerAccount
from backend.app.models.ledger_enums import PartyType, ReferenceType, BalanceType
from backend.app.domain.ledger.posting_service import LedgerPostingService, round_money


class LedgerAccountService:

    @staticmethod
    async def create_account(db: AsyncSession, data: dict, actor_id: int) -> LedgerAccount:
        """
        Create a ledger account. A non-zero opening balance is posted as the
        account's first ledger row: Dr as a debit, Cr as a credit.

        Raises:
            DomainConstraintError: account name already exists
            ValidationError: negative opening balance
        """
        name = data["account_name"].strip()
        existing = await db.execute(
            select(LedgerAccount.id).where(LedgerAccount.account_name == name)
        )
        if existing.first() is not None:
            raise DomainConstraintError(f"Ledger account '{name}' already exists")

        opening_balance = round_money(data.get("opening_balance"))
        if opening_balance < 0:
            raise ValidationError("Opening balance cannot be negative; use balance type Cr")
        balance_type = BalanceType(data.get("balance_type") or BalanceType.DR)

        account = LedgerAccount(
            branch=data.get("branch") or settings.default_branch,
            account_name=name,
            account_number=data.get("account_number"),
            group=data["group"],
            opening_balance=opening_balance,
            balance_type=balance_type,
            entered_by_id=actor_id,
            active=True
        )
        db.add(account)
        await db.flush()

        if opening_balance > 0:
            is_debit = balance_type == BalanceType.DR
            await LedgerPostingService.post(
                db,
                party_type=PartyType.LEDGER_ACCOUNT,
                party_id=account.id,
                debit=opening_balance if is_debit else None,
                credit=None if is_debit else opening_balance,
                description="Opening Balance",
                reference_type=ReferenceType.OTHER,
                reference_id=account.id,
                entered_by_id=actor_id
            )

        return account

    @staticmethod
    async def list_accounts(db: AsyncSession) -> List[LedgerAccount]:
        result = await db.execute(
            select(LedgerAccount)
            .where(LedgerAccount.active == True)
            .order_by(LedgerAccount.account_name)
        )
        return list(result.scalars().all())
