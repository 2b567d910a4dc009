"""
Ledger Posting Service (Domain Logic).

Appends debit/credit rows to a party's running-balance ledger.

Every posting for a party first locks that party's PartyBalance row, so the
"read previous balance, insert next row" sequence cannot interleave with a
second writer for the same party. The live balance is moved by an atomic SQL
increment; the row's own `balance` is the snapshot at posting time.

Services here only flush. The caller commits, so a booking's customer update,
ledger row and commission rows land in one transaction.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from backend.app.core.exceptions import ValidationError, NotFoundError
from backend.app.models.ledger_entry import LedgerEntry
from backend.app.models.party_balance import PartyBalance
from backend.app.models.ledger_enums import PartyType, ReferenceType

logger = logging.getLogger("estate.ledger")


def round_money(value: float) -> float:
    return round(float(value or 0), 2)


def as_utc_naive(value: Optional[datetime]) -> datetime:
    """Ledger dates are stored as naive UTC so ordering is consistent."""
    if value is None:
        return datetime.utcnow()
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class LedgerPostingService:

    @staticmethod
    async def _lock_party(db: AsyncSession, party_type: PartyType, party_id: int) -> PartyBalance:
        """
        Fetch the party's balance row with a row lock, creating it on first use.
        """
        stmt = select(PartyBalance).where(
            PartyBalance.party_type == party_type,
            PartyBalance.party_id == party_id
        ).with_for_update()

        result = await db.execute(stmt)
        party_balance = result.scalar_one_or_none()

        if party_balance is None:
            # Unique (party_type, party_id) rejects a concurrent duplicate
            party_balance = PartyBalance(party_type=party_type, party_id=party_id, current_balance=0)
            db.add(party_balance)
            await db.flush()

        return party_balance

    @staticmethod
    async def _shift_balance(db: AsyncSession, party_balance: PartyBalance, delta: float) -> None:
        await db.execute(
            update(PartyBalance)
            .where(PartyBalance.id == party_balance.id)
            .values(current_balance=PartyBalance.current_balance + delta)
        )

    @staticmethod
    async def last_active_entry(
        db: AsyncSession,
        party_type: PartyType,
        party_id: int
    ) -> Optional[LedgerEntry]:
        """Most recent active row by transaction date, newest insert breaking ties."""
        result = await db.execute(
            select(LedgerEntry).where(
                LedgerEntry.party_type == party_type,
                LedgerEntry.party_id == party_id,
                LedgerEntry.active == True
            ).order_by(LedgerEntry.transaction_date.desc(), LedgerEntry.id.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def post(
        db: AsyncSession,
        party_type: PartyType,
        party_id: int,
        debit: Optional[float] = None,
        credit: Optional[float] = None,
        description: Optional[str] = None,
        reference_type: ReferenceType = ReferenceType.OTHER,
        reference_id: Optional[int] = None,
        transaction_date: Optional[datetime] = None,
        entered_by_id: Optional[int] = None
    ) -> LedgerEntry:
        """
        Append one row to a party's ledger.

        Flow:
        1. Validate amounts (at least one side non-zero, none negative)
        2. Lock the party's balance row
        3. previous = last active row's balance (0 for a new party)
        4. balance = previous + debit - credit
        5. Insert the row, move the live balance by debit - credit

        Raises:
            ValidationError: no amount supplied, or a negative amount
        """
        debit = round_money(debit)
        credit = round_money(credit)

        if debit < 0 or credit < 0:
            raise ValidationError("Debit and credit amounts cannot be negative")
        if debit == 0 and credit == 0:
            raise ValidationError("Please provide credit or debit amount")

        party_type = PartyType(party_type)
        party_balance = await LedgerPostingService._lock_party(db, party_type, party_id)

        last_entry = await LedgerPostingService.last_active_entry(db, party_type, party_id)
        previous_balance = last_entry.balance if last_entry else 0

        entry = LedgerEntry(
            party_type=party_type,
            party_id=party_id,
            debit=debit,
            credit=credit,
            balance=round_money(previous_balance + debit - credit),
            description=description,
            reference_type=reference_type,
            reference_id=reference_id,
            transaction_date=as_utc_naive(transaction_date),
            entered_by_id=entered_by_id,
            active=True
        )
        db.add(entry)
        await LedgerPostingService._shift_balance(db, party_balance, debit - credit)
        await db.flush()

        logger.info(
            "Posted ledger row %s for %s:%s dr=%.2f cr=%.2f balance=%.2f",
            entry.id, party_type.value, party_id, debit, credit, entry.balance
        )
        return entry

    @staticmethod
    async def _retire(db: AsyncSession, entry: LedgerEntry) -> None:
        party_balance = await LedgerPostingService._lock_party(db, entry.party_type, entry.party_id)
        entry.active = False
        await LedgerPostingService._shift_balance(db, party_balance, -(entry.debit - entry.credit))

    @staticmethod
    async def deactivate(db: AsyncSession, entry_id: int) -> LedgerEntry:
        """
        Soft-delete a ledger row.

        Later rows keep their snapshot balances; only the live party balance
        is corrected.

        Raises:
            NotFoundError: no such row
            ValidationError: row already inactive
        """
        entry = await db.get(LedgerEntry, entry_id)
        if not entry:
            raise NotFoundError("Ledger entry", entry_id)
        if not entry.active:
            raise ValidationError("Ledger entry is already inactive")

        await LedgerPostingService._retire(db, entry)
        await db.flush()

        logger.info("Deactivated ledger row %s for %s:%s", entry.id, entry.party_type.value, entry.party_id)
        return entry

    @staticmethod
    async def deactivate_by_reference(
        db: AsyncSession,
        reference_id: int,
        reference_type: ReferenceType
    ) -> List[LedgerEntry]:
        """Soft-delete every active row posted for one reference."""
        result = await db.execute(
            select(LedgerEntry).where(
                LedgerEntry.reference_id == reference_id,
                LedgerEntry.reference_type == reference_type,
                LedgerEntry.active == True
            ).order_by(LedgerEntry.id)
        )
        entries = result.scalars().all()

        for entry in entries:
            await LedgerPostingService._retire(db, entry)
        await db.flush()

        return list(entries)

    @staticmethod
    async def current_balance(db: AsyncSession, party_type: PartyType, party_id: int) -> float:
        """
        Live balance over active rows; 0 for a party that never posted.

        After a soft delete this differs from the `balance` snapshot on the
        last row, and rows posted later keep building on that snapshot.
        """
        result = await db.execute(
            select(PartyBalance.current_balance).where(
                PartyBalance.party_type == party_type,
                PartyBalance.party_id == party_id
            )
        )
        balance = result.scalar_one_or_none()
        return round_money(balance)

    @staticmethod
    async def party_statement(db: AsyncSession, party_type: PartyType, party_id: int) -> dict:
        """
        Active rows for a party in ledger order, with debit/credit totals.

        `current_balance` is the live figure (debits less credits over active
        rows). `snapshot_balance` is the `balance` stored on the last active
        row; the two differ once an earlier row has been soft-deleted.

        Returns:
            {"entries": [...], "totals": {"total_debit", "total_credit",
             "current_balance", "snapshot_balance"}}
        """
        result = await db.execute(
            select(LedgerEntry).where(
                LedgerEntry.party_type == party_type,
                LedgerEntry.party_id == party_id,
                LedgerEntry.active == True
            ).order_by(LedgerEntry.transaction_date.asc(), LedgerEntry.id.asc())
        )
        entries = result.scalars().all()

        total_debit = round_money(sum(e.debit for e in entries))
        total_credit = round_money(sum(e.credit for e in entries))

        return {
            "entries": list(entries),
            "totals": {
                "total_debit": total_debit,
                "total_credit": total_credit,
                "current_balance": round_money(total_debit - total_credit),
                "snapshot_balance": round_money(entries[-1].balance if entries else 0),
            }
        }
