"""
Journal Voucher Poster (Domain Logic).

A JV debits one party and credits another for the same amount. The voucher
row and both ledger rows are written in one database transaction: either all
three are committed or none is.
"""

import logging
from datetime import datetime
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from backend.app.core.config import settings
from backend.app.core.exceptions import ValidationError, TransactionAbortError, NotFoundError
from backend.app.models.journal_voucher import JournalVoucher
from backend.app.models.number_sequence import NumberSequence
from backend.app.models.ledger_enums import ReferenceType
from backend.app.domain.ledger.posting_service import LedgerPostingService, round_money, as_utc_naive
from backend.app.domain.ledger.parties import get_party, party_display_name, parse_party_type

logger = logging.getLogger("estate.journal")

JV_SEQUENCE = "journal_voucher"


class JournalVoucherPoster:

    @staticmethod
    async def next_jv_number(db: AsyncSession) -> str:
        """
        Next voucher number, JV-<base + n>.

        The counter is bumped with an atomic UPDATE inside the caller's
        transaction, so a rolled-back voucher does not consume a number.
        """
        result = await db.execute(
            update(NumberSequence)
            .where(NumberSequence.name == JV_SEQUENCE)
            .values(value=NumberSequence.value + 1)
        )

        if result.rowcount == 0:
            db.add(NumberSequence(name=JV_SEQUENCE, value=1))
            await db.flush()
            value = 1
        else:
            value = (await db.execute(
                select(NumberSequence.value).where(NumberSequence.name == JV_SEQUENCE)
            )).scalar_one()

        return f"JV-{settings.jv_number_base + value}"

    @staticmethod
    def _validate_account(account: Optional[dict]) -> dict:
        if not account or account.get("party_type") is None or account.get("party_id") is None:
            raise ValidationError("Please provide debit account, credit account and amount")
        return {
            "party_type": parse_party_type(account["party_type"]),
            "party_id": account["party_id"],
            "account_name": account.get("account_name"),
        }

    @staticmethod
    async def create_jv(
        db: AsyncSession,
        debit_account: dict,
        credit_account: dict,
        amount: float,
        actor_id: int,
        narration: Optional[str] = None,
        branch: Optional[str] = None,
        transaction_date: Optional[datetime] = None
    ) -> JournalVoucher:
        """
        Create a journal voucher and its two ledger rows atomically.

        Flow:
        1. Validate accounts and amount (a zero amount is rejected)
        2. Resolve both parties (404 if either is missing)
        3. In one transaction: voucher number, voucher row,
           debit row (prev + amount), credit row (prev - amount)
        4. Commit, or roll back everything

        Raises:
            ValidationError: missing account fields or non-positive amount
            NotFoundError: a referenced party does not exist
            TransactionAbortError: any write failed; nothing was committed
        """
        debit = JournalVoucherPoster._validate_account(debit_account)
        credit = JournalVoucherPoster._validate_account(credit_account)
        amount = round_money(amount)
        if not amount:
            raise ValidationError("Please provide debit account, credit account and amount")
        if amount < 0:
            raise ValidationError("Amount must be positive")

        for side in (debit, credit):
            party = await get_party(db, side["party_type"], side["party_id"])
            side["account_name"] = side["account_name"] or party_display_name(party)

        posted_on = as_utc_naive(transaction_date)

        try:
            jv_number = await JournalVoucherPoster.next_jv_number(db)

            jv = JournalVoucher(
                jv_number=jv_number,
                branch=branch or settings.default_branch,
                transaction_date=posted_on,
                narration=narration,
                debit_party_type=debit["party_type"],
                debit_party_id=debit["party_id"],
                debit_account_name=debit["account_name"],
                credit_party_type=credit["party_type"],
                credit_party_id=credit["party_id"],
                credit_account_name=credit["account_name"],
                amount=amount,
                entered_by_id=actor_id,
                active=True
            )
            db.add(jv)
            await db.flush()

            description = f"JV Entry: {jv_number} - {narration}" if narration else f"JV Entry: {jv_number}"

            await LedgerPostingService.post(
                db,
                party_type=debit["party_type"],
                party_id=debit["party_id"],
                debit=amount,
                description=description,
                reference_type=ReferenceType.JOURNAL_VOUCHER,
                reference_id=jv.id,
                transaction_date=posted_on,
                entered_by_id=actor_id
            )
            await LedgerPostingService.post(
                db,
                party_type=credit["party_type"],
                party_id=credit["party_id"],
                credit=amount,
                description=description,
                reference_type=ReferenceType.JOURNAL_VOUCHER,
                reference_id=jv.id,
                transaction_date=posted_on,
                entered_by_id=actor_id
            )

            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.warning("Journal voucher rolled back: %s", e)
            raise TransactionAbortError(str(e)) from e

        logger.info("Posted %s: %.2f %s:%s -> %s:%s", jv.jv_number, amount,
                    debit["party_type"].value, debit["party_id"],
                    credit["party_type"].value, credit["party_id"])
        return jv

    @staticmethod
    async def list_jvs(db: AsyncSession) -> List[JournalVoucher]:
        """Active vouchers, newest first."""
        result = await db.execute(
            select(JournalVoucher)
            .where(JournalVoucher.active == True)
            .order_by(JournalVoucher.transaction_date.desc(), JournalVoucher.id.desc())
        )
        return list(result.scalars().all())

    @staticmethod
    async def deactivate_jv(db: AsyncSession, jv_id: int) -> JournalVoucher:
        """
        Soft-delete a voucher together with both of its ledger rows. Caller commits.
        """
        jv = await db.get(JournalVoucher, jv_id)
        if not jv:
            raise NotFoundError("Journal voucher", jv_id)
        if not jv.active:
            raise ValidationError("JV is already inactive")

        jv.active = False
        await LedgerPostingService.deactivate_by_reference(db, jv.id, ReferenceType.JOURNAL_VOUCHER)
        return jv
