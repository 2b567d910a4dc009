"""
Payment service.

Receipts and refunds against a booked customer, cash-book entries against a
ledger account, their reversal, and transaction history.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from backend.app.core.exceptions import ValidationError, DomainConstraintError, NotFoundError
from backend.app.models.customer import Customer
from backend.app.models.project import Project
from backend.app.models.transaction import Transaction
from backend.app.models.ledger_enums import (
    PartyType, ReferenceType, EntryType, PaymentMode, CommissionTrigger
)
from backend.app.domain.ledger.posting_service import LedgerPostingService, round_money, as_utc_naive
from backend.app.domain.ledger.parties import get_party, parse_party_type
from backend.app.domain.commission.commission_engine import CommissionEngine

logger = logging.getLogger("estate.payments")

TRANSACTION_ACCOUNTS = (PartyType.CUSTOMER, PartyType.LEDGER_ACCOUNT)


async def _lock_customer(db: AsyncSession, customer_id: int) -> Customer:
    result = await db.execute(
        select(Customer).where(Customer.id == customer_id).with_for_update()
    )
    customer = result.scalar_one_or_none()
    if not customer or not customer.active:
        raise NotFoundError("Customer", customer_id)
    return customer


def _describe(entry_type: EntryType, payment_mode: PaymentMode, label: Optional[str]) -> str:
    description = f"{entry_type.value} by {payment_mode.value.upper()}"
    return f"{description}: {label}" if label else description


def _account_type(value) -> PartyType:
    account_type = parse_party_type(value or PartyType.CUSTOMER)
    if account_type not in TRANSACTION_ACCOUNTS:
        raise ValidationError("Transactions can only be recorded for a customer or a ledger account")
    return account_type


def _net_paid(transactions) -> float:
    return round_money(sum(
        t.amount if t.entry_type == EntryType.RECEIPT else -t.amount for t in transactions
    ))


class PaymentService:

    @staticmethod
    async def record_payment(db: AsyncSession, data: dict, actor_id: int) -> Transaction:
        """
        Record a receipt or payment against a customer or a ledger account.

        For a customer, a Receipt raises paid_amount and is credited to the
        customer's ledger; a Payment (refund) lowers it and is debited.
        Receipts accrue payment_received commission with the payment mode, so
        non-cash receipts carry TDS. Ledger-account entries only post to that
        account's ledger.

        Raises:
            ValidationError: non-positive amount, unsupported account type, no account id
            NotFoundError: customer, ledger account or project missing
            DomainConstraintError: refund larger than what the customer paid
        """
        amount = round_money(data.get("amount"))
        if amount <= 0:
            raise ValidationError("Amount must be greater than 0")

        account_type = _account_type(data.get("account_type"))
        entry_type = EntryType(data.get("entry_type") or EntryType.RECEIPT)
        payment_mode = PaymentMode(data["payment_mode"])

        if account_type == PartyType.LEDGER_ACCOUNT:
            return await PaymentService._record_cash_book(db, data, amount, entry_type, payment_mode, actor_id)

        if not data.get("customer_id"):
            raise ValidationError("Please select a customer")
        customer = await _lock_customer(db, data["customer_id"])

        if entry_type == EntryType.RECEIPT:
            customer.paid_amount = round_money(customer.paid_amount + amount)
        else:
            if amount > customer.paid_amount:
                raise DomainConstraintError(
                    f"Refund exceeds amount paid of {customer.paid_amount:.2f}",
                    details={"paid_amount": customer.paid_amount, "requested": amount}
                )
            customer.paid_amount = round_money(customer.paid_amount - amount)

        transaction_date = as_utc_naive(data.get("transaction_date"))

        transaction = Transaction(
            account_type=PartyType.CUSTOMER,
            customer_id=customer.id,
            project_id=customer.project_id,
            entry_type=entry_type,
            transaction_type=data.get("transaction_type"),
            amount=amount,
            payment_mode=payment_mode,
            transaction_date=transaction_date,
            receipt_number=data.get("receipt_number"),
            reference_number=data.get("reference_number"),
            bank_name=data.get("bank_name"),
            balance_at_time=customer.balance_amount,
            narration=data.get("narration"),
            remarks=data.get("remarks"),
            entered_by_id=actor_id,
            active=True
        )
        db.add(transaction)
        await db.flush()

        is_receipt = entry_type == EntryType.RECEIPT
        await LedgerPostingService.post(
            db,
            party_type=PartyType.CUSTOMER,
            party_id=customer.id,
            debit=None if is_receipt else amount,
            credit=amount if is_receipt else None,
            description=_describe(entry_type, payment_mode, data.get("narration") or data.get("transaction_type")),
            reference_type=ReferenceType.TRANSACTION,
            reference_id=transaction.id,
            transaction_date=transaction_date,
            entered_by_id=actor_id
        )

        if is_receipt:
            await CommissionEngine.process_commission(
                db,
                CommissionTrigger.PAYMENT_RECEIVED,
                executive_id=customer.assigned_executive_id,
                project_id=customer.project_id,
                plot_id=customer.plot_id,
                customer_id=customer.id,
                amount=amount,
                transaction_id=transaction.id,
                payment_mode=payment_mode
            )

        logger.info(
            "%s %s of %.2f for customer %s, balance now %.2f",
            entry_type.value, transaction.id, amount, customer.id, customer.balance_amount
        )
        return transaction

    @staticmethod
    async def _record_cash_book(
        db: AsyncSession,
        data: dict,
        amount: float,
        entry_type: EntryType,
        payment_mode: PaymentMode,
        actor_id: int
    ) -> Transaction:
        """Post a receipt or payment straight to a ledger account. No commission."""
        if not data.get("ledger_account_id"):
            raise ValidationError("Please select a ledger account")
        account = await get_party(db, PartyType.LEDGER_ACCOUNT, data["ledger_account_id"])

        project_id = data.get("project_id")
        if project_id and not await db.get(Project, project_id):
            raise NotFoundError("Project", project_id)

        transaction_date = as_utc_naive(data.get("transaction_date"))

        transaction = Transaction(
            account_type=PartyType.LEDGER_ACCOUNT,
            ledger_account_id=account.id,
            project_id=project_id,
            entry_type=entry_type,
            transaction_type=data.get("transaction_type"),
            amount=amount,
            payment_mode=payment_mode,
            transaction_date=transaction_date,
            receipt_number=data.get("receipt_number"),
            reference_number=data.get("reference_number"),
            bank_name=data.get("bank_name"),
            narration=data.get("narration"),
            remarks=data.get("remarks"),
            entered_by_id=actor_id,
            active=True
        )
        db.add(transaction)
        await db.flush()

        is_receipt = entry_type == EntryType.RECEIPT
        entry = await LedgerPostingService.post(
            db,
            party_type=PartyType.LEDGER_ACCOUNT,
            party_id=account.id,
            debit=None if is_receipt else amount,
            credit=amount if is_receipt else None,
            description=_describe(entry_type, payment_mode, data.get("narration") or data.get("transaction_type")),
            reference_type=ReferenceType.TRANSACTION,
            reference_id=transaction.id,
            transaction_date=transaction_date,
            entered_by_id=actor_id
        )
        transaction.balance_at_time = entry.balance
        await db.flush()

        logger.info(
            "%s %s of %.2f on ledger account %s, balance now %.2f",
            entry_type.value, transaction.id, amount, account.id, entry.balance
        )
        return transaction

    @staticmethod
    async def deactivate_transaction(db: AsyncSession, transaction_id: int) -> Transaction:
        """
        Reverse a receipt or payment.

        A customer's paid amount is restored; for any account the
        transaction's ledger row is retired, which moves the live ledger
        balance back. Commission already accrued on a receipt is left as it is.
        """
        transaction = await db.get(Transaction, transaction_id)
        if not transaction:
            raise NotFoundError("Transaction", transaction_id)
        if not transaction.active:
            raise ValidationError("Transaction is already deactivated")

        if transaction.account_type == PartyType.CUSTOMER:
            customer = await _lock_customer(db, transaction.customer_id)
            if transaction.entry_type == EntryType.RECEIPT:
                customer.paid_amount = round_money(customer.paid_amount - transaction.amount)
            else:
                customer.paid_amount = round_money(customer.paid_amount + transaction.amount)

        transaction.active = False
        await LedgerPostingService.deactivate_by_reference(db, transaction.id, ReferenceType.TRANSACTION)

        logger.info("Reversed transaction %s (%s)", transaction.id, transaction.account_type.value)
        return transaction

    @staticmethod
    async def list_transactions(
        db: AsyncSession,
        payment_mode: Optional[PaymentMode] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        active: bool = True
    ) -> dict:
        """
        Transactions newest first, with per-payment-mode totals over the
        active transactions that match the same mode and date filters.
        """
        filters = []
        if payment_mode:
            filters.append(Transaction.payment_mode == PaymentMode(payment_mode))
        if start_date:
            filters.append(Transaction.transaction_date >= as_utc_naive(start_date))
        if end_date:
            filters.append(Transaction.transaction_date <= as_utc_naive(end_date))

        result = await db.execute(
            select(Transaction)
            .where(Transaction.active == active, *filters)
            .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
        )
        transactions = result.scalars().all()

        totals_result = await db.execute(
            select(Transaction.payment_mode, func.sum(Transaction.amount), func.count(Transaction.id))
            .where(Transaction.active == True, *filters)
            .group_by(Transaction.payment_mode)
            .order_by(Transaction.payment_mode)
        )
        totals = [
            {"payment_mode": mode, "total": round_money(total), "count": count}
            for mode, total, count in totals_result.all()
        ]

        return {"count": len(transactions), "totals": totals, "transactions": list(transactions)}

    @staticmethod
    async def account_transactions(db: AsyncSession, account_type: PartyType, account_id: int) -> dict:
        """
        Active transactions of one customer or ledger account, oldest first.

        Each row carries its balance_at_time snapshot. total_paid is receipts
        less refunds.

        Raises:
            ValidationError: unsupported account type
            NotFoundError: no such customer / ledger account
        """
        account_type = _account_type(account_type)
        account = await get_party(db, account_type, account_id)

        owner_column = Transaction.customer_id if account_type == PartyType.CUSTOMER else Transaction.ledger_account_id
        result = await db.execute(
            select(Transaction).where(
                Transaction.account_type == account_type,
                owner_column == account_id,
                Transaction.active == True
            ).order_by(Transaction.transaction_date.asc(), Transaction.id.asc())
        )
        transactions = result.scalars().all()
        total_paid = _net_paid(transactions)

        if account_type == PartyType.CUSTOMER:
            summary = {
                "id": account.id,
                "account_type": account_type,
                "name": account.name,
                "phone": account.phone,
                "deal_value": account.deal_value,
                "paid_amount": account.paid_amount,
                "balance_amount": account.balance_amount,
            }
        else:
            summary = {
                "id": account.id,
                "account_type": account_type,
                "name": account.account_name,
                "paid_amount": total_paid,
                "balance_amount": await LedgerPostingService.current_balance(db, account_type, account.id),
            }

        return {
            "account": summary,
            "count": len(transactions),
            "total_paid": total_paid,
            "transactions": list(transactions),
        }
