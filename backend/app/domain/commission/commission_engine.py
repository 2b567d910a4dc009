"""
Commission Engine (Domain Logic).

Accrues executive commissions on booking/payment events and pays them out.

Accrual:
    one EARNED row per matching rule, or per customer-specific share.
Payout:
    oldest EARNED rows first; a row that is only partly covered is shrunk to
    the covered amount and marked PAID, and its leftover is cloned into a new
    EARNED row with the original generated_at. Earned + paid totals never
    change; money is only reclassified.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from backend.app.core.config import settings
from backend.app.core.exceptions import ValidationError, DomainConstraintError, NotFoundError
from backend.app.models.commission_rule import CommissionRule
from backend.app.models.commission_ledger import CommissionLedgerEntry
from backend.app.models.customer import Customer, CustomerExecutiveShare
from backend.app.models.project import Project
from backend.app.models.user import User
from backend.app.models.enums import COMMISSION_ROLES
from backend.app.models.ledger_enums import (
    CommissionTrigger, CommissionType, CommissionBasis, CommissionStatus, PaymentMode
)
from backend.app.domain.commission.rule_resolver import CommissionRuleResolver
from backend.app.domain.ledger.posting_service import round_money

logger = logging.getLogger("estate.commission")

PAID_NOTE = " (Paid via standard payout)"
PARTIAL_NOTE = " (Partially Paid)"
REMAINDER_NOTE = " (Remaining Balance)"

# Basis each trigger is measured on
TRIGGER_BASIS = {
    CommissionTrigger.DEAL_CLOSED: CommissionBasis.FULL_DEAL_VALUE,
    CommissionTrigger.PAYMENT_RECEIVED: CommissionBasis.RECEIVED_AMOUNT,
}


class CommissionEngine:

    @staticmethod
    def calculate_amount(rule: CommissionRule, basis_amount: float) -> float:
        """Percentage of the basis, or the rule's flat value."""
        if rule.type == CommissionType.PERCENTAGE:
            return round_money(basis_amount * rule.value / 100)
        return round_money(rule.value)

    @staticmethod
    def apply_withholding(
        amount: float,
        description: str,
        payment_mode: Optional[str]
    ) -> Tuple[float, str]:
        """
        Deduct TDS from commissions on non-cash receipts.
        """
        if not payment_mode:
            return amount, description
        if not isinstance(payment_mode, PaymentMode):
            payment_mode = PaymentMode(str(payment_mode).lower())
        if payment_mode == PaymentMode.CASH:
            return amount, description

        rate = settings.commission_tds_rate
        tds = round_money(amount * rate / 100)
        return round_money(amount - tds), f"{description} [Less {rate:g}% TDS: {tds:.2f}]"

    @staticmethod
    async def process_commission(
        db: AsyncSession,
        trigger_event: CommissionTrigger,
        executive_id: Optional[int] = None,
        project_id: Optional[int] = None,
        plot_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        amount: float = 0,
        transaction_id: Optional[int] = None,
        payment_mode: Optional[str] = None
    ) -> List[CommissionLedgerEntry]:
        """
        Accrue commission for one trigger event.

        Flow:
        1. Customer-specific shares, if the customer has any, replace rules
        2. Otherwise resolve active rules for the executive's role and trigger
        3. basis = customer's deal value (full_deal_value) or `amount` (received_amount)
        4. Percentage or fixed amount, less withholding on non-cash receipts
        5. Append one EARNED row per share / rule

        A missing executive or no matching rule is a silent no-op.

        Returns:
            The EARNED rows created (possibly empty)
        """
        trigger_event = CommissionTrigger(trigger_event)
        customer = await db.get(Customer, customer_id) if customer_id else None
        created: List[CommissionLedgerEntry] = []

        if customer is not None:
            shares_result = await db.execute(
                select(CustomerExecutiveShare)
                .where(CustomerExecutiveShare.customer_id == customer.id)
                .order_by(CustomerExecutiveShare.id)
            )
            shares = shares_result.scalars().all()

            if shares:
                for share in shares:
                    commission = round_money(amount * (share.percentage or 0) / 100)
                    if commission <= 0:
                        continue
                    commission, description = CommissionEngine.apply_withholding(
                        commission,
                        f"Customer Specific Commission ({share.percentage:g}%)",
                        payment_mode
                    )
                    created.append(CommissionLedgerEntry(
                        executive_id=share.executive_id,
                        customer_id=customer.id,
                        amount=commission,
                        status=CommissionStatus.EARNED,
                        reference_transaction_id=transaction_id,
                        description=description,
                        generated_at=datetime.utcnow()
                    ))
                return await CommissionEngine._persist_accruals(db, created, trigger_event)

        if not executive_id:
            return created

        executive = await db.get(User, executive_id)
        if not executive or executive.role not in COMMISSION_ROLES:
            return created

        if project_id is None and customer is not None:
            project_id = customer.project_id

        rules = await CommissionRuleResolver.resolve_applicable_rules(
            db, executive.role, trigger_event, project_id
        )

        for rule in rules:
            if rule.basis != TRIGGER_BASIS[trigger_event]:
                continue

            if rule.basis == CommissionBasis.FULL_DEAL_VALUE and customer is not None:
                basis_amount = customer.deal_value
            else:
                basis_amount = amount

            commission = CommissionEngine.calculate_amount(rule, basis_amount)
            if commission <= 0:
                continue

            commission, description = CommissionEngine.apply_withholding(
                commission,
                f"Commission for {rule.name} ({rule.type.value}: {rule.value:g})",
                payment_mode
            )
            created.append(CommissionLedgerEntry(
                executive_id=executive.id,
                commission_rule_id=rule.id,
                customer_id=customer.id if customer is not None else None,
                amount=commission,
                status=CommissionStatus.EARNED,
                reference_transaction_id=transaction_id,
                description=description,
                generated_at=datetime.utcnow()
            ))

        return await CommissionEngine._persist_accruals(db, created, trigger_event)

    @staticmethod
    async def _persist_accruals(
        db: AsyncSession,
        entries: List[CommissionLedgerEntry],
        trigger_event: CommissionTrigger
    ) -> List[CommissionLedgerEntry]:
        if not entries:
            return entries
        db.add_all(entries)
        await db.flush()
        for entry in entries:
            logger.info(
                "Accrued commission %s for executive %s: %.2f on %s",
                entry.id, entry.executive_id, entry.amount, trigger_event.value
            )
        return entries

    @staticmethod
    async def pending_balance(db: AsyncSession, executive_id: int) -> float:
        """Sum of the executive's EARNED rows."""
        result = await db.execute(
            select(func.coalesce(func.sum(CommissionLedgerEntry.amount), 0)).where(
                CommissionLedgerEntry.executive_id == executive_id,
                CommissionLedgerEntry.status == CommissionStatus.EARNED
            )
        )
        return round_money(result.scalar())

    @staticmethod
    async def pay(
        db: AsyncSession,
        executive_id: int,
        amount: float,
        remarks: Optional[str] = None
    ) -> List[int]:
        """
        Pay `amount` against the executive's EARNED rows, oldest first.

        Runs as a single transaction: committed on success, rolled back on
        any failure.

        Raises:
            ValidationError: amount is not positive
            NotFoundError: executive does not exist
            DomainConstraintError: amount exceeds the pending balance

        Returns:
            IDs of the rows marked PAID (the shrunk row included on a split)
        """
        try:
            amount = round_money(amount)
            if amount <= 0:
                raise ValidationError("Invalid payment amount")

            executive = await db.get(User, executive_id)
            if not executive:
                raise NotFoundError("Executive", executive_id)

            result = await db.execute(
                select(CommissionLedgerEntry).where(
                    CommissionLedgerEntry.executive_id == executive_id,
                    CommissionLedgerEntry.status == CommissionStatus.EARNED
                ).order_by(CommissionLedgerEntry.generated_at.asc(), CommissionLedgerEntry.id.asc())
                .with_for_update()
            )
            unpaid = result.scalars().all()

            total_unpaid = round_money(sum(entry.amount for entry in unpaid))
            if amount > total_unpaid:
                raise DomainConstraintError(
                    f"Amount exceeds pending balance of {total_unpaid:.2f}",
                    details={"pending_balance": total_unpaid, "requested": amount}
                )

            paid_at = datetime.utcnow()
            note = f" - {remarks}" if remarks else ""
            remaining = amount
            paid_ids: List[int] = []

            for entry in unpaid:
                if remaining <= 0:
                    break

                if entry.amount <= remaining:
                    entry.status = CommissionStatus.PAID
                    entry.paid_at = paid_at
                    entry.description = f"{entry.description}{PAID_NOTE}{note}"
                    remaining = round_money(remaining - entry.amount)
                    paid_ids.append(entry.id)
                    continue

                # Split: this row keeps the paid part, a sibling keeps the rest
                leftover = round_money(entry.amount - remaining)
                base_description = entry.description
                if base_description.endswith(REMAINDER_NOTE):
                    base_description = base_description[: -len(REMAINDER_NOTE)]

                entry.amount = remaining
                entry.status = CommissionStatus.PAID
                entry.paid_at = paid_at
                entry.description = f"{base_description}{PARTIAL_NOTE}{note}"

                db.add(CommissionLedgerEntry(
                    executive_id=entry.executive_id,
                    commission_rule_id=entry.commission_rule_id,
                    customer_id=entry.customer_id,
                    amount=leftover,
                    status=CommissionStatus.EARNED,
                    reference_transaction_id=entry.reference_transaction_id,
                    description=f"{base_description}{REMAINDER_NOTE}",
                    generated_at=entry.generated_at
                ))
                paid_ids.append(entry.id)
                remaining = 0

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("Paid %.2f to executive %s across rows %s", amount, executive_id, paid_ids)
        return paid_ids

    @staticmethod
    async def executive_ledger(db: AsyncSession, executive_id: int) -> dict:
        """
        All commission rows of an executive, newest first, with totals.

        balance is what is still owed (the EARNED total).
        """
        executive = await db.get(User, executive_id)
        if not executive:
            raise NotFoundError("Executive", executive_id)

        result = await db.execute(
            select(CommissionLedgerEntry)
            .where(CommissionLedgerEntry.executive_id == executive_id)
            .order_by(CommissionLedgerEntry.generated_at.desc(), CommissionLedgerEntry.id.desc())
        )
        entries = result.scalars().all()

        total_earned = round_money(sum(e.amount for e in entries if e.status == CommissionStatus.EARNED))
        total_paid = round_money(sum(e.amount for e in entries if e.status == CommissionStatus.PAID))

        return {
            "summary": {
                "total_earned": total_earned,
                "total_paid": total_paid,
                "balance": total_earned,
            },
            "entries": list(entries),
        }

    # --- Rule management ---

    @staticmethod
    async def create_rule(db: AsyncSession, **fields) -> CommissionRule:
        """
        Create a commission rule. Caller commits.

        Raises:
            ValidationError: rule targets a role that earns no commission, or its
                basis does not fit its trigger
            DomainConstraintError: rule name already taken
            NotFoundError: scoped to a missing project
        """
        if fields.get("applies_to_role") not in COMMISSION_ROLES:
            raise ValidationError("Commission rules apply only to EXECUTIVE or HEAD_EXECUTIVE")

        trigger = CommissionTrigger(fields.get("trigger_event") or CommissionTrigger.DEAL_CLOSED)
        expected_basis = TRIGGER_BASIS[trigger]
        if fields.get("basis") is None:
            fields["basis"] = expected_basis
        elif CommissionBasis(fields["basis"]) != expected_basis:
            raise ValidationError(
                f"A {trigger.value} rule must use the {expected_basis.value} basis"
            )
        fields["trigger_event"] = trigger

        existing = await db.execute(
            select(CommissionRule.id).where(CommissionRule.name == fields["name"])
        )
        if existing.scalar_one_or_none() is not None:
            raise DomainConstraintError(f"Commission rule '{fields['name']}' already exists")

        project_id = fields.get("project_id")
        if project_id is not None and not await db.get(Project, project_id):
            raise NotFoundError("Project", project_id)

        rule = CommissionRule(active=True, **fields)
        db.add(rule)
        await db.flush()
        return rule

    @staticmethod
    async def list_rules(db: AsyncSession) -> List[CommissionRule]:
        result = await db.execute(select(CommissionRule).order_by(CommissionRule.created_at.desc(), CommissionRule.id.desc()))
        return list(result.scalars().all())

    @staticmethod
    async def retire_rule(db: AsyncSession, rule_id: int) -> str:
        """
        Delete an unused rule; deactivate one that already produced accruals.

        Returns:
            "deleted" or "deactivated"
        """
        rule = await db.get(CommissionRule, rule_id)
        if not rule:
            raise NotFoundError("Commission rule", rule_id)

        used = await db.execute(
            select(func.count(CommissionLedgerEntry.id)).where(
                CommissionLedgerEntry.commission_rule_id == rule_id
            )
        )
        if used.scalar():
            rule.active = False
            await db.flush()
            return "deactivated"

        await db.delete(rule)
        await db.flush()
        return "deleted"
