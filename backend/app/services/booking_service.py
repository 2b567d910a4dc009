"""
Booking service.

Books a customer against a plot and keeps the customer's deal ledger in step
with later deal-value changes. Everything here flushes; the endpoint commits.
"""

import logging
from datetime import datetime
from typing import Optional, List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backend.app.core.exceptions import ValidationError, DomainConstraintError, NotFoundError
from backend.app.models.customer import Customer, CustomerExecutiveShare
from backend.app.models.plot import Plot
from backend.app.models.project import Project
from backend.app.models.user import User
from backend.app.models.enums import COMMISSION_ROLES
from backend.app.models.ledger_enums import PartyType, ReferenceType, PlotStatus, CommissionTrigger
from backend.app.domain.ledger.posting_service import LedgerPostingService, round_money
from backend.app.domain.commission.commission_engine import CommissionEngine

logger = logging.getLogger("estate.booking")

IMMUTABLE_FIELDS = ("project_id", "plot_id")


async def require_executive(db: AsyncSession, executive_id: int) -> User:
    """Load a commission-earning user or raise NotFoundError."""
    executive = await db.get(User, executive_id)
    if not executive or executive.role not in COMMISSION_ROLES:
        raise NotFoundError("Executive", executive_id)
    return executive


async def build_shares(db: AsyncSession, shares: Optional[List[dict]]) -> List[CustomerExecutiveShare]:
    """
    Validate a customer-specific commission split.

    Each executive may appear once; percentages are positive and total at
    most 100.
    """
    if not shares:
        return []

    seen = set()
    total = 0.0
    built = []
    for share in shares:
        executive_id = share["executive_id"]
        percentage = share["percentage"]

        if executive_id in seen:
            raise ValidationError(f"Executive {executive_id} is listed more than once")
        if percentage is None or percentage <= 0:
            raise ValidationError("Share percentage must be greater than 0")

        await require_executive(db, executive_id)
        seen.add(executive_id)
        total += percentage
        built.append(CustomerExecutiveShare(executive_id=executive_id, percentage=percentage))

    if total > 100:
        raise ValidationError(f"Executive shares add up to {total:g}%, more than 100%")

    return built


class BookingService:

    @staticmethod
    async def get_customer(db: AsyncSession, customer_id: int) -> Customer:
        customer = await db.get(Customer, customer_id)
        if not customer or not customer.active:
            raise NotFoundError("Customer", customer_id)
        return customer

    @staticmethod
    async def create_customer(db: AsyncSession, data: dict, actor_id: int) -> Customer:
        """
        Book a customer against a plot.

        Flow:
        1. Plot must exist, belong to the project, and be neither sold nor
           assigned to another customer
        2. Deal value defaults to size x rate, then to the plot's value
        3. Create the customer, mark the plot sold
        4. Debit the deal value to the customer's ledger
        5. Accrue deal_closed commission

        Raises:
            NotFoundError: project, plot or executive missing
            ValidationError: plot outside the project, bad deal value or shares
            DomainConstraintError: plot already sold or assigned
        """
        project = await db.get(Project, data["project_id"])
        if not project or not project.active:
            raise NotFoundError("Project", data["project_id"])

        # Lock the plot so two bookings of the same plot serialize
        result = await db.execute(
            select(Plot).where(Plot.id == data["plot_id"]).with_for_update()
        )
        plot = result.scalar_one_or_none()
        if not plot:
            raise NotFoundError("Plot", data["plot_id"])
        if plot.project_id != project.id:
            raise ValidationError("Plot does not belong to the selected project")
        if plot.status == PlotStatus.SOLD:
            raise DomainConstraintError(f"Plot {plot.plot_number} is already sold")

        taken = await db.execute(
            select(Customer.id).where(Customer.plot_id == plot.id, Customer.active == True)
        )
        if taken.first() is not None:
            raise DomainConstraintError(f"Plot {plot.plot_number} is already assigned to a customer")

        size = data.get("size") or plot.size
        rate = data.get("rate") or plot.rate
        deal_value = data.get("deal_value")
        if deal_value is None:
            deal_value = size * rate if size and rate else plot.total_value
        deal_value = round_money(deal_value)
        if deal_value <= 0:
            raise ValidationError("Deal value must be greater than 0")

        executive_id = data.get("assigned_executive_id")
        if executive_id is not None:
            await require_executive(db, executive_id)

        shares = await build_shares(db, data.get("assigned_executives"))

        customer = Customer(
            name=data["name"],
            phone=data["phone"],
            address=data.get("address"),
            project_id=project.id,
            plot_id=plot.id,
            size=size,
            rate=rate,
            deal_value=deal_value,
            paid_amount=0,
            assigned_executive_id=executive_id,
            assigned_executives=shares,
            created_by_id=actor_id,
            booking_date=data.get("booking_date") or datetime.utcnow(),
            active=True
        )
        db.add(customer)
        plot.status = PlotStatus.SOLD
        await db.flush()

        await LedgerPostingService.post(
            db,
            party_type=PartyType.CUSTOMER,
            party_id=customer.id,
            debit=deal_value,
            description=f"Deal booked: {project.project_name} plot {plot.plot_number}",
            reference_type=ReferenceType.CUSTOMER,
            reference_id=customer.id,
            transaction_date=customer.booking_date,
            entered_by_id=actor_id
        )

        await CommissionEngine.process_commission(
            db,
            CommissionTrigger.DEAL_CLOSED,
            executive_id=executive_id,
            project_id=project.id,
            plot_id=plot.id,
            customer_id=customer.id,
            amount=deal_value
        )

        logger.info("Booked customer %s on plot %s for %.2f", customer.id, plot.plot_number, deal_value)
        return customer

    @staticmethod
    async def update_customer(db: AsyncSession, customer_id: int, data: dict, actor_id: int) -> Customer:
        """
        Update a booked customer.

        Project and plot are fixed once booked. A deal-value change (given
        directly, or through size / rate) is posted to the customer's ledger
        as an adjustment: a debit for an increase, a credit for a decrease.
        """
        result = await db.execute(
            select(Customer).where(Customer.id == customer_id).with_for_update()
        )
        customer = result.scalar_one_or_none()
        if not customer or not customer.active:
            raise NotFoundError("Customer", customer_id)

        for field in IMMUTABLE_FIELDS:
            if data.get(field) is not None and data[field] != getattr(customer, field):
                raise ValidationError("Project and plot cannot be changed after booking")

        for field in ("name", "phone", "address"):
            if data.get(field) is not None:
                setattr(customer, field, data[field])

        if "assigned_executive_id" in data:
            if data["assigned_executive_id"] is not None:
                await require_executive(db, data["assigned_executive_id"])
            customer.assigned_executive_id = data["assigned_executive_id"]

        if data.get("assigned_executives") is not None:
            customer.assigned_executives = await build_shares(db, data["assigned_executives"])

        size_or_rate_changed = False
        for field in ("size", "rate"):
            if data.get(field) is not None and data[field] != getattr(customer, field):
                setattr(customer, field, data[field])
                size_or_rate_changed = True

        new_deal_value = data.get("deal_value")
        if new_deal_value is None and size_or_rate_changed and customer.size and customer.rate:
            new_deal_value = customer.size * customer.rate

        if new_deal_value is not None:
            new_deal_value = round_money(new_deal_value)
            if new_deal_value <= 0:
                raise ValidationError("Deal value must be greater than 0")

            old_deal_value = customer.deal_value
            difference = round_money(new_deal_value - old_deal_value)
            if difference != 0:
                customer.deal_value = new_deal_value
                await LedgerPostingService.post(
                    db,
                    party_type=PartyType.CUSTOMER,
                    party_id=customer.id,
                    debit=difference if difference > 0 else None,
                    credit=-difference if difference < 0 else None,
                    description=f"Deal value adjusted from {old_deal_value:.2f} to {new_deal_value:.2f}",
                    reference_type=ReferenceType.ADJUSTMENT,
                    reference_id=customer.id,
                    entered_by_id=actor_id
                )
                logger.info("Customer %s deal value %.2f -> %.2f", customer.id, old_deal_value, new_deal_value)

        await db.flush()
        return customer
