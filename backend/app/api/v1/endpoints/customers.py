"""
Customer booking endpoints.

Bookings post the deal to the customer's ledger and accrue deal_closed
commission inside the same request transaction.
"""

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.schemas.customer import CustomerCreate, CustomerUpdate, CustomerResponse
from backend.app.schemas.transaction import AccountTransactionsResponse
from backend.app.models.ledger_enums import PartyType
from backend.app.core.dependencies import get_current_user
from backend.app.services.booking_service import BookingService
from backend.app.services.payment_service import PaymentService
from backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.post("", response_model=CustomerResponse, status_code=201)
async def create_customer(
    data: CustomerCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    customer = await BookingService.create_customer(db, data.model_dump(), current_user["user_id"])

    await log_event(
        db=db,
        action=AuditAction.CUSTOMER_BOOKED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity_type="customer",
        entity_id=customer.id,
        metadata={"plot_id": customer.plot_id, "deal_value": customer.deal_value}
    )
    await db.commit()

    return customer


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    data: CustomerUpdate,
    customer_id: int = Path(..., description="Customer ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    customer = await BookingService.update_customer(
        db, customer_id, data.model_dump(exclude_unset=True), current_user["user_id"]
    )

    await log_event(
        db=db,
        action=AuditAction.CUSTOMER_UPDATED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity_type="customer",
        entity_id=customer.id,
        metadata={"fields": sorted(data.model_dump(exclude_unset=True))}
    )
    await db.commit()

    return customer


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: int = Path(..., description="Customer ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await BookingService.get_customer(db, customer_id)


@router.get("/{customer_id}/transactions", response_model=AccountTransactionsResponse)
async def get_customer_transactions(
    customer_id: int = Path(..., description="Customer ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Payment history of a customer, oldest first, each row with the balance
    left after it.
    """
    return await PaymentService.account_transactions(db, PartyType.CUSTOMER, customer_id)
