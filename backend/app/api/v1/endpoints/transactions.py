"""
Receipt / refund endpoints, for customers and ledger-account cash books.
"""

from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.models.ledger_enums import PaymentMode
from backend.app.schemas.transaction import TransactionCreate, TransactionResponse, TransactionListResponse
from backend.app.core.dependencies import get_current_user
from backend.app.services.payment_service import PaymentService
from backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.post("", response_model=TransactionResponse, status_code=201)
async def record_transaction(
    data: TransactionCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    transaction = await PaymentService.record_payment(db, data.model_dump(), current_user["user_id"])

    await log_event(
        db=db,
        action=AuditAction.TRANSACTION_RECORDED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity_type="transaction",
        entity_id=transaction.id,
        metadata={
            "account_type": transaction.account_type.value,
            "customer_id": transaction.customer_id,
            "ledger_account_id": transaction.ledger_account_id,
            "entry_type": transaction.entry_type.value,
            "amount": transaction.amount
        }
    )
    await db.commit()

    return transaction


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    payment_mode: Optional[PaymentMode] = Query(None, description="Filter by payment mode"),
    start_date: Optional[datetime] = Query(None, description="Transactions on or after this date"),
    end_date: Optional[datetime] = Query(None, description="Transactions on or before this date"),
    active: bool = Query(True, description="False lists reversed transactions"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    All transactions, newest first, with totals per payment mode.
    """
    return await PaymentService.list_transactions(
        db, payment_mode=payment_mode, start_date=start_date, end_date=end_date, active=active
    )


@router.delete("/{transaction_id}", response_model=TransactionResponse)
async def deactivate_transaction(
    transaction_id: int = Path(..., description="Transaction ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Soft-delete a transaction and reverse it on the customer and ledger.
    """
    transaction = await PaymentService.deactivate_transaction(db, transaction_id)

    await log_event(
        db=db,
        action=AuditAction.TRANSACTION_REVERSED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity_type="transaction",
        entity_id=transaction.id
    )
    await db.commit()

    return transaction
