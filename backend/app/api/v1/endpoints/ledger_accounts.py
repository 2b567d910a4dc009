"""
General ledger account endpoints.
"""

from typing import List
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.schemas.ledger import LedgerAccountCreate, LedgerAccountResponse
from backend.app.schemas.transaction import AccountTransactionsResponse
from backend.app.models.ledger_enums import PartyType
from backend.app.core.dependencies import get_current_user
from backend.app.services.ledger_account_service import LedgerAccountService
from backend.app.services.payment_service import PaymentService
from backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/ledger-accounts", tags=["Ledger Accounts"])


@router.post("", response_model=LedgerAccountResponse, status_code=201)
async def create_ledger_account(
    data: LedgerAccountCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create an account; its opening balance becomes the first ledger row.
    """
    account = await LedgerAccountService.create_account(db, data.model_dump(), current_user["user_id"])

    await log_event(
        db=db,
        action=AuditAction.LEDGER_ACCOUNT_CREATED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity_type="ledger_account",
        entity_id=account.id
    )
    await db.commit()

    return account


@router.get("", response_model=List[LedgerAccountResponse])
async def list_ledger_accounts(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await LedgerAccountService.list_accounts(db)


@router.get("/{account_id}/transactions", response_model=AccountTransactionsResponse)
async def get_ledger_account_transactions(
    account_id: int = Path(..., description="Ledger account ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Cash-book entries recorded against this account, oldest first."""
    return await PaymentService.account_transactions(db, PartyType.LEDGER_ACCOUNT, account_id)
