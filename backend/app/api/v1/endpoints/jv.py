"""
Journal voucher endpoints.
"""

from typing import List
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.schemas.ledger import JVCreate, JVResponse
from backend.app.core.dependencies import get_current_user
from backend.app.domain.journal.jv_poster import JournalVoucherPoster
from backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/jv", tags=["Journal Vouchers"])


@router.post("", response_model=JVResponse, status_code=201)
async def create_jv(
    data: JVCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Post a journal voucher. The voucher and both ledger rows are committed
    together or not at all.
    """
    jv = await JournalVoucherPoster.create_jv(
        db,
        debit_account=data.debit_account.model_dump(),
        credit_account=data.credit_account.model_dump(),
        amount=data.amount,
        actor_id=current_user["user_id"],
        narration=data.narration,
        branch=data.branch,
        transaction_date=data.transaction_date
    )

    await log_event(
        db=db,
        action=AuditAction.JV_POSTED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity_type="journal_voucher",
        entity_id=jv.id,
        metadata={"jv_number": jv.jv_number, "amount": jv.amount}
    )
    await db.commit()

    return jv


@router.get("", response_model=List[JVResponse])
async def list_jvs(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await JournalVoucherPoster.list_jvs(db)


@router.delete("/{jv_id}", response_model=JVResponse)
async def deactivate_jv(
    jv_id: int = Path(..., description="Journal voucher ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    jv = await JournalVoucherPoster.deactivate_jv(db, jv_id)

    await log_event(
        db=db,
        action=AuditAction.JV_DEACTIVATED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity_type="journal_voucher",
        entity_id=jv.id
    )
    await db.commit()

    return jv
