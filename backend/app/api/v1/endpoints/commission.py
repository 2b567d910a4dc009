"""
Commission endpoints.

Rule management and payouts are reserved for the Boss. Executives read only
their own commission ledger.
"""

from typing import List
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.schemas.commission import (
    CommissionRuleCreate, CommissionRuleResponse, ExecutiveLedgerResponse,
    CommissionEntryResponse, CommissionPayRequest, CommissionPayResponse, RuleRetireResponse
)
from backend.app.core.dependencies import get_current_user
from backend.app.core.guards import require_boss, enforce_self_or_boss
from backend.app.domain.commission.commission_engine import CommissionEngine
from backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/commission", tags=["Commission"])


@router.post("/rules", response_model=CommissionRuleResponse, status_code=201)
async def create_rule(
    rule: CommissionRuleCreate,
    boss: dict = Depends(require_boss),
    db: AsyncSession = Depends(get_db)
):
    new_rule = await CommissionEngine.create_rule(db, **rule.model_dump())

    await log_event(
        db=db,
        action=AuditAction.COMMISSION_RULE_CREATED,
        actor_id=boss["user_id"],
        actor_username=boss["sub"],
        entity_type="commission_rule",
        entity_id=new_rule.id,
        metadata={"name": new_rule.name}
    )
    await db.commit()

    return new_rule


@router.get("/rules", response_model=List[CommissionRuleResponse])
async def list_rules(
    boss: dict = Depends(require_boss),
    db: AsyncSession = Depends(get_db)
):
    return await CommissionEngine.list_rules(db)


@router.delete("/rules/{rule_id}", response_model=RuleRetireResponse)
async def retire_rule(
    rule_id: int = Path(..., description="Commission rule ID"),
    boss: dict = Depends(require_boss),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a rule, or deactivate it if commission was already accrued under it.
    """
    outcome = await CommissionEngine.retire_rule(db, rule_id)

    await log_event(
        db=db,
        action=AuditAction.COMMISSION_RULE_RETIRED,
        actor_id=boss["user_id"],
        actor_username=boss["sub"],
        entity_type="commission_rule",
        entity_id=rule_id,
        metadata={"outcome": outcome}
    )
    await db.commit()

    return RuleRetireResponse(rule_id=rule_id, outcome=outcome)


@router.get("/executive/{executive_id}", response_model=ExecutiveLedgerResponse)
async def get_executive_ledger(
    executive_id: int = Path(..., description="Executive user ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    enforce_self_or_boss(executive_id, current_user)

    ledger = await CommissionEngine.executive_ledger(db, executive_id)

    return ExecutiveLedgerResponse(
        executive_id=executive_id,
        summary=ledger["summary"],
        entries=[CommissionEntryResponse.model_validate(e) for e in ledger["entries"]]
    )


@router.post("/pay", response_model=CommissionPayResponse)
async def pay_commission(
    request: CommissionPayRequest,
    boss: dict = Depends(require_boss),
    db: AsyncSession = Depends(get_db)
):
    """
    Pay an executive against their earned commission, oldest first.
    """
    paid_ids = await CommissionEngine.pay(db, request.executive_id, request.amount, request.remarks)

    await log_event(
        db=db,
        action=AuditAction.COMMISSION_PAID,
        actor_id=boss["user_id"],
        actor_username=boss["sub"],
        entity_type="executive",
        entity_id=request.executive_id,
        metadata={"amount": request.amount, "entry_ids": paid_ids}
    )
    await db.commit()

    remaining = await CommissionEngine.pending_balance(db, request.executive_id)

    return CommissionPayResponse(
        message=f"Paid {request.amount:.2f} successfully",
        executive_id=request.executive_id,
        amount=request.amount,
        paid_entry_ids=paid_ids,
        remaining_balance=remaining
    )
