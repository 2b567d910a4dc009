"""
Party ledger endpoints.

Statements for customers, executives and ledger accounts, plus manual
entries and their soft-delete.
"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.models.ledger_enums import PartyType, ReferenceType
from backend.app.schemas.ledger import LedgerEntryCreate, LedgerEntryResponse, PartyStatementResponse
from backend.app.core.dependencies import get_current_user
from backend.app.domain.ledger.posting_service import LedgerPostingService
from backend.app.domain.ledger.parties import get_party, party_display_name
from backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/ledger", tags=["Ledger"])


@router.get("/{party_id}", response_model=PartyStatementResponse)
async def get_party_ledger(
    party_id: int = Path(..., description="Customer, executive or ledger account ID"),
    party_type: PartyType = Query(..., description="customer | executive | ledger_account"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Active rows of one party, oldest first, with debit/credit totals.
    """
    party = await get_party(db, party_type, party_id)
    statement = await LedgerPostingService.party_statement(db, party_type, party_id)

    return PartyStatementResponse(
        party_type=party_type,
        party_id=party_id,
        party_name=party_display_name(party),
        entries=[LedgerEntryResponse.model_validate(e) for e in statement["entries"]],
        totals=statement["totals"]
    )


@router.post("", response_model=LedgerEntryResponse, status_code=201)
async def create_ledger_entry(
    data: LedgerEntryCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Manual ledger entry against any party.
    """
    await get_party(db, data.party_type, data.party_id)

    entry = await LedgerPostingService.post(
        db,
        party_type=data.party_type,
        party_id=data.party_id,
        debit=data.debit,
        credit=data.credit,
        description=data.description,
        reference_type=ReferenceType.OTHER,
        transaction_date=data.transaction_date,
        entered_by_id=current_user["user_id"]
    )

    await log_event(
        db=db,
        action=AuditAction.LEDGER_ENTRY_POSTED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity_type="ledger_entry",
        entity_id=entry.id
    )
    await db.commit()

    return entry


@router.delete("/{entry_id}", response_model=LedgerEntryResponse)
async def deactivate_ledger_entry(
    entry_id: int = Path(..., description="Ledger entry ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Soft-delete a ledger row. Later rows keep their posted balances; the
    party's live balance is corrected.
    """
    entry = await LedgerPostingService.deactivate(db, entry_id)

    await log_event(
        db=db,
        action=AuditAction.LEDGER_ENTRY_DEACTIVATED,
        actor_id=current_user["user_id"],
        actor_username=current_user["sub"],
        entity_type="ledger_entry",
        entity_id=entry.id
    )
    await db.commit()

    return entry
