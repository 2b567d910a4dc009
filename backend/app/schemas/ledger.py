"""
Ledger, ledger account and journal voucher schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from backend.app.models.ledger_enums import PartyType, ReferenceType, BalanceType


class LedgerEntryCreate(BaseModel):
    """Schema for a manual ledger entry. At least one side must be non-zero."""
    party_type: PartyType
    party_id: int
    debit: Optional[float] = Field(default=None, ge=0)
    credit: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = Field(default=None, max_length=255)
    transaction_date: Optional[datetime] = None


class LedgerEntryResponse(BaseModel):
    id: int
    party_type: PartyType
    party_id: int
    debit: float
    credit: float
    balance: float
    description: Optional[str]
    reference_type: ReferenceType
    reference_id: Optional[int]
    transaction_date: datetime
    active: bool

    class Config:
        from_attributes = True


class LedgerTotals(BaseModel):
    total_debit: float
    total_credit: float
    current_balance: float
    snapshot_balance: float = Field(..., description="Balance stored on the last active row")


class PartyStatementResponse(BaseModel):
    """Active ledger rows of one party, oldest first, with totals."""
    party_type: PartyType
    party_id: int
    party_name: str
    entries: List[LedgerEntryResponse]
    totals: LedgerTotals


class LedgerAccountCreate(BaseModel):
    """Schema for creating a general ledger account."""
    account_name: str = Field(..., min_length=1, max_length=150)
    group: str = Field(..., min_length=1, max_length=100, description="BANK ACCOUNTS, INDIRECT EXPENSES...")
    branch: Optional[str] = Field(default=None, max_length=100)
    account_number: Optional[str] = Field(default=None, max_length=50)
    opening_balance: float = Field(default=0, ge=0)
    balance_type: BalanceType = Field(default=BalanceType.DR)


class LedgerAccountResponse(BaseModel):
    id: int
    branch: str
    account_name: str
    account_number: Optional[str]
    group: str
    opening_balance: float
    balance_type: BalanceType
    active: bool

    class Config:
        from_attributes = True


class JVAccount(BaseModel):
    """One side of a journal voucher."""
    party_type: PartyType
    party_id: int
    account_name: Optional[str] = Field(default=None, max_length=150)


class JVCreate(BaseModel):
    """Schema for posting a journal voucher."""
    debit_account: JVAccount
    credit_account: JVAccount
    amount: float = Field(..., gt=0)
    narration: Optional[str] = Field(default=None, max_length=255)
    branch: Optional[str] = Field(default=None, max_length=100)
    transaction_date: Optional[datetime] = None


class JVResponse(BaseModel):
    id: int
    jv_number: str
    branch: str
    transaction_date: datetime
    narration: Optional[str]
    debit_party_type: PartyType
    debit_party_id: int
    debit_account_name: Optional[str]
    credit_party_type: PartyType
    credit_party_id: int
    credit_account_name: Optional[str]
    amount: float
    active: bool

    class Config:
        from_attributes = True
