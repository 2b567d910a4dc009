"""
Commission rule and payout schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from backend.app.models.enums import UserRole
from backend.app.models.ledger_enums import (
    CommissionType, CommissionTrigger, CommissionBasis, CommissionStatus
)


class CommissionRuleCreate(BaseModel):
    """
    Schema for creating a commission rule.

    A rule without project_id applies to every project.
    """
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=255)
    applies_to_role: UserRole = Field(default=UserRole.EXECUTIVE)
    type: CommissionType
    value: float = Field(..., ge=0)
    trigger_event: CommissionTrigger = Field(default=CommissionTrigger.DEAL_CLOSED)
    basis: Optional[CommissionBasis] = Field(default=None, description="Defaults to the basis of the trigger")
    project_id: Optional[int] = None


class CommissionRuleResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    applies_to_role: UserRole
    type: CommissionType
    value: float
    trigger_event: CommissionTrigger
    basis: CommissionBasis
    project_id: Optional[int]
    active: bool

    class Config:
        from_attributes = True


class CommissionEntryResponse(BaseModel):
    id: int
    executive_id: int
    commission_rule_id: Optional[int]
    customer_id: Optional[int]
    amount: float
    status: CommissionStatus
    reference_transaction_id: Optional[int]
    description: Optional[str]
    generated_at: datetime
    paid_at: Optional[datetime]

    class Config:
        from_attributes = True


class CommissionSummary(BaseModel):
    total_earned: float
    total_paid: float
    balance: float


class ExecutiveLedgerResponse(BaseModel):
    executive_id: int
    summary: CommissionSummary
    entries: List[CommissionEntryResponse]


class CommissionPayRequest(BaseModel):
    """Schema for paying an executive."""
    executive_id: int
    amount: float = Field(..., gt=0)
    remarks: Optional[str] = Field(default=None, max_length=200)


class CommissionPayResponse(BaseModel):
    success: bool = True
    message: str
    executive_id: int
    amount: float
    paid_entry_ids: List[int]
    remaining_balance: float


class RuleRetireResponse(BaseModel):
    success: bool = True
    rule_id: int
    outcome: str
