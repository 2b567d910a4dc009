"""
Transaction (receipt / refund / cash-book) schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from backend.app.models.ledger_enums import EntryType, PaymentMode, PartyType


class TransactionCreate(BaseModel):
    """
    Schema for recording a receipt or payment.

    account_type "customer" needs customer_id; "ledger_account" needs
    ledger_account_id and posts straight to that account's ledger.
    """
    account_type: PartyType = Field(default=PartyType.CUSTOMER)
    customer_id: Optional[int] = None
    ledger_account_id: Optional[int] = None
    project_id: Optional[int] = None
    entry_type: EntryType = Field(default=EntryType.RECEIPT)
    transaction_type: Optional[str] = Field(default=None, max_length=50, description="Token, EMI, down payment...")
    amount: float = Field(..., gt=0)
    payment_mode: PaymentMode
    transaction_date: Optional[datetime] = None
    receipt_number: Optional[str] = Field(default=None, max_length=50)
    reference_number: Optional[str] = Field(default=None, max_length=100)
    bank_name: Optional[str] = Field(default=None, max_length=100)
    narration: Optional[str] = Field(default=None, max_length=255)
    remarks: Optional[str] = Field(default=None, max_length=255)


class TransactionResponse(BaseModel):
    id: int
    account_type: PartyType
    customer_id: Optional[int]
    ledger_account_id: Optional[int]
    project_id: Optional[int]
    entry_type: EntryType
    transaction_type: Optional[str]
    amount: float
    payment_mode: PaymentMode
    transaction_date: datetime
    receipt_number: Optional[str]
    reference_number: Optional[str]
    balance_at_time: Optional[float]
    narration: Optional[str]
    active: bool

    class Config:
        from_attributes = True


class PaymentModeTotal(BaseModel):
    payment_mode: PaymentMode
    total: float
    count: int


class TransactionListResponse(BaseModel):
    count: int
    totals: List[PaymentModeTotal]
    transactions: List[TransactionResponse]


class AccountSummary(BaseModel):
    id: int
    account_type: PartyType
    name: str
    phone: Optional[str] = None
    deal_value: float = 0
    paid_amount: float = 0
    balance_amount: float = 0


class AccountTransactionsResponse(BaseModel):
    """Payment history of one account, oldest first, with balance snapshots."""
    account: AccountSummary
    count: int
    total_paid: float
    transactions: List[TransactionResponse]
