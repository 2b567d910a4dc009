"""
Transaction database model.

One receipt or payment against a customer, or a cash-book entry straight to a
ledger account. `balance_at_time` is a snapshot of the account balance right
after this transaction and is never re-derived.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Enum, ForeignKey
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.ledger_enums import EntryType, PaymentMode, PartyType


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    account_type = Column(Enum(PartyType), default=PartyType.CUSTOMER, nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)
    ledger_account_id = Column(Integer, ForeignKey("ledgeraccounts.id"), nullable=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)

    entry_type = Column(Enum(EntryType), default=EntryType.RECEIPT, nullable=False)
    transaction_type = Column(String(50), nullable=True)  # Token, EMI, down payment...
    amount = Column(Float, nullable=False)
    payment_mode = Column(Enum(PaymentMode), nullable=False)

    transaction_date = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    receipt_number = Column(String(50), nullable=True)
    reference_number = Column(String(100), nullable=True)
    bank_name = Column(String(100), nullable=True)
    balance_at_time = Column(Float, nullable=True)
    narration = Column(String(255), nullable=True)
    remarks = Column(String(255), nullable=True)

    entered_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Transaction(id={self.id}, type='{self.entry_type}', amount={self.amount})>"
