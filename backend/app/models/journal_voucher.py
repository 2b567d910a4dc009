"""
Journal Voucher database model.

A manual two-sided entry. Every voucher owns exactly two ledger rows
(reference_id = voucher id), written in the same transaction.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, Enum, String, Boolean
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.ledger_enums import PartyType


class JournalVoucher(Base):
    __tablename__ = "journalvouchers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    jv_number = Column(String(20), unique=True, nullable=False)
    branch = Column(String(100), nullable=False)
    transaction_date = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False, index=True)
    narration = Column(String(255), nullable=True)

    debit_party_type = Column(Enum(PartyType), nullable=False)
    debit_party_id = Column(Integer, nullable=False)
    debit_account_name = Column(String(150), nullable=True)

    credit_party_type = Column(Enum(PartyType), nullable=False)
    credit_party_id = Column(Integer, nullable=False)
    credit_account_name = Column(String(150), nullable=True)

    amount = Column(Float, nullable=False)
    entered_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<JournalVoucher(id={self.id}, number='{self.jv_number}', amount={self.amount})>"
