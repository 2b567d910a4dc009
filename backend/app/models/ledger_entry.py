"""
Ledger Entry database model.

Per-party running-balance ledger. Rows are appended, never rewritten; a row
is retired by flipping `active` to False.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, Enum, String, Boolean, Index
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.ledger_enums import PartyType, ReferenceType


class LedgerEntry(Base):
    """
    Ledger Entry model.

    Within the active rows of one (party_type, party_id), ordered by
    transaction_date then id:

        balance_n = balance_{n-1} + debit_n - credit_n

    `balance` is a snapshot taken at posting time. Deactivating an earlier
    row does not rewrite it; the live figure lives in PartyBalance.
    """
    __tablename__ = "ledgers"
    __table_args__ = (
        Index("ix_ledgers_party_date", "party_type", "party_id", "transaction_date"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Polymorphic owner: customer id, executive (user) id or ledger account id
    party_type = Column(Enum(PartyType), nullable=False)
    party_id = Column(Integer, nullable=False)

    debit = Column(Float, default=0, nullable=False)
    credit = Column(Float, default=0, nullable=False)
    balance = Column(Float, default=0, nullable=False)

    description = Column(String(500), nullable=True)
    reference_type = Column(Enum(ReferenceType), default=ReferenceType.OTHER, nullable=False)
    reference_id = Column(Integer, nullable=True, index=True)

    transaction_date = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    entered_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return (
            f"<LedgerEntry(id={self.id}, party={self.party_type}:{self.party_id}, "
            f"dr={self.debit}, cr={self.credit}, bal={self.balance})>"
        )
