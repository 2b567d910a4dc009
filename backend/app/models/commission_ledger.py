"""
Commission Ledger database model.

One row per accrued commission. Payout flips rows from EARNED to PAID and
may split a row in two when it is only partly covered.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, Enum, String, Index
from backend.app.db.session import Base
from backend.app.models.ledger_enums import CommissionStatus


class CommissionLedgerEntry(Base):
    __tablename__ = "commissionledgers"
    __table_args__ = (
        Index("ix_commissionledgers_exec_status", "executive_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    executive_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    commission_rule_id = Column(Integer, ForeignKey("commissionrules.id"), nullable=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True, index=True)

    amount = Column(Float, nullable=False)
    status = Column(Enum(CommissionStatus), default=CommissionStatus.EARNED, nullable=False)
    reference_transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=True)
    description = Column(String(500), nullable=False)

    # Kept on split remainders so aging is preserved
    generated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<CommissionLedgerEntry(id={self.id}, exec={self.executive_id}, {self.status}:{self.amount})>"
