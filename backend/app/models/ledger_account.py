"""
Ledger Account database model.

General bookkeeping accounts (bank, office expenses, capital...) that are
neither customers nor executives.
"""

from sqlalchemy import Column, Integer, Float, ForeignKey, DateTime, Enum, String, Boolean
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.ledger_enums import BalanceType


class LedgerAccount(Base):
    __tablename__ = "ledgeraccounts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    branch = Column(String(100), nullable=False)
    account_name = Column(String(150), unique=True, nullable=False)
    account_number = Column(String(50), nullable=True)
    group = Column(String(100), nullable=False)  # BANK ACCOUNTS, INDIRECT EXPENSES...

    opening_balance = Column(Float, default=0, nullable=False)
    balance_type = Column(Enum(BalanceType), default=BalanceType.DR, nullable=False)

    active = Column(Boolean, default=True, nullable=False)
    entered_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<LedgerAccount(id={self.id}, name='{self.account_name}')>"
