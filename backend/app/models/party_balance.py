"""
Party Balance database model.

One row per ledger owner. Postings for a party lock this row, so two writers
for the same party never both read the same "previous balance".
"""

from sqlalchemy import Column, Integer, Float, DateTime, Enum, UniqueConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.ledger_enums import PartyType


class PartyBalance(Base):
    """
    Live balance of a party: sum of (debit - credit) over its active rows.

    Only ever moved by atomic increments from the posting service.
    """
    __tablename__ = "party_balances"
    __table_args__ = (
        UniqueConstraint("party_type", "party_id", name="uq_party_balance_party"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    party_type = Column(Enum(PartyType), nullable=False)
    party_id = Column(Integer, nullable=False)
    current_balance = Column(Float, default=0, nullable=False)

    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<PartyBalance(party={self.party_type}:{self.party_id}, balance={self.current_balance})>"
