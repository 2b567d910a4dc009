"""
Commission Rule database model.

Defines how commissions are calculated. A rule with no project applies to
every project; otherwise only to its own.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, ForeignKey, Enum
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.enums import UserRole
from backend.app.models.ledger_enums import CommissionType, CommissionTrigger, CommissionBasis


class CommissionRule(Base):
    """
    Commission Rule model.

    Rules already used for accruals are never edited; changes only affect
    future events, so retiring a rule means deactivating it.
    """
    __tablename__ = "commissionrules"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(String(255), nullable=True)

    applies_to_role = Column(Enum(UserRole), nullable=False)
    type = Column(Enum(CommissionType), nullable=False)
    value = Column(Float, nullable=False)
    trigger_event = Column(Enum(CommissionTrigger), nullable=False)
    basis = Column(Enum(CommissionBasis), nullable=False)

    # NULL = global rule
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<CommissionRule(id={self.id}, name='{self.name}', {self.type}:{self.value})>"
