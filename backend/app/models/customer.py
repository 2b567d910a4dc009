"""
Customer database model.

A customer is a booking of exactly one plot in one project. The denormalized
money fields obey `balance_amount = deal_value - paid_amount` at all times.
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
from backend.app.db.session import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(150), nullable=False)
    phone = Column(String(20), nullable=False, index=True)
    address = Column(String(255), nullable=True)

    # Immutable after booking
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    plot_id = Column(Integer, ForeignKey("plots.id"), nullable=False, index=True)

    size = Column(Float, nullable=True)
    rate = Column(Float, nullable=True)  # Sold rate, may differ from plot rate

    deal_value = Column(Float, nullable=False)
    paid_amount = Column(Float, default=0, nullable=False)
    balance_amount = Column(Float, default=0, nullable=False)

    assigned_executive_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    assigned_executives = relationship(
        "CustomerExecutiveShare",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    active = Column(Boolean, default=True, nullable=False)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    booking_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @validates("deal_value", "paid_amount")
    def _recompute_balance(self, key, value):
        deal_value = value if key == "deal_value" else self.deal_value
        paid_amount = value if key == "paid_amount" else self.paid_amount
        self.balance_amount = round((deal_value or 0) - (paid_amount or 0), 2)
        return value

    def __repr__(self):
        return f"<Customer(id={self.id}, deal={self.deal_value}, balance={self.balance_amount})>"


class CustomerExecutiveShare(Base):
    """
    Customer-specific commission split.

    When a customer carries shares, each executive earns `percentage` of
    every commission base instead of the configured rules.
    """
    __tablename__ = "customer_executive_shares"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    executive_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    percentage = Column(Float, nullable=False, default=0)
