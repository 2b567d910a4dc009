"""
Customer (booking) schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class ExecutiveShare(BaseModel):
    """One executive's share of a customer-specific commission."""
    executive_id: int
    percentage: float = Field(..., gt=0, le=100)

    class Config:
        from_attributes = True


class CustomerCreate(BaseModel):
    """
    Schema for booking a customer.

    deal_value defaults to size x rate, falling back to the plot's value.
    """
    name: str = Field(..., min_length=1, max_length=150)
    phone: str = Field(..., min_length=5, max_length=20)
    address: Optional[str] = Field(default=None, max_length=255)
    project_id: int
    plot_id: int
    size: Optional[float] = Field(default=None, gt=0)
    rate: Optional[float] = Field(default=None, gt=0)
    deal_value: Optional[float] = Field(default=None, gt=0)
    assigned_executive_id: Optional[int] = None
    assigned_executives: Optional[List[ExecutiveShare]] = None
    booking_date: Optional[datetime] = None


class CustomerUpdate(BaseModel):
    """
    Schema for updating a customer. project_id / plot_id are accepted only
    when unchanged.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    phone: Optional[str] = Field(default=None, min_length=5, max_length=20)
    address: Optional[str] = Field(default=None, max_length=255)
    project_id: Optional[int] = None
    plot_id: Optional[int] = None
    size: Optional[float] = Field(default=None, gt=0)
    rate: Optional[float] = Field(default=None, gt=0)
    deal_value: Optional[float] = Field(default=None, gt=0)
    assigned_executive_id: Optional[int] = None
    assigned_executives: Optional[List[ExecutiveShare]] = None


class CustomerResponse(BaseModel):
    id: int
    name: str
    phone: str
    address: Optional[str]
    project_id: int
    plot_id: int
    size: Optional[float]
    rate: Optional[float]
    deal_value: float
    paid_amount: float
    balance_amount: float
    assigned_executive_id: Optional[int]
    assigned_executives: List[ExecutiveShare] = []
    active: bool
    booking_date: datetime

    class Config:
        from_attributes = True
