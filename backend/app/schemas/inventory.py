"""
Project and plot schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from backend.app.models.ledger_enums import PlotStatus


class ProjectCreate(BaseModel):
    """Schema for creating a project."""
    project_name: str = Field(..., min_length=1, max_length=150)
    project_code: str = Field(..., min_length=1, max_length=50)
    location: Optional[str] = Field(default=None, max_length=255)


class ProjectResponse(BaseModel):
    id: int
    project_name: str
    project_code: str
    location: Optional[str]
    active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class PlotCreate(BaseModel):
    """Schema for adding a plot to a project. total_value is size x rate."""
    plot_number: str = Field(..., min_length=1, max_length=50)
    size: float = Field(..., gt=0, description="Area in sq. ft.")
    rate: float = Field(..., gt=0, description="Rate per sq. ft.")
    status: PlotStatus = Field(default=PlotStatus.VACANT)


class PlotResponse(BaseModel):
    id: int
    project_id: int
    plot_number: str
    size: float
    rate: float
    total_value: Optional[float]
    status: PlotStatus
    active: bool

    class Config:
        from_attributes = True
