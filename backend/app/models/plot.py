"""
Plot (unit) database model.

Status moves to SOLD when a customer is booked against the plot and never
moves back.
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import validates
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.ledger_enums import PlotStatus


class Plot(Base):
    __tablename__ = "plots"
    __table_args__ = (
        UniqueConstraint("project_id", "plot_number", name="uq_plot_number_per_project"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    plot_number = Column(String(50), nullable=False)

    size = Column(Float, nullable=False)  # sq. ft.
    rate = Column(Float, nullable=False)  # per sq. ft.
    total_value = Column(Float, nullable=True)

    status = Column(Enum(PlotStatus), default=PlotStatus.VACANT, nullable=False, index=True)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @validates("size", "rate")
    def _recompute_total(self, key, value):
        size = value if key == "size" else self.size
        rate = value if key == "rate" else self.rate
        if size is not None and rate is not None:
            self.total_value = round(size * rate, 2)
        return value

    def __repr__(self):
        return f"<Plot(id={self.id}, number='{self.plot_number}', status='{self.status}')>"
