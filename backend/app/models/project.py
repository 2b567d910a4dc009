"""
Project database model.

A land-development project that plots belong to.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from backend.app.db.session import Base


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    project_name = Column(String(150), nullable=False)
    project_code = Column(String(50), unique=True, nullable=False, index=True)
    location = Column(String(255), nullable=True)
    active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Project(id={self.id}, code='{self.project_code}')>"
