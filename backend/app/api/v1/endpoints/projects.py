"""
Project and plot endpoints.
"""

from typing import List
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from backend.app.db.session import get_db
from backend.app.models.project import Project
from backend.app.models.plot import Plot
from backend.app.schemas.inventory import ProjectCreate, ProjectResponse, PlotCreate, PlotResponse
from backend.app.core.dependencies import get_current_user
from backend.app.core.guards import require_boss
from backend.app.core.exceptions import DomainConstraintError, NotFoundError
from backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/projects", tags=["Projects"])


async def _get_project(db: AsyncSession, project_id: int) -> Project:
    project = await db.get(Project, project_id)
    if not project or not project.active:
        raise NotFoundError("Project", project_id)
    return project


@router.post("", response_model=ProjectResponse, status_code=201)
async def create_project(
    data: ProjectCreate,
    boss: dict = Depends(require_boss),
    db: AsyncSession = Depends(get_db)
):
    existing = await db.execute(select(Project.id).where(Project.project_code == data.project_code))
    if existing.first() is not None:
        raise DomainConstraintError(f"Project code '{data.project_code}' already exists")

    project = Project(**data.model_dump(), active=True)
    db.add(project)
    await db.flush()

    await log_event(
        db=db,
        action=AuditAction.PROJECT_CREATED,
        actor_id=boss["user_id"],
        actor_username=boss["sub"],
        entity_type="project",
        entity_id=project.id
    )
    await db.commit()
    await db.refresh(project)

    return project


@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(Project).where(Project.active == True).order_by(Project.project_name)
    )
    return result.scalars().all()


@router.post("/{project_id}/plots", response_model=PlotResponse, status_code=201)
async def create_plot(
    data: PlotCreate,
    project_id: int = Path(..., description="Project ID"),
    boss: dict = Depends(require_boss),
    db: AsyncSession = Depends(get_db)
):
    """
    Add a plot to a project. Plot numbers are unique within a project.
    """
    project = await _get_project(db, project_id)

    existing = await db.execute(
        select(Plot.id).where(Plot.project_id == project.id, Plot.plot_number == data.plot_number)
    )
    if existing.first() is not None:
        raise DomainConstraintError(f"Plot {data.plot_number} already exists in {project.project_name}")

    plot = Plot(project_id=project.id, active=True, **data.model_dump())
    db.add(plot)
    await db.flush()

    await log_event(
        db=db,
        action=AuditAction.PLOT_CREATED,
        actor_id=boss["user_id"],
        actor_username=boss["sub"],
        entity_type="plot",
        entity_id=plot.id,
        metadata={"project_id": project.id, "plot_number": plot.plot_number}
    )
    await db.commit()

    return plot


@router.get("/{project_id}/plots", response_model=List[PlotResponse])
async def list_plots(
    project_id: int = Path(..., description="Project ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    project = await _get_project(db, project_id)
    result = await db.execute(
        select(Plot)
        .where(Plot.project_id == project.id, Plot.active == True)
        .order_by(Plot.id)
    )
    return result.scalars().all()
