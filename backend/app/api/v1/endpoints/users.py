"""
User management endpoints.

The Boss lists staff and deactivates accounts; any signed-in user can list
the executives that bookings may be assigned to.
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.models.enums import COMMISSION_ROLES
from backend.app.schemas.auth import UserResponse
from backend.app.core.dependencies import get_current_user
from backend.app.core.guards import require_boss
from backend.app.core.token_revocation import revoke_all_user_tokens
from backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
async def list_users(
    boss: dict = Depends(require_boss),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(User).order_by(User.id))
    return result.scalars().all()


@router.get("/executives", response_model=List[UserResponse])
async def list_executives(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Active users that earn commission."""
    result = await db.execute(
        select(User)
        .where(User.role.in_(COMMISSION_ROLES), User.is_active == True)
        .order_by(User.username)
    )
    return result.scalars().all()


@router.post("/{user_id}/deactivate", response_model=UserResponse)
async def deactivate_user(
    user_id: int,
    boss: dict = Depends(require_boss),
    db: AsyncSession = Depends(get_db)
):
    """
    Deactivate a user and revoke every token they hold.
    """
    target_user = await db.get(User, user_id)

    if not target_user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    if target_user.id == boss["user_id"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot deactivate yourself"
        )

    if not target_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already inactive"
        )

    target_user.is_active = False
    await log_event(
        db=db,
        action=AuditAction.USER_DEACTIVATED,
        actor_id=boss["user_id"],
        actor_username=boss["sub"],
        entity_type="user",
        entity_id=target_user.id
    )
    await db.commit()
    await db.refresh(target_user)

    await revoke_all_user_tokens(user_id)

    return target_user
