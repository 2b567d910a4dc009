"""
Audit logging service for tracking business and security events.

Rows are added to the caller's session and flushed; they are committed with
the operation they describe.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from backend.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    USER_CREATED = "USER_CREATED"
    USER_DEACTIVATED = "USER_DEACTIVATED"
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    TOKEN_REVOKED = "TOKEN_REVOKED"

    # Inventory
    PROJECT_CREATED = "PROJECT_CREATED"
    PLOT_CREATED = "PLOT_CREATED"

    # Bookings & payments
    CUSTOMER_BOOKED = "CUSTOMER_BOOKED"
    CUSTOMER_UPDATED = "CUSTOMER_UPDATED"
    TRANSACTION_RECORDED = "TRANSACTION_RECORDED"
    TRANSACTION_REVERSED = "TRANSACTION_REVERSED"

    # Ledger
    LEDGER_ACCOUNT_CREATED = "LEDGER_ACCOUNT_CREATED"
    LEDGER_ENTRY_POSTED = "LEDGER_ENTRY_POSTED"
    LEDGER_ENTRY_DEACTIVATED = "LEDGER_ENTRY_DEACTIVATED"
    JV_POSTED = "JV_POSTED"
    JV_DEACTIVATED = "JV_DEACTIVATED"

    # Commission
    COMMISSION_RULE_CREATED = "COMMISSION_RULE_CREATED"
    COMMISSION_RULE_RETIRED = "COMMISSION_RULE_RETIRED"
    COMMISSION_PAID = "COMMISSION_PAID"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_id: Optional[int] = None,
    actor_username: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Record an event in the audit log.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_id: ID of user performing the action
        actor_username: Username of actor
        entity_type: Kind of record acted upon (customer, journal_voucher...)
        entity_id: ID of that record
        metadata: Additional context as JSON

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        actor_username=actor_username,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        meta_data=metadata
    )

    db.add(audit_log)
    await db.flush()

    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering, most recent first.
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if entity_type:
        query = query.where(AuditLog.entity_type == entity_type)

    if entity_id:
        query = query.where(AuditLog.entity_id == entity_id)

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all())
