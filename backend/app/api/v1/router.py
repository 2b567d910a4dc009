"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import (
    auth, users, projects, customers, transactions,
    ledger_accounts, ledger, jv, commission, audit
)

router = APIRouter()

# Authentication and staff
router.include_router(auth.router)
router.include_router(users.router)

# Inventory and bookings
router.include_router(projects.router)
router.include_router(customers.router)
router.include_router(transactions.router)

# Ledgers and vouchers
router.include_router(ledger_accounts.router)
router.include_router(ledger.router)
router.include_router(jv.router)

# Commission
router.include_router(commission.router)

# Audit trail
router.include_router(audit.router)
