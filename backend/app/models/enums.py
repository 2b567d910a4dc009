"""
User roles enumeration.

Defines the role types for the estate back office.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        BOSS: Owner of the business, manages rules and payouts
        HEAD_EXECUTIVE: Senior sales executive, earns commission
        EXECUTIVE: Sales executive, earns commission (default role)
    """
    BOSS = "BOSS"
    HEAD_EXECUTIVE = "HEAD_EXECUTIVE"
    EXECUTIVE = "EXECUTIVE"


COMMISSION_ROLES = (UserRole.EXECUTIVE, UserRole.HEAD_EXECUTIVE)
