"""
Commission Rule Resolver.

Finds the rules that apply to one commission event:
1. Rule is active
2. Rule targets the executive's role
3. Rule fires on this trigger event
4. Rule scope is global or the event's project
"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backend.app.models.commission_rule import CommissionRule
from backend.app.models.enums import UserRole
from backend.app.models.ledger_enums import CommissionTrigger
from backend.app.domain.commission.rule_scope import scope_of


class CommissionRuleResolver:

    @staticmethod
    async def resolve_applicable_rules(
        db: AsyncSession,
        role: UserRole,
        trigger_event: CommissionTrigger,
        project_id: Optional[int]
    ) -> List[CommissionRule]:
        """
        Active rules for (role, trigger) whose scope covers `project_id`.

        Returns an empty list when nothing matches; that is not an error.
        """
        query = select(CommissionRule).where(
            CommissionRule.active == True,
            CommissionRule.applies_to_role == role,
            CommissionRule.trigger_event == trigger_event
        ).order_by(CommissionRule.id)

        result = await db.execute(query)
        rules = result.scalars().all()

        return [rule for rule in rules if scope_of(rule.project_id).matches(project_id)]
