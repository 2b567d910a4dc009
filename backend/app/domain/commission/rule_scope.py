"""
Commission rule scope.

A rule is either global or bound to one project. Storage keeps a nullable
project_id; matching goes through these types instead of treating NULL as a
wildcard at each call site.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class GlobalScope:
    """Applies to every project."""

    def matches(self, project_id: Optional[int]) -> bool:
        return True

    @property
    def project_id(self) -> None:
        return None


@dataclass(frozen=True)
class ProjectScope:
    """Applies only to events on one project."""
    project_id: int

    def matches(self, project_id: Optional[int]) -> bool:
        return project_id is not None and project_id == self.project_id


RuleScope = Union[GlobalScope, ProjectScope]


def scope_of(project_id: Optional[int]) -> RuleScope:
    """Scope for a stored rule's project_id column."""
    if project_id is None:
        return GlobalScope()
    return ProjectScope(project_id)
