"""Role-based access policy.

All authorization decisions go through ``AccessPolicy.check``; services call
``AccessPolicy.enforce`` before any mutation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from workforce_engine.errors import AuthorizationError, NotFoundError
from workforce_engine.services.state_machine import StateMachine

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """User roles, most privileged first."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class Action(str, Enum):
    """Actions gated by the policy."""

    VIEW_ENTRY = "view_entry"
    CREATE_ENTRY = "create_entry"
    EDIT_ENTRY = "edit_entry"
    DELETE_ENTRY = "delete_entry"
    SUBMIT_ENTRY = "submit_entry"
    REVIEW_ENTRY = "review_entry"
    VIEW_EMPLOYEES = "view_employees"
    MANAGE_EMPLOYEES = "manage_employees"
    CHANGE_EMPLOYEE_STATUS = "change_employee_status"
    MANAGE_USERS = "manage_users"
    GENERATE_REPORTS = "generate_reports"
    VIEW_REPORTS = "view_reports"
    VIEW_OWN_REPORT = "view_own_report"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller."""

    user_id: UUID
    role: Role
    linked_employee_id: UUID | None = None

    @property
    def is_reviewer(self) -> bool:
        """Admins and managers."""
        return self.role in (Role.ADMIN, Role.MANAGER)

    def owns(self, employee_id: UUID | None) -> bool:
        return (
            employee_id is not None
            and self.linked_employee_id is not None
            and self.linked_employee_id == employee_id
        )


@dataclass(frozen=True)
class Decision:
    """Outcome of a permission check. ``reason`` is a code, set on denial."""

    allowed: bool
    reason: str | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)

# Actions that only depend on role
_ROLE_ACTIONS: dict[Action, frozenset[Role]] = {
    Action.REVIEW_ENTRY: frozenset({Role.ADMIN, Role.MANAGER}),
    Action.VIEW_EMPLOYEES: frozenset({Role.ADMIN, Role.MANAGER}),
    Action.MANAGE_EMPLOYEES: frozenset({Role.ADMIN}),
    Action.CHANGE_EMPLOYEE_STATUS: frozenset({Role.ADMIN, Role.MANAGER}),
    Action.MANAGE_USERS: frozenset({Role.ADMIN}),
    Action.GENERATE_REPORTS: frozenset({Role.ADMIN, Role.MANAGER}),
    Action.VIEW_REPORTS: frozenset({Role.ADMIN, Role.MANAGER}),
}

# Entry actions an employee may perform on their own records
_OWNER_ACTIONS = frozenset(
    {
        Action.VIEW_ENTRY,
        Action.CREATE_ENTRY,
        Action.EDIT_ENTRY,
        Action.DELETE_ENTRY,
        Action.SUBMIT_ENTRY,
        Action.VIEW_OWN_REPORT,
    }
)


class AccessPolicy:
    """Permission checks over (principal, action, resource)."""

    @classmethod
    def check(
        cls,
        principal: Principal,
        action: Action,
        owner_employee_id: UUID | None = None,
        status: str | None = None,
        lifecycle: type[StateMachine] | None = None,
    ) -> Decision:
        """Decide whether ``principal`` may perform ``action``.

        ``owner_employee_id`` is the employee a record belongs to;
        ``status`` and ``lifecycle`` are needed for edit/delete checks where
        employees are limited to certain statuses.
        """
        if action in _ROLE_ACTIONS:
            if principal.role in _ROLE_ACTIONS[action]:
                return ALLOW
            return Decision(False, "role_not_permitted")

        if principal.role in (Role.ADMIN, Role.MANAGER):
            return ALLOW

        if action not in _OWNER_ACTIONS:
            return Decision(False, "role_not_permitted")

        if principal.linked_employee_id is None:
            return Decision(False, "no_linked_employee")
        if not principal.owns(owner_employee_id):
            return Decision(False, "not_owner")

        if action == Action.EDIT_ENTRY and lifecycle is not None and status is not None:
            if not lifecycle.owner_can_edit(status):
                return Decision(False, "status_locked")
        if action == Action.DELETE_ENTRY and lifecycle is not None and status is not None:
            if not lifecycle.owner_can_delete(status):
                return Decision(False, "status_locked")

        return ALLOW

    @classmethod
    def enforce(
        cls,
        principal: Principal,
        action: Action,
        owner_employee_id: UUID | None = None,
        status: str | None = None,
        lifecycle: type[StateMachine] | None = None,
    ) -> None:
        """Raise AuthorizationError when the check fails."""
        decision = cls.check(principal, action, owner_employee_id, status, lifecycle)
        if not decision.allowed:
            logger.warning(
                "Access denied: user=%s role=%s action=%s reason=%s",
                principal.user_id,
                principal.role.value,
                action.value,
                decision.reason,
            )
            raise AuthorizationError(decision.reason or "denied")

    @staticmethod
    def missing(principal: Principal, entity: str, key: object = None) -> Exception:
        """Error for a record that does not resolve.

        Employees get the same generic denial they would get for someone
        else's record, so lookups do not reveal whether an id exists.
        """
        if principal.role == Role.EMPLOYEE:
            return AuthorizationError("not_owner")
        return NotFoundError(entity, key)

    @staticmethod
    def scope_employee_id(principal: Principal, requested: UUID | None) -> UUID | None:
        """Employee filter for list queries: employees always see only their own."""
        if principal.role == Role.EMPLOYEE:
            if principal.linked_employee_id is None:
                raise AuthorizationError("no_linked_employee")
            return principal.linked_employee_id
        return requested
