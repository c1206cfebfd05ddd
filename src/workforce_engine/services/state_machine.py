"""Lifecycle state machines for timesheets, expenses and monthly summaries."""

from __future__ import annotations

from enum import Enum
from typing import ClassVar

from workforce_engine.errors import InvalidTransitionError


class TimesheetStatus(str, Enum):
    """Timesheet entry status values."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class ExpenseStatus(str, Enum):
    """Expense entry status values."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"
    REIMBURSED = "reimbursed"


class SummaryStatus(str, Enum):
    """Monthly summary status values."""

    DRAFT = "draft"
    FINALIZED = "finalized"
    PAID = "paid"


class StateMachine:
    """Table-driven transition checks shared by the entity lifecycles."""

    VALID_TRANSITIONS: ClassVar[dict[str, list[str]]] = {}

    # Statuses in which the owning employee may still edit the entry
    OWNER_EDITABLE: ClassVar[set[str]] = set()

    # Statuses in which the owning employee may delete the entry
    OWNER_DELETABLE: ClassVar[set[str]] = set()

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(
        cls, from_status: str, to_status: str, reason: str | None = None
    ) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            raise InvalidTransitionError(from_status, to_status, reason)

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])

    @classmethod
    def owner_can_edit(cls, status: str) -> bool:
        return status in cls.OWNER_EDITABLE

    @classmethod
    def owner_can_delete(cls, status: str) -> bool:
        return status in cls.OWNER_DELETABLE


class TimesheetStateMachine(StateMachine):
    """State machine for timesheet entries.

    Allowed transitions:
    - draft → submitted
    - submitted → approved | rejected
    - rejected → submitted (resubmit) | approved
    - approved → rejected (reopen)

    There is no dedicated reject operation; rejection happens through an
    update that sets the status.
    """

    VALID_TRANSITIONS = {
        TimesheetStatus.DRAFT: [TimesheetStatus.SUBMITTED],
        TimesheetStatus.SUBMITTED: [TimesheetStatus.APPROVED, TimesheetStatus.REJECTED],
        TimesheetStatus.REJECTED: [TimesheetStatus.SUBMITTED, TimesheetStatus.APPROVED],
        TimesheetStatus.APPROVED: [TimesheetStatus.REJECTED],
    }

    OWNER_EDITABLE = {TimesheetStatus.DRAFT, TimesheetStatus.REJECTED}
    OWNER_DELETABLE = {TimesheetStatus.DRAFT}

    # Target statuses only a reviewer may set
    REVIEW_STATUSES = {TimesheetStatus.APPROVED, TimesheetStatus.REJECTED}

    @classmethod
    def validate_submit(cls, status: str) -> None:
        if status != TimesheetStatus.DRAFT:
            raise InvalidTransitionError(
                status, TimesheetStatus.SUBMITTED, "Only draft timesheets can be submitted"
            )

    @classmethod
    def validate_approve(cls, status: str) -> None:
        if status not in (TimesheetStatus.SUBMITTED, TimesheetStatus.REJECTED):
            raise InvalidTransitionError(
                status,
                TimesheetStatus.APPROVED,
                "Only submitted or rejected timesheets can be approved",
            )


class ExpenseStateMachine(StateMachine):
    """State machine for expense entries.

    Allowed transitions:
    - draft → submitted
    - submitted → approved | rejected
    - rejected → approved
    - approved → rejected (reopen)

    ``reimbursed`` is terminal and set outside these operations.
    """

    VALID_TRANSITIONS = {
        ExpenseStatus.DRAFT: [ExpenseStatus.SUBMITTED],
        ExpenseStatus.SUBMITTED: [ExpenseStatus.APPROVED, ExpenseStatus.REJECTED],
        ExpenseStatus.REJECTED: [ExpenseStatus.APPROVED],
        ExpenseStatus.APPROVED: [ExpenseStatus.REJECTED],
        ExpenseStatus.REIMBURSED: [],  # Terminal state
    }

    OWNER_EDITABLE = {ExpenseStatus.DRAFT, ExpenseStatus.REJECTED}
    OWNER_DELETABLE = {ExpenseStatus.DRAFT}

    @classmethod
    def validate_submit(cls, status: str) -> None:
        if status != ExpenseStatus.DRAFT:
            raise InvalidTransitionError(
                status, ExpenseStatus.SUBMITTED, "Only draft expenses can be submitted"
            )

    @classmethod
    def validate_approve(cls, status: str) -> None:
        if status not in (ExpenseStatus.SUBMITTED, ExpenseStatus.REJECTED):
            raise InvalidTransitionError(
                status,
                ExpenseStatus.APPROVED,
                "Only submitted or rejected expenses can be approved",
            )

    @classmethod
    def validate_reject(cls, status: str) -> None:
        if status not in (ExpenseStatus.SUBMITTED, ExpenseStatus.APPROVED):
            raise InvalidTransitionError(
                status,
                ExpenseStatus.REJECTED,
                "Only submitted or approved expenses can be rejected",
            )


class SummaryStateMachine(StateMachine):
    """State machine for monthly summaries.

    - draft → finalized (one way, no unfinalize)
    - finalized → paid (set out of band)
    """

    VALID_TRANSITIONS = {
        SummaryStatus.DRAFT: [SummaryStatus.FINALIZED],
        SummaryStatus.FINALIZED: [SummaryStatus.PAID],
        SummaryStatus.PAID: [],
    }

    @classmethod
    def validate_finalize(cls, status: str) -> None:
        if status == SummaryStatus.FINALIZED:
            raise InvalidTransitionError(
                status, SummaryStatus.FINALIZED, "Summary already finalized"
            )
        cls.validate_transition(status, SummaryStatus.FINALIZED)
