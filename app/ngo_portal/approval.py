"""
Approval state for company and NGO accounts.

The state lives in three columns on ``users`` (``is_approved``,
``approval_status``, ``rejection_reason``). This module reads those columns
into an ``ApprovalState``, decides whether a move is legal with a fixed
transition table and writes the result back, so the columns never disagree
with each other.

    pending  -> approved | rejected
    approved -> approved            (no-op)
    rejected -> approved            (overturns the rejection)

Nothing ever moves back to ``pending``.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ngo_portal.constant_file import APPROVAL_ROLES
from ngo_portal.exceptions import InvalidTransitionError, ValidationError


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


TRANSITIONS = {
    ApprovalStatus.PENDING: {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED},
    ApprovalStatus.APPROVED: {ApprovalStatus.APPROVED},
    ApprovalStatus.REJECTED: {ApprovalStatus.APPROVED},
}


@dataclass(frozen=True)
class ApprovalState:
    status: ApprovalStatus
    reason: Optional[str] = None

    @property
    def is_approved(self) -> bool:
        return self.status is ApprovalStatus.APPROVED


def requires_approval(role: Optional[str]) -> bool:
    return role in APPROVAL_ROLES


def initial_state(role: str) -> Optional[ApprovalState]:
    """State a new account starts in; ``None`` when the workflow does not apply."""
    if requires_approval(role):
        return ApprovalState(ApprovalStatus.PENDING)
    return None


def read_state(user) -> Optional[ApprovalState]:
    if not requires_approval(user.role):
        return None
    # a company/ngo row without a status predates the workflow; treat it as pending
    status = ApprovalStatus(user.approval_status or ApprovalStatus.PENDING.value)
    reason = user.rejection_reason if status is ApprovalStatus.REJECTED else None
    return ApprovalState(status, reason)


def write_state(user, state: Optional[ApprovalState]):
    if state is None:
        user.is_approved = None
        user.approval_status = None
        user.rejection_reason = None
        return
    user.is_approved = state.is_approved
    user.approval_status = state.status.value
    user.rejection_reason = state.reason


def transition(current: ApprovalState, target: ApprovalState) -> ApprovalState:
    if target.status not in TRANSITIONS[current.status]:
        raise InvalidTransitionError(current.status.value, target.status.value)
    return target


def approve(user, admin_id: int) -> ApprovalState:
    current = read_state(user)
    if current is None:
        raise ValidationError("Only companies and NGOs can be approved")
    new_state = transition(current, ApprovalState(ApprovalStatus.APPROVED))
    if current.status is not ApprovalStatus.APPROVED:
        write_state(user, new_state)
        user.approval_date = datetime.utcnow()
        user.approved_by = admin_id
    return new_state


def reject(user, reason: Optional[str], admin_id: int) -> ApprovalState:
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("Rejection reason is required")
    current = read_state(user)
    if current is None:
        raise ValidationError("Only companies and NGOs can be rejected")
    new_state = transition(current, ApprovalState(ApprovalStatus.REJECTED, reason))
    write_state(user, new_state)
    user.approval_date = datetime.utcnow()
    user.approved_by = admin_id
    return new_state


def can_use_account(user) -> bool:
    """Login gate: accounts outside the workflow are always usable."""
    state = read_state(user)
    return state is None or state.is_approved
