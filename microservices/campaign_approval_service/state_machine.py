"""
Campaign Lifecycle State Machine

Closed transition table for campaign status. Every transition the
orchestrator performs is looked up here first.
"""

from enum import Enum
from typing import Dict, FrozenSet, List, Tuple

from .models import CampaignStatus
from .protocols import InvalidCampaignStateError


class CampaignTransition(str, Enum):
    """Named lifecycle transitions"""
    SUBMIT = "submit"
    APPROVE = "approve"
    LAUNCH_FAILED = "launch_failed"
    REQUEST_CHANGES = "request_changes"
    REJECT = "reject"
    PAUSE = "pause"
    ACTIVATE = "activate"
    COMPLETE = "complete"
    CANCEL = "cancel"


_S = CampaignStatus

TRANSITIONS: Dict[CampaignTransition, Tuple[FrozenSet[CampaignStatus], CampaignStatus]] = {
    CampaignTransition.SUBMIT: (
        frozenset({_S.DRAFT, _S.NEEDS_CHANGES, _S.REJECTED}),
        _S.PENDING_REVIEW,
    ),
    CampaignTransition.APPROVE: (frozenset({_S.PENDING_REVIEW}), _S.ACTIVE),
    CampaignTransition.LAUNCH_FAILED: (frozenset({_S.PENDING_REVIEW}), _S.DRAFT),
    CampaignTransition.REQUEST_CHANGES: (frozenset({_S.PENDING_REVIEW}), _S.NEEDS_CHANGES),
    CampaignTransition.REJECT: (frozenset({_S.PENDING_REVIEW}), _S.REJECTED),
    CampaignTransition.PAUSE: (frozenset({_S.ACTIVE}), _S.PAUSED),
    CampaignTransition.ACTIVATE: (frozenset({_S.PAUSED}), _S.ACTIVE),
    CampaignTransition.COMPLETE: (frozenset({_S.ACTIVE, _S.PAUSED}), _S.COMPLETED),
    CampaignTransition.CANCEL: (frozenset({_S.ACTIVE, _S.PAUSED}), _S.CANCELLED),
}


def _check_exhaustive() -> None:
    missing_transitions = set(CampaignTransition) - set(TRANSITIONS)
    if missing_transitions:
        raise RuntimeError(f"Transitions without a rule: {sorted(t.value for t in missing_transitions)}")

    reachable = set()
    for sources, target in TRANSITIONS.values():
        reachable |= sources
        reachable.add(target)
    unreachable = set(CampaignStatus) - reachable
    if unreachable:
        raise RuntimeError(f"Statuses missing from the transition table: {sorted(s.value for s in unreachable)}")


_check_exhaustive()


def can_transition(current: CampaignStatus, transition: CampaignTransition) -> bool:
    sources, _ = TRANSITIONS[transition]
    return current in sources


def next_status(current: CampaignStatus, transition: CampaignTransition) -> CampaignStatus:
    """
    Resolve the target status for a transition.

    Raises:
        InvalidCampaignStateError: if ``transition`` is not allowed from ``current``
    """
    sources, target = TRANSITIONS[transition]
    if current not in sources:
        allowed = ", ".join(sorted(s.value for s in sources))
        raise InvalidCampaignStateError(
            f"Cannot {transition.value} campaign in status {current.value} (allowed from: {allowed})",
            current,
        )
    return target


def allowed_transitions(current: CampaignStatus) -> List[CampaignTransition]:
    """Transitions available from a status, in declaration order"""
    return [t for t in CampaignTransition if can_transition(current, t)]


__all__ = [
    "CampaignTransition",
    "TRANSITIONS",
    "can_transition",
    "next_status",
    "allowed_transitions",
]
