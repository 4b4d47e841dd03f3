"""Approval lifecycle of an OD request.

    pending --> approved
    pending --> rejected

approved and rejected are terminal. Authorization of the actor is the caller's
job; the machine only checks that the move exists.
"""
from __future__ import annotations

import dataclasses
from datetime import datetime

from ..core.enums import RequestStatus
from ..core.exceptions import InvalidTransitionError
from .model import ODRequest

TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED}),
    RequestStatus.APPROVED: frozenset(),
    RequestStatus.REJECTED: frozenset(),
}


def can_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def transition(request: ODRequest, target: RequestStatus, *, actor_email: str, now: datetime) -> ODRequest:
    if not can_transition(request.status, target):
        raise InvalidTransitionError(
            f"Request {request.request_id} cannot move from {request.status.value} to {target.value}"
        )
    return dataclasses.replace(request, status=target, approved_by=actor_email, approved_at=now)
