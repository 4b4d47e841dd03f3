from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import ODRequest, RequestFilter


class RequestRepository(Protocol):
    def create_request(self, request: ODRequest) -> int:
        """Persist a new request (its request_id is ignored) and return the new id."""

        raise NotImplementedError

    def get_request(self, request_id: int) -> Optional[ODRequest]:
        raise NotImplementedError

    def list_requests(self, request_filter: RequestFilter) -> Sequence[ODRequest]:
        """Newest first (created_at DESC). Reconciliation relies on this order."""

        raise NotImplementedError

    def set_status(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        actor_email: str,
        decided_at: datetime,
    ) -> bool:
        """Compare-and-set: only a pending request is updated. False if it was already decided."""

        raise NotImplementedError
