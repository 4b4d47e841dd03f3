from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import RequestStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Attachment:
    """Supporting document stored inline (base64) next to the request."""

    content_b64: str
    mime_type: str
    filename: str

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.content_b64}"


@dataclass(frozen=True)
class ODRequest:
    request_id: int
    student_email: str
    student_name: str
    student_department: str
    student_section: str
    event_id: Optional[int]
    event_name: str
    from_date: date
    to_date: date
    status: RequestStatus
    created_at: datetime
    attachment: Optional[Attachment] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None

    def __post_init__(self):
        if self.from_date is None or self.to_date is None:
            raise ValidationError("From and To dates are required")
        if self.to_date < self.from_date:
            raise ValidationError("From date must be on or before To date")

    def covers(self, day: date) -> bool:
        """Inclusive on both ends, compared as calendar days."""
        return self.from_date <= day <= self.to_date


@dataclass(frozen=True)
class RequestFilter:
    student_email: Optional[str] = None
    status: Optional[RequestStatus] = None
    department: Optional[str] = None
    section: Optional[str] = None
    limit: Optional[int] = DEFAULT_LIST_LIMIT
