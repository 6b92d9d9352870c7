"""External request records and their projection into proceedings.

Two shapes reach this module: ``GeneratedRequest`` comes from the request
generator, ``UserRequest`` is the record kept by the older "my requests"
list. Each adapts itself to a ``RequestView`` so the projection never has
to inspect which shape it was given.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Protocol

from proceedings.contracts.message_ids import format_message_id
from proceedings.contracts.status_policy import ProceedingStatus
from proceedings.store.models import Message, Proceeding, as_utc

CUSTOM_TYPE = "custom"
DEFAULT_RESPONSE_TYPE = "response"


@dataclass(frozen=True)
class RequestView:
    reference: str
    date: datetime
    type: str
    response_type: str | None
    slug: str | None
    address: Any
    email: str | None
    transport_medium: str | None
    language: str | None = None

    @property
    def is_custom(self) -> bool:
        return self.type == CUSTOM_TYPE

    @property
    def message_type(self) -> str:
        if self.is_custom:
            return self.response_type or DEFAULT_RESPONSE_TYPE
        return self.type


class SupportsRequestView(Protocol):
    def to_view(self) -> RequestView:
        ...


@dataclass(frozen=True)
class GeneratedRequest:
    reference: str
    date: datetime | date | str
    type: str
    recipient_address: Any = None
    email: str | None = None
    transport_medium: str | None = None
    slug: str | None = None
    response_type: str | None = None
    language: str | None = None

    def to_view(self) -> RequestView:
        return RequestView(
            reference=self.reference,
            date=_coerce_date(self.date),
            type=self.type,
            response_type=self.response_type,
            slug=self.slug,
            address=self.recipient_address,
            email=self.email,
            transport_medium=self.transport_medium,
            language=self.language,
        )


@dataclass(frozen=True)
class UserRequest:
    reference: str
    date: datetime | date | str
    type: str
    recipient: Any = None
    email: str | None = None
    via: str | None = None
    slug: str | None = None
    response_type: str | None = None

    def to_view(self) -> RequestView:
        return RequestView(
            reference=self.reference,
            date=_coerce_date(self.date),
            type=self.type,
            response_type=self.response_type,
            slug=self.slug,
            address=self.recipient,
            email=self.email,
            transport_medium=self.via,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRequest":
        return cls(
            reference=data["reference"],
            date=data["date"],
            type=data.get("type", "access"),
            recipient=data.get("recipient"),
            email=data.get("email"),
            via=data.get("via"),
            slug=data.get("slug"),
            response_type=data.get("response_type"),
        )


def _coerce_date(value: datetime | date | str) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return as_utc(value)


def as_request_view(request: SupportsRequestView | RequestView) -> RequestView:
    if isinstance(request, RequestView):
        return request
    return request.to_view()


def proceeding_from_request(
    request: SupportsRequestView | RequestView,
    subject: str | None = None,
    content: str | None = None,
) -> Proceeding:
    view = as_request_view(request)
    message_id = format_message_id(view.reference, 0)
    message = Message(
        id=message_id,
        reference=view.reference,
        date=view.date,
        type=view.message_type,
        slug=view.slug,
        correspondent_address=view.address,
        correspondent_email=view.email,
        transport_medium=view.transport_medium,
        subject=subject,
        content=content,
        sent_by_me=True,
    )
    return Proceeding(
        reference=view.reference,
        messages={message_id: message},
        status=ProceedingStatus.WAITING_FOR_RESPONSE,
    )
