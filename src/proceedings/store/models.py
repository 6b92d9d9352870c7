from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any

from proceedings.contracts.status_policy import ProceedingStatus, sort_messages


def as_utc(value: datetime | date) -> datetime:
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class Message:
    reference: str
    date: datetime
    type: str
    sent_by_me: bool
    id: str | None = None
    slug: str | None = None
    correspondent_address: Any = None
    correspondent_email: str | None = None
    transport_medium: str | None = None
    subject: str | None = None
    content: str | None = None

    def __post_init__(self) -> None:
        self.date = as_utc(self.date)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "reference": self.reference,
            "date": self.date,
            "type": self.type,
            "slug": self.slug,
            "correspondent_address": self.correspondent_address,
            "correspondent_email": self.correspondent_email,
            "transport_medium": self.transport_medium,
            "subject": self.subject,
            "content": self.content,
            "sentByMe": self.sent_by_me,
        }
        return {key: value for key, value in payload.items() if value is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        return cls(
            id=data.get("id"),
            reference=data["reference"],
            date=data["date"],
            type=data.get("type", "response"),
            slug=data.get("slug"),
            correspondent_address=data.get("correspondent_address"),
            correspondent_email=data.get("correspondent_email"),
            transport_medium=data.get("transport_medium"),
            subject=data.get("subject"),
            content=data.get("content"),
            sent_by_me=bool(data.get("sentByMe", False)),
        )


@dataclass
class Proceeding:
    reference: str
    messages: dict[str, Message] = field(default_factory=dict)
    status: ProceedingStatus = ProceedingStatus.WAITING_FOR_RESPONSE

    def sorted_messages(self) -> list[Message]:
        return sort_messages(self.messages.values())

    def newest_message(self) -> Message | None:
        ordered = self.sorted_messages()
        return ordered[-1] if ordered else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "reference": self.reference,
            "messages": {message_id: message.to_dict() for message_id, message in self.messages.items()},
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Proceeding":
        return cls(
            reference=data["reference"],
            messages={
                message_id: Message.from_dict(message)
                for message_id, message in data.get("messages", {}).items()
            },
            status=ProceedingStatus(data.get("status", ProceedingStatus.WAITING_FOR_RESPONSE.value)),
        )
