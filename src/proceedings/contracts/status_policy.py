from datetime import datetime, timedelta
from enum import Enum
from functools import cmp_to_key
from typing import Iterable, Protocol

DEFAULT_OVERDUE_DAYS = 32


class ProceedingStatus(str, Enum):
    WAITING_FOR_RESPONSE = "waitingForResponse"
    OVERDUE = "overdue"
    ACTION_NEEDED = "actionNeeded"
    DONE = "done"


class OrderedMessage(Protocol):
    date: datetime
    slug: str | None
    reference: str
    sent_by_me: bool


def compare_messages(first: OrderedMessage, second: OrderedMessage) -> int:
    if first.date != second.date:
        return -1 if first.date < second.date else 1

    # A missing slug sorts before every real one.
    first_slug = (first.slug is not None, first.slug or "")
    second_slug = (second.slug is not None, second.slug or "")
    if first_slug != second_slug:
        return -1 if first_slug < second_slug else 1

    if first.reference != second.reference:
        return -1 if first.reference < second.reference else 1
    return 0


message_sort_key = cmp_to_key(compare_messages)


def sort_messages(messages: Iterable[OrderedMessage]) -> list:
    return sorted(messages, key=message_sort_key)


def newest_message(messages: Iterable[OrderedMessage]):
    ordered = sort_messages(messages)
    return ordered[-1] if ordered else None


def due_date(message: OrderedMessage, overdue_days: int = DEFAULT_OVERDUE_DAYS) -> datetime:
    return message.date + timedelta(days=overdue_days)


def derive_status(
    current: ProceedingStatus,
    messages: Iterable[OrderedMessage],
    now: datetime,
    overdue_days: int = DEFAULT_OVERDUE_DAYS,
) -> ProceedingStatus:
    if current == ProceedingStatus.DONE:
        return ProceedingStatus.DONE

    newest = newest_message(messages)
    if newest is not None and newest.sent_by_me:
        if due_date(newest, overdue_days) > now:
            return ProceedingStatus.WAITING_FOR_RESPONSE
        return ProceedingStatus.OVERDUE

    return ProceedingStatus.ACTION_NEEDED
