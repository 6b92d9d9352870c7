from dataclasses import replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Callable, Mapping

from proceedings.contracts.message_ids import next_message_id, reference_of
from proceedings.contracts.privacy_gate import PrivacyAction, PrivacyPredicate, always_allow
from proceedings.contracts.status_policy import DEFAULT_OVERDUE_DAYS, ProceedingStatus, derive_status
from proceedings.store.models import Message, Proceeding
from proceedings.store.requests import RequestView, SupportsRequestView, as_request_view, proceeding_from_request
from proceedings.store.subjects import SubjectLookup, lookup_subject, subject_key

Clock = Callable[[], datetime]
Listener = Callable[["ProceedingRepository"], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProceedingNotFoundError(ValueError):
    def __init__(self, message: Message) -> None:
        super().__init__("Adding the message failed: No proceeding exists for the given reference.")
        self.message = message


class ProceedingRepository:
    """In-memory proceedings keyed by reference.

    Mutations run synchronously and notify subscribers afterwards; persistence
    is one such subscriber. Only ``add_proceeding`` consults the privacy gate.
    """

    def __init__(
        self,
        is_allowed: PrivacyPredicate = always_allow,
        clock: Clock = utc_now,
        overdue_days: int = DEFAULT_OVERDUE_DAYS,
        subject_lookup: SubjectLookup = lookup_subject,
        language: str | None = None,
    ) -> None:
        if overdue_days < 1:
            raise ValueError("overdue_days must be >= 1")
        self._proceedings: dict[str, Proceeding] = {}
        self._is_allowed = is_allowed
        self._clock = clock
        self._overdue_days = overdue_days
        self._subject_lookup = subject_lookup
        self._language = language
        self._listeners: list[Listener] = []
        self._has_hydrated = False
        self._migrated_legacy_requests = False

    @property
    def proceedings(self) -> Mapping[str, Proceeding]:
        return MappingProxyType(self._proceedings)

    @property
    def has_hydrated(self) -> bool:
        return self._has_hydrated

    @property
    def migrated_legacy_requests(self) -> bool:
        return self._migrated_legacy_requests

    @property
    def overdue_days(self) -> int:
        return self._overdue_days

    def get(self, reference: str) -> Proceeding | None:
        return self._proceedings.get(reference)

    def sorted_messages(self, reference: str) -> list[Message]:
        proceeding = self._proceedings.get(reference)
        return proceeding.sorted_messages() if proceeding else []

    def newest_message(self, reference: str) -> Message | None:
        proceeding = self._proceedings.get(reference)
        return proceeding.newest_message() if proceeding else None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def add_proceeding(self, proceeding: Proceeding) -> bool:
        if not self._is_allowed(PrivacyAction.SAVE_MY_REQUESTS):
            return False
        self._proceedings[proceeding.reference] = proceeding
        self._notify()
        return True

    def add_request(self, request: SupportsRequestView | RequestView) -> bool:
        view = as_request_view(request)
        subject = None
        if not view.is_custom:
            subject = self._subject_lookup(subject_key(view.type), view.language or self._language)
        return self.add_proceeding(proceeding_from_request(view, subject=subject))

    def add_message(self, message: Message) -> Message:
        proceeding = self._proceedings.get(message.reference)
        if proceeding is None:
            raise ProceedingNotFoundError(message)

        message_id = next_message_id(message.reference, list(proceeding.messages.keys()))
        stored = replace(message, id=message_id)
        proceeding.messages[message_id] = stored
        proceeding.status = self._status_for(proceeding)
        self._notify()
        return stored

    def remove_message(self, message_id: str) -> None:
        reference = reference_of(message_id)
        if reference is None:
            return
        proceeding = self._proceedings.get(reference)
        if proceeding is None:
            return
        proceeding.messages.pop(message_id, None)
        proceeding.status = self._status_for(proceeding)
        self._notify()

    def add_attachment(self, message_id: str, file: Any) -> None:
        # No file storage exists for attachments yet.
        raise NotImplementedError("Not implemented")

    def remove_proceeding(self, reference: str) -> None:
        if self._proceedings.pop(reference, None) is not None:
            self._notify()

    def clear_proceedings(self) -> None:
        self._proceedings = {}
        self._notify()

    def update_statuses(self) -> None:
        for proceeding in self._proceedings.values():
            proceeding.status = self._status_for(proceeding)
        self._notify()

    def mark_done(self, reference: str) -> None:
        proceeding = self._proceedings.get(reference)
        if proceeding is None:
            return
        proceeding.status = ProceedingStatus.DONE
        self._notify()

    def migration_done(self) -> None:
        self._migrated_legacy_requests = True
        self._notify()

    def mark_hydrated(self) -> None:
        self._has_hydrated = True
        self._notify()

    def load_state(self, proceedings: dict[str, Proceeding], migrated_legacy_requests: bool) -> None:
        """Replace the held proceedings with a restored snapshot."""
        self._proceedings = dict(proceedings)
        self._migrated_legacy_requests = self._migrated_legacy_requests or migrated_legacy_requests
        self._notify()

    def _status_for(self, proceeding: Proceeding) -> ProceedingStatus:
        return derive_status(
            proceeding.status,
            proceeding.messages.values(),
            now=self._clock(),
            overdue_days=self._overdue_days,
        )

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
