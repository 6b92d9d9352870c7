from dataclasses import dataclass, field
from enum import Enum
from typing import Callable


class PrivacyAction(str, Enum):
    SAVE_MY_REQUESTS = "save_my_requests"
    SAVE_ID_DATA = "save_id_data"
    SAVE_WIZARD_ENTRIES = "save_wizard_entries"
    SAVE_SEARCHES = "save_searches"


PrivacyPredicate = Callable[[PrivacyAction], bool]

DEFAULT_CONSENT: dict[PrivacyAction, bool] = {
    PrivacyAction.SAVE_MY_REQUESTS: True,
    PrivacyAction.SAVE_ID_DATA: True,
    PrivacyAction.SAVE_WIZARD_ENTRIES: True,
    PrivacyAction.SAVE_SEARCHES: True,
}


@dataclass
class PrivacyControls:
    """Mutable consent settings; ``is_allowed`` is the predicate handed to stores."""

    consent: dict[PrivacyAction, bool] = field(default_factory=lambda: dict(DEFAULT_CONSENT))

    def is_allowed(self, action: PrivacyAction) -> bool:
        return bool(self.consent.get(action, False))

    def allow(self, action: PrivacyAction) -> None:
        self.consent[action] = True

    def deny(self, action: PrivacyAction) -> None:
        self.consent[action] = False


def parse_actions(raw: str) -> set[PrivacyAction]:
    actions: set[PrivacyAction] = set()
    for item in raw.split(","):
        name = item.strip().lower()
        if not name:
            continue
        try:
            actions.add(PrivacyAction(name))
        except ValueError:
            raise ValueError(f"unknown privacy action: {name}") from None
    return actions


def controls_denying(actions: set[PrivacyAction]) -> PrivacyControls:
    controls = PrivacyControls()
    for action in actions:
        controls.deny(action)
    return controls


def always_allow(action: PrivacyAction) -> bool:
    return True
