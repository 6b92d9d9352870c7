import os
from dataclasses import dataclass

from proceedings.contracts.privacy_gate import PrivacyAction, parse_actions
from proceedings.contracts.status_policy import DEFAULT_OVERDUE_DAYS

STORAGE_KINDS = ("json", "sqlite", "memory")


@dataclass(frozen=True)
class ProceedingsConfig:
    storage: str
    state_dir: str
    sqlite_path: str
    store_name: str
    overdue_days: int
    language: str
    denied_actions: frozenset[PrivacyAction]


def _overdue_days_from_env() -> int:
    raw = os.getenv("PROCEEDINGS_OVERDUE_DAYS", str(DEFAULT_OVERDUE_DAYS))
    try:
        days = int(raw)
    except ValueError:
        raise ValueError(f"PROCEEDINGS_OVERDUE_DAYS must be an integer, got {raw!r}") from None
    if days < 1:
        raise ValueError("PROCEEDINGS_OVERDUE_DAYS must be >= 1")
    return days


def get_proceedings_config() -> ProceedingsConfig:
    storage = os.getenv("PROCEEDINGS_STORAGE", "json").strip().lower()
    if storage not in STORAGE_KINDS:
        raise ValueError(f"unsupported storage backend: {storage}")

    return ProceedingsConfig(
        storage=storage,
        state_dir=os.getenv("PROCEEDINGS_STATE_DIR", ".proceedings"),
        sqlite_path=os.getenv("PROCEEDINGS_SQLITE_PATH", ".proceedings/proceedings.db"),
        store_name=os.getenv("PROCEEDINGS_STORE_NAME", "Datenanfragen.de-proceedings"),
        overdue_days=_overdue_days_from_env(),
        language=os.getenv("PROCEEDINGS_LANGUAGE", "en"),
        denied_actions=frozenset(parse_actions(os.getenv("PROCEEDINGS_DENIED_ACTIONS", ""))),
    )
