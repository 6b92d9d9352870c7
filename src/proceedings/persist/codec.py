"""Snapshot encoding.

A snapshot is ``{"state": {"proceedings": ..., "_migratedLegacyRequests": ...},
"version": N}``. JSON has no date type, so message dates are written as ISO
text and turned back into datetimes on the way in.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from proceedings.contracts.snapshot_versions import CURRENT_VERSION, SnapshotError, migrate_state
from proceedings.store.models import Proceeding, as_utc


@dataclass
class Snapshot:
    proceedings: dict[str, Proceeding] = field(default_factory=dict)
    migrated_legacy_requests: bool = False
    version: int = CURRENT_VERSION


def encode_date(value: datetime) -> str:
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def decode_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, bool):
        raise SnapshotError(f"invalid message date: {value!r}")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        try:
            return as_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
        except ValueError:
            raise SnapshotError(f"invalid message date: {value!r}") from None
    raise SnapshotError(f"invalid message date: {value!r}")


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return encode_date(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_snapshot(snapshot: Snapshot) -> str:
    payload = {
        "state": {
            "proceedings": {
                reference: proceeding.to_dict() for reference, proceeding in snapshot.proceedings.items()
            },
            "_migratedLegacyRequests": snapshot.migrated_legacy_requests,
        },
        "version": snapshot.version,
    }
    return json.dumps(payload, default=_json_default, ensure_ascii=False)


def rehydrate_dates(state: dict[str, Any]) -> dict[str, Any]:
    proceedings = state.get("proceedings")
    if not proceedings:
        return state
    for proceeding in proceedings.values():
        for message in proceeding.get("messages", {}).values():
            message["date"] = decode_date(message.get("date"))
    return state


def decode_snapshot(
    raw: str,
    current_version: int = CURRENT_VERSION,
    migrations: dict[int, Callable[[dict], dict]] | None = None,
) -> Snapshot:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SnapshotError(f"stored snapshot is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict) or not isinstance(payload.get("state"), dict):
        raise SnapshotError("stored snapshot has no state object")
    version = payload.get("version", 0)
    if not isinstance(version, int) or isinstance(version, bool):
        raise SnapshotError(f"stored snapshot has an invalid version: {version!r}")

    state = migrate_state(payload["state"], version, current_version=current_version, migrations=migrations)

    proceedings: dict[str, Proceeding] = {}
    try:
        state = rehydrate_dates(state)
        for reference, item in (state.get("proceedings") or {}).items():
            proceedings[reference] = Proceeding.from_dict({"reference": reference, **item})
    except SnapshotError:
        raise
    except (KeyError, TypeError, AttributeError, ValueError) as exc:
        raise SnapshotError(f"stored proceedings are malformed: {exc}") from exc

    return Snapshot(
        proceedings=proceedings,
        migrated_legacy_requests=bool(state.get("_migratedLegacyRequests", False)),
        version=version,
    )
