import json
import logging
from pathlib import Path
from typing import Any, Iterable

from proceedings.store.repository import ProceedingRepository
from proceedings.store.requests import UserRequest, proceeding_from_request

logger = logging.getLogger(__name__)


def load_legacy_requests(path: str | Path) -> list[UserRequest]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("legacy requests file must contain an object keyed by reference")

    requests: list[UserRequest] = []
    for reference, item in payload.items():
        if not isinstance(item, dict):
            logger.warning("skipping malformed legacy request %s", reference)
            continue
        record: dict[str, Any] = {"reference": reference, **item}
        try:
            request = UserRequest.from_dict(record)
            request.to_view()
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("skipping invalid legacy request %s: %s", reference, exc)
            continue
        requests.append(request)
    return requests


def migrate_legacy_requests(repository: ProceedingRepository, requests: Iterable[UserRequest]) -> int:
    """Import requests saved before proceedings existed. Runs at most once."""
    if repository.migrated_legacy_requests:
        logger.debug("legacy requests already migrated")
        return 0

    imported = 0
    for request in requests:
        if repository.get(request.reference) is not None:
            continue
        if repository.add_proceeding(proceeding_from_request(request)):
            imported += 1

    repository.migration_done()
    logger.info("migrated %d legacy requests", imported)
    return imported
