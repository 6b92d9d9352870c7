from typing import Callable

CURRENT_VERSION = 0

# Keyed by the version a step upgrades from; each step returns the state for version + 1.
MIGRATIONS: dict[int, Callable[[dict], dict]] = {}


class SnapshotError(ValueError):
    pass


class SnapshotVersionError(SnapshotError):
    pass


def migrate_state(
    state: dict,
    version: int,
    current_version: int = CURRENT_VERSION,
    migrations: dict[int, Callable[[dict], dict]] | None = None,
) -> dict:
    steps = MIGRATIONS if migrations is None else migrations
    if version > current_version:
        raise SnapshotVersionError(
            f"stored snapshot version {version} is newer than supported version {current_version}"
        )

    migrated = state
    for from_version in range(version, current_version):
        step = steps.get(from_version)
        if step is None:
            raise SnapshotVersionError(f"no migration registered from version {from_version}")
        migrated = step(migrated)
    return migrated
