from proceedings.contracts.privacy_gate import PrivacyAction, PrivacyControls, controls_denying
from proceedings.persist import MemoryStorage, StorageBackend
from proceedings.persist.gateway import PersistenceGateway
from proceedings.persist.json_file import JsonFileStorage
from proceedings.persist.privacy_storage import PrivacyStorage
from proceedings.persist.sqlite_kv import SqliteStorage
from proceedings.store.config import ProceedingsConfig
from proceedings.store.repository import Clock, ProceedingRepository, utc_now


def build_storage(config: ProceedingsConfig, privacy: PrivacyControls) -> StorageBackend:
    if config.storage == "sqlite":
        inner: StorageBackend = SqliteStorage(config.sqlite_path)
    elif config.storage == "memory":
        inner = MemoryStorage()
    else:
        inner = JsonFileStorage(config.state_dir)
    return PrivacyStorage(lambda: privacy.is_allowed(PrivacyAction.SAVE_MY_REQUESTS), inner)


async def open_repository(
    config: ProceedingsConfig,
    privacy: PrivacyControls | None = None,
    clock: Clock = utc_now,
) -> tuple[ProceedingRepository, PersistenceGateway]:
    """Build a repository wired to persistence and wait for hydration."""
    controls = privacy if privacy is not None else controls_denying(set(config.denied_actions))
    repository = ProceedingRepository(
        is_allowed=controls.is_allowed,
        clock=clock,
        overdue_days=config.overdue_days,
        language=config.language,
    )
    gateway = PersistenceGateway(repository, build_storage(config, controls), name=config.store_name)
    gateway.attach()
    await gateway.hydrate()
    return repository, gateway
