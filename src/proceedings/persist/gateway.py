import asyncio
import logging

from proceedings.contracts.snapshot_versions import CURRENT_VERSION
from proceedings.persist import StorageBackend, StorageError
from proceedings.persist.codec import Snapshot, decode_snapshot, encode_snapshot
from proceedings.store.repository import ProceedingRepository

logger = logging.getLogger(__name__)

DEFAULT_STORE_NAME = "Datenanfragen.de-proceedings"


class PersistenceGateway:
    """Loads and saves a repository snapshot in one storage slot.

    Saves triggered by repository changes start once hydration succeeded. They
    run as background tasks when an event loop is running and synchronously
    otherwise. Failures are logged, kept in ``last_error`` and raised by
    ``flush()``.
    """

    def __init__(
        self,
        repository: ProceedingRepository,
        storage: StorageBackend,
        name: str = DEFAULT_STORE_NAME,
    ) -> None:
        self.repository = repository
        self.storage = storage
        self.name = name
        self.last_error: BaseException | None = None
        self._pending: set[asyncio.Task] = set()
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None
        self._hydrating = False
        self._unsubscribe = None

    def attach(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.repository.subscribe(self._on_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def snapshot(self) -> Snapshot:
        return Snapshot(
            proceedings=dict(self.repository.proceedings),
            migrated_legacy_requests=self.repository.migrated_legacy_requests,
            version=CURRENT_VERSION,
        )

    async def hydrate(self) -> None:
        raw = await asyncio.to_thread(self.storage.get_item, self.name)
        if raw is None:
            logger.debug("no stored snapshot under %s", self.name)
        else:
            snapshot = decode_snapshot(raw)
            if snapshot.version != CURRENT_VERSION:
                logger.info("migrated snapshot %s from version %d to %d", self.name, snapshot.version, CURRENT_VERSION)
            self._hydrating = True
            try:
                self.repository.load_state(snapshot.proceedings, snapshot.migrated_legacy_requests)
            finally:
                self._hydrating = False
            logger.debug("hydrated %d proceedings from %s", len(snapshot.proceedings), self.name)

        self._hydrating = True
        try:
            self.repository.mark_hydrated()
        finally:
            self._hydrating = False
        self.repository.update_statuses()

    async def save(self) -> None:
        await self._write(encode_snapshot(self.snapshot()))

    def schedule_save(self) -> None:
        try:
            payload = encode_snapshot(self.snapshot())
        except (TypeError, ValueError) as exc:
            error = StorageError(f"snapshot {self.name} is not serializable: {exc}")
            error.__cause__ = exc
            self._record_failure(error)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                self.storage.set_item(self.name, payload)
            except StorageError as exc:
                self._record_failure(exc)
            return

        task = loop.create_task(self._write(payload))
        self._pending.add(task)
        task.add_done_callback(self._on_task_done)

    async def flush(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        self.raise_pending_error()

    def raise_pending_error(self) -> None:
        error, self.last_error = self.last_error, None
        if error is None:
            return
        if isinstance(error, StorageError):
            raise error
        raise StorageError(f"saving {self.name} failed: {error}") from error

    async def clear_storage(self) -> None:
        await asyncio.to_thread(self.storage.remove_item, self.name)

    async def _write(self, payload: str) -> None:
        async with self._get_lock():
            await asyncio.to_thread(self.storage.set_item, self.name, payload)
        logger.debug("saved snapshot %s", self.name)

    def _get_lock(self) -> asyncio.Lock:
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def _on_change(self, repository: ProceedingRepository) -> None:
        # Nothing is written until a hydrate succeeded, so an unreadable slot stays intact.
        if self._hydrating or not repository.has_hydrated:
            return
        self.schedule_save()

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._record_failure(error)

    def _record_failure(self, error: BaseException) -> None:
        logger.error("saving snapshot %s failed", self.name, exc_info=error)
        self.last_error = error
