import logging
import re
from pathlib import Path

from proceedings.persist import StorageBackend, StorageError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class JsonFileStorage(StorageBackend):
    """One file per key inside ``state_dir``."""

    def __init__(self, state_dir: str = ".proceedings"):
        self.state_dir = Path(state_dir)

    def _path_for(self, name: str) -> Path:
        safe_name = _UNSAFE_CHARS.sub("_", name).lstrip(".")
        return self.state_dir / f"{safe_name}.json"

    def get_item(self, name: str) -> str | None:
        path = self._path_for(name)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"failed to read {path}: {exc}") from exc

    def set_item(self, name: str, value: str) -> None:
        path = self._path_for(name)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as exc:
            raise StorageError(f"failed to write {path}: {exc}") from exc
        logger.debug("wrote %d bytes to %s", len(value), path)

    def remove_item(self, name: str) -> None:
        path = self._path_for(name)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"failed to remove {path}: {exc}") from exc
