import logging
from typing import Callable

from proceedings.persist import StorageBackend

logger = logging.getLogger(__name__)


class PrivacyStorage(StorageBackend):
    """Passes calls through to ``inner`` only while ``is_allowed()`` holds.

    The predicate is evaluated on every call so consent changes apply
    immediately. A denied read looks like an empty slot.
    """

    def __init__(self, is_allowed: Callable[[], bool], inner: StorageBackend):
        self._is_allowed = is_allowed
        self._inner = inner

    def get_item(self, name: str) -> str | None:
        if not self._is_allowed():
            logger.debug("read of %s suppressed by privacy settings", name)
            return None
        return self._inner.get_item(name)

    def set_item(self, name: str, value: str) -> None:
        if not self._is_allowed():
            logger.debug("write of %s suppressed by privacy settings", name)
            return
        self._inner.set_item(name, value)

    def remove_item(self, name: str) -> None:
        if not self._is_allowed():
            return
        self._inner.remove_item(name)
