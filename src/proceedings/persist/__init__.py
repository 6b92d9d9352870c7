from abc import ABC, abstractmethod


class StorageError(RuntimeError):
    pass


class StorageBackend(ABC):
    @abstractmethod
    def get_item(self, name: str) -> str | None:
        """Return the stored value for ``name`` or None if nothing is stored."""
        pass

    @abstractmethod
    def set_item(self, name: str, value: str) -> None:
        """Store ``value`` under ``name``, replacing any previous value."""
        pass

    @abstractmethod
    def remove_item(self, name: str) -> None:
        """Delete the value stored under ``name``. Missing names are ignored."""
        pass


class MemoryStorage(StorageBackend):
    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, name: str) -> str | None:
        return self._items.get(name)

    def set_item(self, name: str, value: str) -> None:
        self._items[name] = value

    def remove_item(self, name: str) -> None:
        self._items.pop(name, None)
