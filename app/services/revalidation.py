import threading
import uuid
from abc import ABC, abstractmethod


class ViewCache(ABC):
    """Receives "this view is stale" signals keyed by a logical path."""

    @abstractmethod
    def revalidate_path(self, path: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def version(self, path: str) -> int:
        raise NotImplementedError

    @abstractmethod
    def epoch(self) -> str:
        raise NotImplementedError

    def etag(self, path: str) -> str:
        return f'"{self.epoch()}-{self.version(path)}"'


class InMemoryViewCache(ViewCache):
    def __init__(self) -> None:
        # Versions restart at zero on every boot; the epoch keeps
        # ETags issued by a previous process from matching.
        self._epoch = uuid.uuid4().hex[:12]
        self._versions: dict[str, int] = {}
        self._lock = threading.Lock()

    def revalidate_path(self, path: str) -> None:
        with self._lock:
            self._versions[path] = self._versions.get(path, 0) + 1

    def version(self, path: str) -> int:
        with self._lock:
            return self._versions.get(path, 0)

    def epoch(self) -> str:
        return self._epoch


_view_cache = InMemoryViewCache()


def get_view_cache() -> ViewCache:
    return _view_cache
