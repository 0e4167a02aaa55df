import threading
from typing import Dict, Mapping, Optional, Protocol

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}


def is_truthy(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() in _TRUE_VALUES


class PropertyStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def snapshot(self) -> Dict[str, str]:
        ...

    def consume_flag(self, key: str) -> bool:
        ...


class InMemoryPropertyStore:
    """Thread-safe string key/value store for runtime properties."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._values)

    def consume_flag(self, key: str) -> bool:
        """Reset a boolean flag, returning True if this call saw it set."""
        with self._lock:
            if not is_truthy(self._values.get(key)):
                return False
            self._values[key] = "false"
            return True
