"""
Persistent key/value slots backed by JSON files.

One directory is one storage namespace; every slot is a file
``<root>/<key>.json`` holding the full serialization of its value.

    store = SlotStore(Path("runtime/store"))
    phrases = PersistentSlot(store, "phrases", default=SEED_PHRASES)
    phrases.load()                                  # read once at construction
    phrases.mutate(lambda items: items + [new])     # write-through, every time
"""

import copy
import json
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Generic, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")

_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class SlotStore:
    """Directory of named slots. Each write replaces the whole file atomically."""

    def __init__(self, root_dir: Union[str, Path]) -> None:
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid slot key: {key!r}")
        return self.root_dir / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        """Return the raw slot text, or None if the slot does not exist."""
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, text: str) -> None:
        path = self._path(key)
        fd, tmp_path = tempfile.mkstemp(dir=self.root_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def remove(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()

    def exists(self, key: str) -> bool:
        return self._path(key).exists()


class PersistentSlot(Generic[T]):
    """In-memory value mirrored to one slot.

    The slot is read once when the object is built. A missing, unreadable or
    corrupt slot yields the default; corrupt JSON is logged, never raised.
    When ``expected_type`` is given, a decoded value of another type counts
    as corrupt too. Every mutation re-serializes the full value and writes
    it through.
    """

    def __init__(
        self,
        store: SlotStore,
        key: str,
        default: Union[T, Callable[[], T]],
        expected_type: Optional[type] = None,
    ) -> None:
        self._store = store
        self.key = key
        self._default = default
        self._expected_type = expected_type
        self._lock = threading.RLock()
        self._value: T = self._read_initial()

    def _default_value(self) -> T:
        if callable(self._default):
            return self._default()
        return copy.deepcopy(self._default)

    def _read_initial(self) -> T:
        try:
            raw = self._store.read(self.key)
        except OSError as exc:
            logger.error("Error reading storage slot '%s': %s", self.key, exc)
            return self._default_value()
        except UnicodeDecodeError as exc:
            logger.warning("Storage slot '%s' is not valid UTF-8, using default: %s", self.key, exc)
            return self._default_value()
        if not raw:
            return self._default_value()
        try:
            value = json.loads(raw)
        except ValueError as exc:
            logger.warning("Storage slot '%s' is corrupt, using default: %s", self.key, exc)
            return self._default_value()
        if self._expected_type is not None and not isinstance(value, self._expected_type):
            logger.warning(
                "Storage slot '%s' holds %s, expected %s; using default",
                self.key, type(value).__name__, self._expected_type.__name__,
            )
            return self._default_value()
        return value

    def load(self) -> T:
        return self._value

    def mutate(self, fn: Callable[[T], T]) -> T:
        """Apply ``fn`` to the current value, persist and return the result."""
        with self._lock:
            new_value = fn(self._value)
            self._store.write(self.key, json.dumps(new_value, ensure_ascii=False))
            self._value = new_value
            return new_value

    def set(self, value: T) -> T:
        return self.mutate(lambda _current: value)

    def clear(self) -> None:
        """Remove the slot and fall back to the default value."""
        with self._lock:
            self._store.remove(self.key)
            self._value = self._default_value()


__all__ = ["SlotStore", "PersistentSlot"]
