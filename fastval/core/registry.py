from __future__ import annotations

import threading
import uuid
import weakref
from dataclasses import dataclass, field
from typing import Any, Callable

SCHEMA_KEY_ATTR = "__schema_key__"


@dataclass
class SchemaEntry:
    name: str
    rule_set: dict[str, Any] | None = None
    compiled: Callable[[Any], Any] | None = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class SchemaRegistry:
    """
    Process-wide arena of rule sets and compiled validators.

    Entries are keyed by a stable string assigned to a class the first time it
    is registered, so the arena never holds the class object itself. Types that
    refuse new attributes (built-ins such as `str`) keep their key in a weak
    side table instead. Entries live as long as the process.
    """

    def __init__(self) -> None:
        self._entries: dict[str, SchemaEntry] = {}
        self._lock = threading.Lock()
        self._foreign_keys: weakref.WeakKeyDictionary[type, str] = weakref.WeakKeyDictionary()

    def _stored_key(self, target: type) -> str | None:
        # read from __dict__ so subclasses don't share the parent's entry
        return target.__dict__.get(SCHEMA_KEY_ATTR) or self._foreign_keys.get(target)

    def key_for(self, target: type) -> str:
        key = self._stored_key(target)
        if key is None:
            key = f"{target.__module__}.{target.__qualname__}:{uuid.uuid4().hex[:12]}"
            try:
                setattr(target, SCHEMA_KEY_ATTR, key)
            except TypeError:
                self._foreign_keys[target] = key
        return key

    def entry(self, target: type) -> SchemaEntry:
        with self._lock:
            key = self.key_for(target)
            found = self._entries.get(key)
            if found is None:
                found = SchemaEntry(name=target.__name__)
                self._entries[key] = found
            return found

    def peek(self, target: type) -> SchemaEntry | None:
        key = self._stored_key(target) if isinstance(target, type) else None
        if key is None:
            return None
        return self._entries.get(key)

    def __len__(self) -> int:
        return len(self._entries)


registry = SchemaRegistry()
