"""Environment backends.

The loader writes through and the binder reads through an Environment, so
the process environment can be swapped for a plain mapping when state has
to stay isolated (tests, embedding several configurations in one process).
"""

import os
from collections.abc import MutableMapping
from typing import Protocol


class Environment(Protocol):
    """Key/value store the loader commits to and the binder reads from."""

    def get(self, key: str) -> str | None:
        """Return the value of key, or None when unset."""
        ...

    def set(self, key: str, value: str) -> None:
        """Set key. Raises ValueError when the store rejects the pair."""
        ...

    def __contains__(self, key: object) -> bool: ...


class MappingEnvironment:
    """Environment backed by a mutable mapping (a fresh dict by default)."""

    def __init__(self, data: MutableMapping[str, str] | None = None):
        self.data: MutableMapping[str, str] = {} if data is None else data

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if not key or "=" in key or "\0" in key or "\0" in value:
            raise ValueError(f"illegal environment variable name or value: {key!r}")
        self.data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __repr__(self) -> str:
        return f"MappingEnvironment({dict(self.data)!r})"


class ProcessEnvironment(MappingEnvironment):
    """The real process environment (os.environ).

    Entries are only ever added or replaced, never removed.
    """

    def __init__(self):
        super().__init__(os.environ)

    def __repr__(self) -> str:
        return "ProcessEnvironment()"
