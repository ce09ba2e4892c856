from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Protocol


class StateBackend(Protocol):
    """Durable string key-value map with named string sets.

    ``write`` applies every value and set member in one atomic step; a value of
    ``None`` deletes the key. ``add_member`` reports whether the member was new.
    ``get_or_create_value`` stores ``value`` only while both ``key`` and
    ``unless_present`` are absent, and returns None when ``unless_present`` is set.
    """

    async def get_value(self, key: str) -> str | None: ...

    async def get_or_create_value(
        self,
        key: str,
        value: str,
        *,
        unless_present: str | None = None,
    ) -> str | None: ...

    async def write(
        self,
        *,
        values: Mapping[str, str | None] | None = None,
        members: Iterable[tuple[str, str]] = (),
    ) -> None: ...

    async def add_member(self, set_name: str, member: str) -> bool: ...

    async def has_member(self, set_name: str, member: str) -> bool: ...

    async def list_members(self, set_name: str) -> list[str]: ...

    async def close(self) -> None: ...


class InMemoryStateBackend:
    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.sets: dict[str, list[str]] = {}
        self._lock = asyncio.Lock()

    async def get_value(self, key: str) -> str | None:
        return self.values.get(key)

    async def get_or_create_value(
        self,
        key: str,
        value: str,
        *,
        unless_present: str | None = None,
    ) -> str | None:
        async with self._lock:
            if unless_present is not None and unless_present in self.values:
                return None
            return self.values.setdefault(key, value)

    async def write(
        self,
        *,
        values: Mapping[str, str | None] | None = None,
        members: Iterable[tuple[str, str]] = (),
    ) -> None:
        async with self._lock:
            for key, value in (values or {}).items():
                if value is None:
                    self.values.pop(key, None)
                else:
                    self.values[key] = value
            for set_name, member in members:
                self._add(set_name, member)

    async def add_member(self, set_name: str, member: str) -> bool:
        async with self._lock:
            return self._add(set_name, member)

    async def has_member(self, set_name: str, member: str) -> bool:
        return member in self.sets.get(set_name, [])

    async def list_members(self, set_name: str) -> list[str]:
        return list(self.sets.get(set_name, []))

    async def close(self) -> None:
        return None

    def _add(self, set_name: str, member: str) -> bool:
        existing = self.sets.setdefault(set_name, [])
        if member in existing:
            return False
        existing.append(member)
        return True
