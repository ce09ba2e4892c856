from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.ext.asyncio import AsyncEngine

from shinara_sdk.db.repo.dialect_insert import SUPPORTED_DIALECTS
from shinara_sdk.db.repo.state_set_members_repo import StateSetMembersRepo
from shinara_sdk.db.repo.state_values_repo import StateValuesRepo
from shinara_sdk.db.session import build_engine, build_sessionmaker, create_schema
from shinara_sdk.errors import ConfigError

logger = structlog.get_logger(__name__)


class SqlStateBackend:
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._sessionmaker = build_sessionmaker(engine)

    @classmethod
    async def open(cls, database_url: str) -> SqlStateBackend:
        try:
            dialect_name = make_url(database_url).get_backend_name()
        except ArgumentError as exc:
            raise ConfigError(f"Invalid state store URL: {exc}") from exc
        if dialect_name not in SUPPORTED_DIALECTS:
            raise ConfigError(f"Unsupported state store dialect: {dialect_name}")

        engine = build_engine(database_url)
        await create_schema(engine)
        logger.debug("state_store_opened", dialect=engine.dialect.name)
        return cls(engine)

    async def get_value(self, key: str) -> str | None:
        async with self._sessionmaker() as session:
            return await StateValuesRepo.get(session, key=key)

    async def get_or_create_value(
        self,
        key: str,
        value: str,
        *,
        unless_present: str | None = None,
    ) -> str | None:
        now_utc = datetime.now(timezone.utc)
        async with self._sessionmaker.begin() as session:
            if unless_present is None:
                await StateValuesRepo.try_create(session, key=key, value=value, now_utc=now_utc)
            else:
                await StateValuesRepo.try_create_unless_present(
                    session,
                    key=key,
                    value=value,
                    unless_key=unless_present,
                    now_utc=now_utc,
                )
                if await StateValuesRepo.get(session, key=unless_present) is not None:
                    return None
            return await StateValuesRepo.get(session, key=key)

    async def write(
        self,
        *,
        values: Mapping[str, str | None] | None = None,
        members: Iterable[tuple[str, str]] = (),
    ) -> None:
        now_utc = datetime.now(timezone.utc)
        async with self._sessionmaker.begin() as session:
            for key, value in (values or {}).items():
                if value is None:
                    await StateValuesRepo.delete(session, key=key)
                else:
                    await StateValuesRepo.upsert(session, key=key, value=value, now_utc=now_utc)
            for set_name, member in members:
                await StateSetMembersRepo.try_add(
                    session,
                    set_name=set_name,
                    member=member,
                    now_utc=now_utc,
                )

    async def add_member(self, set_name: str, member: str) -> bool:
        async with self._sessionmaker.begin() as session:
            return await StateSetMembersRepo.try_add(
                session,
                set_name=set_name,
                member=member,
                now_utc=datetime.now(timezone.utc),
            )

    async def has_member(self, set_name: str, member: str) -> bool:
        async with self._sessionmaker() as session:
            return await StateSetMembersRepo.exists(session, set_name=set_name, member=member)

    async def list_members(self, set_name: str) -> list[str]:
        async with self._sessionmaker() as session:
            return await StateSetMembersRepo.list_members(session, set_name=set_name)

    async def close(self) -> None:
        await self._engine.dispose()
