from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, exists, literal, select
from sqlalchemy.ext.asyncio import AsyncSession

from shinara_sdk.db.models.state_values import StateValue

from .dialect_insert import insert_for


class StateValuesRepo:
    @staticmethod
    async def get(session: AsyncSession, *, key: str) -> str | None:
        stmt = select(StateValue.value).where(StateValue.key == key)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def upsert(
        session: AsyncSession,
        *,
        key: str,
        value: str,
        now_utc: datetime,
    ) -> None:
        stmt = insert_for(session, StateValue).values(key=key, value=value, updated_at=now_utc)
        stmt = stmt.on_conflict_do_update(
            index_elements=[StateValue.key],
            set_={"value": value, "updated_at": now_utc},
        )
        await session.execute(stmt)

    @staticmethod
    async def try_create(
        session: AsyncSession,
        *,
        key: str,
        value: str,
        now_utc: datetime,
    ) -> bool:
        stmt = (
            insert_for(session, StateValue)
            .values(key=key, value=value, updated_at=now_utc)
            .on_conflict_do_nothing(index_elements=[StateValue.key])
            .returning(StateValue.key)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def try_create_unless_present(
        session: AsyncSession,
        *,
        key: str,
        value: str,
        unless_key: str,
        now_utc: datetime,
    ) -> bool:
        blocker = select(StateValue.key).where(StateValue.key == unless_key)
        source = select(
            literal(key, StateValue.key.type),
            literal(value, StateValue.value.type),
            literal(now_utc, StateValue.updated_at.type),
        ).where(~exists(blocker))
        stmt = (
            insert_for(session, StateValue)
            .from_select([StateValue.key, StateValue.value, StateValue.updated_at], source)
            .on_conflict_do_nothing(index_elements=[StateValue.key])
            .returning(StateValue.key)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def delete(session: AsyncSession, *, key: str) -> int:
        stmt = delete(StateValue).where(StateValue.key == key).returning(StateValue.key)
        result = await session.execute(stmt)
        return len(list(result.scalars()))
