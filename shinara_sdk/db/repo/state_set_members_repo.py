from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shinara_sdk.db.models.state_set_members import StateSetMember

from .dialect_insert import insert_for


class StateSetMembersRepo:
    @staticmethod
    async def try_add(
        session: AsyncSession,
        *,
        set_name: str,
        member: str,
        now_utc: datetime,
    ) -> bool:
        stmt = (
            insert_for(session, StateSetMember)
            .values(set_name=set_name, member=member, added_at=now_utc)
            .on_conflict_do_nothing(
                index_elements=[StateSetMember.set_name, StateSetMember.member]
            )
            .returning(StateSetMember.member)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def exists(session: AsyncSession, *, set_name: str, member: str) -> bool:
        stmt = select(StateSetMember.member).where(
            StateSetMember.set_name == set_name,
            StateSetMember.member == member,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_members(session: AsyncSession, *, set_name: str) -> list[str]:
        stmt = (
            select(StateSetMember.member)
            .where(StateSetMember.set_name == set_name)
            .order_by(StateSetMember.added_at.asc(), StateSetMember.member.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars())
