from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from shinara_sdk.core.identifiers import generate_anonymous_user_id

from . import keys
from .backend import StateBackend

SETUP_COMPLETED_VALUE = "true"


@dataclass(frozen=True, slots=True)
class ReferralRecord:
    referral_code: str
    program_id: str
    referral_code_id: str | None = None


@dataclass(frozen=True, slots=True)
class UserIdentity:
    external_user_id: str | None
    auto_generated_external_user_id: str | None


class AttributionStateStore:
    """Typed access to the persisted attribution state of one device."""

    def __init__(self, backend: StateBackend) -> None:
        self.backend = backend

    async def is_setup_completed(self) -> bool:
        return await self.backend.get_value(keys.SETUP_COMPLETED_KEY) is not None

    async def mark_setup_completed(self) -> None:
        await self.backend.write(values={keys.SETUP_COMPLETED_KEY: SETUP_COMPLETED_VALUE})

    async def get_referral_code(self) -> str | None:
        return await self.backend.get_value(keys.REFERRAL_CODE_KEY)

    async def get_program_id(self) -> str | None:
        return await self.backend.get_value(keys.PROGRAM_ID_KEY)

    async def get_referral_code_id(self) -> str | None:
        return await self.backend.get_value(keys.REFERRAL_CODE_ID_KEY)

    async def save_referral(self, record: ReferralRecord) -> None:
        await self.backend.write(
            values={
                keys.REFERRAL_CODE_KEY: record.referral_code,
                keys.PROGRAM_ID_KEY: record.program_id,
                keys.REFERRAL_CODE_ID_KEY: record.referral_code_id,
            }
        )

    async def get_user_id(self) -> str | None:
        return await self.backend.get_value(keys.EXTERNAL_USER_ID_KEY)

    async def get_anonymous_user_id(self) -> str | None:
        return await self.backend.get_value(keys.AUTO_GEN_EXTERNAL_USER_ID_KEY)

    async def get_or_create_anonymous_user_id(
        self,
        factory: Callable[[], str] = generate_anonymous_user_id,
    ) -> str | None:
        """Returns the anonymous id, creating it unless a user is confirmed.

        The confirmed-id check and the insert happen in one backend step, so an
        id is never created after ``confirm_user`` has cleared it.
        """
        existing = await self.get_anonymous_user_id()
        if existing is not None:
            return existing
        return await self.backend.get_or_create_value(
            keys.AUTO_GEN_EXTERNAL_USER_ID_KEY,
            factory(),
            unless_present=keys.EXTERNAL_USER_ID_KEY,
        )

    async def resolve_active_identity(
        self,
        factory: Callable[[], str] = generate_anonymous_user_id,
    ) -> UserIdentity:
        user_id = await self.get_user_id()
        if user_id is None:
            anonymous_id = await self.get_or_create_anonymous_user_id(factory)
            if anonymous_id is not None:
                return UserIdentity(external_user_id=None, auto_generated_external_user_id=anonymous_id)
            user_id = await self.get_user_id()
        return UserIdentity(external_user_id=user_id, auto_generated_external_user_id=None)

    async def get_user_identity(self) -> UserIdentity:
        return UserIdentity(
            external_user_id=await self.get_user_id(),
            auto_generated_external_user_id=await self.get_anonymous_user_id(),
        )

    async def confirm_user(self, user_id: str) -> None:
        # Confirmation supersedes the anonymous id in the same write.
        await self.backend.write(
            values={
                keys.EXTERNAL_USER_ID_KEY: user_id,
                keys.AUTO_GEN_EXTERNAL_USER_ID_KEY: None,
            },
            members=[(keys.REGISTERED_USERS_SET, user_id)],
        )

    async def is_user_registered(self, user_id: str) -> bool:
        return await self.backend.has_member(keys.REGISTERED_USERS_SET, user_id)

    async def list_registered_users(self) -> list[str]:
        return await self.backend.list_members(keys.REGISTERED_USERS_SET)

    async def is_transaction_processed(self, transaction_id: str) -> bool:
        return await self.backend.has_member(keys.PROCESSED_TRANSACTIONS_SET, transaction_id)

    async def mark_transaction_processed(self, transaction_id: str) -> bool:
        return await self.backend.add_member(keys.PROCESSED_TRANSACTIONS_SET, transaction_id)

    async def list_processed_transactions(self) -> list[str]:
        return await self.backend.list_members(keys.PROCESSED_TRANSACTIONS_SET)

    async def close(self) -> None:
        await self.backend.close()
