from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import structlog

from shinara_sdk.core.config import Settings, get_settings
from shinara_sdk.core.deep_links import extract_referral_code_from_url
from shinara_sdk.core.identifiers import is_valid_external_id
from shinara_sdk.device import DeviceMetadataProvider, HostDeviceMetadataProvider
from shinara_sdk.errors import ConfigError, NoReferralCodeError
from shinara_sdk.gateway.builders import (
    build_app_open_request,
    build_purchase_request,
    build_registration_request,
    build_tracking_session,
)
from shinara_sdk.gateway.client import AttributionGateway
from shinara_sdk.gateway.models import AppOpenRequest, KeyValidationResponse
from shinara_sdk.store.backend import StateBackend
from shinara_sdk.store.sql_backend import SqlStateBackend
from shinara_sdk.store.state import AttributionStateStore, ReferralRecord
from shinara_sdk.tasks import BackgroundTaskRunner

logger = structlog.get_logger(__name__)

SETUP_LOCK_KEY = "setup"


@dataclass(slots=True)
class _KeyedLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class AttributionClient:
    """Keeps the device's referral state in sync with the attribution service.

    Every public operation reads and writes the persisted state through
    ``store``; the client itself only holds the API key and in-flight locks.
    Registration and purchase attribution are deduplicated by the persisted
    id sets, and concurrent calls for the same id share one request.
    """

    def __init__(
        self,
        *,
        store: AttributionStateStore,
        gateway: AttributionGateway,
        metadata_provider: DeviceMetadataProvider,
        tasks: BackgroundTaskRunner | None = None,
        api_key: str | None = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.metadata_provider = metadata_provider
        self.tasks = tasks or BackgroundTaskRunner()
        self._api_key = api_key or None
        self._locks: dict[str, _KeyedLock] = {}

    @property
    def api_key(self) -> str | None:
        return self._api_key

    @property
    def platform(self) -> str:
        return self.gateway.platform

    def _require_api_key(self) -> str:
        if not self._api_key:
            raise ConfigError("API key is not set")
        return self._api_key

    @asynccontextmanager
    async def _exclusive(self, key: str) -> AsyncIterator[None]:
        entry = self._locks.get(key)
        if entry is None:
            entry = self._locks[key] = _KeyedLock()
        entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                self._locks.pop(key, None)

    async def initialize(
        self,
        api_key: str,
        *,
        context: DeviceMetadataProvider | None = None,
    ) -> KeyValidationResponse:
        if not api_key:
            raise ConfigError("API key is not set")
        self._api_key = api_key
        if context is not None:
            self.metadata_provider = context

        validation = await self.validate_api_key()
        await self.trigger_setup()
        if validation.retention_tracking_enabled:
            await self.trigger_app_open()

        logger.info(
            "sdk_initialized",
            app_id=validation.app_id,
            track_retention=validation.retention_tracking_enabled,
        )
        return validation

    async def validate_api_key(self) -> KeyValidationResponse:
        api_key = self._require_api_key()
        return await self.gateway.validate_api_key(api_key=api_key)

    async def validate_referral_code(self, code: str) -> str:
        api_key = self._require_api_key()
        if not isinstance(code, str) or not code.strip():
            raise ValueError("referral code must be a non-blank string")

        validation = await self.gateway.validate_code(api_key=api_key, code=code)
        record = ReferralRecord(
            referral_code=code,
            program_id=validation.campaign_id,
            referral_code_id=validation.affiliate_code_id,
        )
        await self.store.save_referral(record)
        logger.info(
            "referral_code_validated",
            program_id=record.program_id,
            has_referral_code_id=record.referral_code_id is not None,
        )
        return record.program_id

    async def handle_deep_link(self, url: str) -> asyncio.Task[Any] | None:
        code = extract_referral_code_from_url(url)
        if code is None:
            return None
        logger.debug("deep_link_referral_code_found")
        return self.tasks.submit(
            self.validate_referral_code(code),
            name="deep_link_referral_code_validation",
        )

    async def trigger_setup(self) -> bool:
        api_key = self._api_key
        if not api_key:
            return False
        try:
            async with self._exclusive(SETUP_LOCK_KEY):
                if await self.store.is_setup_completed():
                    return True

                identity = await self.store.resolve_active_identity()
                session = build_tracking_session(
                    session_id=identity.external_user_id or identity.auto_generated_external_user_id,
                    metadata=self.metadata_provider.collect(),
                )
                reported = await self.gateway.report_tracking_session(
                    api_key=api_key,
                    session=session,
                )
                if not reported:
                    return False
                await self.store.mark_setup_completed()
        except Exception:
            logger.exception("setup_session_report_failed")
            return False

        logger.info("setup_session_reported")
        return True

    async def trigger_app_open(self) -> asyncio.Task[Any] | None:
        api_key = self._api_key
        if not api_key:
            return None
        try:
            referral_code_id = await self.store.get_referral_code_id()
            if referral_code_id is None:
                return None
            request = build_app_open_request(
                referral_code_id=referral_code_id,
                identity=await self.store.get_user_identity(),
            )
        except Exception:
            logger.exception("app_open_prepare_failed")
            return None
        return self.tasks.submit(self._send_app_open(api_key, request), name="app_open")

    async def _send_app_open(self, api_key: str, request: AppOpenRequest) -> None:
        status_code = await self.gateway.trigger_app_open(api_key=api_key, request=request)
        logger.debug("app_open_sent", status_code=status_code)

    async def register_user(
        self,
        user_id: str,
        email: str | None = None,
        name: str | None = None,
        phone: str | None = None,
    ) -> bool:
        api_key = self._require_api_key()
        if not is_valid_external_id(user_id):
            raise ValueError("user_id must be a non-blank string")

        referral_code = await self.store.get_referral_code()
        if referral_code is None:
            raise NoReferralCodeError("No stored referral code found")

        async with self._exclusive(f"user:{user_id}"):
            if await self.store.is_user_registered(user_id):
                logger.debug("user_registration_replayed")
                return False

            request = build_registration_request(
                referral_code=referral_code,
                referral_code_id=await self.store.get_referral_code_id(),
                platform=self.platform,
                user_id=user_id,
                auto_generated_user_id=await self.store.get_anonymous_user_id(),
                email=email,
                name=name,
                phone=phone,
            )
            await self.gateway.register_user(api_key=api_key, request=request)
            await self.store.confirm_user(user_id)

        logger.info("user_registered")
        return True

    async def attribute_purchase(self, product_id: str, transaction_id: str, token: str) -> bool:
        api_key = self._api_key
        if not api_key:
            logger.debug("purchase_attribution_skipped", reason="api_key_missing")
            return False

        referral_code = await self.store.get_referral_code()
        if referral_code is None:
            logger.debug("purchase_attribution_skipped", reason="no_referral_code")
            return False
        if not is_valid_external_id(transaction_id):
            raise ValueError("transaction_id must be a non-blank string")

        async with self._exclusive(f"transaction:{transaction_id}"):
            if await self.store.is_transaction_processed(transaction_id):
                logger.debug("purchase_attribution_replayed", transaction_id=transaction_id)
                return False

            identity = await self.store.resolve_active_identity()
            request = build_purchase_request(
                referral_code=referral_code,
                referral_code_id=await self.store.get_referral_code_id(),
                platform=self.platform,
                product_id=product_id,
                transaction_id=transaction_id,
                token=token,
                identity=identity,
            )
            await self.gateway.attribute_purchase(api_key=api_key, request=request)
            await self.store.mark_transaction_processed(transaction_id)

        logger.info(
            "purchase_attributed",
            product_id=product_id,
            transaction_id=transaction_id,
        )
        return True

    async def get_referral_code(self) -> str | None:
        return await self.store.get_referral_code()

    async def get_program_id(self) -> str | None:
        return await self.store.get_program_id()

    async def get_referral_code_id(self) -> str | None:
        return await self.store.get_referral_code_id()

    async def get_user_id(self) -> str | None:
        return await self.store.get_user_id()

    async def get_anonymous_user_id(self) -> str | None:
        return await self.store.get_anonymous_user_id()

    async def drain(self) -> None:
        await self.tasks.drain()

    async def aclose(self) -> None:
        await self.tasks.drain()
        await self.gateway.aclose()
        await self.store.close()

    async def __aenter__(self) -> AttributionClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


async def create_client(
    settings: Settings | None = None,
    *,
    backend: StateBackend | None = None,
    gateway: AttributionGateway | None = None,
    metadata_provider: DeviceMetadataProvider | None = None,
) -> AttributionClient:
    resolved = settings or get_settings()
    if backend is None:
        backend = await SqlStateBackend.open(resolved.store_url)
    if gateway is None:
        gateway = AttributionGateway(
            base_url=resolved.base_url,
            platform=resolved.platform,
            timeout_seconds=resolved.http_timeout_seconds,
        )
    if metadata_provider is None:
        metadata_provider = HostDeviceMetadataProvider(
            screen_resolution=resolved.screen_resolution,
        )
    return AttributionClient(
        store=AttributionStateStore(backend),
        gateway=gateway,
        metadata_provider=metadata_provider,
        api_key=resolved.api_key,
    )
