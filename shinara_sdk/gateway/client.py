from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from shinara_sdk.core.config import DEFAULT_BASE_URL, DEFAULT_PLATFORM
from shinara_sdk.errors import (
    AttributionError,
    AuthError,
    ConfigError,
    InvalidServerDataError,
    ProtocolError,
    RegistrationError,
    TransportError,
)

from .constants import (
    API_KEY_HEADER,
    APP_OPEN_PATH,
    CODE_VALIDATE_PATH,
    IAP_PURCHASE_PATH,
    KEY_VALIDATE_PATH,
    NEW_USER_PATH,
    SDK_PLATFORM_HEADER,
    TRACKING_SESSION_PATH,
)
from .models import (
    AppOpenRequest,
    CodeValidationRequest,
    CodeValidationResponse,
    KeyValidationResponse,
    PurchaseRequest,
    TrackingSession,
    UserRegistrationRequest,
)

logger = structlog.get_logger(__name__)


def _request_body(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(exclude_none=True)


class AttributionGateway:
    """Issues the attribution service requests; holds no device state."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        platform: str = DEFAULT_PLATFORM,
        timeout_seconds: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.platform = platform
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_seconds))

    def _headers(self, api_key: str | None) -> dict[str, str]:
        if not api_key:
            raise ConfigError("API key is not set")
        return {
            API_KEY_HEADER: api_key,
            SDK_PLATFORM_HEADER: self.platform,
        }

    async def _send(
        self,
        method: str,
        path: str,
        *,
        api_key: str | None,
        body: BaseModel | None = None,
    ) -> httpx.Response:
        headers = self._headers(api_key)
        try:
            return await self._client.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                json=_request_body(body) if body is not None else None,
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "attribution_request_transport_failed",
                path=path,
                error_type=type(exc).__name__,
            )
            raise TransportError(f"{method} {path} failed: {exc}") from exc

    async def validate_api_key(self, *, api_key: str | None) -> KeyValidationResponse:
        response = await self._send("GET", KEY_VALIDATE_PATH, api_key=api_key)
        if not response.is_success:
            raise AuthError(
                f"API key validation failed: {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            raise ProtocolError("Empty response body", status_code=response.status_code)
        try:
            return KeyValidationResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise ProtocolError(
                "Malformed API key validation response",
                status_code=response.status_code,
            ) from exc

    async def validate_code(self, *, api_key: str | None, code: str) -> CodeValidationResponse:
        response = await self._send(
            "POST",
            CODE_VALIDATE_PATH,
            api_key=api_key,
            body=CodeValidationRequest(code=code),
        )
        if not response.is_success:
            raise ProtocolError(
                f"Referral code validation failed: {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            raise ProtocolError("Empty response body", status_code=response.status_code)
        try:
            validation = CodeValidationResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise ProtocolError(
                "Malformed referral code validation response",
                status_code=response.status_code,
            ) from exc
        if not validation.campaign_id:
            raise InvalidServerDataError("Invalid program ID", status_code=response.status_code)
        return validation

    async def report_tracking_session(self, *, api_key: str | None, session: TrackingSession) -> bool:
        response = await self._send("POST", TRACKING_SESSION_PATH, api_key=api_key, body=session)
        if not response.is_success:
            logger.warning("tracking_session_rejected", status_code=response.status_code)
            return False
        return True

    async def trigger_app_open(self, *, api_key: str | None, request: AppOpenRequest) -> int:
        response = await self._send("POST", APP_OPEN_PATH, api_key=api_key, body=request)
        return response.status_code

    async def register_user(self, *, api_key: str | None, request: UserRegistrationRequest) -> None:
        response = await self._send("POST", NEW_USER_PATH, api_key=api_key, body=request)
        if not response.is_success:
            raise RegistrationError(
                f"User registration failed: {response.status_code}",
                status_code=response.status_code,
            )

    async def attribute_purchase(self, *, api_key: str | None, request: PurchaseRequest) -> None:
        response = await self._send("POST", IAP_PURCHASE_PATH, api_key=api_key, body=request)
        if not response.is_success:
            raise AttributionError(
                f"Purchase attribution failed: {response.status_code}",
                status_code=response.status_code,
            )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
