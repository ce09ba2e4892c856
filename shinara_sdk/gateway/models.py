from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class KeyValidationResponse(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    app_id: str = Field(min_length=1)
    track_retention: bool | None = None

    @property
    def retention_tracking_enabled(self) -> bool:
        return bool(self.track_retention)


class CodeValidationResponse(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    campaign_id: str | None = None
    affiliate_code_id: str | None = None


class CodeValidationRequest(BaseModel):
    code: str


class TrackingSession(BaseModel):
    session_id: str
    user_agent: str
    device_model: str
    os_version: str
    screen_resolution: str
    timezone: str
    language: str | None = None


class AppOpenRequest(BaseModel):
    affiliate_code_id: str
    external_user_id: str | None = None
    auto_generated_external_user_id: str | None = None


class ConversionUser(BaseModel):
    external_user_id: str
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    auto_generated_external_user_id: str | None = None


class UserRegistrationRequest(BaseModel):
    code: str
    platform: str
    conversion_user: ConversionUser
    affiliate_code_id: str | None = None


class PurchaseRequest(BaseModel):
    product_id: str
    transaction_id: str
    code: str
    platform: str
    token: str | None = None
    affiliate_code_id: str | None = None
    external_user_id: str | None = None
    auto_generated_external_user_id: str | None = None
