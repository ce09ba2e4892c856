from __future__ import annotations

from shinara_sdk.device import DeviceMetadata
from shinara_sdk.store.state import UserIdentity

from .models import (
    AppOpenRequest,
    ConversionUser,
    PurchaseRequest,
    TrackingSession,
    UserRegistrationRequest,
)


def build_tracking_session(*, session_id: str, metadata: DeviceMetadata) -> TrackingSession:
    return TrackingSession(
        session_id=session_id,
        user_agent=metadata.user_agent,
        device_model=metadata.device_model,
        os_version=metadata.os_version,
        screen_resolution=metadata.screen_resolution,
        timezone=metadata.timezone,
        language=metadata.language,
    )


def build_app_open_request(*, referral_code_id: str, identity: UserIdentity) -> AppOpenRequest:
    return AppOpenRequest(
        affiliate_code_id=referral_code_id,
        external_user_id=identity.external_user_id,
        auto_generated_external_user_id=identity.auto_generated_external_user_id,
    )


def build_registration_request(
    *,
    referral_code: str,
    referral_code_id: str | None,
    platform: str,
    user_id: str,
    auto_generated_user_id: str | None,
    email: str | None = None,
    name: str | None = None,
    phone: str | None = None,
) -> UserRegistrationRequest:
    return UserRegistrationRequest(
        code=referral_code,
        platform=platform,
        conversion_user=ConversionUser(
            external_user_id=user_id,
            name=name,
            email=email,
            phone=phone,
            auto_generated_external_user_id=auto_generated_user_id,
        ),
        affiliate_code_id=referral_code_id,
    )


def build_purchase_request(
    *,
    referral_code: str,
    referral_code_id: str | None,
    platform: str,
    product_id: str,
    transaction_id: str,
    token: str | None,
    identity: UserIdentity,
) -> PurchaseRequest:
    # Only the active identity is sent: a confirmed id hides the anonymous one.
    if identity.external_user_id is not None:
        auto_generated_user_id = None
    else:
        auto_generated_user_id = identity.auto_generated_external_user_id
    return PurchaseRequest(
        product_id=product_id,
        transaction_id=transaction_id,
        code=referral_code,
        platform=platform,
        token=token or None,
        affiliate_code_id=referral_code_id,
        external_user_id=identity.external_user_id,
        auto_generated_external_user_id=auto_generated_user_id,
    )
