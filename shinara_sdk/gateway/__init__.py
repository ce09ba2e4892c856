from .client import AttributionGateway
from .models import (
    AppOpenRequest,
    CodeValidationResponse,
    ConversionUser,
    KeyValidationResponse,
    PurchaseRequest,
    TrackingSession,
    UserRegistrationRequest,
)

__all__ = [
    "AppOpenRequest",
    "AttributionGateway",
    "CodeValidationResponse",
    "ConversionUser",
    "KeyValidationResponse",
    "PurchaseRequest",
    "TrackingSession",
    "UserRegistrationRequest",
]
