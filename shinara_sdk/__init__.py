from shinara_sdk.client import AttributionClient, create_client
from shinara_sdk.errors import (
    AttributionError,
    AuthError,
    ConfigError,
    InvalidServerDataError,
    NoReferralCodeError,
    ProtocolError,
    RegistrationError,
    ShinaraSDKError,
    TransportError,
)

__version__ = "0.1.0"

__all__ = [
    "AttributionClient",
    "AttributionError",
    "AuthError",
    "ConfigError",
    "InvalidServerDataError",
    "NoReferralCodeError",
    "ProtocolError",
    "RegistrationError",
    "ShinaraSDKError",
    "TransportError",
    "create_client",
]
