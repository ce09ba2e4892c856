class ShinaraSDKError(Exception):
    pass


class ConfigError(ShinaraSDKError):
    pass


class TransportError(ShinaraSDKError):
    pass


class AuthError(ShinaraSDKError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(ShinaraSDKError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidServerDataError(ProtocolError):
    pass


class NoReferralCodeError(ShinaraSDKError):
    pass


class RegistrationError(ShinaraSDKError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AttributionError(ShinaraSDKError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
