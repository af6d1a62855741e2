"""Errors raised by the Sogenactif integration."""


class SogenError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(SogenError):
    pass


class SetupError(SogenError):
    """The merchant files or vendor binaries are not usable."""


class BinaryNotFoundError(SogenError):
    pass


class BinaryTimeoutError(SogenError):
    pass


class ApiError(SogenError):
    """The vendor binary ran and reported a non-zero code."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"error using API: {message}")


class ResponseParseError(SogenError):
    pass
