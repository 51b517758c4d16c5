# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Exceptions for asset fetch operations."""


class AssetFetchError(Exception):
    """Base exception for asset fetch errors."""
    pass


class InvalidArgumentError(AssetFetchError, ValueError):
    """Raised when a locator or provider argument is missing or malformed."""
    pass


class DuplicateRegistrationError(AssetFetchError):
    """Raised when the same provider instance is registered twice."""
    pass


class ResolutionError(AssetFetchError):
    """Raised when no registered provider can handle a locator."""

    def __init__(self, message: str, side: str, locator: str | None = None):
        """Initialize ResolutionError with context.

        Args:
            message: Error message
            side: Which provider could not be resolved ("fetcher" or "installer")
            locator: Locator text that failed to resolve (optional)
        """
        super().__init__(message)
        self.side = side
        self.locator = locator


class InstallFailedError(AssetFetchError):
    """Raised when an installer cannot open its destination sink."""

    def __init__(self, message: str, locator: str | None = None):
        super().__init__(message)
        self.locator = locator


class TransferFault(AssetFetchError):
    """Raised when a transfer fails mid-flight."""

    def __init__(self, message: str, locator: str | None = None, status_code: int | None = None):
        """Initialize TransferFault with context.

        Args:
            message: Error message
            locator: Source locator text (optional)
            status_code: HTTP status code, when the fault came from a response (optional)
        """
        super().__init__(message)
        self.locator = locator
        self.status_code = status_code


class ConfigurationError(AssetFetchError):
    """Raised when there is a configuration error."""
    pass


class UnsupportedProviderTypeError(ConfigurationError):
    """Raised when a factory is asked for an unknown fetcher or installer type."""
    pass
