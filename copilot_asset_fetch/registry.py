# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Ordered registry of fetchers or installers."""

import logging
from typing import Generic, Iterator, Protocol, TypeVar

from .exceptions import DuplicateRegistrationError, InvalidArgumentError
from .locator import Locator

logger = logging.getLogger(__name__)


class Resolvable(Protocol):
    def can_resolve(self, locator: Locator) -> bool:
        ...


T = TypeVar("T", bound=Resolvable)


class ProviderRegistry(Generic[T]):
    """Holds providers and resolves them by locator.

    Resolution walks providers in registration order and returns the first
    whose ``can_resolve`` accepts the locator, so more specific providers must
    be registered before more general ones. Registration is add-only and is
    expected to happen before any fetch begins.
    """

    def __init__(self, kind: str = "provider"):
        """Initialize an empty registry.

        Args:
            kind: Provider kind used in log and error messages
        """
        self.kind = kind
        self._providers: list[T] = []

    def register(self, provider: T) -> None:
        """Add a provider.

        Raises:
            InvalidArgumentError: If provider is None
            DuplicateRegistrationError: If the provider is already registered
        """
        if provider is None:
            raise InvalidArgumentError(f"Cannot register a None {self.kind}")
        if provider in self._providers:
            raise DuplicateRegistrationError(
                f"{type(provider).__name__} is already registered as a {self.kind}"
            )

        self._providers.append(provider)
        logger.debug(f"Registered {self.kind} {type(provider).__name__} ({len(self._providers)} total)")

    def resolve(self, locator: Locator) -> T | None:
        """Return the first provider that can handle ``locator``, or None."""
        if locator is None:
            raise InvalidArgumentError(f"Cannot resolve a {self.kind} for a None locator")

        for provider in self._providers:
            if provider.can_resolve(locator):
                logger.debug(f"Resolved {self.kind} {type(provider).__name__} for {locator}")
                return provider

        logger.debug(f"No {self.kind} can resolve {locator}")
        return None

    def __contains__(self, provider: object) -> bool:
        return provider in self._providers

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._providers))

    def __len__(self) -> int:
        return len(self._providers)
