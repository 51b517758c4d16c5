# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Scheme-qualified locators for fetch sources and install destinations."""

from dataclasses import dataclass
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from .exceptions import InvalidArgumentError

HTTP_SCHEMES = frozenset({"http", "https"})


@dataclass(frozen=True)
class Locator:
    """Immutable ``scheme://host/path`` address.

    Scheme and host are normalized to lower case so provider predicates can use
    plain string comparison. The path is stored unquoted.
    """

    scheme: str
    """URL scheme, e.g. 'https', 'fetch', 'install'."""

    host: str
    """Host name; may be a synthetic name such as 'streamingassets'."""

    path: str = "/"
    """Absolute path component."""

    port: int | None = None
    """Explicit port, if the locator carried one."""

    query: str = ""
    """Raw query string without the leading '?'."""

    @classmethod
    def parse(cls, text: str) -> "Locator":
        """Parse locator text.

        Args:
            text: Locator in ``scheme://host/path`` form

        Returns:
            Locator instance

        Raises:
            InvalidArgumentError: If the text is empty or not scheme-qualified
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidArgumentError(f"Locator must be a non-empty string, got {text!r}")

        text = text.strip()
        try:
            parts = urlsplit(text)
            port = parts.port
        except ValueError as e:
            raise InvalidArgumentError(f"Malformed locator {text!r}: {e}") from e

        if not parts.scheme or "://" not in text:
            raise InvalidArgumentError(f"Locator {text!r} is missing a scheme")
        if not parts.hostname:
            raise InvalidArgumentError(f"Locator {text!r} is missing a host")

        return cls(
            scheme=parts.scheme.lower(),
            host=parts.hostname.lower(),
            path=unquote(parts.path) or "/",
            port=port,
            query=parts.query,
        )

    @classmethod
    def coerce(cls, value: "Locator | str") -> "Locator":
        """Return ``value`` as a Locator, parsing text when needed."""
        if isinstance(value, Locator):
            return value
        return cls.parse(value)

    @property
    def netloc(self) -> str:
        return self.host if self.port is None else f"{self.host}:{self.port}"

    @property
    def url(self) -> str:
        """Canonical locator text."""
        return urlunsplit((self.scheme, self.netloc, quote(self.path), self.query, ""))

    @property
    def relative_path(self) -> str:
        """Path with the leading slash removed."""
        return self.path.lstrip("/")

    def is_http(self) -> bool:
        return self.scheme in HTTP_SCHEMES

    def matches(self, scheme: str, host: str | None = None) -> bool:
        """Check for an exact scheme (and optionally host) match."""
        if self.scheme != scheme.lower():
            return False
        return host is None or self.host == host.lower()

    def __str__(self) -> str:
        return self.url
