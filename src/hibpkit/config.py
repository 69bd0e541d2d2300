"""
Configuration for the HIBP service client.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import os
from dataclasses import dataclass

DEFAULT_USER_AGENT = "hibpkit-python-library"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ServiceConfig:
    """Immutable settings handed to HIBPService at construction."""

    # Required by the service; anonymous clients are rejected
    user_agent: str = DEFAULT_USER_AGENT

    # Sent as hibp-api-key when set (account and paste lookups need it)
    api_key: str | None = None

    # Alternate deployment for breach/paste endpoints; never used for passwords
    base_url: str | None = None

    # Total seconds allowed per request
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.user_agent or not self.user_agent.strip():
            raise ValueError("A user agent identifying the client is required")
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {self.timeout}")

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Load configuration from environment variables."""
        return cls(
            user_agent=os.environ.get("HIBP_USER_AGENT") or DEFAULT_USER_AGENT,
            api_key=os.environ.get("HIBP_API_KEY") or None,
            base_url=os.environ.get("HIBP_BASE_URL") or None,
            timeout=float(os.environ.get("HIBP_TIMEOUT", DEFAULT_TIMEOUT)),
        )

    @property
    def headers(self) -> dict[str, str]:
        """Headers sent with every request."""
        headers = {"User-Agent": self.user_agent}
        if self.api_key:
            headers["hibp-api-key"] = self.api_key
        return headers
