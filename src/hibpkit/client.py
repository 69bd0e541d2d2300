"""
Have I Been Pwned API client.

Implements the HIBP v3 API queries:
- Breaches, optionally limited to a domain
- Breaches and pastes for an account
- Password checking with k-anonymity

Every operation takes a completion function that receives exactly one
Result and returns a handle that can cancel the request. Awaitable
wrappers are provided for asyncio callers.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import json
import logging
import re
from typing import Callable

from hibpkit import urls
from hibpkit.config import DEFAULT_USER_AGENT, ServiceConfig
from hibpkit.crypto import sha1_hex
from hibpkit.errors import ErrorKind, Result, ServiceError
from hibpkit.models import Breach, JSONLoader, Paste, decode_breaches, decode_pastes
from hibpkit.service import (
    TEXT_MIME_TYPE,
    AiohttpTransport,
    FetchFunction,
    PendingRequest,
    await_result,
    process_query,
)

logger = logging.getLogger(__name__)

PREFIX_LENGTH = 5

EMAIL_PATTERN = re.compile(r"(?!^.{256})[a-zA-Z0-9.\-_+]+@[a-zA-Z0-9.\-_]+\.[a-zA-Z]+")

PasswordCompletion = Callable[[Result[int]], None]
BreachCompletion = Callable[[Result[list[Breach]]], None]
PasteCompletion = Callable[[Result[list[Paste]]], None]


def is_email(text: str) -> bool:
    """Check whether text looks like an email address HIBP will accept.

    A permissive format check, not RFC validation. Use it before asking
    for pastes to avoid a wasted round trip.
    """
    return EMAIL_PATTERN.match(text) is not None


def split_hash(password_hash: str) -> tuple[str, str]:
    """Split a hex SHA-1 into the prefix sent to the service and the suffix kept local."""
    return password_hash[:PREFIX_LENGTH], password_hash[PREFIX_LENGTH:].upper()


def count_in_range(hash_list: str, suffix: str) -> int:
    """Find the occurrence count for suffix in a range response.

    Lines are ``SUFFIX:COUNT``. A missing suffix counts as zero, as does
    a count that is not a number.
    """
    for line in hash_list.splitlines():
        hash_suffix, _, count = line.partition(":")
        if hash_suffix == suffix:
            count = count.strip()
            return int(count) if count.isdigit() else 0
    return 0


class HIBPService:
    """Client for Have I Been Pwned API v3.

    Provides methods for checking accounts against known data breaches
    and validating password security using k-anonymity.
    """

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        api_key: str | None = None,
        base_url: str | None = None,
        config: ServiceConfig | None = None,
        json_loads: JSONLoader | None = None,
    ):
        """Initialize HIBP service.

        Args:
            user_agent: Identifies your app to the service (required by HIBP)
            api_key: HIBP API key (required for account lookups)
            base_url: Alternate host for breach and paste queries
            config: Complete configuration; overrides the other arguments
            json_loads: Parses breach and paste payloads (json.loads by default)
        """
        self.config = config or ServiceConfig(
            user_agent=user_agent,
            api_key=api_key,
            base_url=base_url,
        )
        self.transport = AiohttpTransport(self.config.headers, self.config.timeout)
        self.json_loads = json_loads or json.loads

    is_email = staticmethod(is_email)

    def _decode_breaches(self, data: bytes) -> list[Breach]:
        return decode_breaches(data, self.json_loads)

    def _decode_pastes(self, data: bytes) -> list[Paste]:
        return decode_pastes(data, self.json_loads)

    async def close(self) -> None:
        """Close HTTP session."""
        await self.transport.close()

    async def __aenter__(self) -> "HIBPService":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    # =========================================================================
    # Password Checking (K-Anonymity)
    # =========================================================================

    def password_by_range(
        self,
        password: str,
        completion: PasswordCompletion,
        fetch: FetchFunction | None = None,
    ) -> PendingRequest | None:
        """Count how often a password appears in known breaches.

        Only the first 5 characters of the SHA-1 hash are sent to the
        API; the remainder is matched locally. A prefix the service has
        no data for reports a count of zero.

        Args:
            password: Password to check (NOT stored or logged)
            completion: Receives the occurrence count or a ServiceError
            fetch: Transport override

        Returns:
            A handle to cancel the request, or None if no request was made
        """
        password_hash = sha1_hex(password)
        if password_hash is None:
            completion(Result.failure(ServiceError.error("Password could not be encoded as UTF-8")))
            return None
        prefix, suffix = split_hash(password_hash)
        logger.debug(f"Checking password hash prefix {prefix}")

        def on_complete(result: Result[int]) -> None:
            if not result.ok and result.error.kind == ErrorKind.NOT_FOUND:
                result = Result.success(0)
            completion(result)

        def decode(data: bytes) -> int:
            return count_in_range(data.decode("ascii"), suffix)

        return process_query(
            urls.passwords_by_range(prefix),
            on_complete,
            fetch or self.transport,
            mime_type=TEXT_MIME_TYPE,
            decode=decode,
        )

    # =========================================================================
    # Breaches
    # =========================================================================

    def all_breaches(
        self,
        domain: str | None,
        completion: BreachCompletion,
        fetch: FetchFunction | None = None,
    ) -> PendingRequest | None:
        """Get all breaches, or only those for a domain.

        Args:
            domain: Optionally limit the breaches to this domain name
            completion: Receives the breaches or a ServiceError
            fetch: Transport override
        """
        return process_query(
            urls.breaches(domain, self.config.base_url),
            completion,
            fetch or self.transport,
            decode=self._decode_breaches,
        )

    def breaches(
        self,
        account: str,
        completion: BreachCompletion,
        unverified: bool = False,
        fetch: FetchFunction | None = None,
    ) -> PendingRequest | None:
        """Find the breaches for an account.

        Args:
            account: Account name or email address
            completion: Receives the breaches or a ServiceError
            unverified: Include unverified breaches in the results
            fetch: Transport override
        """
        return process_query(
            urls.breaches_by_account(account, unverified, self.config.base_url),
            completion,
            fetch or self.transport,
            decode=self._decode_breaches,
        )

    # =========================================================================
    # Pastes
    # =========================================================================

    def pastes(
        self,
        email: str,
        completion: PasteCompletion,
        fetch: FetchFunction | None = None,
    ) -> PendingRequest | None:
        """Find the pastes an email address appeared in.

        Args:
            email: Email address to search for
            completion: Receives the pastes or a ServiceError
            fetch: Transport override
        """
        return process_query(
            urls.pastes_by_account(email, self.config.base_url),
            completion,
            fetch or self.transport,
            decode=self._decode_pastes,
        )

    # =========================================================================
    # Awaitable wrappers
    # =========================================================================

    async def check_password(
        self,
        password: str,
        fetch: FetchFunction | None = None,
    ) -> Result[int]:
        return await await_result(lambda done: self.password_by_range(password, done, fetch))

    async def get_all_breaches(
        self,
        domain: str | None = None,
        fetch: FetchFunction | None = None,
    ) -> Result[list[Breach]]:
        return await await_result(lambda done: self.all_breaches(domain, done, fetch))

    async def get_breaches(
        self,
        account: str,
        unverified: bool = False,
        fetch: FetchFunction | None = None,
    ) -> Result[list[Breach]]:
        return await await_result(lambda done: self.breaches(account, done, unverified, fetch))

    async def get_pastes(
        self,
        email: str,
        fetch: FetchFunction | None = None,
    ) -> Result[list[Paste]]:
        return await await_result(lambda done: self.pastes(email, done, fetch))

