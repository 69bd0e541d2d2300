"""
Request targets for the HIBP and Pwned Passwords endpoints.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from dataclasses import dataclass
from urllib.parse import quote

from yarl import URL

HIBP_BASE_URL = "https://haveibeenpwned.com"
PWNED_PASSWORDS_BASE_URL = "https://api.pwnedpasswords.com"

API_PATH = "/api/v3"


@dataclass(frozen=True)
class QueryTarget:
    """Where and how to ask: a base endpoint, a path and query parameters."""

    base: str
    path: str
    params: tuple[tuple[str, str], ...] = ()

    @property
    def url(self) -> str | None:
        """The absolute URL, or None if the base does not form a valid one."""
        try:
            base = URL(self.base)
        except (TypeError, ValueError):
            return None
        if base.scheme not in ("http", "https") or not base.host:
            return None

        url = base.with_path(base.path.rstrip("/") + self.path, encoded=True)
        if self.params:
            url = url.with_query(list(self.params))
        return str(url)


def _segment(value: str) -> str:
    # A single path segment; "/" must not split it
    return quote(value, safe="@")


def passwords_by_range(prefix: str) -> QueryTarget:
    """Target for a hash prefix lookup; always the Pwned Passwords host."""
    return QueryTarget(PWNED_PASSWORDS_BASE_URL, f"/range/{_segment(prefix)}")


def breaches(domain: str | None = None, base_url: str | None = None) -> QueryTarget:
    """Target for all breaches, or those of a single domain."""
    params = (("domain", domain),) if domain else ()
    return QueryTarget(base_url or HIBP_BASE_URL, f"{API_PATH}/breaches/", params)


def breaches_by_account(
    account: str,
    unverified: bool = False,
    base_url: str | None = None,
) -> QueryTarget:
    """Target for the breaches of an account.

    The service includes unverified breaches unless told otherwise, so
    includeUnverified is only ever sent to exclude them.
    """
    params = [("truncateResponse", "false")]
    if not unverified:
        params.append(("includeUnverified", "false"))
    return QueryTarget(
        base_url or HIBP_BASE_URL,
        f"{API_PATH}/breachedaccount/{_segment(account)}",
        tuple(params),
    )


def pastes_by_account(email: str, base_url: str | None = None) -> QueryTarget:
    """Target for the pastes an email address appeared in."""
    return QueryTarget(
        base_url or HIBP_BASE_URL,
        f"{API_PATH}/pasteaccount/{_segment(email)}",
    )
