"""
Data models for Have I Been Pwned API responses.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

from hibpkit.errors import DecodeError


class RiskLevel(str, Enum):
    """Risk level based on password exposure."""

    SAFE = "safe"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def for_occurrences(cls, occurrences: int) -> "RiskLevel":
        """Determine risk level from how often a password was seen."""
        if occurrences == 0:
            return cls.SAFE
        elif occurrences < 10:
            return cls.LOW
        elif occurrences < 100:
            return cls.MEDIUM
        elif occurrences < 10000:
            return cls.HIGH
        else:
            return cls.CRITICAL


# =============================================================================
# Date decoding
# =============================================================================

def _parse_timestamp(text: str) -> datetime:
    # Full ISO 8601 timestamp; a zone designator is mandatory
    if "T" not in text:
        raise ValueError(f"no time component in {text!r}")
    parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        raise ValueError(f"no zone designator in {text!r}")
    return parsed


def _parse_calendar_date(text: str) -> datetime:
    return datetime.strptime(text, "%Y-%m-%d").replace(tzinfo=timezone.utc)


# Tried in order; the service has used both shapes across API versions
DATE_PARSERS: tuple[Callable[[str], datetime], ...] = (
    _parse_timestamp,
    _parse_calendar_date,
)


def parse_date(text: Any) -> datetime:
    """Decode a date from the service.

    Accepts a full timestamp with zone (``2018-06-05T00:00:00Z``) or a
    plain calendar date (``2018-06-05``) which is taken as midnight UTC.

    Raises:
        DecodeError: if no parser accepts the value
    """
    if isinstance(text, str):
        for parser in DATE_PARSERS:
            try:
                return parser(text)
            except ValueError:
                continue
    raise DecodeError(f"Error parsing '{text}'")


# =============================================================================
# Field helpers
# =============================================================================

def _require(data: dict[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    if key not in data:
        raise DecodeError(f"Missing key '{key}'")
    value = data[key]
    # bool is an int subclass; keep counts honest
    if isinstance(value, bool) and kind is int:
        raise DecodeError(f"Key '{key}' expected int, got {value!r}")
    if not isinstance(value, kind):
        raise DecodeError(f"Key '{key}' has unexpected value {value!r}")
    return value


def _optional(data: dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, kind):
        raise DecodeError(f"Key '{key}' has unexpected value {value!r}")
    return value


def _count(data: dict[str, Any], key: str) -> int:
    value = _require(data, key, int)
    if value < 0:
        raise DecodeError(f"Key '{key}' must not be negative, got {value}")
    return value


JSONLoader = Callable[[bytes], Any]


def _records(
    payload: bytes,
    from_api_response: Callable[[dict[str, Any]], Any],
    loads: JSONLoader = json.loads,
) -> list:
    try:
        data = loads(payload)
    except (ValueError, RecursionError) as e:
        # RecursionError comes from arrays nested past the interpreter limit
        raise DecodeError(f"Invalid JSON: {e}; payload: {payload[:200]!r}") from e
    if not isinstance(data, list):
        raise DecodeError(f"Expected a JSON array, got {type(data).__name__}")
    records = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise DecodeError(f"Record {index} is not an object: {item!r}")
        records.append(from_api_response(item))
    return records


# =============================================================================
# Breaches
# =============================================================================

@dataclass(frozen=True)
class Breach:
    """Represents a single data breach from HIBP."""

    title: str
    name: str
    domain: str
    breach_date: datetime
    added_date: datetime
    modified_date: datetime
    pwn_count: int
    description: str
    data_classes: tuple[str, ...]
    is_verified: bool
    is_fabricated: bool
    is_sensitive: bool
    is_retired: bool
    is_spam_list: bool
    logo_path: str | None = None

    @property
    def logo_url(self) -> str | None:
        """URL of the breach logo, if the service supplied one."""
        if not self.logo_path:
            return None
        return self.logo_path

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Breach":
        """Create Breach from HIBP API response.

        Raises:
            DecodeError: if a field is missing or has the wrong type
        """
        data_classes = _require(data, "DataClasses", list)
        if not all(isinstance(item, str) for item in data_classes):
            raise DecodeError(f"Key 'DataClasses' has unexpected value {data_classes!r}")

        return cls(
            title=_require(data, "Title", str),
            name=_require(data, "Name", str),
            domain=_require(data, "Domain", str),
            breach_date=parse_date(_require(data, "BreachDate", str)),
            added_date=parse_date(_require(data, "AddedDate", str)),
            modified_date=parse_date(_require(data, "ModifiedDate", str)),
            pwn_count=_count(data, "PwnCount"),
            description=_require(data, "Description", str),
            data_classes=tuple(data_classes),
            is_verified=_require(data, "IsVerified", bool),
            is_fabricated=_require(data, "IsFabricated", bool),
            is_sensitive=_require(data, "IsSensitive", bool),
            is_retired=_require(data, "IsRetired", bool),
            is_spam_list=_require(data, "IsSpamList", bool),
            logo_path=_optional(data, "LogoPath", str),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "title": self.title,
            "domain": self.domain,
            "breach_date": self.breach_date.isoformat(),
            "added_date": self.added_date.isoformat(),
            "modified_date": self.modified_date.isoformat(),
            "pwn_count": self.pwn_count,
            "description": self.description,
            "data_classes": list(self.data_classes),
            "is_verified": self.is_verified,
            "is_fabricated": self.is_fabricated,
            "is_sensitive": self.is_sensitive,
            "is_retired": self.is_retired,
            "is_spam_list": self.is_spam_list,
            "logo_url": self.logo_url,
        }


def decode_breaches(payload: bytes, loads: JSONLoader = json.loads) -> list[Breach]:
    """Decode a JSON array of breaches."""
    return _records(payload, Breach.from_api_response, loads)


# =============================================================================
# Pastes
# =============================================================================

class PasteService(str, Enum):
    """A paste service where a particular paste was found."""

    PASTEBIN = "Pastebin"
    PASTIE = "Pastie"
    SLEXY = "Slexy"
    GHOSTBIN = "Ghostbin"
    QUICK_LEAK = "QuickLeak"
    JUST_PASTE = "JustPaste"
    AD_HOC_URL = "AdHocUrl"
    OPT_OUT = "OptOut"

    def url_for(self, identifier: str) -> str | None:
        """Browsable URL of a paste, or None if the service has no public one."""
        template = _PASTE_URLS.get(self)
        if template is None:
            return None
        return template.format(identifier)


_PASTE_URLS = {
    PasteService.PASTEBIN: "https://pastebin.com/{}",
    PasteService.PASTIE: "https://pastiebin.org/{}",
    PasteService.SLEXY: "https://slexy.org/view/{}",
    PasteService.GHOSTBIN: "https://ghostbin.com/paste/{}",
    PasteService.JUST_PASTE: "https://justpaste.it/{}",
}


@dataclass(frozen=True)
class Paste:
    """Represents a paste containing the email address."""

    source: str
    identifier: str
    title: str | None
    date: datetime | None
    email_count: int

    @property
    def service(self) -> PasteService | None:
        """The paste service, or None for sources this library does not know."""
        try:
            return PasteService(self.source)
        except ValueError:
            return None

    @property
    def url(self) -> str | None:
        """Browsable URL of the paste when the service offers one."""
        if self.service is None:
            return None
        return self.service.url_for(self.identifier)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Paste":
        """Create Paste from HIBP API response.

        Raises:
            DecodeError: if a field is missing or has the wrong type
        """
        date = data.get("Date")
        return cls(
            source=_require(data, "Source", str),
            identifier=_require(data, "Id", str),
            title=_optional(data, "Title", str),
            date=parse_date(date) if date is not None else None,
            email_count=_count(data, "EmailCount"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source": self.source,
            "id": self.identifier,
            "title": self.title,
            "date": self.date.isoformat() if self.date else None,
            "email_count": self.email_count,
            "url": self.url,
        }


def decode_pastes(payload: bytes, loads: JSONLoader = json.loads) -> list[Paste]:
    """Decode a JSON array of pastes."""
    return _records(payload, Paste.from_api_response, loads)
