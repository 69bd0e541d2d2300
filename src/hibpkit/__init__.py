"""
Have I Been Pwned (HIBP) client library.

Provides breach and paste lookups for accounts and domains, and
password exposure checks using the Pwned Passwords k-anonymity API.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

__version__ = "1.0.0"

from hibpkit.client import HIBPService, is_email
from hibpkit.config import ServiceConfig
from hibpkit.errors import DecodeError, ErrorKind, Result, ServiceError
from hibpkit.models import Breach, Paste, PasteService, RiskLevel
from hibpkit.service import PendingRequest, ServiceRequest

__all__ = [
    "HIBPService",
    "ServiceConfig",
    "ServiceError",
    "ErrorKind",
    "DecodeError",
    "Result",
    "Breach",
    "Paste",
    "PasteService",
    "RiskLevel",
    "PendingRequest",
    "ServiceRequest",
    "is_email",
]
