"""
End-to-end harness for the storefront UI and the bookings REST API.

This package provides the booking API client, storefront page objects, and
the orchestration policy deciding worker counts, retries and artifacts.
"""

__version__ = "1.0.0"
__description__ = "End-to-end harness for the storefront UI and bookings API"

from .booker_client import RestfulBookerClient
from .config import HarnessSettings, get_settings

__all__ = [
    "HarnessSettings",
    "RestfulBookerClient",
    "get_settings",
    "__version__",
]
