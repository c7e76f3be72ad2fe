"""Shared utilities: telemetry, datetime and id helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from operations.shared.utils import (
    add_months,
    ensure_utc,
    generate_cuid,
    utc_now,
)

__all__ = [
    "add_months",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
