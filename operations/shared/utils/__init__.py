"""Shared utilities: datetime and generators."""

from operations.shared.utils.datetime import add_months, ensure_utc, utc_now
from operations.shared.utils.generators import generate_cuid

__all__ = [
    "add_months",
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
