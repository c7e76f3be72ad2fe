"""Domain value objects and shared value types."""

from operations.domain.value_objects.core import ValidityPeriod

__all__ = [
    "ValidityPeriod",
]
