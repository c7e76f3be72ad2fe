"""Domain value objects for the operations core.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from operations.domain.enums import ValidityPeriodUnit
from operations.shared.utils.datetime import add_months


@dataclass(frozen=True)
class ValidityPeriod:
    """How long a document satisfies a requirement after its issue date.

    Arithmetic is calendar aware: months and years are added on the
    calendar (clamped to month end), days and weeks as fixed durations.
    """

    unit: ValidityPeriodUnit
    amount: int

    def __post_init__(self) -> None:
        if not isinstance(self.unit, ValidityPeriodUnit):
            object.__setattr__(self, "unit", ValidityPeriodUnit(self.unit))
        if self.amount < 1:
            raise ValueError("Validity period amount must be >= 1")

    @classmethod
    def from_columns(
        cls, unit: str | ValidityPeriodUnit | None, amount: int | None
    ) -> "ValidityPeriod | None":
        """Build from nullable unit/amount columns; None when either is unset."""
        if unit is None or amount is None:
            return None
        return cls(unit=ValidityPeriodUnit(unit), amount=amount)

    def expiry(self, issued: datetime) -> datetime:
        """Return the instant the period ends for a document issued at `issued`."""
        if self.unit is ValidityPeriodUnit.DAYS:
            return issued + timedelta(days=self.amount)
        if self.unit is ValidityPeriodUnit.WEEKS:
            return issued + timedelta(weeks=self.amount)
        if self.unit is ValidityPeriodUnit.MONTHS:
            return add_months(issued, self.amount)
        return add_months(issued, 12 * self.amount)

    def is_expired(self, issued: datetime, now: datetime) -> bool:
        """Expired strictly after the expiry instant; still valid at it."""
        return now > self.expiry(issued)
