"""Tests for ValidityPeriod and calendar arithmetic."""

from datetime import UTC, datetime, timedelta

import pytest

from operations.domain.enums import ValidityPeriodUnit
from operations.domain.value_objects import ValidityPeriod
from operations.shared.utils.datetime import add_months, ensure_utc


class TestValidityPeriod:
    """ValidityPeriod: calendar-aware expiry; valid at the expiry instant."""

    def test_days(self) -> None:
        issued = datetime(2024, 1, 1, tzinfo=UTC)
        period = ValidityPeriod(ValidityPeriodUnit.DAYS, 30)
        assert period.expiry(issued) == datetime(2024, 1, 31, tzinfo=UTC)
        assert not period.is_expired(issued, datetime(2024, 1, 31, tzinfo=UTC))
        assert period.is_expired(issued, datetime(2024, 2, 1, tzinfo=UTC))

    def test_weeks(self) -> None:
        issued = datetime(2024, 1, 1, tzinfo=UTC)
        period = ValidityPeriod(ValidityPeriodUnit.WEEKS, 2)
        assert period.expiry(issued) == issued + timedelta(days=14)

    def test_months_clamp_to_month_end(self) -> None:
        period = ValidityPeriod(ValidityPeriodUnit.MONTHS, 1)
        assert period.expiry(datetime(2024, 1, 31, tzinfo=UTC)) == datetime(
            2024, 2, 29, tzinfo=UTC
        )
        assert period.expiry(datetime(2023, 1, 31, tzinfo=UTC)) == datetime(
            2023, 2, 28, tzinfo=UTC
        )

    def test_years_from_leap_day(self) -> None:
        period = ValidityPeriod(ValidityPeriodUnit.YEARS, 1)
        assert period.expiry(datetime(2024, 2, 29, 8, 30, tzinfo=UTC)) == datetime(
            2025, 2, 28, 8, 30, tzinfo=UTC
        )

    def test_string_unit_is_coerced(self) -> None:
        assert ValidityPeriod("months", 6).unit is ValidityPeriodUnit.MONTHS

    def test_amount_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match=">= 1"):
            ValidityPeriod(ValidityPeriodUnit.DAYS, 0)

    def test_unknown_unit_rejected(self) -> None:
        with pytest.raises(ValueError):
            ValidityPeriod("fortnights", 1)

    def test_from_columns(self) -> None:
        assert ValidityPeriod.from_columns(None, None) is None
        assert ValidityPeriod.from_columns("days", None) is None
        assert ValidityPeriod.from_columns("days", 30) == ValidityPeriod(
            ValidityPeriodUnit.DAYS, 30
        )


class TestDatetimeHelpers:
    def test_add_months_across_year(self) -> None:
        assert add_months(datetime(2024, 11, 30, tzinfo=UTC), 3) == datetime(
            2025, 2, 28, tzinfo=UTC
        )

    def test_add_negative_months(self) -> None:
        assert add_months(datetime(2024, 3, 31, tzinfo=UTC), -1) == datetime(
            2024, 2, 29, tzinfo=UTC
        )

    def test_ensure_utc(self) -> None:
        assert ensure_utc(None) is None
        naive = datetime(2024, 1, 1, 12, 0)
        assert ensure_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
