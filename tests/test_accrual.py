import logging
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from yieldcore.core.config import Settings
from yieldcore.core.errors import ConfigurationError, InvalidTimestamp
from yieldcore.models.enums import InvestmentStatus, LockupPeriod, PaymentFrequency, TransactionType
from yieldcore.models.investment import Investment, LedgerTransaction
from yieldcore.services.accrual import compute_value
from yieldcore.utils.decimal_math import money


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def _investment(**overrides) -> Investment:
    fields = {
        "id": "inv-1",
        "amount": Decimal("10000"),
        "lockup_period": LockupPeriod.three_year,
        "payment_frequency": PaymentFrequency.compounding,
        "status": InvestmentStatus.active,
        "created_at": _utc(2024, 1, 10),
        "confirmed_at": _utc(2024, 1, 15),
    }
    fields.update(overrides)
    return Investment(**fields)


def _distribution(amount: str, on: datetime, status: str = "completed") -> LedgerTransaction:
    return LedgerTransaction(type=TransactionType.distribution, amount=Decimal(amount), date=on, status=status)


@pytest.mark.parametrize("frequency", [PaymentFrequency.compounding, PaymentFrequency.monthly])
def test_zero_months_elapsed_has_no_earnings(frequency: PaymentFrequency) -> None:
    investment = _investment(payment_frequency=frequency, amount=Decimal("2500"))
    result = compute_value(investment, "2024-02-14T23:59:59Z")
    assert result.months_elapsed == 0
    assert result.current_value == money("2500.00")
    assert result.total_earnings == money("0.00")


def test_compounding_three_year_after_twelve_months() -> None:
    result = compute_value(_investment(), "2025-01-15T00:00:00Z")
    assert result.months_elapsed == 12
    assert result.current_value == money("11047.13")
    assert result.total_earnings == money("1047.13")
    assert result.apy == Decimal("0.10")


def test_compounding_rounds_only_at_return() -> None:
    result = compute_value(_investment(amount=Decimal("1000")), "2027-01-15")
    expected = money(Decimal("1000") * (Decimal("1") + Decimal("0.10") / Decimal("12")) ** 36)
    assert result.months_elapsed == 36
    assert result.current_value == expected
    assert result.realized_earnings == result.projected_earnings == result.total_earnings


def test_monthly_payout_amount_for_one_year_lockup() -> None:
    investment = _investment(
        lockup_period=LockupPeriod.one_year,
        payment_frequency=PaymentFrequency.monthly,
    )
    result = compute_value(investment, "2024-06-01")
    assert result.monthly_interest_amount == money("66.67")
    assert result.current_value == money("10000.00")


def test_monthly_total_earnings_are_ledger_realized_not_projected() -> None:
    investment = _investment(
        lockup_period=LockupPeriod.one_year,
        payment_frequency=PaymentFrequency.monthly,
        transactions=(
            _distribution("66.67", _utc(2024, 2, 15)),
            _distribution("66.67", _utc(2024, 3, 15)),
            _distribution("66.67", _utc(2024, 4, 15), status="rejected"),
            _distribution("66.67", _utc(2024, 6, 15)),
        ),
    )
    result = compute_value(investment, "2024-04-20")
    assert result.months_elapsed == 3
    assert result.realized_earnings == money("133.34")
    assert result.projected_earnings == money("200.01")
    assert result.total_earnings == result.realized_earnings


def test_contributions_do_not_count_as_monthly_distributions() -> None:
    investment = _investment(
        payment_frequency=PaymentFrequency.monthly,
        transactions=(
            LedgerTransaction(type=TransactionType.contribution, amount=Decimal("50"), date=_utc(2024, 2, 15)),
        ),
    )
    assert compute_value(investment, "2024-03-01").total_earnings == money("0.00")


def test_compute_value_is_idempotent() -> None:
    investment = _investment()
    first = compute_value(investment, "2025-07-04T12:00:00Z")
    second = compute_value(investment, "2025-07-04T12:00:00Z")
    assert first == second


def test_value_is_monotonic_in_as_of_time() -> None:
    investment = _investment(amount=Decimal("5000"))
    previous = money(0)
    for month in range(1, 13):
        result = compute_value(investment, date(2025, month, 20))
        assert result.current_value >= previous
        previous = result.current_value


def test_monthly_realized_earnings_are_monotonic_as_distributions_post() -> None:
    investment = _investment(
        lockup_period=LockupPeriod.one_year,
        payment_frequency=PaymentFrequency.monthly,
        transactions=tuple(_distribution("66.67", _utc(2024, month, 15)) for month in range(2, 13)),
    )
    previous = money(0)
    for month in range(1, 13):
        result = compute_value(investment, date(2024, month, 20))
        assert result.total_earnings >= previous
        previous = result.total_earnings
    assert previous == money("733.37")


def test_undated_distributions_are_excluded_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    investment = _investment(
        lockup_period=LockupPeriod.one_year,
        payment_frequency=PaymentFrequency.monthly,
        transactions=(
            _distribution("66.67", _utc(2024, 2, 15)),
            *(LedgerTransaction(TransactionType.distribution, Decimal("66.67"), None) for _ in range(10)),
        ),
    )
    with caplog.at_level(logging.WARNING, logger="yieldcore"):
        result = compute_value(investment, "2024-02-20")
    assert result.months_elapsed == 1
    assert result.realized_earnings == money("66.67")
    assert result.realized_earnings <= result.projected_earnings
    assert any("undated" in message for message in caplog.messages)


def test_compounding_monthly_interest_is_next_month_credit() -> None:
    result = compute_value(_investment(), "2025-01-15")
    assert result.monthly_interest_amount == money(Decimal("11047.13") * Decimal("0.10") / Decimal("12"))


def test_withdrawn_investment_returns_frozen_earnings() -> None:
    investment = _investment(
        status=InvestmentStatus.withdrawn,
        total_earnings=Decimal("812.40"),
        withdrawal_notice_start_at=_utc(2025, 2, 1),
        withdrawn_at=_utc(2025, 5, 2),
    )
    at_withdrawal = compute_value(investment, "2025-05-02")
    much_later = compute_value(investment, "2030-01-01")
    assert at_withdrawal.total_earnings == money("812.40")
    assert at_withdrawal.current_value == money("10812.40")
    assert much_later == at_withdrawal
    assert much_later.is_withdrawable is False


def test_withdrawn_without_frozen_value_reports_zero() -> None:
    investment = _investment(status=InvestmentStatus.withdrawn, total_earnings=None)
    result = compute_value(investment, "2026-01-01")
    assert result.total_earnings == money("0.00")
    assert result.current_value == money("10000.00")


@pytest.mark.parametrize(
    "as_of, months, withdrawable",
    [
        ("2024-12-15", 11, False),
        ("2025-01-14T23:59:59Z", 11, False),
        ("2025-01-15", 12, True),
    ],
)
def test_one_year_withdrawable_boundary(as_of: str, months: int, withdrawable: bool) -> None:
    investment = _investment(lockup_period=LockupPeriod.one_year)
    result = compute_value(investment, as_of)
    assert result.months_elapsed == months
    assert result.is_withdrawable is withdrawable


def test_withdrawable_requires_active_status() -> None:
    investment = _investment(
        lockup_period=LockupPeriod.one_year,
        status=InvestmentStatus.withdrawal_notice,
        withdrawal_notice_start_at=_utc(2025, 2, 1),
    )
    assert compute_value(investment, "2025-03-01").is_withdrawable is False


def test_lockup_end_date_uses_calendar_months() -> None:
    investment = _investment(lockup_period=LockupPeriod.one_year, confirmed_at=_utc(2024, 1, 31))
    result = compute_value(investment, "2024-03-01")
    assert result.lockup_end_date is not None
    assert result.lockup_end_date.date() == date(2025, 1, 31)


def test_month_end_confirmation_counts_short_month() -> None:
    investment = _investment(confirmed_at=_utc(2024, 1, 31))
    assert compute_value(investment, "2024-02-28").months_elapsed == 0
    assert compute_value(investment, "2024-02-29").months_elapsed == 1


def test_as_of_before_confirmation_is_zero() -> None:
    result = compute_value(_investment(), "2023-12-01")
    assert result.months_elapsed == 0
    assert result.total_earnings == money("0.00")


def test_invalid_as_of_fails_loudly() -> None:
    with pytest.raises(InvalidTimestamp):
        compute_value(_investment(), "not-a-date")


def test_unknown_lockup_period_is_configuration_error() -> None:
    record = {
        "id": 7,
        "amount": 5000,
        "lockupPeriod": "5-year",
        "paymentFrequency": "monthly",
        "status": "active",
        "confirmedAt": "2024-01-01T00:00:00.000Z",
    }
    with pytest.raises(ConfigurationError):
        compute_value(record, "2024-06-01")


def test_unknown_payment_frequency_is_configuration_error() -> None:
    record = {"amount": 5000, "lockupPeriod": "1-year", "paymentFrequency": "weekly", "status": "active"}
    with pytest.raises(ConfigurationError):
        compute_value(record, "2024-06-01")


def test_backend_record_is_accepted() -> None:
    record = {
        "id": "INV-10001",
        "amount": "10000",
        "lockupPeriod": "3-Year",
        "paymentFrequency": "COMPOUNDING",
        "status": "active",
        "confirmedAt": "2024-01-15T00:00:00.000Z",
        "transactions": None,
    }
    assert compute_value(record, "2025-01-15").current_value == money("11047.13")


def test_missing_confirmation_on_active_investment_is_logged_not_fatal(caplog: pytest.LogCaptureFixture) -> None:
    record = {
        "id": 42,
        "amount": 3000,
        "lockupPeriod": "1-year",
        "paymentFrequency": "compounding",
        "status": "active",
        "confirmedAt": "garbage",
    }
    with caplog.at_level(logging.WARNING, logger="yieldcore"):
        result = compute_value(record, "2025-06-01")
    assert result.current_value == money("3000.00")
    assert result.total_earnings == money("0.00")
    assert result.lockup_end_date is None
    assert any("confirmedAt" in message for message in caplog.messages)


def test_pending_investment_does_not_accrue() -> None:
    investment = _investment(status=InvestmentStatus.pending, confirmed_at=None)
    result = compute_value(investment, "2026-01-01")
    assert result.total_earnings == money("0.00")
    assert result.is_withdrawable is False


def test_withdrawal_notice_keeps_accruing_by_default() -> None:
    investment = _investment(
        lockup_period=LockupPeriod.one_year,
        confirmed_at=_utc(2024, 1, 1),
        status=InvestmentStatus.withdrawal_notice,
        withdrawal_notice_start_at=_utc(2025, 1, 10),
    )
    result = compute_value(investment, "2025-04-01", settings=Settings(accrue_during_withdrawal_notice=True))
    assert result.months_elapsed == 15


def test_withdrawal_notice_can_freeze_at_request_time() -> None:
    investment = _investment(
        lockup_period=LockupPeriod.one_year,
        confirmed_at=_utc(2024, 1, 1),
        status=InvestmentStatus.withdrawal_notice,
        withdrawal_notice_start_at=_utc(2025, 1, 10),
    )
    frozen = Settings(accrue_during_withdrawal_notice=False)
    at_request = compute_value(investment, "2025-01-10", settings=frozen)
    later = compute_value(investment, "2025-04-01", settings=frozen)
    assert later.months_elapsed == 12
    assert later == at_request
