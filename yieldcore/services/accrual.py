from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from yieldcore.core.config import Settings, get_settings
from yieldcore.models.enums import InvestmentStatus, PaymentFrequency
from yieldcore.models.investment import Investment
from yieldcore.schemas.investment import parse_investment
from yieldcore.utils.dates import TimestampLike, add_months, parse_timestamp, whole_months_between
from yieldcore.utils.decimal_math import money


logger = logging.getLogger("yieldcore.accrual")

MONTHS_PER_YEAR = Decimal("12")


@dataclass(frozen=True)
class ValueResult:
    """Valuation of one investment at one instant.

    ``monthly_interest_amount`` is the fixed cash payout for monthly
    investments. For compounding ones it is the interest the next whole month
    will credit on ``current_value``.
    """

    current_value: Decimal
    total_earnings: Decimal
    monthly_interest_amount: Decimal
    months_elapsed: int
    is_withdrawable: bool
    lockup_end_date: datetime | None
    realized_earnings: Decimal
    projected_earnings: Decimal
    apy: Decimal


def monthly_rate(investment: Investment) -> Decimal:
    return investment.lockup_period.apy / MONTHS_PER_YEAR


def monthly_payout(investment: Investment) -> Decimal:
    """Fixed cash distribution for a monthly-frequency investment."""
    return money(investment.amount * monthly_rate(investment))


def lockup_end_date(investment: Investment) -> datetime | None:
    if investment.confirmed_at is None:
        return None
    return add_months(investment.confirmed_at, investment.lockup_period.term_months)


def effective_as_of(investment: Investment, as_of: datetime, settings: Settings) -> datetime:
    if (
        investment.status == InvestmentStatus.withdrawal_notice
        and not settings.accrue_during_withdrawal_notice
        and investment.withdrawal_notice_start_at is not None
    ):
        return min(as_of, investment.withdrawal_notice_start_at)
    return as_of


def realized_distributions(investment: Investment, as_of: datetime) -> Decimal:
    total = Decimal("0")
    undated = 0
    for tx in investment.distributions():
        if tx.date is None:
            undated += 1
            continue
        if tx.date <= as_of:
            total += tx.amount
    if undated:
        logger.warning(
            "Investment %s has %d undated distribution(s); excluded from realized earnings.",
            investment.id,
            undated,
        )
    return total


def _frozen_result(investment: Investment) -> ValueResult:
    if investment.total_earnings is None:
        logger.warning(
            "Withdrawn investment %s has no frozen totalEarnings; reporting zero.",
            investment.id,
        )
    earnings = money(investment.total_earnings)
    return ValueResult(
        current_value=money(investment.amount + earnings),
        total_earnings=earnings,
        monthly_interest_amount=money(0),
        months_elapsed=0,
        is_withdrawable=False,
        lockup_end_date=None,
        realized_earnings=earnings,
        projected_earnings=earnings,
        apy=investment.lockup_period.apy,
    )


def _unconfirmed_result(investment: Investment) -> ValueResult:
    if investment.is_confirmed_status:
        logger.warning(
            "Investment %s is %s but has no confirmedAt; treating as not accruing.",
            investment.id,
            investment.status.value,
        )
    return ValueResult(
        current_value=money(investment.amount),
        total_earnings=money(0),
        monthly_interest_amount=monthly_payout(investment),
        months_elapsed=0,
        is_withdrawable=False,
        lockup_end_date=None,
        realized_earnings=money(0),
        projected_earnings=money(0),
        apy=investment.lockup_period.apy,
    )


def calculate(investment: Investment, as_of: datetime, settings: Settings) -> ValueResult:
    """Value an already-parsed investment at an aware UTC ``as_of``."""
    if investment.status == InvestmentStatus.withdrawn:
        return _frozen_result(investment)
    if investment.confirmed_at is None or not investment.is_confirmed_status:
        return _unconfirmed_result(investment)

    point = effective_as_of(investment, as_of, settings)
    rate = monthly_rate(investment)
    months = whole_months_between(investment.confirmed_at, point)
    term = investment.lockup_period.term_months
    amount = investment.amount

    if investment.payment_frequency == PaymentFrequency.compounding:
        value = amount * (Decimal("1") + rate) ** months
        earnings = value - amount
        realized = earnings
        projected = earnings
        next_interest = value * rate
    else:
        value = amount
        payout = monthly_payout(investment)
        projected = payout * months
        realized = realized_distributions(investment, point) if months > 0 else Decimal("0")
        earnings = realized
        next_interest = payout

    return ValueResult(
        current_value=money(value),
        total_earnings=money(earnings),
        monthly_interest_amount=money(next_interest),
        months_elapsed=months,
        is_withdrawable=months >= term and investment.status == InvestmentStatus.active,
        lockup_end_date=add_months(investment.confirmed_at, term),
        realized_earnings=money(realized),
        projected_earnings=money(projected),
        apy=investment.lockup_period.apy,
    )


def compute_value(
    investment: Investment | Mapping[str, Any],
    as_of: TimestampLike,
    *,
    settings: Settings | None = None,
) -> ValueResult:
    """Current value and earnings of ``investment`` as of ``as_of``.

    For monthly-frequency investments ``total_earnings`` is the ledger-realized
    figure (posted, non-rejected distributions); ``projected_earnings`` is the
    elapsed-months estimate. Compounding earnings are always analytic.
    """
    active_settings = settings if settings is not None else get_settings()
    parsed = parse_investment(investment)
    return calculate(parsed, parse_timestamp(as_of), active_settings)
