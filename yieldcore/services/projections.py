from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from yieldcore.core.config import Settings, get_settings
from yieldcore.models.enums import InvestmentStatus, PaymentFrequency
from yieldcore.models.investment import Investment
from yieldcore.schemas.investment import parse_investment
from yieldcore.services.accrual import calculate, effective_as_of, monthly_payout, monthly_rate
from yieldcore.utils.dates import TimestampLike, add_months, parse_timestamp
from yieldcore.utils.decimal_math import money


DEFAULT_HORIZONS = (12, 60, 120)


@dataclass(frozen=True)
class GrowthProjection:
    label: str
    months: int
    projected_value: Decimal
    growth: Decimal
    projected_revenue: Decimal
    monthly_payout: Decimal


@dataclass(frozen=True)
class PayoutBreakdown:
    principal: Decimal
    total_earnings: Decimal
    compounded_interest: Decimal
    current_month_accrual: Decimal
    final_value: Decimal
    payout_due_by: datetime | None


def horizon_label(months: int) -> str:
    if months % 12 == 0:
        years = months // 12
        return f"{years} Year" if years == 1 else f"{years} Years"
    return f"{months} Month" if months == 1 else f"{months} Months"


def growth_projections(
    investment: Investment | Mapping[str, Any],
    as_of: TimestampLike,
    horizons: Sequence[int] = DEFAULT_HORIZONS,
    *,
    settings: Settings | None = None,
) -> list[GrowthProjection]:
    """Forward-looking figures for the detail view, starting from today's value.

    Monthly investments project cash revenue (payout x months) on a flat
    principal; compounding investments project the current value forward.
    """
    active_settings = settings if settings is not None else get_settings()
    parsed = parse_investment(investment)
    base = calculate(parsed, parse_timestamp(as_of), active_settings).current_value
    rate = monthly_rate(parsed)

    rows: list[GrowthProjection] = []
    for months in horizons:
        if months < 0:
            raise ValueError("Projection horizon must be >= 0 months.")
        if parsed.payment_frequency == PaymentFrequency.monthly:
            payout = monthly_payout(parsed)
            revenue = money(payout * months)
            rows.append(
                GrowthProjection(
                    label=horizon_label(months),
                    months=months,
                    projected_value=base,
                    growth=revenue,
                    projected_revenue=revenue,
                    monthly_payout=payout,
                )
            )
        else:
            projected = money(base * (Decimal("1") + rate) ** months)
            rows.append(
                GrowthProjection(
                    label=horizon_label(months),
                    months=months,
                    projected_value=projected,
                    growth=money(projected - base),
                    projected_revenue=money(0),
                    monthly_payout=money(0),
                )
            )
    return rows


def _partial_month_fraction(investment: Investment, point: datetime, months_elapsed: int) -> Decimal:
    period_start = add_months(investment.confirmed_at, months_elapsed)
    period_end = add_months(investment.confirmed_at, months_elapsed + 1)
    span = (period_end - period_start).total_seconds()
    elapsed = (point - period_start).total_seconds()
    if span <= 0 or elapsed <= 0:
        return Decimal("0")
    return min(Decimal(str(elapsed)) / Decimal(str(span)), Decimal("1"))


def withdrawal_payout(
    investment: Investment | Mapping[str, Any],
    as_of: TimestampLike,
    *,
    settings: Settings | None = None,
) -> PayoutBreakdown:
    """Amount paid out if the investment were settled at ``as_of``.

    Compounding: the whole current value; ``current_month_accrual`` is the
    interest credited in the latest whole month. Monthly: principal plus the
    prorated interest of the running month not yet distributed.
    """
    active_settings = settings if settings is not None else get_settings()
    parsed = parse_investment(investment)
    as_of_dt = parse_timestamp(as_of)
    result = calculate(parsed, as_of_dt, active_settings)
    due_by = parsed.effective_payout_due_by(active_settings.withdrawal_notice_days)

    if parsed.status == InvestmentStatus.withdrawn or parsed.confirmed_at is None:
        return PayoutBreakdown(
            principal=money(parsed.amount),
            total_earnings=result.total_earnings,
            compounded_interest=result.total_earnings
            if parsed.payment_frequency == PaymentFrequency.compounding
            else money(0),
            current_month_accrual=money(0),
            final_value=result.current_value,
            payout_due_by=due_by,
        )

    if parsed.payment_frequency == PaymentFrequency.compounding:
        accrual = money(0)
        if result.months_elapsed > 0:
            previous = parsed.amount * (Decimal("1") + monthly_rate(parsed)) ** (result.months_elapsed - 1)
            accrual = money(result.current_value - money(previous))
        return PayoutBreakdown(
            principal=money(parsed.amount),
            total_earnings=result.total_earnings,
            compounded_interest=money(max(result.total_earnings - accrual, Decimal("0"))),
            current_month_accrual=accrual,
            final_value=result.current_value,
            payout_due_by=due_by,
        )

    point = effective_as_of(parsed, as_of_dt, active_settings)
    fraction = _partial_month_fraction(parsed, point, result.months_elapsed)
    accrual = money(monthly_payout(parsed) * fraction)
    return PayoutBreakdown(
        principal=money(parsed.amount),
        total_earnings=result.total_earnings,
        compounded_interest=money(0),
        current_month_accrual=accrual,
        final_value=money(parsed.amount + accrual),
        payout_due_by=due_by,
    )
