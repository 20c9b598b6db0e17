from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from yieldcore.core.config import Settings, get_settings
from yieldcore.models.enums import (
    CONFIRMED_STATUSES,
    HELD_STATUSES,
    UNFUNDED_STATUSES,
    InvestmentStatus,
    PaymentFrequency,
)
from yieldcore.models.investment import Investment
from yieldcore.schemas.investment import ActivityEvent, parse_activity, parse_investment
from yieldcore.services.accrual import ValueResult, calculate
from yieldcore.services.status import StatusResult, derive_status
from yieldcore.utils.dates import TimestampLike, parse_timestamp, trailing_month_ends
from yieldcore.utils.decimal_math import money


logger = logging.getLogger("yieldcore.portfolio")

CONFIRMATION_EVENT = "investment_confirmed"


@dataclass(frozen=True)
class InvestmentView:
    investment: Investment
    calculation: ValueResult
    status: StatusResult


@dataclass(frozen=True)
class SeriesPoint:
    date: datetime
    value: Decimal


@dataclass(frozen=True)
class PortfolioSnapshot:
    as_of: datetime
    total_invested: Decimal
    total_pending: Decimal
    total_earnings: Decimal
    compounding_earnings: Decimal
    monthly_earnings: Decimal
    investments: list[InvestmentView]
    series: list[SeriesPoint]


def apply_confirmation_fallback(
    investments: list[Investment],
    activity: list[ActivityEvent],
) -> list[Investment]:
    """Fill a missing ``confirmed_at`` from the user's ``investment_confirmed`` activity."""
    if not activity:
        return investments
    confirmations: dict[str, datetime] = {}
    for event in activity:
        if event.type != CONFIRMATION_EVENT or event.date is None or event.investment_id is None:
            continue
        confirmations.setdefault(str(event.investment_id), event.date)

    rows: list[Investment] = []
    for investment in investments:
        fallback = confirmations.get(str(investment.id))
        if investment.confirmed_at is None and investment.is_confirmed_status and fallback is not None:
            logger.debug("Using activity confirmation date for investment %s.", investment.id)
            investment = replace(investment, confirmed_at=fallback)
        rows.append(investment)
    return rows


def lifetime_earnings(investment: Investment, calculation: ValueResult) -> Decimal:
    if investment.status == InvestmentStatus.withdrawn:
        return money(investment.total_earnings)
    if investment.status in HELD_STATUSES:
        return calculation.total_earnings
    return money(0)


def sort_for_display(views: Iterable[InvestmentView]) -> list[InvestmentView]:
    """Drafts first, then everything else by ``created_at``, newest first."""

    def key(view: InvestmentView) -> tuple[int, float]:
        created = view.investment.created_at
        timestamp = created.timestamp() if created is not None else 0.0
        return (0 if view.status.status == InvestmentStatus.draft else 1, -timestamp)

    return sorted(views, key=key)


def freeze_point(investment: Investment) -> datetime | None:
    """When a withdrawn investment stopped moving: notice start, else ``withdrawn_at``."""
    if investment.withdrawal_notice_start_at is not None:
        return investment.withdrawal_notice_start_at
    return investment.withdrawn_at


def _earnings_at(investment: Investment, point: datetime, settings: Settings, *, final: bool) -> Decimal:
    if investment.status != InvestmentStatus.withdrawn:
        return calculate(investment, point, settings).total_earnings

    frozen = money(investment.total_earnings)
    frozen_from = freeze_point(investment)
    if final or frozen_from is None or frozen_from <= point:
        return frozen
    # Before the freeze it was simply active; never above what it finally earned.
    held = replace(investment, status=InvestmentStatus.active)
    return min(calculate(held, point, settings).total_earnings, frozen)


def build_earnings_series(
    investments: Iterable[Investment],
    as_of: datetime,
    *,
    settings: Settings | None = None,
) -> list[SeriesPoint]:
    active_settings = settings if settings is not None else get_settings()
    confirmed = [
        investment
        for investment in investments
        if investment.status in CONFIRMED_STATUSES and investment.confirmed_at is not None
    ]
    if not confirmed:
        return []

    history = trailing_month_ends(as_of, active_settings.series_points - 1)
    points: list[SeriesPoint] = []
    for index, point in enumerate([*history, as_of]):
        final = index == len(history)
        total = money(0)
        for investment in confirmed:
            if investment.confirmed_at > point:
                continue
            total = money(total + _earnings_at(investment, point, active_settings, final=final))
        points.append(SeriesPoint(date=point, value=total))
    return points


def aggregate(
    investments: Iterable[Investment | Mapping[str, Any]],
    as_of: TimestampLike,
    *,
    activity: list[Mapping[str, Any]] | None = None,
    settings: Settings | None = None,
) -> PortfolioSnapshot:
    active_settings = settings if settings is not None else get_settings()
    as_of_dt = parse_timestamp(as_of)
    parsed = apply_confirmation_fallback(
        [parse_investment(item) for item in investments],
        parse_activity(activity),
    )

    total_invested = money(0)
    total_pending = money(0)
    total_earnings = money(0)
    compounding_earnings = money(0)
    monthly_earnings = money(0)
    views: list[InvestmentView] = []

    for investment in parsed:
        if investment.status == InvestmentStatus.rejected:
            continue
        calculation = calculate(investment, as_of_dt, active_settings)
        status = derive_status(investment, as_of_dt, active_settings)
        views.append(InvestmentView(investment=investment, calculation=calculation, status=status))

        if investment.status in UNFUNDED_STATUSES:
            total_pending = money(total_pending + investment.amount)
            continue
        if investment.status in HELD_STATUSES:
            total_invested = money(total_invested + investment.amount)

        earnings = lifetime_earnings(investment, calculation)
        total_earnings = money(total_earnings + earnings)
        if investment.payment_frequency == PaymentFrequency.monthly:
            monthly_earnings = money(monthly_earnings + earnings)
        else:
            compounding_earnings = money(compounding_earnings + earnings)

    logger.debug(
        "Aggregated %d investments as of %s: invested=%s earnings=%s",
        len(views),
        as_of_dt.isoformat(),
        total_invested,
        total_earnings,
    )
    return PortfolioSnapshot(
        as_of=as_of_dt,
        total_invested=total_invested,
        total_pending=total_pending,
        total_earnings=total_earnings,
        compounding_earnings=compounding_earnings,
        monthly_earnings=monthly_earnings,
        investments=sort_for_display(views),
        series=build_earnings_series(parsed, as_of_dt, settings=active_settings),
    )
