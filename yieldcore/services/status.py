from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from yieldcore.core.config import Settings, get_settings
from yieldcore.models.enums import InvestmentStatus
from yieldcore.models.investment import Investment
from yieldcore.schemas.investment import parse_investment
from yieldcore.services.accrual import effective_as_of, lockup_end_date
from yieldcore.utils.dates import TimestampLike, parse_timestamp, whole_months_between


STATUS_LABELS = {
    InvestmentStatus.draft: "Draft",
    InvestmentStatus.pending: "Pending",
    InvestmentStatus.active: "Active",
    InvestmentStatus.withdrawal_notice: "Withdrawal Notice",
    InvestmentStatus.withdrawn: "Withdrawn",
    InvestmentStatus.rejected: "Rejected",
}
WITHDRAWABLE_LABEL = "Available for Withdrawal"

TRANSITIONS: dict[InvestmentStatus, frozenset[InvestmentStatus]] = {
    InvestmentStatus.draft: frozenset({InvestmentStatus.pending}),
    InvestmentStatus.pending: frozenset({InvestmentStatus.active, InvestmentStatus.rejected}),
    InvestmentStatus.active: frozenset({InvestmentStatus.withdrawal_notice}),
    InvestmentStatus.withdrawal_notice: frozenset({InvestmentStatus.withdrawn}),
    InvestmentStatus.withdrawn: frozenset(),
    InvestmentStatus.rejected: frozenset(),
}


@dataclass(frozen=True)
class StatusResult:
    status: InvestmentStatus
    status_label: str
    is_active: bool
    is_locked: bool
    is_withdrawable: bool
    lockup_end_date: datetime | None
    withdrawal_notice_start_at: datetime | None
    payout_due_by: datetime | None


def allowed_transitions(status: InvestmentStatus) -> frozenset[InvestmentStatus]:
    return TRANSITIONS[status]


def can_transition(current: InvestmentStatus, target: InvestmentStatus) -> bool:
    return target in TRANSITIONS[current]


def is_terminal(status: InvestmentStatus) -> bool:
    return not TRANSITIONS[status]


def _lockup_elapsed(investment: Investment, as_of: datetime, settings: Settings) -> bool:
    if investment.confirmed_at is None:
        return False
    point = effective_as_of(investment, as_of, settings)
    months = whole_months_between(investment.confirmed_at, point)
    return months >= investment.lockup_period.term_months


def derive_status(investment: Investment, as_of: datetime, settings: Settings) -> StatusResult:
    status = investment.status
    withdrawable = status == InvestmentStatus.active and _lockup_elapsed(investment, as_of, settings)

    if status == InvestmentStatus.active:
        is_locked = not withdrawable
    else:
        is_locked = status in (InvestmentStatus.pending, InvestmentStatus.withdrawal_notice)

    return StatusResult(
        status=status,
        status_label=WITHDRAWABLE_LABEL if withdrawable else STATUS_LABELS[status],
        is_active=status in (InvestmentStatus.active, InvestmentStatus.withdrawal_notice),
        is_locked=is_locked,
        is_withdrawable=withdrawable,
        lockup_end_date=lockup_end_date(investment) if investment.is_confirmed_status else None,
        withdrawal_notice_start_at=investment.withdrawal_notice_start_at,
        payout_due_by=investment.effective_payout_due_by(settings.withdrawal_notice_days),
    )


def resolve_status(
    investment: Investment | Mapping[str, Any],
    as_of: TimestampLike,
    *,
    settings: Settings | None = None,
) -> StatusResult:
    active_settings = settings if settings is not None else get_settings()
    parsed = parse_investment(investment)
    return derive_status(parsed, parse_timestamp(as_of), active_settings)
