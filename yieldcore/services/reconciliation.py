from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any

from yieldcore.core.config import Settings, get_settings
from yieldcore.models.enums import InvestmentStatus, PaymentFrequency, TransactionType
from yieldcore.models.investment import Investment
from yieldcore.schemas.investment import parse_investment
from yieldcore.services.accrual import calculate, effective_as_of
from yieldcore.utils.dates import TimestampLike, parse_timestamp
from yieldcore.utils.decimal_math import money


CENT = Decimal("0.01")


@dataclass(frozen=True)
class ReconciliationResult:
    passed: bool
    ledger_total: Decimal
    expected_total: Decimal
    mismatch: Decimal
    posted_count: int
    expected_count: int
    reasons: list[str]


def reconcile_distributions(
    investment: Investment | Mapping[str, Any],
    as_of: TimestampLike,
    *,
    settings: Settings | None = None,
) -> ReconciliationResult:
    """Compare posted ledger interest with the analytic schedule.

    Monthly investments are checked against ``months x payout`` using their
    distributions; compounding investments against the analytic earnings using
    their contributions, allowing one cent of rounding per posted month.
    """
    active_settings = settings if settings is not None else get_settings()
    parsed = parse_investment(investment)
    as_of_dt = parse_timestamp(as_of)
    point = effective_as_of(parsed, as_of_dt, active_settings)
    if parsed.status == InvestmentStatus.withdrawn and parsed.withdrawn_at is not None:
        point = min(point, parsed.withdrawn_at)
    # Withdrawn investments are reconciled against the schedule they ran on while held.
    scheduled = parsed if parsed.status != InvestmentStatus.withdrawn else _as_held(parsed)
    result = calculate(scheduled, point, active_settings)

    ledger_type = (
        TransactionType.distribution
        if parsed.payment_frequency == PaymentFrequency.monthly
        else TransactionType.contribution
    )
    candidates = [tx for tx in parsed.transactions if tx.type == ledger_type]
    undated_count = sum(1 for tx in candidates if tx.date is None)
    posted = [tx for tx in candidates if tx.date is not None and tx.date <= point]
    accepted = [tx for tx in posted if tx.counts_as_realized]
    rejected_count = len(posted) - len(accepted)

    ledger_total = money(sum((tx.amount for tx in accepted), Decimal("0")))
    expected_total = result.projected_earnings
    mismatch = money(ledger_total - expected_total)
    tolerance = (
        money(CENT * result.months_elapsed)
        if parsed.payment_frequency == PaymentFrequency.compounding
        else money(0)
    )

    reasons: list[str] = []
    if len(accepted) < result.months_elapsed:
        reasons.append(
            f"{result.months_elapsed - len(accepted)} of {result.months_elapsed} expected "
            f"{ledger_type.value} postings are missing."
        )
    elif len(accepted) > result.months_elapsed:
        reasons.append(
            f"{len(accepted) - result.months_elapsed} more {ledger_type.value} postings than "
            f"elapsed months ({result.months_elapsed})."
        )
    if abs(mismatch) > tolerance:
        reasons.append(
            f"Ledger total USD {ledger_total:,.2f} differs from expected USD {expected_total:,.2f} "
            f"by USD {abs(mismatch):,.2f}."
        )
    if rejected_count:
        reasons.append(f"{rejected_count} rejected {ledger_type.value} posting(s) excluded.")
    if undated_count:
        reasons.append(f"{undated_count} undated {ledger_type.value} posting(s) excluded.")

    return ReconciliationResult(
        passed=abs(mismatch) <= tolerance and len(accepted) == result.months_elapsed,
        ledger_total=ledger_total,
        expected_total=expected_total,
        mismatch=mismatch,
        posted_count=len(accepted),
        expected_count=result.months_elapsed,
        reasons=reasons,
    )


def _as_held(investment: Investment) -> Investment:
    return replace(investment, status=InvestmentStatus.active)
