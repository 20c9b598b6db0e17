from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from yieldcore.models.enums import InvestmentStatus, LockupPeriod, PaymentFrequency
from yieldcore.schemas.common import CamelModel


class ValueResultOut(CamelModel):
    current_value: Decimal
    total_earnings: Decimal
    monthly_interest_amount: Decimal
    months_elapsed: int
    is_withdrawable: bool
    lockup_end_date: datetime | None = None
    realized_earnings: Decimal
    projected_earnings: Decimal
    apy: Decimal


class StatusResultOut(CamelModel):
    status: InvestmentStatus
    status_label: str
    is_active: bool
    is_locked: bool
    is_withdrawable: bool
    lockup_end_date: datetime | None = None
    withdrawal_notice_start_at: datetime | None = None
    payout_due_by: datetime | None = None


class InvestmentOut(CamelModel):
    id: Any = None
    amount: Decimal
    bonds: int
    lockup_period: LockupPeriod
    payment_frequency: PaymentFrequency
    status: InvestmentStatus
    created_at: datetime | None = None
    confirmed_at: datetime | None = None
    withdrawal_notice_start_at: datetime | None = None
    payout_due_by: datetime | None = None
    withdrawn_at: datetime | None = None


class InvestmentViewOut(CamelModel):
    investment: InvestmentOut
    calculation: ValueResultOut
    status: StatusResultOut


class SeriesPointOut(CamelModel):
    date: datetime
    value: Decimal


class PortfolioSnapshotOut(CamelModel):
    as_of: datetime
    total_invested: Decimal
    total_pending: Decimal
    total_earnings: Decimal
    compounding_earnings: Decimal
    monthly_earnings: Decimal
    investments: list[InvestmentViewOut]
    series: list[SeriesPointOut]


class GrowthProjectionOut(CamelModel):
    label: str
    months: int
    projected_value: Decimal
    growth: Decimal
    projected_revenue: Decimal
    monthly_payout: Decimal


class PayoutBreakdownOut(CamelModel):
    principal: Decimal
    total_earnings: Decimal
    compounded_interest: Decimal
    current_month_accrual: Decimal
    final_value: Decimal
    payout_due_by: datetime | None = None


class ReconciliationOut(CamelModel):
    passed: bool
    ledger_total: Decimal
    expected_total: Decimal
    mismatch: Decimal
    posted_count: int
    expected_count: int
    reasons: list[str]
