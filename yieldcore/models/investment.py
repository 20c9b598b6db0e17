from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any

from yieldcore.models.enums import (
    BOND_FACE_VALUE,
    CONFIRMED_STATUSES,
    InvestmentStatus,
    LockupPeriod,
    PaymentFrequency,
    TransactionType,
)


REJECTED = "rejected"
DEFAULT_NOTICE_DAYS = 90


@dataclass(frozen=True)
class LedgerTransaction:
    type: TransactionType | str
    amount: Decimal
    date: datetime | None
    status: str = "completed"

    @property
    def counts_as_realized(self) -> bool:
        return self.status.lower() != REJECTED


@dataclass(frozen=True)
class Investment:
    id: Any
    amount: Decimal
    lockup_period: LockupPeriod
    payment_frequency: PaymentFrequency
    status: InvestmentStatus
    created_at: datetime | None = None
    confirmed_at: datetime | None = None
    withdrawal_notice_start_at: datetime | None = None
    payout_due_by: datetime | None = None
    withdrawn_at: datetime | None = None
    total_earnings: Decimal | None = None
    transactions: tuple[LedgerTransaction, ...] = field(default_factory=tuple)

    @property
    def bonds(self) -> int:
        return int(self.amount // BOND_FACE_VALUE)

    @property
    def is_confirmed_status(self) -> bool:
        return self.status in CONFIRMED_STATUSES

    def effective_payout_due_by(self, notice_days: int = DEFAULT_NOTICE_DAYS) -> datetime | None:
        if self.withdrawal_notice_start_at is None:
            return None
        if self.payout_due_by is not None:
            return self.payout_due_by
        return self.withdrawal_notice_start_at + timedelta(days=notice_days)

    def distributions(self) -> list[LedgerTransaction]:
        return [
            tx
            for tx in self.transactions
            if tx.type == TransactionType.distribution and tx.counts_as_realized
        ]
