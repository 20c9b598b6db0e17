"""Parsing of backend investment records into engine domain objects.

The backend API serves camelCase JSON (``lockupPeriod``, ``confirmedAt`` ...).
Records are validated here once, so the services only ever see a frozen
``Investment`` with aware UTC datetimes and ``Decimal`` amounts.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import Field, ValidationInfo, field_validator

from yieldcore.core.errors import InvalidTimestamp
from yieldcore.models.enums import InvestmentStatus, LockupPeriod, PaymentFrequency
from yieldcore.models.investment import Investment, LedgerTransaction
from yieldcore.schemas.common import CamelModel
from yieldcore.utils.decimal_math import to_decimal
from yieldcore.utils.dates import parse_timestamp


logger = logging.getLogger("yieldcore.schemas")


def _lenient_timestamp(value: Any, field_name: str) -> datetime | None:
    if value is None or value == "":
        return None
    try:
        return parse_timestamp(value)
    except InvalidTimestamp:
        logger.warning("Ignoring malformed %s timestamp %r.", field_name, value)
        return None


def _lenient_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    try:
        return to_decimal(value)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid decimal value {value!r}") from exc


class TransactionRecord(CamelModel):
    type: str = ""
    amount: Decimal = Decimal("0")
    date: datetime | None = None
    status: str = "completed"

    @field_validator("type", "status", mode="before")
    @classmethod
    def _normalize_text(cls, value: Any) -> str:
        return str(value or "").strip().lower()

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> Decimal:
        return _lenient_decimal(value) or Decimal("0")

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, value: Any) -> datetime | None:
        return _lenient_timestamp(value, "transaction date")

    def to_domain(self) -> LedgerTransaction:
        return LedgerTransaction(
            type=self.type,
            amount=self.amount,
            date=self.date,
            status=self.status or "completed",
        )


class InvestmentRecord(CamelModel):
    id: Any = None
    amount: Decimal = Decimal("0")
    lockup_period: Any = None
    payment_frequency: Any = None
    status: Any = None
    created_at: datetime | None = None
    confirmed_at: datetime | None = None
    withdrawal_notice_start_at: datetime | None = None
    payout_due_by: datetime | None = None
    withdrawn_at: datetime | None = None
    total_earnings: Decimal | None = None
    transactions: list[TransactionRecord] = Field(default_factory=list)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> Decimal:
        return _lenient_decimal(value) or Decimal("0")

    @field_validator("total_earnings", mode="before")
    @classmethod
    def _total_earnings(cls, value: Any) -> Decimal | None:
        return _lenient_decimal(value)

    @field_validator("status", mode="before")
    @classmethod
    def _unwrap_status(cls, value: Any) -> Any:
        # Enriched view objects carry the status as {"status": "active", "statusLabel": ...}.
        if isinstance(value, Mapping):
            return value.get("status")
        return value

    @field_validator(
        "created_at",
        "confirmed_at",
        "withdrawal_notice_start_at",
        "payout_due_by",
        "withdrawn_at",
        mode="before",
    )
    @classmethod
    def _timestamps(cls, value: Any, info: ValidationInfo) -> datetime | None:
        return _lenient_timestamp(value, info.field_name)

    @field_validator("transactions", mode="before")
    @classmethod
    def _transactions(cls, value: Any) -> Any:
        return value if value is not None else []

    def to_domain(self) -> Investment:
        return Investment(
            id=self.id,
            amount=self.amount,
            lockup_period=LockupPeriod.parse(self.lockup_period, "lockupPeriod"),
            payment_frequency=PaymentFrequency.parse(self.payment_frequency, "paymentFrequency"),
            status=InvestmentStatus.parse(self.status, "status"),
            created_at=self.created_at,
            confirmed_at=self.confirmed_at,
            withdrawal_notice_start_at=self.withdrawal_notice_start_at,
            payout_due_by=self.payout_due_by,
            withdrawn_at=self.withdrawn_at,
            total_earnings=self.total_earnings,
            transactions=tuple(tx.to_domain() for tx in self.transactions),
        )


class ActivityEvent(CamelModel):
    type: str = ""
    investment_id: Any = None
    date: datetime | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, value: Any) -> datetime | None:
        return _lenient_timestamp(value, "activity date")


def parse_investment(record: Investment | Mapping[str, Any]) -> Investment:
    if isinstance(record, Investment):
        return record
    return InvestmentRecord.model_validate(dict(record)).to_domain()


def parse_activity(events: list[Mapping[str, Any]] | None) -> list[ActivityEvent]:
    return [ActivityEvent.model_validate(dict(event)) for event in events or []]
