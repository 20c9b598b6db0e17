import enum
from decimal import Decimal

from yieldcore.core.errors import ConfigurationError


class _ParsableEnum(str, enum.Enum):
    @classmethod
    def parse(cls, value: object, field: str):
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower() if value is not None else ""
        for member in cls:
            if member.value == normalized:
                return member
        raise ConfigurationError(field, value)


class InvestmentStatus(_ParsableEnum):
    draft = "draft"
    pending = "pending"
    active = "active"
    withdrawal_notice = "withdrawal_notice"
    withdrawn = "withdrawn"
    rejected = "rejected"


class LockupPeriod(_ParsableEnum):
    one_year = "1-year"
    three_year = "3-year"

    @property
    def apy(self) -> Decimal:
        return LOCKUP_APY[self]

    @property
    def term_months(self) -> int:
        return LOCKUP_TERM_MONTHS[self]


class PaymentFrequency(_ParsableEnum):
    monthly = "monthly"
    compounding = "compounding"


class TransactionType(str, enum.Enum):
    distribution = "distribution"
    contribution = "contribution"


LOCKUP_APY = {
    LockupPeriod.one_year: Decimal("0.08"),
    LockupPeriod.three_year: Decimal("0.10"),
}

LOCKUP_TERM_MONTHS = {
    LockupPeriod.one_year: 12,
    LockupPeriod.three_year: 36,
}

CONFIRMED_STATUSES = frozenset(
    {InvestmentStatus.active, InvestmentStatus.withdrawal_notice, InvestmentStatus.withdrawn}
)
HELD_STATUSES = frozenset({InvestmentStatus.active, InvestmentStatus.withdrawal_notice})
UNFUNDED_STATUSES = frozenset({InvestmentStatus.pending, InvestmentStatus.draft})

BOND_FACE_VALUE = Decimal("10")
