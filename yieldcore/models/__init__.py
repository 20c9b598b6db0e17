from yieldcore.models.enums import InvestmentStatus, LockupPeriod, PaymentFrequency, TransactionType
from yieldcore.models.investment import Investment, LedgerTransaction

__all__ = [
    "InvestmentStatus",
    "LockupPeriod",
    "PaymentFrequency",
    "TransactionType",
    "Investment",
    "LedgerTransaction",
]
