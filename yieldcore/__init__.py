from yieldcore.core.clock import SimulatedTimeSource, SystemTimeSource, TimeSource, as_of_iso
from yieldcore.core.config import Settings, get_settings
from yieldcore.core.errors import ConfigurationError, InvalidTimestamp, YieldcoreError
from yieldcore.services.accrual import ValueResult, compute_value
from yieldcore.services.portfolio import PortfolioSnapshot, aggregate
from yieldcore.services.projections import growth_projections, withdrawal_payout
from yieldcore.services.reconciliation import reconcile_distributions
from yieldcore.services.status import StatusResult, resolve_status

__all__ = [
    "SimulatedTimeSource",
    "SystemTimeSource",
    "TimeSource",
    "as_of_iso",
    "Settings",
    "get_settings",
    "ConfigurationError",
    "InvalidTimestamp",
    "YieldcoreError",
    "ValueResult",
    "compute_value",
    "PortfolioSnapshot",
    "aggregate",
    "growth_projections",
    "withdrawal_payout",
    "reconcile_distributions",
    "StatusResult",
    "resolve_status",
]
