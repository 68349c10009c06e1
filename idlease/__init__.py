"""idlease: short-lived numeric id leases over HTTP."""

from .allocator import Allocator, LeaseGrant
from .clock import FixedClock, SystemClock
from .config import Config, load_config
from .errors import ConfigError, LeaseError, NotLeased, OutOfRange, PoolExhausted
from .lease_table import Lease, LeaseState, LeaseTable
from .reclaimer import Reclaimer

__all__ = [
    "Allocator",
    "Config",
    "ConfigError",
    "FixedClock",
    "Lease",
    "LeaseError",
    "LeaseGrant",
    "LeaseState",
    "LeaseTable",
    "NotLeased",
    "OutOfRange",
    "PoolExhausted",
    "Reclaimer",
    "SystemClock",
    "load_config",
]
