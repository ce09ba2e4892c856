from .backend import InMemoryStateBackend, StateBackend
from .sql_backend import SqlStateBackend
from .state import AttributionStateStore, ReferralRecord, UserIdentity

__all__ = [
    "AttributionStateStore",
    "InMemoryStateBackend",
    "ReferralRecord",
    "SqlStateBackend",
    "StateBackend",
    "UserIdentity",
]
