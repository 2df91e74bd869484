from devfolio.backend.client import Filter, HostedBackend, Order, eq, gte, is_null, lte, neq, not_null
from devfolio.backend.rest import RestBackend

__all__ = [
    "Filter",
    "HostedBackend",
    "Order",
    "RestBackend",
    "eq",
    "gte",
    "is_null",
    "lte",
    "neq",
    "not_null",
]
