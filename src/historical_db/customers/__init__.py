"""Customer search feature: repository, service and HTTP routes."""

from historical_db.customers.models import (
    CustomerSearchCriteria,
    CustomerSearchInput,
    CustomerSearchResponse,
    CustomerSearchResult,
    CustomerSummary,
    Pagination,
    RecentOrder,
)
from historical_db.customers.repository import CustomerRepository
from historical_db.customers.routes import create_customers_router
from historical_db.customers.service import CustomerService

__all__ = [
    "CustomerRepository",
    "CustomerSearchCriteria",
    "CustomerSearchInput",
    "CustomerSearchResponse",
    "CustomerSearchResult",
    "CustomerService",
    "CustomerSummary",
    "Pagination",
    "RecentOrder",
    "create_customers_router",
]
