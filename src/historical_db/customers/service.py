"""Paging rules for customer search."""

import math
from typing import Optional

from historical_db.customers.models import (
    CustomerSearchCriteria,
    CustomerSearchInput,
    CustomerSearchResponse,
    Pagination,
)
from historical_db.customers.repository import CustomerRepository

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 25


def normalize_page(page: Optional[float]) -> int:
    if not page or not math.isfinite(page) or page < 1:
        return 1
    return math.floor(page)


def normalize_page_size(page_size: Optional[float]) -> int:
    if not page_size or not math.isfinite(page_size):
        return DEFAULT_PAGE_SIZE
    return max(MIN_PAGE_SIZE, min(MAX_PAGE_SIZE, math.floor(page_size)))


class CustomerService:
    def __init__(self, repository: CustomerRepository):
        self._repository = repository

    async def search_customers(self, search: CustomerSearchInput) -> CustomerSearchResponse:
        """
        Search customers and wrap the page in pagination metadata.

        Pages are 1-based. ``total_pages`` is 0 when nothing matches.
        """
        page = normalize_page(search.page)
        page_size = normalize_page_size(search.page_size)
        criteria = CustomerSearchCriteria(
            name=search.name,
            customer_number=search.customer_number,
            phone=search.phone,
            limit=page_size,
            offset=(page - 1) * page_size,
        )

        result = await self._repository.search(criteria)

        return CustomerSearchResponse(
            data=result.customers,
            pagination=Pagination(
                page=page,
                page_size=page_size,
                total_records=result.total,
                total_pages=0 if result.total == 0 else math.ceil(result.total / page_size),
            ),
        )
