"""HTTP routes for customer search."""

import math
from typing import Optional

from fastapi import APIRouter, Query

from historical_db.customers.models import CustomerSearchInput, CustomerSearchResponse
from historical_db.customers.service import CustomerService


def parse_string(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()


def parse_number(value: Optional[str]) -> Optional[float]:
    """Parse a query-string number, returning None for blank or non-numeric input."""
    text = parse_string(value)
    if text is None:
        return None
    try:
        parsed = float(text)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def create_customers_router(service: CustomerService) -> APIRouter:
    router = APIRouter(tags=["customers"])

    @router.get(
        "",
        response_model=CustomerSearchResponse,
        response_model_exclude_none=True,
    )
    async def search_customers(
        name: Optional[str] = Query(default=None),
        customer_number: Optional[str] = Query(default=None, alias="customerNumber"),
        phone: Optional[str] = Query(default=None),
        page: Optional[str] = Query(default=None),
        page_size: Optional[str] = Query(default=None, alias="pageSize"),
    ):
        search = CustomerSearchInput(
            name=parse_string(name),
            customer_number=parse_string(customer_number),
            phone=parse_string(phone),
            page=parse_number(page),
            page_size=parse_number(page_size),
        )
        return await service.search_customers(search)

    return router
