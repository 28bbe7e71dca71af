"""
Customer search schemas.

Pydantic models for the customer search API. Field names are snake_case in
Python and camelCase on the wire.
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class RecentOrder(BaseModel):
    """One of a customer's latest orders."""

    model_config = ConfigDict(populate_by_name=True)

    order_number: str = Field(alias="orderNumber")
    customer_order_number: str | None = Field(default=None, alias="customerOrderNumber")
    order_date: str | None = Field(default=None, alias="orderDate")


class CustomerSummary(BaseModel):
    """Customer row with order statistics."""

    model_config = ConfigDict(populate_by_name=True)

    customer_number: str = Field(alias="customerNumber")
    name: str
    phone: str | None = None
    vat_number: str | None = Field(default=None, alias="vatNumber")
    order_count: int = Field(default=0, alias="orderCount")
    latest_order_date: str | None = Field(default=None, alias="latestOrderDate")
    recent_orders: list[RecentOrder] = Field(default_factory=list, alias="recentOrders")


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_size: int = Field(alias="pageSize")
    total_records: int = Field(alias="totalRecords")
    total_pages: int = Field(alias="totalPages")


class CustomerSearchResponse(BaseModel):
    data: list[CustomerSummary] = Field(default_factory=list)
    pagination: Pagination


@dataclass(frozen=True)
class CustomerSearchCriteria:
    """Repository-level filter with resolved limit/offset."""

    limit: int
    offset: int
    name: str | None = None
    customer_number: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class CustomerSearchInput:
    """Raw search request; page numbers are normalised by the service."""

    name: str | None = None
    customer_number: str | None = None
    phone: str | None = None
    page: float | None = None
    page_size: float | None = None


@dataclass(frozen=True)
class CustomerSearchResult:
    total: int
    customers: list[CustomerSummary]
