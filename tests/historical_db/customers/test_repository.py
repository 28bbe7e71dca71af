"""Tests for CustomerRepository and its row mapping."""

import json
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from historical_db.customers.models import CustomerSearchCriteria, RecentOrder
from historical_db.customers.repository import (
    CUSTOMER_COUNT_QUERY,
    CUSTOMER_DATA_QUERY,
    CustomerRepository,
    map_row_to_summary,
    parse_recent_orders,
)


def make_gateway(count_rows, data_rows):
    gateway = MagicMock()
    gateway.query = AsyncMock(side_effect=[count_rows, data_rows])
    return gateway


class TestParseRecentOrders:

    def test_parses_orders(self):
        payload = json.dumps(
            [
                {"orderNumber": "1001", "customerOrderNumber": "PO-1", "orderDate": "20240131"},
                {"orderNumber": "1000"},
            ]
        )

        assert parse_recent_orders(payload) == [
            RecentOrder(order_number="1001", customer_order_number="PO-1", order_date="20240131"),
            RecentOrder(order_number="1000"),
        ]

    @pytest.mark.parametrize("payload", [None, "", "not json", '{"orderNumber": "1"}', "42", 17])
    def test_invalid_payload_gives_empty_list(self, payload):
        assert parse_recent_orders(payload) == []

    @pytest.mark.parametrize(
        "payload",
        [
            '[{"orderNumber": "1001"}, null]',
            '[{"orderNumber": "1001"}, "1000"]',
            '[[{"orderNumber": "1001"}]]',
        ],
    )
    def test_any_non_object_element_gives_empty_list(self, payload):
        assert parse_recent_orders(payload) == []

    def test_drops_non_string_fields(self):
        payload = json.dumps([{"orderNumber": 1001, "customerOrderNumber": None, "orderDate": 20240131}])

        assert parse_recent_orders(payload) == [RecentOrder(order_number="")]


class TestMapRowToSummary:

    def test_maps_all_columns(self):
        row = {
            "customerNumber": "C001",
            "customerName": "Acme AB",
            "phone": "+46 8 123",
            "vat": "SE123",
            "orderCount": 12,
            "latestOrderDate": 20240131,
            "recentOrdersJson": json.dumps([{"orderNumber": "1001"}]),
        }

        summary = map_row_to_summary(row)

        assert summary.customer_number == "C001"
        assert summary.name == "Acme AB"
        assert summary.phone == "+46 8 123"
        assert summary.vat_number == "SE123"
        assert summary.order_count == 12
        assert summary.latest_order_date == "20240131"
        assert summary.recent_orders == [RecentOrder(order_number="1001")]

    def test_nulls_are_omitted_and_order_count_defaults(self):
        row = {
            "customerNumber": "C002",
            "customerName": "Globex",
            "phone": None,
            "vat": None,
            "orderCount": None,
            "latestOrderDate": None,
            "recentOrdersJson": None,
        }

        summary = map_row_to_summary(row)

        assert summary.order_count == 0
        assert summary.recent_orders == []
        assert summary.model_dump(by_alias=True, exclude_none=True) == {
            "customerNumber": "C002",
            "name": "Globex",
            "orderCount": 0,
            "recentOrders": [],
        }

    def test_date_values_become_strings(self):
        summary = map_row_to_summary(
            {"customerNumber": "C", "customerName": "N", "latestOrderDate": date(2024, 1, 31)}
        )

        assert summary.latest_order_date == "2024-01-31"


class TestCustomerRepository:

    @pytest.mark.asyncio
    async def test_runs_count_then_data_query(self):
        gateway = make_gateway(
            [{"total": 2}],
            [
                {"customerNumber": "C1", "customerName": "Acme"},
                {"customerNumber": "C2", "customerName": "Acme Two"},
            ],
        )
        repository = CustomerRepository(lambda: gateway)

        result = await repository.search(CustomerSearchCriteria(limit=25, offset=0, name="acme"))

        assert result.total == 2
        assert [c.customer_number for c in result.customers] == ["C1", "C2"]

        count_call, data_call = gateway.query.await_args_list
        assert count_call.args == (
            CUSTOMER_COUNT_QUERY,
            {"namePattern": "%acme%", "customerNumber": None, "phone": None},
        )
        assert data_call.args == (
            CUSTOMER_DATA_QUERY,
            {
                "namePattern": "%acme%",
                "customerNumber": None,
                "phone": None,
                "limit": 25,
                "offset": 0,
            },
        )

    @pytest.mark.asyncio
    async def test_no_name_means_null_pattern(self):
        gateway = make_gateway([{"total": 0}], [])
        repository = CustomerRepository(lambda: gateway)

        await repository.search(
            CustomerSearchCriteria(limit=10, offset=20, customer_number="C1", phone="123")
        )

        params = gateway.query.await_args_list[1].args[1]
        assert params["namePattern"] is None
        assert params["customerNumber"] == "C1"
        assert params["phone"] == "123"
        assert (params["limit"], params["offset"]) == (10, 20)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count_rows", [[], [{"total": None}], [{}]])
    async def test_missing_total_is_zero(self, count_rows):
        repository = CustomerRepository(lambda: make_gateway(count_rows, []))

        result = await repository.search(CustomerSearchCriteria(limit=25, offset=0))

        assert result.total == 0
        assert result.customers == []

    @pytest.mark.asyncio
    async def test_gateway_errors_propagate(self):
        gateway = MagicMock()
        gateway.query = AsyncMock(side_effect=RuntimeError("connection reset"))
        repository = CustomerRepository(lambda: gateway)

        with pytest.raises(RuntimeError, match="connection reset"):
            await repository.search(CustomerSearchCriteria(limit=25, offset=0))

    def test_queries_use_named_placeholders(self):
        for name in ("@customerNumber", "@namePattern", "@phone"):
            assert name in CUSTOMER_COUNT_QUERY
            assert name in CUSTOMER_DATA_QUERY
        assert "OFFSET @offset ROWS FETCH NEXT @limit ROWS ONLY" in CUSTOMER_DATA_QUERY
