"""
Customer search against the M3 customer master (OCUSMA) and order heads (OOHEAD).
"""

import json
import logging
from typing import Any, Callable

from historical_db.customers.models import (
    CustomerSearchCriteria,
    CustomerSearchResult,
    CustomerSummary,
    RecentOrder,
)
from historical_db.database.gateway import ConnectionGateway

logger = logging.getLogger(__name__)

SCHEMA = "M3FDBPRD"

CUSTOMER_COUNT_QUERY = f"""
SELECT COUNT(*) AS total
FROM {SCHEMA}.OCUSMA AS cus
WHERE (@customerNumber IS NULL OR cus.OKCUNO = @customerNumber)
  AND (@namePattern IS NULL OR cus.OKCUNM LIKE @namePattern)
  AND (@phone IS NULL OR cus.OKPHNO = @phone);
"""

CUSTOMER_DATA_QUERY = f"""
WITH CustomerOrders AS (
  SELECT
    head.OACUNO AS CustomerNumber,
    COUNT(DISTINCT head.OAORNO) AS OrderCount,
    MAX(head.OAORDT) AS LatestOrderDate
  FROM {SCHEMA}.OOHEAD AS head
  GROUP BY head.OACUNO
)
SELECT
  cus.OKCUNO AS customerNumber,
  cus.OKCUNM AS customerName,
  cus.OKPHNO AS phone,
  cus.OKVTCD AS vat,
  orders.OrderCount AS orderCount,
  orders.LatestOrderDate AS latestOrderDate,
  recentOrders.recentOrdersJson AS recentOrdersJson
FROM {SCHEMA}.OCUSMA AS cus
LEFT JOIN CustomerOrders AS orders ON orders.CustomerNumber = cus.OKCUNO
OUTER APPLY (
  SELECT TOP (5)
    head.OAORNO AS orderNumber,
    head.OACUOR AS customerOrderNumber,
    head.OAORDT AS orderDate
  FROM {SCHEMA}.OOHEAD AS head
  WHERE head.OACUNO = cus.OKCUNO
  ORDER BY head.OAORDT DESC
  FOR JSON PATH
) AS recentOrders(recentOrdersJson)
WHERE (@customerNumber IS NULL OR cus.OKCUNO = @customerNumber)
  AND (@namePattern IS NULL OR cus.OKCUNM LIKE @namePattern)
  AND (@phone IS NULL OR cus.OKPHNO = @phone)
ORDER BY cus.OKCUNM
OFFSET @offset ROWS FETCH NEXT @limit ROWS ONLY;
"""


def parse_recent_orders(payload: Any) -> list[RecentOrder]:
    """
    Decode the FOR JSON PATH column into RecentOrder models.

    Anything that is not a JSON array of objects gives an empty list. Fields
    of the wrong type are dropped; a missing order number becomes "".
    """
    if not payload or not isinstance(payload, str):
        return []

    try:
        parsed = json.loads(payload)
    except ValueError:
        return []

    if not isinstance(parsed, list) or not all(isinstance(order, dict) for order in parsed):
        return []

    orders = []
    for order in parsed:
        orders.append(
            RecentOrder(
                order_number=_str_or_none(order.get("orderNumber")) or "",
                customer_order_number=_str_or_none(order.get("customerOrderNumber")),
                order_date=_str_or_none(order.get("orderDate")),
            )
        )
    return orders


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def map_row_to_summary(row: dict[str, Any]) -> CustomerSummary:
    return CustomerSummary(
        customer_number=_text(row.get("customerNumber")) or "",
        name=_text(row.get("customerName")) or "",
        phone=_text(row.get("phone")),
        vat_number=_text(row.get("vat")),
        order_count=row.get("orderCount") or 0,
        latest_order_date=_text(row.get("latestOrderDate")),
        recent_orders=parse_recent_orders(row.get("recentOrdersJson")),
    )


class CustomerRepository:
    """Runs the count and page queries through the SQL gateway."""

    def __init__(self, gateway_factory: Callable[[], ConnectionGateway]):
        self._gateway_factory = gateway_factory

    async def search(self, criteria: CustomerSearchCriteria) -> CustomerSearchResult:
        gateway = self._gateway_factory()
        base_parameters = {
            "namePattern": f"%{criteria.name}%" if criteria.name else None,
            "customerNumber": criteria.customer_number,
            "phone": criteria.phone,
        }

        count_rows = await gateway.query(CUSTOMER_COUNT_QUERY, base_parameters)
        total = (count_rows[0].get("total") if count_rows else 0) or 0

        rows = await gateway.query(
            CUSTOMER_DATA_QUERY,
            {**base_parameters, "limit": criteria.limit, "offset": criteria.offset},
        )

        logger.debug(
            "Customer search executed",
            extra={
                "row_count": len(rows),
                "limit": criteria.limit,
                "offset": criteria.offset,
            },
        )
        return CustomerSearchResult(
            total=int(total),
            customers=[map_row_to_summary(row) for row in rows],
        )
