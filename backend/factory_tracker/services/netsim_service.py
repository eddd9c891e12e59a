# backend/factory_tracker/services/netsim_service.py
"""
NetSim order import and lookup service

Combines the NetSim bridge client with the local order store: listing remote
orders with their import state, importing orders (one or many), checking for
new orders and the recipe views that need more than one bridge call.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from factory_tracker.models.order import OrderStatus, ProductStatus
from factory_tracker.repositories.order_repository import OrderRepository
from factory_tracker.schemas.netsim import (
    BulkImportItem,
    ImportResult,
    NewOrdersResult,
    OperationResult,
    OrderPage,
    ProductPage,
    RecipeDetailResult,
    RecipePage,
)
from factory_tracker.services.netsim.client import NetSimClient
from factory_tracker.services.netsim.errors import ErrorKind
from factory_tracker.services.netsim.models import RemoteOrder, RemoteOrderLine

logger = logging.getLogger(__name__)

EXTERNAL_ID_PREFIX = "NETSIM-"
# Orders fetched once per bulk import to look up the requested numbers
BULK_IMPORT_WINDOW = 500


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _page_numbers(limit: int, offset: int, total: int) -> Dict[str, int]:
    return {
        "page": offset // limit + 1,
        "page_size": limit,
        "total_pages": math.ceil(total / limit) or 1,
    }


def order_values(
    order: RemoteOrder, actor_id: int, delivery_date: Optional[datetime] = None
) -> Dict[str, Any]:
    """Local order columns for a NetSim order header."""
    return {
        "external_id": order.external_id,
        "name": order.tracking_no or f"SIP-{order.order_no}",
        "company": order.customer_title or f"Cari No: {order.customer_no}",
        "customer_name": order.customer_title or None,
        "description": order.description or f"NetSim Siparis #{order.order_no}",
        "order_date": _naive_utc(order.order_date),
        "delivery_date": _naive_utc(delivery_date or order.delivery_date),
        "total_amount": order.grand_total,
        "currency": order.currency or "TL",
        "status": OrderStatus.PLANNED,
        "created_by_id": actor_id,
    }


def line_values(
    order: RemoteOrder, line: RemoteOrderLine, position: int, actor_id: int
) -> Dict[str, Any]:
    """Local order line columns for a NetSim order line.

    ``position`` is the 1-based index of the line, used when SIRA_NO is empty.
    """
    model = line.stock_code or f"STOK-{line.stock_no}"
    return {
        "name": line.stock_name or model,
        "model": model,
        "sku": line.stock_code or None,
        "description": line.description or "",
        "note1": line.note1 or None,
        "note2": line.note2 or None,
        "note3": line.note3 or None,
        "note4": line.note4 or None,
        "produced_name": line.produced_name or None,
        "quantity": int(line.quantity or 0),
        "unit": line.unit or "Adet",
        "unit_price": line.unit_price,
        "total_price": line.line_total,
        "status": ProductStatus.DRAFT,
        "sort_order": line.sequence or position,
        "external_id": f"NETSIM-DETAY-{line.line_no}",
        "system_code": f"NS-{order.order_no}-{line.line_no}",
        "created_by_id": actor_id,
    }


class NetSimService:
    """NetSim operations that touch the local store or span several calls."""

    def __init__(self, db: AsyncSession, client: NetSimClient):
        self.db = db
        self.client = client
        self.orders = OrderRepository(db)

    # ------------------------------------------------------------------
    # orders
    # ------------------------------------------------------------------

    async def list_orders(
        self, limit: int = 20, offset: int = 0, only_open: bool = False
    ) -> OrderPage:
        """One page of NetSim orders plus which of them are already imported."""
        limit = limit or 20
        orders = await self.client.get_orders(limit=limit, offset=offset, only_open=only_open)
        total = await self.client.get_order_count(only_open)
        if not total and orders:
            total = len(orders)

        try:
            imported = await self.orders.find_existing_external_ids(
                order.external_id for order in orders
            )
        except SQLAlchemyError as e:
            logger.error(f"NetSim order listing failed: {e}")
            return OrderPage(success=False, error=str(e), page_size=limit)

        return OrderPage(
            success=True,
            items=orders,
            total_count=total,
            imported_order_ids=sorted(imported),
            **_page_numbers(limit, offset, total),
        )

    async def import_order(
        self,
        order: RemoteOrder,
        lines: List[RemoteOrderLine],
        actor_id: int,
        delivery_date: Optional[datetime] = None,
    ) -> ImportResult:
        """Copy a NetSim order and its lines into the local store.

        An order is imported once per NetSim order number. A previous import
        that still has lines blocks the import; one whose lines were all
        removed is deleted and imported again. Deleting the leftover header
        and creating the new order commit together.

        With ``delivery_date`` the date is first written back to NetSim; a
        failed write is logged and the import goes on with the given date.
        """
        if delivery_date is not None:
            update = await self.client.update_delivery_date(order.order_no, delivery_date)
            if not update["success"]:
                logger.warning(
                    f"NetSim delivery date of order {order.order_no} not updated "
                    f"({update.get('error')}), importing anyway"
                )

        external_id = order.external_id
        try:
            existing = await self.orders.get_by_external_id(external_id)
            if existing is not None:
                if existing.products:
                    return ImportResult(
                        success=False,
                        error="Order already imported",
                        error_kind=ErrorKind.CONFLICT,
                        order_id=existing.id,
                    )
                logger.info(f"Removing empty order {existing.id} ({external_id}) before re-import")
                await self.orders.delete(existing)

            created = await self.orders.create_with_products(
                order_values(order, actor_id, delivery_date),
                [
                    line_values(order, line, position, actor_id)
                    for position, line in enumerate(lines, start=1)
                ],
            )
            order_id, product_count = created.id, len(created.products)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"NetSim import of order {order.order_no} failed: {e}")
            return ImportResult(success=False, error=str(e))

        logger.info(
            f"Imported NetSim order {order.order_no} as order {order_id} "
            f"with {product_count} line(s)"
        )
        return ImportResult(success=True, order_id=order_id, product_count=product_count)

    async def import_orders(self, order_nos: List[int], actor_id: int) -> List[BulkImportItem]:
        """Import several open orders by number, reporting each one."""
        window = await self.client.get_orders(limit=BULK_IMPORT_WINDOW, only_open=True)
        by_number = {order.order_no: order for order in window}

        results = []
        for order_no in order_nos:
            order = by_number.get(order_no)
            if order is None:
                results.append(
                    BulkImportItem(order_no=order_no, success=False, error="Order not found")
                )
                continue

            details = await self.client.run_order_details(order_no)
            if not details.success:
                logger.warning(f"Lines of NetSim order {order_no} unavailable: {details.error}")
                results.append(
                    BulkImportItem(
                        order_no=order_no,
                        success=False,
                        error=details.error or "Order lines could not be read",
                        error_kind=details.error_kind,
                    )
                )
                continue
            lines = details.data.rows
            if not lines:
                # an empty header would only be replaced on the next import
                results.append(
                    BulkImportItem(order_no=order_no, success=False, error="Order has no lines")
                )
                continue

            outcome = await self.import_order(order, lines, actor_id)
            results.append(
                BulkImportItem(
                    order_no=order_no,
                    success=outcome.success,
                    order_id=outcome.order_id,
                    error=outcome.error,
                    error_kind=outcome.error_kind,
                )
            )
        return results

    async def check_new_orders(self, minutes_ago: int = 60) -> NewOrdersResult:
        """Recent open NetSim orders that have not been imported yet."""
        recent = await self.client.get_new_orders(minutes_ago)
        try:
            imported = await self.orders.list_external_ids_with_prefix(EXTERNAL_ID_PREFIX)
        except SQLAlchemyError as e:
            logger.error(f"NetSim new order check failed: {e}")
            return NewOrdersResult(success=False, error=str(e))

        pending = [order for order in recent if order.external_id not in imported]
        return NewOrdersResult(
            success=True, total=len(recent), pending=len(pending), orders=pending
        )

    async def sync_order_status(self, order_no: int, status: str) -> OperationResult:
        """Set the local status of an imported order (NetSim is not written)."""
        try:
            order = await self.orders.get_by_external_id(f"{EXTERNAL_ID_PREFIX}{order_no}")
            if order is None:
                return OperationResult(success=False, error="Order not found")
            await self.orders.update_status(order, status)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Status sync of NetSim order {order_no} failed: {e}")
            return OperationResult(success=False, error=str(e))
        return OperationResult(success=True)

    async def update_delivery_date(self, order_no: int, delivery_date: datetime) -> OperationResult:
        result = await self.client.run_update_delivery_date(order_no, delivery_date)
        if result.success:
            return OperationResult(success=True)
        return OperationResult(
            success=False,
            error=result.error or result.message or "Order not found or not updated",
            error_kind=result.error_kind,
        )

    # ------------------------------------------------------------------
    # recipes
    # ------------------------------------------------------------------

    async def list_recipes(self, limit: int = 50, offset: int = 0) -> RecipePage:
        limit = limit or 50
        recipes = await self.client.get_recipes(limit=limit, offset=offset)
        total = await self.client.get_recipe_count()
        return RecipePage(
            success=True, items=recipes, total_count=total, **_page_numbers(limit, offset, total)
        )

    async def list_products_with_recipe(self, limit: int = 50, offset: int = 0) -> ProductPage:
        limit = limit or 50
        products = await self.client.get_products_with_recipe(limit=limit, offset=offset)
        total = await self.client.get_products_with_recipe_count()
        return ProductPage(
            success=True, items=products, total_count=total, **_page_numbers(limit, offset, total)
        )

    async def get_recipe_details(self, recipe_no: int) -> RecipeDetailResult:
        """All revisions of a recipe and the lines of its default revision."""
        revisions = await self.client.get_recipe_revisions(recipe_no)
        items = await self.client.get_recipe_details_by_recipe_no(recipe_no)
        return RecipeDetailResult(success=True, revisions=revisions, items=items)
