"""Tests for the NetSim import service."""

from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import SQLAlchemyError

from factory_tracker.models.order import OrderStatus, ProductStatus
from factory_tracker.repositories.order_repository import OrderRepository
from factory_tracker.services.netsim import ErrorKind, RemoteOrder, RemoteOrderLine
from factory_tracker.services.netsim_service import NetSimService, order_values

from tests.conftest import count_orders, envelope, load_order, order_line_row, order_row


ACTOR_ID = 1


def _remote_order(order_no, **overrides):
    return RemoteOrder.model_validate(order_row(order_no, **overrides))


def _remote_lines(order_no, *line_overrides):
    return [
        RemoteOrderLine.model_validate(order_line_row(order_no, position, **overrides))
        for position, overrides in enumerate(line_overrides, start=1)
    ]


@pytest.fixture
def service(test_session, netsim):
    return NetSimService(test_session, netsim)


class TestImportOrder:
    """Test importing a single order."""

    @pytest.mark.asyncio
    async def test_import_maps_header_and_lines(self, test_session, service):
        """Test the local values produced for an order and its lines."""
        order = _remote_order(1042)
        lines = _remote_lines(
            1042,
            {"SIRA_NO": 3, "MIKTAR": 2.7},
            {"SIRA_NO": None, "STOK_KODU": None, "STOK_ADI": None, "BIRIM": None,
             "DST_ADI": "Berjer Iskelet"},
        )

        result = await service.import_order(order, lines, ACTOR_ID)

        assert result.success is True
        assert result.product_count == 2

        saved = await load_order(test_session, result.order_id)
        assert saved.external_id == "NETSIM-1042"
        assert saved.name == "TK-1042"
        assert saved.company == "Ahsap Mobilya Ltd"
        assert saved.description == "NetSim Siparis #1042"
        assert saved.status == OrderStatus.PLANNED
        assert saved.total_amount == 12500.5
        assert saved.delivery_date == datetime(2026, 11, 15)

        by_line = {p.external_id: p for p in saved.products}
        first = by_line["NETSIM-DETAY-1"]
        assert first.quantity == 2
        assert first.sort_order == 3
        assert first.model == "BRJ-01"
        assert first.note1 == "Renk: Antrasit"
        assert first.system_code == "NS-1042-1"
        assert first.status == ProductStatus.DRAFT

        second = by_line["NETSIM-DETAY-2"]
        assert second.model == "STOK-902"
        assert second.name == "STOK-902"
        assert second.unit == "Adet"
        assert second.sort_order == 2
        assert second.produced_name == "Berjer Iskelet"

    def test_header_fallbacks(self):
        order = _remote_order(
            55, TAKIP_NO=None, CARI_UNVANI=None, DOVIZ_BIRIMI=None, ACIKLAMA="Acil"
        )

        values = order_values(order, ACTOR_ID)

        assert values["name"] == "SIP-55"
        assert values["company"] == "Cari No: 310"
        assert values["customer_name"] is None
        assert values["currency"] == "TL"
        assert values["description"] == "Acil"

    def test_aware_dates_are_stored_as_utc(self):
        order = _remote_order(56, TARIH="2026-10-01T12:00:00+03:00")

        values = order_values(order, ACTOR_ID)

        assert values["order_date"] == datetime(2026, 10, 1, 9, 0)
        assert values["order_date"].tzinfo is None

    @pytest.mark.asyncio
    async def test_second_import_is_a_conflict(self, test_session, service):
        """Test that an order with lines is never imported twice."""
        order = _remote_order(1042)
        first = await service.import_order(order, _remote_lines(1042, {}), ACTOR_ID)

        second = await service.import_order(order, _remote_lines(1042, {}), ACTOR_ID)

        assert second.success is False
        assert second.error == "Order already imported"
        assert second.error_kind == ErrorKind.CONFLICT
        assert second.order_id == first.order_id
        assert await count_orders(test_session, "NETSIM-1042") == 1

    @pytest.mark.asyncio
    async def test_empty_header_is_replaced(self, test_session, service):
        """Test that a leftover header without lines is re-imported."""
        repo = OrderRepository(test_session)
        await repo.create_with_products(order_values(_remote_order(77), ACTOR_ID), [])
        await test_session.commit()
        result = await service.import_order(
            _remote_order(77), _remote_lines(77, {}, {}), ACTOR_ID
        )

        assert result.success is True
        assert result.product_count == 2
        assert await count_orders(test_session, "NETSIM-77") == 1

    @pytest.mark.asyncio
    async def test_import_with_delivery_date(self, test_session, bridge, service):
        """Test that the chosen delivery date is written back and stored."""
        bridge.respond("/api/tables/order/delivery-date", json=envelope(1))
        chosen = datetime(2026, 12, 20, tzinfo=timezone.utc)

        result = await service.import_order(
            _remote_order(88), _remote_lines(88, {}), ACTOR_ID, delivery_date=chosen
        )

        assert result.success is True
        assert bridge.bodies("/api/tables/order/delivery-date")[0]["AlissatisNo"] == 88
        saved = await load_order(test_session, result.order_id)
        assert saved.delivery_date == datetime(2026, 12, 20)

    @pytest.mark.asyncio
    async def test_failed_delivery_date_write_does_not_block_import(
        self, test_session, bridge, service
    ):
        bridge.respond("/api/tables/order/delivery-date", json=envelope(0))

        result = await service.import_order(
            _remote_order(89), _remote_lines(89, {}), ACTOR_ID,
            delivery_date=datetime(2026, 12, 21),
        )

        assert result.success is True
        saved = await load_order(test_session, result.order_id)
        assert saved.delivery_date == datetime(2026, 12, 21)

    @pytest.mark.asyncio
    async def test_failed_create_keeps_empty_header(self, test_session, service, monkeypatch):
        """Test that a failed create rolls back the removal of the empty header."""
        repo = OrderRepository(test_session)
        header = await repo.create_with_products(order_values(_remote_order(77), ACTOR_ID), [])
        await test_session.commit()
        header_id = header.id

        async def failing_create(self, order_data, products_data):
            raise SQLAlchemyError("disk I/O error")

        monkeypatch.setattr(OrderRepository, "create_with_products", failing_create)

        result = await service.import_order(_remote_order(77), _remote_lines(77, {}), ACTOR_ID)

        assert result.success is False
        assert "disk I/O error" in result.error
        assert result.order_id is None
        assert await count_orders(test_session, "NETSIM-77") == 1
        kept = await load_order(test_session, header_id)
        assert kept is not None
        assert kept.products == []


class TestBulkAndListing:
    """Test bulk import, listing and new order checks."""

    @pytest.mark.asyncio
    async def test_import_orders(self, bridge, service):
        def handler(sql, max_rows):
            if "FROM ALSADETA d" in sql:
                order_no = int(sql.split("d.ALISSATIS_NO = ")[1].split()[0])
                return [order_line_row(order_no, order_no * 10)]
            return [order_row(10), order_row(11)]

        bridge.query_handler = handler

        results = await service.import_orders([10, 99, 11], ACTOR_ID)

        assert [r.order_no for r in results] == [10, 99, 11]
        assert [r.success for r in results] == [True, False, True]
        assert results[1].error == "Order not found"
        assert "SELECT FIRST 500 SKIP 0" in bridge.queries[0]

    @pytest.mark.asyncio
    async def test_import_orders_with_null_quantity(self, test_session, bridge, service):
        """Test that a line without a quantity is imported with zero."""
        def handler(sql, max_rows):
            if "FROM ALSADETA d" in sql:
                return [order_line_row(7, 1), order_line_row(7, 2, MIKTAR=None)]
            return [order_row(7)]

        bridge.query_handler = handler

        first = await service.import_orders([7], ACTOR_ID)

        assert first[0].success is True
        saved = await load_order(test_session, first[0].order_id)
        assert sorted(p.quantity for p in saved.products) == [0, 4]

        again = await service.import_orders([7], ACTOR_ID)

        assert again[0].success is False
        assert again[0].error == "Order already imported"
        assert again[0].error_kind == ErrorKind.CONFLICT
        assert await count_orders(test_session, "NETSIM-7") == 1

    @pytest.mark.asyncio
    async def test_import_orders_skips_unreadable_lines(self, test_session, bridge, service):
        """Test that an order whose lines cannot be read is not imported."""
        def handler(sql, max_rows):
            if "FROM ALSADETA d" in sql:
                return [{"ALISSATIS_NO": 8, "STOK_ADI": "no line number"}]
            return [order_row(8)]

        bridge.query_handler = handler

        results = await service.import_orders([8], ACTOR_ID)

        assert results[0].success is False
        assert results[0].error_kind == ErrorKind.PROTOCOL
        assert results[0].order_id is None
        assert await count_orders(test_session, "NETSIM-8") == 0

    @pytest.mark.asyncio
    async def test_import_orders_skips_orders_without_lines(self, test_session, bridge, service):
        bridge.query_handler = lambda sql, max_rows: (
            [] if "FROM ALSADETA d" in sql else [order_row(9)]
        )

        results = await service.import_orders([9], ACTOR_ID)

        assert results[0].success is False
        assert results[0].error == "Order has no lines"
        assert await count_orders(test_session, "NETSIM-9") == 0

    @pytest.mark.asyncio
    async def test_list_orders_marks_imported(self, bridge, service):
        await service.import_order(_remote_order(2), _remote_lines(2, {}), ACTOR_ID)

        def handler(sql, max_rows):
            if "COUNT(*)" in sql:
                return [{"CNT": 45}]
            return [order_row(3), order_row(2), order_row(1)]

        bridge.query_handler = handler

        page = await service.list_orders(limit=20, offset=20, only_open=True)

        assert page.success is True
        assert [o.order_no for o in page.items] == [3, 2, 1]
        assert page.imported_order_ids == ["NETSIM-2"]
        assert page.total_count == 45
        assert page.page == 2
        assert page.total_pages == 3

    @pytest.mark.asyncio
    async def test_list_orders_count_fallback(self, bridge, service):
        bridge.query_handler = lambda sql, max_rows: (
            [] if "COUNT(*)" in sql else [order_row(1)]
        )

        page = await service.list_orders(limit=10)

        assert page.total_count == 1
        assert page.total_pages == 1

    @pytest.mark.asyncio
    async def test_check_new_orders(self, bridge, service):
        await service.import_order(_remote_order(5), _remote_lines(5, {}), ACTOR_ID)
        bridge.query_handler = lambda sql, max_rows: [order_row(6), order_row(5)]

        result = await service.check_new_orders(30)

        assert result.total == 2
        assert result.pending == 1
        assert [o.order_no for o in result.orders] == [6]
        assert "DATEADD(-30 MINUTE" in bridge.queries[-1]


class TestStatusAndDeliveryDate:
    """Test local status sync and the delivery date operation."""

    @pytest.mark.asyncio
    async def test_sync_order_status(self, test_session, service):
        imported = await service.import_order(_remote_order(9), _remote_lines(9, {}), ACTOR_ID)

        result = await service.sync_order_status(9, OrderStatus.COMPLETED)

        assert result.success is True
        saved = await load_order(test_session, imported.order_id)
        assert saved.status == OrderStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_sync_unknown_order(self, service):
        result = await service.sync_order_status(404, OrderStatus.COMPLETED)

        assert result.success is False
        assert result.error == "Order not found"

    @pytest.mark.asyncio
    async def test_update_delivery_date_reports_kind(self, bridge, service):
        bridge.respond("/api/tables/order/delivery-date", json=envelope(0))

        result = await service.update_delivery_date(404, datetime(2026, 12, 1))

        assert result.success is False
        assert result.error == "Order not found or not updated"
        assert result.error_kind == ErrorKind.REMOTE


class TestRecipeViews:
    """Test recipe views."""

    @pytest.mark.asyncio
    async def test_recipe_without_revisions(self, bridge, service):
        result = await service.get_recipe_details(5)

        assert result.success is True
        assert result.revisions == []
        assert result.items == []

    @pytest.mark.asyncio
    async def test_list_recipes(self, bridge, service):
        def handler(sql, max_rows):
            if "COUNT(*)" in sql:
                return [{"CNT": 120}]
            return [{"URETIM_RECETE_NO": 1, "RECETE_KODU": "R-001", "RECETE_ADI": "Masa"}]

        bridge.query_handler = handler

        page = await service.list_recipes(limit=50, offset=0)

        assert page.total_count == 120
        assert page.total_pages == 3
        assert page.items[0].code == "R-001"
