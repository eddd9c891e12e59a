"""Shared fixtures: in-memory database and a scripted NetSim bridge."""

import json
import os

# must be set before factory_tracker.core.database is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import httpx
import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import selectinload
from sqlalchemy.pool import StaticPool

from factory_tracker.core.database import Base
from factory_tracker.models.order import Order
import factory_tracker.models  # noqa: F401
from factory_tracker.services.netsim.client import NetSimClient


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
BRIDGE_URL = "http://bridge.test"


def envelope(data=None, success=True, message=None, error=None):
    return {"success": success, "message": message, "data": data, "error": error}


class FakeBridge:
    """httpx handler standing in for the NetSim bridge service.

    Query requests are answered by ``query_handler(sql, max_rows)``; any path
    can be overridden through ``routes`` with a ``request -> Response``
    callable.
    """

    def __init__(self):
        self.requests = []
        self.routes = {}
        self.query_handler = lambda sql, max_rows: []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.routes:
            return self.routes[path](request)
        if path == "/api/tables/query":
            body = json.loads(request.content)
            rows = self.query_handler(body["Sql"], body["MaxRows"])
            return httpx.Response(
                200,
                json=envelope(
                    {
                        "columns": sorted(rows[0].keys()) if rows else [],
                        "rows": rows,
                        "totalCount": len(rows),
                        "page": 1,
                        "pageSize": body["MaxRows"],
                    }
                ),
            )
        return httpx.Response(404, json=envelope(success=False, error=f"No route {path}"))

    def respond(self, path, status_code=200, **kwargs):
        self.routes[path] = lambda request: httpx.Response(status_code, **kwargs)

    def bodies(self, path):
        return [json.loads(r.content) for r in self.requests if r.url.path == path]

    @property
    def queries(self):
        return [body["Sql"] for body in self.bodies("/api/tables/query")]


def order_row(order_no, **overrides):
    row = {
        "ALISSATIS_NO": order_no,
        "TAKIP_NO": f"TK-{order_no}",
        "ISLEM_KODU": "ALIS_SIP",
        "ISLEM_ADI": "Alis Siparisi",
        "TARIH": "2026-10-01T09:30:00",
        "TESLIM_TARIHI": "2026-11-15T00:00:00",
        "DURUM": None,
        "CARI_NO": 310,
        "CARI_UNVANI": "Ahsap Mobilya Ltd",
        "GENEL_TOPLAM": 12500.5,
        "DOVIZ_BIRIMI": "TL",
        "ONAYLANDI": "E",
        "KAPANDI": "H",
        "ACIKLAMA": None,
        "PERSONEL_NO": 4,
    }
    row.update(overrides)
    return row


def order_line_row(order_no, line_no, **overrides):
    row = {
        "ALISSATIS_DETAY_NO": line_no,
        "ALISSATIS_NO": order_no,
        "SIRA_NO": 1,
        "STOK_NO": 900 + line_no,
        "STOK_ADI": "Berjer Koltuk",
        "STOK_KODU": "BRJ-01",
        "MIKTAR": 4.0,
        "BIRIM": "Adet",
        "BIRIM_FIYAT": 1500.0,
        "SATIR_TOPLAMI": 6000.0,
        "SATIR_DURUM": None,
        "ACIKLAMA": "Kadife kumas",
        "ACIKLAMA1": "Renk: Antrasit",
        "ACIKLAMA2": None,
        "ACIKLAMA3": None,
        "ACIKLAMA4": None,
        "TESLIM_TAAHHUT_TARIHI": None,
        "DSTOK_NO": None,
        "DST_ADI": None,
    }
    row.update(overrides)
    return row


async def load_order(session, order_id):
    """Reload an order and its lines from the database."""
    result = await session.execute(
        select(Order)
        .options(selectinload(Order.products))
        .where(Order.id == order_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def count_orders(session, external_id):
    result = await session.execute(
        select(func.count(Order.id)).where(Order.external_id == external_id)
    )
    return result.scalar_one()


@pytest.fixture
def bridge():
    return FakeBridge()


@pytest.fixture
def netsim(bridge):
    return NetSimClient(base_url=BRIDGE_URL, transport=httpx.MockTransport(bridge))


@pytest.fixture
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session() as session:
        yield session
