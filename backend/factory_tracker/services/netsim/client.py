# backend/factory_tracker/services/netsim/client.py
"""
NetSim bridge client (async)

NetSim is the legacy ERP (a Firebird database). It is reached through an
HTTP bridge service that accepts raw SQL and answers with a JSON envelope
``{success, message, data, error}``.

No public method raises: transport failures, empty or malformed bodies and
bridge-side errors all come back as empty/default values, and the full
failure (with its ``ErrorKind``) is available from the ``run_*`` helpers.
Every call is a single attempt; there is no retry.
"""

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, ValidationError

from factory_tracker.core.config import settings
from factory_tracker.services.netsim import queries
from factory_tracker.services.netsim.errors import (
    ErrorKind,
    NetSimConnectionError,
    NetSimError,
    NetSimProtocolError,
)
from factory_tracker.services.netsim.models import (
    BridgeResponse,
    BridgeStatus,
    ConnectionResult,
    DatabaseFile,
    QueryResult,
    RemoteColumn,
    RemoteCustomer,
    RemoteOrder,
    RemoteOrderLine,
    RemoteProduct,
    RemoteRecipe,
    RemoteRecipeLine,
    RemoteRecipeRevision,
    RemoteRecipeSubLine,
    RemoteTable,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DATABASE_PATH = "C:/Ofisnet/Data"
DATABASE_CHARSET = "NONE"
DEFAULT_USERNAME = "SYSDBA"
DEFAULT_PASSWORD = "masterkey"

# Longest slice of a non-JSON body quoted in an error message
BODY_EXCERPT_LENGTH = 200


class NetSimClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.NETSIM_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.NETSIM_TIMEOUT
        self._transport = transport
        # advisory only; queries do not check it
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    # ------------------------------------------------------------------
    # transport
    # ------------------------------------------------------------------

    def _client_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "base_url": self.base_url,
            "headers": {"Content-Type": "application/json"},
        }
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return kwargs

    async def _send(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(**self._client_kwargs()) as client:
                return await client.request(method, endpoint, json=body, params=params)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetSimConnectionError(str(e) or "Connection to NetSim bridge failed") from e

    @staticmethod
    def _parse_envelope(response: httpx.Response) -> BridgeResponse:
        text = response.text
        if not text or not text.strip():
            raise NetSimProtocolError(
                f"Bridge returned an empty response (status: {response.status_code})"
            )

        try:
            payload = json.loads(text)
            envelope = BridgeResponse.model_validate(payload)
        except (ValueError, ValidationError):
            raise NetSimProtocolError(
                f"Bridge returned invalid JSON: {text[:BODY_EXCERPT_LENGTH]}"
            )

        envelope.error_kind = None if envelope.success else ErrorKind.REMOTE
        return envelope

    async def _request(
        self,
        method: str,
        endpoint: str,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> BridgeResponse:
        """One round trip to the bridge; failures come back as a failed envelope."""
        try:
            response = await self._send(method, endpoint, body=body, params=params)
            envelope = self._parse_envelope(response)
        except NetSimError as e:
            logger.warning(f"NetSim {method} {endpoint} failed ({e.kind.value}): {e.message}")
            return BridgeResponse.failure(e.message, e.kind)

        if not envelope.success:
            logger.warning(
                f"NetSim {method} {endpoint} rejected: {envelope.error or envelope.message}"
            )
        return envelope

    # ------------------------------------------------------------------
    # connection
    # ------------------------------------------------------------------

    async def get_status(self) -> BridgeStatus:
        result = await self._request("GET", "/api/status")
        if result.success and result.data:
            try:
                status = BridgeStatus.model_validate(result.data)
            except ValidationError as e:
                logger.warning(f"Unexpected NetSim status payload: {e}")
                return BridgeStatus()
            self._connected = status.is_connected
            return status
        return BridgeStatus()

    async def get_databases(self, path: str = DATABASE_PATH) -> List[DatabaseFile]:
        result = await self._request("GET", "/api/database/files", params={"path": path})
        if not (result.success and result.data):
            return []
        try:
            return [DatabaseFile.model_validate(item) for item in result.data]
        except (TypeError, ValidationError) as e:
            logger.warning(f"Unexpected NetSim database list: {e}")
            return []

    async def connect(
        self,
        database_file: str,
        username: str = DEFAULT_USERNAME,
        password: str = DEFAULT_PASSWORD,
    ) -> ConnectionResult:
        result = await self._request(
            "POST",
            "/api/database/connect",
            body={
                "DatabasePath": DATABASE_PATH,
                "DatabaseFile": database_file,
                "Username": username,
                "Password": password,
                "Charset": DATABASE_CHARSET,
            },
        )

        if result.success and result.data:
            try:
                connection = ConnectionResult.model_validate(result.data)
            except ValidationError as e:
                return ConnectionResult(error_message=f"Unexpected connect payload: {e}")
            self._connected = connection.is_connected
            logger.info(
                f"NetSim connect {database_file}: connected={connection.is_connected}, "
                f"tables={connection.table_count}"
            )
            return connection

        return ConnectionResult(
            error_message=result.error or "Could not connect to NetSim database"
        )

    # ------------------------------------------------------------------
    # query primitive
    # ------------------------------------------------------------------

    async def run_query(
        self,
        sql: str,
        max_rows: int = 1000,
        model: Optional[Type[ModelT]] = None,
    ) -> BridgeResponse:
        """Execute SQL and return the envelope with ``data`` as a QueryResult.

        With ``model`` given, rows are validated into that type; a row that
        does not fit turns the whole result into a protocol failure.
        """
        logger.debug(f"NetSim query (max {max_rows} rows): {sql.strip()}")
        result = await self._request(
            "POST", "/api/tables/query", body={"Sql": sql, "MaxRows": max_rows}
        )
        if not result.success:
            return result

        try:
            page = QueryResult.model_validate(result.data)
            if model is not None:
                page.rows = [model.model_validate(row) for row in page.rows]
        except ValidationError as e:
            logger.warning(f"Unexpected NetSim query result: {e}")
            return BridgeResponse.failure(
                f"Unexpected query result: {e.error_count()} invalid value(s)",
                ErrorKind.PROTOCOL,
            )

        result.data = page
        return result

    async def query(
        self,
        sql: str,
        max_rows: int = 1000,
        model: Optional[Type[ModelT]] = None,
    ) -> List[Any]:
        """Rows of a query, or an empty list on any failure."""
        result = await self.run_query(sql, max_rows, model)
        if result.success and result.data:
            return result.data.rows
        return []

    async def _first(self, sql: str, model: Optional[Type[ModelT]] = None) -> Any:
        rows = await self.query(sql, 1, model)
        return rows[0] if rows else None

    async def _scalar(self, sql: str, column: str) -> Any:
        row = await self._first(sql)
        if not isinstance(row, dict):
            return None
        return row.get(column)

    async def _count(self, sql: str) -> int:
        value = await self._scalar(sql, "CNT")
        try:
            return int(value or 0)
        except (TypeError, ValueError):
            return 0

    # ------------------------------------------------------------------
    # orders
    # ------------------------------------------------------------------

    async def get_orders(
        self, limit: int = 100, offset: int = 0, only_open: bool = False
    ) -> List[RemoteOrder]:
        """Purchase orders, newest first."""
        return await self.query(queries.orders_sql(limit, offset, only_open), limit, RemoteOrder)

    async def run_order_details(self, order_no: int) -> BridgeResponse:
        """Order lines as a full envelope, so callers can tell failure from no lines."""
        return await self.run_query(queries.order_details_sql(order_no), model=RemoteOrderLine)

    async def get_order_details(self, order_no: int) -> List[RemoteOrderLine]:
        result = await self.run_order_details(order_no)
        if result.success and result.data:
            return result.data.rows
        return []

    async def get_order_count(self, only_open: bool = True) -> int:
        return await self._count(queries.order_count_sql(only_open))

    async def get_new_orders(self, minutes_ago: int = 60) -> List[RemoteOrder]:
        """Open orders dated within the last ``minutes_ago`` minutes (at most 50)."""
        return await self.query(queries.new_orders_sql(minutes_ago), model=RemoteOrder)

    async def get_customer(self, customer_no: int) -> Optional[RemoteCustomer]:
        return await self._first(queries.customer_sql(customer_no), RemoteCustomer)

    async def get_product(self, stock_no: int) -> Optional[RemoteProduct]:
        return await self._first(queries.product_sql(stock_no), RemoteProduct)

    async def get_products(
        self, limit: int = 50, offset: int = 0, search: Optional[str] = None
    ) -> List[RemoteProduct]:
        return await self.query(queries.products_sql(limit, offset, search), limit, RemoteProduct)

    async def run_update_delivery_date(
        self, order_no: int, delivery_date: Union[date, datetime]
    ) -> BridgeResponse:
        result = await self._request(
            "POST",
            "/api/tables/order/delivery-date",
            body={"AlissatisNo": order_no, "DeliveryDate": delivery_date.isoformat()},
        )
        if result.success and not result.data:
            # the call went through but no row was touched
            return BridgeResponse.failure(
                result.message or "Order not found or not updated", ErrorKind.REMOTE
            )
        return result

    async def update_delivery_date(
        self, order_no: int, delivery_date: Union[date, datetime]
    ) -> Dict[str, Any]:
        """Write TESLIM_TARIHI of one order; ``{"success": bool, "error": str?}``."""
        result = await self.run_update_delivery_date(order_no, delivery_date)
        if result.success:
            logger.info(f"NetSim delivery date of order {order_no} set to {delivery_date}")
            return {"success": True}
        return {
            "success": False,
            "error": result.error or result.message or "Order not found or not updated",
        }

    # ------------------------------------------------------------------
    # schema introspection
    # ------------------------------------------------------------------

    async def get_tables(self) -> List[RemoteTable]:
        return await self.query(queries.tables_sql(), 500, RemoteTable)

    async def get_table_columns(self, table_name: str) -> List[RemoteColumn]:
        return await self.query(queries.table_columns_sql(table_name), 100, RemoteColumn)

    async def find_recipe_table(self) -> Optional[str]:
        for table in await self.get_tables():
            name = table.table_name.strip().upper()
            if any(hint in name for hint in queries.RECIPE_TABLE_HINTS):
                return name
        return None

    # ------------------------------------------------------------------
    # recipes (bill of materials)
    # ------------------------------------------------------------------

    async def get_recipes(
        self, limit: int = 50, offset: int = 0, search: Optional[str] = None
    ) -> List[RemoteRecipe]:
        return await self.query(queries.recipes_sql(limit, offset, search), limit, RemoteRecipe)

    async def get_recipe_count(self) -> int:
        return await self._count(queries.recipe_count_sql())

    async def get_recipe_revisions(self, recipe_no: int) -> List[RemoteRecipeRevision]:
        """Revisions of a recipe, default first, then by code."""
        return await self.query(queries.recipe_revisions_sql(recipe_no), model=RemoteRecipeRevision)

    async def get_recipe_details(self, revision_no: int) -> List[RemoteRecipeLine]:
        return await self.query(queries.recipe_details_sql(revision_no), model=RemoteRecipeLine)

    async def get_recipe_sub_details(self, line_no: int) -> List[RemoteRecipeSubLine]:
        return await self.query(queries.recipe_sub_details_sql(line_no), model=RemoteRecipeSubLine)

    async def get_recipe_details_by_recipe_no(self, recipe_no: int) -> List[RemoteRecipeLine]:
        """Lines of the recipe's default (else active) revision."""
        revision_no = await self._scalar(
            queries.default_revision_sql(recipe_no), "URETIM_REVIZYON_NO"
        )
        if revision_no is None:
            return []
        return await self.get_recipe_details(revision_no)

    async def get_product_recipe(self, stock_no: int) -> List[RemoteRecipeLine]:
        """Lines of the first recipe revision that consumes or produces ``stock_no``."""
        revision_no = await self._scalar(
            queries.product_recipe_revision_sql(stock_no), "URETIM_REVIZYON_NO"
        )
        if revision_no is None:
            return []
        return await self.get_recipe_details(revision_no)

    async def get_products_with_recipe(
        self, limit: int = 100, offset: int = 0
    ) -> List[RemoteProduct]:
        return await self.query(
            queries.products_with_recipe_sql(limit, offset), limit, RemoteProduct
        )

    async def get_products_with_recipe_count(self) -> int:
        return await self.get_recipe_count()


netsim_client = NetSimClient()


def get_netsim_client() -> NetSimClient:
    return netsim_client
