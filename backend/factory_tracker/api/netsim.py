# backend/factory_tracker/api/netsim.py
"""
NetSim API

Exposes the NetSim bridge (connection, orders, recipes, schema) and the order
import workflow. Bridge failures are reported in the response body
(``success: false``), never as HTTP errors.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from factory_tracker.core.database import get_db
from factory_tracker.schemas.netsim import (
    BulkImportItem,
    BulkImportRequest,
    ConnectRequest,
    DeliveryDateRequest,
    ImportOrderRequest,
    ImportResult,
    ListResult,
    NewOrdersResult,
    OperationResult,
    OrderPage,
    ProductPage,
    RecipeDetailResult,
    RecipePage,
    StatusSyncRequest,
)
from factory_tracker.services.netsim import (
    BridgeStatus,
    ConnectionResult,
    DatabaseFile,
    NetSimClient,
    RemoteColumn,
    RemoteCustomer,
    RemoteOrderLine,
    RemoteProduct,
    RemoteRecipe,
    RemoteRecipeLine,
    RemoteRecipeSubLine,
    RemoteTable,
    get_netsim_client,
)
from factory_tracker.services.netsim_service import NetSimService

router = APIRouter(prefix="/api/netsim", tags=["netsim"])


def get_netsim_service(
    db: AsyncSession = Depends(get_db),
    client: NetSimClient = Depends(get_netsim_client),
) -> NetSimService:
    return NetSimService(db, client)


# ============================================================================
# Connection
# ============================================================================


@router.get("/status", response_model=BridgeStatus)
async def get_status(client: NetSimClient = Depends(get_netsim_client)):
    return await client.get_status()


@router.get("/databases", response_model=List[DatabaseFile])
async def list_databases(
    path: Optional[str] = None, client: NetSimClient = Depends(get_netsim_client)
):
    if path:
        return await client.get_databases(path)
    return await client.get_databases()


@router.post("/connect", response_model=ConnectionResult)
async def connect(req: ConnectRequest, client: NetSimClient = Depends(get_netsim_client)):
    return await client.connect(req.database_file, req.username, req.password)


# ============================================================================
# Orders
# ============================================================================


@router.get("/orders", response_model=OrderPage)
async def list_orders(
    limit: int = Query(20, ge=1, le=500),
    offset: int = Query(0, ge=0),
    only_open: bool = False,
    service: NetSimService = Depends(get_netsim_service),
):
    return await service.list_orders(limit=limit, offset=offset, only_open=only_open)


@router.get("/orders/new", response_model=NewOrdersResult)
async def check_new_orders(
    minutes_ago: int = Query(60, ge=1),
    service: NetSimService = Depends(get_netsim_service),
):
    return await service.check_new_orders(minutes_ago)


@router.get("/orders/{order_no}/details", response_model=ListResult[RemoteOrderLine])
async def get_order_details(order_no: int, client: NetSimClient = Depends(get_netsim_client)):
    return ListResult[RemoteOrderLine](success=True, items=await client.get_order_details(order_no))


@router.post("/orders/import", response_model=ImportResult)
async def import_order(
    req: ImportOrderRequest, service: NetSimService = Depends(get_netsim_service)
):
    return await service.import_order(req.order, req.lines, req.actor_id, req.delivery_date)


@router.post("/orders/import/bulk", response_model=List[BulkImportItem])
async def import_orders(
    req: BulkImportRequest, service: NetSimService = Depends(get_netsim_service)
):
    return await service.import_orders(req.order_nos, req.actor_id)


@router.post("/orders/{order_no}/delivery-date", response_model=OperationResult)
async def update_delivery_date(
    order_no: int,
    req: DeliveryDateRequest,
    service: NetSimService = Depends(get_netsim_service),
):
    return await service.update_delivery_date(order_no, req.delivery_date)


@router.post("/orders/{order_no}/status", response_model=OperationResult)
async def sync_order_status(
    order_no: int,
    req: StatusSyncRequest,
    service: NetSimService = Depends(get_netsim_service),
):
    return await service.sync_order_status(order_no, req.status)


@router.get("/customers/{customer_no}", response_model=RemoteCustomer)
async def get_customer(customer_no: int, client: NetSimClient = Depends(get_netsim_client)):
    customer = await client.get_customer(customer_no)
    if customer is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"NetSim customer {customer_no} not found",
        )
    return customer


# ============================================================================
# Products & recipes
# ============================================================================


@router.get("/products", response_model=ListResult[RemoteProduct])
async def search_products(
    search: Optional[str] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    client: NetSimClient = Depends(get_netsim_client),
):
    products = await client.get_products(limit=limit, offset=offset, search=search)
    return ListResult[RemoteProduct](success=True, items=products)


@router.get("/products/with-recipe", response_model=ProductPage)
async def list_products_with_recipe(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: NetSimService = Depends(get_netsim_service),
):
    return await service.list_products_with_recipe(limit=limit, offset=offset)


@router.get("/products/{stock_no}", response_model=RemoteProduct)
async def get_product(stock_no: int, client: NetSimClient = Depends(get_netsim_client)):
    product = await client.get_product(stock_no)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"NetSim stock card {stock_no} not found",
        )
    return product


@router.get("/products/{stock_no}/recipe", response_model=ListResult[RemoteRecipeLine])
async def get_product_recipe(stock_no: int, client: NetSimClient = Depends(get_netsim_client)):
    return ListResult[RemoteRecipeLine](success=True, items=await client.get_product_recipe(stock_no))


@router.get("/recipes", response_model=RecipePage)
async def list_recipes(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: NetSimService = Depends(get_netsim_service),
):
    return await service.list_recipes(limit=limit, offset=offset)


@router.get("/recipes/search", response_model=ListResult[RemoteRecipe])
async def search_recipes(search: str, client: NetSimClient = Depends(get_netsim_client)):
    recipes = await client.get_recipes(limit=50, search=search)
    return ListResult[RemoteRecipe](success=True, items=recipes)


@router.get("/recipes/{recipe_no}", response_model=RecipeDetailResult)
async def get_recipe_details(
    recipe_no: int, service: NetSimService = Depends(get_netsim_service)
):
    return await service.get_recipe_details(recipe_no)


@router.get("/revisions/{revision_no}/lines", response_model=ListResult[RemoteRecipeLine])
async def get_revision_details(
    revision_no: int, client: NetSimClient = Depends(get_netsim_client)
):
    items = await client.get_recipe_details(revision_no)
    return ListResult[RemoteRecipeLine](success=True, items=items)


@router.get("/recipe-lines/{line_no}/sub-lines", response_model=ListResult[RemoteRecipeSubLine])
async def get_recipe_sub_details(line_no: int, client: NetSimClient = Depends(get_netsim_client)):
    items = await client.get_recipe_sub_details(line_no)
    return ListResult[RemoteRecipeSubLine](success=True, items=items)


# ============================================================================
# Schema introspection
# ============================================================================


@router.get("/tables", response_model=ListResult[RemoteTable])
async def list_tables(client: NetSimClient = Depends(get_netsim_client)):
    return ListResult[RemoteTable](success=True, items=await client.get_tables())


@router.get("/tables/recipe-table")
async def find_recipe_table(client: NetSimClient = Depends(get_netsim_client)):
    return {"table_name": await client.find_recipe_table()}


@router.get("/tables/{table_name}/columns", response_model=ListResult[RemoteColumn])
async def get_table_columns(table_name: str, client: NetSimClient = Depends(get_netsim_client)):
    return ListResult[RemoteColumn](success=True, items=await client.get_table_columns(table_name))
