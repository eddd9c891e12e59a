# backend/factory_tracker/schemas/netsim.py
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

from factory_tracker.services.netsim.errors import ErrorKind
from factory_tracker.services.netsim.models import (
    RemoteOrder,
    RemoteOrderLine,
    RemoteProduct,
    RemoteRecipe,
    RemoteRecipeLine,
    RemoteRecipeRevision,
)

T = TypeVar("T")


class OperationResult(BaseModel):
    success: bool
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


class ListResult(OperationResult, Generic[T]):
    items: List[T] = Field(default_factory=list)


class PagedResult(ListResult[T], Generic[T]):
    total_count: int = 0
    page: int = 1
    page_size: int = 0
    total_pages: int = 0
    # external ids of listed orders that already exist locally
    imported_order_ids: List[str] = Field(default_factory=list)


class ImportResult(OperationResult):
    order_id: Optional[int] = None
    product_count: Optional[int] = None


class BulkImportItem(BaseModel):
    order_no: int
    success: bool
    order_id: Optional[int] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


class NewOrdersResult(OperationResult):
    total: int = 0
    pending: int = 0
    orders: List[RemoteOrder] = Field(default_factory=list)


class RecipeDetailResult(OperationResult):
    revisions: List[RemoteRecipeRevision] = Field(default_factory=list)
    items: List[RemoteRecipeLine] = Field(default_factory=list)


OrderPage = PagedResult[RemoteOrder]
RecipePage = PagedResult[RemoteRecipe]
ProductPage = PagedResult[RemoteProduct]


# Requests


class ConnectRequest(BaseModel):
    database_file: str
    username: str = "SYSDBA"
    password: str = "masterkey"


class ImportOrderRequest(BaseModel):
    order: RemoteOrder
    lines: List[RemoteOrderLine] = Field(default_factory=list)
    actor_id: int
    delivery_date: Optional[datetime] = None


class BulkImportRequest(BaseModel):
    order_nos: List[int]
    actor_id: int


class DeliveryDateRequest(BaseModel):
    delivery_date: datetime


class StatusSyncRequest(BaseModel):
    status: str
