# backend/factory_tracker/services/netsim/models.py
"""
NetSim record types

Typed views over the rows returned by the bridge. Field aliases are the
ERP column names as they appear on the wire; every model also accepts the
Python field names.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

from factory_tracker.services.netsim.errors import ErrorKind
from factory_tracker.services.netsim.queries import decode_field_type


class BridgeResponse(BaseModel):
    """Envelope every bridge endpoint answers with."""

    success: bool
    message: Optional[str] = None
    data: Any = None
    error: Optional[str] = None
    # set by the client, never sent by the bridge
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def failure(cls, error: str, kind: ErrorKind) -> "BridgeResponse":
        return cls(success=False, error=error, error_kind=kind)


class _BridgeData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BridgeStatus(_BridgeData):
    is_connected: bool = False
    current_database: Optional[str] = None


class ConnectionResult(_BridgeData):
    is_connected: bool = False
    server_version: Optional[str] = None
    table_count: Optional[int] = 0
    error_message: Optional[str] = None


class QueryResult(_BridgeData):
    columns: List[str] = Field(default_factory=list)
    rows: List[Any] = Field(default_factory=list)
    total_count: Optional[int] = 0
    page: Optional[int] = 1
    page_size: Optional[int] = 0

    @field_validator("columns", "rows", mode="before")
    @classmethod
    def _null_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class DatabaseFile(_BridgeData):
    file_name: str
    full_path: str
    size_bytes: Optional[int] = None
    size_formatted: Optional[str] = None
    last_modified: Optional[str] = None


class _ErpRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class RemoteOrder(_ErpRecord):
    """Order header (ALSAASIL joined with CARIKART)."""

    order_no: int = Field(alias="ALISSATIS_NO")
    tracking_no: Optional[str] = Field(None, alias="TAKIP_NO")
    operation_code: Optional[str] = Field(None, alias="ISLEM_KODU")
    operation_name: Optional[str] = Field(None, alias="ISLEM_ADI")
    order_date: Optional[datetime] = Field(None, alias="TARIH")
    delivery_date: Optional[datetime] = Field(None, alias="TESLIM_TARIHI")
    status: Optional[str] = Field(None, alias="DURUM")
    customer_no: Optional[int] = Field(None, alias="CARI_NO")
    customer_title: Optional[str] = Field(None, alias="CARI_UNVANI")
    grand_total: Optional[float] = Field(None, alias="GENEL_TOPLAM")
    currency: Optional[str] = Field(None, alias="DOVIZ_BIRIMI")
    approved: Optional[str] = Field(None, alias="ONAYLANDI")
    closed: Optional[str] = Field(None, alias="KAPANDI")
    description: Optional[str] = Field(None, alias="ACIKLAMA")
    staff_no: Optional[int] = Field(None, alias="PERSONEL_NO")

    @property
    def external_id(self) -> str:
        return f"NETSIM-{self.order_no}"

    @computed_field
    @property
    def is_open(self) -> bool:
        # same test as the "only open" SQL predicate
        return (self.closed or "").strip() == "H"


class RemoteOrderLine(_ErpRecord):
    """Order line (ALSADETA) with source and produced stock names."""

    line_no: int = Field(alias="ALISSATIS_DETAY_NO")
    order_no: int = Field(alias="ALISSATIS_NO")
    sequence: Optional[int] = Field(None, alias="SIRA_NO")
    stock_no: Optional[int] = Field(None, alias="STOK_NO")
    stock_name: Optional[str] = Field(None, alias="STOK_ADI")
    stock_code: Optional[str] = Field(None, alias="STOK_KODU")
    quantity: Optional[float] = Field(None, alias="MIKTAR")
    unit: Optional[str] = Field(None, alias="BIRIM")
    unit_price: Optional[float] = Field(None, alias="BIRIM_FIYAT")
    line_total: Optional[float] = Field(None, alias="SATIR_TOPLAMI")
    line_status: Optional[str] = Field(None, alias="SATIR_DURUM")
    description: Optional[str] = Field(None, alias="ACIKLAMA")
    note1: Optional[str] = Field(None, alias="ACIKLAMA1")
    note2: Optional[str] = Field(None, alias="ACIKLAMA2")
    note3: Optional[str] = Field(None, alias="ACIKLAMA3")
    note4: Optional[str] = Field(None, alias="ACIKLAMA4")
    committed_delivery_date: Optional[datetime] = Field(None, alias="TESLIM_TAAHHUT_TARIHI")
    produced_stock_no: Optional[int] = Field(None, alias="DSTOK_NO")
    produced_name: Optional[str] = Field(None, alias="DST_ADI")


class RemoteCustomer(_ErpRecord):
    customer_no: int = Field(alias="CARI_NO")
    code: Optional[str] = Field(None, alias="CARI_KOD")
    title: Optional[str] = Field(None, alias="CARI_UNVANI")
    tax_office: Optional[str] = Field(None, alias="VERGI_DAIRESI")
    tax_no: Optional[str] = Field(None, alias="VERGI_NO")
    phone: Optional[str] = Field(None, alias="TELEFON")
    address: Optional[str] = Field(None, alias="ADRES")


class RemoteProduct(_ErpRecord):
    stock_no: int = Field(alias="STOK_NO")
    code: Optional[str] = Field(None, alias="STOK_KODU")
    name: Optional[str] = Field(None, alias="STOK_ADI")
    unit: Optional[str] = Field(None, alias="BIRIM")
    type_name: Optional[str] = Field(None, alias="STOK_TIP_ADI")


class RemoteRecipe(_ErpRecord):
    """Production recipe header (URETRECE)."""

    recipe_no: int = Field(alias="URETIM_RECETE_NO")
    code: Optional[str] = Field(None, alias="RECETE_KODU")
    name: Optional[str] = Field(None, alias="RECETE_ADI")
    active: Optional[str] = Field(None, alias="AKTIF")
    stock_no: Optional[int] = Field(None, alias="STOK_NO")
    stock_code: Optional[str] = Field(None, alias="STOK_KODU")
    stock_name: Optional[str] = Field(None, alias="STOK_ADI")
    description: Optional[str] = Field(None, alias="ACIKLAMA")


class RemoteRecipeRevision(_ErpRecord):
    """Recipe revision (URETREVI)."""

    revision_no: int = Field(alias="URETIM_REVIZYON_NO")
    recipe_no: int = Field(alias="URETIM_RECETE_NO")
    code: Optional[str] = Field(None, alias="REVIZYON_KODU")
    active: Optional[str] = Field(None, alias="AKTIF")
    default: Optional[str] = Field(None, alias="VARSAYILAN")
    coefficient: Optional[float] = Field(None, alias="KATSAYI")
    quantity: Optional[float] = Field(None, alias="MIKTAR")
    description: Optional[str] = Field(None, alias="ACIKLAMA")
    revision_date: Optional[datetime] = Field(None, alias="TARIH")


class RemoteRecipeLine(_ErpRecord):
    """Recipe line (URETREDE).

    ``direction`` is the raw ISLEM_YONU value: 1 consumes ``stock_no``,
    -1 produces it, anything else is informational.
    """

    line_no: int = Field(alias="REVIZYON_DETAY_NO")
    revision_no: int = Field(alias="URETIM_REVIZYON_NO")
    operation_name: Optional[str] = Field(None, alias="ISLEM_ADI")
    direction: Optional[int] = Field(None, alias="ISLEM_YONU")
    variable_name: Optional[str] = Field(None, alias="DEGISKEN_ADI")
    sequence: Optional[int] = Field(None, alias="SIRA_NO")
    stock_no: Optional[int] = Field(None, alias="STOK_NO")
    stock_code: Optional[str] = Field(None, alias="STOK_KODU")
    stock_name: Optional[str] = Field(None, alias="STOK_ADI")
    unit: Optional[str] = Field(None, alias="BIRIM")
    unit_multiplier: Optional[float] = Field(None, alias="BIRIMX")
    produced_stock_no: Optional[int] = Field(None, alias="DSTOK_NO")
    produced_stock_code: Optional[str] = Field(None, alias="DSTOK_KODU")
    produced_stock_name: Optional[str] = Field(None, alias="DSTOK_ADI")
    stock_type_no: Optional[int] = Field(None, alias="STOK_TIP_NO")
    stock_type_name: Optional[str] = Field(None, alias="STOK_TIP_ADI")
    description: Optional[str] = Field(None, alias="ACIKLAMA")
    produced_recipe_no: Optional[int] = Field(None, alias="URETILEN_RECETE_NO")
    produced_revision_no: Optional[int] = Field(None, alias="URETILEN_REVIZYON_NO")

    @computed_field
    @property
    def direction_label(self) -> str:
        if self.direction == 1:
            return "input"
        if self.direction == -1:
            return "output"
        return "neutral"


class RemoteRecipeSubLine(_ErpRecord):
    """Detail of a recipe line (URETREDD)."""

    sub_line_no: int = Field(alias="REVIZYON_DET_DET_NO")
    line_no: int = Field(alias="REVIZYON_DETAY_NO")
    sequence: Optional[int] = Field(None, alias="SIRA_NO")
    variable_name: Optional[str] = Field(None, alias="DETAY_DEGISKEN_ADI")
    stock_no: Optional[int] = Field(None, alias="STOK_NO")
    stock_code: Optional[str] = Field(None, alias="STOK_KODU")
    stock_name: Optional[str] = Field(None, alias="STOK_ADI")
    produced_stock_no: Optional[int] = Field(None, alias="DSTOK_NO")
    unit: Optional[str] = Field(None, alias="BIRIM")
    quantity: Optional[float] = Field(None, alias="MIKTAR")


class RemoteTable(_ErpRecord):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    table_name: str = Field(alias="TABLE_NAME")
    record_count: Optional[int] = Field(None, alias="RECORD_COUNT")


class RemoteColumn(_ErpRecord):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    field_name: str = Field(alias="FIELD_NAME")
    field_type: str = Field(alias="FIELD_TYPE")
    field_length: Optional[int] = Field(None, alias="FIELD_LENGTH")
    field_null: Optional[str] = Field(None, alias="FIELD_NULL")

    @field_validator("field_type", mode="before")
    @classmethod
    def _decode_type_code(cls, v: Any) -> Any:
        # the query decodes type codes already; a raw code still maps here
        if isinstance(v, int) or (isinstance(v, str) and v.strip().isdigit()):
            return decode_field_type(int(v))
        return v
