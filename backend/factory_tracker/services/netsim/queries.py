# backend/factory_tracker/services/netsim/queries.py
"""
NetSim SQL builders

Every statement the client sends is built here. Table and column names are
those of the NetSim (Firebird) schema and are part of the wire contract.

Values, including free-text search terms, are interpolated into the SQL text
as-is: there is no escaping and no parameter binding. A search term
containing a quote therefore changes the statement. Swapping this module for
bound parameters must keep the function signatures so that callers do not
change.
"""

from typing import Optional

# Firebird RDB$FIELDS.RDB$FIELD_TYPE codes
FIELD_TYPE_NAMES = {
    7: "SMALLINT",
    8: "INTEGER",
    10: "FLOAT",
    12: "DATE",
    13: "TIME",
    14: "CHAR",
    16: "BIGINT",
    27: "DOUBLE",
    35: "TIMESTAMP",
    37: "VARCHAR",
    261: "BLOB",
}
OTHER_FIELD_TYPE = "OTHER"

# Substrings identifying a recipe table in an unknown schema
RECIPE_TABLE_HINTS = ["STOKREC", "RECETE", "RECETEAS", "URETIMREC", "URETIM_RECETE", "BOM"]

# Purchase orders only
ORDER_OPERATION_FILTER = "ISLEM_KODU LIKE 'ALIS%'"
OPEN_ORDER_FILTER = "KAPANDI = 'H'"

_ORDER_COLUMNS = """
        a.ALISSATIS_NO,
        a.TAKIP_NO,
        a.ISLEM_KODU,
        a.ISLEM_ADI,
        a.TARIH,
        a.TESLIM_TARIHI,
        a.DURUM,
        a.CARI_NO,
        c.CARI_UNVANI,
        a.GENEL_TOPLAM,
        a.DOVIZ_BIRIMI,
        a.ONAYLANDI,
        a.KAPANDI,
        a.ACIKLAMA,
        a.PERSONEL_NO"""

_PRODUCT_COLUMNS = """
        s.STOK_NO,
        s.STOK_KODU,
        s.STOK_ADI,
        s.BIRIM1 as BIRIM,
        s.STOK_TIP_ADI"""


def decode_field_type(code: int) -> str:
    return FIELD_TYPE_NAMES.get(code, OTHER_FIELD_TYPE)


def _search_filter(search: Optional[str], *columns: str) -> str:
    if not search:
        return "1=1"
    terms = [f"UPPER({column}) LIKE UPPER('%{search}%')" for column in columns]
    return "(" + " OR ".join(terms) + ")"


def order_filter(only_open: bool, alias: str = "") -> str:
    prefix = f"{alias}." if alias else ""
    clause = f"{prefix}{ORDER_OPERATION_FILTER}"
    if only_open:
        clause += f" AND {prefix}{OPEN_ORDER_FILTER}"
    return clause


def orders_sql(limit: int, offset: int, only_open: bool) -> str:
    return f"""
      SELECT FIRST {limit} SKIP {offset}{_ORDER_COLUMNS}
      FROM ALSAASIL a
      LEFT JOIN CARIKART c ON a.CARI_NO = c.CARI_NO
      WHERE {order_filter(only_open, "a")}
      ORDER BY a.TARIH DESC
    """


def order_count_sql(only_open: bool) -> str:
    return f"SELECT COUNT(*) as CNT FROM ALSAASIL WHERE {order_filter(only_open)}"


def new_orders_sql(minutes_ago: int, limit: int = 50) -> str:
    return f"""
      SELECT FIRST {limit}{_ORDER_COLUMNS}
      FROM ALSAASIL a
      LEFT JOIN CARIKART c ON a.CARI_NO = c.CARI_NO
      WHERE {order_filter(True, "a")}
        AND a.TARIH >= DATEADD(-{minutes_ago} MINUTE TO CURRENT_TIMESTAMP)
      ORDER BY a.TARIH DESC
    """


def order_details_sql(order_no: int) -> str:
    return f"""
      SELECT
        d.ALISSATIS_DETAY_NO,
        d.ALISSATIS_NO,
        d.SIRA_NO,
        d.STOK_NO,
        d.STOK_ADI,
        s.STOK_KODU,
        d.MIKTAR,
        d.BIRIM,
        d.BIRIM_FIYAT,
        d.SATIR_TOPLAMI,
        d.SATIR_DURUM,
        d.ACIKLAMA,
        d.ACIKLAMA1,
        d.ACIKLAMA2,
        d.ACIKLAMA3,
        d.ACIKLAMA4,
        d.TESLIM_TAAHHUT_TARIHI,
        d.DSTOK_NO,
        ds.STOK_ADI as DST_ADI
      FROM ALSADETA d
      LEFT JOIN STOKKART s ON d.STOK_NO = s.STOK_NO
      LEFT JOIN STOKKART ds ON d.DSTOK_NO = ds.STOK_NO
      WHERE d.ALISSATIS_NO = {order_no}
      ORDER BY d.SIRA_NO
    """


def customer_sql(customer_no: int) -> str:
    return f"""
      SELECT
        c.CARI_NO,
        c.CARI_KOD,
        c.CARI_UNVANI,
        c.VERGI_DAIRESI,
        c.VERGI_NO
      FROM CARIKART c
      WHERE c.CARI_NO = {customer_no}
    """


def product_sql(stock_no: int) -> str:
    return f"""
      SELECT{_PRODUCT_COLUMNS}
      FROM STOKKART s
      WHERE s.STOK_NO = {stock_no}
    """


def products_sql(limit: int, offset: int, search: Optional[str] = None) -> str:
    return f"""
      SELECT FIRST {limit} SKIP {offset}{_PRODUCT_COLUMNS}
      FROM STOKKART s
      WHERE {_search_filter(search, "s.STOK_KODU", "s.STOK_ADI")}
      ORDER BY s.STOK_ADI
    """


def tables_sql() -> str:
    return """
      SELECT RDB$RELATION_NAME as TABLE_NAME
      FROM RDB$RELATIONS
      WHERE RDB$VIEW_BLR IS NULL
        AND RDB$SYSTEM_FLAG = 0
      ORDER BY RDB$RELATION_NAME
    """


def table_columns_sql(table_name: str) -> str:
    cases = "\n".join(
        f"          WHEN {code} THEN '{name}'" for code, name in FIELD_TYPE_NAMES.items()
    )
    return f"""
      SELECT
        RF.RDB$FIELD_NAME as FIELD_NAME,
        CASE F.RDB$FIELD_TYPE
{cases}
          ELSE '{OTHER_FIELD_TYPE}'
        END as FIELD_TYPE,
        F.RDB$FIELD_LENGTH as FIELD_LENGTH,
        CASE RF.RDB$NULL_FLAG WHEN 1 THEN 'NOT NULL' ELSE 'NULL' END as FIELD_NULL
      FROM RDB$RELATION_FIELDS RF
      JOIN RDB$FIELDS F ON RF.RDB$FIELD_SOURCE = F.RDB$FIELD_NAME
      WHERE RF.RDB$RELATION_NAME = '{table_name.upper()}'
      ORDER BY RF.RDB$FIELD_POSITION
    """


def recipes_sql(limit: int, offset: int, search: Optional[str] = None) -> str:
    return f"""
      SELECT FIRST {limit} SKIP {offset}
        U.URETIM_RECETE_NO,
        U.RECETE_KODU,
        U.RECETE_ADI,
        U.AKTIF,
        U.STOK_NO,
        S.STOK_KODU,
        S.STOK_ADI,
        U.ACIKLAMA
      FROM URETRECE U
      LEFT JOIN STOKKART S ON U.STOK_NO = S.STOK_NO
      WHERE {_search_filter(search, "U.RECETE_KODU", "U.RECETE_ADI")}
      ORDER BY U.RECETE_KODU ASC
    """


def recipe_count_sql() -> str:
    return "SELECT COUNT(*) as CNT FROM URETRECE"


def recipe_revisions_sql(recipe_no: int) -> str:
    return f"""
      SELECT
        UR.URETIM_REVIZYON_NO,
        UR.URETIM_RECETE_NO,
        UR.REVIZYON_KODU,
        UR.AKTIF,
        UR.VARSAYILAN,
        UR.KATSAYI,
        UR.MIKTAR,
        UR.ACIKLAMA,
        UR.TARIH
      FROM URETREVI UR
      WHERE UR.URETIM_RECETE_NO = {recipe_no}
      ORDER BY UR.VARSAYILAN DESC, UR.REVIZYON_KODU ASC
    """


def default_revision_sql(recipe_no: int) -> str:
    return f"""
      SELECT FIRST 1 URETIM_REVIZYON_NO
      FROM URETREVI
      WHERE URETIM_RECETE_NO = {recipe_no}
      ORDER BY VARSAYILAN DESC, AKTIF DESC
    """


def recipe_details_sql(revision_no: int) -> str:
    return f"""
      SELECT
        URE.REVIZYON_DETAY_NO,
        URE.URETIM_REVIZYON_NO,
        URE.ISLEM_ADI,
        URE.ISLEM_YONU,
        URE.DEGISKEN_ADI,
        URE.SIRA_NO,
        URE.STOK_NO,
        S.STOK_KODU,
        S.STOK_ADI,
        URE.BIRIM,
        URE.BIRIMX,
        URE.DSTOK_NO,
        DS.STOK_KODU as DSTOK_KODU,
        DS.STOK_ADI as DSTOK_ADI,
        URE.STOK_TIP_NO,
        ST.STOK_TIP_ADI,
        URE.ACIKLAMA,
        URE.URETILEN_RECETE_NO,
        URE.URETILEN_REVIZYON_NO
      FROM URETREDE URE
      LEFT JOIN STOKKART S ON URE.STOK_NO = S.STOK_NO
      LEFT JOIN STOKKART DS ON URE.DSTOK_NO = DS.STOK_NO
      LEFT JOIN STOKTIPI ST ON URE.STOK_TIP_NO = ST.STOK_TIP_NO
      WHERE URE.URETIM_REVIZYON_NO = {revision_no}
      ORDER BY URE.SIRA_NO ASC
    """


def recipe_sub_details_sql(line_no: int) -> str:
    return f"""
      SELECT
        URD.REVIZYON_DET_DET_NO,
        URD.REVIZYON_DETAY_NO,
        URD.SIRA_NO,
        URD.DETAY_DEGISKEN_ADI,
        URD.STOK_NO,
        S.STOK_KODU,
        S.STOK_ADI,
        URD.DSTOK_NO,
        URD.BIRIM,
        URD.MIKTAR
      FROM URETREDD URD
      LEFT JOIN STOKKART S ON URD.STOK_NO = S.STOK_NO
      WHERE URD.REVIZYON_DETAY_NO = {line_no}
      ORDER BY URD.SIRA_NO ASC
    """


def product_recipe_revision_sql(stock_no: int) -> str:
    """First revision of any recipe whose lines use ``stock_no`` as input or output."""
    return f"""
      SELECT FIRST 1 U.URETIM_RECETE_NO, UR.URETIM_REVIZYON_NO
      FROM URETRECE U
      JOIN URETREVI UR ON U.URETIM_RECETE_NO = UR.URETIM_RECETE_NO
      JOIN URETREDE URE ON UR.URETIM_REVIZYON_NO = URE.URETIM_REVIZYON_NO
      WHERE URE.STOK_NO = {stock_no} OR URE.DSTOK_NO = {stock_no}
    """


def products_with_recipe_sql(limit: int, offset: int) -> str:
    # recipes shaped as products
    return f"""
      SELECT FIRST {limit} SKIP {offset}
        U.URETIM_RECETE_NO as STOK_NO,
        U.RECETE_KODU as STOK_KODU,
        U.RECETE_ADI as STOK_ADI,
        '' as BIRIM,
        U.AKTIF as STOK_TIP_ADI
      FROM URETRECE U
      ORDER BY U.RECETE_KODU ASC
    """
