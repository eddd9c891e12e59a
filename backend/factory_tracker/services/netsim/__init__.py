"""NetSim ERP bridge.

Typed async access to the legacy NetSim database through its HTTP bridge:
orders and order lines, customers and stock cards, production recipes with
their revisions, lines and sub-lines, and schema introspection.
"""

from factory_tracker.services.netsim.client import NetSimClient, get_netsim_client, netsim_client
from factory_tracker.services.netsim.errors import ErrorKind
from factory_tracker.services.netsim.models import (
    BridgeResponse,
    BridgeStatus,
    ConnectionResult,
    DatabaseFile,
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

__all__ = [
    "NetSimClient",
    "netsim_client",
    "get_netsim_client",
    "ErrorKind",
    "BridgeResponse",
    "BridgeStatus",
    "ConnectionResult",
    "DatabaseFile",
    "RemoteColumn",
    "RemoteCustomer",
    "RemoteOrder",
    "RemoteOrderLine",
    "RemoteProduct",
    "RemoteRecipe",
    "RemoteRecipeLine",
    "RemoteRecipeRevision",
    "RemoteRecipeSubLine",
    "RemoteTable",
]
