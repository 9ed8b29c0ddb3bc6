"""在庫サービス API"""

from .client import InventoryAPIError, InventoryClient, LedgerEntry, MutationResponse

__all__ = [
    "InventoryAPIError",
    "InventoryClient",
    "LedgerEntry",
    "MutationResponse",
]
