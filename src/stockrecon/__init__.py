"""stockrecon - 文書から在庫サービスへの照合ツールキット"""

__version__ = "0.1.0"

from stockrecon.reconcile import (
    BatchResult,
    EmptyBatchError,
    MissingVersionError,
    MutationOrchestrator,
    reconcile_text,
)
from stockrecon.inventory import InventoryAPIError, InventoryClient

__all__ = [
    "BatchResult",
    "EmptyBatchError",
    "InventoryAPIError",
    "InventoryClient",
    "MissingVersionError",
    "MutationOrchestrator",
    "reconcile_text",
]
