"""文書テキスト → 在庫変動 の照合処理"""

from .errors import EmptyBatchError, MissingVersionError, ReconcileError
from .models import (
    BatchContext,
    BatchResult,
    ExtractionResult,
    IdentifierRecord,
    MutationOutcome,
    MutationRequest,
    OperationKind,
    ParsedRow,
)
from .sku import tokenize
from .parser import extract
from .aggregator import aggregate
from .batch import MutationOrchestrator, build_request, plan_text, reconcile_text

__all__ = [
    "BatchContext",
    "BatchResult",
    "EmptyBatchError",
    "ExtractionResult",
    "IdentifierRecord",
    "MissingVersionError",
    "MutationOrchestrator",
    "MutationOutcome",
    "MutationRequest",
    "OperationKind",
    "ParsedRow",
    "ReconcileError",
    "aggregate",
    "build_request",
    "extract",
    "plan_text",
    "reconcile_text",
    "tokenize",
]
