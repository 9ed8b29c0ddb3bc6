"""在庫変動のバッチ実行"""

import logging
from typing import Mapping, Optional

from stockrecon.inventory.client import InventoryAPIError

from .aggregator import aggregate
from .errors import EmptyBatchError
from .models import (
    STATUS_FAILURE,
    STATUS_SUCCESS,
    BatchContext,
    BatchResult,
    ExtractionResult,
    MutationOutcome,
    MutationRequest,
)
from .parser import extract

logger = logging.getLogger(__name__)


def build_request(sku: str, quantity: int, context: BatchContext) -> MutationRequest:
    """1 SKU 分のリクエストを組み立てる。

    行の種別は使わず context.operation_kind (デフォルト SALE_OUT) で固定。
    現在庫は問い合わせないため after_qty は送らない (調整種別は検証で失敗する)。
    """
    return MutationRequest(
        sku=sku,
        operation_kind=context.operation_kind,
        change_amount=quantity,
        global_version=context.global_version,
        created_by=context.created_by,
        updated_by=context.updated_by,
        version_seq_no=context.version_seq_no,
        remark=context.remark,
    )


class MutationOrchestrator:
    """集計済み SKU ごとに在庫変動を1件ずつ発行する。

    全リクエストが同じ global_version を持つため、並列に送ると
    サービス側の版本号競合と区別がつかなくなる。必ず順番に1件ずつ送る。
    """

    def __init__(self, client):
        """
        Args:
            client: mutate_by_sku(sku, request) を持つ在庫サービスクライアント
        """
        self.client = client

    def run_batch(self, entries: Mapping[str, int], context: BatchContext) -> BatchResult:
        """集計結果を順に在庫サービスへ反映する。

        1件の失敗でバッチは止まらない。失敗は例外の種類を問わず fail_list に積まれる。

        Args:
            entries: SKU → 数量 (挿入順に処理)
            context: 版本号・操作者などバッチ共通の値

        Returns:
            BatchResult

        Raises:
            EmptyBatchError: entries が空 (1件も送信しない)
        """
        if not entries:
            raise EmptyBatchError()

        result = BatchResult()
        logger.info(
            "バッチ開始: %d 件, 版本号 %s, 種別 %s",
            len(entries), context.global_version, context.operation_kind.value,
        )

        for sku, quantity in entries.items():
            try:
                request = build_request(sku, quantity, context)
                message = self.client.mutate_by_sku(sku, request).message
            except (InventoryAPIError, ValueError) as e:
                logger.warning("在庫変動失敗 %s x%s: %s", sku, quantity, e)
                result.fail_list.append(_failure(sku, quantity, str(e)))
                continue
            except Exception as e:
                logger.exception("在庫変動で予期しないエラー %s x%s", sku, quantity)
                result.fail_list.append(_failure(sku, quantity, str(e) or type(e).__name__))
                continue

            logger.info("在庫変動成功 %s x%s: %s", sku, quantity, message)
            result.success_list.append(MutationOutcome(
                sku=sku,
                change_amount=quantity,
                status=STATUS_SUCCESS,
                message=message,
            ))

        logger.info("バッチ完了: 成功 %d 件, 失敗 %d 件", len(result.success_list), len(result.fail_list))
        return result


def _failure(sku: str, quantity: int, error: str) -> MutationOutcome:
    return MutationOutcome(sku=sku, change_amount=quantity, status=STATUS_FAILURE, error=error)


def plan_text(
    text: str,
    *,
    created_by: int,
    updated_by: Optional[int] = None,
    source: str = "PDF",
) -> tuple[ExtractionResult, dict[str, int], list[MutationRequest]]:
    """送信予定のリクエストを組み立てる (送信はしない)。

    Returns:
        (抽出結果, SKU → 数量, リクエスト一覧)

    Raises:
        MissingVersionError: 版本号が無い
        EmptyBatchError: 有効行が無い
    """
    extraction = extract(text)
    entries = aggregate(extraction.rows)
    if not entries:
        raise EmptyBatchError()

    context = BatchContext(
        global_version=extraction.global_version,
        created_by=created_by,
        updated_by=created_by if updated_by is None else updated_by,
        source=source,
    )
    planned = [build_request(sku, qty, context) for sku, qty in entries.items()]
    return extraction, entries, planned


def reconcile_text(
    text: str,
    client,
    *,
    created_by: int,
    updated_by: Optional[int] = None,
    source: str = "PDF",
) -> BatchResult:
    """抽出 → 集計 → バッチ実行 を一括で行う。

    版本号はテキストから取得し、全リクエストで共通に使う。

    Args:
        text: 文書から抽出済みのテキスト
        client: 在庫サービスクライアント
        created_by: 作成者ID
        updated_by: 更新者ID (省略時は created_by)
        source: 備考に入れる取込元

    Raises:
        MissingVersionError: 版本号が無い (送信前に中断)
        EmptyBatchError: 有効行が無い (送信前に中断)
    """
    extraction = extract(text)
    entries = aggregate(extraction.rows)

    context = BatchContext(
        global_version=extraction.global_version,
        created_by=created_by,
        updated_by=created_by if updated_by is None else updated_by,
        source=source,
    )
    return MutationOrchestrator(client).run_batch(entries, context)
