#!/usr/bin/env python3
"""
在庫照合サンプル

使い方:
1. .env ファイルに STOCKRECON_API_BASE_URL (と必要なら STOCKRECON_API_TOKEN) を設定
2. このスクリプトを実行
"""

import sys

from stockrecon.config import load_settings
from stockrecon.inventory import InventoryAPIError, InventoryClient
from stockrecon.reconcile import ReconcileError, plan_text, reconcile_text, tokenize

SAMPLE_TEXT = """出库单  版本号：1.0.0
| SKU | 数量 | 类型 |
|-----|------|------|
| A72-L-BLACK | 2 | 出库 |
| A72-M-WHITE | 1 | 出库 |
| A72-L-BLACK | 3 | 出库 |
"""


def main():
    settings = load_settings()
    client = InventoryClient(
        base_url=settings.api_base_url,
        timeout=settings.api_timeout,
        token=settings.api_token,
    )

    # 1. 送信内容の確認
    print("=== 送信予定 ===")
    try:
        extraction, entries, planned = plan_text(SAMPLE_TEXT, created_by=settings.actor_id)
    except ReconcileError as e:
        print(f"エラー: {e}")
        sys.exit(1)

    print(f"版本号: {extraction.global_version}")
    for request in planned:
        record = tokenize(request.sku)
        print(f"  {request.sku}  x{request.change_amount}  ({record.name} / {record.size} / {record.color})")

    # 2. 在庫サービスへ反映
    print("\n=== 在庫反映 ===")
    try:
        result = reconcile_text(SAMPLE_TEXT, client, created_by=settings.actor_id)
    except ReconcileError as e:
        print(f"エラー: {e}")
        sys.exit(1)

    for outcome in result.success_list:
        print(f"  [成功] {outcome.sku}: {outcome.message}")
    for outcome in result.fail_list:
        print(f"  [失敗] {outcome.sku}: {outcome.error}")

    # 3. 今回の版本号の履歴
    print("\n=== 変動履歴 ===")
    try:
        history = client.get_history_by_version(extraction.global_version)
    except InventoryAPIError as e:
        print(f"履歴取得エラー: {e}")
        return

    for entry in history:
        print(f"  #{entry.seq_no} {entry.sku}  {entry.operation_type}  {entry.before_qty} → {entry.after_qty}")


if __name__ == "__main__":
    main()
