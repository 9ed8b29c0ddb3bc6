#!/usr/bin/env python3
"""
在庫照合 CLI

Usage:
    stockrecon reconcile FILE [--dry-run] [--actor-id N] [--source LABEL] [--json]
    stockrecon versions
    stockrecon history VERSION
    stockrecon stock
    stockrecon add SKU AMOUNT --global-version X.Y.Z [--description TEXT]
    stockrecon delete PRODUCT_ID
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from stockrecon.config import Settings, load_settings
from stockrecon.inventory import InventoryAPIError, InventoryClient
from stockrecon.reconcile import (
    OperationKind,
    ReconcileError,
    plan_text,
    reconcile_text,
    tokenize,
)

# 一部失敗したバッチの終了コード
EXIT_PARTIAL_FAILURE = 2


def _make_client(settings: Settings) -> InventoryClient:
    return InventoryClient(
        base_url=settings.api_base_url,
        timeout=settings.api_timeout,
        token=settings.api_token,
    )


def _read_text(path: Path, client: InventoryClient) -> str:
    """テキストファイルはそのまま、PDF はサービスで変換する。"""
    if path.suffix.lower() == ".pdf":
        print(f"PDF を解析中... ({path.name})")
        return client.parse_document(path)
    return path.read_text(encoding="utf-8")


def _describe(sku: str) -> str:
    record = tokenize(sku)
    parts = [p for p in (record.name, record.size, record.color) if p]
    return " / ".join(parts)


def cmd_reconcile(args, settings: Settings, client: InventoryClient) -> int:
    """文書の明細を在庫サービスへ反映"""
    actor_id = args.actor_id if args.actor_id is not None else settings.actor_id
    text = _read_text(args.file, client)

    if args.dry_run:
        extraction, entries, planned = plan_text(text, created_by=actor_id, source=args.source)
        print(f"=== 送信予定 (版本号 {extraction.global_version}, {len(planned)} SKU) ===\n")
        for request in planned:
            print(f"  {request.sku}  x{request.change_amount}  [{_describe(request.sku)}]")
        merged = len(extraction.rows) - len(entries)
        if merged:
            print(f"\n重複行 {merged} 件を合算しました。")
        return 0

    result = reconcile_text(text, client, created_by=actor_id, source=args.source)

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(f"完了: 成功 {len(result.success_list)} 件, 失敗 {len(result.fail_list)} 件")
        for outcome in result.success_list + result.fail_list:
            if outcome.ok:
                print(f"  [成功] {outcome.sku} x{outcome.change_amount}  {outcome.message or ''}")
            else:
                print(f"  [失敗] {outcome.sku} x{outcome.change_amount}  {outcome.error}")

    return EXIT_PARTIAL_FAILURE if result.has_failures else 0


def cmd_versions(args, settings: Settings, client: InventoryClient) -> int:
    """全局版本号の一覧を表示"""
    versions = client.list_global_versions()
    if not versions:
        print("版本号はありません。")
        return 0
    for version in versions:
        print(version)
    return 0


def cmd_history(args, settings: Settings, client: InventoryClient) -> int:
    """版本号ごとの在庫変動履歴を表示"""
    entries = client.get_history_by_version(args.version)
    if not entries:
        print(f"版本号 {args.version} の変動記録はありません。")
        return 0

    print(f"=== 版本号 {args.version} ({len(entries)} 件) ===\n")
    for entry in entries:
        kind = OperationKind.from_label(entry.operation_type)
        label = kind.label if kind else entry.operation_type
        inbound = kind.is_inbound if kind else "IN" in entry.operation_type
        direction = "入库" if inbound else "出库"
        print(f"  #{entry.seq_no} {entry.sku}  {direction}/{label}  "
              f"{entry.before_qty} → {entry.after_qty} (Δ{entry.delta})")
        if entry.remark:
            print(f"    備考: {entry.remark}")
    return 0


def cmd_stock(args, settings: Settings, client: InventoryClient) -> int:
    """商品 (在庫) 一覧を表示"""
    products = client.list_products()
    if not products:
        print("在庫はありません。")
        return 0

    print(f"=== 在庫一覧 ({len(products)} 品目) ===\n")
    for product in products:
        sku = product.get("sku", "")
        qty = product.get("quantity", product.get("current_quantity", ""))
        print(f"  {sku} x{qty}  [{_describe(sku)}]")
    return 0


def cmd_add(args, settings: Settings, client: InventoryClient) -> int:
    """商品を登録"""
    record = tokenize(args.sku)
    data = client.create_product(
        args.sku,
        args.amount,
        args.global_version,
        description=args.description,
    )
    print(f"{data.get('message', '登録しました')}: {args.sku}")
    print(f"  名称: {record.name}  サイズ: {record.size or '-'}  カラー: {record.color or '-'}")
    return 0


def cmd_delete(args, settings: Settings, client: InventoryClient) -> int:
    """商品を削除"""
    data = client.delete_product(args.product_id)
    message = data.get("message", "削除しました") if isinstance(data, dict) else "削除しました"
    print(f"{message}: {args.product_id}")
    return 0


COMMANDS = {
    "reconcile": cmd_reconcile,
    "versions": cmd_versions,
    "history": cmd_history,
    "stock": cmd_stock,
    "add": cmd_add,
    "delete": cmd_delete,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stockrecon", description="文書 → 在庫照合")
    parser.add_argument("--env", default=None, help=".envファイルのパス")
    parser.add_argument("-v", "--verbose", action="store_true", help="DEBUG ログを出力")
    subparsers = parser.add_subparsers(dest="command")

    # reconcile コマンド
    p_reconcile = subparsers.add_parser("reconcile", help="文書の明細を在庫に反映")
    p_reconcile.add_argument("file", type=Path, help="抽出済みテキスト、または PDF")
    p_reconcile.add_argument("--dry-run", action="store_true", help="送信せずに内容を表示")
    p_reconcile.add_argument("--actor-id", type=int, default=None, help="操作者ID (デフォルト: STOCKRECON_ACTOR_ID)")
    p_reconcile.add_argument("--source", default="PDF", help="備考に記録する取込元 (デフォルト: PDF)")
    p_reconcile.add_argument("--json", action="store_true", help="結果を JSON で出力")

    # versions コマンド
    subparsers.add_parser("versions", help="全局版本号の一覧")

    # history コマンド
    p_history = subparsers.add_parser("history", help="版本号ごとの変動履歴")
    p_history.add_argument("version", help="全局版本号 (例: 1.0.0)")

    # stock コマンド
    subparsers.add_parser("stock", help="在庫一覧を表示")

    # add コマンド
    p_add = subparsers.add_parser("add", help="商品を登録")
    p_add.add_argument("sku", help="SKU (例: A72-L-BLACK)")
    p_add.add_argument("amount", type=int, help="初期数量")
    p_add.add_argument("--global-version", required=True, help="全局版本号")
    p_add.add_argument("--description", default="", help="説明")

    # delete コマンド
    p_delete = subparsers.add_parser("delete", help="商品を削除")
    p_delete.add_argument("product_id", help="商品ID")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command not in COMMANDS:
        parser.print_help()
        return 1

    try:
        settings = load_settings(args.env)
    except ValueError as e:
        print(f"設定エラー: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    client = _make_client(settings)
    try:
        return COMMANDS[args.command](args, settings, client)
    except ReconcileError as e:
        print(f"エラー: {e}", file=sys.stderr)
        return 1
    except InventoryAPIError as e:
        print(f"API エラー: {e}", file=sys.stderr)
        return 1
    except (ValueError, OSError) as e:
        print(f"エラー: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
