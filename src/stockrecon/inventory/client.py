"""
在庫サービス API クライアント

在庫サービス (REST) に対して在庫変動の登録と履歴の参照を行う。

API一覧:
1. POST /stock/{sku}/operation            SKU 単位の在庫変動
2. GET  /stock/global-versions            全局版本号の一覧
3. GET  /stock/history/version/{version}  版本号ごとの変動履歴
4. GET  /products                         商品一覧
5. POST /products                         商品登録
6. DELETE /products/{id}                  商品削除
7. POST /pdf/parse                        PDF → テキスト変換
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import quote

import requests

from stockrecon.reconcile.models import DEFAULT_VERSION_SEQ_NO, MutationRequest

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000/api"
DEFAULT_TIMEOUT = 10.0


class InventoryAPIError(Exception):
    """在庫サービスの呼び出しエラー"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass
class MutationResponse:
    """在庫変動 API のレスポンス"""
    message: str
    after_qty: Optional[int] = None
    seq_no: Optional[int] = None


@dataclass
class LedgerEntry:
    """在庫変動履歴の1件分"""
    id: int
    product_id: int
    seq_no: int
    global_version: str
    operation_type: str
    delta: int
    before_qty: int
    after_qty: int
    remark: str = ""
    created_by: int = 0
    updated_by: int = 0
    created_at: str = ""
    updated_at: str = ""
    sku: str = ""
    current_quantity: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "LedgerEntry":
        return cls(
            id=data.get("id", 0),
            product_id=data.get("product_id", 0),
            seq_no=data.get("seq_no", 0),
            global_version=data.get("global_version", ""),
            operation_type=data.get("operation_type", ""),
            delta=data.get("delta", 0),
            before_qty=data.get("before_qty", 0),
            after_qty=data.get("after_qty", 0),
            remark=data.get("remark") or "",
            created_by=data.get("created_by", 0),
            updated_by=data.get("updated_by", 0),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
            sku=data.get("sku", ""),
            current_quantity=data.get("current_quantity", 0),
        )


class InventoryClient:
    """在庫サービス API クライアント"""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url: API のベースURL (例: "http://localhost:3000/api")
            timeout: 1リクエストあたりのタイムアウト (秒)
            token: Bearer トークン。不要なサービスでは省略。
            session: 差し替え用の requests.Session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json;charset=utf-8",
            "Accept": "application/json",
        })
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"
        kwargs.setdefault("timeout", self.timeout)
        logger.debug("%s %s", method, url)
        try:
            resp = self._session.request(method, url, **kwargs)
            resp.raise_for_status()
        except requests.HTTPError as e:
            raise InventoryAPIError(
                _error_message(e.response, str(e)),
                status_code=e.response.status_code if e.response is not None else None,
            ) from e
        except requests.RequestException as e:
            raise InventoryAPIError(str(e)) from e

        try:
            return resp.json()
        except ValueError as e:
            raise InventoryAPIError(
                f"JSON ではないレスポンス: {method} {path}", status_code=resp.status_code,
            ) from e

    def _get(self, path: str, params: Optional[dict] = None):
        return self._request("GET", path, params=params)

    def _post(self, path: str, json_body: dict):
        return self._request("POST", path, json=json_body)

    # ── 在庫変動 ──

    def mutate_by_sku(self, sku: str, request: MutationRequest) -> MutationResponse:
        """SKU 単位で在庫変動を登録する。

        Args:
            sku: 対象 SKU (例: "A72-L-BLACK")
            request: 在庫変動リクエスト

        Returns:
            MutationResponse (message, after_qty, seq_no)

        Raises:
            ValueError: リクエストが不正 (送信しない)
            InventoryAPIError: サービスが拒否 (バリデーション/版本号の競合) または通信エラー
        """
        if not sku or not sku.strip():
            raise ValueError("SKU不能为空")
        request.validate()

        data = self._post(f"/stock/{quote(sku, safe='')}/operation", request.to_payload())
        if not isinstance(data, dict):
            raise InventoryAPIError(f"不正なレスポンス: {type(data).__name__} (SKU {sku})")
        return MutationResponse(
            message=data.get("message", ""),
            after_qty=data.get("after_qty"),
            seq_no=data.get("seq_no"),
        )

    # ── 版本号・履歴 ──

    def list_global_versions(self) -> list[str]:
        """全局版本号の一覧を取得。"""
        data = self._get("/stock/global-versions")
        return [str(v) for v in data]

    def get_history_by_version(self, version: str) -> list[LedgerEntry]:
        """版本号に紐づく在庫変動履歴を取得。

        Args:
            version: 全局版本号 (例: "1.0.0")

        Returns:
            LedgerEntry のリスト
        """
        if not version or not version.strip():
            raise ValueError("全局版本号不能为空")
        data = self._get(f"/stock/history/version/{quote(version.strip(), safe='')}")
        return [LedgerEntry.from_dict(item) for item in data]

    # ── 商品 ──

    def list_products(self, **params) -> list[dict]:
        """商品 (在庫) 一覧を取得。params はそのままクエリに渡す。"""
        return self._get("/products", params=params or None)

    def create_product(
        self,
        sku_format: str,
        amount: int,
        global_version: str,
        version_seq_no: int = DEFAULT_VERSION_SEQ_NO,
        description: str = "",
    ) -> dict:
        """商品を登録する。SKU の分解はサービス側で行われる。

        Returns:
            {"message": ..., "productId": ..., "product": {...}}
        """
        if not sku_format or not sku_format.strip():
            raise ValueError("SKU格式不能为空")
        if not isinstance(amount, int) or isinstance(amount, bool):
            raise ValueError("数量必须为有效数字")
        if amount < 0:
            raise ValueError("数量不能为负数")
        if not global_version or not global_version.strip():
            raise ValueError("全局版本号不能为空")

        return self._post("/products", {
            "skuFormat": sku_format,
            "amount": amount,
            "versionSeqNo": version_seq_no,
            "description": description,
            "globalVersion": global_version,
        })

    def delete_product(self, product_id) -> dict:
        """商品を削除する。

        Args:
            product_id: 商品ID

        Returns:
            {"message": ...}
        """
        if product_id is None or not str(product_id).strip():
            raise ValueError("商品ID不能为空")
        return self._request("DELETE", f"/products/{quote(str(product_id).strip(), safe='')}")

    # ── 文書変換 ──

    def parse_document(self, path) -> str:
        """PDF をサービスに送り、抽出済みテキストを受け取る。

        Args:
            path: PDF ファイルのパス

        Returns:
            抽出テキスト
        """
        path = Path(path)
        with path.open("rb") as f:
            # multipart の Content-Type は requests に任せる
            data = self._request(
                "POST", "/pdf/parse",
                files={"pdf": (path.name, f, "application/pdf")},
                headers={"Content-Type": None},
            )
        if isinstance(data, dict):
            return data.get("text", "")
        return str(data)


def _error_message(resp: Optional[requests.Response], fallback: str) -> str:
    """レスポンスの {"error": ...} を優先してエラーメッセージを取り出す。"""
    if resp is None:
        return fallback
    try:
        body = resp.json()
    except ValueError:
        return fallback
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return fallback
