"""在庫照合 データモデル定義"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional

# バッチ内で共通の versionSeqNo
DEFAULT_VERSION_SEQ_NO = 1

STATUS_SUCCESS = "success"
STATUS_FAILURE = "failure"


class OperationKind(str, Enum):
    """在庫変動の操作種別"""
    PURCHASE_IN = "PURCHASE_IN"
    RETURN_IN = "RETURN_IN"
    SALE_OUT = "SALE_OUT"
    LOSS_OUT = "LOSS_OUT"
    ADJUST = "ADJUST"

    @property
    def label(self) -> str:
        """表示用ラベル (例: SALE_OUT → 销售出库)"""
        return _KIND_LABELS[self]

    @property
    def is_inbound(self) -> bool:
        return self.value.endswith("_IN")

    @property
    def requires_after_qty(self) -> bool:
        """操作後在庫数の指定が必須か (調整のみ)"""
        return self is OperationKind.ADJUST

    @classmethod
    def from_label(cls, text: str) -> Optional["OperationKind"]:
        """種別名または表示ラベルから OperationKind を引く。

        Args:
            text: "SALE_OUT" / "销售出库" / "出库" など

        Returns:
            該当する OperationKind。認識できない場合は None。
        """
        if not isinstance(text, str):
            return None
        key = text.strip()
        if not key:
            return None
        try:
            return cls(key.upper())
        except ValueError:
            pass
        for kind, label in _KIND_LABELS.items():
            if key == label:
                return kind
        return _SHORT_LABELS.get(key)


_KIND_LABELS = {
    OperationKind.PURCHASE_IN: "采购入库",
    OperationKind.RETURN_IN: "退货入库",
    OperationKind.SALE_OUT: "销售出库",
    OperationKind.LOSS_OUT: "损耗出库",
    OperationKind.ADJUST: "库存调整",
}

# 伝票上の略記
_SHORT_LABELS = {
    "入库": OperationKind.PURCHASE_IN,
    "出库": OperationKind.SALE_OUT,
}


@dataclass(frozen=True)
class IdentifierRecord:
    """SKU を分解した商品属性"""
    name: str = ""
    size: str = ""
    color: str = ""


@dataclass(frozen=True)
class ParsedRow:
    """テキストから抽出した表の1行"""
    identifier: str
    count: int
    kind: str                    # 原文のまま (例: 出库)
    line_no: int = 0             # 1始まりの行番号


@dataclass
class ExtractionResult:
    """抽出結果 (全体バージョン + 有効行)"""
    global_version: str
    rows: list[ParsedRow] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return sum(row.count for row in self.rows)


@dataclass(frozen=True)
class BatchContext:
    """バッチ実行時に固定されるコンテキスト"""
    global_version: str
    created_by: int
    updated_by: int
    version_seq_no: int = DEFAULT_VERSION_SEQ_NO
    source: str = "PDF"
    operation_kind: OperationKind = OperationKind.SALE_OUT

    def __post_init__(self):
        if not isinstance(self.global_version, str) or not self.global_version.strip():
            raise ValueError("全局版本号不能为空")

    @property
    def remark(self) -> str:
        """各リクエストに付与する備考"""
        return f"{self.source}导入，版本号：{self.global_version}"


@dataclass(frozen=True)
class MutationRequest:
    """在庫変動リクエスト (1 SKU 分)"""
    sku: str
    operation_kind: OperationKind
    change_amount: int
    global_version: str
    created_by: int
    updated_by: int
    version_seq_no: int = DEFAULT_VERSION_SEQ_NO
    remark: str = ""
    after_qty: Optional[int] = None

    def validate(self):
        """送信前チェック。不正な場合は ValueError。"""
        if not self.sku or not self.sku.strip():
            raise ValueError("SKU不能为空")
        if not self.operation_kind:
            raise ValueError("操作类型不能为空")
        try:
            kind = OperationKind(self.operation_kind)
        except ValueError:
            raise ValueError(f"未知的操作类型: {self.operation_kind}") from None
        if not _is_int(self.change_amount):
            raise ValueError("改变值必须为有效数字")
        if self.change_amount < 0:
            raise ValueError("改变值不能为负数")
        if self.after_qty is None:
            if kind.requires_after_qty:
                raise ValueError("库存调整必须指定操作后总数")
        elif not _is_int(self.after_qty):
            raise ValueError("操作后总数必须为有效数字")
        elif self.after_qty < 0:
            raise ValueError("操作后总数不能为负数")
        if not self.global_version or not self.global_version.strip():
            raise ValueError("全局版本号不能为空")
        if not _is_int(self.created_by):
            raise ValueError("创建人ID必须为有效数字")
        if not _is_int(self.updated_by):
            raise ValueError("更新人ID必须为有效数字")

    def to_payload(self) -> dict:
        """API リクエストボディ"""
        return {
            "operation_type": OperationKind(self.operation_kind).value,
            "changeAmount": self.change_amount,
            "after_qty": 0 if self.after_qty is None else self.after_qty,
            "remark": self.remark,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "versionSeqNo": self.version_seq_no,
            "globalVersion": self.global_version,
        }


@dataclass(frozen=True)
class MutationOutcome:
    """1 SKU 分の処理結果"""
    sku: str
    change_amount: int
    status: str
    message: Optional[str] = None    # 成功時
    error: Optional[str] = None      # 失敗時

    @property
    def ok(self) -> bool:
        return self.status == STATUS_SUCCESS


@dataclass
class BatchResult:
    """バッチ全体の結果"""
    success_list: list[MutationOutcome] = field(default_factory=list)
    fail_list: list[MutationOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.success_list) + len(self.fail_list)

    @property
    def has_failures(self) -> bool:
        return bool(self.fail_list)

    def to_dict(self) -> dict:
        return {
            "success_count": len(self.success_list),
            "fail_count": len(self.fail_list),
            "success_list": [asdict(o) for o in self.success_list],
            "fail_list": [asdict(o) for o in self.fail_list],
        }


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
