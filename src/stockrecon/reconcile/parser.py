"""文書テキストから版本号と在庫明細行を抽出する"""

import logging
import re
from typing import Optional

from .errors import MissingVersionError
from .models import ExtractionResult, ParsedRow

logger = logging.getLogger(__name__)

# 版本号パターン: "出库单 版本号：1.0.0"
# ラベルの後に全角/半角コロン、続く X.Y.Z を取る (1.0.0.1 のような4段は不一致)
VERSION_PATTERN = re.compile(
    r"(?:版本号|版本|[Vv]ersion)\s*[:：]\s*(\d+\.\d+\.\d+)(?!\.?\d)"
)

# 明細行パターン: "| A72-L-BLACK | 2 | 出库 |"
ROW_PATTERN = re.compile(r"^\s*\|([^|]*)\|([^|]*)\|([^|]*)\|\s*$")

INT_PATTERN = re.compile(r"^[+-]?\d+$")


def extract(text: str) -> ExtractionResult:
    """テキストから全体バージョンと明細行を抽出する。

    版本号が無い場合は行を一切処理せずに失敗する。
    識別子が空、または数量が正の整数でない行は黙って捨てる
    (理由は DEBUG ログに残す)。重複 SKU はここでは統合しない。

    Args:
        text: 文書から抽出済みのテキスト

    Returns:
        ExtractionResult (rows は出現順)

    Raises:
        MissingVersionError: 版本号が見つからない
    """
    if not isinstance(text, str):
        raise TypeError(f"text must be str, not {type(text).__name__}")

    version = find_version(text)
    if version is None:
        raise MissingVersionError()

    rows = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        m = ROW_PATTERN.match(line)
        if not m:
            continue

        identifier, count_text, kind = (g.strip() for g in m.groups())

        if not identifier:
            logger.debug("行 %d を破棄: SKU が空 (%r)", line_no, line)
            continue

        count = _to_int(count_text)
        if count is None:
            logger.debug("行 %d を破棄: 数量が整数ではない (%r)", line_no, count_text)
            continue
        if count <= 0:
            logger.debug("行 %d を破棄: 数量が正ではない (%d)", line_no, count)
            continue

        rows.append(ParsedRow(identifier=identifier, count=count, kind=kind, line_no=line_no))

    logger.info("版本号 %s, 有効行 %d 件を抽出", version, len(rows))
    return ExtractionResult(global_version=version, rows=rows)


def find_version(text: str) -> Optional[str]:
    """最初の版本号 (X.Y.Z) を返す。無ければ None。"""
    m = VERSION_PATTERN.search(text)
    return m.group(1) if m else None


def _to_int(value: str) -> Optional[int]:
    """整数表記のみ受け付ける ("3.0" や "3個" は None)"""
    if not INT_PATTERN.match(value):
        return None
    return int(value)
