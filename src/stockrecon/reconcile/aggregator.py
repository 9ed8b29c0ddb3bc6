"""SKU ごとの数量集計"""

from typing import Iterable

from .models import ParsedRow


def aggregate(rows: Iterable[ParsedRow]) -> dict[str, int]:
    """同一 SKU の行を合算する。

    初出順を保ち、重複は既存の合計に加算する (上書きしない)。
    数量の総和は集計前後で変わらない。空入力は空の dict を返す。

    Args:
        rows: 抽出済みの明細行

    Returns:
        SKU → 合計数量
    """
    totals: dict[str, int] = {}
    for row in rows:
        totals[row.identifier] = totals.get(row.identifier, 0) + row.count
    return totals
