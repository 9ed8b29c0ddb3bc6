"""SKU 文字列の分解"""

import logging

from .models import IdentifierRecord

logger = logging.getLogger(__name__)


def tokenize(identifier: str, separator: str = "-") -> IdentifierRecord:
    """SKU を name / size / color に分解する。

    セグメント数で決まる固定ルール:
    - 1段: name
    - 2段: name, color
    - 3段: name, size, color
    - 4段以上: 末尾2段を size, color とし、残りを separator で連結して name

    例: "A72-L-BLACK" → name="A72", size="L", color="Black"

    Args:
        identifier: SKU 文字列
        separator: 区切り文字 (デフォルト: "-")

    Returns:
        IdentifierRecord。不正な入力の場合は全項目が空。
    """
    if not identifier or not isinstance(identifier, str):
        logger.warning("無効な SKU 形式: %r", identifier)
        return IdentifierRecord()

    if not separator:
        parts = [identifier.strip()] if identifier.strip() else []
    else:
        parts = [p.strip() for p in identifier.split(separator) if p.strip()]

    if len(parts) == 1:
        return IdentifierRecord(name=parts[0])
    if len(parts) == 2:
        return IdentifierRecord(name=parts[0], color=_normalize_color(parts[1]))
    if len(parts) == 3:
        return IdentifierRecord(
            name=parts[0],
            size=parts[1],
            color=_normalize_color(parts[2]),
        )
    if len(parts) > 3:
        return IdentifierRecord(
            name=separator.join(parts[:-2]),
            size=parts[-2],
            color=_normalize_color(parts[-1]),
        )

    # 区切り文字と空白のみ
    logger.warning("無効な SKU 形式: %r", identifier)
    return IdentifierRecord()


def _normalize_color(color: str) -> str:
    """BLACK / black → Black"""
    color = color.strip().lower()
    return color[:1].upper() + color[1:]
