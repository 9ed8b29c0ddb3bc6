"""照合処理のバッチ単位エラー"""


class ReconcileError(Exception):
    """バッチ全体を中断するエラーの基底クラス"""


class MissingVersionError(ReconcileError):
    """テキスト中に版本号が見つからない"""
    def __init__(self, message: str = "版本号 (X.Y.Z) が見つかりません"):
        super().__init__(message)


class EmptyBatchError(ReconcileError):
    """照合対象の SKU が1件もない"""
    def __init__(self, message: str = "処理対象の行がありません"):
        super().__init__(message)
