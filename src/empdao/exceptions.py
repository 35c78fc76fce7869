"""empdao 例外クラス."""

from __future__ import annotations


class EmpDaoError(Exception):
    """empdao の基底例外."""


class InitializationError(EmpDaoError):
    """接続設定・ドライバ読み込みの失敗."""


class MappingError(EmpDaoError):
    """マッピングエラー."""


class SqlFileNotFoundError(EmpDaoError):
    """SQL ファイルが見つからない."""


class PersistenceError(EmpDaoError):
    """ストアドプロシージャ呼び出しの失敗.

    Attributes:
        operation: 失敗した操作名（例: ``"save"``）
        key: 対象の社員番号。キーを持たない操作では None

    """

    def __init__(self, message: str, *, operation: str, key: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.key = key


class DuplicateKeyError(PersistenceError):
    """社員番号の一意制約違反."""
