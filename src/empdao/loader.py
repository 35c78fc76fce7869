"""SqlLoader: SQL ファイルの読み込み."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from empdao.exceptions import SqlFileNotFoundError

if TYPE_CHECKING:
    from empdao.dialect import Dialect

BUNDLED_SQL_DIR = Path(__file__).parent / "sql"


class SqlLoader:
    """SQL ファイルの読み込み.

    既定では同梱の ``empdao/sql`` ディレクトリを参照する。
    """

    def __init__(self, base_path: str | Path = BUNDLED_SQL_DIR) -> None:
        self.base_path = Path(base_path)

    def load(self, path: str, *, dialect: Dialect | None = None) -> str:
        """SQL ファイルを読み込む.

        dialect が指定された場合、まず RDBMS 固有ファイル（例: ``uspGetAllEmployees.sql-sqlite``）を
        探し、存在しなければ汎用ファイル（例: ``uspGetAllEmployees.sql``）にフォールバックする。

        Args:
            path: base_path からの相対パス
            dialect: RDBMS 方言。指定時は方言固有ファイルを優先

        Returns:
            SQL 文字列

        Raises:
            SqlFileNotFoundError: ファイルが存在しない場合

        """
        base_path = self.base_path.resolve()

        if dialect is not None:
            dialect_file_path = (base_path / f"{path}-{dialect.dialect_id}").resolve()
            if self._is_valid_path(base_path, dialect_file_path):
                return dialect_file_path.read_text(encoding="utf-8")

        file_path = (base_path / path).resolve()
        if not self._is_valid_path(base_path, file_path):
            msg = f"SQL file not found: {file_path}"
            raise SqlFileNotFoundError(msg)
        return file_path.read_text(encoding="utf-8")

    @staticmethod
    def _is_valid_path(base_path: Path, file_path: Path) -> bool:
        """ファイルパスが有効か（base_path 配下に存在するか）を判定する."""
        if file_path != base_path and base_path not in file_path.parents:
            return False
        return file_path.is_file()
