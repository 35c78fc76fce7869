"""Dialect enum: RDBMS ごとのストアドプロシージャ呼び出し方言定義."""

from __future__ import annotations

from enum import Enum

# SQL Server のネイティブエラー番号: 2627 = UNIQUE/PRIMARY KEY 制約違反, 2601 = 一意インデックス違反
SQLSERVER_UNIQUE_ERRORS = (2627, 2601)
POSTGRESQL_UNIQUE_SQLSTATE = "23505"
MYSQL_DUP_ENTRY = 1062
SQLITE_UNIQUE_ERRORNAMES = frozenset({"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"})


class Dialect(Enum):
    """RDBMS ごとの方言.

    POSTGRESQL と MYSQL は同じプレースホルダ ``%s`` を使用するが、
    プロシージャの呼び出し方が異なるため別メンバーとして定義する。
    SQLITE はストアドプロシージャを持たないため、同名の SQL ファイルで代替する。
    """

    SQLSERVER = ("sqlserver", "?", "pyodbc")
    POSTGRESQL = ("postgresql", "%s", "psycopg")
    MYSQL = ("mysql", "%s", "pymysql")
    SQLITE = ("sqlite", "?", "sqlite3")

    def __init__(self, dialect_id: str, placeholder_fmt: str, driver: str) -> None:
        self._dialect_id = dialect_id
        self._placeholder_fmt = placeholder_fmt
        self._driver = driver

    @classmethod
    def from_id(cls, dialect_id: str) -> Dialect:
        """方言 ID（例: ``"postgresql"``）から Dialect を返す.

        Raises:
            ValueError: 未知の方言 ID の場合

        """
        normalized = dialect_id.strip().lower()
        for dialect in cls:
            if dialect._dialect_id == normalized:
                return dialect
        known = ", ".join(d._dialect_id for d in cls)
        msg = f"Unknown dialect: {dialect_id!r} (expected one of: {known})"
        raise ValueError(msg)

    @property
    def dialect_id(self) -> str:
        return self._dialect_id

    @property
    def driver(self) -> str:
        """PEP 249 ドライバのモジュール名を返す."""
        return self._driver

    @property
    def default_port(self) -> int | None:
        match self:
            case Dialect.SQLSERVER:
                return 1433
            case Dialect.POSTGRESQL:
                return 5432
            case Dialect.MYSQL:
                return 3306
            case _:
                return None

    @property
    def uses_callproc(self) -> bool:
        """``cursor.callproc()`` でプロシージャを呼ぶか.

        pymysql は callproc の結果セットをそのまま fetch できる。
        """
        return self is Dialect.MYSQL

    @property
    def emulates_procedures(self) -> bool:
        """ストアドプロシージャを SQL ファイルで代替するか."""
        return self is Dialect.SQLITE

    def call_statement(self, procedure_name: str, arg_count: int, *, returns_rows: bool) -> str:
        """プロシージャ呼び出し文を組み立てる.

        Args:
            procedure_name: プロシージャ名
            arg_count: 引数の数
            returns_rows: 結果セットを返すプロシージャか

        Returns:
            パラメータ付き SQL 文

        Raises:
            ValueError: 呼び出し文を持たない方言の場合

        """
        args = ", ".join([self._placeholder_fmt] * arg_count)
        match self:
            case Dialect.SQLSERVER:
                if arg_count == 0:
                    return f"{{CALL {procedure_name}}}"
                return f"{{CALL {procedure_name}({args})}}"
            case Dialect.POSTGRESQL:
                # 結果セットを返すものは集合返却関数として定義されている前提
                if returns_rows:
                    return f"SELECT * FROM {procedure_name}({args})"
                return f"CALL {procedure_name}({args})"
            case Dialect.MYSQL:
                return f"CALL {procedure_name}({args})"
            case _:
                msg = f"{self.name} has no stored procedure call syntax"
                raise ValueError(msg)

    def is_unique_violation(self, exc: BaseException) -> bool:
        """ドライバ例外が一意制約違反を表すかを判定する.

        Args:
            exc: ドライバが送出した例外

        Returns:
            一意制約違反なら True

        """
        match self:
            case Dialect.SQLSERVER:
                # pyodbc は "[23000] [...] Violation of PRIMARY KEY constraint ... (2627)" 形式
                text = " ".join(str(arg) for arg in exc.args)
                return any(f"({code})" in text for code in SQLSERVER_UNIQUE_ERRORS)
            case Dialect.POSTGRESQL:
                return getattr(exc, "sqlstate", None) == POSTGRESQL_UNIQUE_SQLSTATE
            case Dialect.MYSQL:
                return bool(exc.args) and exc.args[0] == MYSQL_DUP_ENTRY
            case Dialect.SQLITE:
                if getattr(exc, "sqlite_errorname", None) in SQLITE_UNIQUE_ERRORNAMES:
                    return True
                return "UNIQUE constraint failed" in str(exc)
            case _:
                return False
