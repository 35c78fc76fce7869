"""ConnectionProvider: 操作ごとの DB 接続の払い出し."""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from types import ModuleType
from typing import Any

from pydantic import ValidationError

from empdao.config import DatabaseSettings
from empdao.dialect import Dialect
from empdao.exceptions import InitializationError

logger = logging.getLogger(__name__)


class ConnectionProvider:
    """DB 接続を操作単位で払い出す.

    ``acquire()`` は呼び出しごとに新しい接続を開き、ブロックを抜けるときに
    成功・失敗を問わず必ず閉じる。プールは持たない。

    Examples:
        >>> provider = ConnectionProvider.from_settings(DatabaseSettings())
        >>> with provider.acquire() as conn:
        ...     cursor = conn.cursor()

        任意の接続関数を使う（テスト用）:

        >>> provider = ConnectionProvider(
        ...     lambda: sqlite3.connect("emp.db"),
        ...     dialect=Dialect.SQLITE,
        ...     error_types=(sqlite3.Error,),
        ... )

    """

    def __init__(
        self,
        connect: Callable[[], Any],
        *,
        dialect: Dialect,
        error_types: tuple[type[BaseException], ...],
    ) -> None:
        """初期化.

        Args:
            connect: 新しい DB-API 接続を返す関数
            dialect: RDBMS 方言
            error_types: ドライバ由来として扱う例外クラス

        """
        self._connect = connect
        self._dialect = dialect
        self._error_types = error_types

    @classmethod
    def from_settings(cls, settings: DatabaseSettings | None = None) -> ConnectionProvider:
        """設定からプロバイダを生成する.

        Args:
            settings: 接続設定。None の場合は環境変数から読み込む

        Raises:
            InitializationError: 設定が不正、またはドライバを読み込めない場合

        """
        try:
            settings = settings if settings is not None else DatabaseSettings()
            dialect = settings.resolved_dialect
        except (ValidationError, ValueError) as e:
            msg = f"Invalid database settings: {e}"
            raise InitializationError(msg) from e

        try:
            driver = importlib.import_module(dialect.driver)
        except ImportError as e:
            msg = (
                f"Database driver {dialect.driver!r} for {dialect.dialect_id} is not installed"
            )
            raise InitializationError(msg) from e

        logger.info(
            "Configured %s connection to %s/%s",
            dialect.dialect_id,
            settings.host,
            settings.database,
        )
        return cls(
            _connect_function(driver, dialect, settings),
            dialect=dialect,
            error_types=(driver.Error,),
        )

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def error_types(self) -> tuple[type[BaseException], ...]:
        """ドライバ例外のクラス（PEP 249 ``module.Error``）."""
        return self._error_types

    @contextmanager
    def acquire(self) -> Iterator[Any]:
        """接続を開き、ブロック終了時に閉じる."""
        connection = self._connect()
        try:
            yield connection
        finally:
            connection.close()

    def is_unique_violation(self, exc: BaseException) -> bool:
        """例外が一意制約違反かを判定する."""
        return isinstance(exc, self._error_types) and self._dialect.is_unique_violation(exc)


def _connect_function(
    driver: ModuleType,
    dialect: Dialect,
    settings: DatabaseSettings,
) -> Callable[[], Any]:
    """方言ごとのドライバ接続関数を組み立てる."""
    match dialect:
        case Dialect.SQLSERVER:
            return lambda: driver.connect(
                settings.odbc_connection_string, timeout=settings.connect_timeout
            )
        case Dialect.POSTGRESQL:
            return lambda: driver.connect(
                host=settings.host,
                port=settings.resolved_port,
                dbname=settings.database,
                user=settings.user,
                password=settings.password,
                connect_timeout=settings.connect_timeout,
            )
        case Dialect.MYSQL:
            return lambda: driver.connect(
                host=settings.host,
                port=settings.resolved_port,
                database=settings.database,
                user=settings.user,
                password=settings.password,
                connect_timeout=settings.connect_timeout,
            )
        case Dialect.SQLITE:

            def connect_sqlite() -> Any:
                conn = driver.connect(settings.database, timeout=settings.connect_timeout)
                try:
                    conn.execute("PRAGMA foreign_keys = ON")
                except Exception:
                    conn.close()
                    raise
                return conn

            return connect_sqlite
        case _:
            msg = f"Unsupported dialect: {dialect}"
            raise InitializationError(msg)
