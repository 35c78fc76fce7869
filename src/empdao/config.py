"""DatabaseSettings: 環境変数・.env からの接続設定."""

from __future__ import annotations

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from empdao.dialect import Dialect


class DatabaseSettings(BaseSettings):
    """ストアドプロシージャ側 DB への接続設定.

    環境変数（接頭辞 ``EMPDAO_DB_``）または ``.env`` ファイルから読み込む。
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMPDAO_DB_",
        case_sensitive=False,
        extra="ignore",
    )

    dialect: str = Field(default="sqlserver", description="sqlserver, postgresql, mysql or sqlite")
    host: str = Field(default="localhost", description="Database host")
    port: int | None = Field(default=None, description="Database port (dialect default if unset)")
    database: str = Field(default="employees", description="Database name, or file path for sqlite")
    user: str = Field(default="sa", description="Database user")
    password: str = Field(default="", description="Database password")

    odbc_driver: str = Field(
        default="ODBC Driver 18 for SQL Server",
        description="ODBC driver name used for SQL Server",
    )
    trust_server_certificate: bool = Field(
        default=True,
        description="Skip TLS certificate validation for SQL Server",
    )
    connect_timeout: int = Field(default=10, ge=0, description="Connection timeout in seconds")

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("dialect")
    @classmethod
    def _known_dialect(cls, value: str) -> str:
        return Dialect.from_id(value).dialect_id

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {value!r}"
            raise ValueError(msg)
        return normalized

    @property
    def resolved_dialect(self) -> Dialect:
        return Dialect.from_id(self.dialect)

    @property
    def resolved_port(self) -> int | None:
        """ポート番号。未設定なら方言の既定ポート."""
        if self.port is not None:
            return self.port
        return self.resolved_dialect.default_port

    @property
    def odbc_connection_string(self) -> str:
        """SQL Server 用の ODBC 接続文字列（pyodbc 形式）."""
        parts = [
            f"DRIVER={{{self.odbc_driver}}}",
            f"SERVER={self.host},{self.resolved_port}",
            f"DATABASE={self.database}",
            f"UID={self.user}",
            f"PWD={self.password}",
        ]
        if self.trust_server_certificate:
            parts.append("TrustServerCertificate=yes")
        return ";".join(parts)
