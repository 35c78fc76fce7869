"""pytest 共通設定: SQLite ファイル DB によるテスト基盤."""

from __future__ import annotations

import os
import sqlite3
from pathlib import Path

import pytest

from empdao import DatabaseSettings, Dialect, EmployeeDao, SqlLoader

EMPLOYEES = [
    ("E1", "Alice", 50000.0),
    ("E2", "Bob", 42000.0),
    ("E8", "Eve", 30000.0),
    ("E9", "Frank", 10000.0),
]
DEPARTMENTS = [
    ("D1", "Sales", 100000.0),
    ("D2", "Development", 250000.0),
    ("D3", "Support", 80000.0),
]
# E9 は部署に所属しない
MEMBERSHIPS = [
    ("E1", "D1"),
    ("E1", "D2"),
    ("E2", "D2"),
    ("E8", "D3"),
]


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """EMPDAO_DB_* 環境変数とカレントの .env の影響を排除する."""
    for name in list(os.environ):
        if name.upper().startswith("EMPDAO_DB_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def sqlite_path(tmp_path: Path) -> Path:
    """同梱スキーマでテスト用 SQLite ファイル DB を作成し、テストデータを投入する."""
    path = tmp_path / "employees.db"
    conn = sqlite3.connect(path)
    try:
        conn.executescript(SqlLoader().load("schema.sql", dialect=Dialect.SQLITE))
        conn.executemany(
            "INSERT INTO Employee (EmpNo, EmpName, EmpSalary) VALUES (?, ?, ?)", EMPLOYEES
        )
        conn.executemany(
            "INSERT INTO Department (DeptNo, DeptName, DeptBudget) VALUES (?, ?, ?)", DEPARTMENTS
        )
        conn.executemany(
            "INSERT INTO EmployeeDepartment (EmpNo, DeptNo) VALUES (?, ?)", MEMBERSHIPS
        )
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def sqlite_settings(sqlite_path: Path) -> DatabaseSettings:
    """SQLite 用の接続設定."""
    return DatabaseSettings(dialect="sqlite", database=str(sqlite_path))


@pytest.fixture
def dao(sqlite_settings: DatabaseSettings) -> EmployeeDao:
    """SQLite に接続する EmployeeDao."""
    return EmployeeDao(settings=sqlite_settings)
