"""EmployeeDao のテスト: 偽の DB-API 接続によるエラー変換と資源解放の検証."""

from __future__ import annotations

from typing import Any

import pytest

from empdao import (
    ConnectionProvider,
    Dialect,
    DuplicateKeyError,
    Employee,
    EmployeeDao,
    InitializationError,
    PersistenceError,
)


class DriverError(Exception):
    """テスト用ドライバ例外（PEP 249 の Error 相当）."""


class FakeCursor:
    def __init__(self, conn: FakeConnection) -> None:
        self._conn = conn
        self.description: list[tuple[Any, ...]] | None = None

    def execute(self, sql: str, params: Any) -> None:
        self._conn.executed.append((sql, params))
        if self._conn.error is not None:
            raise self._conn.error
        if self._conn.columns:
            self.description = [(c,) for c in self._conn.columns]

    def fetchall(self) -> list[tuple[Any, ...]]:
        return list(self._conn.rows)

    def close(self) -> None:
        pass


class FakeConnection:
    def __init__(
        self,
        *,
        columns: list[str] | None = None,
        rows: list[tuple[Any, ...]] | None = None,
        error: BaseException | None = None,
    ) -> None:
        self.columns = columns
        self.rows = rows or []
        self.error = error
        self.executed: list[tuple[str, Any]] = []
        self.commits = 0
        self.closed = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def commit(self) -> None:
        self.commits += 1

    def close(self) -> None:
        self.closed = True


def make_dao(conn: FakeConnection) -> EmployeeDao:
    provider = ConnectionProvider(
        lambda: conn, dialect=Dialect.SQLSERVER, error_types=(DriverError,)
    )
    return EmployeeDao(provider)


EMP_COLUMNS = ["EmpNo", "EmpName", "EmpSalary"]
JOIN_COLUMNS = ["EmpNo", "EmpName", "EmpSalary", "DeptName", "DeptBudget"]


class TestReads:
    """読み取り操作."""

    def test_get_all_preserves_store_order(self) -> None:
        conn = FakeConnection(
            columns=EMP_COLUMNS, rows=[("E2", "Bob", 2.0), ("E1", "Alice", 1.0)]
        )
        employees = make_dao(conn).get_all()
        assert [e.employee_number for e in employees] == ["E2", "E1"]
        assert conn.executed == [("{CALL uspGetAllEmployees}", ())]
        assert conn.closed

    def test_get_all_empty(self) -> None:
        conn = FakeConnection(columns=EMP_COLUMNS, rows=[])
        assert make_dao(conn).get_all() == []

    def test_get_by_no_found(self) -> None:
        conn = FakeConnection(columns=EMP_COLUMNS, rows=[("E8", "Eve", 30000.0)])
        assert make_dao(conn).get_by_no("E8") == Employee("E8", "Eve", 30000.0)
        assert conn.executed == [("{CALL uspGetEmployeeByEmpNo(?)}", ("E8",))]

    def test_get_by_no_absent_returns_none(self) -> None:
        conn = FakeConnection(columns=EMP_COLUMNS, rows=[])
        assert make_dao(conn).get_by_no("E404") is None
        assert conn.closed

    def test_reads_do_not_commit(self) -> None:
        conn = FakeConnection(columns=EMP_COLUMNS, rows=[])
        make_dao(conn).get_all()
        assert conn.commits == 0

    def test_lowercase_columns(self) -> None:
        """小文字に畳まれた列名（PostgreSQL 等）も対応付けられる."""
        conn = FakeConnection(
            columns=["empno", "empname", "empsalary"], rows=[("E1", "Alice", 1.0)]
        )
        assert make_dao(conn).get_all() == [Employee("E1", "Alice", 1.0)]


class TestWrites:
    """書き込み操作はプロシージャ呼び出し後にコミットする."""

    def test_save_binds_number_name_salary(self) -> None:
        conn = FakeConnection()
        make_dao(conn).save(Employee("E100", "Ann", 50000))
        assert conn.executed == [("{CALL uspInsertEmployee(?, ?, ?)}", ("E100", "Ann", 50000.0))]
        assert conn.commits == 1
        assert conn.closed

    def test_update(self) -> None:
        conn = FakeConnection()
        make_dao(conn).update(Employee("E100", "Ann", 55000.0))
        assert conn.executed == [("{CALL uspUpdateEmployee(?, ?, ?)}", ("E100", "Ann", 55000.0))]
        assert conn.commits == 1

    def test_delete_by_no(self) -> None:
        conn = FakeConnection()
        make_dao(conn).delete_by_no("E100")
        assert conn.executed == [("{CALL uspDeleteEmployee(?)}", ("E100",))]
        assert conn.commits == 1


class TestJoinedFetch:
    """get_all_with_departments の集約."""

    def test_groups_rows_by_employee_number(self) -> None:
        conn = FakeConnection(
            columns=JOIN_COLUMNS,
            rows=[
                ("E1", "Alice", 1.0, "Sales", 100.0),
                ("E2", "Bob", 2.0, "Development", 250.0),
                ("E1", "Alice", 1.0, "Development", 250.0),
                ("E3", "Carol", 3.0, "Support", 80.0),
            ],
        )
        employees = make_dao(conn).get_all_with_departments()
        assert [e.employee_number for e in employees] == ["E1", "E2", "E3"]
        assert [d.name for d in employees[0].departments] == ["Sales", "Development"]
        assert [d.budget for d in employees[1].departments] == [250.0]
        assert len(employees[2].departments) == 1

    def test_empty_result(self) -> None:
        conn = FakeConnection(columns=JOIN_COLUMNS, rows=[])
        assert make_dao(conn).get_all_with_departments() == []


class TestErrorWrapping:
    """ドライバ例外は PersistenceError に包まれる."""

    @pytest.mark.parametrize(
        ("call", "operation", "key", "message"),
        [
            (lambda dao: dao.get_all(), "get_all", None, "Error fetching all employees."),
            (
                lambda dao: dao.get_by_no("E1"),
                "get_by_no",
                "E1",
                "Error fetching employee with EmpNo: E1",
            ),
            (
                lambda dao: dao.save(Employee("E1", "A", 1.0)),
                "save",
                "E1",
                "Error saving employee: E1",
            ),
            (
                lambda dao: dao.update(Employee("E1", "A", 1.0)),
                "update",
                "E1",
                "Error updating employee: E1",
            ),
            (
                lambda dao: dao.delete_by_no("E1"),
                "delete_by_no",
                "E1",
                "Error deleting employee with Employee No: E1",
            ),
            (
                lambda dao: dao.get_all_with_departments(),
                "get_all_with_departments",
                None,
                "Error fetching employees and their departments.",
            ),
        ],
    )
    def test_wrapped(self, call: Any, operation: str, key: str | None, message: str) -> None:
        cause = DriverError("[08S01] Communication link failure")
        conn = FakeConnection(error=cause)
        with pytest.raises(PersistenceError) as excinfo:
            call(make_dao(conn))
        err = excinfo.value
        assert type(err) is PersistenceError
        assert str(err) == message
        assert err.operation == operation
        assert err.key == key
        assert err.__cause__ is cause
        assert conn.closed
        assert conn.commits == 0

    def test_connect_failure_wrapped(self) -> None:
        cause = DriverError("login failed")

        def connect() -> FakeConnection:
            raise cause

        provider = ConnectionProvider(
            connect, dialect=Dialect.SQLSERVER, error_types=(DriverError,)
        )
        with pytest.raises(PersistenceError) as excinfo:
            EmployeeDao(provider).get_all()
        assert excinfo.value.__cause__ is cause

    def test_mapping_failure_wrapped(self) -> None:
        conn = FakeConnection(columns=["EmpNo", "EmpName"], rows=[("E1", "Alice")])
        with pytest.raises(PersistenceError, match="Error fetching all employees."):
            make_dao(conn).get_all()

    def test_non_driver_error_propagates(self) -> None:
        conn = FakeConnection(error=RuntimeError("bug"))
        with pytest.raises(RuntimeError):
            make_dao(conn).get_all()
        assert conn.closed


class TestDuplicateKey:
    """挿入時の一意制約違反の分類."""

    def test_unique_violation_is_duplicate_key(self) -> None:
        cause = DriverError(
            "23000",
            "[SQL Server]Violation of PRIMARY KEY constraint 'PK_Employee'. (2627)",
        )
        conn = FakeConnection(error=cause)
        with pytest.raises(DuplicateKeyError) as excinfo:
            make_dao(conn).save(Employee("E1", "Alice", 1.0))
        assert str(excinfo.value) == "An employee with this Employee No already exists."
        assert excinfo.value.key == "E1"
        assert excinfo.value.__cause__ is cause

    def test_other_insert_failure_is_generic(self) -> None:
        conn = FakeConnection(error=DriverError("23000", "[SQL Server]FK violation (547)"))
        with pytest.raises(PersistenceError) as excinfo:
            make_dao(conn).save(Employee("E1", "Alice", 1.0))
        assert not isinstance(excinfo.value, DuplicateKeyError)

    def test_update_unique_violation_not_classified(self) -> None:
        """一意制約違反の分類は挿入のみ."""
        conn = FakeConnection(error=DriverError("23000", "duplicate (2627)"))
        with pytest.raises(PersistenceError) as excinfo:
            make_dao(conn).update(Employee("E1", "Alice", 1.0))
        assert not isinstance(excinfo.value, DuplicateKeyError)


class TestConstruction:
    """EmployeeDao の生成."""

    def test_invalid_settings_raise_initialization_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("EMPDAO_DB_DIALECT", "db2")
        with pytest.raises(InitializationError):
            EmployeeDao()
