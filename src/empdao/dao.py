"""EmployeeDao: 社員データのストアドプロシージャ経由のアクセス."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from empdao.connection import ConnectionProvider
from empdao.exceptions import DuplicateKeyError, MappingError, PersistenceError
from empdao.mapper import DataclassMapper
from empdao.models import Department, Employee
from empdao.procedures import Procedure, ProcedureCaller

if TYPE_CHECKING:
    from empdao.config import DatabaseSettings
    from empdao.loader import SqlLoader

logger = logging.getLogger(__name__)


class EmployeeDao:
    """社員の永続化ゲートウェイ.

    各操作はストアドプロシージャを 1 回呼び出し、結果行をエンティティに変換する。
    操作ごとに接続を 1 本取得し、戻る前に必ず解放する。ドライバ例外は
    :class:`PersistenceError` に包んで送出する（再試行はしない）。

    Examples:
        >>> dao = EmployeeDao()
        >>> employee = dao.get_by_no("E8")
        >>> if employee is not None:
        ...     employee.salary = 1000000.0
        ...     dao.update(employee)

    """

    def __init__(
        self,
        provider: ConnectionProvider | None = None,
        *,
        settings: DatabaseSettings | None = None,
        loader: SqlLoader | None = None,
    ) -> None:
        """初期化.

        Args:
            provider: 接続プロバイダ。None の場合は settings から生成する
            settings: 接続設定。None の場合は環境変数から読み込む
            loader: SQLite 用プロシージャ SQL のローダー

        Raises:
            InitializationError: 接続プロバイダを生成できない場合

        """
        if provider is None:
            provider = ConnectionProvider.from_settings(settings)
        self._provider = provider
        self._caller = ProcedureCaller(self._provider.dialect, loader=loader)
        self._employee_mapper = DataclassMapper(Employee)
        self._department_mapper = DataclassMapper(Department)

    def get_all(self) -> list[Employee]:
        """全社員を取得する（uspGetAllEmployees）.

        Returns:
            ストアが返した順の社員リスト

        Raises:
            PersistenceError: DB アクセスに失敗した場合

        """
        try:
            rows = self._call(Procedure.GET_ALL_EMPLOYEES)
            return self._employee_mapper.map_rows(rows)
        except self._failures() as e:
            raise self._wrap("get_all", "Error fetching all employees.", e) from e

    def get_by_no(self, emp_no: str) -> Employee | None:
        """社員番号で社員を取得する（uspGetEmployeeByEmpNo）.

        Args:
            emp_no: 社員番号

        Returns:
            社員。該当がなければ None

        Raises:
            PersistenceError: DB アクセスに失敗した場合

        """
        try:
            rows = self._call(Procedure.GET_EMPLOYEE_BY_EMP_NO, [emp_no])
            if not rows:
                return None
            return self._employee_mapper.map_row(rows[0])
        except self._failures() as e:
            msg = f"Error fetching employee with EmpNo: {emp_no}"
            raise self._wrap("get_by_no", msg, e, key=emp_no) from e

    def save(self, employee: Employee) -> None:
        """社員を新規登録する（uspInsertEmployee）.

        Raises:
            DuplicateKeyError: 社員番号が既に存在する場合
            PersistenceError: その他の DB エラー

        """
        key = employee.employee_number
        try:
            self._call(Procedure.INSERT_EMPLOYEE, self._employee_args(employee), commit=True)
        except self._failures() as e:
            if self._provider.is_unique_violation(e):
                logger.warning("Duplicate employee number on insert: %s", key)
                msg = "An employee with this Employee No already exists."
                raise DuplicateKeyError(msg, operation="save", key=key) from e
            raise self._wrap("save", f"Error saving employee: {key}", e, key=key) from e

    def update(self, employee: Employee) -> None:
        """社員の氏名と給与を更新する（uspUpdateEmployee）.

        存在しない社員番号の場合は 0 件更新となり、エラーにはならない。

        Raises:
            PersistenceError: DB アクセスに失敗した場合

        """
        key = employee.employee_number
        try:
            self._call(Procedure.UPDATE_EMPLOYEE, self._employee_args(employee), commit=True)
        except self._failures() as e:
            raise self._wrap("update", f"Error updating employee: {key}", e, key=key) from e

    def delete_by_no(self, emp_no: str) -> None:
        """社員番号で社員を削除する（uspDeleteEmployee）.

        Raises:
            PersistenceError: DB アクセスに失敗した場合

        """
        try:
            self._call(Procedure.DELETE_EMPLOYEE, [emp_no], commit=True)
        except self._failures() as e:
            msg = f"Error deleting employee with Employee No: {emp_no}"
            raise self._wrap("delete_by_no", msg, e, key=emp_no) from e

    def get_all_with_departments(self) -> list[Employee]:
        """全社員を所属部署付きで取得する（uspGetAllEmployeesWithDepartments）.

        結果セットは (社員, 部署) の組ごとに 1 行。社員番号ごとに最初の行で
        社員を生成し、各行の部署をその社員の ``departments`` に追加する。
        社員の並びは最初に現れた順。部署を持たない社員は結果に現れない。

        Returns:
            ``departments`` が埋められた社員リスト

        Raises:
            PersistenceError: DB アクセスに失敗した場合

        """
        try:
            rows = self._call(Procedure.GET_ALL_EMPLOYEES_WITH_DEPARTMENTS)
            employees: dict[str, Employee] = {}
            for row in rows:
                employee = self._employee_mapper.map_row(row)
                employee = employees.setdefault(employee.employee_number, employee)
                employee.departments.append(self._department_mapper.map_row(row))
            return list(employees.values())
        except self._failures() as e:
            msg = "Error fetching employees and their departments."
            raise self._wrap("get_all_with_departments", msg, e) from e

    def _call(
        self,
        procedure: Procedure,
        args: Sequence[Any] = (),
        *,
        commit: bool = False,
    ) -> list[dict[str, Any]]:
        with self._provider.acquire() as connection:
            rows = self._caller.call(connection, procedure, args)
            if commit:
                connection.commit()
            return rows

    def _failures(self) -> tuple[type[BaseException], ...]:
        return (*self._provider.error_types, MappingError)

    @staticmethod
    def _employee_args(employee: Employee) -> list[Any]:
        return [employee.employee_number, employee.name, float(employee.salary)]

    @staticmethod
    def _wrap(
        operation: str,
        message: str,
        cause: BaseException,
        *,
        key: str | None = None,
    ) -> PersistenceError:
        logger.error("%s (%s: %s)", message, type(cause).__name__, cause)
        return PersistenceError(message, operation=operation, key=key)
