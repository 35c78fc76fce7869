"""Procedure: ストアドプロシージャの定義と呼び出し."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum
from typing import Any

from empdao.dialect import Dialect
from empdao.loader import SqlLoader

logger = logging.getLogger(__name__)


class Procedure(Enum):
    """リモートのストアドプロシージャ契約.

    値は (プロシージャ名, 引数の数, 結果セットを返すか)。引数は位置指定で順序に意味がある。
    """

    GET_ALL_EMPLOYEES = ("uspGetAllEmployees", 0, True)
    GET_EMPLOYEE_BY_EMP_NO = ("uspGetEmployeeByEmpNo", 1, True)
    INSERT_EMPLOYEE = ("uspInsertEmployee", 3, False)
    UPDATE_EMPLOYEE = ("uspUpdateEmployee", 3, False)
    DELETE_EMPLOYEE = ("uspDeleteEmployee", 1, False)
    GET_ALL_EMPLOYEES_WITH_DEPARTMENTS = ("uspGetAllEmployeesWithDepartments", 0, True)

    def __init__(self, procedure_name: str, arg_count: int, returns_rows: bool) -> None:
        self.procedure_name = procedure_name
        self.arg_count = arg_count
        self.returns_rows = returns_rows


class ProcedureCaller:
    """DB-API 2.0 接続上でストアドプロシージャを実行する.

    Examples:
        >>> caller = ProcedureCaller(Dialect.SQLSERVER)
        >>> rows = caller.call(conn, Procedure.GET_EMPLOYEE_BY_EMP_NO, ["E8"])

    """

    def __init__(self, dialect: Dialect, *, loader: SqlLoader | None = None) -> None:
        self._dialect = dialect
        self._loader = loader or SqlLoader()

    def call(
        self,
        connection: Any,
        procedure: Procedure,
        args: Sequence[Any] = (),
    ) -> list[dict[str, Any]]:
        """プロシージャを実行し、結果行を辞書のリストで返す.

        Args:
            connection: DB 接続オブジェクト（PEP 249 DB-API 2.0 準拠）
            procedure: 呼び出すプロシージャ
            args: 位置引数

        Returns:
            カラム名をキーとする辞書のリスト。結果セットがなければ空リスト

        Raises:
            ValueError: 引数の数がプロシージャ定義と一致しない場合

        """
        if len(args) != procedure.arg_count:
            msg = (
                f"{procedure.procedure_name} expects {procedure.arg_count} "
                f"argument(s), got {len(args)}"
            )
            raise ValueError(msg)

        params = tuple(args)
        cursor = connection.cursor()
        try:
            if self._dialect.uses_callproc:
                logger.debug("callproc %s %r", procedure.procedure_name, params)
                cursor.callproc(procedure.procedure_name, params)
            else:
                sql = self._statement(procedure)
                logger.debug("execute %s %r", sql.strip(), params)
                cursor.execute(sql, params)
            if cursor.description is None:
                return []
            columns = [desc[0] for desc in cursor.description]
            return [dict(zip(columns, row)) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def _statement(self, procedure: Procedure) -> str:
        if self._dialect.emulates_procedures:
            return self._loader.load(f"{procedure.procedure_name}.sql", dialect=self._dialect)
        return self._dialect.call_statement(
            procedure.procedure_name,
            procedure.arg_count,
            returns_rows=procedure.returns_rows,
        )
