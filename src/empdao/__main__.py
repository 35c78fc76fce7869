#!/usr/bin/env python3
"""コンソールエントリポイント: 社員 E8 を更新し、保存結果を表示する.

Usage:
    EMPDAO_DB_DIALECT=sqlite EMPDAO_DB_DATABASE=employees.db python -m empdao
"""

from __future__ import annotations

import logging

from empdao.config import DatabaseSettings
from empdao.dao import EmployeeDao
from empdao.exceptions import EmpDaoError

logger = logging.getLogger("empdao")

EMPLOYEE_NUMBER = "E8"
NEW_NAME = "Guy"
NEW_SALARY = 1000000.0


def main() -> int:
    """E8 更新シナリオを実行し、終了コードを返す."""
    try:
        settings = DatabaseSettings()
    except ValueError:
        logging.basicConfig(level=logging.INFO)
        logger.exception("Invalid database settings")
        return 1
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        dao = EmployeeDao(settings=settings)

        employee = dao.get_by_no(EMPLOYEE_NUMBER)
        if employee is None:
            logger.error("Employee %s not found", EMPLOYEE_NUMBER)
            return 1

        employee.name = NEW_NAME
        employee.salary = NEW_SALARY
        dao.update(employee)

        updated = dao.get_by_no(EMPLOYEE_NUMBER)
    except EmpDaoError:
        logger.exception("Employee update failed")
        return 1

    if updated is None:
        logger.error("Employee %s disappeared after update", EMPLOYEE_NUMBER)
        return 1

    print(f"Employee number: {updated.employee_number}")
    print(f"Name: {updated.name}")
    print(f"Salary: {updated.salary}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
