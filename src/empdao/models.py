"""Employee / Department エンティティ."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated

from empdao.mapper.column import Column


@dataclass
class Department:
    """部署.

    社員一覧の結合取得でのみ生成される読み取り専用の集約結果。
    """

    name: Annotated[str, Column("DeptName")]
    budget: Annotated[float, Column("DeptBudget")]

    def __post_init__(self) -> None:
        self.budget = float(self.budget)


@dataclass
class Employee:
    """社員.

    ``employee_number`` が業務キー。``departments`` は
    :meth:`EmployeeDao.get_all_with_departments` でのみ埋められる。
    """

    employee_number: Annotated[str, Column("EmpNo")]
    name: Annotated[str, Column("EmpName")]
    salary: Annotated[float, Column("EmpSalary")]
    departments: list[Department] = field(default_factory=list)

    def __post_init__(self) -> None:
        # ドライバによっては Decimal で返る
        self.salary = float(self.salary)
