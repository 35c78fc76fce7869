#!/usr/bin/env python3
"""empdao SQLite Example.

This example demonstrates the basic usage of empdao against SQLite:
- Creating the reference schema bundled with the package
- Insert / update / delete through the procedure gateway
- Duplicate key detection
- Employees joined with their departments

Usage:
    uv run python examples/sqlite_example.py
"""

from __future__ import annotations

import sqlite3
import tempfile
from pathlib import Path

from empdao import DatabaseSettings, Dialect, DuplicateKeyError, Employee, EmployeeDao, SqlLoader

# =============================================================================
# Database Setup
# =============================================================================


def setup_database(path: Path) -> None:
    """Create the reference schema and sample data."""
    conn = sqlite3.connect(path)
    try:
        conn.executescript(SqlLoader().load("schema.sql", dialect=Dialect.SQLITE))
        conn.executemany(
            "INSERT INTO Employee (EmpNo, EmpName, EmpSalary) VALUES (?, ?, ?)",
            [("E1", "Tanaka Taro", 52000.0), ("E8", "Suzuki Hanako", 48000.0)],
        )
        conn.executemany(
            "INSERT INTO Department (DeptNo, DeptName, DeptBudget) VALUES (?, ?, ?)",
            [("D1", "Sales", 120000.0), ("D2", "Development", 300000.0)],
        )
        conn.executemany(
            "INSERT INTO EmployeeDepartment (EmpNo, DeptNo) VALUES (?, ?)",
            [("E1", "D1"), ("E1", "D2"), ("E8", "D2")],
        )
        conn.commit()
    finally:
        conn.close()


# =============================================================================
# Demos
# =============================================================================


def demo_crud(dao: EmployeeDao) -> None:
    """Demo: insert, update, delete."""
    print("=" * 60)
    print("[CRUD]")
    print("=" * 60)

    dao.save(Employee("E100", "Ann", 50000.0))
    print(f"After insert: {dao.get_by_no('E100')}")

    dao.update(Employee("E100", "Ann", 55000.0))
    print(f"After update: {dao.get_by_no('E100')}")

    dao.delete_by_no("E100")
    print(f"After delete: {dao.get_by_no('E100')}")
    print()


def demo_duplicate(dao: EmployeeDao) -> None:
    """Demo: inserting an existing employee number."""
    print("=" * 60)
    print("[DUPLICATE KEY]")
    print("=" * 60)

    try:
        dao.save(Employee("E1", "Someone Else", 1.0))
    except DuplicateKeyError as e:
        print(f"Error: {e} (key={e.key})")
    print()


def demo_departments(dao: EmployeeDao) -> None:
    """Demo: employees with their departments."""
    print("=" * 60)
    print("[EMPLOYEES WITH DEPARTMENTS]")
    print("=" * 60)

    for employee in dao.get_all_with_departments():
        names = ", ".join(f"{d.name} ({d.budget:,.0f})" for d in employee.departments)
        print(f"  {employee.employee_number} {employee.name}: {names}")
    print()


# =============================================================================
# Main
# =============================================================================


def main() -> None:
    """Run the examples."""
    with tempfile.TemporaryDirectory() as tmp:
        db_path = Path(tmp) / "employees.db"
        setup_database(db_path)
        dao = EmployeeDao(settings=DatabaseSettings(dialect="sqlite", database=str(db_path)))

        demo_crud(dao)
        demo_duplicate(dao)
        demo_departments(dao)


if __name__ == "__main__":
    main()
