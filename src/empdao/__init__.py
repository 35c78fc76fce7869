"""empdao: stored-procedure based data access for employee records."""

from empdao.config import DatabaseSettings
from empdao.connection import ConnectionProvider
from empdao.dao import EmployeeDao
from empdao.dialect import Dialect
from empdao.exceptions import (
    DuplicateKeyError,
    EmpDaoError,
    InitializationError,
    MappingError,
    PersistenceError,
    SqlFileNotFoundError,
)
from empdao.loader import SqlLoader
from empdao.mapper import Column, DataclassMapper
from empdao.models import Department, Employee
from empdao.procedures import Procedure, ProcedureCaller

__all__ = [
    "Column",
    "ConnectionProvider",
    "DatabaseSettings",
    "DataclassMapper",
    "Department",
    "Dialect",
    "DuplicateKeyError",
    "EmpDaoError",
    "Employee",
    "EmployeeDao",
    "InitializationError",
    "MappingError",
    "PersistenceError",
    "Procedure",
    "ProcedureCaller",
    "SqlFileNotFoundError",
    "SqlLoader",
]
