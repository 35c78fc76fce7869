"""empdao マッパーパッケージ."""

from empdao.mapper.column import Column
from empdao.mapper.dataclass import DataclassMapper

__all__ = ["Column", "DataclassMapper"]
