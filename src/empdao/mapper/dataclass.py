"""DataclassMapper: dataclass 用の自動マッパー."""

from __future__ import annotations

from dataclasses import fields, is_dataclass
from typing import Annotated, Any, ClassVar, get_args, get_origin, get_type_hints

from empdao.exceptions import MappingError
from empdao.mapper.column import Column


class DataclassMapper:
    """Dataclass 用の自動マッパー.

    ``Annotated[T, Column("X")]`` で指定されたカラム名、なければフィールド名で
    行辞書を引く。カラム名の大文字小文字は区別しない（PostgreSQL は
    引用符なしの識別子を小文字で返すため）。行に存在しないフィールドは
    dataclass のデフォルト値に任せる。
    """

    _mapping_cache: ClassVar[dict[type, dict[str, str]]] = {}

    def __init__(self, entity_cls: type) -> None:
        if not is_dataclass(entity_cls):
            msg = f"{entity_cls} is not a dataclass"
            raise TypeError(msg)
        self.entity_cls = entity_cls
        self._mapping = self._get_mapping(entity_cls)

    @classmethod
    def _get_mapping(cls, entity_cls: type) -> dict[str, str]:
        """フィールド名→カラム名のマッピングを取得（キャッシュ付き）."""
        if entity_cls not in cls._mapping_cache:
            cls._mapping_cache[entity_cls] = cls._build_mapping(entity_cls)
        return cls._mapping_cache[entity_cls]

    @staticmethod
    def _build_mapping(entity_cls: type) -> dict[str, str]:
        hints = get_type_hints(entity_cls, include_extras=True)
        mapping: dict[str, str] = {}
        for f in fields(entity_cls):
            mapping[f.name] = f.name
            type_hint = hints.get(f.name)
            if type_hint and get_origin(type_hint) is Annotated:
                for arg in get_args(type_hint)[1:]:
                    if isinstance(arg, Column):
                        mapping[f.name] = arg.name
                        break
        return mapping

    def map_row(self, row: dict[str, Any]) -> Any:
        """1行をエンティティに変換.

        Raises:
            MappingError: 必須カラムの欠落や値の変換に失敗した場合

        """
        row_lower = {k.lower(): v for k, v in row.items()}
        kwargs: dict[str, Any] = {}
        for field_name, col_name in self._mapping.items():
            if col_name in row:
                kwargs[field_name] = row[col_name]
            elif col_name.lower() in row_lower:
                kwargs[field_name] = row_lower[col_name.lower()]
        try:
            return self.entity_cls(**kwargs)
        except (TypeError, ValueError) as e:
            msg = f"Cannot map row to {self.entity_cls.__name__}: {e}"
            raise MappingError(msg) from e

    def map_rows(self, rows: list[dict[str, Any]]) -> list[Any]:
        """複数行をエンティティのリストに変換."""
        return [self.map_row(row) for row in rows]
