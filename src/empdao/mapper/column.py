"""Column アノテーション."""

from __future__ import annotations


class Column:
    """カラム名を指定するアノテーション."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"Column({self.name!r})"
