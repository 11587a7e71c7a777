'''
# Relation interop

A "relation" is the minimal capability set shared with untyped, dynamic
tables: ordered named columns plus a row count. `RelationLike` is that
protocol; `Relation` adapts a `polars.DataFrame` to it and is what frames
export to (and what mixed frame / relation concatenation produces).

'''
from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

import polars as pl

from composite_frame._utils import is_position
from composite_frame.errors import DimensionError, FrameIndexError, SchemaError


@runtime_checkable
class RelationLike(Protocol):
    def ordered_column_names(self) -> Sequence[str]:
        ...

    def column_count(self) -> int:
        ...

    def column_at(self, i: int) -> Any:
        ...

    def row_count(self) -> int:
        ...


class Relation:
    '''
    Untyped relation backed by a `polars.DataFrame`.

    '''
    def __init__(self, frame: pl.DataFrame) -> None:
        if not isinstance(frame, pl.DataFrame):
            raise TypeError(
                f'Relation wraps a polars.DataFrame, got {type(frame).__name__}'
            )

        self.frame = frame

    @staticmethod
    def from_columns(
        columns: Sequence[pl.Series],
        names: Sequence[str],
    ) -> Relation:
        if len(columns) != len(names):
            raise SchemaError(
                f'Got {len(columns)} columns but {len(names)} names'
            )

        try:
            return Relation(
                pl.DataFrame(
                    [pl.Series(name, col) for col, name in zip(columns, names)]
                )
            )

        except pl.exceptions.DuplicateError as e:
            raise SchemaError(str(e)) from e

        except pl.exceptions.ShapeError as e:
            raise DimensionError(str(e)) from e

    def __repr__(self) -> str:
        return f'Relation({self.frame.height}x{self.frame.width}; {self.frame.columns})'

    @property
    def names(self) -> list[str]:
        return self.frame.columns

    def ordered_column_names(self) -> list[str]:
        return self.frame.columns

    def column_count(self) -> int:
        return self.frame.width

    def column_at(self, i: int) -> pl.Series:
        if not is_position(i) or not 0 <= i < self.frame.width:
            raise FrameIndexError(
                f'Column position {i!r} out of range for {self.frame.width} columns'
            )

        return self.frame.to_series(i)

    def row_count(self) -> int:
        return self.frame.height

    def equals(self, other: object) -> bool:
        if not isinstance(other, Relation):
            return False

        return self.frame.equals(other.frame)


def as_relation(obj: Any) -> RelationLike:
    '''
    Wrap polars frames, pass through anything else implementing the
    relation protocol.

    '''
    match obj:
        case pl.DataFrame():
            return Relation(obj)

        case RelationLike():
            return obj

    raise TypeError(
        f'Expected a relation like object or polars.DataFrame, got {type(obj).__name__}'
    )


def relation_columns(rel: RelationLike) -> list[pl.Series]:
    '''
    All columns of `rel` as named series, in order.

    '''
    names = list(rel.ordered_column_names())
    return [
        pl.Series(names[i], rel.column_at(i))
        for i in range(rel.column_count())
    ]
