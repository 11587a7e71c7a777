from __future__ import annotations

from functools import cached_property
from keyword import iskeyword
from typing import Iterable

import msgspec
import polars as pl

from composite_frame.dtypes import (
    DataTypeLike,
    DataTypeMeta,
    TypeKind,
    normalize_dtype,
    py_type_for,
    type_kind,
)
from composite_frame.errors import FrameIndexError, SchemaError
from composite_frame.structs import FrozenStruct


class ColumnMeta(FrozenStruct, frozen=True):
    name: str
    type: DataTypeMeta


class Column(msgspec.Struct, dict=True, frozen=True):
    name: str
    type: pl.DataType

    @staticmethod
    def from_like(c: ColumnLike) -> Column:
        match c:
            case Column():
                return Column(c.name, normalize_dtype(c.type))

            case tuple():
                if len(c) != 2:
                    raise SchemaError(
                        f'Column definitions are (name, dtype) pairs, got {c!r}'
                    )
                return Column(c[0], normalize_dtype(c[1]))

            case dict() | ColumnMeta():
                if isinstance(c, dict):
                    c = ColumnMeta.convert(c)

                return Column(c.name, c.type.decode())

        raise SchemaError(f'Can\'t build a column definition from {c!r}')

    @property
    def kind(self) -> TypeKind:
        return type_kind(self.type)

    @property
    def py_type(self) -> type:
        return py_type_for(self.type)

    def encode(self) -> ColumnMeta:
        return ColumnMeta(
            name=self.name,
            type=DataTypeMeta.from_dtype(self.type),
        )


ColumnLike = tuple[str, DataTypeLike] | dict | ColumnMeta | Column

# ordered (name, dtype) pairs, the identity of a shape
Signature = tuple[tuple[str, pl.DataType], ...]


class ShapeMeta(FrozenStruct, frozen=True):
    name: str
    columns: list[ColumnMeta]


class Shape:
    '''
    Ordered (name, dtype) signature of a frame variant.

    Two shapes are equal when their signatures are, `name` is only a tag for
    diagnostics.

    '''
    def __init__(
        self,
        columns: Iterable[ColumnLike],
        *,
        name: str = 'Shape',
    ) -> None:
        self._columns: tuple[Column, ...] = tuple(
            (Column.from_like(c) for c in columns)
        )
        self.name = name

        self._index: dict[str, int] = {}
        for i, col in enumerate(self._columns):
            if not isinstance(col.name, str) or not col.name:
                raise SchemaError(
                    f'Column names must be non empty strings, got {col.name!r}'
                )

            if col.name in self._index:
                raise SchemaError(
                    f'Duplicate column name {col.name!r} in shape {name}'
                )

            self._index[col.name] = i

    @staticmethod
    def from_like(s: ShapeLike) -> Shape:
        match s:
            case Shape():
                return s

            case dict() | ShapeMeta():
                if isinstance(s, dict):
                    s = ShapeMeta.convert(s)

                return Shape(s.columns, name=s.name)

        return Shape(s)

    @staticmethod
    def from_json(s: str | bytes) -> Shape:
        return Shape.from_like(ShapeMeta.from_json(s))

    def __len__(self) -> int:
        return len(self._columns)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Shape):
            return NotImplemented

        return self.signature == other.signature

    def __hash__(self) -> int:
        return hash(self.signature)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __repr__(self) -> str:
        cols = ', '.join(f'{c.name}: {c.type}' for c in self._columns)
        return f'Shape({self.name}; {cols})'

    @property
    def columns(self) -> tuple[Column, ...]:
        return self._columns

    @cached_property
    def names(self) -> tuple[str, ...]:
        return tuple(col.name for col in self._columns)

    @cached_property
    def dtypes(self) -> tuple[pl.DataType, ...]:
        return tuple(col.type for col in self._columns)

    @cached_property
    def signature(self) -> Signature:
        return tuple((col.name, col.type) for col in self._columns)

    def index_of(self, name: str) -> int:
        try:
            return self._index[name]

        except KeyError:
            raise FrameIndexError(
                f'No column named {name!r} in {self.name}, columns: {list(self.names)}'
            ) from None

    def as_polars(self) -> pl.Schema:
        return pl.Schema(self.signature)

    @cached_property
    def row_struct(self) -> type[msgspec.Struct]:
        '''
        Typed record class for a single row of this shape.

        Column names that aren't valid python identifiers get a positional
        attribute (`c0`, `c1`, ...) and keep their real name when encoded.

        '''
        fields = []
        rename = {}
        taken = set(self.names)
        for i, col in enumerate(self._columns):
            attr = col.name
            if not attr.isidentifier() or iskeyword(attr) or attr.startswith('_'):
                attr = f'c{i}'
                while attr in taken:
                    attr += '_'

                taken.add(attr)
                rename[attr] = col.name

            fields.append((attr, col.py_type))

        return msgspec.defstruct(
            f'{self.name}Row',
            fields,
            module='composite_frame.rows',
            frozen=True,
            rename=rename or None,
        )

    def pretty_str(self) -> str:
        '''Return a human-readable representation of the shape.'''
        lines = [f'Shape: {self.name}']
        for col in self._columns:
            lines.append(f'  - {col.name}: {col.type} ({col.kind})')
        return '\n'.join(lines)

    def encode(self) -> ShapeMeta:
        return ShapeMeta(
            name=self.name,
            columns=[col.encode() for col in self._columns],
        )


ShapeLike = Iterable[ColumnLike] | dict | ShapeMeta | Shape
