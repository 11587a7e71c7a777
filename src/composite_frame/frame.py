'''
# Type stable frames

A `CompositeFrame` is an in-memory table whose columns are independent,
statically typed `polars.Series`. The set of (name, dtype) pairs is the
frame's `Shape`, resolved through a `ShapeRegistry` when the frame is built
and never changed afterwards: every operation hands back a new frame.

All frame variants implement `AbstractCompositeFrame`, the common interface
the relational operators are written against.

Frame variants with a fixed shape can be declared as subclasses:

    class Trades(CompositeFrame, columns=(('px', pl.Float64), ('qty', pl.Int64))):
        ...

    trades = Trades(px=[1.5, 2.0], qty=[10, 20])

Inputs to a declared variant are cast to the declared dtypes, and row
selections over all columns keep the subclass.

'''
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any, ClassVar, Self

import msgspec
import polars as pl

from composite_frame import indexing
from composite_frame._utils import gennames, is_position
from composite_frame.columns import ColumnLike, as_column, common_length
from composite_frame.errors import FrameIndexError, SchemaError
from composite_frame.registry import ShapeRegistry, default_registry
from composite_frame.relation import Relation, RelationLike, as_relation
from composite_frame.schema import Column, ColumnLike as ColumnDef, Shape

if TYPE_CHECKING:
    from composite_frame.ops import Assignment, KeySource


class AbstractCompositeFrame(ABC):
    '''
    Common interface of every type stable frame: a shape, one typed column
    per shape entry and a fixed row count.

    Also satisfies `RelationLike`, so any frame can be fed wherever a
    relation is expected.

    '''

    @property
    @abstractmethod
    def shape(self) -> Shape:
        ...

    @property
    @abstractmethod
    def columns(self) -> tuple[pl.Series, ...]:
        ...

    @property
    @abstractmethod
    def nrow(self) -> int:
        ...

    @property
    @abstractmethod
    def registry(self) -> ShapeRegistry:
        ...

    @abstractmethod
    def _with_columns(self, columns: Sequence[pl.Series]) -> Self:
        '''
        Same shape & class, new column contents (same names and dtypes).

        '''

    @abstractmethod
    def _reproject(
        self,
        columns: Sequence[pl.Series],
        names: Sequence[str],
    ) -> AbstractCompositeFrame:
        '''
        Frame for an arbitrary set of columns derived from this one.

        '''

    # derived api

    @property
    def names(self) -> tuple[str, ...]:
        return self.shape.names

    @property
    def ncol(self) -> int:
        return len(self.shape)

    @property
    def dtypes(self) -> tuple[pl.DataType, ...]:
        return self.shape.dtypes

    def __len__(self) -> int:
        return self.ncol

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self.shape

    def __getitem__(self, key: Any) -> Any:
        return indexing.getitem(self, key)

    def __repr__(self) -> str:
        return (
            f'<{type(self).__name__} {self.shape.name} '
            f'{self.nrow}x{self.ncol} {list(self.names)}>'
        )

    def column_at(self, i: int | str) -> pl.Series:
        return self.columns[indexing.resolve_column(self.shape, i)]

    def row_at(self, i: int) -> msgspec.Struct:
        '''
        Row `i` as an instance of the shape's typed row record.

        '''
        if not is_position(i):
            raise FrameIndexError(f'Row position must be an integer, got {i!r}')

        indexing.check_position(i, self.nrow)
        return self.shape.row_struct(*(col[i] for col in self.columns))

    def iter_rows(self, *, named: bool = False) -> Iterator[tuple | msgspec.Struct]:
        if not named:
            yield from self.to_polars().iter_rows()
            return

        struct = self.shape.row_struct
        for row in self.to_polars().iter_rows():
            yield struct(*row)

    def rows(self) -> list[tuple]:
        return self.to_polars().rows()

    # relation protocol

    def ordered_column_names(self) -> list[str]:
        return list(self.names)

    def column_count(self) -> int:
        return self.ncol

    def row_count(self) -> int:
        return self.nrow

    # interop

    def to_polars(self) -> pl.DataFrame:
        return pl.DataFrame(list(self.columns))

    def to_relation(self) -> Relation:
        return Relation(self.to_polars())

    def equals(self, other: object) -> bool:
        '''
        Same names, dtypes and values, the frame class and shape name are
        ignored.

        '''
        if not isinstance(other, AbstractCompositeFrame):
            return False

        return self.shape == other.shape and all(
            a.equals(b) for a, b in zip(self.columns, other.columns)
        )

    def pretty_str(self) -> str:
        '''Return a human-readable summary of the frame.'''
        return '\n'.join(
            (
                f'{type(self).__name__}: {self.nrow:,} rows x {self.ncol} columns',
                self.shape.pretty_str(),
            )
        )

    # relational operators

    def select(
        self,
        assignments: Mapping[str, Assignment] | None = None,
        /,
        **kwargs: Assignment,
    ) -> AbstractCompositeFrame:
        from composite_frame.ops import select
        return select(self, assignments, **kwargs)

    def transform(
        self,
        assignments: Mapping[str, Assignment] | None = None,
        /,
        **kwargs: Assignment,
    ) -> AbstractCompositeFrame:
        from composite_frame.ops import transform
        return transform(self, assignments, **kwargs)

    def order(
        self,
        by: KeySource | None = None,
        /,
        *,
        descending: bool | Sequence[bool] = False,
        **keys: Assignment,
    ) -> Self:
        from composite_frame.ops import order
        return order(self, by, descending=descending, **keys)

    def hcat(self, other: Any, *more: Any) -> AbstractCompositeFrame | Relation:
        from composite_frame.ops import hcat
        return hcat(self, other, *more)


class CompositeFrame(AbstractCompositeFrame):
    '''
    In-memory type stable frame.

    `CompositeFrame(x=[1, 2], y=['a', 'b'])` builds from keyword columns,
    `name=` tags the resolved shape. Columns named `name` or `registry` need
    the mapping form: `CompositeFrame({'name': [...]})`.

    '''

    # set on declared subclasses
    declared_shape: ClassVar[Shape | None] = None
    _declared_registry: ClassVar[ShapeRegistry | None] = None

    def __init_subclass__(
        cls,
        *,
        columns: Sequence[ColumnDef] | None = None,
        name: str | None = None,
        registry: ShapeRegistry | None = None,
        **kwargs,
    ) -> None:
        super().__init_subclass__(**kwargs)
        if columns is None:
            return

        defs = [Column.from_like(c) for c in columns]
        if registry is None:
            registry = default_registry()

        cls.declared_shape = registry.resolve(
            [c.type for c in defs],
            [c.name for c in defs],
            hint=name or cls.__name__,
        )
        cls._declared_registry = registry

    def __init__(
        self,
        pairs: Mapping[str, ColumnLike] | None = None,
        /,
        *,
        name: str | None = None,
        registry: ShapeRegistry | None = None,
        **columns: ColumnLike,
    ) -> None:
        names, values = _merge_named(pairs, columns)
        self._bind(*self._assemble(values, names, name=name, registry=registry))

    def _bind(
        self,
        shape: Shape,
        columns: Sequence[pl.Series],
        registry: ShapeRegistry,
    ) -> None:
        self._shape = shape
        self._columns: tuple[pl.Series, ...] = tuple(columns)
        self._nrow = self._columns[0].len() if self._columns else 0
        self._registry = registry

    @classmethod
    def _from_parts(
        cls,
        shape: Shape,
        columns: Sequence[pl.Series],
        registry: ShapeRegistry,
    ) -> Self:
        '''
        Bind already validated columns, skipping construction checks.

        '''
        frame = cls.__new__(cls)
        frame._bind(shape, columns, registry)
        return frame

    @classmethod
    def _assemble(
        cls,
        values: Sequence[ColumnLike],
        names: Sequence[str] | None,
        *,
        name: str | None,
        registry: ShapeRegistry | None,
    ) -> tuple[Shape, list[pl.Series], ShapeRegistry]:
        declared = cls.declared_shape
        if declared is None:
            if registry is None:
                registry = default_registry()

            if names is None:
                names = gennames(len(values))

            names = list(names)
            if len(values) != len(names):
                raise SchemaError(
                    f'Got {len(values)} columns but {len(names)} names'
                )

            if len(set(names)) != len(names):
                raise SchemaError(f'Duplicate column names in {names}')

            columns = [as_column(v, n) for v, n in zip(values, names)]
            common_length(columns)
            shape = registry.resolve([c.dtype for c in columns], names, hint=name)
            return shape, columns, registry

        if name is not None and name != declared.name:
            raise SchemaError(
                f'{cls.__name__} has a declared shape named {declared.name}, '
                f'can\'t rename it to {name}'
            )

        if registry is not None and registry is not cls._declared_registry:
            raise SchemaError(
                f'{cls.__name__} shape is bound to the registry it was declared with'
            )

        if not values and names is None:
            # no data, empty frame of the declared shape
            values = [[] for _ in declared.columns]

        if names is None:
            names = declared.names

        names = list(names)
        if sorted(names) != sorted(declared.names) or len(values) != len(names):
            raise SchemaError(
                f'{cls.__name__} expects columns {list(declared.names)}, got {names}'
            )

        by_name = dict(zip(names, values))
        columns = [
            as_column(by_name[col.name], col.name, dtype=col.type)
            for col in declared.columns
        ]
        common_length(columns)
        return declared, columns, cls._declared_registry

    # construction api

    @classmethod
    def from_columns(
        cls,
        columns: Sequence[ColumnLike],
        names: Sequence[str] | None = None,
        *,
        name: str | None = None,
        registry: ShapeRegistry | None = None,
    ) -> Self:
        '''
        Build from positional `columns`, `names` default to x1, x2, ...

        '''
        return cls._from_parts(
            *cls._assemble(list(columns), names, name=name, registry=registry)
        )

    @classmethod
    def from_named(
        cls,
        pairs: Mapping[str, ColumnLike] | None = None,
        /,
        *,
        name: str | None = None,
        registry: ShapeRegistry | None = None,
        **columns: ColumnLike,
    ) -> Self:
        '''
        Build from a name -> column mapping (and / or keywords), in
        iteration order.

        '''
        names, values = _merge_named(pairs, columns)
        return cls._from_parts(
            *cls._assemble(values, names, name=name, registry=registry)
        )

    @classmethod
    def from_relation(
        cls,
        source: RelationLike | pl.DataFrame,
        names: Sequence[str] | None = None,
        *,
        name: str | None = None,
        registry: ShapeRegistry | None = None,
    ) -> Self:
        '''
        Copy the columns of any relation like `source`, or only `names` (in
        that order) when given.

        '''
        rel = as_relation(source)
        all_names = list(rel.ordered_column_names())
        if names is None:
            names = all_names

        positions = []
        for n in names:
            try:
                positions.append(all_names.index(n))

            except ValueError:
                raise FrameIndexError(
                    f'No column named {n!r} in source, columns: {all_names}'
                ) from None

        return cls.from_columns(
            [rel.column_at(i) for i in positions],
            list(names),
            name=name,
            registry=registry,
        )

    @classmethod
    def from_polars(
        cls,
        df: pl.DataFrame,
        *,
        name: str | None = None,
        registry: ShapeRegistry | None = None,
    ) -> Self:
        return cls.from_columns(
            df.get_columns(), df.columns, name=name, registry=registry
        )

    @classmethod
    def empty(cls) -> Self:
        '''
        Zero row frame of a declared shape, zero column frame otherwise.

        '''
        return cls.from_columns([])

    # AbstractCompositeFrame

    @property
    def shape(self) -> Shape:
        return self._shape

    @property
    def columns(self) -> tuple[pl.Series, ...]:
        return self._columns

    @property
    def nrow(self) -> int:
        return self._nrow

    @property
    def registry(self) -> ShapeRegistry:
        return self._registry

    def _with_columns(self, columns: Sequence[pl.Series]) -> Self:
        return type(self)._from_parts(self._shape, columns, self._registry)

    def _reproject(
        self,
        columns: Sequence[pl.Series],
        names: Sequence[str],
    ) -> AbstractCompositeFrame:
        columns = [col.alias(n) for col, n in zip(columns, names)]
        if tuple(names) == self.names and all(
            col.dtype == dtype for col, dtype in zip(columns, self.dtypes)
        ):
            return self._with_columns(columns)

        common_length(columns)
        shape = self._registry.resolve([c.dtype for c in columns], names)
        return CompositeFrame._from_parts(shape, columns, self._registry)


def _merge_named(
    pairs: Mapping[str, ColumnLike] | None,
    columns: Mapping[str, ColumnLike],
) -> tuple[list[str] | None, list[ColumnLike]]:
    merged = dict(pairs) if pairs is not None else {}
    for k, v in columns.items():
        if k in merged:
            raise SchemaError(f'Column {k!r} given twice')

        merged[k] = v

    if not merged:
        return None, []

    return list(merged), list(merged.values())
