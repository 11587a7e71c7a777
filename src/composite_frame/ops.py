'''
# Relational operators

LINQ-like operations over type stable frames. Each one builds a brand new
frame (shape resolved through the input frame's registry), inputs are never
modified.

    - select: frame made of exactly the given assignments.
    - transform: original columns plus the given assignments.
    - order: stable sort by a key relation computed from the frame.
    - hcat: column wise concatenation with name de-duplication.

An assignment is a column (series or any sequence of values), a callable
receiving the whole frame and returning a column, or a `polars.Expr`
evaluated against the frame.

'''
from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
import logging
from typing import Any, TypeVar

import polars as pl

from composite_frame._utils import is_position
from composite_frame.columns import ColumnLike, as_column, common_length
from composite_frame.errors import DimensionError, OrderError, SchemaError
from composite_frame.frame import AbstractCompositeFrame, CompositeFrame
from composite_frame.relation import (
    Relation,
    RelationLike,
    as_relation,
    relation_columns,
)


log = logging.getLogger(__name__)


Assignment = ColumnLike | pl.Expr | Callable[[AbstractCompositeFrame], ColumnLike]

# anything `order` can derive sort keys from
KeySource = (
    str
    | int
    | pl.Expr
    | pl.Series
    | pl.DataFrame
    | RelationLike
    | Sequence[Any]
    | Callable[[AbstractCompositeFrame], Any]
)

F = TypeVar('F', bound=AbstractCompositeFrame)


def make_unique(names: Sequence[str]) -> list[str]:
    '''
    Rename repeated names: later occurrences of `x` become `x_1`, `x_2`, ...
    skipping any name already in use. First occurrences are untouched.

    '''
    seen: set[str] = set()
    out = list(names)
    dups: list[int] = []
    for i, name in enumerate(out):
        if name in seen:
            dups.append(i)
        else:
            seen.add(name)

    for i in dups:
        k = 1
        while (candidate := f'{out[i]}_{k}') in seen:
            k += 1

        out[i] = candidate
        seen.add(candidate)

    return out


def _collect(
    assignments: Mapping[str, Assignment] | None,
    kwargs: Mapping[str, Assignment],
) -> list[tuple[str, Assignment]]:
    items = list(assignments.items()) if assignments is not None else []
    names = {k for k, _ in items}
    for k, v in kwargs.items():
        if k in names:
            raise SchemaError(f'Column {k!r} assigned twice')

        items.append((k, v))

    return items


def evaluate(frame: AbstractCompositeFrame, name: str, value: Assignment) -> pl.Series:
    '''
    Materialize a single assignment against `frame` as a column named
    `name`.

    '''
    match value:
        case pl.Expr():
            value = frame.to_polars().select(value).to_series()

        case pl.Series():
            pass

        case _ if callable(value):
            value = value(frame)

    return as_column(value, name)


def select(
    frame: AbstractCompositeFrame,
    assignments: Mapping[str, Assignment] | None = None,
    /,
    **kwargs: Assignment,
) -> CompositeFrame:
    '''
    New frame whose columns are exactly the assignments, in order. Columns
    of `frame` not re-listed are dropped.

    '''
    items = _collect(assignments, kwargs)
    columns = [evaluate(frame, name, value) for name, value in items]
    return CompositeFrame.from_columns(
        columns, [name for name, _ in items], registry=frame.registry
    )


def transform(
    frame: AbstractCompositeFrame,
    assignments: Mapping[str, Assignment] | None = None,
    /,
    **kwargs: Assignment,
) -> AbstractCompositeFrame:
    '''
    Frame with the columns of `frame` followed by the assignments.

    An assignment named like an existing column replaces it in place, new
    names are appended in assignment order. Computed assignments all see the
    original `frame`.

    '''
    names = list(frame.names)
    columns = list(frame.columns)
    for name, value in _collect(assignments, kwargs):
        col = evaluate(frame, name, value)
        if frame.ncol and col.len() != frame.nrow:
            raise DimensionError(
                f'Column {name!r} has {col.len()} rows, frame has {frame.nrow}'
            )

        if name in frame:
            log.debug(f'transform replaces column {name!r} of {frame.shape.name}')
            columns[frame.shape.index_of(name)] = col

        else:
            names.append(name)
            columns.append(col)

    common_length(columns)
    return frame._reproject(columns, names)


def _key_columns(frame: AbstractCompositeFrame, source: Any) -> list[pl.Series]:
    match source:
        case None:
            return []

        case _ if isinstance(source, str) or is_position(source):
            return [frame.column_at(source)]

        case pl.Expr():
            return frame.to_polars().select(source).get_columns()

        case pl.Series():
            return [source]

        case pl.DataFrame():
            return source.get_columns()

        case AbstractCompositeFrame():
            return list(source.columns)

        case RelationLike():
            return relation_columns(source)

        case _ if callable(source):
            return _key_columns(frame, source(frame))

        case Sequence():
            return [col for s in source for col in _key_columns(frame, s)]

    return [as_column(source, 'key')]


def order(
    frame: F,
    by: KeySource | None = None,
    /,
    *,
    descending: bool | Sequence[bool] = False,
    **keys: Assignment,
) -> F:
    '''
    Reorder all rows of `frame` by a stable sort over a key relation.

    `by` may name columns, be a polars expression, a relation / frame, a
    series, or a callable computing any of those from `frame`; keyword
    `keys` are extra named key columns (`order(frame, k=frame['x'] * -1)`).
    Keys sort lexicographically in order, ascending unless `descending`,
    nulls last, ties keep their original relative order.

    '''
    parts = _key_columns(frame, by)
    parts += [evaluate(frame, name, value) for name, value in keys.items()]

    for part in parts:
        if part.len() != frame.nrow:
            raise OrderError(
                f'Sort key {part.name!r} has {part.len()} rows, frame has {frame.nrow}'
            )

    if not parts:
        return frame[:, :]

    # key names may collide, sort on positional aliases
    key_frame = pl.DataFrame([p.alias(f'k{i}') for i, p in enumerate(parts)])
    try:
        perm = key_frame.select(
            pl.arg_sort_by(
                key_frame.columns,
                descending=descending,
                nulls_last=True,
                maintain_order=True,
            )
        ).to_series()

    except (ValueError, pl.exceptions.PolarsError) as e:
        raise OrderError(f'Can\'t sort by keys {[p.name for p in parts]}: {e}') from e

    return frame[perm, :]


def hcat(a: Any, b: Any, *more: Any) -> AbstractCompositeFrame | Relation:
    '''
    Place the columns of all operands side by side.

    Row counts must match (zero column operands are neutral) and repeated
    names are made unique with `make_unique`. When every operand is a typed
    frame the result is a typed frame, otherwise everything is converted and
    the result is an untyped `Relation`.

    '''
    operands = (a, b, *more)
    typed = all(isinstance(o, AbstractCompositeFrame) for o in operands)

    columns: list[pl.Series] = []
    nrow: int | None = None
    for o in operands:
        if isinstance(o, AbstractCompositeFrame):
            cols, n = list(o.columns), o.nrow

        else:
            rel = as_relation(o)
            cols, n = relation_columns(rel), rel.row_count()

        if not cols:
            continue

        if nrow is not None and n != nrow:
            raise DimensionError(
                f'Can\'t hcat operands with {nrow} and {n} rows'
            )

        nrow = n
        columns += cols

    names = make_unique([col.name for col in columns])

    if typed:
        return CompositeFrame.from_columns(columns, names, registry=a.registry)

    return Relation.from_columns(columns, names)
