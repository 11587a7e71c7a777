'''
# Column storage

A frame column is a `polars.Series`: a native, statically typed array whose
element type is fixed when it's built. Columns are never shared between
frames, every constructor goes through `as_column` which hands back a fresh
series.

'''
from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

import polars as pl

from composite_frame.dtypes import DataTypeLike, normalize_dtype
from composite_frame.errors import DimensionError, SchemaError


ColumnLike = pl.Series | Sequence[Any] | Iterable[Any]


def as_column(
    values: ColumnLike,
    name: str,
    dtype: DataTypeLike | None = None,
) -> pl.Series:
    '''
    Build a named, typed column from `values`.

    When `dtype` is set values are strictly cast to it, otherwise the element
    type is inferred (series keep theirs).

    '''
    target = normalize_dtype(dtype) if dtype is not None else None

    if isinstance(values, pl.Series):
        # alias returns a new series, the source is left untouched
        col = values.alias(name)
        if target is None or col.dtype == target:
            return col

        try:
            return col.cast(target, strict=True)

        except pl.exceptions.PolarsError as e:
            raise SchemaError(
                f'Column {name!r} of type {col.dtype} can\'t be cast to {target}: {e}'
            ) from e

    if isinstance(values, str | bytes) or not isinstance(values, Iterable):
        raise SchemaError(
            f'Column {name!r} needs a sequence of values, got {type(values).__name__}'
        )

    if not isinstance(values, Sequence | range) and not hasattr(values, '__array__'):
        # generators & friends
        values = list(values)

    try:
        return pl.Series(name, values, dtype=target, strict=True)

    except (TypeError, ValueError, pl.exceptions.PolarsError) as e:
        raise SchemaError(
            f'Values for column {name!r} don\'t form a single typed column: {e}'
        ) from e


def common_length(columns: Sequence[pl.Series]) -> int:
    '''
    Row count shared by all `columns`, 0 when there are none.

    '''
    if not columns:
        return 0

    lengths = [col.len() for col in columns]
    nrow = lengths[0]
    if any(n != nrow for n in lengths):
        named = ', '.join(f'{col.name}={n}' for col, n in zip(columns, lengths))
        raise DimensionError(f'Columns have unequal lengths: {named}')

    return nrow
