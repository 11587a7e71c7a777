'''
# Indexing & slicing

Resolves column selectors (name, position, slice or sequence of those) and
row selectors (position, slice, range, boolean mask or sequence of
positions) against a frame. All positions are 0 based and must fall inside
`[0, n)`, negative positions are rejected.

`frame[cols]` selects columns; `frame[rows, cols]` selects both. A single
column selector hands back the raw `polars.Series`, anything else a new
frame.

'''
from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import polars as pl

from composite_frame._utils import is_position
from composite_frame.errors import FrameIndexError
from composite_frame.schema import Shape

if TYPE_CHECKING:
    from composite_frame.frame import AbstractCompositeFrame


# a resolved row selection: None means every row, a slice is a contiguous
# step 1 span, a boolean series is a mask and an integer series a gather
RowSelection = slice | pl.Series | None


def is_single_column(selector: Any) -> bool:
    return isinstance(selector, str) or is_position(selector)


def check_position(i: int, n: int, what: str = 'row') -> int:
    if not 0 <= i < n:
        raise FrameIndexError(f'{what.capitalize()} position {i} out of range [0, {n})')

    return int(i)


def resolve_column(shape: Shape, selector: Any) -> int:
    '''
    Position of the column named / pointed at by `selector`.

    '''
    if isinstance(selector, str):
        return shape.index_of(selector)

    if is_position(selector):
        return check_position(selector, len(shape), what='column')

    raise FrameIndexError(f'Invalid column selector {selector!r}')


def resolve_columns(shape: Shape, selector: Any) -> list[int]:
    '''
    Ordered column positions for a multi column `selector`, duplicates are
    rejected since the result has to be a valid shape.

    '''
    match selector:
        case slice():
            bounds = (selector.start, selector.stop, selector.step)
            if not all(b is None or is_position(b) for b in bounds) or selector.step == 0:
                raise FrameIndexError(
                    f'Column slices take positions, got {selector!r}'
                )

            return list(range(len(shape)))[selector]

        case pl.Series():
            selector = selector.to_list()

        case _ if is_single_column(selector):
            return [resolve_column(shape, selector)]

        case _ if not isinstance(selector, Iterable):
            raise FrameIndexError(f'Invalid column selector {selector!r}')

    positions = [resolve_column(shape, s) for s in selector]
    if len(set(positions)) != len(positions):
        raise FrameIndexError(
            f'Duplicate column selectors: {[shape.names[i] for i in positions]}'
        )

    return positions


def _rows_from_range(r: range, nrow: int) -> RowSelection:
    if len(r) and (min(r) < 0 or max(r) >= nrow):
        raise FrameIndexError(
            f'Row range {r} out of range [0, {nrow})'
        )

    if r.step == 1:
        return slice(r.start, max(r.start, r.stop))

    return pl.Series('rows', r, dtype=pl.Int64)


def resolve_rows(nrow: int, selector: Any) -> RowSelection:
    '''
    Normalize a row `selector` against a frame of `nrow` rows.

    '''
    match selector:
        case bool():
            raise FrameIndexError('A single bool is not a row selector')

        case _ if is_position(selector):
            i = check_position(selector, nrow)
            return slice(i, i + 1)

        case slice():
            if selector == slice(None):
                return None

            bounds = (selector.start, selector.stop, selector.step)
            if not all(b is None or is_position(b) for b in bounds) or selector.step == 0:
                raise FrameIndexError(f'Invalid row slice {selector!r}')

            # slices clip to the frame like python sequences do
            return _rows_from_range(range(nrow)[selector], nrow)

        case range():
            return _rows_from_range(selector, nrow)

        case pl.Series():
            rows = selector

        case _ if isinstance(selector, Iterable) and not isinstance(selector, str | bytes):
            values = selector if hasattr(selector, '__array__') else list(selector)
            try:
                rows = pl.Series('rows', values, strict=True)

            except (TypeError, ValueError, pl.exceptions.PolarsError) as e:
                raise FrameIndexError(f'Invalid row selector: {e}') from e

            if rows.dtype == pl.Null:
                # empty list
                rows = rows.cast(pl.Int64)

        case _:
            raise FrameIndexError(f'Invalid row selector {selector!r}')

    if rows.dtype == pl.Boolean:
        if rows.len() != nrow:
            raise FrameIndexError(
                f'Boolean mask has length {rows.len()} but frame has {nrow} rows'
            )

        return rows.fill_null(False)

    if not rows.dtype.is_integer():
        raise FrameIndexError(
            f'Row selectors must be integer positions or a boolean mask, got {rows.dtype}'
        )

    if rows.null_count():
        raise FrameIndexError('Row positions can\'t contain nulls')

    if rows.len() and (rows.min() < 0 or rows.max() >= nrow):
        raise FrameIndexError(
            f'Row positions [{rows.min()}, {rows.max()}] out of range [0, {nrow})'
        )

    return rows


def take_rows(col: pl.Series, rows: RowSelection) -> pl.Series:
    match rows:
        case None:
            # fresh series, a frame never shares a mutable column
            return col.clone()

        case slice():
            return col.slice(rows.start, rows.stop - rows.start)

        case pl.Series() if rows.dtype == pl.Boolean:
            return col.filter(rows)

    return col.gather(rows)


def getitem(frame: AbstractCompositeFrame, key: Any) -> Any:
    '''
    Entry point for `frame[key]`.

    '''
    if isinstance(key, tuple):
        if len(key) != 2:
            raise FrameIndexError(
                f'Expected frame[rows, cols] or frame[cols], got {len(key)} selectors'
            )

        rows, cols = key
        return _select(frame, rows, cols)

    if is_single_column(key):
        return frame.columns[resolve_column(frame.shape, key)]

    return _project(frame, resolve_columns(frame.shape, key), None)


def _select(frame: AbstractCompositeFrame, rows: Any, cols: Any) -> Any:
    if is_single_column(cols):
        col = frame.columns[resolve_column(frame.shape, cols)]
        if is_position(rows):
            return col[check_position(rows, frame.nrow)]

        return take_rows(col, resolve_rows(frame.nrow, rows))

    positions = resolve_columns(frame.shape, cols)
    selection = resolve_rows(frame.nrow, rows)

    if positions == list(range(frame.ncol)):
        # every column in order: same shape & frame class, only rows change
        return frame._with_columns(
            [take_rows(col, selection) for col in frame.columns]
        )

    return _project(frame, positions, selection)


def _project(
    frame: AbstractCompositeFrame,
    positions: list[int],
    rows: RowSelection,
) -> AbstractCompositeFrame:
    names = [frame.names[i] for i in positions]
    columns = [take_rows(frame.columns[i], rows) for i in positions]
    return frame._reproject(columns, names)
