import datetime as dt
from decimal import Decimal

import msgspec
import polars as pl
import pytest

from composite_frame import Column, SchemaError, Shape
from composite_frame.dtypes import (
    DataTypeMeta,
    normalize_dtype,
    py_type_for,
    type_kind,
)
from composite_frame.schema import ShapeMeta


def test_normalize_dtype():
    assert normalize_dtype(pl.Int64) == pl.Int64()
    assert hash(normalize_dtype(pl.Int64)) == hash(pl.Int64())

    dtype = pl.List(pl.String)
    assert normalize_dtype(dtype) is dtype

    with pytest.raises(SchemaError):
        normalize_dtype(pl.List)

    with pytest.raises(SchemaError):
        normalize_dtype(int)


def test_type_kind():
    assert type_kind(pl.Int32) == 'numeric'
    assert type_kind(pl.Decimal(10, 2)) == 'numeric'
    assert type_kind(pl.String) == 'string'
    assert type_kind(pl.Date) == 'temporal'
    assert type_kind(pl.Boolean) == 'boolean'
    assert type_kind(pl.List(pl.Int64)) == 'nested'
    assert type_kind(pl.Null) == 'other'


def test_py_type_for():
    assert py_type_for(pl.Int8, optional=False) is int
    assert py_type_for(pl.Float32, optional=False) is float
    assert py_type_for(pl.Decimal(10, 2), optional=False) is Decimal
    assert py_type_for(pl.Datetime('us'), optional=False) is dt.datetime
    assert py_type_for(pl.Date, optional=False) is dt.date
    assert py_type_for(pl.String) == str | None
    assert py_type_for(pl.List(pl.Int64), optional=False) == list[int]


def test_shape_rejects_duplicates():
    with pytest.raises(SchemaError):
        Shape((('x', pl.Int64), ('x', pl.String)))


def test_shape_accessors():
    shape = Shape((('x', pl.Int64), ('y', pl.String)), name='XY')

    assert len(shape) == 2
    assert shape.names == ('x', 'y')
    assert shape.dtypes == (pl.Int64(), pl.String())
    assert shape.index_of('y') == 1
    assert 'x' in shape
    assert shape.as_polars() == pl.Schema({'x': pl.Int64, 'y': pl.String})
    assert shape.columns[0] == Column('x', pl.Int64())
    assert shape.columns[1].kind == 'string'

    with pytest.raises(IndexError):
        shape.index_of('z')

    assert shape.pretty_str().splitlines() == [
        'Shape: XY',
        '  - x: Int64 (numeric)',
        '  - y: String (string)',
    ]


def test_shape_equality_ignores_name():
    a = Shape((('x', pl.Int64),), name='A')
    b = Shape((('x', pl.Int64),), name='B')
    c = Shape((('x', pl.Int32),), name='A')

    assert a == b
    assert hash(a) == hash(b)
    assert a != c


def test_shape_metadata_round_trip():
    shape = Shape(
        (
            ('ts', pl.Datetime(time_unit='ns', time_zone='UTC')),
            ('amount', pl.Decimal(precision=12, scale=2)),
            ('tags', pl.List(pl.String)),
            ('vec', pl.Array(pl.Float32, 3)),
            ('meta', pl.Struct({'a': pl.Int64, 'b': pl.Boolean})),
            ('elapsed', pl.Duration('ms')),
            ('day', pl.Date),
        ),
        name='Ledger',
    )

    raw = shape.encode().to_json()
    decoded = Shape.from_json(raw)

    assert decoded == shape
    assert decoded.name == 'Ledger'

    assert Shape.from_like(msgspec.json.decode(raw)) == shape
    assert Shape.from_like(ShapeMeta.from_json(raw)) == shape


def test_dtype_meta_tags():
    assert DataTypeMeta.from_dtype(pl.UInt16).tag == 'u16'
    assert DataTypeMeta.from_dtype(pl.Duration('ms')).kwargs == {'time_unit': 'ms'}
    assert DataTypeMeta(tag='f64').decode() == pl.Float64()


def test_row_struct():
    shape = Shape((('x', pl.Int64), ('my col', pl.String), ('class', pl.Boolean)))

    row_cls = shape.row_struct
    assert row_cls is shape.row_struct
    assert row_cls.__struct_fields__ == ('x', 'c1', 'c2')

    row = row_cls(1, 'a', True)
    assert row.x == 1
    assert msgspec.to_builtins(row) == {'x': 1, 'my col': 'a', 'class': True}
