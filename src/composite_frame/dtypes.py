'''
# Overview

Every frame column is a `polars.Series`, so its element type is a
`polars.DataType`. This module normalizes the many ways polars lets you spell
a dtype into a single hashable instance (needed so shape signatures compare
and hash consistently), classifies dtypes into coarse kinds, maps them to the
python types used on typed row records, and provides a tiny serializable tag
format so shapes can be stored as metadata.

'''
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from inspect import isclass
from typing import Any, Literal

import polars as pl

from composite_frame.errors import SchemaError
from composite_frame.structs import FrozenStruct


# any dtype spelling we accept, class (pl.Int64) or instance (pl.Int64())
DataTypeLike = type[pl.DataType] | pl.DataType

# simple type kind distinction
TypeKind = Literal['numeric', 'string', 'temporal', 'boolean', 'nested', 'other']


def class_of(dtype: DataTypeLike) -> type[pl.DataType]:
    return type(dtype) if not isclass(dtype) else dtype


def normalize_dtype(dtype: DataTypeLike) -> pl.DataType:
    '''
    Collapse a dtype class into an instance, parametric dtypes without
    defaults (`pl.List`, `pl.Array`, `pl.Struct`...) must be passed as
    instances.

    '''
    if isinstance(dtype, pl.DataType):
        return dtype

    if isclass(dtype) and issubclass(dtype, pl.DataType):
        try:
            return dtype()

        except TypeError:
            raise SchemaError(
                f'dtype {dtype.__name__} is parametric, pass an instance'
            ) from None

    raise SchemaError(f'Not a polars data type: {dtype!r}')


def type_kind(dtype: DataTypeLike) -> TypeKind:
    dtype = normalize_dtype(dtype)

    if dtype.is_nested():
        return 'nested'

    if dtype.is_numeric():
        return 'numeric'

    if dtype.is_temporal():
        return 'temporal'

    if isinstance(dtype, pl.Boolean):
        return 'boolean'

    if isinstance(dtype, pl.String | pl.Binary | pl.Categorical | pl.Enum):
        return 'string'

    return 'other'


# python types for the non nested dtypes, checked in order (Decimal is numeric
# but must not fall into float)
_py_types: tuple[tuple[type[pl.DataType], type], ...] = (
    (pl.Boolean, bool),
    (pl.Decimal, Decimal),
    (pl.Datetime, dt.datetime),
    (pl.Date, dt.date),
    (pl.Time, dt.time),
    (pl.Duration, dt.timedelta),
    (pl.Binary, bytes),
    (pl.String, str),
    (pl.Categorical, str),
    (pl.Enum, str),
)


def py_type_for(dtype: DataTypeLike, *, optional: bool = True) -> Any:
    '''
    Given a column dtype obtain the python type its values map to, used as
    the field annotations of typed row records.

    Polars columns are always nullable so by default the result is optional.

    '''
    dtype = normalize_dtype(dtype)

    py_type: Any
    match dtype:
        case pl.List() | pl.Array():
            py_type = list[py_type_for(dtype.inner, optional=optional)]

        case pl.Struct():
            py_type = dict[str, Any]

        case _ if dtype.is_integer():
            py_type = int

        case _ if dtype.is_float():
            py_type = float

        case _:
            py_type = next(
                (t for cls, t in _py_types if isinstance(dtype, cls)), Any
            )

    if optional and py_type is not Any:
        py_type = py_type | None

    return py_type


# data type serialization

# a tiny, serializable dtype tag
DTypeTag = Literal[
    'u8',
    'u16',
    'u32',
    'u64',
    'i8',
    'i16',
    'i32',
    'i64',
    'i128',
    'f32',
    'f64',
    'decimal',
    'bool',
    'date',
    'time',
    'datetime',
    'duration',
    'binary',
    'string',
    'categorical',
    'null',
    'object',

    # nested
    'list',
    'array',
    'struct',
]

# Maps between runtime dtype classes and tags
dtype_tag_map: dict[type[pl.DataType], DTypeTag] = {
    pl.UInt8: 'u8',
    pl.UInt16: 'u16',
    pl.UInt32: 'u32',
    pl.UInt64: 'u64',
    pl.Int8: 'i8',
    pl.Int16: 'i16',
    pl.Int32: 'i32',
    pl.Int64: 'i64',
    pl.Int128: 'i128',
    pl.Float32: 'f32',
    pl.Float64: 'f64',
    pl.Decimal: 'decimal',
    pl.Boolean: 'bool',
    pl.Date: 'date',
    pl.Time: 'time',
    pl.Datetime: 'datetime',
    pl.Duration: 'duration',
    pl.Binary: 'binary',
    pl.String: 'string',
    pl.Categorical: 'categorical',
    pl.Null: 'null',
    pl.Object: 'object',
    pl.List: 'list',
    pl.Array: 'array',
    pl.Struct: 'struct',
}

# inverse of dtype_tag_map
tag_dtype_map: dict[DTypeTag, type[pl.DataType]] = {
    v: k for (k, v) in dtype_tag_map.items()
}


def _as_meta(obj: Any) -> DataTypeMeta:
    return obj if isinstance(obj, DataTypeMeta) else DataTypeMeta.convert(obj)


class DataTypeMeta(FrozenStruct, frozen=True):
    tag: DTypeTag
    kwargs: dict[str, Any] = {}

    @staticmethod
    def from_dtype(dtype: DataTypeLike) -> DataTypeMeta:
        dtype = normalize_dtype(dtype)
        tag = dtype_tag_map.get(class_of(dtype))
        if tag is None:
            raise SchemaError(f'No serializable tag for dtype {dtype}')

        kwargs: dict[str, Any] = {}
        match dtype:
            case pl.Decimal():
                kwargs['precision'] = dtype.precision
                kwargs['scale'] = dtype.scale

            case pl.Datetime():
                kwargs['time_unit'] = dtype.time_unit
                kwargs['time_zone'] = dtype.time_zone

            case pl.Duration():
                kwargs['time_unit'] = dtype.time_unit

            case pl.List():
                kwargs['inner'] = DataTypeMeta.from_dtype(dtype.inner)

            case pl.Array():
                # multi dimensional arrays nest, so inner + first dim is enough
                kwargs['inner'] = DataTypeMeta.from_dtype(dtype.inner)
                kwargs['size'] = dtype.size

            case pl.Struct():
                kwargs['fields'] = [
                    [field.name, DataTypeMeta.from_dtype(field.dtype)]
                    for field in dtype.fields
                ]

        return DataTypeMeta(tag=tag, kwargs=kwargs)

    def decode(self) -> pl.DataType:
        cls = tag_dtype_map[self.tag]

        match self.tag:
            case 'list':
                return pl.List(_as_meta(self.kwargs['inner']).decode())

            case 'array':
                return pl.Array(
                    _as_meta(self.kwargs['inner']).decode(),
                    self.kwargs['size'],
                )

            case 'struct':
                return pl.Struct(
                    {
                        name: _as_meta(meta).decode()
                        for name, meta in self.kwargs['fields']
                    }
                )

            case 'decimal' | 'datetime' | 'duration':
                return cls(**self.kwargs)

        return cls()
