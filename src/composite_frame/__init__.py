'''
Glossary:
    - Frame: An in-memory table made of independently, statically typed
      columns (`polars.Series`).
    - Shape: The ordered (name, dtype) signature of a frame variant.
    - Registry: Resolves (dtypes, names) requests into shapes, reusing
      equivalent ones.
    - Relation: The minimal ordered-named-columns + row count capability
      shared with untyped tables.

'''

from .errors import (
    CompositeFrameError as CompositeFrameError,
    ConfigError as ConfigError,
    DimensionError as DimensionError,
    FrameIndexError as FrameIndexError,
    OrderError as OrderError,
    SchemaError as SchemaError,
)

from .schema import Column as Column, Shape as Shape

from .registry import (
    ShapeRegistry as ShapeRegistry,
    default_registry as default_registry,
    set_default_registry as set_default_registry,
)

from .relation import Relation as Relation, RelationLike as RelationLike

from .frame import (
    AbstractCompositeFrame as AbstractCompositeFrame,
    CompositeFrame as CompositeFrame,
)

from .ops import (
    hcat as hcat,
    make_unique as make_unique,
    order as order,
    select as select,
    transform as transform,
)
