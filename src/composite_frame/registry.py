'''
# Shape registry

Resolves a (dtypes, names) request into a `Shape`. Shapes are plain values,
so building a new one per request is always correct; the registry just lets
equivalent requests share one instance (and its cached row record class).

A process wide registry is created lazily by `default_registry()` from the
environment settings, frames built without an explicit `registry=` use it.

'''
from __future__ import annotations

from itertools import count
import logging
import threading
from typing import Sequence

from composite_frame.config import Settings, load_settings
from composite_frame.dtypes import DataTypeLike, normalize_dtype
from composite_frame.errors import SchemaError
from composite_frame.schema import Shape, Signature


log = logging.getLogger(__name__)


class ShapeRegistry:
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings if settings is not None else load_settings()

        self._shapes: dict[tuple[str | None, Signature], Shape] = {}
        self._ids = count(1)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._shapes)

    def __bool__(self) -> bool:
        # an empty registry is still a registry
        return True

    def __contains__(self, signature: object) -> bool:
        if isinstance(signature, Shape):
            signature = signature.signature

        with self._lock:
            keys = list(self._shapes)

        return any(sig == signature for (_, sig) in keys)

    def shapes(self) -> tuple[Shape, ...]:
        with self._lock:
            return tuple(self._shapes.values())

    def clear(self) -> None:
        with self._lock:
            self._shapes.clear()

    def _next_name(self) -> str:
        return f'{self.settings.shape_prefix}{next(self._ids)}'

    def resolve(
        self,
        column_types: Sequence[DataTypeLike],
        names: Sequence[str],
        hint: str | None = None,
    ) -> Shape:
        '''
        Return a shape with exactly `names` / `column_types` in order.

        `hint` names the shape (diagnostics only), otherwise a fresh
        `<shape_prefix><n>` name is generated for newly created shapes.

        '''
        column_types = tuple(column_types)
        names = tuple(names)
        if len(column_types) != len(names):
            raise SchemaError(
                f'Got {len(column_types)} column types but {len(names)} names'
            )

        if hint is not None and not (isinstance(hint, str) and hint):
            raise SchemaError(f'Shape name hint must be a non empty string, got {hint!r}')

        signature: Signature = tuple(
            zip(names, (normalize_dtype(t) for t in column_types))
        )

        with self._lock:
            if not self.settings.dedupe_shapes:
                return Shape(signature, name=hint or self._next_name())

            key = (hint, signature)
            shape = self._shapes.get(key)
            if shape is not None:
                log.debug(f'reusing shape {shape.name} for {list(names)}')
                return shape

            shape = Shape(signature, name=hint or self._next_name())
            self._shapes[key] = shape

        log.debug(f'created shape {shape.name} for {list(names)}')
        return shape


_default: ShapeRegistry | None = None
_default_lock = threading.Lock()


def default_registry() -> ShapeRegistry:
    global _default
    with _default_lock:
        if _default is None:
            _default = ShapeRegistry()

        return _default


def set_default_registry(registry: ShapeRegistry | None) -> None:
    '''
    Replace the process wide registry, `None` makes the next
    `default_registry()` call build a new one from the environment.

    '''
    global _default
    with _default_lock:
        _default = registry
