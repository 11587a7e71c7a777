from concurrent.futures import ThreadPoolExecutor

import polars as pl
import pytest

from composite_frame import CompositeFrame, ConfigError, SchemaError
from composite_frame.config import Settings, load_settings
from composite_frame.registry import ShapeRegistry, default_registry


def test_resolve_count_mismatch(registry):
    with pytest.raises(SchemaError):
        registry.resolve([pl.Int64, pl.String], ['x'])


def test_resolve_reuses_equivalent_shapes(registry):
    a = registry.resolve([pl.Int64, pl.String], ['x', 'y'])
    b = registry.resolve([pl.Int64(), pl.String()], ['x', 'y'])

    assert a is b
    assert len(registry) == 1
    assert a.signature in registry
    assert a in registry

    c = registry.resolve([pl.Int64, pl.Float64], ['x', 'y'])
    assert c is not a
    assert c != a
    assert len(registry) == 2


def test_resolve_generated_names(registry):
    a = registry.resolve([pl.Int64], ['x'])
    b = registry.resolve([pl.Int64], ['y'])

    assert a.name.startswith('CompositeFrame')
    assert b.name.startswith('CompositeFrame')
    assert a.name != b.name


def test_resolve_hint(registry):
    plain = registry.resolve([pl.Int64], ['x'])
    tagged = registry.resolve([pl.Int64], ['x'], hint='Tagged')

    assert tagged.name == 'Tagged'
    # the tag carries no weight for equality
    assert tagged == plain
    assert registry.resolve([pl.Int64], ['x'], hint='Tagged') is tagged

    with pytest.raises(SchemaError):
        registry.resolve([pl.Int64], ['x'], hint='')


def test_resolve_duplicate_names(registry):
    with pytest.raises(SchemaError):
        registry.resolve([pl.Int64, pl.Int64], ['x', 'x'])


def test_resolve_without_dedupe():
    registry = ShapeRegistry(Settings(shape_prefix='Tbl', dedupe_shapes=False))

    a = registry.resolve([pl.Int64], ['x'])
    b = registry.resolve([pl.Int64], ['x'])

    assert a is not b
    assert a == b
    assert a.name.startswith('Tbl')
    assert len(registry) == 0


def test_concurrent_resolution(registry):
    def resolve(_):
        return registry.resolve([pl.Int64, pl.String], ['x', 'y'])

    with ThreadPoolExecutor(max_workers=8) as pool:
        shapes = list(pool.map(resolve, range(200)))

    assert all(s is shapes[0] for s in shapes)
    assert len(registry) == 1


def test_clear(registry):
    registry.resolve([pl.Int64], ['x'])
    registry.clear()
    assert len(registry) == 0
    assert registry.shapes() == ()


def test_frames_use_given_registry(registry):
    frame = CompositeFrame(x=[1, 2], registry=registry)

    assert frame.registry is registry
    assert frame.shape in registry

    # derived frames resolve through the same registry
    sub = frame.transform(y=['a', 'b'])
    assert sub.registry is registry
    assert len(registry) == 2


def test_empty_registry_is_kept(fresh_default_registry):
    mine = ShapeRegistry(Settings(shape_prefix='Mine'))
    assert mine

    frame = CompositeFrame.from_columns([[1, 2]], ['x'], registry=mine)
    assert frame.registry is mine
    assert frame.shape.name == 'Mine1'
    assert len(mine) == 1
    assert len(fresh_default_registry) == 0

    class Points(CompositeFrame, columns=(('px', pl.Float64),), registry=ShapeRegistry()):
        ...

    assert Points.declared_shape not in fresh_default_registry
    assert Points(px=[1.0]).registry is not fresh_default_registry


def test_membership_while_resolving(registry):
    def resolve(i):
        registry.resolve([pl.Int64], [f'c{i}'])
        return ((f'c{i}', pl.Int64()),) in registry

    with ThreadPoolExecutor(max_workers=8) as pool:
        found = list(pool.map(resolve, range(200)))

    assert all(found)
    assert len(registry) == 200


def test_default_registry(fresh_default_registry):
    assert default_registry() is fresh_default_registry

    frame = CompositeFrame(x=[1.0])
    assert frame.registry is fresh_default_registry
    assert len(fresh_default_registry) == 1


def test_load_settings():
    assert load_settings({}) == Settings()

    settings = load_settings({
        'COMPOSITE_FRAME_SHAPE_PREFIX': 'Tbl',
        'COMPOSITE_FRAME_DEDUPE_SHAPES': 'off',
        'COMPOSITE_FRAME_LOGLEVEL': 'DEBUG',
    })
    assert settings.shape_prefix == 'Tbl'
    assert settings.dedupe_shapes is False
    assert settings.loglevel == 'debug'

    assert load_settings({'COMPOSITE_FRAME_DEDUPE_SHAPES': '1'}).dedupe_shapes

    custom = Settings.from_other(settings, dedupe_shapes=True)
    assert custom.shape_prefix == 'Tbl'
    assert custom.dedupe_shapes is True


def test_load_settings_invalid():
    with pytest.raises(ConfigError):
        load_settings({'COMPOSITE_FRAME_LOGLEVEL': 'chatty'})

    with pytest.raises(ConfigError):
        load_settings({'COMPOSITE_FRAME_SHAPE_PREFIX': '1abc'})
