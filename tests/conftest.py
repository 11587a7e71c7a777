import pytest

from composite_frame.config import Settings
from composite_frame.registry import (
    ShapeRegistry,
    default_registry,
    set_default_registry,
)


@pytest.fixture
def registry() -> ShapeRegistry:
    return ShapeRegistry(Settings())


@pytest.fixture
def fresh_default_registry():
    prev = default_registry()
    set_default_registry(ShapeRegistry(Settings()))
    yield default_registry()
    set_default_registry(prev)
