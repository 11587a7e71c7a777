'''
# Configuration

Settings are read from the environment once, when the process wide shape
registry is first requested:

    - COMPOSITE_FRAME_SHAPE_PREFIX: prefix for auto-generated shape names.
    - COMPOSITE_FRAME_DEDUPE_SHAPES: set to 0/false/no/off to make the
      registry build a new shape on every request.
    - COMPOSITE_FRAME_LOGLEVEL: default level used by `setup_logging`.

'''
from __future__ import annotations

import os
from typing import Literal, Mapping

import msgspec

from composite_frame.errors import ConfigError
from composite_frame.structs import FrozenStruct


LogLevels = Literal['debug', 'info', 'warning', 'error', 'critical']

env_prefix: str = 'COMPOSITE_FRAME_'

_false_strs: tuple[str, ...] = ('0', 'false', 'no', 'off')


class Settings(FrozenStruct, frozen=True):
    shape_prefix: str = 'CompositeFrame'
    dedupe_shapes: bool = True
    loglevel: LogLevels = 'warning'

    def __post_init__(self) -> None:
        if not self.shape_prefix.isidentifier():
            raise ConfigError(
                f'shape_prefix must be a valid identifier, got {self.shape_prefix!r}'
            )


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    '''
    Build `Settings` from `env` (defaults to `os.environ`), unset variables
    keep their defaults.

    '''
    env = os.environ if env is None else env
    raw: dict[str, str | bool] = {}

    if (prefix := env.get(f'{env_prefix}SHAPE_PREFIX')) is not None:
        raw['shape_prefix'] = prefix.strip()

    if (dedupe := env.get(f'{env_prefix}DEDUPE_SHAPES')) is not None:
        raw['dedupe_shapes'] = dedupe.strip().lower() not in _false_strs

    if (level := env.get(f'{env_prefix}LOGLEVEL')) is not None:
        raw['loglevel'] = level.strip().lower()

    try:
        return Settings.convert(raw)

    except msgspec.ValidationError as e:
        raise ConfigError(f'invalid environment configuration: {e}') from e
