'''
Misc internal utilities

'''
from datetime import datetime, timezone
from numbers import Integral
from typing import Any, TypeGuard


epoch = datetime(year=1970, month=1, day=1, tzinfo=timezone.utc)


def gennames(n: int) -> list[str]:
    '''
    Default column names for `n` unnamed columns: x1, x2, ..., xn

    '''
    return [f'x{i}' for i in range(1, n + 1)]


def is_position(obj: Any) -> TypeGuard[int]:
    '''
    True for python & numpy integers, bools are rejected even though they
    subclass `int`.

    '''
    return isinstance(obj, Integral) and not isinstance(obj, bool)
