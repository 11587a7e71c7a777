from typing import Any, Self

import msgspec


class _Struct:
    @classmethod
    def from_other(cls, other: Self, **kwargs) -> Self:
        params = other.to_dict()
        params.update(kwargs)
        return cls.convert(params)

    @classmethod
    def from_json(cls, s: str | bytes) -> Self:
        return msgspec.json.decode(s, type=cls)

    @classmethod
    def convert(cls, obj: Any) -> Self:
        return msgspec.convert(obj, type=cls)

    def to_dict(self) -> dict:
        return msgspec.to_builtins(self)

    def to_json(self) -> str:
        return msgspec.json.encode(self).decode()


class Struct(msgspec.Struct, _Struct): ...


class FrozenStruct(msgspec.Struct, _Struct, frozen=True): ...
