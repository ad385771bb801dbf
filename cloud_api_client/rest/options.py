"""Base class for the optional, ordered query parameters an operation accepts."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any, TypeVar

from ..exceptions import RequestContractError

_O = TypeVar("_O", bound="QueryOptions")


def render_value(value: Any) -> str:
    """Convert a Python argument into its query-string form."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return render_value(value.value)
    if isinstance(value, (str, bytes)):
        return value.decode() if isinstance(value, bytes) else value
    if isinstance(value, Iterable):
        return ",".join(render_value(v) for v in value)
    return str(value)


class QueryOptions:
    """Ordered bag of optional query parameters.

    Subclasses expose fluent setters that call ``_set``; parameters are emitted
    in the order they were first set. ``None`` leaves a parameter out.

        opts = ListZonesOptions().available(True).keyword("edge")
        opts.as_query()  # [("available", "true"), ("keyword", "edge")]
    """

    def __init__(self) -> None:
        self._params: dict[str, str] = {}

    def _set(self: _O, name: str, value: Any) -> _O:
        if value is None:
            self._params.pop(name, None)
        else:
            self._params[name] = render_value(value)
        return self

    def as_query(self) -> list[tuple[str, str]]:
        return list(self._params.items())

    @classmethod
    def merge(cls: type[_O], *options: QueryOptions | None) -> _O:
        """Combine several option objects; later values win, first-set order is kept."""
        merged = cls()
        for opts in options:
            if opts is None:
                continue
            if not isinstance(opts, QueryOptions):
                raise RequestContractError(f"Cannot merge {type(opts).__name__} into {cls.__name__}")
            for name, value in opts.as_query():
                merged._params[name] = value
        return merged

    def __bool__(self) -> bool:
        return bool(self._params)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryOptions):
            return NotImplemented
        return type(self) is type(other) and self.as_query() == other.as_query()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._params!r})"
