"""Static metadata binding a remote command to its request shape and result strategies."""

from __future__ import annotations

from dataclasses import dataclass, field

from . import ExceptionParser, ResponseParser
from .options import QueryOptions

QUERY = "query"
FORM = "form"
BODY = "body"

_PLACEMENTS = (QUERY, FORM, BODY)
_BODILESS_METHODS = frozenset({"GET", "HEAD", "DELETE"})


@dataclass(frozen=True)
class Param:
    """One declared argument of an operation.

    ``placement`` decides where the bound value goes: the query string, a
    form-encoded body field, or the raw request body.
    """

    name: str
    wire_name: str = ""  # defaults to name
    required: bool = True
    placement: str = QUERY

    def __post_init__(self) -> None:
        if self.placement not in _PLACEMENTS:
            raise ValueError(f"Param {self.name}: placement must be one of {_PLACEMENTS}, got '{self.placement}'")

    @property
    def query_name(self) -> str:
        return self.wire_name or self.name


@dataclass(frozen=True)
class OperationDescriptor:
    """Immutable description of one remote operation, shared by all calls to it."""

    name: str
    command: str
    parser: ResponseParser
    fallback: ExceptionParser
    method: str = "GET"
    path: str = ""
    params: tuple[Param, ...] = ()
    constant_params: tuple[tuple[str, str], ...] = ()
    options_type: type[QueryOptions] | None = None
    accept: str | None = "application/json"
    content_type: str | None = None  # for a BODY param; FORM params always send form encoding
    tags: frozenset[str] = field(default_factory=frozenset)  # e.g. {"list"}

    def __post_init__(self) -> None:
        names = [p.name for p in self.params]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate parameter names in operation {self.name}: {names}")

        placements = [p.placement for p in self.params]
        if placements.count(BODY) > 1:
            raise ValueError(f"Operation {self.name} declares more than one body parameter")
        if BODY in placements and FORM in placements:
            raise ValueError(f"Operation {self.name} mixes form and body parameters")
        if self.method.upper() in _BODILESS_METHODS and (BODY in placements or FORM in placements):
            raise ValueError(f"Operation {self.name} cannot send a request body with {self.method}")

    @property
    def is_list(self) -> bool:
        return "list" in self.tags
