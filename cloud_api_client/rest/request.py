"""Transport-level request representation and query-string encoding."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from urllib.parse import quote

# Left literal in the wire query string; signers canonicalize with their own rules.
_WIRE_SAFE = "/:,"


def encode_value(value: str, safe: str = _WIRE_SAFE) -> str:
    """Percent-encode a query value. Spaces become %20, never '+'."""
    return quote(value, safe=safe)


def encode_query(pairs: tuple[tuple[str, str], ...] | list[tuple[str, str]]) -> str:
    """Render ordered (name, value) pairs as a query string, preserving order and duplicates."""
    return "&".join(f"{quote(name, safe='')}={encode_value(value)}" for name, value in pairs)


@dataclass(frozen=True)
class Request:
    """One HTTP request. Frozen: filters return modified copies instead of mutating."""

    method: str
    endpoint: str
    query: tuple[tuple[str, str], ...] = ()
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes | str | None = None
    command: str | None = None  # logical operation name, for logging and errors

    @property
    def query_string(self) -> str:
        return encode_query(self.query)

    @property
    def url(self) -> str:
        if not self.query:
            return self.endpoint
        return f"{self.endpoint}?{self.query_string}"

    @property
    def request_line(self) -> str:
        return f"{self.method} {self.url} HTTP/1.1"

    @property
    def header_map(self) -> dict[str, list[str]]:
        """Headers grouped by name, values in insertion order."""
        grouped: dict[str, list[str]] = {}
        for name, value in self.headers:
            grouped.setdefault(name, []).append(value)
        return grouped

    def query_values(self, name: str) -> list[str]:
        return [value for key, value in self.query if key == name]

    def with_query_param(self, name: str, value: str) -> Request:
        return replace(self, query=self.query + ((name, value),))

    def with_header(self, name: str, value: str) -> Request:
        return replace(self, headers=self.headers + ((name, value),))


@dataclass
class RequestDraft:
    """Mutable accumulator used while a request is being assembled."""

    method: str
    endpoint: str
    command: str | None = None
    query: list[tuple[str, str]] = field(default_factory=list)
    headers: list[tuple[str, str]] = field(default_factory=list)
    form: list[tuple[str, str]] = field(default_factory=list)
    body: bytes | str | None = None

    def add_query_param(self, name: str, value: str) -> None:
        self.query.append((name, value))

    def add_header(self, name: str, value: str) -> None:
        self.headers.append((name, value))

    def add_form_param(self, name: str, value: str) -> None:
        self.form.append((name, value))

    def freeze(self) -> Request:
        return Request(
            method=self.method,
            endpoint=self.endpoint,
            query=tuple(self.query),
            headers=tuple(self.headers),
            body=encode_query(self.form) if self.form else self.body,
            command=self.command,
        )
