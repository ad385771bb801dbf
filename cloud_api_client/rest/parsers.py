"""Response parser strategies: one per operation, selected when its descriptor is built."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import requests

from ..exceptions import ResponseParseError

Deserializer = Callable[[Any], Any]


def _decode_json(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ResponseParseError(f"Response body is not valid JSON: {exc}", response.text) from exc


def _expect_object(value: Any, what: str, body: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ResponseParseError(f"Expected {what} to be a JSON object, got {type(value).__name__}", body)
    return value


def _unwrap_envelope(body: Any, wrapper: str) -> dict[str, Any]:
    envelope = _expect_object(body, "response envelope", body)
    if wrapper not in envelope:
        raise ResponseParseError(f"Response envelope has no '{wrapper}' wrapper (keys: {sorted(envelope)})", body)
    return _expect_object(envelope[wrapper], f"'{wrapper}'", body)


class _Parser:
    def __init__(self, into: Deserializer | None = None):
        self._into = into

    def _convert(self, value: Any, body: Any) -> Any:
        if self._into is None:
            return value
        try:
            return self._into(value)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ResponseParseError(f"Could not deserialize value: {exc}", body) from exc

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class IdentityParser(_Parser):
    """Returns the raw body bytes unchanged."""

    def parse(self, response: requests.Response) -> bytes:
        return response.content


class UnwrapFirstNamedValue(_Parser):
    """Returns the value under the first of ``names`` present in a top-level envelope.

    ``{"deployvirtualmachineresponse": {"id": "5", "jobid": "7"}}`` -> ``{"id": "5", "jobid": "7"}``
    """

    def __init__(self, *names: str, into: Deserializer | None = None):
        if not names:
            raise ValueError("UnwrapFirstNamedValue needs at least one name")
        super().__init__(into)
        self.names = names

    def parse(self, response: requests.Response) -> Any:
        body = _decode_json(response)
        envelope = _expect_object(body, "response envelope", body)
        for name in self.names:
            if name in envelope:
                value = envelope[name]
                if self._into is not None:
                    value = _expect_object(value, f"'{name}'", body)
                return self._convert(value, body)
        raise ResponseParseError(f"None of {list(self.names)} found in response (keys: {sorted(envelope)})", body)

    def __repr__(self) -> str:
        return f"UnwrapFirstNamedValue{self.names!r}"


class UnwrapNestedValue(_Parser):
    """Returns the single element under ``{wrapper: {key: ...}}``, or None when the key is absent."""

    def __init__(self, wrapper: str, key: str, into: Deserializer | None = None):
        super().__init__(into)
        self.wrapper = wrapper
        self.key = key

    def parse(self, response: requests.Response) -> Any:
        body = _decode_json(response)
        inner = _unwrap_envelope(body, self.wrapper)
        value = inner.get(self.key)
        if value is None:
            return None
        if isinstance(value, list):
            if not value:
                return None
            if len(value) > 1:
                raise ResponseParseError(
                    f"Expected at most one '{self.key}' in '{self.wrapper}', got {len(value)}", body
                )
            value = value[0]
        return self._convert(_expect_object(value, f"'{self.key}'", body), body)

    def __repr__(self) -> str:
        return f"UnwrapNestedValue({self.wrapper!r}, {self.key!r})"


class UnwrapNestedValueInSet(_Parser):
    """Returns every element under ``{wrapper: {"count": N, key: [...]}}`` as a list.

    CloudStack omits ``key`` entirely when nothing matches, which yields ``[]``.
    Repeated elements are dropped, first occurrence wins.
    """

    def __init__(self, wrapper: str, key: str, into: Deserializer | None = None):
        super().__init__(into)
        self.wrapper = wrapper
        self.key = key

    def parse(self, response: requests.Response) -> list[Any]:
        body = _decode_json(response)
        inner = _unwrap_envelope(body, self.wrapper)
        values = inner.get(self.key)
        if values is None:
            return []
        if not isinstance(values, list):
            raise ResponseParseError(f"Expected '{self.key}' to be a JSON array, got {type(values).__name__}", body)

        result: list[Any] = []
        seen: set[str] = set()
        for value in values:
            marker = json.dumps(value, sort_keys=True, default=str)
            if marker in seen:
                continue
            seen.add(marker)
            if self._into is not None:
                value = _expect_object(value, f"element of '{self.key}'", body)
            result.append(self._convert(value, body))
        return result

    def __repr__(self) -> str:
        return f"UnwrapNestedValueInSet({self.wrapper!r}, {self.key!r})"


class ReleasePayloadAndReturnVoid(_Parser):
    """Drains and releases the connection, returns None."""

    def parse(self, response: requests.Response) -> None:
        response.close()
        return None
