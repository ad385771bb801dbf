"""CloudStack query-string signing filter."""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from urllib.parse import quote

from ..exceptions import RequestFilterError
from ..rest.request import Request

logger = logging.getLogger(__name__)


class QuerySigner:
    """Appends ``apiKey`` and an HMAC-SHA1 ``signature`` computed over the whole query.

    The canonical string is every ``name=value`` pair (values percent-encoded),
    sorted, joined with ``&`` and lower-cased. Signing the same query with the
    same credential always gives the same signature.
    """

    def __init__(self, api_key: str, secret_key: str):
        self._api_key = api_key
        self._secret_key = secret_key

    def filter(self, request: Request) -> Request:
        if not self._api_key or not self._secret_key:
            raise RequestFilterError(f"Cannot sign {request.command}: API key and secret key are required")

        request = request.with_query_param("apiKey", self._api_key)
        string_to_sign = self.create_string_to_sign(request.query)
        logger.debug("Signing %s", request.command, extra={"command": request.command})
        return request.with_query_param("signature", self.sign(string_to_sign))

    @staticmethod
    def create_string_to_sign(query: tuple[tuple[str, str], ...]) -> str:
        pairs = sorted(f"{name}={quote(value, safe='')}" for name, value in query)
        return "&".join(pairs).lower()

    def sign(self, string_to_sign: str) -> str:
        digest = hmac.new(self._secret_key.encode(), string_to_sign.encode(), hashlib.sha1).digest()
        return base64.b64encode(digest).decode()
