"""Tests for the HTTP transport."""

from unittest.mock import MagicMock

import pytest
import requests
import responses

from cloud_api_client.exceptions import TransportError
from cloud_api_client.rest.builder import RequestBuilder
from cloud_api_client.rest.descriptor import FORM, OperationDescriptor, Param
from cloud_api_client.rest.fallbacks import MapHttp4xxCodesToExceptions
from cloud_api_client.rest.parsers import IdentityParser
from cloud_api_client.rest.request import Request
from cloud_api_client.rest.transport import TransportInvoker

ENDPOINT = "http://localhost:8080/client/api"


def _request(**overrides):
    fields = {
        "method": "GET",
        "endpoint": ENDPOINT,
        "query": (("command", "listZones"), ("keyword", "ad hoc")),
        "headers": (("Accept", "application/json"),),
        "command": "listZones",
    }
    fields.update(overrides)
    return Request(**fields)


@pytest.fixture
def transport():
    invoker = TransportInvoker(timeout=5, max_workers=2)
    yield invoker
    invoker.close()


class TestSend:
    @responses.activate
    def test_sends_exact_url_and_headers(self, transport):
        responses.add(responses.GET, ENDPOINT, json={"ok": True})
        resp = transport.send(_request(headers=(("Accept", "application/json"), ("X-Multi", "a"), ("X-Multi", "b"))))
        assert resp.status_code == 200
        sent = responses.calls[0].request
        assert sent.url == f"{ENDPOINT}?command=listZones&keyword=ad%20hoc"
        assert sent.headers["Accept"] == "application/json"
        assert sent.headers["X-Multi"] == "a, b"

    @responses.activate
    def test_error_status_not_interpreted(self, transport):
        responses.add(responses.GET, ENDPOINT, body="nope", status=503)
        assert transport.send(_request()).status_code == 503

    @responses.activate
    def test_sends_body(self, transport):
        responses.add(responses.POST, ENDPOINT, status=201)
        transport.send(_request(method="POST", query=(), body=b"payload"))
        assert responses.calls[0].request.body == b"payload"

    @responses.activate
    def test_sends_form_body_from_builder(self, transport):
        descriptor = OperationDescriptor(
            name="register_ssh_key_pair",
            command="registerSSHKeyPair",
            parser=IdentityParser(),
            fallback=MapHttp4xxCodesToExceptions(),
            method="POST",
            params=(Param("name"), Param("public_key", "publickey", placement=FORM)),
        )
        request = RequestBuilder(ENDPOINT).build(descriptor, "deploy", "ssh-rsa AAAA user@host")
        responses.add(responses.POST, ENDPOINT, json={})
        transport.send(request)
        sent = responses.calls[0].request
        assert sent.url == f"{ENDPOINT}?command=registerSSHKeyPair&name=deploy"
        assert sent.body == "publickey=ssh-rsa%20AAAA%20user%40host"
        assert sent.headers["Content-Type"] == "application/x-www-form-urlencoded"

    @responses.activate
    def test_connection_error_raises_transport_error(self, transport):
        responses.add(responses.GET, ENDPOINT, body=requests.ConnectionError("refused"))
        with pytest.raises(TransportError) as exc_info:
            transport.send(_request())
        assert exc_info.value.request_line == f"GET {ENDPOINT}?command=listZones&keyword=ad%20hoc HTTP/1.1"
        assert isinstance(exc_info.value.__cause__, requests.ConnectionError)

    @responses.activate
    def test_transport_error_masks_credentials(self, transport):
        signed = _request(query=(
            ("command", "listZones"), ("apiKey", "identity"), ("signature", "wLSqVlxuiLXZcHi9IoSAwXNRGFs="),
        ))
        responses.add(
            responses.GET, ENDPOINT,
            body=requests.ConnectionError(f"Max retries exceeded with url: {signed.url} (Caused by refused)"),
        )
        with pytest.raises(TransportError) as exc_info:
            transport.send(signed)
        assert exc_info.value.request_line == f"GET {ENDPOINT}?command=listZones&apiKey=***&signature=*** HTTP/1.1"
        message = str(exc_info.value)
        assert "apiKey=***&signature=***" in message
        assert "identity" not in message
        assert "wLSqVlxuiLXZcHi9IoSAwXNRGFs" not in message

    def test_timeout_and_verify_passed_to_session(self):
        session = MagicMock(spec=requests.Session)
        session.request.return_value.status_code = 200
        invoker = TransportInvoker(timeout=7, verify_ssl=False, session=session)
        invoker.send(_request())
        assert session.verify is False
        _, kwargs = session.request.call_args
        assert kwargs["timeout"] == 7


class TestSubmit:
    @responses.activate
    def test_submit_returns_future(self, transport):
        responses.add(responses.GET, ENDPOINT, json={"ok": True})
        future = transport.submit(_request())
        assert future.result(timeout=5).json() == {"ok": True}

    @responses.activate
    def test_submit_failure_stored_on_future(self, transport):
        responses.add(responses.GET, ENDPOINT, body=requests.ConnectionError("refused"))
        future = transport.submit(_request())
        assert isinstance(future.exception(timeout=5), TransportError)

    def test_close_closes_session(self):
        session = MagicMock(spec=requests.Session)
        with TransportInvoker(session=session):
            pass
        session.close.assert_called_once()
