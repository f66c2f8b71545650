"""Tests for vaultcore.vault: the client wiring config, transport, retry and JSON."""

from unittest.mock import patch

import pytest
from prometheus_client import CollectorRegistry
from requests.structures import CaseInsensitiveDict

from vaultcore.config import Config
from vaultcore.errors import ConnectError, VaultResponseError
from vaultcore.json_parser import parse
from vaultcore.json_value import JsonObject
from vaultcore.metrics import Metrics
from vaultcore.transport import Response
from vaultcore.vault import NAMESPACE_HEADER, TOKEN_HEADER, VaultClient, VaultResponse

JSON = CaseInsensitiveDict({"Content-Type": "application/json"})
LEASE = b'{"lease_id":"12345","renewable":false,"lease_duration":10000,"data":{"value":"mock"}}'


def _cfg(**kw):
    kw.setdefault("address", "http://127.0.0.1:8999")
    kw.setdefault("token", "mock_token")
    return Config(**kw)


@pytest.fixture
def execute():
    with patch("vaultcore.vault.execute") as m:
        m.return_value = Response(200, JSON, LEASE)
        yield m


def test_read_builds_request(execute):
    client = VaultClient(_cfg(namespace="ns1", open_timeout=1, read_timeout=2))
    r = client.read("/secret/hello")
    req = execute.call_args.args[0]
    assert req.method == "GET"
    assert req.url == "http://127.0.0.1:8999/v1/secret/hello"
    assert (TOKEN_HEADER, "mock_token") in req.headers
    assert (NAMESPACE_HEADER, "ns1") in req.headers
    assert (req.connect_timeout, req.read_timeout) == (1, 2)
    assert req.body is None
    assert r.attempt == 1 and r.retries == 0

def test_response_envelope(execute):
    r = VaultClient(_cfg()).read("secret/hello")
    assert r.status == 200
    assert r.data.get_string("value") == "mock"
    assert r.lease_id == "12345"
    assert r.renewable is False
    assert r.lease_duration == 10000

def test_write_encodes_json_body(execute):
    execute.return_value = Response(204, CaseInsensitiveDict(), b"")
    r = VaultClient(_cfg()).write("secret/hello", {"value": "world", "n": 1})
    req = execute.call_args.args[0]
    assert req.method == "POST"
    assert parse(req.body) == JsonObject({"value": "world", "n": 1})
    assert ("Content-Type", "application/json") in req.headers
    assert r.status == 204
    assert r.json() == JsonObject()
    assert r.data.is_empty()
    assert r.lease_id is None

def test_list_adds_query_param(execute):
    execute.return_value = Response(200, JSON, b'{"data":{"keys":["a","b/"]}}')
    r = VaultClient(_cfg()).list("secret/")
    req = execute.call_args.args[0]
    assert req.params == [("list", "true")]
    assert r.keys == ["a", "b/"]

def test_delete(execute):
    execute.return_value = Response(204, CaseInsensitiveDict(), b"")
    VaultClient(_cfg()).delete("secret/hello")
    assert execute.call_args.args[0].method == "DELETE"

def test_client_errors_are_returned_not_retried(execute):
    execute.return_value = Response(403, JSON, b'{"errors":["permission denied"]}')
    r = VaultClient(_cfg(max_attempts=3, retry_interval_ms=0)).read("secret/x")
    assert execute.call_count == 1
    assert r.status == 403
    assert r.errors == ["permission denied"]

def test_server_errors_are_retried(execute):
    execute.side_effect = [Response(500, JSON, b"{}")] * 5 + [Response(200, JSON, LEASE)]
    r = VaultClient(_cfg()).with_retries(6, 0).read("secret/hello")
    assert execute.call_count == 6
    assert r.attempt == 6
    assert r.retries == 5
    assert r.data.get_string("value") == "mock"

def test_exhausted_server_errors_carry_status_and_body(execute):
    execute.return_value = Response(502, CaseInsensitiveDict(), b"bad gateway")
    with pytest.raises(VaultResponseError) as e:
        VaultClient(_cfg(max_attempts=2, retry_interval_ms=0)).read("secret/x")
    assert e.value.status_code == 502
    assert e.value.body == b"bad gateway"
    assert e.value.attempt == 2
    assert "bad gateway" in str(e.value)

def test_connection_failure_propagates(execute):
    execute.side_effect = ConnectError("refused")
    with pytest.raises(ConnectError) as e:
        VaultClient(_cfg()).read("secret/x")
    assert e.value.attempt == 1

def test_with_retries_does_not_mutate_receiver():
    client = VaultClient(_cfg())
    other = client.with_retries(5, 100)
    assert client.retry.max_attempts == 1
    assert other.retry.max_attempts == 5
    assert other.retry.interval_ms == 100

def test_non_json_body_reads_as_empty_object():
    r = VaultResponse(Response(404, CaseInsensitiveDict({"Content-Type": "text/html"}), b"<html/>"), 1)
    assert r.json() == JsonObject()
    assert r.errors == []


# ---------------------------------------------------------------------------
# metrics
# ---------------------------------------------------------------------------

def test_metrics_recorded(execute):
    registry = CollectorRegistry()
    metrics = Metrics(registry=registry)
    execute.side_effect = [Response(500, JSON, b"{}"), Response(200, JSON, LEASE)]
    VaultClient(_cfg(max_attempts=2, retry_interval_ms=0), metrics).read("secret/hello")
    assert registry.get_sample_value("vault_client_attempts_total", {"method": "GET"}) == 2
    assert registry.get_sample_value("vault_client_requests_total", {"method": "GET", "outcome": "ok"}) == 1
    assert registry.get_sample_value("vault_client_last_status_code") == 200

def test_metrics_on_failure(execute):
    registry = CollectorRegistry()
    execute.side_effect = ConnectError("refused")
    with pytest.raises(ConnectError):
        VaultClient(_cfg(), Metrics(registry=registry)).read("secret/x")
    assert registry.get_sample_value("vault_client_requests_total", {"method": "GET", "outcome": "error"}) == 1
    assert registry.get_sample_value("vault_client_last_error_time_seconds") > 0

def test_metrics_port_from_config_starts_exporter():
    with patch("vaultcore.metrics.start_http_server") as server:
        client = VaultClient(_cfg(metrics_port=9754))
        assert isinstance(client.metrics, Metrics)
        server.assert_called_once_with(9754, registry=client.metrics.registry)
        client.with_retries(3, 0)
        server.assert_called_once()

def test_no_exporter_without_port():
    with patch("vaultcore.metrics.start_http_server") as server:
        assert VaultClient(_cfg()).metrics is None
    server.assert_not_called()

def test_delete_returns_client_errors(execute):
    execute.return_value = Response(404, JSON, b'{"errors":[]}')
    r = VaultClient(_cfg(max_attempts=3, retry_interval_ms=0)).delete("secret/missing")
    assert r.status == 404
    assert execute.call_count == 1
