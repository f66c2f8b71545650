"""Tests for vaultcore.jsonlog."""

import json
import logging

import pytest

from vaultcore.jsonlog import REDACTED, jlog


@pytest.fixture
def records(caplog):
    caplog.set_level(logging.DEBUG, logger="vaultcore")
    return lambda: [json.loads(r.getMessage()) for r in caplog.records if r.name == "vaultcore"]


def test_one_json_line_per_event(records):
    jlog("warning", "config_value_ignored", variable="VAULT_TIMEOUT", value="soon")
    (rec,) = records()
    assert rec["level"] == "warning"
    assert rec["msg"] == "config_value_ignored"
    assert rec["variable"] == "VAULT_TIMEOUT"
    assert "ts" in rec

def test_secrets_are_redacted(records):
    jlog("info", "request", token="s.abc", headers={"X-Vault-Token": "s.abc", "Accept": "application/json"},
         items=[{"password": "hunter2"}])
    (rec,) = records()
    assert rec["token"] == REDACTED
    assert rec["headers"] == {"X-Vault-Token": REDACTED, "Accept": "application/json"}
    assert rec["items"] == [{"password": REDACTED}]
    assert "s.abc" not in json.dumps(rec)

def test_disabled_level_is_skipped(caplog):
    caplog.set_level(logging.ERROR, logger="vaultcore")
    jlog("debug", "http_exchange", status=200)
    assert not [r for r in caplog.records if r.name == "vaultcore"]

def test_unserialisable_values_use_str(records):
    jlog("error", "failed", error=ValueError("boom"))
    assert records()[0]["error"] == "boom"
