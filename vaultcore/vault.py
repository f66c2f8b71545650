import time
from dataclasses import replace

from .config import Config
from .errors import VaultError, VaultResponseError
from .json_parser import parse
from .json_value import JsonObject, JsonValue, value_of
from .json_writer import write
from .jsonlog import jlog
from .metrics import Metrics
from .retry import RetryPolicy
from .transport import Request, Response, execute

TOKEN_HEADER = "X-Vault-Token"
NAMESPACE_HEADER = "X-Vault-Namespace"


class VaultResponse:
    """A Vault reply plus the attempt that produced it."""

    def __init__(self, response: Response, attempt: int):
        self.response, self.attempt = response, attempt
        self._json: JsonValue | None = None

    @property
    def status(self) -> int: return self.response.status

    @property
    def body(self) -> bytes: return self.response.body

    @property
    def retries(self) -> int: return self.attempt - 1

    def json(self) -> JsonValue:
        # пустое тело (204) и не-JSON ответы дают пустой объект
        if self._json is None:
            if not self.body.strip() or self.response.mime_type not in (None, "application/json"):
                self._json = JsonObject()
            else:
                self._json = parse(self.body)
        return self._json

    def _envelope(self) -> JsonObject:
        j = self.json()
        return j.as_object() if j.is_object() else JsonObject()

    @property
    def data(self) -> JsonObject:
        d = self._envelope().get("data")
        return d.as_object() if d is not None and d.is_object() else JsonObject()

    @property
    def lease_id(self) -> str | None:
        v = self._envelope().get("lease_id")
        return v.as_string() if v is not None and v.is_string() else None

    @property
    def renewable(self) -> bool | None:
        v = self._envelope().get("renewable")
        return v.as_boolean() if v is not None and v.is_boolean() else None

    @property
    def lease_duration(self) -> int | None:
        v = self._envelope().get("lease_duration")
        return v.as_long() if v is not None and v.is_number() else None

    @property
    def keys(self) -> list[str]:
        k = self.data.get("keys")
        if k is None or not k.is_array():
            return []
        return [x.as_string() for x in k if x.is_string()]

    @property
    def errors(self) -> list[str]:
        e = self._envelope().get("errors")
        if e is None or not e.is_array():
            return []
        return [x.as_string() for x in e if x.is_string()]


class VaultClient:
    def __init__(self, cfg: Config, metrics: Metrics | None = None):
        if metrics is None and cfg.metrics_port is not None:
            metrics = Metrics(cfg.metrics_port)
        self.cfg, self.metrics = cfg, metrics
        self.tls = cfg.tls_policy()
        self.retry = RetryPolicy(cfg.max_attempts, cfg.retry_interval_ms)

    def with_retries(self, max_attempts: int, interval_ms: int) -> "VaultClient":
        cfg = replace(self.cfg, max_attempts=max_attempts, retry_interval_ms=interval_ms)
        return VaultClient(cfg, self.metrics)

    def _url(self, path: str) -> str:
        return f"{self.cfg.address.rstrip('/')}/v1/{path.lstrip('/')}"

    def request(self, method: str, path: str, data=None, params=None) -> VaultResponse:
        headers = [(TOKEN_HEADER, self.cfg.token), (NAMESPACE_HEADER, self.cfg.namespace)]
        body = None
        if data is not None:
            body = write(value_of(data)).encode("utf-8")
            headers.append(("Content-Type", "application/json"))
        req = Request(method, self._url(path), headers, body, list((params or {}).items()),
                      self.cfg.open_timeout, self.cfg.read_timeout, self.tls)

        def attempt(_n: int) -> Response:
            if self.metrics: self.metrics.attempt(method)
            r = execute(req)
            # 4xx не ошибка транспорта: вызывающий читает errors из тела
            if not (200 <= r.status < 300 or 400 <= r.status < 500):
                raise VaultResponseError(r.status, r.body)
            return r

        try:
            r, n = self.retry.run(attempt)
        except VaultError as e:
            if self.metrics: self.metrics.failure(method, time.time())
            jlog("error", "vault_request_failed", method=method, path=path,
                 attempt=e.attempt, status=e.status_code, error=str(e))
            raise
        if self.metrics: self.metrics.response(method, r.status, time.time())
        return VaultResponse(r, n)

    def read(self, path: str, params: dict | None = None) -> VaultResponse:
        return self.request("GET", path, params=params)

    def write(self, path: str, data=None) -> VaultResponse:
        return self.request("POST", path, data=value_of(data) if data is not None else JsonObject())

    def delete(self, path: str) -> VaultResponse:
        # как и остальные методы: 2xx и 4xx возвращаются, не только 204
        return self.request("DELETE", path)

    def list(self, path: str) -> VaultResponse:
        return self.request("GET", path, params={"list": "true"})
