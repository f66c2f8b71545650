from dataclasses import dataclass, fields
from pathlib import Path
import os

from .errors import ConfigError
from .jsonlog import jlog
from .tls import TlsPolicy

_TRUE = ("true", "1", "yes", "on")


@dataclass(frozen=True)
class Config:
    address: str
    token: str
    namespace: str | None = None

    open_timeout: float | None = 5.0
    read_timeout: float | None = 5.0

    ssl_verify: bool = True
    ssl_cert: str | None = None        # путь к PEM с доверенным CA

    max_attempts: int = 1
    retry_interval_ms: int = 1000
    metrics_port: int | None = None

    @classmethod
    def from_env(cls, environ=None, home=None, **overrides) -> "Config":
        """Resolve the configuration once; explicit ``overrides`` beat the environment."""
        env = os.environ if environ is None else environ
        unknown = set(overrides) - {f.name for f in fields(cls)}
        if unknown:
            raise TypeError(f"unknown config fields: {', '.join(sorted(unknown))}")

        v = dict(overrides)
        v.setdefault("address", env.get("VAULT_ADDR"))
        if not v["address"]:
            raise ConfigError("No address is set")
        if "token" not in v:
            v["token"] = env.get("VAULT_TOKEN") or _read_token_file(home)
        if not v["token"]:
            raise ConfigError("No token is set")

        if "namespace" not in v and env.get("VAULT_NAMESPACE"):
            v["namespace"] = env["VAULT_NAMESPACE"]
        timeout = _number(env, "VAULT_TIMEOUT", float)
        for name, var in (("open_timeout", "VAULT_OPEN_TIMEOUT"), ("read_timeout", "VAULT_READ_TIMEOUT")):
            t = _number(env, var, float)
            if t is None:
                t = timeout
            if name not in v and t is not None:
                v[name] = t
        if "ssl_verify" not in v and env.get("VAULT_SSL_VERIFY") is not None:
            v["ssl_verify"] = env["VAULT_SSL_VERIFY"].strip().lower() in _TRUE
        if "ssl_cert" not in v and env.get("VAULT_SSL_CERT"):
            v["ssl_cert"] = env["VAULT_SSL_CERT"]
        for name, var in (("max_attempts", "VAULT_MAX_ATTEMPTS"),
                          ("retry_interval_ms", "VAULT_RETRY_INTERVAL_MS"),
                          ("metrics_port", "METRICS_PORT")):
            n = _number(env, var, int)
            if name not in v and n is not None:
                v[name] = n
        return cls(**v)

    def tls_policy(self) -> TlsPolicy:
        if not self.ssl_verify:
            return TlsPolicy.insecure()
        if self.ssl_cert:
            return TlsPolicy.from_pem_file(self.ssl_cert)
        return TlsPolicy.system()


def _read_token_file(home) -> str | None:
    path = Path(home) if home is not None else Path.home()
    try:
        return (path / ".vault-token").read_text(encoding="utf-8").strip() or None
    except FileNotFoundError:
        return None


def _number(env, var: str, kind):
    raw = env.get(var)
    if raw is None or raw.strip() == "":
        return None
    try:
        return kind(raw)
    except ValueError:
        jlog("warning", "config_value_ignored", variable=var, value=raw)
        return None
