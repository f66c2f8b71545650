"""TLS trust policy for the transport.

Resolution order: explicit PEM material, then the default trust store, then
(only when asked for) no verification at all.
"""

from __future__ import annotations

import atexit
import os
import tempfile
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources

from .errors import ConfigError
from .jsonlog import jlog

_PEM_MARKER = "-----BEGIN "


@dataclass(frozen=True)
class TlsPolicy:
    verify: bool = True
    ca_pem: str | None = None
    client_cert_pem: str | None = None
    client_key_pem: str | None = None

    def __post_init__(self):
        for name in ("ca_pem", "client_cert_pem", "client_key_pem"):
            pem = getattr(self, name)
            if pem is not None and _PEM_MARKER not in pem:
                raise ConfigError(f"{name} does not contain PEM data")
        if (self.client_cert_pem is None) != (self.client_key_pem is None):
            raise ConfigError("client certificate and key must be given together")

    @classmethod
    def system(cls) -> "TlsPolicy":
        return cls()

    @classmethod
    def insecure(cls) -> "TlsPolicy":
        jlog("warning", "tls_verification_disabled")
        return cls(verify=False)

    @classmethod
    def from_pem(cls, pem: str | bytes) -> "TlsPolicy":
        if isinstance(pem, bytes):
            pem = pem.decode("utf-8")
        return cls(ca_pem=pem)

    @classmethod
    def from_pem_file(cls, path: str | os.PathLike) -> "TlsPolicy":
        try:
            with open(path, "r", encoding="utf-8") as f:
                return cls.from_pem(f.read())
        except OSError as e:
            raise ConfigError(f"cannot read PEM file {path}: {e}") from e

    @classmethod
    def from_pem_resource(cls, package: str, name: str) -> "TlsPolicy":
        try:
            return cls.from_pem(resources.files(package).joinpath(name).read_text("utf-8"))
        except (OSError, ModuleNotFoundError) as e:
            raise ConfigError(f"cannot read PEM resource {package}/{name}: {e}") from e

    def with_client_cert(self, cert_pem: str, key_pem: str) -> "TlsPolicy":
        return TlsPolicy(self.verify, self.ca_pem, cert_pem, key_pem)

    def requests_kwargs(self) -> dict:
        """``verify``/``cert`` arguments for ``requests.request``."""
        kw: dict = {}
        if not self.verify:
            kw["verify"] = False
        elif self.ca_pem is not None:
            kw["verify"] = _pem_path(self.ca_pem)
        else:
            kw["verify"] = True
        if self.client_cert_pem is not None:
            kw["cert"] = (_pem_path(self.client_cert_pem), _pem_path(self.client_key_pem))
        return kw


# requests only takes trust material by path
@lru_cache(maxsize=None)
def _pem_path(pem: str) -> str:
    fd, path = tempfile.mkstemp(prefix="vaultcore-", suffix=".pem")
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(pem)
    atexit.register(_remove, path)
    return path


def _remove(path: str):
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
