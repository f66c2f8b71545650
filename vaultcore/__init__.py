"""vaultcore: HTTP transport, retry executor and JSON document model for Vault."""

from .config import Config
from .errors import (
    ConfigError,
    ConnectError,
    ExhaustedRetries,
    FormatError,
    ParseError,
    TlsError,
    TransportTimeout,
    TypeMismatch,
    VaultError,
    VaultResponseError,
)
from .json_parser import parse
from .json_value import (
    FALSE,
    NULL,
    TRUE,
    JsonArray,
    JsonBoolean,
    JsonNull,
    JsonNumber,
    JsonObject,
    JsonString,
    JsonValue,
    value_of,
)
from .json_writer import COMPACT, Style, write
from .retry import Attempted, RetryPolicy, with_retries
from .tls import TlsPolicy
from .transport import Request, Response, execute
from .vault import VaultClient, VaultResponse

__all__ = [
    "Config",
    "VaultClient",
    "VaultResponse",
    "Request",
    "Response",
    "execute",
    "TlsPolicy",
    "RetryPolicy",
    "Attempted",
    "with_retries",
    "parse",
    "write",
    "Style",
    "COMPACT",
    "JsonValue",
    "JsonNull",
    "JsonBoolean",
    "JsonNumber",
    "JsonString",
    "JsonArray",
    "JsonObject",
    "NULL",
    "TRUE",
    "FALSE",
    "value_of",
    "VaultError",
    "ConnectError",
    "TransportTimeout",
    "TlsError",
    "ConfigError",
    "VaultResponseError",
    "ExhaustedRetries",
    "ParseError",
    "TypeMismatch",
    "FormatError",
]
