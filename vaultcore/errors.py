class VaultError(Exception):
    """Base error for everything that talks to Vault.

    ``status_code`` is 0 unless the error was derived from an HTTP response.
    ``attempt`` is filled in by the retry executor with the number of the
    attempt that produced this error.
    """

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.attempt: int | None = None


class ConnectError(VaultError):
    pass


class TransportTimeout(VaultError):
    pass


class TlsError(VaultError):
    pass


class ConfigError(VaultError):
    pass


class VaultResponseError(VaultError):
    def __init__(self, status_code: int, body: bytes = b""):
        self.body = body or b""
        text = self.body.decode("utf-8", errors="replace")
        super().__init__(
            f"Vault responded with HTTP status code: {status_code}\nResponse body: {text}",
            status_code,
        )


class ExhaustedRetries(VaultError):
    def __init__(self, cause: BaseException, attempts: int):
        super().__init__(f"gave up after {attempts} attempts: {cause}")
        self.cause = cause
        self.attempt = attempts


class ParseError(ValueError):
    def __init__(self, message: str, offset: int, line: int, column: int):
        super().__init__(f"{message} at {line}:{column}")
        self.message = message
        self.offset = offset
        self.line = line
        self.column = column


class TypeMismatch(TypeError):
    pass


class FormatError(ValueError):
    pass
