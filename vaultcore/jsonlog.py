import logging, json
from datetime import datetime, timezone

logger = logging.getLogger("vaultcore")
if not logger.handlers:
    logger.setLevel(logging.INFO)
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(_handler)

# поля с секретами в лог не попадают
_SECRET = ("token", "x-vault-token", "client_key_pem", "password", "secret_id")
REDACTED = "***"

def _redact(value):
    if isinstance(value, dict):
        return {k: REDACTED if str(k).lower() in _SECRET else _redact(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_redact(v) for v in value]
    return value

def jlog(level: str, msg: str, **fields):
    if not logger.isEnabledFor(logging.getLevelName(level.upper())):
        return
    rec = {"ts": datetime.now(timezone.utc).isoformat(), "level": level, "msg": msg, **_redact(fields)}
    getattr(logger, level)(json.dumps(rec, ensure_ascii=False, default=str))
