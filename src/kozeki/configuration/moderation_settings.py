import re
from typing import Any, Dict

DEFAULT_DURATION_TOKEN = "10m"
# Exactly one unit letter; "30mm" is not a duration
DURATION_TOKEN_PATTERN = re.compile(r"^\d+[smhdw]$")
DEFAULT_REASON = "reason not provided"
DEFAULT_SUSPICIOUS_ACCOUNT_DAYS = 30
# Discord caps a single audit log request at 100 entries
MAX_AUDIT_LOG_LIMIT = 100


class ModerationSettings:
    """Helper exposing typed accessors for the ``moderation:`` config block.

    Like the other settings wrappers it only offers ``get``, ``as_dict`` and
    a few properties; missing or malformed values fall back to the defaults
    the bot has always used.
    """

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for `key` or `default` if missing."""
        return self.data.get(key, default)

    def as_dict(self) -> Dict[str, Any]:
        return self.data

    @property
    def default_duration(self) -> str:
        token = str(self.data.get("default_duration") or "").strip().lower()
        return token if DURATION_TOKEN_PATTERN.match(token) else DEFAULT_DURATION_TOKEN

    @property
    def default_reason(self) -> str:
        return str(self.data.get("default_reason") or DEFAULT_REASON)

    @property
    def suspicious_account_days(self) -> int:
        try:
            return int(self.data.get("suspicious_account_days", DEFAULT_SUSPICIOUS_ACCOUNT_DAYS))
        except (TypeError, ValueError):
            return DEFAULT_SUSPICIOUS_ACCOUNT_DAYS

    @property
    def audit_log_limit(self) -> int:
        try:
            limit = int(self.data.get("audit_log_limit", MAX_AUDIT_LOG_LIMIT))
        except (TypeError, ValueError):
            return MAX_AUDIT_LOG_LIMIT
        return max(1, min(limit, MAX_AUDIT_LOG_LIMIT))
